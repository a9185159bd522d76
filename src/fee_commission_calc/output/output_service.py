"""Output service for fee/commission calculation results.

This module turns a pipeline outcome into the shapes its consumers need:
the JSON API payload, the one-line summary used for activity logs and
notifications, and the CSV download.
"""

import logging
from dataclasses import dataclass
from typing import Any

from fee_commission_calc.output.csv_exporter import CsvExport, CsvExporter
from fee_commission_calc.services.calculation_pipeline import CalculationOutcome

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Fee-Commission calculation completed successfully"


def build_summary_line(biller_name: str, fee_comm_type: str) -> str:
    """One-line description of a calculation for activity logs."""
    return f"Calculated fee-commission for {biller_name} ({fee_comm_type})"


@dataclass
class CalculationOutput:
    """A calculation outcome with its rendered summary line."""

    outcome: CalculationOutcome
    """Pipeline outcome being reported."""

    summary_line: str
    """Human-readable one-line summary."""

    @property
    def tracking_id(self) -> str:
        return self.outcome.calculation_result.summary.tracking_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation.

        Returns:
            The calculation result with the summary line attached.
        """
        data = self.outcome.calculation_result.to_dict()
        data["summary"]["description"] = self.summary_line
        return data

    def to_api_response(self) -> dict[str, Any]:
        """Convert to API response format.

        Returns:
            Dictionary matching CalculationResponse.
        """
        return {
            "success": True,
            "message": SUCCESS_MESSAGE,
            "tracking_id": self.tracking_id,
            "biller_name": self.outcome.biller_name,
            "data": self.to_dict(),
        }


class OutputService:
    """Service for rendering calculation outcomes."""

    def __init__(self, csv_exporter: CsvExporter | None = None) -> None:
        """Initialize the output service.

        Args:
            csv_exporter: Exporter for CSV downloads.
        """
        self.csv_exporter = csv_exporter or CsvExporter()

    def generate_output(self, outcome: CalculationOutcome) -> CalculationOutput:
        """Attach the summary line to ``outcome``."""
        summary = outcome.calculation_result.summary
        summary_line = build_summary_line(
            outcome.biller_name, summary.fee_comm_type.value
        )
        if outcome.calculation_result.warnings:
            logger.info(
                f"{summary_line} with "
                f"{len(outcome.calculation_result.warnings)} warning(s)"
            )
        return CalculationOutput(outcome=outcome, summary_line=summary_line)

    def format_for_api(self, output: CalculationOutput) -> dict[str, Any]:
        """Format output for API response."""
        return output.to_api_response()

    def export_csv(self, outcome: CalculationOutcome) -> CsvExport:
        """Render ``outcome`` as a CSV download."""
        export = self.csv_exporter.export(outcome.calculation_result)
        logger.info(
            f"CSV export generated: file_name={export.file_name}, "
            f"rows={export.row_count}"
        )
        return export
