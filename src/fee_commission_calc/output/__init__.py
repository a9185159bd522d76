"""Output generation module for calculation results.

This module renders calculation outcomes as API payloads, activity summary
lines and CSV downloads.
"""

from fee_commission_calc.output.csv_exporter import (
    CsvExport,
    CsvExporter,
    format_number,
    sanitize_biller_name,
)
from fee_commission_calc.output.output_service import (
    CalculationOutput,
    OutputService,
    build_summary_line,
)

__all__ = [
    "CalculationOutput",
    "CsvExport",
    "CsvExporter",
    "OutputService",
    "build_summary_line",
    "format_number",
    "sanitize_biller_name",
]
