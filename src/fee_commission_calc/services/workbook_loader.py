"""Load uploaded schedule workbooks with openpyxl."""

from __future__ import annotations

import re
from io import BytesIO
from typing import Any

from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from fee_commission_calc.schedule import CellCoordinate
from fee_commission_calc.utils.exceptions import ExtractionFailureError
from fee_commission_calc.utils.logging import get_logger

logger = get_logger(__name__)

DECIMAL_PLACES_PATTERN = re.compile(r"\.(0+)")
FORMAT_LITERAL_PATTERN = re.compile(r'\[[^\]]*\]|"[^"]*"')


def render_number(value: int | float, number_format: str | None) -> str:
    """Render a numeric cell the way a thousands-grouped format displays it.

    Only fixed-point formats such as ``#,##0.00`` are honoured. General,
    percentage, date and scientific formats fall back to ``str(value)``.
    """
    section = FORMAT_LITERAL_PATTERN.sub(
        "", (number_format or "General").split(";")[0]
    )
    if "," not in section or any(token in section for token in "%EeyYmdhs@"):
        return str(value)
    match = DECIMAL_PLACES_PATTERN.search(section)
    decimals = len(match.group(1)) if match else 0
    return f"{value:,.{decimals}f}"


class SpreadsheetHandle:
    """Read-only view of the first worksheet of an uploaded workbook.

    Values are read from openpyxl's computed-value view, so formula cells
    return their cached result, or ``None`` when the workbook was saved
    without one.
    """

    def __init__(self, worksheet: Worksheet, file_name: str | None = None) -> None:
        self._worksheet = worksheet
        self.file_name = file_name
        self.cells_read = 0

    @property
    def sheet_name(self) -> str:
        return self._worksheet.title

    def read(self, coordinate: CellCoordinate) -> Any:
        """Return the resolved value at ``coordinate``."""
        self.cells_read += 1
        return self._worksheet[coordinate.address].value

    def read_text(self, coordinate: CellCoordinate) -> str:
        """Return the value at ``coordinate`` as displayed (blank cells give "").

        Numbers are rendered through the cell's number format, so ``9999.99``
        formatted as ``#,##0.00`` reads as ``"9,999.99"``.
        """
        self.cells_read += 1
        cell = self._worksheet[coordinate.address]
        value = cell.value
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return render_number(value, cell.number_format)
        return str(value)


class WorkbookLoader:
    """Decode uploaded workbook bytes into a SpreadsheetHandle."""

    def load_from_bytes(
        self, content: bytes, file_name: str | None = None
    ) -> SpreadsheetHandle:
        """Load the first worksheet of an ``.xlsx`` workbook.

        Args:
            content: Raw upload bytes.
            file_name: Original file name, used for logging and errors.

        Returns:
            SpreadsheetHandle over the first worksheet.

        Raises:
            ExtractionFailureError: If the bytes are not a readable workbook.
        """
        if not content:
            raise ExtractionFailureError(
                "Uploaded file is empty. Please upload a fee-commission Excel file.",
                file_name=file_name,
            )

        try:
            workbook = load_workbook(
                filename=BytesIO(content), data_only=True, read_only=False
            )
            worksheet = workbook.worksheets[0]
        except Exception as e:
            logger.error(
                "Workbook could not be decoded",
                file_name=file_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ExtractionFailureError(
                "Failed to parse Excel file. Please upload a valid .xlsx "
                "fee-commission schedule.",
                file_name=file_name,
            ) from e

        logger.debug(
            "Workbook loaded",
            file_name=file_name,
            sheet_name=worksheet.title,
            row_count=worksheet.max_row,
            column_count=worksheet.max_column,
        )
        return SpreadsheetHandle(worksheet, file_name=file_name)
