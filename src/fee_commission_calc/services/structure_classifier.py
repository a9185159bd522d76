"""Structure classification of fee/commission schedule workbooks.

The anchor cell ``B4`` holds a plain rate on Regular schedules and a
formatted slab amount (for example ``"9,999.99"``) on Drop Point schedules.
The classifier compares that layout with the type declared by the uploader.
"""

from fee_commission_calc.models import FeeCommType, StructureKind
from fee_commission_calc.services.cell_map import ANCHOR_CELL
from fee_commission_calc.services.workbook_loader import (
    SpreadsheetHandle,
    WorkbookLoader,
)
from fee_commission_calc.utils.exceptions import ClassificationMismatchError
from fee_commission_calc.utils.logging import get_logger

logger = get_logger(__name__)

MISMATCH_MESSAGES: dict[FeeCommType, str] = {
    FeeCommType.REGULAR: (
        "The uploaded file has a Drop Point structure. "
        "Please select 'Drop Point' as the fee-commission type."
    ),
    FeeCommType.DROP_POINT: (
        "The uploaded file has a Regular structure. "
        "Please select 'Regular' as the fee-commission type."
    ),
}


def classify_anchor_text(text: str) -> StructureKind:
    """Classify a layout from the displayed text of its anchor cell.

    Drop Point slab amounts are shown grouped (``"9,999.99"``), whether the
    cell stores text or a number formatted as ``#,##0.00``.
    """
    if "," in text and "." in text:
        return StructureKind.DROP_POINT
    return StructureKind.REGULAR


class StructureClassifier:
    """Validates a declared schedule type against the workbook layout."""

    def __init__(self, loader: WorkbookLoader | None = None) -> None:
        self._loader = loader or WorkbookLoader()

    def classify(self, handle: SpreadsheetHandle) -> StructureKind:
        """Detect the layout of a loaded worksheet from its anchor cell."""
        anchor_text = handle.read_text(ANCHOR_CELL)
        structure = classify_anchor_text(anchor_text)
        logger.debug(
            "Anchor cell classified",
            cell=ANCHOR_CELL.address,
            anchor_text=anchor_text,
            structure=structure.value,
        )
        return structure

    def detect(self, content: bytes, file_name: str | None = None) -> StructureKind:
        """Detect the layout of workbook bytes from its anchor cell.

        Raises:
            ExtractionFailureError: If the workbook cannot be loaded.
        """
        return self.classify(self._loader.load_from_bytes(content, file_name=file_name))

    def validate(
        self,
        content: bytes,
        declared_type: FeeCommType,
        file_name: str | None = None,
    ) -> StructureKind:
        """Check that the workbook bytes match ``declared_type``.

        A workbook that cannot be loaded is accepted as the declared type.
        """
        try:
            handle = self._loader.load_from_bytes(content, file_name=file_name)
        except Exception as e:
            logger.warning(
                "Could not load workbook; accepting declared type",
                declared_type=declared_type.value,
                file_name=file_name,
                error=str(e),
            )
            return StructureKind(declared_type.value)
        return self.validate_handle(handle, declared_type)

    def validate_handle(
        self,
        handle: SpreadsheetHandle,
        declared_type: FeeCommType,
    ) -> StructureKind:
        """Check that a loaded worksheet's layout matches ``declared_type``.

        If the anchor cell cannot be read the declared type is accepted, so a
        malformed but otherwise usable file is never rejected here.

        Returns:
            The detected structure, or the structure implied by the declared
            type when detection was not possible.

        Raises:
            ClassificationMismatchError: If the layout contradicts the
                declared type.
        """
        declared_structure = StructureKind(declared_type.value)
        try:
            detected = self.classify(handle)
        except Exception as e:
            logger.warning(
                "Could not read anchor cell; accepting declared type",
                declared_type=declared_type.value,
                file_name=handle.file_name,
                error=str(e),
            )
            return declared_structure

        if detected is not declared_structure:
            logger.warning(
                "Declared type does not match file structure",
                declared_type=declared_type.value,
                detected_structure=detected.value,
                file_name=handle.file_name,
            )
            raise ClassificationMismatchError(
                MISMATCH_MESSAGES[declared_type],
                declared_type=declared_type.value,
                detected_structure=detected.value,
            )

        logger.info(
            "File structure matches declared type",
            declared_type=declared_type.value,
        )
        return detected
