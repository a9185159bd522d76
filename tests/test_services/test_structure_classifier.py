"""Tests for workbook structure classification."""

from unittest.mock import MagicMock

import pytest

from fee_commission_calc.models import FeeCommType, StructureKind
from fee_commission_calc.services.structure_classifier import (
    StructureClassifier,
    classify_anchor_text,
)
from fee_commission_calc.services.workbook_loader import (
    SpreadsheetHandle,
    WorkbookLoader,
)
from fee_commission_calc.utils.exceptions import (
    ClassificationMismatchError,
    ErrorCode,
)


class TestClassifyAnchorText:
    """Tests for classify_anchor_text."""

    @pytest.mark.parametrize("text", ["9,999.99", "1,000.00", "10,000.5"])
    def test_comma_and_dot_is_drop_point(self, text: str) -> None:
        assert classify_anchor_text(text) is StructureKind.DROP_POINT

    @pytest.mark.parametrize("text", ["0.0025", "1,000", "", "Biller"])
    def test_otherwise_regular(self, text: str) -> None:
        assert classify_anchor_text(text) is StructureKind.REGULAR


class TestStructureClassifier:
    """Tests for StructureClassifier.validate."""

    def test_regular_file_accepted_as_regular(self, regular_workbook: bytes) -> None:
        classifier = StructureClassifier()
        assert (
            classifier.validate(regular_workbook, FeeCommType.REGULAR)
            is StructureKind.REGULAR
        )

    def test_regular_file_rejected_as_drop_point(
        self, regular_workbook: bytes
    ) -> None:
        classifier = StructureClassifier()
        with pytest.raises(ClassificationMismatchError) as exc_info:
            classifier.validate(regular_workbook, FeeCommType.DROP_POINT)

        error = exc_info.value
        assert "Regular" in error.message
        assert error.error_code == ErrorCode.CLASSIFICATION_MISMATCH
        assert error.stage == "classification"
        assert error.details["detected_structure"] == "Regular"
        assert error.http_status == 400

    def test_drop_point_file_rejected_as_regular(
        self, drop_point_workbook: bytes
    ) -> None:
        classifier = StructureClassifier()
        with pytest.raises(ClassificationMismatchError) as exc_info:
            classifier.validate(drop_point_workbook, FeeCommType.REGULAR)
        assert "Drop Point" in exc_info.value.message

    def test_drop_point_file_accepted_as_drop_point(
        self, drop_point_workbook: bytes
    ) -> None:
        classifier = StructureClassifier()
        assert (
            classifier.validate(drop_point_workbook, FeeCommType.DROP_POINT)
            is StructureKind.DROP_POINT
        )

    @pytest.mark.parametrize(
        "declared", [FeeCommType.REGULAR, FeeCommType.DROP_POINT]
    )
    def test_unreadable_file_accepts_declared_type(
        self, declared: FeeCommType
    ) -> None:
        classifier = StructureClassifier()
        result = classifier.validate(b"not a workbook", declared)
        assert result.value == declared.value

    def test_loader_failure_accepts_declared_type(self) -> None:
        loader = MagicMock(spec=WorkbookLoader)
        loader.load_from_bytes.side_effect = OSError("disk gone")
        classifier = StructureClassifier(loader=loader)

        result = classifier.validate(b"anything", FeeCommType.DROP_POINT)

        assert result is StructureKind.DROP_POINT

    def test_numeric_anchor_is_regular(self, workbook_factory) -> None:
        content = workbook_factory({"B4": 9999.99})
        assert StructureClassifier().detect(content) is StructureKind.REGULAR

    def test_number_formatted_with_grouping_is_drop_point(
        self, workbook_factory
    ) -> None:
        content = workbook_factory({"B4": 9999.99}, number_formats={"B4": "#,##0.00"})
        classifier = StructureClassifier()

        assert classifier.detect(content) is StructureKind.DROP_POINT
        assert (
            classifier.validate(content, FeeCommType.DROP_POINT)
            is StructureKind.DROP_POINT
        )


class TestValidateHandle:
    """Tests for StructureClassifier.validate_handle."""

    def test_loaded_sheet_is_classified(self, drop_point_workbook: bytes) -> None:
        handle = WorkbookLoader().load_from_bytes(drop_point_workbook)
        result = StructureClassifier().validate_handle(
            handle, FeeCommType.DROP_POINT
        )
        assert result is StructureKind.DROP_POINT
        assert handle.cells_read == 1

    def test_mismatch_raises(self, regular_workbook: bytes) -> None:
        handle = WorkbookLoader().load_from_bytes(regular_workbook)
        with pytest.raises(ClassificationMismatchError):
            StructureClassifier().validate_handle(handle, FeeCommType.DROP_POINT)

    def test_unreadable_anchor_accepts_declared_type(self) -> None:
        handle = MagicMock(spec=SpreadsheetHandle)
        handle.file_name = "broken.xlsx"
        handle.read_text.side_effect = KeyError("B4")

        result = StructureClassifier().validate_handle(handle, FeeCommType.REGULAR)

        assert result is StructureKind.REGULAR
