"""Tests for the centralized exception classes."""

from fee_commission_calc.utils.exceptions import (
    CalculationFailureError,
    CalculationStageError,
    ClassificationMismatchError,
    ErrorCode,
    ExtractionFailureError,
    FCCError,
    FileError,
    FileTooLargeError,
    UnsupportedFormatError,
    UnsupportedVariantError,
    ValidationError,
)


class TestErrorCode:
    """Tests for ErrorCode enumeration."""

    def test_error_codes_are_unique(self) -> None:
        """All error codes should have unique values."""
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_error_code_format(self) -> None:
        """Error codes should follow Exxxx format."""
        for code in ErrorCode:
            assert code.value.startswith("E")
            assert len(code.value) == 5
            assert code.value[1:].isdigit()

    def test_file_errors_start_with_e1(self) -> None:
        """File error codes should start with E1."""
        for code in (
            ErrorCode.FILE_TOO_LARGE,
            ErrorCode.UNSUPPORTED_FORMAT,
            ErrorCode.FILE_READ_ERROR,
        ):
            assert code.value.startswith("E1")

    def test_pipeline_errors_start_with_e4(self) -> None:
        """Calculation pipeline error codes should start with E4."""
        for code in (
            ErrorCode.CLASSIFICATION_MISMATCH,
            ErrorCode.EXTRACTION_FAILED,
            ErrorCode.CALCULATION_FAILED,
        ):
            assert code.value.startswith("E4")


class TestFCCError:
    """Tests for the base exception."""

    def test_defaults(self) -> None:
        error = FCCError("Something broke")
        assert error.message == "Something broke"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}
        assert error.get_http_status() == 500

    def test_str_includes_code(self) -> None:
        error = FCCError("Something broke", ErrorCode.CONFIGURATION_ERROR)
        assert str(error) == "[E9002] Something broke"

    def test_to_dict(self) -> None:
        error = FCCError("Broke", details={"key": "value"})
        assert error.to_dict() == {
            "error_code": "E9001",
            "message": "Broke",
            "details": {"key": "value"},
        }

    def test_to_dict_without_details(self) -> None:
        assert "details" not in FCCError("Broke").to_dict()


class TestFileErrors:
    """Tests for upload errors."""

    def test_file_error_includes_file_name(self) -> None:
        error = FileError("Cannot read", file_name="a.xlsx")
        assert error.details["file_name"] == "a.xlsx"
        assert error.http_status == 400

    def test_file_too_large(self) -> None:
        error = FileTooLargeError(file_size=2048, max_size=1024, file_name="a.xlsx")
        assert error.http_status == 413
        assert error.error_code == ErrorCode.FILE_TOO_LARGE
        assert error.details["file_size_bytes"] == 2048
        assert error.details["max_size_bytes"] == 1024
        assert "2048" in error.message

    def test_unsupported_format(self) -> None:
        error = UnsupportedFormatError("Only .xlsx", extension=".csv")
        assert error.http_status == 400
        assert error.error_code == ErrorCode.UNSUPPORTED_FORMAT
        assert error.details["extension"] == ".csv"
        assert isinstance(error, FileError)


class TestInputErrors:
    """Tests for input validation errors."""

    def test_validation_error(self) -> None:
        error = ValidationError("Missing", field="file", errors=["file is required"])
        assert error.http_status == 400
        assert error.details == {
            "field": "file",
            "validation_errors": ["file is required"],
        }

    def test_unsupported_variant_message(self) -> None:
        error = UnsupportedVariantError("EMI Biller")
        assert error.message == "Unsupported fee-commission type: EMI Biller"
        assert error.details == {"fee_comm_type": "EMI Biller"}

    def test_unsupported_variant_with_subtype(self) -> None:
        error = UnsupportedVariantError("Regular", "Fixed")
        assert error.message == "Unsupported fee-commission type: Regular (Fixed)"
        assert error.fee_comm_subtype == "Fixed"


class TestStageErrors:
    """Tests for calculation pipeline stage errors."""

    def test_mismatch(self) -> None:
        error = ClassificationMismatchError(
            "Choose Regular", declared_type="Drop Point", detected_structure="Regular"
        )
        assert isinstance(error, CalculationStageError)
        assert error.stage == "classification"
        assert error.http_status == 400
        assert error.details == {
            "stage": "classification",
            "declared_type": "Drop Point",
            "detected_structure": "Regular",
        }

    def test_extraction_failure(self) -> None:
        error = ExtractionFailureError("Cannot parse", file_name="a.xlsx")
        assert error.stage == "extraction"
        assert error.http_status == 422
        assert error.error_code == ErrorCode.EXTRACTION_FAILED

    def test_calculation_failure(self) -> None:
        error = CalculationFailureError("Broke", details={"last_stage": "extracted"})
        assert error.stage == "calculation"
        assert error.http_status == 500
        assert error.details["last_stage"] == "extracted"
