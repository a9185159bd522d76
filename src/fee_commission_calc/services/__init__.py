"""Services for classifying, extracting and calculating fee/commission schedules."""

from fee_commission_calc.services.calculation_pipeline import (
    CalculationOutcome,
    FeeCommissionCalculator,
    generate_tracking_id,
    resolve_variant,
)
from fee_commission_calc.services.cell_extractor import (
    CellExtractor,
    extract_biller_name,
)
from fee_commission_calc.services.commission_calculator import (
    FIXED_VALUE_MARKUP,
    CommissionCalculator,
)
from fee_commission_calc.services.structure_classifier import StructureClassifier
from fee_commission_calc.services.workbook_loader import (
    SpreadsheetHandle,
    WorkbookLoader,
)

__all__ = [
    "FIXED_VALUE_MARKUP",
    "CalculationOutcome",
    "CellExtractor",
    "CommissionCalculator",
    "FeeCommissionCalculator",
    "SpreadsheetHandle",
    "StructureClassifier",
    "WorkbookLoader",
    "extract_biller_name",
    "generate_tracking_id",
    "resolve_variant",
]
