from __future__ import annotations

from collections.abc import Callable
from io import BytesIO
from typing import Any

import pytest
from openpyxl import Workbook

from fee_commission_calc.services.cell_map import DROP_POINT_TIERS

WorkbookFactory = Callable[..., bytes]

# Uddokta APP row matches the worked example used throughout the tests:
# adjustment = 1 - (0.1 + 0.05 + 0.3 + 0.05 + 0.05) = 0.45
REGULAR_CELLS: dict[str, Any] = {
    "B4": "0.0025",
    # Uddokta APP
    "E4": 0.002,
    "W4": 0.1,
    "AE4": 0.05,
    "AU4": 0.3,
    "BA4": 0.05,
    "BC4": 0.05,
    # Uddokta USSD
    "E6": 0.003,
    "W6": 0.2,
    "AE6": 0.1,
    "AU6": 0.2,
    "BA6": 0.1,
    "BC6": 0.1,
    # Customer APP, sender/parent left blank
    "E8": 0.01,
    "AU8": 0.4,
    "BA8": 0.1,
    "BC8": 0.05,
    # Customer USSD
    "E10": 0.015,
    "AU10": 0.25,
    "BA10": 0.15,
    "BC10": 0.1,
}

DROP_POINT_RATE_ROW: dict[str, float] = {
    "E": 0.01,
    "T": 0.15,
    "AU": 0.3,
    "BA": 0.1,
    "BC": 0.05,
    "BI": 0.02,
}

DROP_POINT_EXAMPLE_ROW: dict[str, float] = {
    "D": 1000.0,
    "W": 2.0,
    "AE": 1.0,
}


def build_workbook(
    cells: dict[str, Any],
    sheet_title: str = "Schedule",
    number_formats: dict[str, str] | None = None,
) -> bytes:
    """Create an .xlsx workbook in memory with ``cells`` on its first sheet."""
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_title
    for address, value in cells.items():
        worksheet[address] = value
    for address, number_format in (number_formats or {}).items():
        worksheet[address].number_format = number_format
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def drop_point_cells() -> dict[str, Any]:
    """Cells for a Drop Point schedule populating every slab on both channels.

    The first slab's APP example row carries a zero sender agent payout and a
    parent distributor payout of 10.
    """
    cells: dict[str, Any] = {"B4": "9,999.99"}
    for tier in DROP_POINT_TIERS:
        for rate_row in (tier.app_row, tier.ussd_row):
            for column, value in DROP_POINT_RATE_ROW.items():
                cells[f"{column}{rate_row}"] = value
            for column, value in DROP_POINT_EXAMPLE_ROW.items():
                cells[f"{column}{rate_row + 1}"] = value
    cells["W5"] = 0
    cells["AE5"] = 10
    return cells


@pytest.fixture
def workbook_factory() -> WorkbookFactory:
    """Factory turning a ``{address: value}`` mapping into workbook bytes."""
    return build_workbook


@pytest.fixture
def regular_cells() -> dict[str, Any]:
    return dict(REGULAR_CELLS)


@pytest.fixture
def regular_workbook(regular_cells: dict[str, Any]) -> bytes:
    """A complete Regular schedule workbook."""
    return build_workbook(regular_cells)


@pytest.fixture
def drop_point_workbook() -> bytes:
    """A complete Drop Point schedule workbook."""
    return build_workbook(drop_point_cells())


@pytest.fixture
def regular_file_name() -> str:
    return "Fee-Commission Scheme for Acme Power_v2.xlsx"


@pytest.fixture
def drop_point_file_name() -> str:
    return "Fee-Commission Scheme - Acme Gas - 2024.xlsx"
