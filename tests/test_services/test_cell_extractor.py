"""Tests for schedule extraction and biller name derivation."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from fee_commission_calc.models import Channel, Party
from fee_commission_calc.schedule import CellCoordinate
from fee_commission_calc.services.cell_extractor import (
    CellExtractor,
    extract_biller_name,
)
from fee_commission_calc.services.workbook_loader import (
    SpreadsheetHandle,
    WorkbookLoader,
)


def load(content: bytes) -> SpreadsheetHandle:
    return WorkbookLoader().load_from_bytes(content, file_name="test.xlsx")


class TestExtractBillerName:
    """Tests for extract_biller_name."""

    @pytest.mark.parametrize(
        ("file_name", "expected"),
        [
            ("Fee-Commission Scheme for Acme Power_v2.xlsx", "Acme Power"),
            ("Fee-Commission Scheme for Acme Power.xlsx", "Acme Power"),
            ("Fee-Commission Scheme - Acme Gas - 2024.xlsx", "Acme Gas"),
            ("Fee-Commission Scheme - Acme Gas.XLSX", "Acme Gas"),
            ("rates.xlsx", "rates"),
            ("uploads/Fee-Commission Scheme for Desco_1.xlsx", "Desco"),
        ],
    )
    def test_patterns(self, file_name: str, expected: str) -> None:
        assert extract_biller_name(file_name) == expected

    def test_empty_name(self) -> None:
        assert extract_biller_name("") == ""


class TestReadNumber:
    """Tests for per-cell reads."""

    def test_unreadable_cell_is_none(self) -> None:
        handle = MagicMock(spec=SpreadsheetHandle)
        handle.read.side_effect = RuntimeError("boom")
        assert CellExtractor().read_number(handle, CellCoordinate("E", 4)) is None

    def test_text_cell_is_parsed(self, workbook_factory) -> None:
        handle = load(workbook_factory({"E4": "1,250.50"}))
        assert CellExtractor().read_number(handle, CellCoordinate("E", 4)) == 1250.5

    def test_non_numeric_text_is_none(self, workbook_factory) -> None:
        handle = load(workbook_factory({"E4": "n/a"}))
        assert CellExtractor().read_number(handle, CellCoordinate("E", 4)) is None

    def test_zero_is_kept(self, workbook_factory) -> None:
        handle = load(workbook_factory({"E4": 0}))
        assert CellExtractor().read_number(handle, CellCoordinate("E", 4)) == 0.0


class TestExtractRegular:
    """Tests for Regular schedule extraction."""

    def test_uddokta_app_values(self, regular_workbook: bytes) -> None:
        schedule = CellExtractor().extract_regular(load(regular_workbook), "Acme")
        rates = schedule.get(Party.UDDOKTA, Channel.APP)

        assert schedule.biller_name == "Acme"
        assert rates.fee_rate == 0.002
        assert rates.sender_agent == 0.1
        assert rates.parent_distributor == 0.05
        assert rates.master_distributor == 0.3
        assert rates.twtl_sp == 0.05
        assert rates.bpo_pp == 0.05

    def test_customer_sender_and_parent_default_to_zero(
        self, regular_workbook: bytes
    ) -> None:
        schedule = CellExtractor().extract_regular(load(regular_workbook), "Acme")
        for channel in Channel:
            rates = schedule.get(Party.CUSTOMER, channel)
            assert rates.sender_agent == 0.0
            assert rates.parent_distributor == 0.0

    def test_missing_uddokta_value_stays_none(
        self, workbook_factory, regular_cells: dict[str, Any]
    ) -> None:
        del regular_cells["AU4"]
        del regular_cells["W6"]
        schedule = CellExtractor().extract_regular(
            load(workbook_factory(regular_cells)), "Acme"
        )

        assert schedule.get(Party.UDDOKTA, Channel.APP).master_distributor is None
        assert schedule.get(Party.UDDOKTA, Channel.USSD).sender_agent is None

    def test_formula_without_cached_result_is_none(
        self, workbook_factory, regular_cells: dict[str, Any]
    ) -> None:
        """openpyxl saves formulas without a computed value."""
        regular_cells["AU4"] = "=0.1+0.2"
        schedule = CellExtractor().extract_regular(
            load(workbook_factory(regular_cells)), "Acme"
        )
        raw = CellExtractor.regular_raw_data(schedule)

        assert raw["uddokta"]["app"]["master_distributor"] is None
        assert raw["uddokta"]["app"]["sender_agent"] == 0.1
        assert raw["uddokta"]["ussd"]["master_distributor"] == 0.2

    def test_drop_point_fields_not_read(self, regular_workbook: bytes) -> None:
        handle = load(regular_workbook)
        schedule = CellExtractor().extract_regular(handle, "Acme")

        assert schedule.get(Party.UDDOKTA, Channel.APP).vat_rate is None
        assert handle.cells_read == 4 * 6

    def test_raw_data(self, regular_workbook: bytes) -> None:
        schedule = CellExtractor().extract_regular(load(regular_workbook), "Acme")
        raw = CellExtractor.regular_raw_data(schedule)

        assert set(raw) == {"uddokta", "customer"}
        assert raw["uddokta"]["app"]["master_distributor"] == 0.3
        assert "vat_rate" not in raw["uddokta"]["app"]


class TestExtractDropPoint:
    """Tests for Drop Point schedule extraction."""

    def test_all_tiers_extracted(self, drop_point_workbook: bytes) -> None:
        schedule = CellExtractor().extract_drop_point(
            load(drop_point_workbook), "Acme"
        )
        assert len(schedule.tiers) == 8
        assert schedule.tiers[0].tier.label == "0-10000"
        assert schedule.tiers[-1].tier.base_row == 32

    def test_channel_values(self, drop_point_workbook: bytes) -> None:
        schedule = CellExtractor().extract_drop_point(
            load(drop_point_workbook), "Acme"
        )
        first = schedule.tiers[0]

        assert first.app.sender_agent_fixed == 0.0
        assert first.app.parent_distributor_fixed == 10.0
        assert first.ussd.sender_agent_fixed == 2.0
        assert first.ussd.parent_distributor_fixed == 1.0
        assert first.app.fee_rate == 0.01
        assert first.app.vat_rate == 0.15
        assert first.app.example_amount == 1000.0
        assert first.ussd.advance_commission == 0.02

    def test_blank_cells_are_none(self, workbook_factory) -> None:
        schedule = CellExtractor().extract_drop_point(
            load(workbook_factory({"B4": "9,999.99", "E4": 0.01})), "Acme"
        )
        first = schedule.tiers[0]
        assert first.app.fee_rate == 0.01
        assert first.app.vat_rate is None
        assert first.ussd.fee_rate is None

    def test_raw_data(self, drop_point_workbook: bytes) -> None:
        schedule = CellExtractor().extract_drop_point(
            load(drop_point_workbook), "Acme"
        )
        raw = CellExtractor.drop_point_raw_data(schedule)

        assert len(raw["slabs"]) == 8
        assert raw["slabs"][0]["tier"] == "0-10000"
        assert raw["slabs"][0]["app"]["parent_distributor_fixed"] == 10.0
