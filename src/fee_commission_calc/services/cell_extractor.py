"""Extraction of raw rates from fee/commission schedule worksheets."""

from __future__ import annotations

from pathlib import PurePath
from typing import Any

from fee_commission_calc.models import Channel, Party
from fee_commission_calc.schedule import (
    CellCoordinate,
    DropPointSchedule,
    DropPointTierRates,
    RawPartyRates,
    RegularSchedule,
)
from fee_commission_calc.services.cell_map import (
    CUSTOMER_ZERO_DEFAULT_FIELDS,
    DROP_POINT_FIELDS,
    DROP_POINT_TIERS,
    REGULAR_FIELDS,
    REGULAR_ROWS,
    drop_point_cell,
    regular_cell,
)
from fee_commission_calc.services.workbook_loader import SpreadsheetHandle
from fee_commission_calc.utils.logging import get_logger
from fee_commission_calc.utils.numeric import OptionalFloat, to_optional_float

logger = get_logger(__name__)

# (prefix, delimiter that ends the biller name)
BILLER_NAME_PATTERNS: tuple[tuple[str, str], ...] = (
    ("Fee-Commission Scheme for ", "_"),
    ("Fee-Commission Scheme - ", " - "),
)


def extract_biller_name(file_name: str) -> str:
    """Derive the biller name from an uploaded schedule's file name.

    ``"Fee-Commission Scheme for Acme Power_v2.xlsx"`` gives ``"Acme Power"``
    and ``"Fee-Commission Scheme - Acme Gas - 2024.xlsx"`` gives
    ``"Acme Gas"``. Any other name is returned without its extension.
    """
    stem = PurePath(file_name).name if file_name else ""
    if stem.lower().endswith(".xlsx"):
        stem = stem[: -len(".xlsx")]
    for prefix, delimiter in BILLER_NAME_PATTERNS:
        if prefix in stem:
            remainder = stem.replace(prefix, "", 1)
            return remainder.split(delimiter, 1)[0].strip()
    return stem


class CellExtractor:
    """Reads schedule values from a SpreadsheetHandle.

    A cell that cannot be read or parsed yields ``None`` for its field;
    extraction always continues with the remaining cells.
    """

    def read_value(self, handle: SpreadsheetHandle, coordinate: CellCoordinate) -> Any:
        """Read the raw value at ``coordinate``, or ``None`` on failure."""
        try:
            return handle.read(coordinate)
        except Exception as e:
            logger.warning(
                "Failed to read cell value",
                cell=coordinate.address,
                error=str(e),
            )
            return None

    def read_number(
        self, handle: SpreadsheetHandle, coordinate: CellCoordinate
    ) -> OptionalFloat:
        """Read ``coordinate`` as ``float | None``."""
        raw = self.read_value(handle, coordinate)
        number = to_optional_float(raw)
        if raw is not None and number is None:
            logger.warning(
                "Cell value is not numeric",
                cell=coordinate.address,
                value=raw,
            )
        return number

    # ------------------------------------------------------------------ #
    # Regular schedules
    # ------------------------------------------------------------------ #

    def extract_regular(
        self, handle: SpreadsheetHandle, biller_name: str
    ) -> RegularSchedule:
        """Extract rates for both parties and channels of a Regular schedule."""
        rates: dict[Party, dict[Channel, RawPartyRates]] = {}
        for party, channel in REGULAR_ROWS:
            values: dict[str, OptionalFloat] = {}
            for field in REGULAR_FIELDS:
                value = self.read_number(handle, regular_cell(field, party, channel))
                if (
                    value is None
                    and party is Party.CUSTOMER
                    and field in CUSTOMER_ZERO_DEFAULT_FIELDS
                ):
                    value = 0.0
                values[field.value] = value
            rates.setdefault(party, {})[channel] = RawPartyRates(**values)

        logger.debug(
            "Regular schedule extracted",
            biller_name=biller_name,
            cells_read=handle.cells_read,
        )
        return RegularSchedule(biller_name=biller_name, rates=rates)

    # ------------------------------------------------------------------ #
    # Drop Point schedules
    # ------------------------------------------------------------------ #

    def extract_drop_point(
        self, handle: SpreadsheetHandle, biller_name: str
    ) -> DropPointSchedule:
        """Extract every slab of a Drop Point schedule on both channels."""
        tiers: list[DropPointTierRates] = []
        for tier in DROP_POINT_TIERS:
            per_channel: dict[Channel, RawPartyRates] = {}
            for channel in Channel:
                values = {
                    field.value: self.read_number(
                        handle, drop_point_cell(field, tier, channel)
                    )
                    for field in DROP_POINT_FIELDS
                }
                per_channel[channel] = RawPartyRates(**values)
            tiers.append(
                DropPointTierRates(
                    tier=tier,
                    app=per_channel[Channel.APP],
                    ussd=per_channel[Channel.USSD],
                )
            )

        logger.debug(
            "Drop Point schedule extracted",
            biller_name=biller_name,
            tiers=len(tiers),
            cells_read=handle.cells_read,
        )
        return DropPointSchedule(biller_name=biller_name, tiers=tuple(tiers))

    # ------------------------------------------------------------------ #
    # Raw data for audit
    # ------------------------------------------------------------------ #

    @staticmethod
    def regular_raw_data(schedule: RegularSchedule) -> dict[str, Any]:
        """Unprocessed Regular values keyed by party, channel and field."""
        include = [field.value for field in REGULAR_FIELDS]
        return {
            party.value: {
                channel.value: rates.to_dict(include)
                for channel, rates in channels.items()
            }
            for party, channels in schedule.rates.items()
        }

    @staticmethod
    def drop_point_raw_data(schedule: DropPointSchedule) -> dict[str, Any]:
        """Unprocessed Drop Point values, one entry per slab."""
        include = [field.value for field in DROP_POINT_FIELDS]
        return {
            "slabs": [
                {
                    "tier": tier_rates.tier.label,
                    "base_row": tier_rates.tier.base_row,
                    "app": tier_rates.app.to_dict(include),
                    "ussd": tier_rates.ussd.to_dict(include),
                }
                for tier_rates in schedule.tiers
            ]
        }


__all__ = [
    "BILLER_NAME_PATTERNS",
    "CellExtractor",
    "extract_biller_name",
]
