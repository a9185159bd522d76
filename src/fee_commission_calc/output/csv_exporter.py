"""CSV export of fee/commission calculation results.

Regular results become one row per party and channel; Drop Point results one
row per slab and channel. Numbers are rendered as fixed-point text and
missing values as ``N/A``.
"""

import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pandas as pd

from fee_commission_calc.models import Channel, Party
from fee_commission_calc.schedule import CalculationResult
from fee_commission_calc.utils.numeric import OptionalFloat

NOT_AVAILABLE = "N/A"

REGULAR_COLUMNS: list[str] = [
    "Category",
    "Channel",
    "Fee Rate",
    "Sender Agent",
    "Parent Distributor",
    "Master Distributor",
    "TWTL/SP",
    "BPO/PP",
    "Adjustment",
]

DROP_POINT_COLUMNS: list[str] = [
    "Slab",
    "Channel",
    "Fee Rate",
    "Uddokta",
    "Distributor",
    "Master Distributor",
    "TWLT",
    "BPO",
    "Advance Commission",
]

# commission key -> (column, decimal places)
REGULAR_COMMISSION_COLUMNS: dict[str, tuple[str, int]] = {
    "sender_agent": ("Sender Agent", 9),
    "parent_distributor": ("Parent Distributor", 9),
    "master_distributor": ("Master Distributor", 9),
    "twtl_sp": ("TWTL/SP", 5),
    "bpo_pp": ("BPO/PP", 5),
    "adjustment": ("Adjustment", 9),
}

DROP_POINT_COMMISSION_COLUMNS: dict[str, tuple[str, int]] = {
    "uddokta": ("Uddokta", 9),
    "distributor": ("Distributor", 9),
    "master_distributor": ("Master Distributor", 9),
    "twlt": ("TWLT", 5),
    "bpo": ("BPO", 5),
    "advance_commission": ("Advance Commission", 9),
}

FEE_RATE_DECIMALS = 2

# Customer-initiated transactions never pay these parties
CUSTOMER_NOT_APPLICABLE: frozenset[str] = frozenset(
    {"sender_agent", "parent_distributor"}
)


def format_number(value: OptionalFloat, decimals: int) -> str:
    """Render ``value`` with ``decimals`` places, or ``N/A`` when missing."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.{decimals}f}"


def sanitize_biller_name(biller_name: str) -> str:
    """Replace every non-alphanumeric character with an underscore."""
    return re.sub(r"[^a-zA-Z0-9]", "_", biller_name)


@dataclass
class CsvExport:
    """A rendered CSV document and its download file name."""

    file_name: str
    content: str
    row_count: int

    @property
    def media_type(self) -> str:
        return "text/csv"


class CsvExporter:
    """Renders CalculationResult objects as CSV with pandas."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        """Initialize the exporter.

        Args:
            clock: Returns the current time in seconds; used for file names.
        """
        self._clock = clock or time.time

    def build_file_name(self, biller_name: str) -> str:
        """Download name ``Fee-Commission_Results_<biller>_<epoch ms>.csv``."""
        millis = int(self._clock() * 1000)
        return f"Fee-Commission_Results_{sanitize_biller_name(biller_name)}_{millis}.csv"

    def regular_rows(self, result: CalculationResult) -> list[dict[str, Any]]:
        """One row per party and channel, Uddokta first."""
        rows: list[dict[str, Any]] = []
        if result.regular is None:
            return rows
        for party in Party:
            channels = result.regular.get(party)
            if channels is None:
                continue
            for channel in Channel:
                channel_result = channels.get(channel)
                if channel_result is None:
                    continue
                row: dict[str, Any] = {
                    "Category": party.value.upper(),
                    "Channel": channel.value.upper(),
                    "Fee Rate": format_number(
                        channel_result.fee_rate, FEE_RATE_DECIMALS
                    ),
                }
                for key, (column, decimals) in REGULAR_COMMISSION_COLUMNS.items():
                    if party is Party.CUSTOMER and key in CUSTOMER_NOT_APPLICABLE:
                        row[column] = NOT_AVAILABLE
                    else:
                        row[column] = format_number(
                            channel_result.commissions.get(key), decimals
                        )
                rows.append(row)
        return rows

    def drop_point_rows(self, result: CalculationResult) -> list[dict[str, Any]]:
        """One row per slab and channel, in slab order."""
        rows: list[dict[str, Any]] = []
        for slab in result.slabs or ():
            for channel in Channel:
                channel_result = slab.get(channel)
                commissions = channel_result.commissions.to_dict()
                row: dict[str, Any] = {
                    "Slab": slab.tier,
                    "Channel": channel.value.upper(),
                    "Fee Rate": format_number(
                        channel_result.fee_rate, FEE_RATE_DECIMALS
                    ),
                }
                for key, (column, decimals) in DROP_POINT_COMMISSION_COLUMNS.items():
                    row[column] = format_number(commissions.get(key), decimals)
                rows.append(row)
        return rows

    def to_dataframe(self, result: CalculationResult) -> pd.DataFrame:
        """Build the export table for ``result``."""
        if result.is_drop_point:
            return pd.DataFrame(self.drop_point_rows(result), columns=DROP_POINT_COLUMNS)
        return pd.DataFrame(self.regular_rows(result), columns=REGULAR_COLUMNS)

    def export(self, result: CalculationResult) -> CsvExport:
        """Render ``result`` as a CSV document."""
        frame = self.to_dataframe(result)
        content = frame.to_csv(index=False, lineterminator="\n")
        return CsvExport(
            file_name=self.build_file_name(result.summary.biller_name),
            content=content,
            row_count=len(frame),
        )
