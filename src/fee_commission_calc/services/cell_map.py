"""Declarative worksheet layout of fee/commission schedule workbooks.

Every value the calculator needs lives at a fixed address on the first
worksheet. The addresses are kept here as lookup tables keyed by
``(field, party, channel)`` for Regular schedules and
``(field, tier, channel)`` for Drop Point schedules so that the layout can be
checked independently of the extraction code.
"""

from enum import Enum

from fee_commission_calc.models import Channel, Party
from fee_commission_calc.schedule import CellCoordinate, DropPointTier

__all__ = [
    "ANCHOR_CELL",
    "CUSTOMER_ZERO_DEFAULT_FIELDS",
    "DROP_POINT_CELL_MAP",
    "DROP_POINT_COLUMNS",
    "DROP_POINT_FIELDS",
    "DROP_POINT_TIERS",
    "REGULAR_CELL_MAP",
    "REGULAR_COLUMNS",
    "REGULAR_FIELDS",
    "REGULAR_ROWS",
    "RateField",
    "drop_point_cell",
    "regular_cell",
]


class RateField(str, Enum):
    """Schedule fields; values match ``RawPartyRates`` attribute names."""

    FEE_RATE = "fee_rate"
    SENDER_AGENT = "sender_agent"
    PARENT_DISTRIBUTOR = "parent_distributor"
    MASTER_DISTRIBUTOR = "master_distributor"
    TWTL_SP = "twtl_sp"
    BPO_PP = "bpo_pp"
    SENDER_AGENT_FIXED = "sender_agent_fixed"
    PARENT_DISTRIBUTOR_FIXED = "parent_distributor_fixed"
    ADVANCE_COMMISSION = "advance_commission"
    VAT_RATE = "vat_rate"
    EXAMPLE_AMOUNT = "example_amount"


# Cell whose text tells Regular and Drop Point layouts apart
ANCHOR_CELL = CellCoordinate("B", 4)

# =============================================================================
# Regular layout
# =============================================================================

REGULAR_ROWS: dict[tuple[Party, Channel], int] = {
    (Party.UDDOKTA, Channel.APP): 4,
    (Party.UDDOKTA, Channel.USSD): 6,
    (Party.CUSTOMER, Channel.APP): 8,
    (Party.CUSTOMER, Channel.USSD): 10,
}

REGULAR_COLUMNS: dict[RateField, str] = {
    RateField.FEE_RATE: "E",
    RateField.SENDER_AGENT: "W",
    RateField.PARENT_DISTRIBUTOR: "AE",
    RateField.MASTER_DISTRIBUTOR: "AU",
    RateField.TWTL_SP: "BA",
    RateField.BPO_PP: "BC",
}

REGULAR_FIELDS: tuple[RateField, ...] = tuple(REGULAR_COLUMNS)

# Customer-initiated transactions never pay these parties, so blanks mean 0
CUSTOMER_ZERO_DEFAULT_FIELDS: frozenset[RateField] = frozenset(
    {RateField.SENDER_AGENT, RateField.PARENT_DISTRIBUTOR}
)


def regular_cell(field: RateField, party: Party, channel: Channel) -> CellCoordinate:
    """Return the address of ``field`` for ``party`` and ``channel``.

    Raises:
        KeyError: If ``field`` is not part of the Regular layout.
    """
    return CellCoordinate(REGULAR_COLUMNS[field], REGULAR_ROWS[(party, channel)])


REGULAR_CELL_MAP: dict[tuple[RateField, Party, Channel], CellCoordinate] = {
    (field, party, channel): regular_cell(field, party, channel)
    for (party, channel) in REGULAR_ROWS
    for field in REGULAR_FIELDS
}

# =============================================================================
# Drop Point layout
# =============================================================================

DROP_POINT_TIERS: tuple[DropPointTier, ...] = (
    DropPointTier("0-10000", 4),
    DropPointTier("10000-20000", 8),
    DropPointTier("20000-50000", 12),
    DropPointTier("50000-100001", 16),
    DropPointTier("100001-200001", 20),
    DropPointTier("200001-300001", 24),
    DropPointTier("300001-400001", 28),
    DropPointTier("400001-Rest", 32),
)

# field -> (column, read from the example row instead of the rate row)
DROP_POINT_COLUMNS: dict[RateField, tuple[str, bool]] = {
    RateField.FEE_RATE: ("E", False),
    RateField.SENDER_AGENT_FIXED: ("W", True),
    RateField.PARENT_DISTRIBUTOR_FIXED: ("AE", True),
    RateField.MASTER_DISTRIBUTOR: ("AU", False),
    RateField.TWTL_SP: ("BA", False),
    RateField.BPO_PP: ("BC", False),
    RateField.ADVANCE_COMMISSION: ("BI", False),
    RateField.VAT_RATE: ("T", False),
    RateField.EXAMPLE_AMOUNT: ("D", True),
}

DROP_POINT_FIELDS: tuple[RateField, ...] = tuple(DROP_POINT_COLUMNS)


def drop_point_cell(
    field: RateField, tier: DropPointTier, channel: Channel
) -> CellCoordinate:
    """Return the address of ``field`` within ``tier`` for ``channel``.

    Raises:
        KeyError: If ``field`` is not part of the Drop Point layout.
    """
    column, on_example_row = DROP_POINT_COLUMNS[field]
    row = tier.example_row(channel) if on_example_row else tier.rate_row(channel)
    return CellCoordinate(column, row)


DROP_POINT_CELL_MAP: dict[tuple[RateField, str, Channel], CellCoordinate] = {
    (field, tier.label, channel): drop_point_cell(field, tier, channel)
    for tier in DROP_POINT_TIERS
    for channel in Channel
    for field in DROP_POINT_FIELDS
}
