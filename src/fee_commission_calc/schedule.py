"""Dataclasses representing extracted fee/commission schedules and results."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from fee_commission_calc.models import Channel, FeeCommType, Party, StructureKind
from fee_commission_calc.utils.numeric import OptionalFloat


@dataclass(frozen=True)
class CellCoordinate:
    """A worksheet address such as ``E4``."""

    column: str
    row: int

    def __post_init__(self) -> None:
        if not self.column.isalpha() or not self.column.isupper():
            raise ValueError(f"Invalid column letters: {self.column!r}")
        if self.row < 1:
            raise ValueError(f"Row must be positive, got {self.row}")

    @property
    def address(self) -> str:
        return f"{self.column}{self.row}"

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class RawPartyRates:
    """Unprocessed values read for one party and channel.

    Regular schedules populate the rate fields; Drop Point schedules also
    populate the fixed amounts, advance commission, VAT and example amount.
    ``None`` means the source cell was blank or unreadable.
    """

    fee_rate: OptionalFloat = None
    sender_agent: OptionalFloat = None
    parent_distributor: OptionalFloat = None
    master_distributor: OptionalFloat = None
    twtl_sp: OptionalFloat = None
    bpo_pp: OptionalFloat = None
    sender_agent_fixed: OptionalFloat = None
    parent_distributor_fixed: OptionalFloat = None
    advance_commission: OptionalFloat = None
    vat_rate: OptionalFloat = None
    example_amount: OptionalFloat = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_dict(self, include: Iterable[str] | None = None) -> dict[str, OptionalFloat]:
        """Convert to a dictionary, optionally restricted to ``include``."""
        names = tuple(include) if include is not None else self.field_names()
        return {name: getattr(self, name) for name in names}


@dataclass(frozen=True)
class DropPointTier:
    """One amount slab of a Drop Point schedule and its first worksheet row."""

    label: str
    base_row: int

    @property
    def app_row(self) -> int:
        return self.base_row

    @property
    def ussd_row(self) -> int:
        return self.base_row + 2

    def example_row(self, channel: Channel) -> int:
        """Row holding the worked example for ``channel``."""
        return (self.app_row if channel is Channel.APP else self.ussd_row) + 1

    def rate_row(self, channel: Channel) -> int:
        """Row holding the rates for ``channel``."""
        return self.app_row if channel is Channel.APP else self.ussd_row


@dataclass(frozen=True)
class RegularSchedule:
    """Rates extracted from a Regular schedule, keyed by party then channel."""

    biller_name: str
    rates: Mapping[Party, Mapping[Channel, RawPartyRates]]

    def get(self, party: Party, channel: Channel) -> RawPartyRates:
        return self.rates[party][channel]


@dataclass(frozen=True)
class DropPointTierRates:
    """Raw values for one Drop Point slab on both channels."""

    tier: DropPointTier
    app: RawPartyRates
    ussd: RawPartyRates

    def get(self, channel: Channel) -> RawPartyRates:
        return self.app if channel is Channel.APP else self.ussd


@dataclass(frozen=True)
class DropPointSchedule:
    """Rates extracted from a Drop Point schedule, one entry per slab."""

    biller_name: str
    tiers: tuple[DropPointTierRates, ...]


# =============================================================================
# Calculation results
# =============================================================================


@dataclass(frozen=True)
class RegularChannelResult:
    """Commission breakdown for one party and channel of a Regular schedule.

    ``fee_rate`` is on the percentage scale; ``rates`` are the shares of the
    fee (including the derived adjustment) and ``commissions`` are
    ``rate * fee_rate``.
    """

    fee_rate: OptionalFloat
    rates: Mapping[str, OptionalFloat]
    commissions: Mapping[str, OptionalFloat]

    def to_dict(self) -> dict[str, Any]:
        return {
            "fee_rate": self.fee_rate,
            "rates": dict(self.rates),
            "commissions": dict(self.commissions),
        }


@dataclass(frozen=True)
class ChannelCommissionSet:
    """Final commission per party for one Drop Point slab and channel."""

    uddokta: OptionalFloat = None
    distributor: OptionalFloat = None
    master_distributor: OptionalFloat = None
    twlt: OptionalFloat = None
    bpo: OptionalFloat = None
    advance_commission: OptionalFloat = None

    def to_dict(self) -> dict[str, OptionalFloat]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class DropPointChannelResult:
    """Derived values and commissions for one Drop Point slab and channel."""

    fee_rate: OptionalFloat
    adjusted_sender_agent_fixed: OptionalFloat
    adjusted_parent_distributor_fixed: OptionalFloat
    master_distributor_rate: OptionalFloat
    commissions: ChannelCommissionSet

    def to_dict(self) -> dict[str, Any]:
        return {
            "fee_rate": self.fee_rate,
            "adjusted_sender_agent_fixed": self.adjusted_sender_agent_fixed,
            "adjusted_parent_distributor_fixed": self.adjusted_parent_distributor_fixed,
            "master_distributor_rate": self.master_distributor_rate,
            "commissions": self.commissions.to_dict(),
        }


@dataclass(frozen=True)
class SlabResult:
    """Commission results for one Drop Point amount slab."""

    tier: str
    base_row: int
    app: DropPointChannelResult
    ussd: DropPointChannelResult

    def get(self, channel: Channel) -> DropPointChannelResult:
        return self.app if channel is Channel.APP else self.ussd

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier,
            "base_row": self.base_row,
            "app": self.app.to_dict(),
            "ussd": self.ussd.to_dict(),
        }


@dataclass(frozen=True)
class CalculationSummary:
    """Audit summary attached to every calculation result."""

    tracking_id: str
    biller_name: str
    fee_comm_type: FeeCommType
    detected_structure: StructureKind
    file_name: str
    file_sha256: str
    calculated_at: str
    total_records: int
    fee_comm_subtype: str | None = None
    storage_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tracking_id": self.tracking_id,
            "biller_name": self.biller_name,
            "fee_comm_type": self.fee_comm_type.value,
            "fee_comm_subtype": self.fee_comm_subtype,
            "detected_structure": self.detected_structure.value,
            "file_name": self.file_name,
            "file_sha256": self.file_sha256,
            "calculated_at": self.calculated_at,
            "total_records": self.total_records,
            "storage_path": self.storage_path,
        }


@dataclass(frozen=True)
class CalculationResult:
    """Top-level output of a fee/commission calculation.

    Exactly one of ``regular`` (Regular schedules) or ``slabs`` (Drop Point
    schedules) is populated.
    """

    summary: CalculationSummary
    raw_data: Mapping[str, Any]
    regular: Mapping[Party, Mapping[Channel, RegularChannelResult]] | None = None
    slabs: tuple[SlabResult, ...] | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_drop_point(self) -> bool:
        return self.slabs is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        result: dict[str, Any] = {}
        if self.regular is not None:
            for party, channels in self.regular.items():
                result[party.value] = {
                    channel.value: channel_result.to_dict()
                    for channel, channel_result in channels.items()
                }
        if self.slabs is not None:
            result["slabs"] = [slab.to_dict() for slab in self.slabs]
        result["summary"] = self.summary.to_dict()
        result["raw_data"] = dict(self.raw_data)
        result["warnings"] = list(self.warnings)
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
