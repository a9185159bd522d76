"""Commission calculation for Regular and Drop Point schedules.

Regular schedules give every party's share of the fee directly; the residual
share kept by the paying entity (the "adjustment") is derived as
``1 - sum(outgoing shares)`` and every share is scaled by the fee rate
expressed as a percentage.

Drop Point schedules give fixed payouts for the Uddokta and distributor, and
the Master Distributor share must be back-derived from the slab's worked
example (columns D, E, T, V, BA, BC, BI and AU of the schedule sheet).

Missing inputs never become zero: every formula returns ``None`` when one of
its inputs is ``None`` and the gap is recorded as a warning.
"""

from __future__ import annotations

from fee_commission_calc.models import Channel, Party
from fee_commission_calc.schedule import (
    ChannelCommissionSet,
    DropPointChannelResult,
    DropPointSchedule,
    RawPartyRates,
    RegularChannelResult,
    RegularSchedule,
    SlabResult,
)
from fee_commission_calc.utils.logging import get_logger
from fee_commission_calc.utils.numeric import (
    OptionalFloat,
    divide,
    multiply,
    subtract_all,
    to_percentage,
)

logger = get_logger(__name__)

# Markup applied to the fixed Uddokta and distributor payouts of Drop Point
# slabs. Pending product confirmation of its source.
FIXED_VALUE_MARKUP = 1.15

# Outgoing shares of a Regular schedule, in the order they are subtracted
REGULAR_SHARE_FIELDS: tuple[str, ...] = (
    "sender_agent",
    "parent_distributor",
    "master_distributor",
    "twtl_sp",
    "bpo_pp",
)

ADJUSTMENT = "adjustment"


class CommissionCalculator:
    """Turns extracted schedules into commission breakdowns.

    The calculator is stateless apart from the warnings collected during a
    single ``calculate_*`` call, which are returned alongside the results.
    """

    # ------------------------------------------------------------------ #
    # Regular schedules
    # ------------------------------------------------------------------ #

    @staticmethod
    def calculate_adjustment(party: Party, rates: RawPartyRates) -> OptionalFloat:
        """Residual share ``1 - (bpo + twtl + master + parent + sender)``.

        Customer-initiated rows treat a missing sender agent or parent
        distributor share as zero; every other missing share makes the
        adjustment ``None``.
        """
        sender_agent = rates.sender_agent
        parent_distributor = rates.parent_distributor
        if party is Party.CUSTOMER:
            sender_agent = sender_agent if sender_agent is not None else 0.0
            parent_distributor = (
                parent_distributor if parent_distributor is not None else 0.0
            )
        return subtract_all(
            1.0,
            rates.bpo_pp,
            rates.twtl_sp,
            rates.master_distributor,
            parent_distributor,
            sender_agent,
        )

    def calculate_regular_channel(
        self,
        party: Party,
        channel: Channel,
        rates: RawPartyRates,
        warnings: list[str],
    ) -> RegularChannelResult:
        """Commission breakdown for one party and channel."""
        label = f"{party.value}.{channel.value}"
        fee_rate_pct = to_percentage(rates.fee_rate)
        adjustment = self.calculate_adjustment(party, rates)

        shares: dict[str, OptionalFloat] = {
            name: getattr(rates, name) for name in REGULAR_SHARE_FIELDS
        }
        shares[ADJUSTMENT] = adjustment

        if fee_rate_pct is None:
            warnings.append(f"{label}: fee rate is missing; commissions not computed")
            logger.warning("Fee rate missing", party=party.value, channel=channel.value)
        for name, share in shares.items():
            if share is None:
                warnings.append(f"{label}: {name} is missing")

        commissions = {
            name: multiply(share, fee_rate_pct) for name, share in shares.items()
        }

        logger.debug(
            "Regular commissions calculated",
            party=party.value,
            channel=channel.value,
            fee_rate=fee_rate_pct,
            adjustment=adjustment,
        )
        return RegularChannelResult(
            fee_rate=fee_rate_pct,
            rates=shares,
            commissions=commissions,
        )

    def calculate_regular(
        self, schedule: RegularSchedule
    ) -> tuple[dict[Party, dict[Channel, RegularChannelResult]], list[str]]:
        """Calculate commissions for every party and channel.

        Returns:
            Results keyed by party then channel, and the warnings raised for
            missing inputs.
        """
        warnings: list[str] = []
        results: dict[Party, dict[Channel, RegularChannelResult]] = {}
        for party, channels in schedule.rates.items():
            for channel, rates in channels.items():
                results.setdefault(party, {})[channel] = (
                    self.calculate_regular_channel(party, channel, rates, warnings)
                )

        if warnings:
            logger.warning(
                "Regular calculation completed with missing inputs",
                biller_name=schedule.biller_name,
                missing=len(warnings),
            )
        return results, warnings

    # ------------------------------------------------------------------ #
    # Drop Point schedules
    # ------------------------------------------------------------------ #

    @staticmethod
    def apply_fixed_markup(value: OptionalFloat) -> OptionalFloat:
        """Apply the fixed-payout markup; ``None`` stays ``None``."""
        return multiply(value, FIXED_VALUE_MARKUP)

    @staticmethod
    def derive_master_distributor_rate(
        rates: RawPartyRates,
        adjusted_sender_agent_fixed: OptionalFloat,
        adjusted_parent_distributor_fixed: OptionalFloat,
    ) -> OptionalFloat:
        """Back-derive the Master Distributor share from the worked example.

        With the example amount ``D``, fee rate and VAT rate::

            E5  = D * fee_rate                  total fee
            V5  = E5 / (1 + vat)                fee net of VAT
            T5  = E5 - V5                       VAT amount
            BA5 = twtl * V5
            BC5 = V5 * bpo
            BI5 = V5 * advance_commission
            AU5 = E5 - T5 - sender - parent - BA5 - BC5 - BI5
            rate = AU5 / V5

        The schedule's F5 column is never extracted and is taken as zero.
        """
        e5 = multiply(rates.example_amount, rates.fee_rate)
        vat_divisor = None if rates.vat_rate is None else 1.0 + rates.vat_rate
        v5 = divide(e5, vat_divisor)
        t5 = subtract_all(e5, v5)
        ba5 = multiply(rates.twtl_sp, v5)
        bc5 = multiply(v5, rates.bpo_pp)
        bi5 = multiply(v5, rates.advance_commission)
        au5 = subtract_all(
            e5,
            t5,
            adjusted_sender_agent_fixed,
            adjusted_parent_distributor_fixed,
            ba5,
            bc5,
            bi5,
        )
        return divide(au5, v5)

    def calculate_drop_point_channel(
        self,
        tier_label: str,
        channel: Channel,
        rates: RawPartyRates,
        warnings: list[str],
    ) -> DropPointChannelResult:
        """Derived values and commissions for one slab and channel."""
        label = f"{tier_label}.{channel.value}"
        adjusted_sender = self.apply_fixed_markup(rates.sender_agent_fixed)
        adjusted_parent = self.apply_fixed_markup(rates.parent_distributor_fixed)

        missing_required = [
            name
            for name in ("fee_rate", "vat_rate", "example_amount")
            if getattr(rates, name) is None
        ]
        master_distributor_rate: OptionalFloat = None
        if missing_required:
            warnings.append(
                f"{label}: master distributor rate not derived, missing "
                f"{', '.join(missing_required)}"
            )
            logger.warning(
                "Cannot derive master distributor rate",
                tier=tier_label,
                channel=channel.value,
                missing=missing_required,
            )
        else:
            master_distributor_rate = self.derive_master_distributor_rate(
                rates, adjusted_sender, adjusted_parent
            )
            if master_distributor_rate is None:
                warnings.append(
                    f"{label}: master distributor rate could not be derived"
                )
                logger.warning(
                    "Master distributor rate derivation produced no value",
                    tier=tier_label,
                    channel=channel.value,
                )

        fee_rate_pct = to_percentage(rates.fee_rate)
        commissions = ChannelCommissionSet(
            uddokta=adjusted_sender,
            distributor=adjusted_parent,
            master_distributor=multiply(master_distributor_rate, fee_rate_pct),
            twlt=multiply(rates.twtl_sp, fee_rate_pct),
            bpo=multiply(rates.bpo_pp, fee_rate_pct),
            advance_commission=multiply(rates.advance_commission, fee_rate_pct),
        )
        return DropPointChannelResult(
            fee_rate=fee_rate_pct,
            adjusted_sender_agent_fixed=adjusted_sender,
            adjusted_parent_distributor_fixed=adjusted_parent,
            master_distributor_rate=master_distributor_rate,
            commissions=commissions,
        )

    def calculate_drop_point(
        self, schedule: DropPointSchedule
    ) -> tuple[tuple[SlabResult, ...], list[str]]:
        """Calculate commissions for every slab on both channels.

        Returns:
            One SlabResult per slab in schedule order, and the warnings
            raised for missing inputs.
        """
        warnings: list[str] = []
        slabs: list[SlabResult] = []
        for tier_rates in schedule.tiers:
            tier = tier_rates.tier
            per_channel = {
                channel: self.calculate_drop_point_channel(
                    tier.label, channel, tier_rates.get(channel), warnings
                )
                for channel in Channel
            }
            slabs.append(
                SlabResult(
                    tier=tier.label,
                    base_row=tier.base_row,
                    app=per_channel[Channel.APP],
                    ussd=per_channel[Channel.USSD],
                )
            )

        logger.debug(
            "Drop Point commissions calculated",
            biller_name=schedule.biller_name,
            slabs=len(slabs),
            warnings=len(warnings),
        )
        return tuple(slabs), warnings
