"""
Pricing Entities - Package tiers, the rate table and pricing settings.

Two pricing regimes coexist:
- Multiplier tiers (small, medium, large, xlarge): medium is the base rate
  and the others follow it by fixed multipliers unless overridden.
- Max tiers (maxLight, maxMedium, maxHeavy): flat per-acre rates with their
  own debris-per-acre estimates. They never follow the base rate.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Set

from treeshop.domain.exceptions import BaseRateOverrideError, UnknownTierError
from treeshop.domain.money import to_decimal

logger = logging.getLogger(__name__)


class PackageTier(Enum):
    """Service package level, each with its own per-acre rate."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XLARGE = "xlarge"
    MAX_LIGHT = "maxLight"
    MAX_MEDIUM = "maxMedium"
    MAX_HEAVY = "maxHeavy"

    @property
    def is_max(self) -> bool:
        return self in MAX_TIERS

    @classmethod
    def parse(cls, value) -> 'PackageTier':
        """Parse a tier from its value (e.g. 'maxLight'), raising UnknownTierError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownTierError(str(value))


BASE_TIER = PackageTier.MEDIUM

MAX_TIERS = frozenset({
    PackageTier.MAX_LIGHT,
    PackageTier.MAX_MEDIUM,
    PackageTier.MAX_HEAVY,
})

# Fixed relationship to the medium rate
TIER_MULTIPLIERS: Dict[PackageTier, Decimal] = {
    PackageTier.SMALL: Decimal("0.85"),
    PackageTier.MEDIUM: Decimal("1.0"),
    PackageTier.LARGE: Decimal("1.35"),
    PackageTier.XLARGE: Decimal("1.70"),
}

DEFAULT_RATES: Dict[PackageTier, Decimal] = {
    PackageTier.SMALL: Decimal("2125"),
    PackageTier.MEDIUM: Decimal("2500"),
    PackageTier.LARGE: Decimal("3375"),
    PackageTier.XLARGE: Decimal("4250"),
    PackageTier.MAX_LIGHT: Decimal("8000"),
    PackageTier.MAX_MEDIUM: Decimal("12000"),
    PackageTier.MAX_HEAVY: Decimal("18000"),
}

DEFAULT_DEBRIS_ESTIMATES: Dict[PackageTier, Decimal] = {
    PackageTier.MAX_LIGHT: Decimal("500"),
    PackageTier.MAX_MEDIUM: Decimal("750"),
    PackageTier.MAX_HEAVY: Decimal("1000"),
}


@dataclass(frozen=True)
class RateEntry:
    """A tier's current rate and whether it was set by hand."""
    tier: PackageTier
    rate: Decimal
    overridden: bool = False

    @property
    def auto_derived(self) -> bool:
        """True when the rate follows the base rate through a multiplier."""
        return self.tier in TIER_MULTIPLIERS and self.tier != BASE_TIER and not self.overridden

    def to_dict(self) -> dict:
        return {
            'tier': self.tier.value,
            'rate': float(self.rate),
            'overridden': self.overridden,
            'auto_derived': self.auto_derived,
        }


class RateTable:
    """
    Per-tier pricing rates with base-rate propagation and overrides.

    Mutated only through set_base_rate, set_rate, mark_overridden and
    reset_to_auto. Invariant: for every multiplier tier that is not
    overridden, rate == base_rate * TIER_MULTIPLIERS[tier].
    """

    def __init__(
        self,
        rates: Optional[Dict[PackageTier, Decimal]] = None,
        overridden: Optional[Set[PackageTier]] = None,
    ):
        self._rates: Dict[PackageTier, Decimal] = dict(DEFAULT_RATES)
        if rates:
            self._rates.update({tier: to_decimal(rate) for tier, rate in rates.items()})
        self._overridden: Set[PackageTier] = set(overridden or ())
        self._overridden.discard(BASE_TIER)
        # Re-derive dependent tiers so stored rates can't drift from the base
        self.set_base_rate(self._rates[BASE_TIER])

    @property
    def base_rate(self) -> Decimal:
        return self._rates[BASE_TIER]

    def rate_for(self, tier: PackageTier) -> Decimal:
        return self._rates[PackageTier.parse(tier)]

    def is_overridden(self, tier: PackageTier) -> bool:
        return PackageTier.parse(tier) in self._overridden

    def entry(self, tier: PackageTier) -> RateEntry:
        tier = PackageTier.parse(tier)
        return RateEntry(tier=tier, rate=self._rates[tier], overridden=tier in self._overridden)

    def entries(self) -> List[RateEntry]:
        return [self.entry(tier) for tier in PackageTier]

    def set_base_rate(self, rate) -> None:
        """
        Set the medium rate and re-derive every non-overridden multiplier tier.

        Max tiers are untouched.
        """
        base_rate = to_decimal(rate)
        self._rates[BASE_TIER] = base_rate
        for tier, multiplier in TIER_MULTIPLIERS.items():
            if tier != BASE_TIER and tier not in self._overridden:
                self._rates[tier] = base_rate * multiplier
        logger.debug(f"Base rate set to {base_rate}")

    def set_rate(self, tier: PackageTier, rate) -> None:
        """
        Manually edit a tier's rate.

        Editing medium changes the base rate; any other tier is stored as
        given and flagged overridden.
        """
        tier = PackageTier.parse(tier)
        if tier == BASE_TIER:
            self.set_base_rate(rate)
            return
        self._rates[tier] = to_decimal(rate)
        self.mark_overridden(tier)

    def mark_overridden(self, tier: PackageTier) -> None:
        """Exempt a tier from base-rate recomputation."""
        tier = PackageTier.parse(tier)
        if tier == BASE_TIER:
            raise BaseRateOverrideError("override")
        self._overridden.add(tier)
        logger.info(f"Rate for tier '{tier.value}' marked as overridden")

    def reset_to_auto(self, tier: PackageTier) -> None:
        """
        Clear a tier's override flag.

        Multiplier tiers are immediately recomputed from the current base
        rate. Max tiers have no multiplier, so only the flag changes.
        """
        tier = PackageTier.parse(tier)
        if tier == BASE_TIER:
            raise BaseRateOverrideError("reset")
        self._overridden.discard(tier)
        multiplier = TIER_MULTIPLIERS.get(tier)
        if multiplier is not None:
            self._rates[tier] = self.base_rate * multiplier
        logger.info(f"Rate for tier '{tier.value}' reset to auto-calculated")

    def copy(self) -> 'RateTable':
        return RateTable(rates=dict(self._rates), overridden=set(self._overridden))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'rates': {tier.value: str(rate) for tier, rate in self._rates.items()},
            'overridden': sorted(tier.value for tier in self._overridden),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RateTable':
        rates = {PackageTier.parse(key): to_decimal(value) for key, value in data.get('rates', {}).items()}
        overridden = {PackageTier.parse(value) for value in data.get('overridden', [])}
        return cls(rates=rates, overridden=overridden)

    @classmethod
    def from_config(cls, config) -> 'RateTable':
        """Build the rate table from the pricing.package_rates section."""
        rates = {PackageTier.parse(key): value for key, value in config.package_rates.items()}
        return cls(rates=rates)


@dataclass
class PricingSettings:
    """
    Quote-level pricing parameters shared by every quote.

    Attributes:
        transport_rate_per_hour: Billed rate for transport time
        debris_rate_per_yard: Billed rate per yard of debris
        final_markup_multiplier: Applied to the cost subtotal
        deposit_percentage: Fraction of the final price due up front
        debris_estimates: Yards per acre, max tiers only
    """

    transport_rate_per_hour: Decimal = Decimal("150")
    debris_rate_per_yard: Decimal = Decimal("20")
    final_markup_multiplier: Decimal = Decimal("1.15")
    deposit_percentage: Decimal = Decimal("0.25")
    debris_estimates: Dict[PackageTier, Decimal] = field(
        default_factory=lambda: dict(DEFAULT_DEBRIS_ESTIMATES)
    )

    # Business profile
    business_name: str = "TreeShop"
    base_location_address: str = ""
    business_phone: str = ""
    business_email: str = ""

    def debris_yards_per_acre(self, tier: PackageTier) -> Decimal:
        """Estimated debris per acre; zero for non-max tiers."""
        if not tier.is_max:
            return Decimal("0")
        return self.debris_estimates.get(tier, Decimal("0"))

    def to_dict(self) -> dict:
        return {
            'transport_rate_per_hour': str(self.transport_rate_per_hour),
            'debris_rate_per_yard': str(self.debris_rate_per_yard),
            'final_markup_multiplier': str(self.final_markup_multiplier),
            'deposit_percentage': str(self.deposit_percentage),
            'debris_estimates': {tier.value: str(v) for tier, v in self.debris_estimates.items()},
            'business_name': self.business_name,
            'base_location_address': self.base_location_address,
            'business_phone': self.business_phone,
            'business_email': self.business_email,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingSettings':
        defaults = cls()
        estimates = data.get('debris_estimates')
        return cls(
            transport_rate_per_hour=to_decimal(data.get('transport_rate_per_hour'), defaults.transport_rate_per_hour),
            debris_rate_per_yard=to_decimal(data.get('debris_rate_per_yard'), defaults.debris_rate_per_yard),
            final_markup_multiplier=to_decimal(data.get('final_markup_multiplier'), defaults.final_markup_multiplier),
            deposit_percentage=to_decimal(data.get('deposit_percentage'), defaults.deposit_percentage),
            debris_estimates=(
                {PackageTier.parse(k): to_decimal(v) for k, v in estimates.items()}
                if estimates else defaults.debris_estimates
            ),
            business_name=data.get('business_name', defaults.business_name),
            base_location_address=data.get('base_location_address', ''),
            business_phone=data.get('business_phone', ''),
            business_email=data.get('business_email', ''),
        )

    @classmethod
    def from_config(cls, config) -> 'PricingSettings':
        """Build settings from the pricing section of TreeShopConfig."""
        business = config.business
        return cls(
            transport_rate_per_hour=config.transport_rate_per_hour,
            debris_rate_per_yard=config.debris_rate_per_yard,
            final_markup_multiplier=config.final_markup_multiplier,
            deposit_percentage=config.deposit_percentage,
            debris_estimates={
                PackageTier.parse(key): value for key, value in config.debris_estimates.items()
            },
            business_name=business.get("name", "TreeShop"),
            base_location_address=business.get("base_location_address", ""),
            business_phone=business.get("phone", ""),
            business_email=business.get("email", ""),
        )


@dataclass(frozen=True)
class QuoteBreakdown:
    """
    Derived price breakdown for one set of quote inputs.

    Never persisted on its own; recomputed whenever an input changes.
    """

    tier: PackageTier
    acres: Decimal
    transport_hours: Decimal
    manual_debris_yards: Decimal
    estimated_debris_yards: Decimal
    base_cost: Decimal
    transport_cost: Decimal
    debris_cost: Decimal
    subtotal: Decimal
    final_price: Decimal
    deposit_amount: Decimal
    balance_due: Decimal

    @property
    def total_debris_yards(self) -> Decimal:
        return self.estimated_debris_yards + self.manual_debris_yards

    def to_dict(self) -> dict:
        return {
            'tier': self.tier.value,
            'acres': float(self.acres),
            'transport_hours': float(self.transport_hours),
            'manual_debris_yards': float(self.manual_debris_yards),
            'estimated_debris_yards': float(self.estimated_debris_yards),
            'base_cost': float(self.base_cost),
            'transport_cost': float(self.transport_cost),
            'debris_cost': float(self.debris_cost),
            'subtotal': float(self.subtotal),
            'final_price': float(self.final_price),
            'deposit_amount': float(self.deposit_amount),
            'balance_due': float(self.balance_due),
        }
