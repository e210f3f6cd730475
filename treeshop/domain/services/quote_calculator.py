"""
Quote Calculator - Turns acreage, tier, transport and debris into a price.

Implements the quote rules:
- Base cost: acres x tier rate
- Transport: hours x transport rate
- Debris: (estimated + manual yards) x debris rate, estimated yards for
  max tiers only
- Final price: subtotal x markup, split into deposit and balance
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from treeshop.domain.entities.pricing import (
    PackageTier,
    PricingSettings,
    QuoteBreakdown,
    RateTable,
)
from treeshop.domain.money import ZERO, to_decimal
from treeshop.domain.services.transport_estimator import TransportEstimator

logger = logging.getLogger(__name__)


class QuoteCalculator:
    """
    Pure quote calculator over an explicit rate table and settings.

    Inputs are not validated: negative acres or hours produce negative
    figures. Callers validate before invoking.
    """

    def __init__(self, rate_table: RateTable, settings: PricingSettings):
        self.rate_table = rate_table
        self.settings = settings

    def calculate_quote(
        self,
        acres,
        tier: PackageTier,
        transport_hours,
        manual_debris_yards=ZERO,
    ) -> QuoteBreakdown:
        """
        Calculate the full price breakdown for one set of inputs.

        Args:
            acres: Land size in acres
            tier: Package tier (enum or its value)
            transport_hours: Round-trip transport hours
            manual_debris_yards: Debris yards entered by hand

        Returns:
            QuoteBreakdown with unrounded Decimal amounts
        """
        tier = PackageTier.parse(tier)
        acres = to_decimal(acres)
        transport_hours = to_decimal(transport_hours)
        manual_debris_yards = to_decimal(manual_debris_yards)
        settings = self.settings

        base_cost = acres * self.rate_table.rate_for(tier)
        transport_cost = transport_hours * settings.transport_rate_per_hour
        estimated_debris_yards = acres * settings.debris_yards_per_acre(tier)
        debris_cost = (estimated_debris_yards + manual_debris_yards) * settings.debris_rate_per_yard

        subtotal = base_cost + transport_cost + debris_cost
        final_price = subtotal * settings.final_markup_multiplier
        deposit_amount = final_price * settings.deposit_percentage

        return QuoteBreakdown(
            tier=tier,
            acres=acres,
            transport_hours=transport_hours,
            manual_debris_yards=manual_debris_yards,
            estimated_debris_yards=estimated_debris_yards,
            base_cost=base_cost,
            transport_cost=transport_cost,
            debris_cost=debris_cost,
            subtotal=subtotal,
            final_price=final_price,
            deposit_amount=deposit_amount,
            balance_due=final_price - deposit_amount,
        )


@dataclass
class QuoteSession:
    """
    Quote inputs being edited, with a breakdown recomputed on every read.

    Changing acres, tier, hours, debris, or the calculator's rate table and
    settings is reflected the next time `breakdown` is read.
    """

    calculator: QuoteCalculator
    acres: Decimal = Decimal("2.5")
    tier: PackageTier = PackageTier.MEDIUM
    project_zip_code: str = ""
    transport_hours: Decimal = Decimal("2.0")
    manual_debris_yards: Decimal = Decimal("0")
    estimator: Optional[TransportEstimator] = field(default=None, repr=False)

    @property
    def breakdown(self) -> QuoteBreakdown:
        return self.calculator.calculate_quote(
            self.acres, self.tier, self.transport_hours, self.manual_debris_yards,
        )

    def apply_transport_hours(self, hours: Decimal) -> None:
        self.transport_hours = to_decimal(hours)

    def refresh_transport_estimate(self) -> bool:
        """
        Re-estimate transport hours for the project zip.

        Returns:
            True if transport_hours was updated; on failure (or with no zip or
            estimator) the previous value is kept.
        """
        if self.estimator is None or not self.project_zip_code:
            return False
        hours = self.estimator.estimate(self.project_zip_code)
        if hours is None:
            return False
        self.apply_transport_hours(hours)
        return True

    def refresh_transport_estimate_async(self):
        """Background variant; transport_hours is updated only on success."""
        if self.estimator is None or not self.project_zip_code:
            return None
        return self.estimator.estimate_async(self.project_zip_code, self.apply_transport_hours)
