"""
Loadout Cost Engine - Aggregate cost, billing rate and projections for a crew.

Implements the loadout rollup:
- Operating cost = sum of employee true hourly costs + equipment hourly costs
- Billing rate = operating cost x markup, or the custom rate override
- Revenue projections at fixed hours per day/week/month
- Profitability banding and optimization suggestions
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from treeshop.domain.entities.employee import Employee
from treeshop.domain.entities.equipment import Equipment
from treeshop.domain.entities.loadout import (
    Loadout,
    LoadoutCalculation,
    LoadoutCrew,
    LoadoutPricing,
    ProfitabilityCategory,
)
from treeshop.domain.money import ZERO, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_HOURS: Dict[str, Decimal] = {
    "daily": Decimal("8"),
    "weekly": Decimal("40"),
    "monthly": Decimal("160"),
}

# Minimum profit margin (fraction of billing rate) for each band
DEFAULT_PROFITABILITY_BANDS: Dict[str, float] = {
    "excellent": 0.50,
    "good": 0.35,
    "acceptable": 0.20,
}

LOW_MARGIN_THRESHOLD = 0.20
HIGH_EQUIPMENT_RATIO = 1.5
LOW_USAGE_COUNT = 5


class OptimizationType(Enum):
    COST_REDUCTION = "cost_reduction"
    BALANCING = "balancing"
    UTILIZATION = "utilization"


class OptimizationPriority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class LoadoutOptimization:
    type: OptimizationType
    priority: OptimizationPriority
    message: str
    impact: str

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'priority': self.priority.value,
            'message': self.message,
            'impact': self.impact,
        }


class LoadoutCostEngine:
    """
    Rolls member hourly costs up into a loadout billing rate.

    Usage:
        engine = LoadoutCostEngine()
        calc = engine.calculate(loadout.crew, loadout.pricing, employees_by_id, equipment_by_id)
    """

    def __init__(
        self,
        hours: Optional[Mapping[str, Decimal]] = None,
        profitability_bands: Optional[Mapping[str, float]] = None,
    ):
        self.hours = dict(DEFAULT_HOURS)
        if hours:
            self.hours.update({key: to_decimal(value) for key, value in hours.items()})
        self.bands = dict(DEFAULT_PROFITABILITY_BANDS)
        if profitability_bands:
            self.bands.update(profitability_bands)

    @classmethod
    def from_config(cls, config) -> 'LoadoutCostEngine':
        return cls(hours=config.loadout_hours, profitability_bands=config.profitability_bands)

    def categorize(self, profit_margin: float) -> ProfitabilityCategory:
        if profit_margin >= self.bands["excellent"]:
            return ProfitabilityCategory.EXCELLENT
        if profit_margin >= self.bands["good"]:
            return ProfitabilityCategory.GOOD
        if profit_margin >= self.bands["acceptable"]:
            return ProfitabilityCategory.ACCEPTABLE
        return ProfitabilityCategory.POOR

    def calculate_from_members(
        self,
        employees: Iterable[Employee],
        equipment: Iterable[Equipment],
        pricing: LoadoutPricing,
    ) -> LoadoutCalculation:
        """
        Calculate loadout economics from resolved members.

        Members without a calculation contribute 0.
        """
        total_employee_cost = sum((e.true_hourly_cost for e in employees), ZERO)
        total_equipment_cost = sum(
            (item.calculated.hourly_cost for item in equipment if item.calculated is not None), ZERO
        )
        total_operating_cost = total_employee_cost + total_equipment_cost

        if pricing.has_custom_pricing:
            billing_rate = pricing.custom_rate_override
        else:
            billing_rate = total_operating_cost * pricing.markup_multiplier

        hourly_profit = billing_rate - total_operating_cost
        profit_margin = float(hourly_profit / billing_rate) if billing_rate != 0 else 0.0

        return LoadoutCalculation(
            total_employee_cost=total_employee_cost,
            total_equipment_cost=total_equipment_cost,
            total_operating_cost=total_operating_cost,
            billing_rate=billing_rate,
            hourly_profit=hourly_profit,
            profit_margin=profit_margin,
            daily_revenue=billing_rate * self.hours["daily"],
            weekly_revenue=billing_rate * self.hours["weekly"],
            monthly_revenue=billing_rate * self.hours["monthly"],
            daily_profit=hourly_profit * self.hours["daily"],
            profitability=self.categorize(profit_margin),
        )

    def calculate(
        self,
        crew: LoadoutCrew,
        pricing: LoadoutPricing,
        employees_by_id: Mapping[UUID, Employee],
        equipment_by_id: Mapping[UUID, Equipment],
    ) -> LoadoutCalculation:
        """
        Calculate loadout economics for a crew of member references.

        Unknown ids are logged and contribute 0.
        """
        employees = []
        for employee_id in crew.employee_ids:
            employee = employees_by_id.get(employee_id)
            if employee is None:
                logger.warning(f"Loadout references unknown employee {employee_id}")
                continue
            employees.append(employee)

        equipment = []
        for equipment_id in crew.equipment_ids:
            item = equipment_by_id.get(equipment_id)
            if item is None:
                logger.warning(f"Loadout references unknown equipment {equipment_id}")
                continue
            equipment.append(item)

        return self.calculate_from_members(employees, equipment, pricing)

    def refresh(
        self,
        loadout: Loadout,
        employees_by_id: Mapping[UUID, Employee],
        equipment_by_id: Mapping[UUID, Equipment],
    ) -> Loadout:
        loadout.calculated = self.calculate(
            loadout.crew, loadout.pricing, employees_by_id, equipment_by_id,
        )
        return loadout

    @staticmethod
    def optimization_suggestions(loadout: Loadout) -> List[LoadoutOptimization]:
        """Suggestions for a calculated loadout, highest priority first."""
        suggestions = []
        calc = loadout.calculated
        if calc is None:
            return suggestions

        if calc.profit_margin < LOW_MARGIN_THRESHOLD:
            suggestions.append(LoadoutOptimization(
                type=OptimizationType.COST_REDUCTION,
                priority=OptimizationPriority.HIGH,
                message="Profit margin below 20% - consider reducing costs or increasing markup",
                impact="Improve profitability",
            ))
        if loadout.crew.equipment_ratio > HIGH_EQUIPMENT_RATIO:
            suggestions.append(LoadoutOptimization(
                type=OptimizationType.BALANCING,
                priority=OptimizationPriority.MEDIUM,
                message="High equipment-to-employee ratio - consider adding crew members",
                impact="Improve efficiency",
            ))
        if loadout.times_used < LOW_USAGE_COUNT:
            suggestions.append(LoadoutOptimization(
                type=OptimizationType.UTILIZATION,
                priority=OptimizationPriority.LOW,
                message="Low usage count - promote this loadout for more projects",
                impact="Increase ROI",
            ))
        return suggestions
