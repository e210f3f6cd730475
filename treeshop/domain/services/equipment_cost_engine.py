"""
Equipment Cost Engine - Hourly operating cost and billing rate for a machine.

Implements the equipment cost model:
- Annual depreciation, fuel, maintenance and insurance
- Hourly cost over annual operating hours, marked up to a recommended rate
- Data quality alerts and a percentage breakdown of annual cost

Zero-hours policy: when annual hours are zero the hourly cost and
recommended rate are reported as 0, a warning is logged, and validate()
adds an error alert.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from treeshop.domain.entities.equipment import (
    Equipment,
    EquipmentCalculation,
    EquipmentFinancial,
    EquipmentUsage,
    MaintenanceLevel,
)
from treeshop.domain.money import ZERO, to_decimal

logger = logging.getLogger(__name__)

RECOMMENDED_MARKUP = Decimal("1.3")
DEFAULT_RESALE_PERCENTAGE = Decimal("0.2")

DEFAULT_MAINTENANCE_COSTS: Dict[MaintenanceLevel, Decimal] = {
    MaintenanceLevel.MINIMAL: Decimal("1300"),
    MaintenanceLevel.STANDARD: Decimal("2600"),
    MaintenanceLevel.INTENSE: Decimal("4550"),
    MaintenanceLevel.CUSTOM: Decimal("0"),
}

DEFAULT_ALERT_THRESHOLDS: Dict[str, Decimal] = {
    "low_hourly_cost": Decimal("10"),
    "high_hourly_cost": Decimal("200"),
    "min_recommended_rate": Decimal("25"),
    "min_annual_hours": Decimal("400"),
    "replacement_age_years": Decimal("15"),
    "replacement_hourly_cost": Decimal("100"),
}


class AlertSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class EquipmentAlert:
    severity: AlertSeverity
    message: str

    def to_dict(self) -> dict:
        return {'severity': self.severity.value, 'message': self.message}


@dataclass(frozen=True)
class CostBreakdown:
    """Share of total annual cost per component, in percent."""

    depreciation_pct: float
    fuel_pct: float
    maintenance_pct: float
    insurance_pct: float

    @property
    def dominant_cost_factor(self) -> str:
        factors = [
            ("Depreciation", self.depreciation_pct),
            ("Fuel", self.fuel_pct),
            ("Maintenance", self.maintenance_pct),
            ("Insurance", self.insurance_pct),
        ]
        name, value = max(factors, key=lambda item: item[1])
        return name if value > 0 else "Unknown"

    def to_dict(self) -> dict:
        return {
            'depreciation_pct': self.depreciation_pct,
            'fuel_pct': self.fuel_pct,
            'maintenance_pct': self.maintenance_pct,
            'insurance_pct': self.insurance_pct,
            'dominant_cost_factor': self.dominant_cost_factor,
        }


def calculate_estimated_resale(purchase_price, percentage=DEFAULT_RESALE_PERCENTAGE) -> Decimal:
    """Default resale estimate as a fraction of purchase price."""
    return to_decimal(purchase_price) * to_decimal(percentage)


class EquipmentCostEngine:
    """
    Converts equipment usage and financial inputs into hourly costs.

    All figures stay unrounded Decimals; percentages are floats.
    """

    def __init__(
        self,
        recommended_markup: Decimal = RECOMMENDED_MARKUP,
        maintenance_costs: Optional[Dict[MaintenanceLevel, Decimal]] = None,
        alert_thresholds: Optional[Dict[str, Decimal]] = None,
    ):
        self.recommended_markup = to_decimal(recommended_markup)
        self.maintenance_costs = dict(DEFAULT_MAINTENANCE_COSTS)
        if maintenance_costs:
            self.maintenance_costs.update(maintenance_costs)
        self.thresholds = dict(DEFAULT_ALERT_THRESHOLDS)
        if alert_thresholds:
            self.thresholds.update(alert_thresholds)

    @classmethod
    def from_config(cls, config) -> 'EquipmentCostEngine':
        return cls(
            recommended_markup=config.recommended_markup,
            maintenance_costs={
                level: config.get_maintenance_cost(level.value) for level in MaintenanceLevel
            },
            alert_thresholds=config.equipment_alert_thresholds,
        )

    # =========================================================================
    # Core Calculations
    # =========================================================================

    def resolve_annual_maintenance(self, financial: EquipmentFinancial) -> Decimal:
        """
        Annual maintenance for a machine.

        A positive custom cost wins, then an explicit annual_maintenance,
        then the standard cost for the maintenance level.
        """
        custom = financial.custom_maintenance_cost
        if custom is not None and custom > 0:
            return custom
        if financial.annual_maintenance is not None:
            return financial.annual_maintenance
        return self.maintenance_costs.get(financial.maintenance_level, ZERO)

    @staticmethod
    def calculate_annual_depreciation(financial: EquipmentFinancial) -> Decimal:
        """Straight-line depreciation, floored at zero."""
        if financial.years_of_service <= 0:
            logger.warning("Years of service is zero; depreciation reported as 0")
            return ZERO
        depreciation = (
            financial.purchase_price - financial.estimated_resale_value
        ) / Decimal(financial.years_of_service)
        return max(ZERO, depreciation)

    @staticmethod
    def calculate_hourly_cost(total_annual_cost: Decimal, annual_hours: Decimal) -> Decimal:
        if annual_hours <= 0:
            logger.warning("Annual hours is zero; hourly cost reported as 0")
            return ZERO
        return total_annual_cost / annual_hours

    def calculate_costs(self, usage: EquipmentUsage, financial: EquipmentFinancial) -> EquipmentCalculation:
        """
        Calculate annual and hourly costs.

        Args:
            usage: Days per year and hours per day
            financial: Purchase, resale, fuel, maintenance and insurance inputs

        Returns:
            EquipmentCalculation (hourly cost 0 when annual hours is 0)
        """
        annual_hours = Decimal(usage.days_per_year) * to_decimal(usage.hours_per_day)
        annual_depreciation = self.calculate_annual_depreciation(financial)
        annual_fuel = financial.daily_fuel_cost * Decimal(usage.days_per_year)
        annual_maintenance = self.resolve_annual_maintenance(financial)
        annual_insurance = financial.annual_insurance_cost

        total_annual_cost = annual_depreciation + annual_fuel + annual_maintenance + annual_insurance
        hourly_cost = self.calculate_hourly_cost(total_annual_cost, annual_hours)

        return EquipmentCalculation(
            annual_hours=annual_hours,
            annual_depreciation=annual_depreciation,
            annual_fuel=annual_fuel,
            annual_maintenance=annual_maintenance,
            annual_insurance=annual_insurance,
            total_annual_cost=total_annual_cost,
            hourly_cost=hourly_cost,
            recommended_rate=hourly_cost * self.recommended_markup,
        )

    def calculate(self, equipment: Equipment) -> Equipment:
        """Refresh the calculation snapshot stored on an equipment record."""
        equipment.calculated = self.calculate_costs(equipment.usage, equipment.financial)
        return equipment

    # =========================================================================
    # Validation and Analysis
    # =========================================================================

    def validate(self, equipment: Equipment, current_year: Optional[int] = None) -> List[EquipmentAlert]:
        """
        Check a calculated machine against the alert rules.

        Every rule is evaluated; alerts are returned in rule order.
        """
        calc = equipment.calculated
        if calc is None:
            return [EquipmentAlert(AlertSeverity.ERROR, "Calculation missing - recalculate costs")]

        t = self.thresholds
        alerts = []

        if calc.annual_hours <= 0:
            alerts.append(EquipmentAlert(
                AlertSeverity.ERROR, "Annual hours is zero - hourly cost is undefined"
            ))
        if calc.hourly_cost < t["low_hourly_cost"]:
            alerts.append(EquipmentAlert(AlertSeverity.WARNING, "Hourly cost seems low - verify inputs"))
        if calc.hourly_cost > t["high_hourly_cost"]:
            alerts.append(EquipmentAlert(
                AlertSeverity.WARNING, "Hourly cost seems high - check fuel/maintenance"
            ))
        if calc.recommended_rate < t["min_recommended_rate"]:
            alerts.append(EquipmentAlert(AlertSeverity.ERROR, "Rate may be unprofitable"))
        if calc.annual_hours < t["min_annual_hours"]:
            alerts.append(EquipmentAlert(AlertSeverity.INFO, "Low utilization - asset may be underused"))

        year = current_year or date.today().year
        if (
            equipment.age(year) > t["replacement_age_years"]
            and calc.hourly_cost > t["replacement_hourly_cost"]
        ):
            alerts.append(EquipmentAlert(
                AlertSeverity.WARNING,
                "Consider replacement - old equipment with high operating cost",
            ))

        return alerts

    @staticmethod
    def analyze_cost_breakdown(calc: EquipmentCalculation) -> CostBreakdown:
        """
        Percentage of total annual cost per component.

        Insurance is the remainder after the other three so the four always
        sum to 100. A zero total yields all zeros.
        """
        total = calc.total_annual_cost
        if total == 0:
            return CostBreakdown(0.0, 0.0, 0.0, 0.0)

        depreciation_pct = float(calc.annual_depreciation / total * 100)
        fuel_pct = float(calc.annual_fuel / total * 100)
        maintenance_pct = float(calc.annual_maintenance / total * 100)
        return CostBreakdown(
            depreciation_pct=depreciation_pct,
            fuel_pct=fuel_pct,
            maintenance_pct=maintenance_pct,
            insurance_pct=100.0 - depreciation_pct - fuel_pct - maintenance_pct,
        )
