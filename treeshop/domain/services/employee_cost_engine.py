"""
Employee Cost Engine - True hourly cost of a crew member.

true_hourly_cost = base_hourly_rate x (role multiplier + skill tier multiplier)
                   + leadership, equipment, driver, certification and
                     cross-training premiums
billing_rate     = true_hourly_cost x labor markup
"""
from decimal import Decimal

from treeshop.domain.entities.employee import (
    SKILL_TIER_MULTIPLIERS,
    Employee,
    EmployeeCalculation,
    EmployeeCompensation,
    EmployeeQualifications,
    LeadershipLevel,
)
from treeshop.domain.money import ZERO, to_decimal

LABOR_MARKUP = Decimal("2.5")
UNKNOWN_TIER_MULTIPLIER = Decimal("0.1")


def build_qualification_code(qualifications: EmployeeQualifications) -> str:
    """
    Compact qualification code, e.g. 'TRS3+S+E2+E3+D2+ISAX-EQO2'.

    Order: role+tier, leadership, equipment levels (sorted), driver class,
    professional certifications (sorted), cross training (as entered).
    """
    parts = [f"{qualifications.primary_role.value}{qualifications.tier}"]
    if qualifications.leadership_level != LeadershipLevel.NONE:
        parts.append(qualifications.leadership_level.value)
    parts.extend(sorted(level.value for level in qualifications.equipment_certifications))
    if qualifications.driver_classification is not None:
        parts.append(qualifications.driver_classification.value)
    parts.extend(sorted(cert.value for cert in qualifications.professional_certifications))
    parts.extend(training.code for training in qualifications.cross_training)
    return "".join(parts)


class EmployeeCostEngine:

    def __init__(self, labor_markup: Decimal = LABOR_MARKUP):
        self.labor_markup = to_decimal(labor_markup)

    @staticmethod
    def tier_multiplier(tier: int) -> Decimal:
        return SKILL_TIER_MULTIPLIERS.get(tier, UNKNOWN_TIER_MULTIPLIER)

    def calculate_true_hourly_cost(
        self,
        qualifications: EmployeeQualifications,
        compensation: EmployeeCompensation,
    ) -> EmployeeCalculation:
        base_multiplier = (
            qualifications.primary_role.base_multiplier + self.tier_multiplier(qualifications.tier)
        )
        leadership_premium = qualifications.leadership_level.premium
        equipment_premium = sum(
            (level.premium for level in qualifications.equipment_certifications), ZERO
        )
        driver_premium = (
            qualifications.driver_classification.premium
            if qualifications.driver_classification is not None else ZERO
        )
        certification_premium = sum(
            (cert.premium for cert in qualifications.professional_certifications), ZERO
        )
        cross_training_premium = sum(
            (training.premium for training in qualifications.cross_training), ZERO
        )

        true_hourly_cost = (
            to_decimal(compensation.base_hourly_rate) * base_multiplier
            + leadership_premium
            + equipment_premium
            + driver_premium
            + certification_premium
            + cross_training_premium
        )
        billing_rate = true_hourly_cost * self.labor_markup
        profit_margin = (
            float((billing_rate - true_hourly_cost) / billing_rate) * 100 if billing_rate > 0 else 0.0
        )

        return EmployeeCalculation(
            base_multiplier=base_multiplier,
            leadership_premium=leadership_premium,
            equipment_premium=equipment_premium,
            driver_premium=driver_premium,
            certification_premium=certification_premium,
            cross_training_premium=cross_training_premium,
            true_hourly_cost=true_hourly_cost,
            billing_rate=billing_rate,
            profit_margin=profit_margin,
        )

    def calculate(self, employee: Employee) -> Employee:
        """Refresh the calculation attached to an employee record."""
        employee.calculated = self.calculate_true_hourly_cost(
            employee.qualifications, employee.compensation,
        )
        return employee
