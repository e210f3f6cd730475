"""
Unit Tests for the Employee Cost Engine.

Tests business rules:
- Role and skill tier multipliers on the base wage
- Flat premiums for leadership, equipment, driver class,
  certifications and cross training
- Billing rate and profit margin at the labor markup
- Qualification code format
"""
import pytest
from decimal import Decimal

from treeshop.domain.entities.employee import (
    CrossTraining,
    DriverClass,
    Employee,
    EmployeeCompensation,
    EmployeeQualifications,
    EquipmentLevel,
    LeadershipLevel,
    PrimaryRole,
    ProfessionalCertification,
)
from treeshop.domain.services import EmployeeCostEngine, build_qualification_code


@pytest.fixture
def engine():
    return EmployeeCostEngine()


@pytest.fixture
def senior_qualifications():
    return EmployeeQualifications(
        primary_role=PrimaryRole.TRS,
        tier=3,
        leadership_level=LeadershipLevel.SUPERVISOR,
        equipment_certifications=[EquipmentLevel.E3, EquipmentLevel.E2],
        driver_classification=DriverClass.D2,
        professional_certifications=[ProfessionalCertification.ISA],
        cross_training=[CrossTraining(role=PrimaryRole.EQO, tier=2)],
    )


class TestQualificationCode:
    """Tests for build_qualification_code."""

    def test_full_code(self, senior_qualifications):
        assert build_qualification_code(senior_qualifications) == "TRS3+S+E2+E3+D2+ISAX-EQO2"

    def test_entry_level_code(self):
        assert build_qualification_code(EmployeeQualifications()) == "LCL1"

    def test_certifications_sorted(self):
        qualifications = EmployeeQualifications(
            primary_role=PrimaryRole.ATC,
            tier=2,
            professional_certifications=[ProfessionalCertification.TRA, ProfessionalCertification.CPR],
        )
        assert build_qualification_code(qualifications) == "ATC2+CPR+TRA"


class TestTrueHourlyCost:
    """Tests for EmployeeCostEngine.calculate_true_hourly_cost."""

    def test_entry_level(self, engine):
        calc = engine.calculate_true_hourly_cost(
            EmployeeQualifications(), EmployeeCompensation(base_hourly_rate=Decimal("20")),
        )
        assert calc.base_multiplier == Decimal("1.6")
        assert calc.true_hourly_cost == Decimal("32")
        assert calc.billing_rate == Decimal("80")
        assert calc.profit_margin == pytest.approx(60.0)
        assert calc.annual_cost == Decimal("66560")

    def test_senior_with_premiums(self, engine, senior_qualifications):
        calc = engine.calculate_true_hourly_cost(
            senior_qualifications, EmployeeCompensation(base_hourly_rate=Decimal("25")),
        )
        assert calc.base_multiplier == Decimal("2.0")
        assert calc.leadership_premium == Decimal("5.0")
        assert calc.equipment_premium == Decimal("5.5")
        assert calc.driver_premium == Decimal("2.5")
        assert calc.certification_premium == Decimal("3.0")
        assert calc.cross_training_premium == Decimal("1.0")
        assert calc.true_hourly_cost == Decimal("67")
        assert calc.billing_rate == Decimal("167.5")

    def test_unknown_tier_multiplier(self, engine):
        assert engine.tier_multiplier(9) == Decimal("0.1")
        assert engine.tier_multiplier(5) == Decimal("0.6")

    def test_zero_wage(self, engine):
        calc = engine.calculate_true_hourly_cost(EmployeeQualifications(), EmployeeCompensation())
        assert calc.true_hourly_cost == Decimal("0")
        assert calc.profit_margin == 0.0

    def test_custom_markup(self):
        engine = EmployeeCostEngine(labor_markup=Decimal("2"))
        calc = engine.calculate_true_hourly_cost(
            EmployeeQualifications(), EmployeeCompensation(base_hourly_rate=Decimal("20")),
        )
        assert calc.billing_rate == Decimal("64")
        assert calc.profit_margin == pytest.approx(50.0)


class TestEmployeeRecord:
    """Tests for Employee helpers."""

    def test_true_hourly_cost_before_calculation(self):
        assert Employee().true_hourly_cost == Decimal("0")

    def test_calculate_attaches_result(self, engine):
        employee = engine.calculate(Employee(
            first_name="Ana", compensation=EmployeeCompensation(base_hourly_rate=Decimal("20")),
        ))
        assert employee.true_hourly_cost == Decimal("32")

    def test_search_text(self):
        employee = Employee(first_name="Ana", last_name="Ruiz", employee_number="E-7")
        assert employee.search_text() == "Ana Ruiz E-7 LCL"

    def test_dict_round_trip(self, senior_qualifications):
        employee = Employee(
            first_name="Ana",
            qualifications=senior_qualifications,
            compensation=EmployeeCompensation(base_hourly_rate=Decimal("25")),
        )
        restored = Employee.from_dict(employee.to_dict())
        assert restored.qualifications == senior_qualifications
        assert restored.compensation.base_hourly_rate == Decimal("25")
        assert restored.calculated is None
