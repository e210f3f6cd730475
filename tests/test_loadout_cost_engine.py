"""
Unit Tests for the Loadout Cost Engine.

Tests business rules:
- Operating cost is the sum of member hourly costs
- Billing rate from markup or custom override
- Revenue projections and profitability bands
- Optimization suggestions
"""
import logging
import pytest
from decimal import Decimal
from uuid import uuid4

from treeshop.domain.entities.employee import Employee, EmployeeCompensation
from treeshop.domain.entities.equipment import Equipment, EquipmentCalculation
from treeshop.domain.entities.loadout import (
    Loadout,
    LoadoutCrew,
    LoadoutPricing,
    ProfitabilityCategory,
)
from treeshop.domain.services import (
    EmployeeCostEngine,
    LoadoutCostEngine,
    OptimizationPriority,
    OptimizationType,
)


def equipment_with_hourly_cost(hourly_cost: str) -> Equipment:
    cost = Decimal(hourly_cost)
    return Equipment(calculated=EquipmentCalculation(
        annual_hours=Decimal("1200"),
        annual_depreciation=Decimal("0"),
        annual_fuel=Decimal("0"),
        annual_maintenance=Decimal("0"),
        annual_insurance=Decimal("0"),
        total_annual_cost=cost * 1200,
        hourly_cost=cost,
        recommended_rate=cost * Decimal("1.3"),
    ))


@pytest.fixture
def engine():
    return LoadoutCostEngine()


@pytest.fixture
def employee():
    """Entry-level operator at $32/h true cost."""
    return EmployeeCostEngine().calculate(
        Employee(first_name="Ana", compensation=EmployeeCompensation(base_hourly_rate=Decimal("20")))
    )


@pytest.fixture
def mulcher():
    return equipment_with_hourly_cost("40")


@pytest.fixture
def loadout(employee, mulcher):
    return Loadout(
        name="Mulching crew",
        crew=LoadoutCrew(employee_ids=[employee.id], equipment_ids=[mulcher.id]),
    )


class TestLoadoutCalculation:
    """Tests for LoadoutCostEngine.calculate."""

    def test_markup_billing(self, engine, loadout, employee, mulcher):
        calc = engine.calculate(
            loadout.crew, loadout.pricing, {employee.id: employee}, {mulcher.id: mulcher},
        )
        assert calc.total_employee_cost == Decimal("32")
        assert calc.total_equipment_cost == Decimal("40")
        assert calc.total_operating_cost == Decimal("72")
        assert calc.billing_rate == Decimal("180")
        assert calc.hourly_profit == Decimal("108")
        assert calc.profit_margin == pytest.approx(0.6)
        assert calc.profitability == ProfitabilityCategory.EXCELLENT

    def test_projections(self, engine, loadout, employee, mulcher):
        calc = engine.calculate(
            loadout.crew, loadout.pricing, {employee.id: employee}, {mulcher.id: mulcher},
        )
        assert calc.daily_revenue == Decimal("1440")
        assert calc.weekly_revenue == Decimal("7200")
        assert calc.monthly_revenue == Decimal("28800")
        assert calc.daily_profit == Decimal("864")
        assert calc.cost_efficiency_ratio == pytest.approx(2.5)

    def test_custom_rate_override(self, engine, loadout, employee, mulcher):
        pricing = LoadoutPricing(custom_rate_override=Decimal("100"))
        calc = engine.calculate(loadout.crew, pricing, {employee.id: employee}, {mulcher.id: mulcher})

        assert calc.billing_rate == Decimal("100")
        assert calc.profit_margin == pytest.approx(0.28)
        assert calc.profitability == ProfitabilityCategory.ACCEPTABLE

    def test_zero_override_uses_markup(self, engine, loadout, employee, mulcher):
        pricing = LoadoutPricing(custom_rate_override=Decimal("0"))
        calc = engine.calculate(loadout.crew, pricing, {employee.id: employee}, {mulcher.id: mulcher})
        assert calc.billing_rate == Decimal("180")

    def test_unknown_members_skipped(self, engine, employee, caplog):
        crew = LoadoutCrew(employee_ids=[employee.id, uuid4()], equipment_ids=[uuid4()])
        with caplog.at_level(logging.WARNING):
            calc = engine.calculate(crew, LoadoutPricing(), {employee.id: employee}, {})

        assert calc.total_operating_cost == Decimal("32")
        assert "unknown employee" in caplog.text
        assert "unknown equipment" in caplog.text

    def test_uncalculated_equipment_contributes_zero(self, engine):
        calc = engine.calculate_from_members([], [Equipment()], LoadoutPricing())
        assert calc.total_equipment_cost == Decimal("0")

    def test_empty_crew(self, engine):
        calc = engine.calculate(LoadoutCrew(), LoadoutPricing(), {}, {})
        assert calc.billing_rate == Decimal("0")
        assert calc.profit_margin == 0.0
        assert calc.profitability == ProfitabilityCategory.POOR
        assert calc.cost_efficiency_ratio == 0.0

    def test_refresh_attaches_calculation(self, engine, loadout, employee, mulcher):
        engine.refresh(loadout, {employee.id: employee}, {mulcher.id: mulcher})
        assert loadout.calculated.billing_rate == Decimal("180")


class TestProfitabilityBands:
    """Tests for profitability categorisation."""

    @pytest.mark.parametrize("margin,expected", [
        (0.50, ProfitabilityCategory.EXCELLENT),
        (0.4999, ProfitabilityCategory.GOOD),
        (0.35, ProfitabilityCategory.GOOD),
        (0.20, ProfitabilityCategory.ACCEPTABLE),
        (0.1999, ProfitabilityCategory.POOR),
        (-0.5, ProfitabilityCategory.POOR),
    ])
    def test_band_edges(self, engine, margin, expected):
        assert engine.categorize(margin) == expected

    def test_custom_bands(self):
        engine = LoadoutCostEngine(profitability_bands={"excellent": 0.7})
        assert engine.categorize(0.6) == ProfitabilityCategory.GOOD


class TestOptimizationSuggestions:
    """Tests for optimization_suggestions."""

    def test_uncalculated_loadout(self, loadout):
        assert LoadoutCostEngine.optimization_suggestions(loadout) == []

    def test_all_suggestions_in_priority_order(self, engine):
        pieces = [equipment_with_hourly_cost("50") for _ in range(2)]
        loadout = Loadout(
            crew=LoadoutCrew(equipment_ids=[p.id for p in pieces]),
            pricing=LoadoutPricing(custom_rate_override=Decimal("110")),
        )
        engine.refresh(loadout, {}, {p.id: p for p in pieces})

        suggestions = engine.optimization_suggestions(loadout)
        assert [s.type for s in suggestions] == [
            OptimizationType.COST_REDUCTION,
            OptimizationType.BALANCING,
            OptimizationType.UTILIZATION,
        ]
        assert [s.priority for s in suggestions] == [
            OptimizationPriority.HIGH,
            OptimizationPriority.MEDIUM,
            OptimizationPriority.LOW,
        ]

    def test_healthy_established_loadout(self, engine, loadout, employee, mulcher):
        loadout.times_used = 12
        engine.refresh(loadout, {employee.id: employee}, {mulcher.id: mulcher})
        assert engine.optimization_suggestions(loadout) == []
