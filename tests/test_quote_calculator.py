"""
Unit Tests for Quote Calculation.

Tests business rules:
- Base, transport and debris costs
- Debris estimates only for max tiers
- Markup, deposit and balance split
- Quote session recomputation and transport refresh
"""
import pytest
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from treeshop.domain.entities.pricing import PackageTier, PricingSettings, RateTable
from treeshop.domain.exceptions import RoutingError, UnknownTierError
from treeshop.domain.services import QuoteCalculator, QuoteSession, RoutingClient, TransportEstimator


class FixedRoutingClient(RoutingClient):
    """Routing client returning a fixed one-way time, or failing."""

    def __init__(self, one_way_hours=1.2, fail=False):
        self.one_way_hours = one_way_hours
        self.fail = fail

    def geocode(self, address):
        if self.fail:
            raise RoutingError(f"No match for {address}")
        return (28.5, -81.4)

    def travel_time_hours(self, origin, destination):
        return self.one_way_hours


@pytest.fixture
def calculator():
    return QuoteCalculator(RateTable(), PricingSettings())


class TestCalculateQuote:
    """Tests for QuoteCalculator.calculate_quote."""

    def test_medium_tier_quote(self, calculator):
        """2.5 acres medium with 2 transport hours."""
        quote = calculator.calculate_quote(Decimal("2.5"), PackageTier.MEDIUM, Decimal("2"))

        assert quote.base_cost == Decimal("6250")
        assert quote.transport_cost == Decimal("300")
        assert quote.debris_cost == Decimal("0")
        assert quote.subtotal == Decimal("6550")
        assert quote.final_price == Decimal("7532.50")
        assert quote.deposit_amount == Decimal("1883.125")
        assert quote.balance_due == Decimal("5649.375")

    def test_deposit_plus_balance_is_final_price(self, calculator):
        quote = calculator.calculate_quote("3.7", "xlarge", "1.5", "12")
        assert quote.deposit_amount + quote.balance_due == quote.final_price

    def test_max_tier_includes_estimated_debris(self, calculator):
        quote = calculator.calculate_quote(4, "maxLight", 0)

        assert quote.base_cost == Decimal("32000")
        assert quote.estimated_debris_yards == Decimal("2000")
        assert quote.debris_cost == Decimal("40000")
        assert quote.subtotal == Decimal("72000")

    def test_max_tier_with_transport(self, calculator):
        quote = calculator.calculate_quote(4, PackageTier.MAX_LIGHT, 2)
        assert quote.subtotal == Decimal("72300")

    def test_manual_debris_billed_on_any_tier(self, calculator):
        quote = calculator.calculate_quote(1, PackageTier.SMALL, 0, manual_debris_yards=10)
        assert quote.estimated_debris_yards == Decimal("0")
        assert quote.total_debris_yards == Decimal("10")
        assert quote.debris_cost == Decimal("200")

    def test_zero_acres(self, calculator):
        quote = calculator.calculate_quote(0, PackageTier.MEDIUM, 0)
        assert quote.final_price == Decimal("0")

    def test_override_rate_used(self):
        rate_table = RateTable()
        rate_table.set_rate(PackageTier.LARGE, Decimal("4000"))
        quote = QuoteCalculator(rate_table, PricingSettings()).calculate_quote(1, "large", 0)
        assert quote.base_cost == Decimal("4000")

    def test_unknown_tier(self, calculator):
        with pytest.raises(UnknownTierError):
            calculator.calculate_quote(1, "huge", 0)


class TestQuoteSession:
    """Tests for QuoteSession."""

    def test_defaults(self, calculator):
        session = QuoteSession(calculator)
        assert session.breakdown.final_price == Decimal("7532.50")

    def test_breakdown_follows_inputs(self, calculator):
        session = QuoteSession(calculator)
        session.acres = Decimal("1")
        session.tier = PackageTier.SMALL
        assert session.breakdown.base_cost == Decimal("2125")

    def test_breakdown_follows_rate_table(self, calculator):
        session = QuoteSession(calculator)
        calculator.rate_table.set_base_rate(Decimal("3000"))
        assert session.breakdown.base_cost == Decimal("7500")

    def test_refresh_updates_hours(self, calculator):
        estimator = TransportEstimator(FixedRoutingClient(1.2), base_address="Base")
        session = QuoteSession(calculator, project_zip_code="32801", estimator=estimator)

        assert session.refresh_transport_estimate() is True
        assert session.transport_hours == Decimal("2.5")
        assert session.breakdown.transport_cost == Decimal("375")

    def test_refresh_failure_keeps_hours(self, calculator):
        estimator = TransportEstimator(FixedRoutingClient(fail=True), base_address="Base")
        session = QuoteSession(
            calculator, project_zip_code="00000",
            transport_hours=Decimal("3"), estimator=estimator,
        )

        assert session.refresh_transport_estimate() is False
        assert session.transport_hours == Decimal("3")

    def test_refresh_network_error_keeps_hours(self, calculator):
        class OfflineClient(FixedRoutingClient):
            def geocode(self, address):
                raise ConnectionError("network down")

        estimator = TransportEstimator(OfflineClient(), base_address="Base")
        session = QuoteSession(calculator, project_zip_code="32801", estimator=estimator)

        assert session.refresh_transport_estimate() is False
        assert session.transport_hours == Decimal("2.0")

        future = session.refresh_transport_estimate_async()
        assert future.result(timeout=5) is None
        assert session.transport_hours == Decimal("2.0")
        estimator.shutdown()

    def test_refresh_without_zip(self, calculator):
        estimator = TransportEstimator(FixedRoutingClient(), base_address="Base")
        session = QuoteSession(calculator, estimator=estimator)
        assert session.refresh_transport_estimate() is False
        assert session.refresh_transport_estimate_async() is None

    def test_async_refresh(self, calculator):
        executor = ThreadPoolExecutor(max_workers=1)
        estimator = TransportEstimator(FixedRoutingClient(0.6), base_address="Base", executor=executor)
        session = QuoteSession(calculator, project_zip_code="32801", estimator=estimator)

        future = session.refresh_transport_estimate_async()
        assert future.result(timeout=5) == Decimal("1.0")
        assert session.transport_hours == Decimal("1.0")
        estimator.shutdown()

    def test_async_refresh_failure(self, calculator):
        estimator = TransportEstimator(FixedRoutingClient(fail=True), base_address="Base")
        session = QuoteSession(calculator, project_zip_code="32801", estimator=estimator)

        future = session.refresh_transport_estimate_async()
        assert future.result(timeout=5) is None
        assert session.transport_hours == Decimal("2.0")
        estimator.shutdown()
