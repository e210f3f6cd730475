"""
Tests for transport time estimation.
"""
import logging
import pytest
from decimal import Decimal

from treeshop.domain.exceptions import RoutingError
from treeshop.domain.services import RoutingClient, TransportEstimator, round_to_increment


class RecordingRoutingClient(RoutingClient):
    """Routing client that records lookups."""

    def __init__(self, one_way_hours=1.0, unknown=()):
        self.one_way_hours = one_way_hours
        self.unknown = set(unknown)
        self.geocoded = []

    def geocode(self, address):
        self.geocoded.append(address)
        if address in self.unknown:
            raise RoutingError(f"Could not geocode '{address}'")
        return (float(len(address)), 0.0)

    def travel_time_hours(self, origin, destination):
        if self.one_way_hours is None:
            raise RoutingError("No route found")
        return self.one_way_hours


class TestRounding:
    """Tests for half-hour rounding."""

    @pytest.mark.parametrize("hours,expected", [
        ("2.25", "2.5"),
        ("2.2", "2.0"),
        ("2.74", "2.5"),
        ("2.75", "3.0"),
        ("0", "0"),
    ])
    def test_round_to_half_hour(self, hours, expected):
        assert round_to_increment(Decimal(hours)) == Decimal(expected)

    def test_custom_increment(self):
        assert round_to_increment(Decimal("1.1"), Decimal("0.25")) == Decimal("1.0")

    def test_round_trip_doubles(self):
        estimator = TransportEstimator(RecordingRoutingClient(), base_address="Base")
        assert estimator.round_trip_hours(0.6) == Decimal("1.0")
        assert estimator.round_trip_hours(Decimal("1.3")) == Decimal("2.5")


class TestEstimate:
    """Tests for TransportEstimator.estimate."""

    def test_success(self):
        client = RecordingRoutingClient(one_way_hours=1.2)
        estimator = TransportEstimator(client, base_address="100 Yard Rd")

        assert estimator.estimate("32801") == Decimal("2.5")
        assert client.geocoded == ["100 Yard Rd", "32801"]

    def test_geocode_failure_returns_none(self, caplog):
        client = RecordingRoutingClient(unknown={"99999"})
        estimator = TransportEstimator(client, base_address="Base")

        with caplog.at_level(logging.WARNING):
            assert estimator.estimate("99999") is None
        assert "skipped" in caplog.text

    def test_route_failure_returns_none(self):
        estimator = TransportEstimator(RecordingRoutingClient(one_way_hours=None), base_address="Base")
        assert estimator.estimate("32801") is None

    def test_base_address_failure_stops_lookup(self):
        client = RecordingRoutingClient(unknown={"Base"})
        estimator = TransportEstimator(client, base_address="Base")

        assert estimator.estimate("32801") is None
        assert client.geocoded == ["Base"]

    def test_client_crash_returns_none(self, caplog):
        """Failures outside RoutingError are absorbed too."""
        class BrokenClient(RecordingRoutingClient):
            def travel_time_hours(self, origin, destination):
                raise ConnectionError("network down")

        estimator = TransportEstimator(BrokenClient(), base_address="Base")
        with caplog.at_level(logging.WARNING):
            assert estimator.estimate("32801") is None
        assert "ConnectionError" in caplog.text


class TestEstimateAsync:
    """Tests for background estimation."""

    def test_callback_on_success(self):
        received = []
        estimator = TransportEstimator(RecordingRoutingClient(one_way_hours=2), base_address="Base")

        future = estimator.estimate_async("32801", received.append)
        assert future.result(timeout=5) == Decimal("4.0")
        assert received == [Decimal("4.0")]
        estimator.shutdown()

    def test_no_callback_on_failure(self):
        received = []
        estimator = TransportEstimator(RecordingRoutingClient(unknown={"x"}), base_address="Base")

        future = estimator.estimate_async("x", received.append)
        assert future.result(timeout=5) is None
        assert received == []
        estimator.shutdown()
