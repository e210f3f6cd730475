"""
Transport Estimator - Round-trip drive time from the base to a project site.

The geocoding and routing lookups are delegated to a RoutingClient; the
estimator only doubles the one-way time and rounds it. Any failure of the client
is absorbed: the estimate is skipped and callers keep their previous value.
"""
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional, Tuple

from treeshop.domain.exceptions import RoutingError
from treeshop.domain.money import to_decimal

logger = logging.getLogger(__name__)

Coordinates = Tuple[float, float]


class RoutingClient(ABC):
    """Geocoding/routing collaborator."""

    @abstractmethod
    def geocode(self, address: str) -> Coordinates:
        """
        Resolve a free-text address or zip code.

        Raises:
            RoutingError: If the address cannot be resolved
        """
        pass

    @abstractmethod
    def travel_time_hours(self, origin: Coordinates, destination: Coordinates) -> float:
        """
        One-way driving time in hours.

        Raises:
            RoutingError: If no route is found
        """
        pass


def round_to_increment(hours: Decimal, increment: Decimal = Decimal("0.5")) -> Decimal:
    """Round to the nearest increment, halves rounding up."""
    steps = (hours / increment).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return steps * increment


class TransportEstimator:
    """
    Estimates billable transport hours for a quote.

    Usage:
        estimator = TransportEstimator(client, base_address="123 Yard Rd")
        hours = estimator.estimate("32801")   # None when routing fails
    """

    def __init__(
        self,
        client: RoutingClient,
        base_address: str,
        rounding_increment: Decimal = Decimal("0.5"),
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.client = client
        self.base_address = base_address
        self.rounding_increment = to_decimal(rounding_increment)
        self._executor = executor

    def round_trip_hours(self, one_way_hours) -> Decimal:
        """Double the one-way time and round to the configured increment."""
        return round_to_increment(to_decimal(one_way_hours) * 2, self.rounding_increment)

    def estimate(self, project_location: str) -> Optional[Decimal]:
        """
        Look up round-trip hours to a project location.

        Returns:
            Rounded round-trip hours, or None if any lookup failed
        """
        try:
            origin = self.client.geocode(self.base_address)
            destination = self.client.geocode(project_location)
            one_way = self.client.travel_time_hours(origin, destination)
        except RoutingError as e:
            logger.warning(f"Transport estimate for '{project_location}' skipped: {e.message}")
            return None
        except Exception as e:
            logger.warning(
                f"Transport estimate for '{project_location}' skipped: "
                f"routing client failed ({type(e).__name__}: {e})"
            )
            return None

        hours = self.round_trip_hours(one_way)
        logger.info(f"Transport estimate for '{project_location}': {hours}h round trip")
        return hours

    def estimate_async(
        self,
        project_location: str,
        on_success: Callable[[Decimal], None],
    ) -> Future:
        """
        Run estimate() on a worker thread.

        on_success is called with the hours only when the estimate succeeds.
        The returned future resolves to the hours or None.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="transport")

        def _run() -> Optional[Decimal]:
            hours = self.estimate(project_location)
            if hours is not None:
                on_success(hours)
            return hours

        return self._executor.submit(_run)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
