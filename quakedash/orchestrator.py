"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the feed client. It owns the only mutable state of the
application: the current fetch and the selected earthquake.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock

from quakedash.core.aggregates import DashboardView, build_dashboard, distinct_countries
from quakedash.core.config import Config
from quakedash.core.earthquake import Earthquake, FeedParseError, parse_feed
from quakedash.core.feeds import FeedEndpoint, select_endpoint
from quakedash.core.filters import FilterConfig, filter_by_date_window
from quakedash.shell.feed_client import FeedClient, FeedFetchError


logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Result of one fetch attempt.

    Attributes:
        generation: Request token assigned when the fetch started
        endpoint: Feed that was requested
        earthquakes_fetched: Records normalized from the feed
        earthquakes_kept: Records left after the custom date window
        committed: Whether the records replaced the current data
        error: Error message if the fetch failed
    """
    generation: int
    endpoint: FeedEndpoint
    earthquakes_fetched: int = 0
    earthquakes_kept: int = 0
    committed: bool = False
    error: str | None = None

    @property
    def success(self) -> bool:
        """Returns True if the fetch produced data (committed or not)."""
        return self.error is None

    @property
    def summary(self) -> str:
        """Human-readable summary of the fetch."""
        if self.error:
            return f"Fetch #{self.generation} of {self.endpoint.label} failed: {self.error}"
        state = "committed" if self.committed else "discarded (superseded)"
        return (
            f"Fetch #{self.generation} of {self.endpoint.label}: "
            f"{self.earthquakes_fetched} fetched, {self.earthquakes_kept} kept, {state}"
        )


class FetchOrchestrator:
    """Coordinates feed fetching and dashboard computation.

    Each fetch gets a generation number when it starts. When a fetch
    completes, its records are committed only if no newer fetch has
    started in the meantime, so a slow response for an old time range
    never overwrites a newer one. Failed fetches leave the current
    records untouched.
    """

    def __init__(
        self,
        config: Config,
        feed_client: FeedClient | None = None,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            feed_client: Feed client (created if not provided)
        """
        self.config = config
        self.feed_client = feed_client or FeedClient(
            base_url=config.feed_base_url,
            timeout=config.request_timeout_seconds,
        )
        self._lock = Lock()
        self._latest_generation = 0
        self._earthquakes: list[Earthquake] = []
        self._fetch_key: tuple | None = None
        self._fetched_at: datetime | None = None
        self._selected_id: str | None = None
        self.last_error: str | None = None

    @property
    def earthquakes(self) -> list[Earthquake]:
        """Records of the last committed fetch."""
        return list(self._earthquakes)

    @property
    def fetched_at(self) -> datetime | None:
        return self._fetched_at

    @property
    def has_data(self) -> bool:
        return self._fetch_key is not None

    def _start_generation(self) -> int:
        with self._lock:
            self._latest_generation += 1
            return self._latest_generation

    def _commit(
        self,
        generation: int,
        earthquakes: list[Earthquake],
        fetch_key: tuple,
    ) -> bool:
        """Replace current records if this fetch is still the latest."""
        with self._lock:
            if generation != self._latest_generation:
                return False
            self._earthquakes = earthquakes
            self._fetch_key = fetch_key
            self._fetched_at = datetime.now(timezone.utc)
            self.last_error = None
            return True

    def needs_fetch(self, filters: FilterConfig) -> bool:
        """True if the current data does not match what the filters ask for."""
        return self._fetch_key != filters.fetch_key

    def fetch(self, filters: FilterConfig) -> FetchResult:
        """Fetch the feed selected by the filters and replace current data.

        Args:
            filters: Filters deciding the feed and custom date window

        Returns:
            FetchResult describing what happened
        """
        generation = self._start_generation()
        endpoint = select_endpoint(filters.time_range, filters.use_custom_date)
        result = FetchResult(generation=generation, endpoint=endpoint)
        tz = self.config.tz

        try:
            geojson = self.feed_client.fetch_feed(endpoint)
            earthquakes = parse_feed(geojson, tz, self.config.country_overrides)
        except (FeedFetchError, FeedParseError) as e:
            result.error = str(e)
            with self._lock:
                if generation == self._latest_generation:
                    self.last_error = result.error
            logger.error("Fetch #%d of %s failed: %s", generation, endpoint.label, e)
            return result

        result.earthquakes_fetched = len(earthquakes)

        if filters.use_custom_date:
            earthquakes = filter_by_date_window(
                earthquakes,
                filters.custom_start_date,
                filters.custom_end_date,
                tz,
            )

        result.earthquakes_kept = len(earthquakes)
        result.committed = self._commit(generation, earthquakes, filters.fetch_key)

        if result.committed:
            logger.info("%s", result.summary)
        else:
            logger.info("Discarding fetch #%d: a newer fetch has started", generation)

        return result

    def refresh(self, filters: FilterConfig, force: bool = False) -> FetchResult | None:
        """Fetch only if the filters ask for different data (or force is set).

        Returns:
            FetchResult if a fetch was made, None otherwise
        """
        if force or self.needs_fetch(filters):
            return self.fetch(filters)
        return None

    def select(self, earthquake_id: str | None) -> Earthquake | None:
        """Set the selected earthquake; None clears the selection.

        Returns:
            The selected record, or None if the id is not in the current data
        """
        with self._lock:
            if earthquake_id is None:
                self._selected_id = None
                return None

            earthquake = self.find(earthquake_id)
            if earthquake is not None:
                self._selected_id = earthquake_id
            return earthquake

    @property
    def selected(self) -> Earthquake | None:
        """The selected record, if it is still in the current data."""
        if self._selected_id is None:
            return None
        return self.find(self._selected_id)

    def find(self, earthquake_id: str) -> Earthquake | None:
        for earthquake in self._earthquakes:
            if earthquake.id == earthquake_id:
                return earthquake
        return None

    def countries(self) -> list[str]:
        """Distinct countries of the current (unfiltered) fetch."""
        return distinct_countries(self._earthquakes)

    def view(
        self,
        filters: FilterConfig,
        timeline_limit: int | None = None,
    ) -> DashboardView:
        """Compute all dashboard views for the current data.

        Pure with respect to the stored records: nothing is mutated.
        """
        return build_dashboard(
            self.earthquakes,
            filters,
            self.config,
            timeline_limit=timeline_limit,
        )
