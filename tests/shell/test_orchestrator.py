"""Tests for the Orchestrator module.

Tests the coordination between functional core and imperative shell.
Uses mocks for shell components to test orchestration logic.
"""

import threading
from datetime import date
from unittest.mock import Mock

import pytest

from quakedash.core.config import Config
from quakedash.core.earthquake import FeedParseError
from quakedash.core.feeds import FEED_ENDPOINTS, TimeRange
from quakedash.core.filters import FilterConfig
from quakedash.orchestrator import FetchOrchestrator, FetchResult
from quakedash.shell.feed_client import FeedFetchError


JAN_10_MS = 1704844800000
DAY_MS = 86400 * 1000


def make_feature(event_id, mag=4.5, place="120km SE of Tokyo, Japan", time_ms=JAN_10_MS, depth=10.0):
    """Create a GeoJSON feature for testing."""
    return {
        "id": event_id,
        "properties": {"mag": mag, "place": place, "time": time_ms},
        "geometry": {"coordinates": [140.5, 35.1, depth]},
    }


@pytest.fixture
def sample_feed():
    return {
        "features": [
            make_feature("a", mag=5.2),
            make_feature("b", mag=3.1, place="50km W of Valparaiso, Chile"),
            make_feature("c", mag=7.0, place="Kuril Islands", depth=-3.0),
        ]
    }


@pytest.fixture
def mock_feed_client(sample_feed):
    """Create a mock feed client."""
    client = Mock()
    client.fetch_feed.return_value = sample_feed
    return client


@pytest.fixture
def orchestrator(mock_feed_client):
    return FetchOrchestrator(Config(), feed_client=mock_feed_client)


class TestFetch:
    """Tests for FetchOrchestrator.fetch()."""

    def test_fetches_selected_feed(self, orchestrator, mock_feed_client):
        result = orchestrator.fetch(FilterConfig(time_range=TimeRange.WEEK))

        mock_feed_client.fetch_feed.assert_called_once_with(FEED_ENDPOINTS[TimeRange.WEEK])
        assert result.success is True
        assert result.committed is True
        assert result.earthquakes_fetched == 3
        assert result.earthquakes_kept == 3

    def test_stores_normalized_records(self, orchestrator):
        orchestrator.fetch(FilterConfig())

        earthquakes = orchestrator.earthquakes
        assert [e.id for e in earthquakes] == ["a", "b", "c"]
        assert earthquakes[2].country == "Russia"
        assert earthquakes[2].depth == 3.0
        assert orchestrator.has_data is True
        assert orchestrator.fetched_at is not None

    def test_applies_configured_overrides(self, mock_feed_client):
        config = Config(country_overrides={"Chile": "Republic of Chile"})
        orchestrator = FetchOrchestrator(config, feed_client=mock_feed_client)

        orchestrator.fetch(FilterConfig())

        assert orchestrator.earthquakes[1].country == "Republic of Chile"

    def test_replaces_previous_data(self, orchestrator, mock_feed_client):
        orchestrator.fetch(FilterConfig())
        mock_feed_client.fetch_feed.return_value = {"features": [make_feature("z")]}

        orchestrator.fetch(FilterConfig(time_range=TimeRange.MONTH))

        assert [e.id for e in orchestrator.earthquakes] == ["z"]

    def test_fetch_error_keeps_previous_data(self, orchestrator, mock_feed_client):
        orchestrator.fetch(FilterConfig())
        mock_feed_client.fetch_feed.side_effect = FeedFetchError("HTTP 503", 503)

        result = orchestrator.fetch(FilterConfig(time_range=TimeRange.WEEK))

        assert result.success is False
        assert result.committed is False
        assert "503" in result.error
        assert orchestrator.last_error == result.error
        assert [e.id for e in orchestrator.earthquakes] == ["a", "b", "c"]

    def test_parse_error_keeps_previous_data(self, orchestrator, mock_feed_client):
        orchestrator.fetch(FilterConfig())
        mock_feed_client.fetch_feed.side_effect = FeedParseError("no features")

        result = orchestrator.fetch(FilterConfig())

        assert result.success is False
        assert len(orchestrator.earthquakes) == 3

    def test_malformed_body_is_parse_error(self, orchestrator, mock_feed_client):
        mock_feed_client.fetch_feed.return_value = {"unexpected": True}

        result = orchestrator.fetch(FilterConfig())

        assert result.success is False
        assert orchestrator.has_data is False

    def test_successful_fetch_clears_error(self, orchestrator, mock_feed_client):
        mock_feed_client.fetch_feed.side_effect = FeedFetchError("down")
        orchestrator.fetch(FilterConfig())
        mock_feed_client.fetch_feed.side_effect = None

        orchestrator.fetch(FilterConfig())

        assert orchestrator.last_error is None

    def test_does_not_retry(self, orchestrator, mock_feed_client):
        mock_feed_client.fetch_feed.side_effect = FeedFetchError("down")

        orchestrator.fetch(FilterConfig())

        assert mock_feed_client.fetch_feed.call_count == 1


class TestCustomDateFetch:
    """Tests for custom date windows."""

    def test_uses_month_feed_and_cuts_window(self, mock_feed_client):
        mock_feed_client.fetch_feed.return_value = {
            "features": [
                make_feature("before", time_ms=JAN_10_MS - 1),
                make_feature("inside", time_ms=JAN_10_MS + DAY_MS),
                make_feature("after", time_ms=JAN_10_MS + 3 * DAY_MS),
            ]
        }
        orchestrator = FetchOrchestrator(Config(), feed_client=mock_feed_client)
        filters = FilterConfig(
            time_range=TimeRange.DAY,
            use_custom_date=True,
            custom_start_date=date(2024, 1, 10),
            custom_end_date=date(2024, 1, 12),
        )

        result = orchestrator.fetch(filters)

        mock_feed_client.fetch_feed.assert_called_once_with(FEED_ENDPOINTS[TimeRange.MONTH])
        assert result.earthquakes_fetched == 3
        assert result.earthquakes_kept == 1
        assert [e.id for e in orchestrator.earthquakes] == ["inside"]


class TestGenerationToken:
    """Tests for discarding superseded fetches."""

    def test_older_fetch_completing_late_is_discarded(self, mock_feed_client):
        """A fetch started later wins even if the earlier one completes last."""
        orchestrator = FetchOrchestrator(Config(), feed_client=mock_feed_client)
        newer_results: list[FetchResult] = []

        def slow_day_feed(endpoint):
            if endpoint.time_range is TimeRange.DAY:
                # The user switches to "week" while the day feed is in flight
                newer_results.append(orchestrator.fetch(FilterConfig(time_range=TimeRange.WEEK)))
                return {"features": [make_feature("day-event")]}
            return {"features": [make_feature("week-event")]}

        mock_feed_client.fetch_feed.side_effect = slow_day_feed

        older = orchestrator.fetch(FilterConfig(time_range=TimeRange.DAY))

        assert newer_results[0].committed is True
        assert older.committed is False
        assert older.generation < newer_results[0].generation
        assert [e.id for e in orchestrator.earthquakes] == ["week-event"]
        assert orchestrator.needs_fetch(FilterConfig(time_range=TimeRange.WEEK)) is False

    def test_superseded_failure_does_not_set_error(self, mock_feed_client):
        orchestrator = FetchOrchestrator(Config(), feed_client=mock_feed_client)

        def failing_day_feed(endpoint):
            if endpoint.time_range is TimeRange.DAY:
                orchestrator.fetch(FilterConfig(time_range=TimeRange.WEEK))
                raise FeedFetchError("day feed down")
            return {"features": [make_feature("week-event")]}

        mock_feed_client.fetch_feed.side_effect = failing_day_feed

        orchestrator.fetch(FilterConfig(time_range=TimeRange.DAY))

        assert orchestrator.last_error is None
        assert [e.id for e in orchestrator.earthquakes] == ["week-event"]

    def test_generations_increase(self, orchestrator):
        first = orchestrator.fetch(FilterConfig())
        second = orchestrator.fetch(FilterConfig())

        assert second.generation == first.generation + 1


class TestRefresh:
    """Tests for FetchOrchestrator.refresh()."""

    def test_fetches_when_no_data(self, orchestrator, mock_feed_client):
        assert orchestrator.refresh(FilterConfig()) is not None
        assert mock_feed_client.fetch_feed.call_count == 1

    def test_skips_when_only_filters_change(self, orchestrator, mock_feed_client):
        orchestrator.refresh(FilterConfig())

        result = orchestrator.refresh(FilterConfig(min_magnitude=5, country="Japan"))

        assert result is None
        assert mock_feed_client.fetch_feed.call_count == 1

    def test_fetches_when_time_range_changes(self, orchestrator, mock_feed_client):
        orchestrator.refresh(FilterConfig())
        orchestrator.refresh(FilterConfig(time_range=TimeRange.MONTH))

        assert mock_feed_client.fetch_feed.call_count == 2

    def test_force_fetches_again(self, orchestrator, mock_feed_client):
        orchestrator.refresh(FilterConfig())
        orchestrator.refresh(FilterConfig(), force=True)

        assert mock_feed_client.fetch_feed.call_count == 2


class TestSelection:
    """Tests for selection handling."""

    def test_select_known_id(self, orchestrator):
        orchestrator.fetch(FilterConfig())

        selected = orchestrator.select("b")

        assert selected is not None
        assert selected.id == "b"
        assert orchestrator.selected == selected

    def test_select_unknown_id(self, orchestrator):
        orchestrator.fetch(FilterConfig())
        orchestrator.select("a")

        assert orchestrator.select("missing") is None
        assert orchestrator.selected.id == "a"

    def test_clear_selection(self, orchestrator):
        orchestrator.fetch(FilterConfig())
        orchestrator.select("a")

        orchestrator.select(None)

        assert orchestrator.selected is None

    def test_selection_does_not_affect_filtering(self, orchestrator):
        orchestrator.fetch(FilterConfig())
        orchestrator.select("b")

        view = orchestrator.view(FilterConfig(min_magnitude=5))

        assert [e.id for e in view.filtered] == ["a", "c"]

    def test_select_waits_for_commit_lock(self, orchestrator):
        """Selection is written under the same lock as fetch commits."""
        orchestrator.fetch(FilterConfig())
        worker = threading.Thread(target=orchestrator.select, args=("b",))

        with orchestrator._lock:
            worker.start()
            worker.join(timeout=0.2)
            assert worker.is_alive()
            assert orchestrator._selected_id is None

        worker.join(timeout=5)
        assert not worker.is_alive()
        assert orchestrator.selected.id == "b"

    def test_selection_gone_after_refetch(self, orchestrator, mock_feed_client):
        orchestrator.fetch(FilterConfig())
        orchestrator.select("a")
        mock_feed_client.fetch_feed.return_value = {"features": [make_feature("z")]}

        orchestrator.fetch(FilterConfig())

        assert orchestrator.selected is None


class TestView:
    """Tests for FetchOrchestrator.view()."""

    def test_view_without_data_is_empty(self, orchestrator):
        view = orchestrator.view(FilterConfig())

        assert view.filtered == []
        assert view.stats.average_depth == 0
        assert view.countries == []

    def test_view_uses_current_data(self, orchestrator):
        orchestrator.fetch(FilterConfig())

        view = orchestrator.view(FilterConfig(min_magnitude=4))

        assert [c.country for c in view.top_countries] == ["Japan", "Russia"]
        assert view.countries == ["Chile", "Japan", "Russia"]
        assert orchestrator.countries() == ["Chile", "Japan", "Russia"]

    def test_view_does_not_mutate_records(self, orchestrator):
        orchestrator.fetch(FilterConfig())
        before = orchestrator.earthquakes

        orchestrator.view(FilterConfig(min_magnitude=9))

        assert orchestrator.earthquakes == before
