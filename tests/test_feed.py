#!/usr/bin/env python3
"""Tests for IntervalFeed load state."""

from availability import FeedState, FetchError, Interval, IntervalFeed


class TestIntervalFeed:
    """Tests for IntervalFeed."""

    def test_starts_loading(self):
        feed = IntervalFeed()
        assert feed.is_loading
        assert feed.intervals == ()
        assert feed.error is None

    def test_ready_holds_intervals(self):
        intervals = [Interval("2024-03-01", "2024-03-02")]
        feed = IntervalFeed.ready(intervals)
        assert feed.state == FeedState.READY
        assert list(feed.intervals) == intervals

    def test_ready_with_none_is_empty(self):
        feed = IntervalFeed.ready(None)
        assert not feed.is_loading
        assert feed.intervals == ()

    def test_resolve_replaces_whole_list(self):
        first = Interval("2024-03-01", "2024-03-02")
        second = Interval("2024-04-01", "2024-04-02")
        feed = IntervalFeed.ready([first])
        feed.resolve([second])
        assert feed.intervals == (second,)

    def test_resolve_copies_source_list(self):
        source = [Interval("2024-03-01", "2024-03-02")]
        feed = IntervalFeed.ready(source)
        source.append(Interval("2024-04-01", "2024-04-02"))
        assert len(feed.intervals) == 1

    def test_fetch_success(self):
        interval = Interval("2024-03-01", "2024-03-02")
        feed = IntervalFeed.fetch(lambda: [interval])
        assert not feed.is_loading
        assert feed.intervals == (interval,)
        assert feed.error is None

    def test_fetch_failure_resolves_to_empty(self):
        def broken():
            raise FetchError("connection refused")

        feed = IntervalFeed.fetch(broken)
        assert not feed.is_loading
        assert feed.intervals == ()
        assert "connection refused" in feed.error

    def test_resolve_clears_previous_error(self):
        feed = IntervalFeed()
        feed.fail(FetchError("boom"))
        feed.resolve([])
        assert feed.error is None
