"""IntervalFeed: the load state of one asset's interval list."""

import logging
from enum import Enum
from typing import Callable, Iterable, Optional, Tuple

from .errors import FetchError
from .interval import Interval

logger = logging.getLogger(__name__)


class FeedState(Enum):
    LOADING = 1
    READY = 2


class IntervalFeed:
    """
    Holds the intervals of one asset once they have been fetched.

    A feed is either LOADING (nothing to classify yet) or READY. A failed
    fetch becomes READY with no intervals and the error kept for display.
    Resolving replaces the whole list; nothing is merged.
    """

    def __init__(self):
        self.state = FeedState.LOADING
        self.intervals: Tuple[Interval, ...] = ()
        self.error: Optional[str] = None

    @classmethod
    def ready(cls, intervals: Optional[Iterable[Interval]]) -> "IntervalFeed":
        feed = cls()
        feed.resolve(intervals)
        return feed

    @classmethod
    def fetch(cls, fetcher: Callable[[], Iterable[Interval]]) -> "IntervalFeed":
        """Run a store fetch and capture the outcome."""
        feed = cls()
        try:
            intervals = fetcher()
        except FetchError as e:
            feed.fail(e)
        else:
            feed.resolve(intervals)
        return feed

    @property
    def is_loading(self) -> bool:
        return self.state == FeedState.LOADING

    def resolve(self, intervals: Optional[Iterable[Interval]]) -> None:
        self.intervals = tuple(intervals or ())
        self.error = None
        self.state = FeedState.READY

    def fail(self, error: Exception) -> None:
        logger.warning("Interval fetch failed: %s", error)
        self.intervals = ()
        self.error = str(error)
        self.state = FeedState.READY
