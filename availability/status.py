"""Status enum for day availability."""

from enum import Enum


class DayStatus(Enum):
    """Day availability categories. Lower value = more restrictive."""

    MAINTENANCE = 1
    RENTED = 2
    AVAILABLE = 3

    @property
    def tag(self) -> str:
        """Lowercase name used by templates and JSON output."""
        return self.name.lower()
