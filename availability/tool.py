"""Tool class for asset identification."""

from typing import Optional


class Tool:
    """Rentable tool identification and pricing."""

    def __init__(
        self,
        name: str,
        category: Optional[str] = None,
        serial_number: Optional[str] = None,
        daily_rate: Optional[float] = None,
    ):
        self.name = name
        self.category = category
        self.serial_number = serial_number
        self.daily_rate = daily_rate

    @property
    def label(self) -> str:
        """Human-readable tool name."""
        return f"{self.name} ({self.serial_number})" if self.serial_number else self.name
