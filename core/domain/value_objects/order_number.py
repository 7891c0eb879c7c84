"""Order number value object."""
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

_PATTERN = re.compile(r"^ORD-(\d{3})(\d{6})$")

MAX_SEQUENCE = 999


@dataclass(frozen=True)
class OrderNumber:
    """
    Human-readable order identifier.

    Format: ORD-{sequence:03d}{DDMMYY}
    Examples:
    - ORD-001191026  (first order of 19 Oct 2026)
    - ORD-042010126

    The sequence restarts every calendar day and wraps from 999 back to 1.
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Order number cannot be empty")

        if not _PATTERN.match(self.value):
            raise ValueError(
                f"Invalid order number format (expected ORD-NNNDDMMYY): {self.value}"
            )

    @property
    def sequence(self) -> int:
        return int(_PATTERN.match(self.value).group(1))

    @property
    def date_suffix(self) -> str:
        return _PATTERN.match(self.value).group(2)

    @staticmethod
    def suffix_for(day: date) -> str:
        """DDMMYY suffix for a calendar day."""
        return day.strftime("%d%m%y")

    @classmethod
    def build(cls, sequence: int, day: date) -> "OrderNumber":
        """Build an order number from a sequence and calendar day."""
        return cls(value=f"ORD-{sequence % 1000:03d}{cls.suffix_for(day)}")

    @classmethod
    def next_after(cls, last: Optional[str], day: date) -> "OrderNumber":
        """
        Next order number for ``day`` given the last one issued that day.

        Args:
            last: Last order number of the day (None if first order)
            day: Calendar day the number is issued for

        Returns:
            OrderNumber with sequence ``last + 1`` (999 wraps to 1)
        """
        sequence = 1
        if last:
            match = _PATTERN.match(last)
            if match and match.group(2) == cls.suffix_for(day):
                sequence = int(match.group(1)) + 1
                if sequence > MAX_SEQUENCE:
                    sequence = 1
        return cls.build(sequence, day)

    def __str__(self) -> str:
        return self.value
