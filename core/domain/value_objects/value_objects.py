"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

CENTS = Decimal("0.01")


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Coerce a loosely-typed amount (str, int, float, Decimal) to Decimal.

    Returns ``default`` for None, empty strings and unparsable values.
    """
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return default
    try:
        return Decimal(str(value))
    except (ArithmeticError, ValueError):
        return default


def round2(value: Decimal) -> Decimal:
    """Round a monetary amount half-up to 2 decimal places."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class ExecutionID:
    """Unique identifier for request/workflow tracing."""

    value: UUID

    @classmethod
    def generate(cls) -> "ExecutionID":
        """Generate a new ExecutionID."""
        return cls(value=uuid4())

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)
