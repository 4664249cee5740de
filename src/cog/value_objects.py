"""Small immutable value types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class DateRange:
    """
    A period between two optional datetimes.

    A missing bound leaves that side of the range open. Both bounds are
    inclusive.
    """

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"Date range start {self.start} is after its end {self.end}")

    def _now(self) -> datetime:
        bound = self.start or self.end
        return datetime.now(bound.tzinfo if bound else None)

    def is_in_range(self, when: datetime | None = None) -> bool:
        """Whether ``when`` (default: now) falls within the range."""
        when = when or self._now()
        if self.start is not None and when < self.start:
            return False
        if self.end is not None and when > self.end:
            return False
        return True

    def get_interval_to_start(self, when: datetime | None = None) -> timedelta | None:
        """Time from ``when`` (default: now) until the start, negative once started."""
        if self.start is None:
            return None
        return self.start - (when or self._now())

    def get_interval_to_end(self, when: datetime | None = None) -> timedelta | None:
        if self.end is None:
            return None
        return self.end - (when or self._now())
