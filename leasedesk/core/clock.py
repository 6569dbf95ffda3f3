"""
Injectable clock.

Services never call datetime.now() directly: audit fields use now_utc(),
human-facing formatting (generated date/time, file-name stamps) uses now_local().
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):

    @abstractmethod
    def now_utc(self) -> datetime:
        """Timezone-aware current UTC time."""
        ...

    @abstractmethod
    def now_local(self) -> datetime:
        """Current local wall-clock time, for display."""
        ...


class SystemClock(Clock):

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_local(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock(Clock):
    """Test clock pinned to one instant; advance() moves it forward."""

    def __init__(self, instant: datetime, local: Optional[datetime] = None):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant
        self._local = local

    def now_utc(self) -> datetime:
        return self._instant.astimezone(timezone.utc)

    def now_local(self) -> datetime:
        return self._local or self._instant

    def advance(self, **delta) -> None:
        step = timedelta(**delta)
        self._instant += step
        if self._local is not None:
            self._local += step
