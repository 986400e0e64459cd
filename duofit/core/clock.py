"""
Civil calendar for the reference timezone.

Every date key in the database (daily nutrition, daily points, streaks) is a
calendar day in one fixed timezone, never the server's local day. All
conversions between instants and date keys go through CivilClock.
"""
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Tuple

import pytz

from duofit.core.config import settings


class CivilClock:
    def __init__(self, timezone_name: str, now: Optional[Callable[[], datetime]] = None):
        self.tz = pytz.timezone(timezone_name)
        self._now = now

    def now(self) -> datetime:
        """Current instant, aware, in the reference timezone."""
        if self._now is None:
            return datetime.now(self.tz)
        return self.to_utc(self._now()).astimezone(self.tz)

    def today(self) -> date:
        return self.now().date()

    @staticmethod
    def to_utc(instant: datetime) -> datetime:
        # SQLite hands timestamps back naive; they were stored as UTC
        if instant.tzinfo is None:
            return pytz.utc.localize(instant)
        return instant.astimezone(pytz.utc)

    def date_key(self, instant: datetime) -> date:
        return self.to_utc(instant).astimezone(self.tz).date()

    def start_of_day(self, day: date) -> datetime:
        return self.to_utc(self.tz.localize(datetime.combine(day, time.min)))

    def day_bounds(self, day: date) -> Tuple[datetime, datetime]:
        """Half-open [start, next_start) of a civil day, as UTC instants."""
        return self.start_of_day(day), self.start_of_day(day + timedelta(days=1))

    def instant_on(self, day: Optional[date] = None) -> datetime:
        """
        UTC instant to stamp a record dated `day`.

        Today (or no day) gives the current instant; any other day keeps the
        current civil time-of-day so backdated records still sort naturally.
        """
        now = self.now()
        if day is None or day == now.date():
            return self.to_utc(now)
        wall = datetime.combine(day, now.time().replace(tzinfo=None))
        return self.to_utc(self.tz.localize(wall))

    @staticmethod
    def previous_day(day: date) -> date:
        return day - timedelta(days=1)


_default_clock = CivilClock(settings.timezone)


def get_default_clock() -> CivilClock:
    return _default_clock
