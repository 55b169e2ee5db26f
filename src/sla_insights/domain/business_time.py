"""
Business Duration Calculator
============================

Minutes of working time between two instants, counted only inside the
daily business window on working days of the business calendar.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Tuple

from core.exceptions import BusinessWindowException
from sla_insights.domain.calendar import BusinessCalendar
from sla_insights.domain.value_objects import as_utc


class BusinessDurationCalculator:
    """
    Counts business minutes within [start_hour, end_hour) local time.

    Stateless apart from its calendar and window; safe to share.
    """

    def __init__(
        self,
        calendar: BusinessCalendar,
        start_hour: int = 8,
        end_hour: int = 17
    ):
        if not 0 <= start_hour < end_hour <= 24:
            raise BusinessWindowException(start_hour, end_hour)
        self.calendar = calendar
        self.start_hour = start_hour
        self.end_hour = end_hour

    def business_window(self, day) -> Tuple[datetime, datetime]:
        """Aware local datetimes bounding the business window of a day."""
        tz = self.calendar.tz
        opens = datetime.combine(day, time(self.start_hour), tzinfo=tz)
        if self.end_hour < 24:
            closes = datetime.combine(day, time(self.end_hour), tzinfo=tz)
        elif day < date.max:
            closes = datetime.combine(day + timedelta(days=1), time(0), tzinfo=tz)
        else:
            closes = datetime.combine(day, time.max, tzinfo=tz)
        return opens, closes

    def _days(self, start: datetime, end: datetime) -> Iterator:
        day, last = start.date(), end.date()
        while True:
            yield day
            if day >= last:
                return
            day += timedelta(days=1)

    def business_minutes(
        self,
        start: Optional[datetime],
        end: Optional[datetime]
    ) -> Optional[int]:
        """
        Calculate business minutes between two instants.

        Args:
            start: Interval start (naive values are taken as UTC)
            end: Interval end

        Returns:
            Whole minutes >= 0, or None if either bound is missing or
            end precedes start
        """
        if start is None or end is None:
            return None

        start, end = as_utc(start), as_utc(end)
        if end < start:
            return None

        tz = self.calendar.tz
        local_start = start.astimezone(tz)
        local_end = end.astimezone(tz)

        total = timedelta()
        first_day = local_start.date()
        last_day = local_end.date()

        for day in self._days(local_start, local_end):
            if not self.calendar.is_working_day(day):
                continue

            opens, closes = self.business_window(day)
            if day == first_day:
                opens = max(opens, local_start)
            if day == last_day:
                closes = min(closes, local_end)

            if closes > opens:
                total += closes - opens

        return int(total.total_seconds() // 60)
