"""Recurrence utilities: expanding a recurrence rule into occurrence dates.

Notes:
- Weekdays follow the Sunday-first convention used by the API (0 = Sunday,
  6 = Saturday) and weeks start on Sunday.
- Month and year steps are always computed from the start date, so a rule
  starting on the 31st yields the last day of shorter months without drifting.
"""

import dataclasses
import datetime

from django.conf import settings

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, SU, WEEKLY, rrule, weekday

from calendar_events.constants import RecurrenceFrequency
from calendar_events.exceptions import InvalidDateRangeError, RecurrenceTooLongError


DEFAULT_MAX_SPAN_DAYS = 365


@dataclasses.dataclass(frozen=True)
class RecurrenceRule:
    frequency: str
    start_date: datetime.date
    until_date: datetime.date
    interval: int = 1
    days_of_week: tuple[int, ...] = ()

    def __post_init__(self):
        if self.frequency not in RecurrenceFrequency.values:
            raise ValueError(f"Unsupported recurrence frequency: {self.frequency}")
        if self.interval < 1:
            raise ValueError("Recurrence interval must be a positive integer")
        if any(day not in range(7) for day in self.days_of_week):
            raise ValueError("Days of week must be between 0 (Sunday) and 6 (Saturday)")


def to_dateutil_weekday(day: int) -> weekday:
    """
    Convert a Sunday-first weekday (0 = Sunday) to a dateutil weekday (0 = Monday).
    """
    return weekday((day + 6) % 7)


class RecurrenceExpander:
    """Expands a RecurrenceRule into the sorted list of dates it produces."""

    def __init__(self, max_span_days: int | None = None):
        if max_span_days is None:
            max_span_days = getattr(
                settings, "CALENDAR_RECURRENCE_MAX_SPAN_DAYS", DEFAULT_MAX_SPAN_DAYS
            )
        self.max_span_days = max_span_days

    def validate(self, rule: RecurrenceRule) -> None:
        if rule.until_date < rule.start_date:
            raise InvalidDateRangeError()
        if (rule.until_date - rule.start_date).days > self.max_span_days:
            raise RecurrenceTooLongError(
                f"Recurrence cannot span more than {self.max_span_days} days"
            )

    def expand(self, rule: RecurrenceRule) -> list[datetime.date]:
        """
        Return every date produced by ``rule`` between its start and until dates, both
        inclusive, in ascending order and without duplicates.

        Raises ``InvalidDateRangeError`` when the until date precedes the start date and
        ``RecurrenceTooLongError`` when the span is longer than the configured maximum.
        """
        self.validate(rule)

        if rule.frequency == RecurrenceFrequency.DAILY:
            dates = self._expand_rrule(rule, DAILY)
        elif rule.frequency == RecurrenceFrequency.WEEKLY:
            dates = self._expand_rrule(rule, WEEKLY)
        elif rule.frequency == RecurrenceFrequency.MONTHLY:
            dates = self._expand_calendar_steps(rule, lambda step: relativedelta(months=step))
        else:
            dates = self._expand_calendar_steps(rule, lambda step: relativedelta(years=step))

        return sorted(set(dates))

    @staticmethod
    def _expand_rrule(rule: RecurrenceRule, freq: int) -> list[datetime.date]:
        dtstart = datetime.datetime.combine(rule.start_date, datetime.time.min)
        until = datetime.datetime.combine(rule.until_date, datetime.time.min)
        kwargs = {}
        if freq == WEEKLY:
            kwargs["wkst"] = SU
            days_of_week = rule.days_of_week or ((rule.start_date.isoweekday() % 7),)
            kwargs["byweekday"] = [to_dateutil_weekday(day) for day in days_of_week]

        return [
            occurrence.date()
            for occurrence in rrule(
                freq, dtstart=dtstart, until=until, interval=rule.interval, **kwargs
            )
        ]

    @staticmethod
    def _expand_calendar_steps(rule: RecurrenceRule, step_delta) -> list[datetime.date]:
        dates = []
        step = 0
        while True:
            occurrence = rule.start_date + step_delta(step * rule.interval)
            if occurrence > rule.until_date:
                break
            dates.append(occurrence)
            step += 1
        return dates
