import datetime

from calendar_events.constants import CalendarEventStatus
from organizations.querysets import BaseOrganizationModelQuerySet


class RecurringEventConfigQuerySet(BaseOrganizationModelQuerySet):
    pass


class CalendarEventQuerySet(BaseOrganizationModelQuerySet):
    def filter_by_series(self, recurring_config_id: int):
        return self.filter(recurring_config_id=recurring_config_id)

    def filter_from_date(self, date: datetime.date):
        """
        Occurrences on or after the given day. Time of day is not taken into account.
        """
        return self.filter(date__gte=date)

    def filter_by_date_range(
        self, start_date: datetime.date | None = None, end_date: datetime.date | None = None
    ):
        queryset = self
        if start_date is not None:
            queryset = queryset.filter(date__gte=start_date)
        if end_date is not None:
            queryset = queryset.filter(date__lte=end_date)
        return queryset

    def exclude_completed(self):
        return self.exclude(status=CalendarEventStatus.COMPLETED)

    def with_participants(self):
        return self.select_related(
            "customer", "service_order", "recurring_config"
        ).prefetch_related("technicians")
