from calendar_events.querysets import CalendarEventQuerySet, RecurringEventConfigQuerySet
from organizations.managers import BaseOrganizationModelManager


class RecurringEventConfigManager(BaseOrganizationModelManager):
    """Custom manager for RecurringEventConfig model."""

    def get_queryset(self) -> RecurringEventConfigQuerySet:
        return RecurringEventConfigQuerySet(self.model, using=self._db)


class CalendarEventManager(BaseOrganizationModelManager):
    """Custom manager for CalendarEvent model to handle specific queries."""

    def get_queryset(self) -> CalendarEventQuerySet:
        return CalendarEventQuerySet(self.model, using=self._db)

    def filter_by_series(self, recurring_config_id: int):
        return self.get_queryset().filter_by_series(recurring_config_id)

    def with_participants(self):
        return self.get_queryset().with_participants()
