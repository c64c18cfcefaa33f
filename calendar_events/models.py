from django.conf import settings
from django.db import models

from calendar_events.constants import CalendarEventStatus, RecurrenceFrequency
from calendar_events.managers import CalendarEventManager, RecurringEventConfigManager
from calendar_events.recurrence_utils import RecurrenceRule
from common.models import AuthoredModel
from organizations.models import OrganizationModel


class RecurringEventConfig(OrganizationModel, AuthoredModel):
    """
    Recurrence rule shared by all occurrences of a series.
    Occurrences reference it, they do not own it: it is only removed by deleting the
    whole series.
    """

    frequency = models.CharField(max_length=10, choices=RecurrenceFrequency)
    interval = models.PositiveIntegerField(default=1)
    days_of_week = models.JSONField(
        default=list,
        blank=True,
        help_text="Weekdays for weekly recurrences, 0 = Sunday ... 6 = Saturday",
    )
    start_date = models.DateField()
    until_date = models.DateField()

    objects: RecurringEventConfigManager = RecurringEventConfigManager()

    def __str__(self):
        return f"{self.get_frequency_display()} from {self.start_date} until {self.until_date}"

    def to_rule(self) -> RecurrenceRule:
        return RecurrenceRule(
            frequency=self.frequency,
            interval=self.interval,
            days_of_week=tuple(self.days_of_week or ()),
            start_date=self.start_date,
            until_date=self.until_date,
        )


class CalendarEvent(OrganizationModel, AuthoredModel):
    """
    A single scheduled visit on a given day. When `recurring_config` is set the event is
    an occurrence of a series, otherwise it is a standalone event.
    """

    date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    title = models.CharField(max_length=255, blank=True)
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=CalendarEventStatus,
        default=CalendarEventStatus.SCHEDULED,
        db_index=True,
    )

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="calendar_events",
    )
    technicians = models.ManyToManyField(
        "technicians.Technician",
        related_name="calendar_events",
    )
    service_order = models.ForeignKey(
        "service_orders.ServiceOrder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="calendar_events",
    )
    recurring_config = models.ForeignKey(
        RecurringEventConfig,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="events",
    )

    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    completion_notes = models.TextField(blank=True)

    objects: CalendarEventManager = CalendarEventManager()

    class Meta:
        ordering = ("date", "start_time")
        indexes = [
            models.Index(fields=["organization", "date"], name="calevent_org_date_idx"),
            models.Index(fields=["recurring_config", "date"], name="calevent_config_date_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M})"

    @property
    def is_recurring(self) -> bool:
        return self.recurring_config_id is not None
