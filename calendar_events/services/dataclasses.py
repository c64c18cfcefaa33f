import datetime
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Literal

from django.utils import timezone

from calendar_events.models import CalendarEvent


@dataclass
class RecurrenceInputData:
    frequency: Literal["daily", "weekly", "monthly", "yearly"]
    until_date: datetime.date
    interval: int = 1
    days_of_week: list[int] = dataclass_field(default_factory=list)


@dataclass
class RecurrenceUpdateData:
    frequency: Literal["daily", "weekly", "monthly", "yearly"] | None = None
    interval: int | None = None
    days_of_week: list[int] | None = None
    until_date: datetime.date | None = None


@dataclass
class CalendarEventInputData:
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    customer_id: int
    technician_ids: list[int]
    title: str = ""
    description: str = ""
    service_order_id: int | None = None
    recurring_config: RecurrenceInputData | None = None


@dataclass
class CalendarEventUpdateData:
    """
    Partial update of an occurrence. Fields left as None are not changed.
    """

    date: datetime.date | None = None
    start_time: datetime.time | None = None
    end_time: datetime.time | None = None
    customer_id: int | None = None
    technician_ids: list[int] | None = None
    title: str | None = None
    description: str | None = None
    status: Literal["scheduled", "completed", "cancelled"] | None = None
    completion_notes: str | None = None
    service_order_id: int | None = None
    recurring_config: RecurrenceUpdateData | None = None

    @property
    def changes_participants(self) -> bool:
        return self.customer_id is not None or self.technician_ids is not None


@dataclass
class CalendarEventData:
    """
    Snapshot of an occurrence handed to side-effect handlers.
    """

    id: int | None  # noqa: A003
    organization_id: int
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    status: str
    title: str = ""
    customer_id: int | None = None
    technician_ids: list[int] = dataclass_field(default_factory=list)
    service_order_id: int | None = None
    recurring_config_id: int | None = None
    completed_at: datetime.datetime | None = None

    @classmethod
    def from_event(
        cls, event: CalendarEvent, technician_ids: list[int] | None = None
    ) -> "CalendarEventData":
        if technician_ids is None:
            technician_ids = [technician.pk for technician in event.technicians.all()]
        return cls(
            id=event.pk,
            organization_id=event.organization_id,
            date=event.date,
            start_time=event.start_time,
            end_time=event.end_time,
            status=event.status,
            title=event.title,
            customer_id=event.customer_id,
            technician_ids=list(technician_ids),
            service_order_id=event.service_order_id,
            recurring_config_id=event.recurring_config_id,
            completed_at=event.completed_at,
        )

    @property
    def scheduled_datetime(self) -> datetime.datetime:
        return timezone.make_aware(datetime.datetime.combine(self.date, self.start_time))


@dataclass
class ScopeResolution:
    target: CalendarEvent
    event_ids: list[int]
    recurring_config_id: int | None = None


@dataclass
class DeletionResult:
    deleted: bool
    deleted_count: int


@dataclass(frozen=True)
class WorkOrderCommand:
    service_order_id: int
    status: str
    scheduled_date: datetime.datetime | None = None
    completed_at: datetime.datetime | None = None


@dataclass
class CalendarEventListFilters:
    start_date: datetime.date | None = None
    end_date: datetime.date | None = None
    technician_id: int | None = None
    customer_id: int | None = None
    status: Literal["scheduled", "completed", "cancelled"] | None = None
