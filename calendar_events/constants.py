from django.db.models import TextChoices


class CalendarEventStatus(TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class RecurrenceFrequency(TextChoices):
    DAILY = "daily", "Daily"
    WEEKLY = "weekly", "Weekly"
    MONTHLY = "monthly", "Monthly"
    YEARLY = "yearly", "Yearly"


class UpdateScope(TextChoices):
    SINGLE = "single", "This occurrence"
    FUTURE = "future", "This and following occurrences"
    ALL = "all", "All occurrences"


# Statuses an occurrence may move to from each status. Terminal statuses have no exits.
ALLOWED_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    CalendarEventStatus.SCHEDULED: frozenset(
        {CalendarEventStatus.COMPLETED, CalendarEventStatus.CANCELLED}
    ),
    CalendarEventStatus.COMPLETED: frozenset(),
    CalendarEventStatus.CANCELLED: frozenset(),
}
