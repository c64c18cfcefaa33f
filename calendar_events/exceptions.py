class CalendarEventError(Exception):
    """Base exception for calendar event errors"""

    default_message = ""
    code = "calendar_event_error"

    def __init__(self, message: str | None = None):
        if message is None:
            message = self.default_message
        super().__init__(message)


class RecurrenceError(CalendarEventError):
    """Base class for recurrence rule errors"""

    pass


class InvalidDateRangeError(RecurrenceError):
    default_message = "Recurrence end date must be on or after its start date"
    code = "invalid_date_range"


class RecurrenceTooLongError(RecurrenceError):
    default_message = "Recurrence cannot span more than 365 days"
    code = "recurrence_too_long"


class InvalidParticipantsError(CalendarEventError):
    default_message = "Customer or technicians not found in the organization"
    code = "invalid_participants"


class OccurrenceNotFoundError(CalendarEventError):
    default_message = "Calendar event not found"
    code = "occurrence_not_found"


class InvalidScopeError(CalendarEventError):
    default_message = "Scope must be one of: single, future, all"
    code = "invalid_scope"


class InvalidTimeWindowError(CalendarEventError):
    default_message = "Start time must be before end time"
    code = "invalid_time_window"


class InvalidStatusTransitionError(CalendarEventError):
    default_message = "Status transition not allowed"
    code = "invalid_status_transition"

    def __init__(self, from_status: str | None = None, to_status: str | None = None):
        if from_status is None or to_status is None:
            super().__init__()
        else:
            super().__init__(f"Cannot change event status from {from_status} to {to_status}")


class SeriesRuleScopeError(CalendarEventError):
    default_message = "Recurrence rule changes can only be applied to all occurrences"
    code = "series_rule_requires_all_scope"


class InvalidServiceOrderError(CalendarEventError):
    default_message = "Service order not found in the organization"
    code = "invalid_service_order"
