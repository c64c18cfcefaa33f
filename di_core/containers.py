from dependency_injector import containers, providers

from calendar_events.recurrence_utils import RecurrenceExpander
from calendar_events.services.calendar_event_service import CalendarEventService
from calendar_events.services.calendar_side_effects_service import (
    CalendarEventAuditLogHandler,
    CalendarSideEffectsService,
)
from calendar_events.services.scope_resolver import ScopedMutationResolver
from calendar_events.services.work_order_synchronizer import WorkOrderSynchronizer
from service_orders.services import ServiceOrderService


class AppContainer(containers.DeclarativeContainer):
    config = providers.Configuration()

    service_order_service = providers.Factory(
        ServiceOrderService,
    )

    work_order_synchronizer = providers.Factory(
        WorkOrderSynchronizer,
        work_order_gateway=service_order_service,
    )

    calendar_side_effects_service = providers.Factory(
        CalendarSideEffectsService,
        side_effects_pipeline=providers.List(
            work_order_synchronizer,
            providers.Factory(CalendarEventAuditLogHandler),
        ),
    )

    recurrence_expander = providers.Factory(
        RecurrenceExpander,
        max_span_days=config.CALENDAR_RECURRENCE_MAX_SPAN_DAYS,
    )

    scope_resolver = providers.Factory(
        ScopedMutationResolver,
    )

    calendar_event_service = providers.Factory(
        CalendarEventService,
        calendar_side_effects_service=calendar_side_effects_service,
        work_order_gateway=service_order_service,
        scope_resolver=scope_resolver,
        recurrence_expander=recurrence_expander,
    )


container: AppContainer | None = None  # set during app startup
