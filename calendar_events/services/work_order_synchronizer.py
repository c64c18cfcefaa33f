import datetime
import logging

from django.utils import timezone

from calendar_events.constants import CalendarEventStatus
from calendar_events.services.dataclasses import CalendarEventData, WorkOrderCommand
from calendar_events.services.protocols.work_order_gateway import WorkOrderGateway
from organizations.models import Organization
from service_orders.constants import ServiceOrderStatus


logger = logging.getLogger(__name__)


def decide_work_order_commands(
    previous: CalendarEventData | None,
    current: CalendarEventData | None,
    previous_work_order_status: str | None = None,
    now: datetime.datetime | None = None,
) -> list[WorkOrderCommand]:
    """
    Decide which work order status changes follow from an occurrence state change.

    - created (no previous) and linked: schedule the work order.
    - linked to a different work order: schedule the new one.
    - moved to completed while linked: complete the work order.
    - deleted (no current) while the work order is scheduled: revert it to pending.

    Cancelling an occurrence leaves the work order untouched. When a single change both
    relinks and completes, the scheduling command comes first.
    """
    if previous is None and current is None:
        return []

    if current is None:
        if (
            previous.service_order_id is not None
            and previous_work_order_status == ServiceOrderStatus.SCHEDULED
        ):
            return [
                WorkOrderCommand(
                    service_order_id=previous.service_order_id,
                    status=ServiceOrderStatus.PENDING,
                )
            ]
        return []

    if current.service_order_id is None:
        return []

    commands = []
    if previous is None or previous.service_order_id != current.service_order_id:
        commands.append(
            WorkOrderCommand(
                service_order_id=current.service_order_id,
                status=ServiceOrderStatus.SCHEDULED,
                scheduled_date=current.scheduled_datetime,
            )
        )

    if (
        previous is not None
        and previous.status != CalendarEventStatus.COMPLETED
        and current.status == CalendarEventStatus.COMPLETED
    ):
        commands.append(
            WorkOrderCommand(
                service_order_id=current.service_order_id,
                status=ServiceOrderStatus.COMPLETED,
                completed_at=current.completed_at or now or timezone.now(),
            )
        )

    return commands


class WorkOrderSynchronizer:
    """
    Keeps linked work orders in step with the lifecycle of their calendar occurrences.
    Registered as a calendar side effects handler.
    """

    def __init__(self, work_order_gateway: WorkOrderGateway):
        self.work_order_gateway = work_order_gateway

    def _execute(self, commands: list[WorkOrderCommand], organization: Organization) -> None:
        for command in commands:
            self.work_order_gateway.update_status(
                command.service_order_id,
                organization.id,
                command.status,
                scheduled_date=command.scheduled_date,
                completed_at=command.completed_at,
            )

    def on_create_events(
        self, actor, events: list[CalendarEventData], organization: Organization
    ) -> None:
        # A series schedules each linked work order once, from its earliest occurrence.
        earliest_by_work_order: dict[int, CalendarEventData] = {}
        for event in sorted(events, key=lambda e: (e.date, e.start_time)):
            if event.service_order_id is not None:
                earliest_by_work_order.setdefault(event.service_order_id, event)

        for event in earliest_by_work_order.values():
            self._execute(decide_work_order_commands(None, event), organization)

    def on_update_events(
        self,
        actor,
        changes: list[tuple[CalendarEventData, CalendarEventData]],
        organization: Organization,
    ) -> None:
        # A bulk relink schedules each work order once, from its earliest affected occurrence,
        # and every scheduling command runs before any completion.
        scheduling_by_work_order: dict[int, WorkOrderCommand] = {}
        other_commands: list[WorkOrderCommand] = []
        for previous, current in sorted(changes, key=lambda c: (c[1].date, c[1].start_time)):
            commands = decide_work_order_commands(previous, current)
            if not commands:
                logger.debug(
                    "Calendar event %s update (%s -> %s) requires no work order change",
                    current.id,
                    previous.status,
                    current.status,
                )
            for command in commands:
                if command.status == ServiceOrderStatus.SCHEDULED:
                    scheduling_by_work_order.setdefault(command.service_order_id, command)
                else:
                    other_commands.append(command)

        self._execute([*scheduling_by_work_order.values(), *other_commands], organization)

    def on_delete_events(
        self, actor, events: list[CalendarEventData], organization: Organization
    ) -> None:
        for event in events:
            if event.service_order_id is None:
                continue
            service_order = self.work_order_gateway.find_by_id_and_organization(
                event.service_order_id, organization.id
            )
            commands = decide_work_order_commands(
                event,
                None,
                previous_work_order_status=service_order.status if service_order else None,
            )
            self._execute(commands, organization)
