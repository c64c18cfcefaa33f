import dataclasses
import datetime
from unittest.mock import Mock, call

from django.utils import timezone

import pytest

from calendar_events.constants import CalendarEventStatus
from calendar_events.services.dataclasses import CalendarEventData, WorkOrderCommand
from calendar_events.services.work_order_synchronizer import (
    WorkOrderSynchronizer,
    decide_work_order_commands,
)
from service_orders.constants import ServiceOrderStatus


NOW = datetime.datetime(2024, 1, 15, 12, 0, tzinfo=datetime.UTC)


def _event(**kwargs) -> CalendarEventData:
    defaults = {
        "id": 1,
        "organization_id": 1,
        "date": datetime.date(2024, 1, 15),
        "start_time": datetime.time(9, 0),
        "end_time": datetime.time(10, 0),
        "status": CalendarEventStatus.SCHEDULED,
        "service_order_id": None,
    }
    defaults.update(kwargs)
    return CalendarEventData(**defaults)


def _scheduled_at(date, time):
    return timezone.make_aware(datetime.datetime.combine(date, time))


class TestDecideWorkOrderCommands:
    def test_created_with_link_schedules_work_order(self):
        current = _event(service_order_id=7)

        commands = decide_work_order_commands(None, current)

        assert commands == [
            WorkOrderCommand(
                service_order_id=7,
                status=ServiceOrderStatus.SCHEDULED,
                scheduled_date=_scheduled_at(current.date, current.start_time),
            )
        ]

    def test_created_without_link_does_nothing(self):
        assert decide_work_order_commands(None, _event()) == []

    def test_relink_schedules_new_work_order(self):
        previous = _event(service_order_id=7)
        current = dataclasses.replace(previous, service_order_id=8)

        commands = decide_work_order_commands(previous, current)

        assert [(c.service_order_id, c.status) for c in commands] == [
            (8, ServiceOrderStatus.SCHEDULED)
        ]

    def test_unchanged_link_does_nothing(self):
        previous = _event(service_order_id=7)
        current = dataclasses.replace(previous, start_time=datetime.time(11, 0))

        assert decide_work_order_commands(previous, current) == []

    def test_completion_completes_linked_work_order(self):
        previous = _event(service_order_id=7)
        current = dataclasses.replace(
            previous, status=CalendarEventStatus.COMPLETED, completed_at=NOW
        )

        commands = decide_work_order_commands(previous, current)

        assert commands == [
            WorkOrderCommand(
                service_order_id=7, status=ServiceOrderStatus.COMPLETED, completed_at=NOW
            )
        ]

    def test_completion_without_link_does_nothing(self):
        previous = _event()
        current = dataclasses.replace(previous, status=CalendarEventStatus.COMPLETED)

        assert decide_work_order_commands(previous, current) == []

    def test_already_completed_is_not_completed_again(self):
        previous = _event(service_order_id=7, status=CalendarEventStatus.COMPLETED)
        current = dataclasses.replace(previous)

        assert decide_work_order_commands(previous, current) == []

    def test_relink_is_emitted_before_completion(self):
        previous = _event(service_order_id=7)
        current = dataclasses.replace(
            previous,
            service_order_id=8,
            status=CalendarEventStatus.COMPLETED,
            completed_at=NOW,
        )

        commands = decide_work_order_commands(previous, current)

        assert [(c.service_order_id, c.status) for c in commands] == [
            (8, ServiceOrderStatus.SCHEDULED),
            (8, ServiceOrderStatus.COMPLETED),
        ]

    def test_cancellation_leaves_work_order_untouched(self):
        previous = _event(service_order_id=7)
        current = dataclasses.replace(previous, status=CalendarEventStatus.CANCELLED)

        assert decide_work_order_commands(previous, current) == []

    def test_delete_reverts_scheduled_work_order_to_pending(self):
        commands = decide_work_order_commands(
            _event(service_order_id=7),
            None,
            previous_work_order_status=ServiceOrderStatus.SCHEDULED,
        )

        assert commands == [
            WorkOrderCommand(service_order_id=7, status=ServiceOrderStatus.PENDING)
        ]

    @pytest.mark.parametrize(
        "work_order_status",
        [
            ServiceOrderStatus.PENDING,
            ServiceOrderStatus.IN_PROGRESS,
            ServiceOrderStatus.COMPLETED,
            ServiceOrderStatus.PAYMENT_ORDER_CREATED,
            ServiceOrderStatus.CANCELLED,
            None,
        ],
    )
    def test_delete_leaves_other_work_order_statuses_untouched(self, work_order_status):
        commands = decide_work_order_commands(
            _event(service_order_id=7),
            None,
            previous_work_order_status=work_order_status,
        )

        assert commands == []


class TestWorkOrderSynchronizer:
    @pytest.fixture
    def gateway(self):
        return Mock()

    @pytest.fixture
    def organization(self):
        return Mock(id=1)

    def test_series_create_schedules_each_work_order_once_from_earliest(
        self, gateway, organization
    ):
        synchronizer = WorkOrderSynchronizer(work_order_gateway=gateway)
        events = [
            _event(id=3, date=datetime.date(2024, 1, 17), service_order_id=7),
            _event(id=1, date=datetime.date(2024, 1, 3), service_order_id=7),
            _event(id=2, date=datetime.date(2024, 1, 10), service_order_id=7),
        ]

        synchronizer.on_create_events(None, events, organization)

        gateway.update_status.assert_called_once_with(
            7,
            1,
            ServiceOrderStatus.SCHEDULED,
            scheduled_date=_scheduled_at(datetime.date(2024, 1, 3), datetime.time(9, 0)),
            completed_at=None,
        )

    def test_update_executes_decided_commands(self, gateway, organization):
        synchronizer = WorkOrderSynchronizer(work_order_gateway=gateway)
        previous = _event(service_order_id=7)
        current = dataclasses.replace(
            previous, status=CalendarEventStatus.COMPLETED, completed_at=NOW
        )

        synchronizer.on_update_events(None, [(previous, current)], organization)

        gateway.update_status.assert_called_once_with(
            7, 1, ServiceOrderStatus.COMPLETED, scheduled_date=None, completed_at=NOW
        )

    def test_bulk_relink_schedules_each_work_order_once_from_earliest(
        self, gateway, organization
    ):
        synchronizer = WorkOrderSynchronizer(work_order_gateway=gateway)
        changes = [
            (
                _event(id=event_id, date=date, service_order_id=7),
                _event(id=event_id, date=date, service_order_id=8),
            )
            for event_id, date in (
                (2, datetime.date(2024, 1, 10)),
                (1, datetime.date(2024, 1, 3)),
                (3, datetime.date(2024, 1, 17)),
            )
        ]

        synchronizer.on_update_events(None, changes, organization)

        gateway.update_status.assert_called_once_with(
            8,
            1,
            ServiceOrderStatus.SCHEDULED,
            scheduled_date=_scheduled_at(datetime.date(2024, 1, 3), datetime.time(9, 0)),
            completed_at=None,
        )

    def test_bulk_relink_and_completion_schedules_before_completing(
        self, gateway, organization
    ):
        synchronizer = WorkOrderSynchronizer(work_order_gateway=gateway)
        changes = [
            (
                _event(id=event_id, date=date, service_order_id=7),
                _event(
                    id=event_id,
                    date=date,
                    service_order_id=8,
                    status=CalendarEventStatus.COMPLETED,
                    completed_at=NOW,
                ),
            )
            for event_id, date in (
                (1, datetime.date(2024, 1, 3)),
                (2, datetime.date(2024, 1, 10)),
            )
        ]

        synchronizer.on_update_events(None, changes, organization)

        assert [c.args[2] for c in gateway.update_status.call_args_list] == [
            ServiceOrderStatus.SCHEDULED,
            ServiceOrderStatus.COMPLETED,
            ServiceOrderStatus.COMPLETED,
        ]

    def test_delete_looks_up_work_order_status(self, gateway, organization):
        gateway.find_by_id_and_organization.side_effect = [
            Mock(status=ServiceOrderStatus.SCHEDULED),
            Mock(status=ServiceOrderStatus.IN_PROGRESS),
        ]
        synchronizer = WorkOrderSynchronizer(work_order_gateway=gateway)

        synchronizer.on_delete_events(
            None,
            [_event(id=1, service_order_id=7), _event(id=2), _event(id=3, service_order_id=8)],
            organization,
        )

        assert gateway.find_by_id_and_organization.call_args_list == [call(7, 1), call(8, 1)]
        gateway.update_status.assert_called_once_with(
            7, 1, ServiceOrderStatus.PENDING, scheduled_date=None, completed_at=None
        )
