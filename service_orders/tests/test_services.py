import datetime

import pytest
from model_bakery import baker

from service_orders.constants import ServiceOrderStatus
from service_orders.services import ServiceOrderService


@pytest.fixture
def service():
    return ServiceOrderService()


@pytest.mark.django_db
class TestServiceOrderService:
    def test_find_by_id_and_organization(self, service, organization, service_order):
        assert service.find_by_id_and_organization(service_order.id, organization.id) == (
            service_order
        )

    def test_find_ignores_other_organizations(self, service, other_organization, service_order):
        assert service.find_by_id_and_organization(service_order.id, other_organization.id) is None

    def test_update_status_to_scheduled_sets_scheduled_date(
        self, service, organization, service_order
    ):
        scheduled_date = datetime.datetime(2024, 1, 3, 9, 0, tzinfo=datetime.UTC)

        updated = service.update_status(
            service_order.id,
            organization.id,
            ServiceOrderStatus.SCHEDULED,
            scheduled_date=scheduled_date,
        )

        service_order.refresh_from_db()
        assert updated == service_order
        assert service_order.status == ServiceOrderStatus.SCHEDULED
        assert service_order.scheduled_date == scheduled_date
        assert service_order.completed_at is None

    def test_update_status_to_completed_sets_completed_at(
        self, service, organization, service_order
    ):
        completed_at = datetime.datetime(2024, 1, 3, 11, 30, tzinfo=datetime.UTC)

        service.update_status(
            service_order.id,
            organization.id,
            ServiceOrderStatus.COMPLETED,
            completed_at=completed_at,
        )

        service_order.refresh_from_db()
        assert service_order.status == ServiceOrderStatus.COMPLETED
        assert service_order.completed_at == completed_at

    def test_update_status_keeps_scheduled_date_when_reverting(
        self, service, organization, customer
    ):
        scheduled_date = datetime.datetime(2024, 1, 3, 9, 0, tzinfo=datetime.UTC)
        service_order = baker.make(
            "service_orders.ServiceOrder",
            organization=organization,
            customer=customer,
            status=ServiceOrderStatus.SCHEDULED,
            scheduled_date=scheduled_date,
        )

        service.update_status(service_order.id, organization.id, ServiceOrderStatus.PENDING)

        service_order.refresh_from_db()
        assert service_order.status == ServiceOrderStatus.PENDING
        assert service_order.scheduled_date == scheduled_date

    def test_update_status_of_missing_order_returns_none(
        self, service, other_organization, service_order
    ):
        result = service.update_status(
            service_order.id, other_organization.id, ServiceOrderStatus.COMPLETED
        )

        service_order.refresh_from_db()
        assert result is None
        assert service_order.status == ServiceOrderStatus.PENDING
