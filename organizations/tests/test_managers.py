import datetime

import pytest
from model_bakery import baker

from calendar_events.models import CalendarEvent
from common.exceptions import OrganizationRequiredError, OrganizationUpdateError
from customers.models import Customer


@pytest.mark.django_db
class TestOrganizationScopedManagers:
    def test_create_without_organization_raises(self):
        with pytest.raises(OrganizationRequiredError):
            Customer.objects.create(name="Nobody")

    def test_create_with_organization(self, organization):
        customer = Customer.objects.create(organization=organization, name="Somebody")

        assert customer.organization == organization

    def test_filter_by_organization_scopes_rows(self, organization, other_organization):
        own = baker.make(Customer, organization=organization)
        baker.make(Customer, organization=other_organization)

        assert list(Customer.objects.filter_by_organization(organization.id)) == [own]
        assert list(Customer.objects.exclude_by_organization(other_organization.id)) == [own]

    def test_queryset_update_cannot_move_rows_between_organizations(
        self, organization, other_organization, customer
    ):
        baker.make(
            CalendarEvent,
            organization=organization,
            customer=customer,
            date=datetime.date(2024, 1, 1),
            start_time=datetime.time(9, 0),
            end_time=datetime.time(10, 0),
        )

        with pytest.raises(OrganizationUpdateError):
            CalendarEvent.objects.filter_by_organization(organization.id).update(
                organization=other_organization
            )

    def test_calendar_event_manager_with_participants(self, organization, customer, technician):
        event = baker.make(
            CalendarEvent,
            organization=organization,
            customer=customer,
            date=datetime.date(2024, 1, 1),
            start_time=datetime.time(9, 0),
            end_time=datetime.time(10, 0),
        )
        event.technicians.add(technician)

        fetched = CalendarEvent.objects.with_participants().get(id=event.id)

        assert fetched.customer == customer
        assert list(fetched.technicians.all()) == [technician]
