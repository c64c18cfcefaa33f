import pytest
from model_bakery import baker
from rest_framework.test import APIClient


DEFAULT_TEST_USER_PASSWORD = "123456"  # noqa: S105


@pytest.fixture
def user_password():
    return DEFAULT_TEST_USER_PASSWORD


@pytest.fixture
def organization():
    return baker.make("organizations.Organization", name="Acme Field Services")


@pytest.fixture
def other_organization():
    return baker.make("organizations.Organization", name="Other Field Services")


@pytest.fixture
def user(organization, user_password):
    from django.contrib.auth import get_user_model

    user = get_user_model().objects.create_user(
        username="dispatcher", email="dispatcher@example.com", password=user_password
    )
    baker.make("organizations.OrganizationMembership", user=user, organization=organization)
    return user


@pytest.fixture
def auth_client(user, user_password):
    client = APIClient()
    client.login(username=user.username, password=user_password)
    return client


@pytest.fixture
def anonymous_client():
    client = APIClient()
    return client


@pytest.fixture
def customer(organization):
    return baker.make("customers.Customer", organization=organization, name="Jane Customer")


@pytest.fixture
def technician(organization):
    return baker.make(
        "technicians.Technician",
        organization=organization,
        first_name="Bob",
        last_name="Builder",
    )


@pytest.fixture
def second_technician(organization):
    return baker.make(
        "technicians.Technician",
        organization=organization,
        first_name="Alice",
        last_name="Fixer",
    )


@pytest.fixture
def service_order(organization, customer):
    return baker.make(
        "service_orders.ServiceOrder",
        organization=organization,
        customer=customer,
        order_number="SO-0001",
        status="pending",
    )


@pytest.fixture
def di_container():
    """Fixture to create a DI container."""
    from di_core.containers import container

    return container
