"""Test infrastructure: users, a store with staff, and logged-in clients.

Runs on pytest-django with the test SQLite database; `--nomigrations`
builds the schema straight from the models.
"""

from datetime import date

import pytest
from django.contrib.auth import get_user_model
from django.test import Client

from apps.stores.models import StoreEmployee
from apps.stores.services import create_store_with_manager, join_store_as_employee, request_manager_access

PASSWORD = "secret123"

# A Wednesday; its week runs Sunday 2024-05-12 .. Saturday 2024-05-18.
WEEK_ANCHOR = date(2024, 5, 15)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
@pytest.fixture
def make_user(db):
    """Factory: make_user("Ada Lovelace", "ada@example.com")."""
    User = get_user_model()

    def _make(full_name: str, email: str, password: str = PASSWORD):
        return User.objects.create_user(
            username=email.lower(),
            email=email,
            password=password,
            full_name=full_name,
        )

    return _make


@pytest.fixture
def owner(make_user):
    return make_user("Olivia Owner", "owner@example.com")


@pytest.fixture
def employee(make_user):
    return make_user("Evan Employee", "evan@example.com")


@pytest.fixture
def second_employee(make_user):
    return make_user("Bella Baker", "bella@example.com")


@pytest.fixture
def outsider(make_user):
    return make_user("Oscar Outsider", "oscar@example.com")


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------
@pytest.fixture
def store(owner):
    """A store whose creator is the approved primary manager."""
    return create_store_with_manager(owner, name="Main Street", address="1 Main St", phone_number="555-0100")


@pytest.fixture
def staffed_store(store, employee, second_employee):
    join_store_as_employee(employee, store.join_code)
    join_store_as_employee(second_employee, store.join_code)
    return store


@pytest.fixture
def pending_manager(make_user, store):
    """A user with a pending manager request (and therefore employee access)."""
    user = make_user("Paula Pending", "paula@example.com")
    request_manager_access(user, store.join_code)
    assert StoreEmployee.objects.filter(store=store, employee=user).exists()
    return user


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------
def _client_for(user) -> Client:
    client = Client()
    client.force_login(user)
    return client


@pytest.fixture
def owner_client(owner):
    return _client_for(owner)


@pytest.fixture
def employee_client(staffed_store, employee):
    return _client_for(employee)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)
