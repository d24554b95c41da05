"""Registration, login, settings and account deletion."""

from datetime import time

import pytest
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import Client
from django.urls import reverse

from apps.accounts.context_processors import initials_for
from apps.accounts.services import delete_account
from apps.scheduling.models import Availability, Shift
from apps.scheduling.services import save_shift, set_availability
from apps.stores.models import StoreEmployee
from tests.conftest import PASSWORD, WEEK_ANCHOR

pytestmark = pytest.mark.django_db


# ===== Registration =====

class TestRegister:

    def _post(self, client, **overrides):
        data = {
            "full_name": "Nina New",
            "email": "Nina@Example.com",
            "password": "hunter22",
            "confirm_password": "hunter22",
        }
        data.update(overrides)
        return client.post(reverse("register"), data)

    def test_register_logs_in_and_redirects(self, client):
        res = self._post(client)
        assert res.status_code == 302
        assert res.url == reverse("dashboard")
        user = get_user_model().objects.get(email="nina@example.com")
        assert user.username == "nina@example.com"
        assert user.full_name == "Nina New"
        assert user.check_password("hunter22")
        assert client.session["_auth_user_id"] == str(user.pk)

    def test_passwords_must_match(self, client):
        res = self._post(client, confirm_password="different")
        assert res.status_code == 200
        assert "Passwords do not match." in res.context["form"].errors["confirm_password"]

    def test_password_min_length(self, client):
        res = self._post(client, password="abc", confirm_password="abc")
        assert res.status_code == 200
        assert res.context["form"].errors["password"] == ["Password must be at least 6 characters."]

    def test_duplicate_email(self, client, employee):
        res = self._post(client, email="EVAN@example.com")
        assert res.status_code == 200
        assert "email" in res.context["form"].errors


# ===== Login =====

class TestLogin:

    def test_login_with_email_any_case(self, client, employee):
        res = client.post(reverse("login"), {"username": "Evan@Example.COM", "password": PASSWORD})
        assert res.status_code == 302
        assert res.url == reverse("dashboard")

    def test_bad_password(self, client, employee):
        res = client.post(reverse("login"), {"username": "evan@example.com", "password": "wrong-one"})
        assert res.status_code == 200
        assert res.context["form"].non_field_errors()

    def test_logged_in_user_skips_login_page(self, employee):
        client = Client()
        client.force_login(employee)
        res = client.get(reverse("login"))
        assert res.status_code == 302
        assert res.url == reverse("dashboard")

    def test_logout_is_post_only(self, employee):
        client = Client()
        client.force_login(employee)
        assert client.get(reverse("logout")).status_code == 405
        res = client.post(reverse("logout"))
        assert res.url == reverse("login")


# ===== Settings =====

class TestSettings:

    def test_update_profile(self, employee):
        client = Client()
        client.force_login(employee)
        res = client.post(reverse("settings"), {"action": "profile", "full_name": "Evan E. Employee"})
        assert res.status_code == 302
        employee.refresh_from_db()
        assert employee.full_name == "Evan E. Employee"

    def test_change_password_keeps_session(self, employee):
        client = Client()
        client.force_login(employee)
        res = client.post(
            reverse("settings"),
            {"action": "password", "new_password1": "brandnew1", "new_password2": "brandnew1"},
        )
        assert res.status_code == 302
        employee.refresh_from_db()
        assert employee.check_password("brandnew1")
        assert client.get(reverse("settings")).status_code == 200

    def test_password_confirmation_must_match(self, employee):
        client = Client()
        client.force_login(employee)
        res = client.post(
            reverse("settings"),
            {"action": "password", "new_password1": "brandnew1", "new_password2": "brandnew2"},
        )
        assert res.status_code == 200
        employee.refresh_from_db()
        assert employee.check_password(PASSWORD)

    def test_store_counts(self, staffed_store, owner):
        client = Client()
        client.force_login(owner)
        res = client.get(reverse("settings"))
        assert res.context["store_count"] == 1
        assert res.context["managed_count"] == 1


# ===== Account deletion =====

class TestDeleteAccount:

    def test_primary_manager_refused(self, store, owner):
        with pytest.raises(ValidationError, match="transfer ownership"):
            delete_account(owner)
        assert get_user_model().objects.filter(pk=owner.pk).exists()

    def test_shifts_keep_name(self, staffed_store, owner, employee):
        shift = save_shift(owner, staffed_store, employee_id=employee.id, day=WEEK_ANCHOR, start=time(9), end=time(17))
        set_availability(employee, staffed_store, WEEK_ANCHOR)
        employee_id = employee.pk

        delete_account(employee)

        shift.refresh_from_db()
        assert shift.employee is None
        assert shift.original_employee_name == "Evan Employee"
        assert not StoreEmployee.objects.filter(store=staffed_store, employee_id=employee_id).exists()
        assert not Availability.objects.filter(user_id=employee_id).exists()
        assert Shift.objects.count() == 1

    def test_delete_view_logs_out(self, employee_client, employee):
        res = employee_client.post(reverse("delete_account"))
        assert res.url == reverse("login")
        assert not get_user_model().objects.filter(pk=employee.pk).exists()

    def test_delete_view_refuses_primary(self, store, owner_client, owner):
        res = owner_client.post(reverse("delete_account"))
        assert res.url == reverse("settings")
        assert get_user_model().objects.filter(pk=owner.pk).exists()


# ===== Header context =====

class TestHeaderContext:

    @pytest.mark.parametrize("name, expected", [
        ("Evan Employee", "EE"),
        ("Mary Jo Smith", "MS"),
        ("cher", "C"),
        ("", ""),
    ])
    def test_initials(self, name, expected):
        assert initials_for(name) == expected

    def test_pending_request_badge(self, owner_client, store, pending_manager):
        res = owner_client.get(reverse("dashboard"))
        assert res.context["user_initials"] == "OO"
        assert res.context["pending_request_count"] == 1
