"""HTTP flows: dashboard, store pages, schedule editing and availability."""

from datetime import time

import pytest
from django.contrib.messages import get_messages
from django.urls import reverse

from apps.scheduling.models import Availability, AvailabilityStatus, Schedule, Shift
from apps.scheduling.services import save_shift
from apps.stores.models import ManagerStatus, StoreEmployee, StoreManager
from tests.conftest import WEEK_ANCHOR

pytestmark = pytest.mark.django_db


def _messages(res):
    return [str(m) for m in get_messages(res.wsgi_request)]


# ===== Public pages and auth redirects =====

class TestAuthRedirects:

    def test_home_sends_anonymous_to_login(self, client):
        res = client.get(reverse("home"))
        assert res.url == reverse("login")

    def test_dashboard_needs_login(self, client):
        res = client.get(reverse("dashboard"))
        assert res.status_code == 302
        assert res.url.startswith(reverse("login"))

    def test_store_page_needs_login(self, client, store):
        res = client.get(reverse("store_detail", args=[store.id]))
        assert res.status_code == 302
        assert res.url.startswith(reverse("login"))

    def test_password_reset_page(self, client):
        assert client.get(reverse("password_reset")).status_code == 200


# ===== Dashboard and onboarding =====

class TestDashboard:

    def test_lists_stores_and_pending_requests(self, owner_client, store, pending_manager):
        res = owner_client.get(reverse("dashboard"))
        assert res.status_code == 200
        assert [m.store for m in res.context["memberships"]] == [store]
        assert [r.manager for r in res.context["pending_requests"]] == [pending_manager]

    def test_unknown_tab_falls_back_to_all(self, owner_client, store):
        res = owner_client.get(reverse("dashboard"), {"tab": "bogus"})
        assert res.context["tab"] == "all"

    def test_create_store(self, outsider_client, outsider):
        res = outsider_client.post(reverse("store_create"), {"name": "Harbor", "address": "", "phone_number": ""})
        link = StoreManager.objects.get(manager=outsider)
        assert res.url == reverse("store_detail", args=[link.store_id])
        assert link.is_primary

    def test_join_as_employee(self, outsider_client, outsider, store):
        res = outsider_client.post(reverse("join_store"), {"code": store.join_code.lower(), "join_as": "employee"})
        assert res.url == reverse("dashboard")
        assert StoreEmployee.objects.filter(store=store, employee=outsider).exists()

    def test_request_manager_access(self, outsider_client, outsider, store):
        outsider_client.post(reverse("join_store"), {"code": store.join_code, "join_as": "manager"})
        link = StoreManager.objects.get(store=store, manager=outsider)
        assert link.status == ManagerStatus.PENDING

    def test_join_with_bad_code(self, outsider_client, store):
        res = outsider_client.post(reverse("join_store"), {"code": "AB-12", "join_as": "employee"})
        assert "Store code must be 6 alphanumeric characters." in _messages(res)

    def test_approve_request(self, owner_client, store, pending_manager):
        owner_client.post(
            reverse("review_request", args=[store.id]),
            {"user_id": pending_manager.id, "decision": "approved"},
        )
        assert StoreManager.objects.get(store=store, manager=pending_manager).status == ManagerStatus.APPROVED

    def test_employee_cannot_review(self, employee_client, staffed_store, pending_manager):
        res = employee_client.post(
            reverse("review_request", args=[staffed_store.id]),
            {"user_id": pending_manager.id, "decision": "approved"},
        )
        assert res.status_code == 403


# ===== Store pages =====

class TestStorePages:

    def test_member_sees_store(self, employee_client, staffed_store):
        res = employee_client.get(reverse("store_detail", args=[staffed_store.id]))
        assert res.status_code == 200
        assert res.context["access"].is_employee

    def test_outsider_forbidden(self, outsider_client, store):
        assert outsider_client.get(reverse("store_detail", args=[store.id])).status_code == 403

    def test_unknown_store(self, outsider_client):
        assert outsider_client.get(reverse("store_detail", args=[999999])).status_code == 404

    def test_employee_cannot_add_people(self, employee_client, staffed_store):
        res = employee_client.post(reverse("person_add", args=[staffed_store.id]), {"email": "oscar@example.com"})
        assert res.status_code == 403

    def test_manager_adds_employee(self, owner_client, store, outsider):
        res = owner_client.post(reverse("person_add", args=[store.id]), {"email": "oscar@example.com"})
        assert res.url == reverse("store_detail", args=[store.id])
        assert StoreEmployee.objects.filter(store=store, employee=outsider).exists()

    def test_add_unknown_email_flashes_error(self, owner_client, store):
        res = owner_client.post(reverse("person_add", args=[store.id]), {"email": "ghost@example.com"})
        assert "No user found with that email. They must register first." in _messages(res)

    def test_remove_manager_role(self, owner_client, staffed_store, owner, employee):
        owner_client.post(reverse("person_promote", args=[staffed_store.id]), {"user_id": employee.id})
        assert StoreManager.objects.filter(store=staffed_store, manager=employee).exists()
        owner_client.post(
            reverse("person_remove", args=[staffed_store.id]),
            {"user_id": employee.id, "role": "manager"},
        )
        assert not StoreManager.objects.filter(store=staffed_store, manager=employee).exists()
        assert StoreEmployee.objects.filter(store=staffed_store, employee=employee).exists()

    def test_leave(self, employee_client, staffed_store, employee):
        res = employee_client.post(reverse("store_leave", args=[staffed_store.id]))
        assert res.url == reverse("dashboard")
        assert not StoreEmployee.objects.filter(store=staffed_store, employee=employee).exists()

    def test_primary_deletes_store(self, owner_client, store):
        res = owner_client.post(reverse("store_delete", args=[store.id]))
        assert res.url == reverse("dashboard")
        assert owner_client.get(reverse("store_detail", args=[store.id])).status_code == 404


# ===== Schedule =====

class TestScheduleViews:

    def _shift_data(self, employee, **overrides):
        data = {
            "employee_id": employee.id,
            "date": WEEK_ANCHOR.isoformat(),
            "start_time": "09:00",
            "end_time": "17:00",
            "notes": "",
        }
        data.update(overrides)
        return data

    def test_manager_creates_shift(self, owner_client, staffed_store, employee):
        res = owner_client.post(reverse("shift_create", args=[staffed_store.id]), self._shift_data(employee))
        assert res.status_code == 302
        assert "date=2024-05-15" in res.url
        shift = Shift.objects.get(employee=employee)
        assert shift.schedule.store == staffed_store

    def test_invalid_time_range_is_flashed(self, owner_client, staffed_store, employee):
        res = owner_client.post(
            reverse("shift_create", args=[staffed_store.id]),
            self._shift_data(employee, start_time="17:00", end_time="09:00"),
        )
        assert "End time must be after start time." in _messages(res)
        assert not Shift.objects.exists()

    def test_employee_cannot_create_shift(self, employee_client, staffed_store, employee):
        res = employee_client.post(reverse("shift_create", args=[staffed_store.id]), self._shift_data(employee))
        assert res.status_code == 403

    def test_update_and_delete(self, owner_client, staffed_store, owner, employee):
        shift = save_shift(owner, staffed_store, employee_id=employee.id, day=WEEK_ANCHOR, start=time(9), end=time(12))
        owner_client.post(
            reverse("shift_update", args=[staffed_store.id, shift.id]),
            self._shift_data(employee, start_time="10:00", end_time="15:00"),
        )
        shift.refresh_from_db()
        assert shift.hours == 5

        owner_client.post(reverse("shift_delete", args=[staffed_store.id, shift.id]))
        assert not Shift.objects.filter(pk=shift.pk).exists()

    def test_shift_details_json(self, owner_client, staffed_store, owner, employee):
        shift = save_shift(owner, staffed_store, employee_id=employee.id, day=WEEK_ANCHOR, start=time(9), end=time(12))
        data = owner_client.get(reverse("shift_details", args=[staffed_store.id, shift.id])).json()
        assert data["employee_id"] == employee.id
        assert data["date"] == "2024-05-15"
        assert data["start_time"] == "09:00"
        assert data["hours"] == 3

    def test_publish(self, owner_client, store):
        owner_client.post(
            reverse("schedule_publish", args=[store.id]),
            {"date": WEEK_ANCHOR.isoformat(), "publish": "1"},
        )
        assert Schedule.objects.get(store=store).published

    def test_schedule_page_for_employee(self, employee_client, staffed_store):
        res = employee_client.get(reverse("schedule", args=[staffed_store.id]), {"date": "2024-05-15", "manage": "1"})
        assert res.status_code == 200
        week = res.context["week"]
        assert not week.manage
        assert res.context["shift_form"] is None

    def test_schedule_page_manage_mode(self, owner_client, staffed_store):
        res = owner_client.get(reverse("schedule", args=[staffed_store.id]), {"date": "2024-05-15", "manage": "1"})
        assert res.status_code == 200
        assert res.context["week"].manage
        assert res.context["shift_form"] is not None

    def test_bad_date_falls_back_to_today(self, owner_client, store):
        res = owner_client.get(reverse("schedule", args=[store.id]), {"date": "not-a-date"})
        assert res.status_code == 200
        assert res.context["week"].week_start <= res.context["today"] <= res.context["week"].week_end


# ===== Availability =====

class TestAvailabilityViews:

    def test_set_available_window(self, employee_client, staffed_store, employee):
        employee_client.post(
            reverse("my_availability", args=[staffed_store.id]),
            {"date": "2024-05-15", "start_time": "09:00", "end_time": "13:00"},
        )
        record = Availability.objects.get(user=employee)
        assert record.status == AvailabilityStatus.AVAILABLE

    def test_blank_times_mark_unavailable(self, employee_client, staffed_store, employee):
        employee_client.post(reverse("my_availability", args=[staffed_store.id]), {"date": "2024-05-15"})
        assert Availability.objects.get(user=employee).status == AvailabilityStatus.UNAVAILABLE

    def test_one_time_only_is_rejected(self, employee_client, staffed_store):
        res = employee_client.post(
            reverse("my_availability", args=[staffed_store.id]),
            {"date": "2024-05-15", "start_time": "09:00"},
        )
        assert not Availability.objects.exists()
        assert any("both a start and an end time" in m for m in _messages(res))

    def test_clear(self, employee_client, staffed_store, employee):
        employee_client.post(reverse("my_availability", args=[staffed_store.id]), {"date": "2024-05-15"})
        employee_client.post(reverse("availability_delete", args=[staffed_store.id]), {"date": "2024-05-15"})
        assert not Availability.objects.exists()

    def test_team_availability_is_manager_only(self, employee_client, owner_client, staffed_store):
        assert employee_client.get(reverse("team_availability", args=[staffed_store.id])).status_code == 403
        assert owner_client.get(reverse("team_availability", args=[staffed_store.id])).status_code == 200
