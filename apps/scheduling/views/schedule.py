"""
=============================================================================
SCHEDULE VIEWS
=============================================================================

Views for a store's weekly schedule:
- schedule_view() - week grid for any member, edit mode for managers
- shift_create() / shift_update() - save a shift from the grid form
- shift_delete() - remove a shift
- shift_details() - JSON endpoint for the edit form
- schedule_publish() - publish / unpublish the week

=============================================================================
"""
from __future__ import annotations

from datetime import timedelta

from django.contrib import messages
from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from apps.stores.decorators import store_manager_required, store_member_required

from ..forms import ShiftForm
from ..models import Shift
from ..services import delete_shift, save_shift, set_schedule_published, shift_day, week_bounds
from ..week_view import build_week_view, store_staff
from .helpers import (
    _error_text,
    _form_error_text,
    _parse_date,
    _parse_required_date,
    _redirect_back,
    _schedule_url,
)


def _store_shift_or_404(request: HttpRequest, shift_id: int) -> Shift:
    return get_object_or_404(
        Shift.objects.select_related("schedule", "employee"),
        pk=shift_id,
        schedule__store=request.store,
    )


# =============================================================================
# WEEK GRID
# =============================================================================


@store_member_required
@require_http_methods(["GET"])
def schedule_view(request: HttpRequest, store_id: int) -> HttpResponse:
    """
    Week grid for the store.

    Query Parameters:
    - date: any day in the week to show (default: today)
    - manage: '1' turns on edit mode (approved managers only)
    - edit: shift id to load into the form in edit mode
    """
    today = timezone.localdate()
    anchor = _parse_date(request.GET.get("date"), today)
    manage = request.GET.get("manage") == "1"
    access = request.store_access

    week = build_week_view(request.store, anchor, access, manage=manage)

    editing = None
    shift_form = None
    if week.manage:
        edit_id = request.GET.get("edit") or ""
        if edit_id.isdigit():
            editing = Shift.objects.filter(pk=int(edit_id), schedule__store=request.store).first()
        if editing is not None:
            initial = {
                "employee_id": editing.employee_id,
                "date": shift_day(editing),
                "start_time": timezone.localtime(editing.start_time).time(),
                "end_time": timezone.localtime(editing.end_time).time(),
                "notes": editing.notes,
            }
        else:
            initial = {"date": today if week.week_start <= today <= week.week_end else week.week_start}
        shift_form = ShiftForm(staff=store_staff(request.store), initial=initial)

    start, _ = week_bounds(anchor)
    return render(
        request,
        "scheduling/schedule.html",
        {
            "store": request.store,
            "access": access,
            "week": week,
            "today": today,
            "prev_week": start - timedelta(days=7),
            "next_week": start + timedelta(days=7),
            "editing": editing,
            "shift_form": shift_form,
        },
    )


# =============================================================================
# SHIFT CRUD
# =============================================================================


def _save_shift_from_post(request: HttpRequest, *, shift: Shift | None, success_message: str) -> HttpResponse:
    """
    Reads the shift form, saves through the service and redirects to the
    week the shift landed in. Validation errors go back to the form page.
    """
    fallback = _schedule_url(request.store.id, timezone.localdate(), manage=True)
    form = ShiftForm(request.POST, staff=store_staff(request.store))
    if not form.is_valid():
        messages.error(request, _form_error_text(form))
        return _redirect_back(request, fallback)

    data = form.cleaned_data
    try:
        saved = save_shift(
            request.user,
            request.store,
            employee_id=data["employee_id"],
            day=data["date"],
            start=data["start_time"],
            end=data["end_time"],
            notes=data["notes"],
            shift=shift,
        )
    except ValidationError as exc:
        messages.error(request, _error_text(exc))
        return _redirect_back(request, fallback)

    messages.success(request, success_message)
    return redirect(_schedule_url(request.store.id, shift_day(saved), manage=True))


@store_manager_required
@require_http_methods(["POST"])
def shift_create(request: HttpRequest, store_id: int) -> HttpResponse:
    return _save_shift_from_post(request, shift=None, success_message="Shift added.")


@store_manager_required
@require_http_methods(["POST"])
def shift_update(request: HttpRequest, store_id: int, shift_id: int) -> HttpResponse:
    shift = _store_shift_or_404(request, shift_id)
    return _save_shift_from_post(request, shift=shift, success_message="Shift updated.")


@store_manager_required
@require_http_methods(["POST"])
def shift_delete(request: HttpRequest, store_id: int, shift_id: int) -> HttpResponse:
    shift = _store_shift_or_404(request, shift_id)
    day = shift_day(shift)
    delete_shift(request.user, request.store, shift)
    messages.success(request, "Shift deleted.")
    return redirect(_schedule_url(store_id, day, manage=True))


@store_manager_required
@require_http_methods(["GET"])
def shift_details(request: HttpRequest, store_id: int, shift_id: int) -> JsonResponse:
    """JSON for populating the edit form without a page load."""
    shift = _store_shift_or_404(request, shift_id)
    local_start = timezone.localtime(shift.start_time)
    local_end = timezone.localtime(shift.end_time)
    return JsonResponse({
        "id": shift.id,
        "employee_id": shift.employee_id,
        "employee": shift.employee.display_name if shift.employee else shift.original_employee_name,
        "date": local_start.date().isoformat(),
        "start_time": local_start.strftime("%H:%M"),
        "end_time": local_end.strftime("%H:%M"),
        "notes": shift.notes,
        "hours": shift.hours,
        "updated_at": shift.updated_at.isoformat(),
    })


# =============================================================================
# PUBLISHING
# =============================================================================


@store_manager_required
@require_http_methods(["POST"])
def schedule_publish(request: HttpRequest, store_id: int) -> HttpResponse:
    """
    Publishes or unpublishes the week containing POST['date'].
    POST['publish'] == '1' publishes, anything else unpublishes.
    """
    try:
        anchor = _parse_required_date(request.POST.get("date"), "date")
    except ValidationError as exc:
        messages.error(request, _error_text(exc))
        return _redirect_back(request, _schedule_url(store_id, timezone.localdate(), manage=True))

    publish = request.POST.get("publish") == "1"
    schedule = set_schedule_published(request.user, request.store, anchor, publish)
    if publish:
        messages.success(request, "Schedule published. Employees can now see this week.")
    else:
        messages.info(request, "Schedule unpublished.")
    return redirect(_schedule_url(store_id, schedule.week_start_date, manage=True))
