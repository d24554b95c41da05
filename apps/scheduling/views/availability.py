"""
=============================================================================
AVAILABILITY VIEWS
=============================================================================

- my_availability() - the user's own availability for a store (GET/POST)
- availability_delete() - clear one day back to "Not Set"
- team_availability_view() - week grid of everyone's availability (managers)

=============================================================================
"""
from __future__ import annotations

from datetime import timedelta

from django.contrib import messages
from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from apps.stores.decorators import store_manager_required, store_member_required

from ..forms import AvailabilityForm
from ..services import availability_for, delete_availability, set_availability, week_bounds
from ..week_view import team_availability
from .helpers import _error_text, _form_error_text, _parse_date, _parse_required_date


@store_member_required
@require_http_methods(["GET", "POST"])
def my_availability(request: HttpRequest, store_id: int) -> HttpResponse:
    """
    GET: the user's upcoming availability records plus the entry form.
    POST: saves one day. Leaving both times blank marks the day unavailable.
    """
    today = timezone.localdate()
    form = AvailabilityForm(request.POST or None, initial={"date": today})
    if request.method == "POST":
        if not form.is_valid():
            messages.error(request, _form_error_text(form))
            return redirect("my_availability", store_id=store_id)
        day = form.cleaned_data["date"]
        try:
            set_availability(
                request.user,
                request.store,
                day,
                start=form.cleaned_data["start_time"],
                end=form.cleaned_data["end_time"],
            )
        except ValidationError as exc:
            messages.error(request, _error_text(exc))
        else:
            messages.success(request, f"Availability saved for {day.strftime('%a, %b %d')}.")
        return redirect("my_availability", store_id=store_id)

    records = availability_for(request.user, request.store).filter(date__gte=today)
    return render(
        request,
        "scheduling/my_availability.html",
        {
            "store": request.store,
            "access": request.store_access,
            "form": form,
            "records": records,
            "today": today,
        },
    )


@store_member_required
@require_http_methods(["POST"])
def availability_delete(request: HttpRequest, store_id: int) -> HttpResponse:
    try:
        day = _parse_required_date(request.POST.get("date"), "date")
    except ValidationError as exc:
        messages.error(request, _error_text(exc))
        return redirect("my_availability", store_id=store_id)

    if delete_availability(request.user, request.store, day):
        messages.success(request, "Availability cleared.")
    else:
        messages.info(request, "Nothing to clear for that day.")
    return redirect("my_availability", store_id=store_id)


@store_manager_required
@require_http_methods(["GET"])
def team_availability_view(request: HttpRequest, store_id: int) -> HttpResponse:
    today = timezone.localdate()
    anchor = _parse_date(request.GET.get("date"), today)
    week = team_availability(request.store, anchor, request.store_access)
    start, _ = week_bounds(anchor)
    return render(
        request,
        "scheduling/team_availability.html",
        {
            "store": request.store,
            "access": request.store_access,
            "week": week,
            "today": today,
            "prev_week": start - timedelta(days=7),
            "next_week": start + timedelta(days=7),
        },
    )
