"""
=============================================================================
SCHEDULING SERVICES (Business Logic Layer)
=============================================================================

Write-side rules for schedules, shifts and availability.

Key responsibilities:

1. VALIDATION
   - Time ranges (end after start)
   - Roster membership (shifts only for people in the store)
   - One shift per person per day

2. SHIFT MANAGEMENT
   - get_or_create_schedule(), save_shift(), delete_shift()
   - set_schedule_published()

3. AVAILABILITY
   - set_availability(), delete_availability(), availability_for()

4. HELPERS
   - week_bounds(), calculate_total_hours(), format_time_display()

All validation raises django.core.exceptions.ValidationError with
user-friendly messages suitable for display.
=============================================================================
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from apps.stores.models import Store, StoreEmployee, StoreManager
from apps.stores.services import get_store_access, require_manager

from .models import Availability, AvailabilityStatus, Schedule, Shift

logger = logging.getLogger(__name__)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def week_bounds(anchor: date) -> tuple[date, date]:
    """
    Returns (start, end) for the Sunday-to-Saturday week containing anchor.
    date.weekday() is 0 for Monday, so Sunday needs the +1 shift.
    """
    start = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def week_dates(anchor: date) -> list[date]:
    start, _ = week_bounds(anchor)
    return [start + timedelta(days=i) for i in range(7)]


def shift_day(shift: Shift) -> date:
    return timezone.localtime(shift.start_time).date()


def calculate_total_hours(shifts: Iterable[Shift], employee_id: int | None) -> float:
    return sum(s.hours for s in shifts if s.employee_id == employee_id)


def format_time_display(value) -> str:
    """
    Formats a time, datetime or "HH:MM[:SS]" string as "9:00 AM".
    Returns the input unchanged when it cannot be parsed.
    """
    if not value:
        return ""
    if isinstance(value, datetime):
        value = timezone.localtime(value).time() if timezone.is_aware(value) else value.time()
    if isinstance(value, str):
        raw = value.split("T")[-1][:5]
        try:
            value = datetime.strptime(raw, "%H:%M").time()
        except ValueError:
            return value
    return value.strftime("%I:%M %p").lstrip("0")


def _combine(day: date, moment: time) -> datetime:
    return timezone.make_aware(datetime.combine(day, moment), timezone.get_current_timezone())


# =============================================================================
# VALIDATION FUNCTIONS
# =============================================================================

def validate_time_range(start: time | None, end: time | None) -> None:
    if start is None:
        raise ValidationError({"start_time": "Start time is required."})
    if end is None:
        raise ValidationError({"end_time": "End time is required."})
    if start >= end:
        raise ValidationError({"end_time": "End time must be after start time."})


def validate_on_roster(store: Store, user_id: int) -> None:
    """Shifts can go to employees and approved managers of the store."""
    on_roster = (
        StoreEmployee.objects.filter(store=store, employee_id=user_id).exists()
        or StoreManager.objects.approved().filter(store=store, manager_id=user_id).exists()
    )
    if not on_roster:
        raise ValidationError({"employee": "This person is not on the store's staff."})


def validate_one_shift_per_day(schedule: Schedule, employee_id: int, day: date, exclude_id: int | None = None) -> None:
    others = Shift.objects.filter(schedule=schedule, employee_id=employee_id)
    if exclude_id is not None:
        others = others.exclude(id=exclude_id)
    for other in others:
        if shift_day(other) == day:
            start = format_time_display(other.start_time)
            end = format_time_display(other.end_time)
            raise ValidationError(f"Already scheduled on {day.strftime('%b %d')}: {start}-{end}.")


# =============================================================================
# SHIFT MANAGEMENT
# =============================================================================

def get_or_create_schedule(store: Store, anchor: date) -> Schedule:
    week_start, _ = week_bounds(anchor)
    schedule, created = Schedule.objects.get_or_create(store=store, week_start_date=week_start)
    if created:
        logger.info("schedule created store=%s week=%s", store.id, week_start.isoformat())
    return schedule


@transaction.atomic
def save_shift(
    actor,
    store: Store,
    *,
    employee_id: int,
    day: date,
    start: time | None,
    end: time | None,
    notes: str = "",
    shift: Shift | None = None,
) -> Shift:
    """
    Creates a shift, or updates `shift` in place.

    The week's schedule is created on demand, so moving a shift to another
    week re-homes it to that week's schedule.
    """
    require_manager(actor, store)
    validate_time_range(start, end)
    if shift is not None and shift.schedule.store_id != store.id:
        raise PermissionDenied("Shift belongs to another store.")
    if shift is None or shift.employee_id != employee_id:
        validate_on_roster(store, employee_id)

    schedule = get_or_create_schedule(store, day)
    validate_one_shift_per_day(schedule, employee_id, day, exclude_id=shift.id if shift else None)

    is_new = shift is None
    if is_new:
        shift = Shift(schedule=schedule)
    shift.schedule = schedule
    shift.employee_id = employee_id
    shift.start_time = _combine(day, start)
    shift.end_time = _combine(day, end)
    shift.notes = (notes or "").strip()
    shift.full_clean()
    shift.save()
    logger.info(
        "shift=%s %s store=%s employee=%s day=%s",
        shift.id, "created" if is_new else "updated", store.id, employee_id, day.isoformat(),
    )
    return shift


def delete_shift(actor, store: Store, shift: Shift) -> None:
    require_manager(actor, store)
    if shift.schedule.store_id != store.id:
        raise PermissionDenied("Shift belongs to another store.")
    shift_id = shift.id
    shift.delete()
    logger.info("shift=%s deleted store=%s by user=%s", shift_id, store.id, actor.id)


def set_schedule_published(actor, store: Store, anchor: date, published: bool) -> Schedule:
    require_manager(actor, store)
    schedule = get_or_create_schedule(store, anchor)
    if schedule.published != published:
        schedule.published = published
        schedule.save(update_fields=["published", "updated_at"])
        logger.info(
            "schedule=%s %s by user=%s", schedule.id, "published" if published else "unpublished", actor.id,
        )
    return schedule


# =============================================================================
# AVAILABILITY
# =============================================================================

def set_availability(user, store: Store, day: date, start: time | None = None, end: time | None = None) -> Availability:
    """
    Records the user's availability for `day`, replacing any earlier record.

    Both times given: available in that window. Neither: unavailable all day.
    """
    if not get_store_access(user, store).is_member:
        raise PermissionDenied("You are not a member of this store.")
    if (start is None) != (end is None):
        raise ValidationError("Enter both a start and an end time, or neither to mark the day unavailable.")
    if start is not None:
        validate_time_range(start, end)
        status = AvailabilityStatus.AVAILABLE
    else:
        status = AvailabilityStatus.UNAVAILABLE

    record, created = Availability.objects.update_or_create(
        user=user,
        store=store,
        date=day,
        defaults={"status": status, "start_time": start, "end_time": end},
    )
    logger.info(
        "availability %s user=%s store=%s day=%s status=%s",
        "set" if created else "updated", user.id, store.id, day.isoformat(), status,
    )
    return record


def delete_availability(user, store: Store, day: date) -> bool:
    deleted, _ = Availability.objects.filter(user=user, store=store, date=day).delete()
    return bool(deleted)


def availability_for(user, store: Store):
    return Availability.objects.filter(user=user, store=store).order_by("date")
