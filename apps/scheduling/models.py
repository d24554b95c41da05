"""
=============================================================================
SCHEDULING MODELS
=============================================================================

Core data models for weekly store schedules:

1. Schedule - one per store and week (weeks start on Sunday)
2. Shift - a time range on one day for one staff member
3. Availability - a person's available/unavailable mark for a date

Key patterns used:
- Shared validation function for time ranges
- TextChoices for availability status
- Shifts keep the assignee's name so they survive account deletion
=============================================================================
"""
from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


# =============================================================================
# SHARED VALIDATION
# =============================================================================

def _validate_time_range(*, start_time, end_time) -> None:
    """Raises ValidationError on end_time when the range is empty or reversed."""
    if start_time and end_time and start_time >= end_time:
        raise ValidationError({"end_time": "End time must be after start time."})


# =============================================================================
# SCHEDULE MODEL
# =============================================================================

class Schedule(models.Model):
    """
    Week-bound container for a store's shifts.

    Created lazily the first time a manager opens or edits a week.
    Employees only see the shifts once the week is published.
    """
    store = models.ForeignKey("stores.Store", on_delete=models.CASCADE, related_name="schedules")
    week_start_date = models.DateField(db_index=True)
    published = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-week_start_date"]
        constraints = [
            models.UniqueConstraint(fields=["store", "week_start_date"], name="unique_schedule_per_store_week"),
        ]

    def clean(self) -> None:
        # date.weekday(): Monday == 0, Sunday == 6
        if self.week_start_date and self.week_start_date.weekday() != 6:
            raise ValidationError({"week_start_date": "Weeks start on Sunday."})

    @property
    def week_end_date(self):
        return self.week_start_date + timedelta(days=6)

    def __str__(self) -> str:
        return f"{self.store} week of {self.week_start_date.isoformat()}"


# =============================================================================
# SHIFT MODEL
# =============================================================================

class Shift(models.Model):
    """
    A scheduled time range for one person on one day.

    start_time/end_time are full datetimes; the shift's day is the local
    date of start_time. employee becomes NULL when the account is deleted,
    and original_employee_name keeps the label for the schedule grid.
    """
    schedule = models.ForeignKey(Schedule, on_delete=models.CASCADE, related_name="shifts")
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="shifts",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    notes = models.TextField(blank=True)
    original_employee_name = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time"]

    def clean(self) -> None:
        _validate_time_range(start_time=self.start_time, end_time=self.end_time)

    @property
    def hours(self) -> float:
        return max(0.0, (self.end_time - self.start_time).total_seconds() / 3600)

    def __str__(self) -> str:
        who = self.employee or self.original_employee_name or "Unassigned"
        return f"{who} {self.start_time.isoformat()} - {self.end_time.isoformat()}"


# =============================================================================
# AVAILABILITY MODEL
# =============================================================================

class AvailabilityStatus(models.TextChoices):
    AVAILABLE = "available", "Available"
    UNAVAILABLE = "unavailable", "Unavailable"


class Availability(models.Model):
    """
    A person's availability in one store on one date.

    Available records may carry a time window; unavailable records never do.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="availability",
    )
    store = models.ForeignKey("stores.Store", on_delete=models.CASCADE, related_name="availability")
    date = models.DateField(db_index=True)
    status = models.CharField(max_length=20, choices=AvailabilityStatus.choices)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date"]
        verbose_name_plural = "availability"
        constraints = [
            models.UniqueConstraint(fields=["user", "store", "date"], name="unique_availability_per_day"),
        ]

    def clean(self) -> None:
        _validate_time_range(start_time=self.start_time, end_time=self.end_time)
        if self.status == AvailabilityStatus.UNAVAILABLE and (self.start_time or self.end_time):
            raise ValidationError("Unavailable days cannot have a time range.")

    @property
    def label(self) -> str:
        if self.status == AvailabilityStatus.UNAVAILABLE:
            return "Unavailable"
        if self.start_time and self.end_time:
            return f"{self.start_time.strftime('%H:%M')} - {self.end_time.strftime('%H:%M')}"
        return "Available"

    def __str__(self) -> str:
        return f"{self.user} {self.date.isoformat()} {self.label}"
