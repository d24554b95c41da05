"""
=============================================================================
HELPER FUNCTIONS
=============================================================================

Private helper functions used by scheduling views:
- Date parsing from query strings and POST bodies
- Redirect handling (back to the referring page or the schedule week)
- Flattening ValidationError and form errors into a flash message

These are prefixed with underscore (_) and are not meant to be imported
outside this package.
=============================================================================
"""
from __future__ import annotations

from datetime import date, datetime

from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme


# =============================================================================
# DATE/TIME PARSING
# =============================================================================


def _parse_date(value: str | None, default: date) -> date:
    """
    Parses a YYYY-MM-DD string, falling back to `default` when it is empty
    or malformed. Used for ?date= on the week pages.
    """
    if not value:
        return default
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return default


def _parse_required_date(value: str | None, field: str) -> date:
    raw = (value or "").strip()
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError({field: "Enter a valid date."})


# =============================================================================
# REDIRECT & MESSAGES
# =============================================================================


def _redirect_back(request: HttpRequest, fallback_url: str) -> HttpResponse:
    """
    Redirects to HTTP_REFERER if it points at this host, otherwise to
    `fallback_url`. Keeps open redirects out.
    """
    ref = request.META.get("HTTP_REFERER")
    if ref and url_has_allowed_host_and_scheme(
        url=ref,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    ):
        return redirect(ref)
    return redirect(fallback_url)


def _schedule_url(store_id: int, day: date, *, manage: bool = False) -> str:
    url = f"{reverse('schedule', args=[store_id])}?date={day.isoformat()}"
    if manage:
        url += "&manage=1"
    return url


def _error_text(exc: ValidationError) -> str:
    return " ".join(exc.messages)


def _form_error_text(form) -> str:
    errors = []
    for field_errors in form.errors.values():
        errors.extend(field_errors)
    return " ".join(errors) or "Please fix the errors and try again."
