from __future__ import annotations

from typing import Any

from apps.stores.services import pending_requests_for


def initials_for(name: str) -> str:
    words = [w for w in name.split() if w]
    if not words:
        return ""
    if len(words) == 1:
        return words[0][:1].upper()
    return (words[0][0] + words[-1][0]).upper()


def shifttrack_header(request) -> dict[str, Any]:
    """Header data: who is signed in and how many manager requests await them."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return {}
    return {
        "user_display_name": user.display_name,
        "user_initials": initials_for(user.display_name),
        "pending_request_count": pending_requests_for(user).count(),
    }
