"""
=============================================================================
SCHEDULING VIEWS
=============================================================================

├── __init__.py      - This file (exports all public views)
├── helpers.py       - Private helpers (date/time parsing, redirects)
├── schedule.py      - Week grid, shift CRUD, publishing
├── availability.py  - Own availability and the team availability grid

Import Pattern:
    from apps.scheduling import views
    views.schedule_view(request, store_id)
=============================================================================
"""

from .schedule import (
    schedule_view,
    shift_create,
    shift_update,
    shift_delete,
    shift_details,
    schedule_publish,
)

from .availability import (
    my_availability,
    availability_delete,
    team_availability_view,
)

__all__ = [
    # Schedule
    "schedule_view",
    "shift_create",
    "shift_update",
    "shift_delete",
    "shift_details",
    "schedule_publish",
    # Availability
    "my_availability",
    "availability_delete",
    "team_availability_view",
]
