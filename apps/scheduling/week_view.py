"""
Week-banded view-models for the schedule and availability grids.

Rows are people, columns are the seven days of a Sunday-to-Saturday week.
Everything here is read-only: the functions join the store roster, the
week's shifts and the availability records in memory.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from django.core.exceptions import PermissionDenied

from apps.stores.models import Store, StoreEmployee, StoreManager
from apps.stores.services import StoreAccess

from .models import Availability, Schedule, Shift
from .services import calculate_total_hours, shift_day, week_bounds, week_dates

NOT_SET = "Not Set"


@dataclass(frozen=True)
class StaffMember:
    id: int | None
    full_name: str
    is_manager: bool = False


@dataclass
class DayCell:
    date: date
    shift: Shift | None = None
    availability: Availability | None = None

    @property
    def availability_label(self) -> str:
        return self.availability.label if self.availability else NOT_SET


@dataclass
class StaffRow:
    member: StaffMember
    cells: list[DayCell]
    total_hours: float = 0.0


@dataclass
class WeekView:
    store: Store
    week_start: date
    dates: list[date]
    rows: list[StaffRow] = field(default_factory=list)
    former_rows: list[StaffRow] = field(default_factory=list)
    schedule: Schedule | None = None
    manage: bool = False
    show_shifts: bool = True

    @property
    def week_end(self) -> date:
        return self.dates[-1]

    @property
    def published(self) -> bool:
        return bool(self.schedule and self.schedule.published)


def store_staff(store: Store) -> list[StaffMember]:
    """
    Employees plus approved managers, one entry per person, sorted by name.

    A pending or rejected manager shows up only through their employee row
    and is not flagged as a manager.
    """
    staff: dict[int, StaffMember] = {}
    for link in StoreEmployee.objects.filter(store=store).select_related("employee"):
        staff[link.employee_id] = StaffMember(id=link.employee_id, full_name=link.employee.display_name)
    for link in StoreManager.objects.approved().filter(store=store).select_related("manager"):
        staff[link.manager_id] = StaffMember(id=link.manager_id, full_name=link.manager.display_name, is_manager=True)
    return sorted(staff.values(), key=lambda m: (m.full_name.lower(), m.id))


def _availability_map(store: Store, start: date, end: date) -> dict[tuple[int, date], Availability]:
    records = Availability.objects.filter(store=store, date__gte=start, date__lte=end)
    return {(a.user_id, a.date): a for a in records}


def _former_label(shift: Shift) -> str:
    if shift.original_employee_name:
        return shift.original_employee_name
    if shift.employee is not None:
        return shift.employee.display_name
    return "Former staff"


def build_week_view(store: Store, anchor: date, access: StoreAccess, *, manage: bool = False) -> WeekView:
    """
    Builds the schedule grid for the week containing `anchor`.

    Each cell carries the person's shift for that day (first by start time)
    and their availability. Shifts for people no longer on the roster are
    gathered into former-staff rows keyed by person and the name kept on the
    shift; same-day shifts under one name spill into extra rows.
    """
    start, end = week_bounds(anchor)
    dates = week_dates(anchor)
    staff = store_staff(store)
    schedule = Schedule.objects.filter(store=store, week_start_date=start).first()

    view = WeekView(
        store=store,
        week_start=start,
        dates=dates,
        schedule=schedule,
        manage=manage and access.is_manager,
        show_shifts=access.is_manager or bool(schedule and schedule.published),
    )

    shifts: list[Shift] = []
    if schedule is not None and view.show_shifts:
        shifts = list(schedule.shifts.select_related("employee").order_by("start_time"))
    availability = _availability_map(store, start, end)

    by_person_day: dict[tuple[int | None, date], Shift] = {}
    for s in shifts:
        by_person_day.setdefault((s.employee_id, shift_day(s)), s)

    roster_ids = {m.id for m in staff}
    for member in staff:
        cells = [
            DayCell(date=d, shift=by_person_day.get((member.id, d)), availability=availability.get((member.id, d)))
            for d in dates
        ]
        view.rows.append(StaffRow(member=member, cells=cells, total_hours=calculate_total_hours(shifts, member.id)))

    former: dict[tuple[str, int], list[Shift]] = {}
    for s in shifts:
        if s.employee_id is None or s.employee_id not in roster_ids:
            former.setdefault((_former_label(s), s.employee_id or 0), []).append(s)
    for key in sorted(former):
        label = key[0]
        for day_map in _split_by_day(former[key]):
            cells = [DayCell(date=d, shift=day_map.get(d)) for d in dates]
            view.former_rows.append(
                StaffRow(
                    member=StaffMember(id=None, full_name=label),
                    cells=cells,
                    total_hours=sum(s.hours for s in day_map.values()),
                )
            )
    return view


def _split_by_day(group: list[Shift]) -> list[dict[date, Shift]]:
    # one shift per day per row; a clash opens another row
    rows: list[dict[date, Shift]] = []
    for s in group:
        day = shift_day(s)
        row = next((r for r in rows if day not in r), None)
        if row is None:
            row = {}
            rows.append(row)
        row[day] = s
    return rows


def team_availability(store: Store, anchor: date, access: StoreAccess) -> WeekView:
    """Staff-by-day availability grid. Approved managers only."""
    if not access.is_manager:
        raise PermissionDenied("Only approved managers can view team availability.")
    start, end = week_bounds(anchor)
    dates = week_dates(anchor)
    availability = _availability_map(store, start, end)
    view = WeekView(store=store, week_start=start, dates=dates, show_shifts=False)
    for member in store_staff(store):
        cells = [DayCell(date=d, availability=availability.get((member.id, d))) for d in dates]
        view.rows.append(StaffRow(member=member, cells=cells))
    return view
