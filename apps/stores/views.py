"""
=============================================================================
STORE VIEWS
=============================================================================

- dashboard() - the user's stores in tabs plus pending manager requests
- store_create() - new store, creator becomes primary manager
- join_store() - join by code as employee or request manager access
- review_request() - approve / reject a pending manager
- store_detail() - details, join code and people
- store_update(), store_regenerate_code(), store_delete(), store_leave()
- person_add(), person_remove(), person_promote(), primary_transfer()

Service errors (ValidationError) are flashed and the user is sent back to
the page they came from.
=============================================================================
"""
from __future__ import annotations

from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_http_methods

from .decorators import store_manager_required, store_member_required
from .forms import AddEmployeeForm, JoinStoreForm, StoreForm
from .models import ManagerStatus, Store
from .services import (
    add_employee_by_email,
    create_store_with_manager,
    delete_store,
    join_store_as_employee,
    leave_store,
    pending_requests_for,
    promote_to_manager,
    regenerate_join_code,
    remove_employee,
    remove_manager,
    request_manager_access,
    review_manager_request,
    store_memberships,
    store_roster,
    transfer_primary,
    update_store_details,
)


def _flash_validation_error(request: HttpRequest, exc: ValidationError) -> None:
    messages.error(request, " ".join(exc.messages))


def _person_or_404(request: HttpRequest):
    User = get_user_model()
    raw = (request.POST.get("user_id") or "").strip()
    if not raw.isdigit():
        raise ValidationError("Select a person.")
    return get_object_or_404(User, pk=int(raw))


# =============================================================================
# DASHBOARD & ONBOARDING
# =============================================================================


@login_required
@require_http_methods(["GET"])
def dashboard(request: HttpRequest) -> HttpResponse:
    tab = (request.GET.get("tab") or "all").lower()
    if tab not in ("all", "managed", "employee"):
        tab = "all"
    tabs = store_memberships(request.user)
    by_tab = {"all": tabs.all, "managed": tabs.managed, "employee": tabs.employee_only}
    return render(
        request,
        "stores/dashboard.html",
        {
            "tabs": tabs,
            "tab": tab,
            "memberships": by_tab[tab],
            "pending_requests": list(pending_requests_for(request.user)),
            "join_form": JoinStoreForm(),
        },
    )


@login_required
@require_http_methods(["GET", "POST"])
def store_create(request: HttpRequest) -> HttpResponse:
    form = StoreForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            store = create_store_with_manager(
                request.user,
                name=form.cleaned_data["name"],
                address=form.cleaned_data["address"],
                phone_number=form.cleaned_data["phone_number"],
            )
        except ValidationError as exc:
            _flash_validation_error(request, exc)
        else:
            messages.success(request, "Store created successfully!")
            return redirect("store_detail", store_id=store.id)
    return render(request, "stores/store_form.html", {"form": form})


@login_required
@require_http_methods(["POST"])
def join_store(request: HttpRequest) -> HttpResponse:
    form = JoinStoreForm(request.POST)
    if not form.is_valid():
        messages.error(request, f"Store code must be {Store.JOIN_CODE_LENGTH} alphanumeric characters.")
        return redirect("dashboard")

    code = form.cleaned_data["code"]
    try:
        if form.cleaned_data["join_as"] == JoinStoreForm.AS_MANAGER:
            link = request_manager_access(request.user, code)
            messages.success(
                request,
                f"Your request to manage {link.store.name} has been submitted. "
                "You have employee access until an existing manager approves it.",
            )
        else:
            store = join_store_as_employee(request.user, code)
            messages.success(request, f"You've joined {store.name} as an employee.")
    except ValidationError as exc:
        _flash_validation_error(request, exc)
    return redirect("dashboard")


@login_required
@require_http_methods(["POST"])
def review_request(request: HttpRequest, store_id: int) -> HttpResponse:
    store = get_object_or_404(Store, pk=store_id)
    decision = (request.POST.get("decision") or "").lower()
    try:
        candidate = _person_or_404(request)
        review_manager_request(request.user, store, candidate, decision)
    except ValidationError as exc:
        _flash_validation_error(request, exc)
    else:
        verb = "approved" if decision == ManagerStatus.APPROVED else "rejected"
        messages.success(request, f"Request from {candidate.display_name} {verb}.")
    return redirect("dashboard")


# =============================================================================
# STORE DETAIL
# =============================================================================


@store_member_required
@require_http_methods(["GET"])
def store_detail(request: HttpRequest, store_id: int) -> HttpResponse:
    roster = store_roster(request.store)
    return render(
        request,
        "stores/store_detail.html",
        {
            "store": request.store,
            "access": request.store_access,
            "roster": roster,
            "store_form": StoreForm(instance=request.store),
            "add_form": AddEmployeeForm(),
        },
    )


@store_manager_required
@require_http_methods(["POST"])
def store_update(request: HttpRequest, store_id: int) -> HttpResponse:
    form = StoreForm(request.POST, instance=request.store)
    if not form.is_valid():
        messages.error(request, "Please fix the errors and try again.")
        return redirect("store_detail", store_id=store_id)
    try:
        update_store_details(
            request.user,
            request.store,
            name=form.cleaned_data["name"],
            address=form.cleaned_data["address"],
            phone_number=form.cleaned_data["phone_number"],
        )
    except ValidationError as exc:
        _flash_validation_error(request, exc)
    else:
        messages.success(request, "Store details have been updated.")
    return redirect("store_detail", store_id=store_id)


@store_manager_required
@require_http_methods(["POST"])
def store_regenerate_code(request: HttpRequest, store_id: int) -> HttpResponse:
    try:
        code = regenerate_join_code(request.user, request.store)
    except ValidationError as exc:
        _flash_validation_error(request, exc)
    else:
        messages.success(request, f"New join code: {code}")
    return redirect("store_detail", store_id=store_id)


@store_manager_required
@require_http_methods(["POST"])
def store_delete(request: HttpRequest, store_id: int) -> HttpResponse:
    name = request.store.name
    delete_store(request.user, request.store)
    messages.success(request, f"Deleted store: {name}.")
    return redirect("dashboard")


@store_member_required
@require_http_methods(["POST"])
def store_leave(request: HttpRequest, store_id: int) -> HttpResponse:
    try:
        leave_store(request.user, request.store)
    except ValidationError as exc:
        _flash_validation_error(request, exc)
        return redirect("store_detail", store_id=store_id)
    messages.success(request, "You have left the store.")
    return redirect("dashboard")


# =============================================================================
# PEOPLE
# =============================================================================


@store_manager_required
@require_http_methods(["POST"])
def person_add(request: HttpRequest, store_id: int) -> HttpResponse:
    form = AddEmployeeForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Enter a valid email address.")
        return redirect("store_detail", store_id=store_id)
    try:
        person = add_employee_by_email(request.user, request.store, form.cleaned_data["email"])
    except ValidationError as exc:
        _flash_validation_error(request, exc)
    else:
        messages.success(request, f"{person.display_name} is now an employee.")
    return redirect("store_detail", store_id=store_id)


@store_manager_required
@require_http_methods(["POST"])
def person_remove(request: HttpRequest, store_id: int) -> HttpResponse:
    role = (request.POST.get("role") or "employee").lower()
    try:
        person = _person_or_404(request)
        if role == "manager":
            demoted = remove_manager(request.user, request.store, person)
            messages.success(
                request,
                "Manager has been demoted to employee." if demoted else "Manager has been removed from management.",
            )
        else:
            remove_employee(request.user, request.store, person)
            messages.success(request, "Employee has been removed.")
    except ValidationError as exc:
        _flash_validation_error(request, exc)
    return redirect("store_detail", store_id=store_id)


@store_manager_required
@require_http_methods(["POST"])
def person_promote(request: HttpRequest, store_id: int) -> HttpResponse:
    try:
        person = _person_or_404(request)
        promote_to_manager(request.user, request.store, person)
    except ValidationError as exc:
        _flash_validation_error(request, exc)
    else:
        messages.success(request, f"{person.display_name} has been made a manager.")
    return redirect("store_detail", store_id=store_id)


@store_manager_required
@require_http_methods(["POST"])
def primary_transfer(request: HttpRequest, store_id: int) -> HttpResponse:
    try:
        person = _person_or_404(request)
        transfer_primary(request.user, request.store, person)
    except ValidationError as exc:
        _flash_validation_error(request, exc)
    else:
        messages.success(request, f"{person.display_name} is now the primary manager.")
    return redirect("store_detail", store_id=store_id)
