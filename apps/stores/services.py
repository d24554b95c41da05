"""
=============================================================================
STORE SERVICES (Business Logic Layer)
=============================================================================

Onboarding and membership rules for stores, kept out of the views so they
can be reused and tested directly.

Key responsibilities:

1. JOIN CODES
   - generate_join_code() / normalize_join_code()

2. ONBOARDING
   - create_store_with_manager() - new store with its primary manager
   - join_store_as_employee() - employees join immediately
   - request_manager_access() - managers join as pending + employee access
   - review_manager_request() - approve or reject a pending manager

3. MEMBERSHIP MANAGEMENT
   - add_employee_by_email(), promote_to_manager()
   - remove_employee(), remove_manager() (demotes to employee)
   - transfer_primary(), leave_store()

4. STORE MAINTENANCE
   - update_store_details(), regenerate_join_code(), delete_store()

5. QUERY HELPERS
   - get_store_access(), store_memberships(), store_roster(),
     pending_requests_for()

Business rule violations raise django.core.exceptions.ValidationError with
user-facing messages; acting without the required role raises
PermissionDenied.
=============================================================================
"""
from __future__ import annotations

import logging
import re
import secrets
import string
from dataclasses import dataclass, field

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from .models import ManagerStatus, Store, StoreEmployee, StoreManager

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits
JOIN_CODE_LENGTH = Store.JOIN_CODE_LENGTH
JOIN_CODE_PATTERN = re.compile(rf"[A-Za-z0-9]{{{JOIN_CODE_LENGTH}}}")


# =============================================================================
# ACCESS RESOLUTION
# =============================================================================

@dataclass(frozen=True)
class StoreAccess:
    """
    A user's standing in one store.

    manager_status is None when the user has no manager row at all. Only an
    approved manager row grants manager rights; pending and rejected
    managers are treated like employees.
    """
    store_id: int
    user_id: int | None
    manager_status: str | None = None
    is_primary: bool = False
    is_employee: bool = False

    @property
    def is_manager(self) -> bool:
        return self.manager_status == ManagerStatus.APPROVED

    @property
    def has_manager_row(self) -> bool:
        return self.manager_status is not None

    @property
    def is_member(self) -> bool:
        return self.is_employee or self.has_manager_row

    @property
    def role(self) -> str | None:
        if self.has_manager_row and self.is_employee:
            return "both"
        if self.has_manager_row:
            return "manager"
        if self.is_employee:
            return "employee"
        return None


def get_store_access(user, store: Store) -> StoreAccess:
    if not getattr(user, "is_authenticated", False):
        return StoreAccess(store_id=store.id, user_id=None)
    link = StoreManager.objects.filter(store=store, manager=user).only("status", "is_primary").first()
    is_employee = StoreEmployee.objects.filter(store=store, employee=user).exists()
    return StoreAccess(
        store_id=store.id,
        user_id=user.id,
        manager_status=link.status if link else None,
        is_primary=bool(link and link.is_primary),
        is_employee=is_employee,
    )


def require_manager(user, store: Store, access: StoreAccess | None = None) -> StoreAccess:
    access = access or get_store_access(user, store)
    if not access.is_manager:
        logger.warning("user=%s denied manager action on store=%s", getattr(user, "id", None), store.id)
        raise PermissionDenied("Only approved managers can do this.")
    return access


def require_primary(user, store: Store, access: StoreAccess | None = None) -> StoreAccess:
    access = access or get_store_access(user, store)
    if not access.is_primary:
        logger.warning("user=%s denied primary-manager action on store=%s", getattr(user, "id", None), store.id)
        raise PermissionDenied("Only the primary manager can do this.")
    return access


# =============================================================================
# JOIN CODES
# =============================================================================

def generate_join_code() -> str:
    """
    Returns a random upper-case alphanumeric code that no store uses yet.

    Gives up after SHIFTTRACK_JOIN_CODE_ATTEMPTS collisions.
    """
    for _ in range(settings.SHIFTTRACK_JOIN_CODE_ATTEMPTS):
        code = "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(JOIN_CODE_LENGTH))
        if not Store.objects.filter(join_code=code).exists():
            return code
    logger.error("could not generate a unique join code")
    raise ValidationError("Failed to generate join code.")


def normalize_join_code(raw: str | None) -> str:
    code = (raw or "").strip()
    if not code:
        raise ValidationError("Please enter a store code.")
    if not JOIN_CODE_PATTERN.fullmatch(code):
        raise ValidationError(f"Store code must be {JOIN_CODE_LENGTH} alphanumeric characters.")
    return code.upper()


def find_store_by_code(raw: str | None) -> Store:
    code = normalize_join_code(raw)
    store = Store.objects.filter(join_code__iexact=code).first()
    if store is None:
        raise ValidationError("Invalid store code.")
    return store


# =============================================================================
# ONBOARDING
# =============================================================================

@transaction.atomic
def create_store_with_manager(user, *, name: str, address: str = "", phone_number: str = "") -> Store:
    """Creates a store and makes its creator the approved primary manager."""
    name = (name or "").strip()
    if not name:
        raise ValidationError({"name": "Store name is required."})
    store = Store.objects.create(
        name=name,
        address=(address or "").strip(),
        phone_number=(phone_number or "").strip(),
        join_code=generate_join_code(),
    )
    StoreManager.objects.create(
        store=store,
        manager=user,
        is_primary=True,
        status=ManagerStatus.APPROVED,
    )
    logger.info("store=%s created by user=%s", store.id, user.id)
    return store


def join_store_as_employee(user, code: str) -> Store:
    """Adds the user to the store behind `code` as an employee. No approval step."""
    store = find_store_by_code(code)
    _, created = StoreEmployee.objects.get_or_create(store=store, employee=user)
    if not created:
        raise ValidationError(f"You are already part of {store.name}.")
    logger.info("user=%s joined store=%s as employee", user.id, store.id)
    return store


@transaction.atomic
def request_manager_access(user, code: str) -> StoreManager:
    """
    Files a pending manager request for the store behind `code`.

    The requester is added as an employee straight away so they can see the
    schedule and set availability while the request is reviewed.
    """
    store = find_store_by_code(code)
    existing = StoreManager.objects.filter(store=store, manager=user).first()
    if existing is not None:
        verb = "requested to join" if existing.status == ManagerStatus.PENDING else "joined"
        raise ValidationError(f"You have already {verb} this store.")

    StoreEmployee.objects.get_or_create(store=store, employee=user)
    request = StoreManager.objects.create(
        store=store,
        manager=user,
        is_primary=False,
        status=ManagerStatus.PENDING,
    )
    logger.info("user=%s requested manager access to store=%s", user.id, store.id)
    return request


def review_manager_request(reviewer, store: Store, candidate, decision: str) -> StoreManager:
    """Approves or rejects a pending manager request. Reviewer must be an approved manager."""
    if decision not in (ManagerStatus.APPROVED, ManagerStatus.REJECTED):
        raise ValidationError("Decision must be approved or rejected.")
    require_manager(reviewer, store)

    link = StoreManager.objects.filter(store=store, manager=candidate).first()
    if link is None or link.status != ManagerStatus.PENDING:
        raise ValidationError("There is no pending request for this person.")
    link.status = decision
    link.save(update_fields=["status", "updated_at"])
    logger.info(
        "manager request user=%s store=%s %s by user=%s",
        candidate.id, store.id, decision, reviewer.id,
    )
    return link


def pending_requests_for(user):
    """Pending manager requests in every store where `user` is an approved manager."""
    store_ids = StoreManager.objects.approved().filter(manager=user).values_list("store_id", flat=True)
    return (
        StoreManager.objects.pending()
        .filter(store_id__in=list(store_ids))
        .select_related("store", "manager")
        .order_by("store__name", "created_at")
    )


# =============================================================================
# MEMBERSHIP MANAGEMENT
# =============================================================================

def add_employee_by_email(actor, store: Store, email: str):
    require_manager(actor, store)
    User = get_user_model()
    try:
        person = User.objects.get_by_email(email)
    except User.DoesNotExist:
        raise ValidationError("No user found with that email. They must register first.")
    _, created = StoreEmployee.objects.get_or_create(store=store, employee=person)
    if not created:
        raise ValidationError("This person is already an employee.")
    logger.info("user=%s added user=%s to store=%s", actor.id, person.id, store.id)
    return person


def promote_to_manager(actor, store: Store, person) -> StoreManager:
    require_manager(actor, store)
    if not StoreEmployee.objects.filter(store=store, employee=person).exists():
        raise ValidationError("Only employees of this store can be made managers.")
    link = StoreManager.objects.filter(store=store, manager=person).first()
    if link is not None and link.status == ManagerStatus.APPROVED:
        raise ValidationError("This person is already a manager.")
    if link is None:
        link = StoreManager.objects.create(
            store=store,
            manager=person,
            is_primary=False,
            status=ManagerStatus.APPROVED,
        )
    else:
        link.status = ManagerStatus.APPROVED
        link.save(update_fields=["status", "updated_at"])
    logger.info("user=%s promoted user=%s to manager in store=%s", actor.id, person.id, store.id)
    return link


def remove_employee(actor, store: Store, person) -> None:
    require_manager(actor, store)
    if StoreManager.objects.filter(store=store, manager=person, is_primary=True).exists():
        raise ValidationError("The primary manager cannot be removed.")
    deleted, _ = StoreEmployee.objects.filter(store=store, employee=person).delete()
    if not deleted:
        raise ValidationError("This person is not an employee of this store.")
    logger.info("user=%s removed employee user=%s from store=%s", actor.id, person.id, store.id)


@transaction.atomic
def remove_manager(actor, store: Store, person) -> bool:
    """
    Takes manager rights away and keeps the person on as an employee.

    Returns True when the person had to be added as an employee (a demotion)
    and False when they already were one.
    """
    require_manager(actor, store)
    if person.pk == actor.pk:
        raise ValidationError("You cannot remove yourself as a manager.")
    link = StoreManager.objects.filter(store=store, manager=person).first()
    if link is None:
        raise ValidationError("This person is not a manager of this store.")
    if link.is_primary:
        raise ValidationError("The primary manager cannot be removed. Transfer ownership first.")
    link.delete()
    _, created = StoreEmployee.objects.get_or_create(store=store, employee=person)
    logger.info("user=%s removed manager user=%s from store=%s", actor.id, person.id, store.id)
    return created


@transaction.atomic
def transfer_primary(actor, store: Store, new_primary) -> StoreManager:
    """
    Hands the primary-manager flag to another approved manager.

    The old flag is cleared before the new one is set so the
    one-primary-per-store constraint holds at every step.
    """
    require_primary(actor, store)
    if new_primary.pk == actor.pk:
        raise ValidationError("You are already the primary manager.")
    target = StoreManager.objects.select_for_update().filter(store=store, manager=new_primary).first()
    if target is None or target.status != ManagerStatus.APPROVED:
        raise ValidationError("Primary status can only go to an approved manager of this store.")

    StoreManager.objects.filter(store=store, is_primary=True).update(is_primary=False)
    target.is_primary = True
    target.save(update_fields=["is_primary", "updated_at"])
    logger.info("store=%s primary manager moved from user=%s to user=%s", store.id, actor.id, new_primary.id)
    return target


@transaction.atomic
def leave_store(user, store: Store) -> None:
    access = get_store_access(user, store)
    if not access.is_member:
        raise ValidationError("You are not associated with this store.")
    if access.is_primary:
        raise ValidationError("You are the primary manager and cannot leave the store.")
    StoreManager.objects.filter(store=store, manager=user).delete()
    StoreEmployee.objects.filter(store=store, employee=user).delete()
    logger.info("user=%s left store=%s", user.id, store.id)


# =============================================================================
# STORE MAINTENANCE
# =============================================================================

def update_store_details(actor, store: Store, *, name: str, address: str = "", phone_number: str = "") -> Store:
    require_manager(actor, store)
    name = (name or "").strip()
    if not name:
        raise ValidationError({"name": "Store name is required."})
    store.name = name
    store.address = (address or "").strip()
    store.phone_number = (phone_number or "").strip()
    store.save(update_fields=["name", "address", "phone_number", "updated_at"])
    return store


def regenerate_join_code(actor, store: Store) -> str:
    require_manager(actor, store)
    store.join_code = generate_join_code()
    store.save(update_fields=["join_code", "updated_at"])
    logger.info("store=%s join code regenerated by user=%s", store.id, actor.id)
    return store.join_code


def delete_store(actor, store: Store) -> None:
    require_primary(actor, store)
    store_id = store.id
    store.delete()
    logger.info("store=%s deleted by user=%s", store_id, actor.id)


# =============================================================================
# QUERY HELPERS
# =============================================================================

@dataclass
class StoreMembership:
    store: Store
    manager_status: str | None = None
    is_primary: bool = False
    is_employee: bool = False

    @property
    def is_manager(self) -> bool:
        return self.manager_status is not None

    @property
    def is_approved_manager(self) -> bool:
        return self.manager_status == ManagerStatus.APPROVED

    @property
    def role(self) -> str:
        if self.is_manager and self.is_employee:
            return "both"
        return "manager" if self.is_manager else "employee"


@dataclass
class MembershipTabs:
    all: list[StoreMembership] = field(default_factory=list)
    managed: list[StoreMembership] = field(default_factory=list)
    employee_only: list[StoreMembership] = field(default_factory=list)


def store_memberships(user) -> MembershipTabs:
    """
    Every store the user belongs to, ordered by name, split into dashboard tabs.

    A store shows up under "managed" for any manager row, pending included,
    so the user can see the state of their request.
    """
    manager_links = {
        link.store_id: link
        for link in StoreManager.objects.filter(manager=user).only("store_id", "status", "is_primary")
    }
    employee_store_ids = set(StoreEmployee.objects.filter(employee=user).values_list("store_id", flat=True))
    store_ids = set(manager_links) | employee_store_ids

    tabs = MembershipTabs()
    for store in Store.objects.filter(id__in=store_ids).order_by("name"):
        link = manager_links.get(store.id)
        membership = StoreMembership(
            store=store,
            manager_status=link.status if link else None,
            is_primary=bool(link and link.is_primary),
            is_employee=store.id in employee_store_ids,
        )
        tabs.all.append(membership)
        if membership.is_manager:
            tabs.managed.append(membership)
        elif membership.is_employee:
            tabs.employee_only.append(membership)
    return tabs


@dataclass
class Roster:
    managers: list[StoreManager]
    employees: list


def store_roster(store: Store) -> Roster:
    managers = list(store.manager_links.select_related("manager").order_by("-is_primary", "manager__full_name"))
    employees = [
        link.employee
        for link in store.employee_links.select_related("employee").order_by("employee__full_name", "employee__email")
    ]
    return Roster(managers=managers, employees=employees)
