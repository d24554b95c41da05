"""
=============================================================================
STORE MODELS
=============================================================================

Tenancy and membership data:

1. Store - a business location; people find it by its join code
2. StoreManager - manager membership with approval status and primary flag
3. StoreEmployee - employee membership (no approval step)

A user can hold both memberships for the same store. Manager requests start
as pending; until approved the user only has employee-level access.
=============================================================================
"""
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q


class ManagerStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class Store(models.Model):
    JOIN_CODE_LENGTH = 6

    name = models.CharField(max_length=120)
    address = models.CharField(max_length=255, blank=True)
    phone_number = models.CharField(max_length=50, blank=True)
    join_code = models.CharField(max_length=JOIN_CODE_LENGTH, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    @property
    def primary_manager(self):
        link = self.manager_links.filter(is_primary=True).select_related("manager").first()
        return link.manager if link else None


class StoreManagerQuerySet(models.QuerySet):
    def approved(self):
        return self.filter(status=ManagerStatus.APPROVED)

    def pending(self):
        return self.filter(status=ManagerStatus.PENDING)


class StoreManager(models.Model):
    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name="manager_links")
    manager = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="manager_links",
    )
    is_primary = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=ManagerStatus.choices, default=ManagerStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StoreManagerQuerySet.as_manager()

    class Meta:
        ordering = ["-is_primary", "created_at"]
        constraints = [
            models.UniqueConstraint(fields=["store", "manager"], name="unique_manager_per_store"),
            models.UniqueConstraint(
                fields=["store"],
                condition=Q(is_primary=True),
                name="one_primary_manager_per_store",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.manager} manages {self.store} ({self.status})"

    @property
    def is_approved(self) -> bool:
        return self.status == ManagerStatus.APPROVED


class StoreEmployee(models.Model):
    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name="employee_links")
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="employee_links",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["store", "employee"], name="unique_employee_per_store"),
        ]

    def __str__(self) -> str:
        return f"{self.employee} works at {self.store}"
