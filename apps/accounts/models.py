from __future__ import annotations

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class ShiftTrackUserManager(UserManager):
    def get_by_email(self, email: str):
        return self.get(email__iexact=(email or "").strip())


class User(AbstractUser):
    """
    A person who can hold manager and/or employee roles in any number of stores.

    The email address doubles as the username so the stock auth backend can
    log people in by email.
    """

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=150, blank=True)

    objects = ShiftTrackUserManager()

    class Meta:
        ordering = ["full_name", "email"]

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        if not self.username:
            self.username = self.email
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.full_name or self.get_full_name() or self.username

    def __str__(self) -> str:
        return self.display_name
