"""Accounts models: user profile and roles.

Defines a `UserProfile` associated one-to-one with Django's `User`,
capturing the platform role (student/teacher/admin) and a display name.
The profile is created automatically on user creation.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Role(models.TextChoices):
    """Platform roles; the closed set every access rule dispatches on."""

    STUDENT = "student", "Student"
    TEACHER = "teacher", "Teacher"
    ADMIN = "admin", "Admin"


class UserProfile(models.Model):
    """Profile linked to a Django auth user.

    - `role`: fixed for the lifetime of the account as far as access rules go
    - `full_name`: shown in listings and searched by teachers/admins
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT, db_index=True)
    full_name = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover (string repr convenience)
        return f"Profile<{self.user.username}:{self.role}>"

    @property
    def display_name(self) -> str:
        return self.full_name or self.user.username


def display_name(user) -> str | None:
    """Name used in projections; tolerates users without a profile."""
    if user is None:
        return None
    profile = getattr(user, "profile", None)
    if profile is None:
        return user.username
    return profile.display_name
