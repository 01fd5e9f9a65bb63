"""Access and validation failures raised by the course services.

Each failure is a DRF `APIException`, so the API layer renders it as a
structured `{"detail": ...}` response without extra translation.
"""
from __future__ import annotations

from rest_framework import exceptions, status


class Unauthenticated(exceptions.NotAuthenticated):
    """No identity was supplied."""

    default_detail = "Unauthorized"


class Forbidden(exceptions.PermissionDenied):
    """An identity is present but its role or ownership does not allow the action."""

    default_detail = "Forbidden"


class NotFound(exceptions.NotFound):
    """The entity is missing, or a listing matched no rows at all."""


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"
    default_code = "conflict"


class ValidationFailed(exceptions.ValidationError):
    """Malformed or out-of-enum input."""
