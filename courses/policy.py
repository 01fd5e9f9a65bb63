"""Role policy: who may see and change courses, lessons and enrollments.

Everything here is pure. Callers pass an explicit `Identity` (or `None`
for an anonymous caller) instead of reading the current user from the
request, so the same rules apply wherever an operation is invoked from.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from accounts.models import Role

from .exceptions import Forbidden, Unauthenticated


class Resource(enum.Enum):
    COURSE = "course"
    LESSON = "lesson"
    ENROLLMENT = "enrollment"


class Action(enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller: a user id and the role it acts under."""

    user_id: int
    role: Role
    user: Any = None

    @classmethod
    def from_user(cls, user) -> "Identity | None":
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        profile = getattr(user, "profile", None)
        role = getattr(profile, "role", None)
        if role not in Role.values:
            return None
        return cls(user_id=user.pk, role=Role(role), user=user)

    @classmethod
    def from_request(cls, request) -> "Identity | None":
        return cls.from_user(getattr(request, "user", None))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT


_PUBLIC_RESOURCES = frozenset({Resource.COURSE})

_MUTATION_RULES: dict[tuple[Resource, Action], frozenset[Role]] = {
    (Resource.COURSE, Action.CREATE): frozenset({Role.ADMIN}),
    (Resource.COURSE, Action.UPDATE): frozenset({Role.ADMIN}),
    (Resource.COURSE, Action.DELETE): frozenset({Role.ADMIN}),
    (Resource.LESSON, Action.CREATE): frozenset({Role.TEACHER}),
    (Resource.LESSON, Action.UPDATE): frozenset({Role.TEACHER}),
    (Resource.LESSON, Action.DELETE): frozenset({Role.TEACHER}),
    (Resource.ENROLLMENT, Action.CREATE): frozenset({Role.STUDENT}),
    (Resource.ENROLLMENT, Action.UPDATE): frozenset({Role.ADMIN, Role.TEACHER}),
    (Resource.ENROLLMENT, Action.DELETE): frozenset(),
}

_DENIAL_MESSAGES: dict[tuple[Resource, Action], str] = {
    (Resource.COURSE, Action.CREATE): "Only admins can create courses",
    (Resource.COURSE, Action.UPDATE): "Only admins can update courses",
    (Resource.COURSE, Action.DELETE): "Only admins can delete courses",
    (Resource.LESSON, Action.CREATE): "Only teachers can create lessons",
    (Resource.LESSON, Action.UPDATE): "Only teachers can update lessons",
    (Resource.LESSON, Action.DELETE): "Only teachers can delete lessons",
    (Resource.ENROLLMENT, Action.CREATE): "Only students can create enrollments",
    (Resource.ENROLLMENT, Action.UPDATE): "Only admins or the course teacher can update enrollments",
    (Resource.ENROLLMENT, Action.DELETE): "Enrollments cannot be deleted",
}

NOT_COURSE_TEACHER = "You are not the teacher of this course"


def can_list_all(role: Role | None) -> bool:
    """Whether the role sees every enrollment without narrowing."""
    return role == Role.ADMIN


def can_view(identity: Identity | None, resource: Resource) -> bool:
    return resource in _PUBLIC_RESOURCES or identity is not None


def can_mutate(role: Role | None, resource: Resource, action: Action) -> bool:
    if role is None:
        return False
    return role in _MUTATION_RULES[(resource, action)]


def owns_course(identity: Identity | None, course) -> bool:
    if identity is None or course is None or not identity.is_teacher:
        return False
    return course.teacher_id is not None and course.teacher_id == identity.user_id


def owns_lesson(identity: Identity | None, lesson) -> bool:
    """Both the lesson's teacher copy and its course's teacher must be the caller."""
    if identity is None or lesson is None or not identity.is_teacher:
        return False
    return lesson.teacher_id == identity.user_id and owns_course(identity, lesson.course)


def require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise Unauthenticated()
    return identity


def require_role(identity: Identity | None, roles, message: str) -> Identity:
    identity = require_identity(identity)
    if identity.role not in roles:
        raise Forbidden(message)
    return identity


def authorize(identity: Identity | None, resource: Resource, action: Action) -> Identity:
    """Authentication then role check for a write; raises on the first failure."""
    identity = require_identity(identity)
    if not can_mutate(identity.role, resource, action):
        raise Forbidden(_DENIAL_MESSAGES[(resource, action)])
    return identity


def authorize_view(identity: Identity | None, resource: Resource) -> None:
    if not can_view(identity, resource):
        raise Unauthenticated()
