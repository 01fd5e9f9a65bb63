"""Visibility scopes: the rows a caller may ever see, before any filter.

Scopes are applied first so caller-supplied filters can only narrow what
the role already allows. A teacher asking for enrollments of a course
they do not teach is refused outright rather than shown an empty list.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models import QuerySet

from accounts.models import Role

from .exceptions import Forbidden, NotFound
from .models import Course, Enrollment, Lesson
from .policy import Identity, Resource, authorize_view, can_list_all, require_identity, require_role

User = get_user_model()


def scope_courses(identity: Identity | None) -> QuerySet:
    """Course catalogue; public."""
    authorize_view(identity, Resource.COURSE)
    return Course.objects.all()


def scope_lessons(identity: Identity | None) -> QuerySet:
    authorize_view(identity, Resource.LESSON)
    return Lesson.objects.select_related("teacher__profile", "course")


def owned_course_ids(identity: Identity) -> list[int]:
    return list(Course.objects.filter(teacher_id=identity.user_id).values_list("id", flat=True))


def _parse_id(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        # Malformed ids are reported by the filter layer.
        return None


def _student_enrollments(identity: Identity, base: QuerySet, course_id: int | None) -> QuerySet:
    return base.filter(student_id=identity.user_id)


def _teacher_enrollments(identity: Identity, base: QuerySet, course_id: int | None) -> QuerySet:
    owned = owned_course_ids(identity)
    if course_id is not None and course_id not in owned:
        raise Forbidden("Forbidden for this course")
    if not owned:
        return base.none()
    return base.filter(course_id__in=owned)


_ENROLLMENT_SCOPES = {
    Role.STUDENT: _student_enrollments,
    Role.TEACHER: _teacher_enrollments,
}


def scope_enrollments(identity: Identity | None, course_id=None) -> QuerySet:
    """Enrollments visible to the caller.

    - student: own rows
    - teacher: rows of courses they teach (empty when they teach none);
      a `course_id` outside those courses raises `Forbidden`
    - admin: everything
    """
    identity = require_identity(identity)
    base = Enrollment.objects.select_related("course", "student__profile")
    if can_list_all(identity.role):
        return base
    return _ENROLLMENT_SCOPES[identity.role](identity, base, _parse_id(course_id))


def get_or_not_found(queryset: QuerySet, pk, message: str):
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValueError, TypeError):
        raise NotFound(message) from None


def get_course(identity: Identity | None, pk) -> Course:
    return get_or_not_found(scope_courses(identity), pk, "Course not found")


def get_lesson(identity: Identity | None, pk) -> Lesson:
    return get_or_not_found(scope_lessons(identity), pk, "Lesson not found")


# Admin-only lookups


ADMIN_ONLY = "Only admins can access this resource"


def courses_by_teacher(identity: Identity | None, teacher_id):
    """Return `(teacher, courses)`; unknown teacher or no courses is `NotFound`."""
    require_role(identity, {Role.ADMIN}, ADMIN_ONLY)
    teachers = User.objects.select_related("profile").filter(profile__role=Role.TEACHER)
    teacher = get_or_not_found(teachers, teacher_id, "Teacher not found")
    courses = list(Course.objects.filter(teacher=teacher).order_by("-is_active", "title"))
    if not courses:
        raise NotFound("No courses found for this teacher.")
    return teacher, courses


def enrollments_by_student(identity: Identity | None, student_id):
    """Return `(student, enrollments)` newest first; unknown student or none is `NotFound`."""
    require_role(identity, {Role.ADMIN}, ADMIN_ONLY)
    students = User.objects.select_related("profile").filter(profile__role=Role.STUDENT)
    student = get_or_not_found(students, student_id, "Student not found")
    enrollments = list(
        Enrollment.objects.select_related("course", "student__profile").filter(student=student).order_by("-id")
    )
    if not enrollments:
        raise NotFound("No enrollments found for this student.")
    return student, enrollments
