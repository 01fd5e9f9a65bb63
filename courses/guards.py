"""Guarded writes for courses, lessons and enrollments.

Every write runs its checks in the same order: authentication, role,
entity lookup, ownership, input validation, uniqueness. The first
failing check raises and nothing after it is evaluated, so a malformed
request from the wrong caller always reports the earlier failure.

Ownership is re-derived from freshly loaded rows at check time; ids
supplied by the caller are never trusted for it.
"""
from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from .exceptions import Conflict, Forbidden, ValidationFailed
from .inputs import CourseInput, EnrollmentInput, EnrollmentStatusInput, LessonCourseInput, LessonInput
from .models import Course, Enrollment, EnrollmentStatus, Lesson
from .policy import (
    NOT_COURSE_TEACHER,
    Action,
    Identity,
    Resource,
    authorize,
    owns_course,
    owns_lesson,
)
from .scoping import get_or_not_found

logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "Already enrolled in this course"


def _validated(serializer) -> dict:
    if not serializer.is_valid():
        raise ValidationFailed(serializer.errors)
    return serializer.validated_data


# Courses


def create_course(identity: Identity | None, data) -> Course:
    authorize(identity, Resource.COURSE, Action.CREATE)
    fields = _validated(CourseInput(data=data))
    course = Course.objects.create(**fields)
    logger.info("Course %s created", course.pk)
    return course


def update_course(identity: Identity | None, course_id, data) -> Course:
    authorize(identity, Resource.COURSE, Action.UPDATE)
    course = get_or_not_found(Course.objects.all(), course_id, "Course not found")
    fields = _validated(CourseInput(course, data=data, partial=True))
    for name, value in fields.items():
        setattr(course, name, value)
    course.save()
    logger.info("Course %s updated (%s)", course.pk, ", ".join(sorted(fields)) or "no changes")
    return course


def delete_course(identity: Identity | None, course_id) -> None:
    authorize(identity, Resource.COURSE, Action.DELETE)
    course = get_or_not_found(Course.objects.all(), course_id, "Course not found")
    # Lessons and enrollments go with it (FK cascade).
    course.delete()
    logger.info("Course %s deleted", course_id)


# Lessons


def create_lesson(identity: Identity | None, data) -> Lesson:
    identity = authorize(identity, Resource.LESSON, Action.CREATE)
    # The parent course must be resolved before ownership can be judged.
    course = _validated(LessonCourseInput(data=data))["course"]
    if not owns_course(identity, course):
        raise Forbidden(NOT_COURSE_TEACHER)
    fields = _validated(LessonInput(data=data))
    lesson = Lesson.objects.create(course=course, teacher_id=course.teacher_id, **fields)
    logger.info("Lesson %s created in course %s", lesson.pk, course.pk)
    return lesson


def update_lesson(identity: Identity | None, lesson_id, data) -> Lesson:
    identity = authorize(identity, Resource.LESSON, Action.UPDATE)
    lesson = get_or_not_found(Lesson.objects.select_related("course"), lesson_id, "Lesson not found")
    if not owns_lesson(identity, lesson):
        raise Forbidden(NOT_COURSE_TEACHER)
    fields = _validated(LessonInput(lesson, data=data, partial=True))
    if not fields:
        raise ValidationFailed({"detail": "No editable fields provided"})
    for name, value in fields.items():
        setattr(lesson, name, value)
    lesson.save(update_fields=[*fields, "updated_at"])
    logger.info("Lesson %s updated (%s)", lesson.pk, ", ".join(sorted(fields)))
    return lesson


def delete_lesson(identity: Identity | None, lesson_id) -> None:
    identity = authorize(identity, Resource.LESSON, Action.DELETE)
    lesson = get_or_not_found(Lesson.objects.select_related("course"), lesson_id, "Lesson not found")
    if not owns_lesson(identity, lesson):
        raise Forbidden(NOT_COURSE_TEACHER)
    lesson.delete()
    logger.info("Lesson %s deleted", lesson_id)


# Enrollments


def create_enrollment(identity: Identity | None, data) -> Enrollment:
    """Self-enrolment by a student; duplicates are a conflict."""
    identity = authorize(identity, Resource.ENROLLMENT, Action.CREATE)
    course = _validated(EnrollmentInput(data=data))["course"]
    if Enrollment.objects.filter(course=course, student_id=identity.user_id).exists():
        raise Conflict(ALREADY_ENROLLED)
    try:
        with transaction.atomic():
            enrollment = Enrollment.objects.create(
                course=course,
                student_id=identity.user_id,
                status=EnrollmentStatus.ACTIVE,
            )
    except IntegrityError:
        # A concurrent submission won the race past the existence check.
        raise Conflict(ALREADY_ENROLLED) from None
    logger.info("Student %s enrolled in course %s", identity.user_id, course.pk)
    return enrollment


def update_enrollment(identity: Identity | None, enrollment_id, data) -> Enrollment:
    """Status transition by an admin or by the teacher of the enrollment's course."""
    identity = authorize(identity, Resource.ENROLLMENT, Action.UPDATE)
    enrollment = get_or_not_found(Enrollment.objects.select_related("course"), enrollment_id, "Enrollment not found")
    if not identity.is_admin and not owns_course(identity, enrollment.course):
        raise Forbidden("Forbidden")
    status = _validated(EnrollmentStatusInput(data=data))["status"]
    enrollment.status = status
    enrollment.save(update_fields=["status", "updated_at"])
    logger.info("Enrollment %s set to %s", enrollment.pk, status)
    return enrollment


def delete_enrollment(identity: Identity | None, enrollment_id) -> None:
    """Enrollments are never deleted; always refused after authentication."""
    authorize(identity, Resource.ENROLLMENT, Action.DELETE)
