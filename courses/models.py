"""Courses, lessons and enrollments models.

A `Course` is created by an admin and optionally assigned to a teacher.
Lessons belong to a course and carry a copy of the course teacher taken
at creation time. An `Enrollment` links a student to a course; the pair
is unique at the database level so concurrent duplicate submissions
cannot both succeed.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class Level(models.TextChoices):
    """CEFR levels offered by the catalogue."""

    A1 = "A1", "A1"
    A2 = "A2", "A2"
    B1 = "B1", "B1"
    B2 = "B2", "B2"
    C1 = "C1", "C1"
    C2 = "C2", "C2"


class EnrollmentStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class Course(models.Model):
    """A language course, optionally taught by a teacher user."""

    title = models.CharField(max_length=255)
    language = models.CharField(max_length=50)
    level = models.CharField(max_length=2, choices=Level.choices)
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="taught_courses",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_active", "title"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title}"


class Lesson(models.Model):
    """A scheduled lesson of a course.

    `teacher` mirrors `course.teacher` at the time the lesson was written;
    ownership checks compare both against the caller.
    """

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="lessons")
    teacher = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="lessons")
    title = models.CharField(max_length=255)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["starts_at", "id"]
        indexes = [models.Index(fields=["course", "teacher"], name="lesson_course_teacher_idx")]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title}"


class Enrollment(models.Model):
    """Link a student to a course with a lifecycle status."""

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="enrollments")
    status = models.CharField(max_length=16, choices=EnrollmentStatus.choices, default=EnrollmentStatus.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-id"]
        constraints = [
            models.UniqueConstraint(fields=["course", "student"], name="unique_enrollment_per_student"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.student_id}->{self.course_id}"
