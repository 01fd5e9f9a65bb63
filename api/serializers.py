"""Response projections for REST API v1.

Course and lesson shapes are the same for every role. Enrollments differ:
admins and students get a resource-style view with nested `course` and
`student`, while the teacher listing is flattened for display.
"""
from __future__ import annotations

from rest_framework import serializers

from accounts.models import display_name
from courses.models import Course, Enrollment, Lesson
from courses.policy import Identity


class UserRefSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.SerializerMethodField()

    def get_name(self, obj) -> str | None:
        return display_name(obj)


class PersonSerializer(UserRefSerializer):
    """Identity card used by the admin lookups."""

    email = serializers.EmailField(read_only=True)


class CourseRefSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)


class CourseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = ("id", "title", "language", "level", "teacher_id", "is_active")


class LessonSerializer(serializers.ModelSerializer):
    teacher = UserRefSerializer(read_only=True)

    class Meta:
        model = Lesson
        fields = ("id", "course_id", "teacher_id", "title", "starts_at", "ends_at", "teacher")


class EnrollmentSerializer(serializers.ModelSerializer):
    course = CourseRefSerializer(read_only=True)
    student = UserRefSerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = ("id", "course_id", "student_id", "status", "course", "student")


class TeacherEnrollmentSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)
    student_name = serializers.SerializerMethodField()

    class Meta:
        model = Enrollment
        fields = ("course_id", "course_title", "student_id", "student_name", "status")

    def get_student_name(self, obj) -> str | None:
        return display_name(obj.student)


def enrollment_serializer_for(identity: Identity | None):
    """Listing projection for the caller's role."""
    if identity is not None and identity.is_teacher:
        return TeacherEnrollmentSerializer
    return EnrollmentSerializer
