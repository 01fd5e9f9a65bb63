"""Write-side input validation for course services.

These serializers only validate; persistence and authorisation live in
`courses.guards` so checks run in a fixed order.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.models import Role

from .models import Course, EnrollmentStatus, Level

User = get_user_model()


class CourseInput(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    language = serializers.CharField(max_length=50)
    level = serializers.ChoiceField(choices=Level.choices)
    teacher_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(profile__role=Role.TEACHER),
        source="teacher",
        allow_null=True,
        required=False,
    )
    is_active = serializers.BooleanField(required=False)


class LessonCourseInput(serializers.Serializer):
    course_id = serializers.PrimaryKeyRelatedField(queryset=Course.objects.select_related("teacher"), source="course")


class LessonInput(serializers.Serializer):
    """Editable lesson fields; `course_id`/`teacher_id` are never taken from input."""

    title = serializers.CharField(max_length=255)
    starts_at = serializers.DateTimeField()
    ends_at = serializers.DateTimeField(allow_null=True, required=False)

    def validate(self, attrs):
        starts_at = attrs.get("starts_at")
        if starts_at is None and self.instance is not None:
            starts_at = self.instance.starts_at
        if "ends_at" in attrs:
            ends_at = attrs["ends_at"]
        else:
            ends_at = getattr(self.instance, "ends_at", None)
        if ends_at is not None and starts_at is not None and ends_at < starts_at:
            raise serializers.ValidationError({"ends_at": "Must be after or equal to starts_at."})
        return attrs


class EnrollmentInput(serializers.Serializer):
    course_id = serializers.PrimaryKeyRelatedField(queryset=Course.objects.all(), source="course")


class EnrollmentStatusInput(serializers.Serializer):
    status = serializers.ChoiceField(choices=EnrollmentStatus.choices)
