"""REST API v1 viewsets and endpoints.

Views stay thin: they resolve the caller's `Identity` from the request
and hand it, with the raw input, to the scoping and guard services. All
access decisions are made there.
"""
from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from courses import guards
from courses.exceptions import NotFound
from courses.models import Enrollment, Lesson
from courses.policy import Identity
from courses.scoping import (
    courses_by_teacher,
    enrollments_by_student,
    get_course,
    get_lesson,
    scope_courses,
    scope_enrollments,
    scope_lessons,
)
from .filters import EnrollmentFilter, LessonFilter, WhitelistedSortFilter
from .pagination import EnrollmentPagination, LessonPagination
from .serializers import (
    CourseSerializer,
    EnrollmentSerializer,
    LessonSerializer,
    PersonSerializer,
    enrollment_serializer_for,
)


class IdentityMixin:
    # Access rules are enforced by the services, not DRF permission classes.
    permission_classes = [AllowAny]

    @property
    def identity(self) -> Identity | None:
        return Identity.from_request(self.request)


class CourseViewSet(IdentityMixin, viewsets.GenericViewSet):
    """Public catalogue; admin-only writes."""

    serializer_class = CourseSerializer
    pagination_class = None
    filter_backends: list = []

    def get_queryset(self):
        return scope_courses(self.identity).order_by("-is_active", "title")

    def list(self, request):
        courses = list(self.get_queryset())
        if not courses:
            raise NotFound("No courses found.")
        return Response({"courses": CourseSerializer(courses, many=True).data})

    def retrieve(self, request, pk=None):
        course = get_course(self.identity, pk)
        return Response({"course": CourseSerializer(course).data})

    def create(self, request):
        course = guards.create_course(self.identity, request.data)
        return Response(
            {"message": "Course created successfully", "course": CourseSerializer(course).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        # PUT and PATCH both apply only the fields supplied.
        course = guards.update_course(self.identity, pk, request.data)
        return Response({"message": "Course updated successfully", "course": CourseSerializer(course).data})

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        guards.delete_course(self.identity, pk)
        return Response({"message": "Course deleted successfully"})

    @action(detail=False, methods=["get"], url_path=r"teacher/(?P<teacher_id>\d+)")
    def by_teacher(self, request, teacher_id=None):
        """Admin-only: courses taught by one teacher."""
        teacher, courses = courses_by_teacher(self.identity, teacher_id)
        return Response(
            {
                "teacher": PersonSerializer(teacher).data,
                "courses": CourseSerializer(courses, many=True).data,
            }
        )


class LessonViewSet(IdentityMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Lessons for any authenticated caller; writes by the course's teacher."""

    serializer_class = LessonSerializer
    filter_backends = [DjangoFilterBackend, WhitelistedSortFilter]
    filterset_class = LessonFilter
    pagination_class = LessonPagination
    sort_fields = ("starts_at", "title", "created_at")
    default_sort = ("starts_at", "asc")
    results_key = "lessons"
    empty_message = "No lessons found."

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):  # schema generation
            return Lesson.objects.none()
        return scope_lessons(self.identity)

    def retrieve(self, request, pk=None):
        lesson = get_lesson(self.identity, pk)
        return Response({"lesson": LessonSerializer(lesson).data})

    def create(self, request):
        lesson = guards.create_lesson(self.identity, request.data)
        return Response(
            {"message": "Lesson created successfully", "lesson": LessonSerializer(lesson).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        lesson = guards.update_lesson(self.identity, pk, request.data)
        return Response({"message": "Lesson updated successfully", "lesson": LessonSerializer(lesson).data})

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        guards.delete_lesson(self.identity, pk)
        return Response({"message": "Lesson deleted successfully"})


class EnrollmentViewSet(IdentityMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Role-scoped enrollments: students see their own, teachers their courses', admins all."""

    filter_backends = [DjangoFilterBackend]
    filterset_class = EnrollmentFilter
    pagination_class = EnrollmentPagination
    results_key = "enrollments"
    empty_message = "No enrollments found."

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):  # schema generation
            return Enrollment.objects.none()
        course_id = self.request.query_params.get("course_id")
        return scope_enrollments(self.identity, course_id=course_id).order_by("-id")

    def get_serializer_class(self):
        if self.action == "list":
            return enrollment_serializer_for(self.identity)
        return EnrollmentSerializer

    def create(self, request):
        enrollment = guards.create_enrollment(self.identity, request.data)
        return Response(
            {"message": "Enrollment created successfully", "enrollment": EnrollmentSerializer(enrollment).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        enrollment = guards.update_enrollment(self.identity, pk, request.data)
        return Response(
            {"message": "Enrollment updated successfully", "enrollment": EnrollmentSerializer(enrollment).data}
        )

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        guards.delete_enrollment(self.identity, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
@permission_classes([AllowAny])
def student_enrollments(request, student_id: int):
    """Admin-only: every enrollment of one student, newest first."""
    student, enrollments = enrollments_by_student(Identity.from_request(request), student_id)
    return Response(
        {
            "student": PersonSerializer(student).data,
            "enrollments": EnrollmentSerializer(enrollments, many=True).data,
        }
    )
