"""API routes for Lingvo.

Exposes the versioned REST endpoints under /api/v1/ together with the
OpenAPI schema and interactive documentation.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)


from .views import (
    CourseViewSet,
    LessonViewSet,
    EnrollmentViewSet,
    student_enrollments,
)

router = DefaultRouter()
router.register(r"api/v1/courses", CourseViewSet, basename="courses")
router.register(r"api/v1/lessons", LessonViewSet, basename="lessons")
router.register(r"api/v1/enrollments", EnrollmentViewSet, basename="enrollments")

urlpatterns = [
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("api/v1/students/<int:student_id>/enrollments/", student_enrollments, name="student-enrollments"),
    path("", include(router.urls)),
]
