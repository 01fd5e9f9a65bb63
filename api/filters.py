"""Caller-supplied filters and sorting for the REST API.

Filters run on a queryset that has already been narrowed to the caller's
visibility scope (see `courses.scoping`), so they can only narrow further.
"""
from __future__ import annotations

import django_filters
from django.db.models import Q
from rest_framework.filters import BaseFilterBackend

from courses.models import Enrollment, EnrollmentStatus, Lesson
from courses.policy import Identity


class LessonFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(field_name="title", lookup_expr="icontains")
    teacher_id = django_filters.NumberFilter(field_name="teacher_id")
    course_id = django_filters.NumberFilter(field_name="course_id")

    class Meta:
        model = Lesson
        fields = ["search", "teacher_id", "course_id"]


class EnrollmentFilter(django_filters.FilterSet):
    """Enrollment filters; some apply only to certain roles.

    - `status`: one or many (`?status=a&status=b` or `?status[]=a`)
    - `course_id`: any role (teachers are already limited by scope)
    - `search`: student name, teachers and admins only
    - `student_id`: admins only
    """

    status = django_filters.MultipleChoiceFilter(choices=EnrollmentStatus.choices)
    course_id = django_filters.NumberFilter(field_name="course_id")
    student_id = django_filters.NumberFilter(method="filter_student")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Enrollment
        fields = ["status", "course_id", "student_id", "search"]

    def __init__(self, data=None, *args, **kwargs):
        if data is not None and "status[]" in data and "status" not in data:
            data = data.copy()
            data.setlist("status", data.getlist("status[]"))
        super().__init__(data, *args, **kwargs)

    @property
    def identity(self) -> Identity | None:
        return Identity.from_request(self.request)

    def filter_student(self, queryset, name, value):
        identity = self.identity
        if identity is None or not identity.is_admin:
            return queryset
        return queryset.filter(student_id=value)

    def filter_search(self, queryset, name, value):
        identity = self.identity
        if identity is None or identity.is_student:
            return queryset
        return queryset.filter(
            Q(student__profile__full_name__icontains=value) | Q(student__username__icontains=value)
        )


class WhitelistedSortFilter(BaseFilterBackend):
    """`sort_by`/`sort_dir` ordering restricted to whitelisted values.

    Unknown fields or directions fall back to the view's defaults instead
    of erroring.
    """

    sort_param = "sort_by"
    direction_param = "sort_dir"
    directions = ("asc", "desc")

    def get_sort(self, request, view) -> tuple[str, str]:
        fields = getattr(view, "sort_fields", ())
        default_field, default_dir = view.default_sort
        field = request.query_params.get(self.sort_param, default_field)
        direction = (request.query_params.get(self.direction_param, default_dir) or "").lower()
        if field not in fields:
            field = default_field
        if direction not in self.directions:
            direction = default_dir
        return field, direction

    def filter_queryset(self, request, queryset, view):
        field, direction = self.get_sort(request, view)
        prefix = "-" if direction == "desc" else ""
        # id keeps page boundaries stable when the sort field ties
        return queryset.order_by(f"{prefix}{field}", f"{prefix}id")
