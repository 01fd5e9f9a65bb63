from __future__ import annotations

from django.core.paginator import EmptyPage
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from courses.exceptions import NotFound


def clamp_per_page(raw, default: int, minimum: int = 1, maximum: int = 100) -> int:
    """Clamp a requested page size into [minimum, maximum].

    Non-numeric input uses `default`; numbers outside the range snap to the
    nearest bound.
    """
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return max(minimum, min(value, maximum))


class BoundedPagination(PageNumberPagination):
    """Page-number pagination with a clamped `per_page` and a bare envelope.

    - `per_page` is clamped to [1, 100]; views set their own default
    - The response holds only the items, under the view's `results_key`
    - If nothing at all matches, `NotFound` is raised with the view's
      `empty_message`; a page past the end of a non-empty set is `[]`
    """

    page_size = 10
    page_size_query_param = "per_page"
    max_page_size = 100
    min_page_size = 1
    results_key = "results"

    def get_page_size(self, request):
        return clamp_per_page(
            request.query_params.get(self.page_size_query_param),
            self.page_size,
            self.min_page_size,
            self.max_page_size,
        )

    def get_page_number_value(self, request) -> int:
        try:
            number = int(request.query_params.get(self.page_query_param, 1))
        except (TypeError, ValueError):
            return 1
        return max(number, 1)

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.results_key = getattr(view, "results_key", self.results_key)
        paginator = self.django_paginator_class(queryset, self.get_page_size(request))
        if paginator.count == 0:
            raise NotFound(getattr(view, "empty_message", "No results found."))
        try:
            self.page = paginator.page(self.get_page_number_value(request))
        except EmptyPage:
            self.page = None
            return []
        return list(self.page)

    def get_paginated_response(self, data):
        return Response({self.results_key: data})

    def get_paginated_response_schema(self, schema):
        return {"type": "object", "properties": {self.results_key: schema}}


class LessonPagination(BoundedPagination):
    page_size = 10
    results_key = "lessons"


class EnrollmentPagination(BoundedPagination):
    page_size = 15
    results_key = "enrollments"
