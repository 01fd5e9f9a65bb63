"""URL routing for Lingvo.

Admin site plus the REST API, its schema and documentation.
"""
from django.contrib import admin
from django.urls import include, path


urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("api.urls")),
]
