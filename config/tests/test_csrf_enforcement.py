from __future__ import annotations

import pytest
from django.contrib.auth.models import User
from django.test import Client
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from courses.models import Course


@pytest.fixture
def enrolling_student(db):
    u = User.objects.create_user(username="csrfu", password="pw")
    course = Course.objects.create(title="CSRF 101", language="English", level="A1")
    return u, course


@pytest.mark.django_db
@pytest.mark.security
def test_session_post_without_csrf_is_rejected(enrolling_student):
    u, course = enrolling_student
    c = Client(enforce_csrf_checks=True); assert c.login(username="csrfu", password="pw")
    r = c.post("/api/v1/enrollments/", {"course_id": course.id})
    assert r.status_code == 403
    assert "CSRF" in r.json()["detail"]


@pytest.mark.django_db
@pytest.mark.security
def test_token_post_needs_no_csrf(enrolling_student):
    u, course = enrolling_student
    token = Token.objects.create(user=u)
    c = APIClient(enforce_csrf_checks=True)
    c.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
    r = c.post("/api/v1/enrollments/", {"course_id": course.id}, format="json")
    assert r.status_code == 201
