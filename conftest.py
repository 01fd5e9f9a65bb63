import logging

import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from courses.models import Course


@pytest.fixture(autouse=True)
def silence_django_request_logger():
    """Reduce noise from expected 4xx in passing tests.

    Many tests intentionally exercise 401/403/404/409 paths. Django logs
    these at WARNING via 'django.request'. Lower that logger to ERROR
    during tests to avoid clutter.
    """
    logger = logging.getLogger("django.request")
    old = logger.level
    logger.setLevel(logging.ERROR)
    try:
        yield
    finally:
        logger.setLevel(old)


@pytest.fixture
def make_user(db):
    """Create a user with the given role (profile is created by signal)."""

    def _make(username: str, role: str = "student", full_name: str = "", **extra) -> User:
        user = User.objects.create_user(username=username, password="pw", **extra)
        user.profile.role = role
        user.profile.full_name = full_name
        user.profile.save(update_fields=["role", "full_name"])
        return user

    return _make


@pytest.fixture
def site_admin(make_user):
    return make_user("admin", "admin", full_name="Admin User", email="admin@mail.com")


@pytest.fixture
def teacher(make_user):
    return make_user("stefan", "teacher", full_name="Stefan Teacher", email="stefan@mail.com")


@pytest.fixture
def other_teacher(make_user):
    return make_user("olga", "teacher", full_name="Olga Teacher")


@pytest.fixture
def student(make_user):
    return make_user("ana", "student", full_name="Ana Student", email="ana@mail.com")


@pytest.fixture
def course(teacher):
    return Course.objects.create(title="German B1 - Conversation", language="German", level="B1", teacher=teacher)


@pytest.fixture
def api():
    """Return a factory of API clients, optionally authenticated as `user`."""

    def _client(user=None) -> APIClient:
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client

    return _client
