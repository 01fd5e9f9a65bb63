from __future__ import annotations

import pytest

from courses.exceptions import Forbidden, NotFound, Unauthenticated
from courses.models import Course, Enrollment
from courses.policy import Identity
from courses.scoping import (
    courses_by_teacher,
    enrollments_by_student,
    scope_enrollments,
    scope_lessons,
)


@pytest.fixture
def world(make_user):
    t1 = make_user("t1", "teacher")
    t2 = make_user("t2", "teacher")
    s1 = make_user("s1", "student")
    s2 = make_user("s2", "student")
    c1 = Course.objects.create(title="C1", language="German", level="A1", teacher=t1)
    c2 = Course.objects.create(title="C2", language="French", level="A2", teacher=t2)
    rows = [
        Enrollment.objects.create(course=c1, student=s1),
        Enrollment.objects.create(course=c1, student=s2),
        Enrollment.objects.create(course=c2, student=s1),
    ]
    return {"t1": t1, "t2": t2, "s1": s1, "s2": s2, "c1": c1, "c2": c2, "rows": rows}


@pytest.mark.django_db
def test_each_role_only_sees_its_scope(world, site_admin):
    s1 = Identity.from_user(world["s1"])
    t1 = Identity.from_user(world["t1"])
    admin = Identity.from_user(site_admin)

    assert all(e.student_id == s1.user_id for e in scope_enrollments(s1))
    assert scope_enrollments(s1).count() == 2
    assert {e.course_id for e in scope_enrollments(t1)} == {world["c1"].id}
    assert scope_enrollments(admin).count() == 3


@pytest.mark.django_db
def test_teacher_outside_course_is_forbidden_not_empty(world):
    t1 = Identity.from_user(world["t1"])
    with pytest.raises(Forbidden):
        scope_enrollments(t1, course_id=world["c2"].id)
    # Own course is fine
    assert scope_enrollments(t1, course_id=str(world["c1"].id)).count() == 2


@pytest.mark.django_db
def test_teacher_without_courses_gets_empty_scope(make_user):
    lonely = Identity.from_user(make_user("lonely", "teacher"))
    assert scope_enrollments(lonely).count() == 0


@pytest.mark.django_db
def test_anonymous_cannot_scope_lessons_or_enrollments():
    with pytest.raises(Unauthenticated):
        scope_lessons(None)
    with pytest.raises(Unauthenticated):
        scope_enrollments(None)


@pytest.mark.django_db
def test_courses_by_teacher_admin_only_and_not_found(world, site_admin, make_user):
    admin = Identity.from_user(site_admin)
    with pytest.raises(Forbidden):
        courses_by_teacher(Identity.from_user(world["t1"]), world["t1"].id)
    teacher, courses = courses_by_teacher(admin, world["t1"].id)
    assert teacher == world["t1"] and [c.title for c in courses] == ["C1"]
    # A student id is not a teacher
    with pytest.raises(NotFound):
        courses_by_teacher(admin, world["s1"].id)
    idle = make_user("idle", "teacher")
    with pytest.raises(NotFound):
        courses_by_teacher(admin, idle.id)


@pytest.mark.django_db
def test_enrollments_by_student_newest_first(world, site_admin):
    admin = Identity.from_user(site_admin)
    student, rows = enrollments_by_student(admin, world["s1"].id)
    assert student == world["s1"]
    assert [r.id for r in rows] == sorted((r.id for r in rows), reverse=True)
    with pytest.raises(NotFound):
        enrollments_by_student(admin, world["t1"].id)
