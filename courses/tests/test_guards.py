from __future__ import annotations

from datetime import timedelta
from unittest import mock

import pytest
from django.db import IntegrityError
from django.utils import timezone

from courses import guards
from courses.exceptions import Conflict, Forbidden, NotFound, Unauthenticated, ValidationFailed
from courses.models import Course, Enrollment, Lesson
from courses.policy import Identity


def _lesson_payload(course, **overrides):
    starts = timezone.now() + timedelta(days=1)
    data = {
        "course_id": course.id,
        "title": "Unit 3: Past Tense",
        "starts_at": starts.isoformat(),
        "ends_at": (starts + timedelta(minutes=90)).isoformat(),
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
def test_lesson_create_copies_teacher_from_course(teacher, course):
    me = Identity.from_user(teacher)
    lesson = guards.create_lesson(me, _lesson_payload(course, teacher_id=999))
    assert lesson.teacher_id == course.teacher_id == teacher.id


@pytest.mark.django_db
def test_lesson_create_checks_run_in_fixed_order(teacher, other_teacher, student, course):
    # Malformed payload throughout, so each step must fail before validation would.
    bad = {"course_id": course.id, "title": "", "starts_at": "not-a-date"}
    with pytest.raises(Unauthenticated):
        guards.create_lesson(None, bad)
    with pytest.raises(Forbidden) as exc:
        guards.create_lesson(Identity.from_user(student), bad)
    assert "Only teachers can create lessons" in str(exc.value.detail)
    with pytest.raises(Forbidden) as exc:
        guards.create_lesson(Identity.from_user(other_teacher), bad)
    assert "not the teacher of this course" in str(exc.value.detail)
    with pytest.raises(ValidationFailed) as exc:
        guards.create_lesson(Identity.from_user(teacher), bad)
    assert set(exc.value.detail) == {"title", "starts_at"}


@pytest.mark.django_db
def test_lesson_create_unknown_course_is_validation_failure(teacher):
    with pytest.raises(ValidationFailed) as exc:
        guards.create_lesson(Identity.from_user(teacher), {"course_id": 4242, "title": "x", "starts_at": "2025-09-01T10:00:00Z"})
    assert "course_id" in exc.value.detail


@pytest.mark.django_db
def test_lesson_end_before_start_rejected(teacher, course):
    starts = timezone.now()
    payload = _lesson_payload(course, starts_at=starts.isoformat(), ends_at=(starts - timedelta(hours=1)).isoformat())
    with pytest.raises(ValidationFailed) as exc:
        guards.create_lesson(Identity.from_user(teacher), payload)
    assert "ends_at" in exc.value.detail


@pytest.mark.django_db
def test_lesson_update_requires_an_editable_field(teacher, course):
    me = Identity.from_user(teacher)
    lesson = guards.create_lesson(me, _lesson_payload(course))
    with pytest.raises(ValidationFailed) as exc:
        guards.update_lesson(me, lesson.id, {"course_id": 1, "teacher_id": 1, "colour": "red"})
    assert "No editable fields provided" in str(exc.value.detail)

    updated = guards.update_lesson(me, lesson.id, {"title": "Unit 3: Review"})
    assert updated.title == "Unit 3: Review"
    assert updated.course_id == course.id


@pytest.mark.django_db
def test_lesson_update_rechecks_ownership_from_current_course(teacher, other_teacher, course):
    me = Identity.from_user(teacher)
    lesson = guards.create_lesson(me, _lesson_payload(course))
    # Course reassigned after the lesson was written
    Course.objects.filter(pk=course.pk).update(teacher=other_teacher)
    with pytest.raises(Forbidden):
        guards.update_lesson(me, lesson.id, {"title": "Mine?"})
    # The new course teacher does not match the lesson's teacher copy either
    with pytest.raises(Forbidden):
        guards.update_lesson(Identity.from_user(other_teacher), lesson.id, {"title": "Mine?"})


@pytest.mark.django_db
def test_lesson_update_end_checked_against_stored_start(teacher, course):
    me = Identity.from_user(teacher)
    lesson = guards.create_lesson(me, _lesson_payload(course))
    earlier = (lesson.starts_at - timedelta(minutes=5)).isoformat()
    with pytest.raises(ValidationFailed):
        guards.update_lesson(me, lesson.id, {"ends_at": earlier})


@pytest.mark.django_db
def test_lesson_update_start_checked_against_stored_end(teacher, course):
    me = Identity.from_user(teacher)
    lesson = guards.create_lesson(me, _lesson_payload(course))
    later = (lesson.ends_at + timedelta(days=2)).isoformat()
    with pytest.raises(ValidationFailed) as exc:
        guards.update_lesson(me, lesson.id, {"starts_at": later})
    assert "ends_at" in exc.value.detail
    lesson.refresh_from_db()
    assert lesson.ends_at >= lesson.starts_at
    # Clearing the end in the same update makes the move valid
    moved = guards.update_lesson(me, lesson.id, {"starts_at": later, "ends_at": None})
    assert moved.ends_at is None


@pytest.mark.django_db
def test_lesson_delete_missing_and_foreign(teacher, other_teacher, course):
    me = Identity.from_user(teacher)
    lesson = guards.create_lesson(me, _lesson_payload(course))
    with pytest.raises(NotFound):
        guards.delete_lesson(me, 987654)
    with pytest.raises(Forbidden):
        guards.delete_lesson(Identity.from_user(other_teacher), lesson.id)
    guards.delete_lesson(me, lesson.id)
    assert not Lesson.objects.filter(pk=lesson.id).exists()


@pytest.mark.django_db
def test_course_create_validates_level_and_teacher(site_admin, student, teacher):
    admin = Identity.from_user(site_admin)
    with pytest.raises(ValidationFailed) as exc:
        guards.create_course(admin, {"title": "X", "language": "German", "level": "D9"})
    assert "level" in exc.value.detail
    with pytest.raises(ValidationFailed) as exc:
        guards.create_course(admin, {"title": "X", "language": "German", "level": "B1", "teacher_id": student.id})
    assert "teacher_id" in exc.value.detail
    course = guards.create_course(admin, {"title": "X", "language": "German", "level": "B1", "teacher_id": teacher.id})
    assert course.teacher_id == teacher.id and course.is_active


@pytest.mark.django_db
def test_course_role_check_precedes_validation(teacher):
    with pytest.raises(Forbidden):
        guards.create_course(Identity.from_user(teacher), {"level": "nope"})


@pytest.mark.django_db
def test_course_delete_cascades(site_admin, teacher, student, course):
    me = Identity.from_user(teacher)
    guards.create_lesson(me, _lesson_payload(course))
    guards.create_enrollment(Identity.from_user(student), {"course_id": course.id})
    guards.delete_course(Identity.from_user(site_admin), course.id)
    assert not Lesson.objects.exists()
    assert not Enrollment.objects.exists()


@pytest.mark.django_db
def test_second_enrollment_is_conflict(student, course):
    me = Identity.from_user(student)
    first = guards.create_enrollment(me, {"course_id": course.id})
    assert first.status == "active"
    with pytest.raises(Conflict):
        guards.create_enrollment(me, {"course_id": course.id})
    assert Enrollment.objects.filter(course=course, student=student).count() == 1


@pytest.mark.django_db
def test_enrollment_race_surfaces_as_conflict(student, course):
    me = Identity.from_user(student)
    # Simulate losing the race: the existence check passes, the insert collides.
    with mock.patch.object(Enrollment.objects, "create", side_effect=IntegrityError("unique")):
        with pytest.raises(Conflict):
            guards.create_enrollment(me, {"course_id": course.id})


@pytest.mark.django_db
def test_enrollment_update_admin_or_owning_teacher(site_admin, teacher, other_teacher, student, course):
    enrollment = guards.create_enrollment(Identity.from_user(student), {"course_id": course.id})
    with pytest.raises(Forbidden):
        guards.update_enrollment(Identity.from_user(student), enrollment.id, {"status": "completed"})
    with pytest.raises(Forbidden):
        guards.update_enrollment(Identity.from_user(other_teacher), enrollment.id, {"status": "bogus"})
    with pytest.raises(ValidationFailed):
        guards.update_enrollment(Identity.from_user(teacher), enrollment.id, {"status": "bogus"})
    assert guards.update_enrollment(Identity.from_user(teacher), enrollment.id, {"status": "completed"}).status == "completed"
    assert guards.update_enrollment(Identity.from_user(site_admin), enrollment.id, {"status": "cancelled"}).status == "cancelled"


@pytest.mark.django_db
def test_enrollment_delete_always_refused(site_admin, student, course):
    enrollment = guards.create_enrollment(Identity.from_user(student), {"course_id": course.id})
    with pytest.raises(Unauthenticated):
        guards.delete_enrollment(None, enrollment.id)
    with pytest.raises(Forbidden):
        guards.delete_enrollment(Identity.from_user(site_admin), enrollment.id)
    assert Enrollment.objects.filter(pk=enrollment.id).exists()
