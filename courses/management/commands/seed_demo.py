"""Fill an empty database with a demo catalogue.

Creates one admin, a handful of teachers and students, courses (some
without a teacher), scheduled lessons for every taught course and a
random spread of enrollments. Pass `--seed` for a reproducible data set.
"""
from __future__ import annotations

import logging
import random
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import Role
from courses.models import Course, Enrollment, EnrollmentStatus, Lesson, Level

logger = logging.getLogger("courses.seed")

User = get_user_model()

LANGUAGES = ("English", "German", "French", "Spanish", "Italian", "Portuguese")
TOPICS = ("Conversation", "Grammar", "Business", "Travel", "Exam Prep", "Pronunciation")
LESSON_WORDS = ("greetings", "numbers", "food", "family", "weather", "past", "future", "shopping", "health", "work")
FIRST_NAMES = ("Ana", "Marko", "Jelena", "Stefan", "Ivana", "Luka", "Mila", "Nikola", "Sara", "Petar")
LAST_NAMES = ("Jovanovic", "Petrovic", "Nikolic", "Markovic", "Ilic", "Pavlovic", "Simic", "Kostic")


class Command(BaseCommand):
    help = "Seed an empty database with demo users, courses, lessons and enrollments."

    def add_arguments(self, parser):
        parser.add_argument("--teachers", type=int, default=5)
        parser.add_argument("--students", type=int, default=50)
        parser.add_argument("--courses", type=int, default=12, help="Courses assigned to a teacher")
        parser.add_argument("--unassigned", type=int, default=4, help="Courses without a teacher")
        parser.add_argument("--password", default="lingvo-demo-password", help="Password for every seeded user")
        parser.add_argument("--seed", type=int, default=None, help="Random seed")

    def handle(self, *args, **opts):
        if Course.objects.exists() or User.objects.filter(username="admin").exists():
            raise CommandError("Database is not empty; seed_demo only fills a fresh database.")
        if opts["teachers"] < 1 and opts["courses"] > 0:
            raise CommandError("Courses with a teacher need at least one teacher.")

        rng = random.Random(opts["seed"])
        with transaction.atomic():
            self._seed(rng, opts)

        self.stdout.write(
            self.style.SUCCESS(
                "Seeded {users} users, {courses} courses, {lessons} lessons, {enrollments} enrollments".format(
                    users=User.objects.count(),
                    courses=Course.objects.count(),
                    lessons=Lesson.objects.count(),
                    enrollments=Enrollment.objects.count(),
                )
            )
        )

    def _seed(self, rng: random.Random, opts) -> None:
        password = opts["password"]
        User.objects.create_superuser(
            username="admin", email="admin@mail.com", password=password, first_name="Admin", last_name="User"
        )
        teachers = [self._user(rng, f"teacher{i}", Role.TEACHER, password) for i in range(1, opts["teachers"] + 1)]
        students = [self._user(rng, f"student{i}", Role.STUDENT, password) for i in range(1, opts["students"] + 1)]

        courses = [self._course(rng, rng.choice(teachers)) for _ in range(opts["courses"])]
        courses += [self._course(rng, None) for _ in range(opts["unassigned"])]

        now = timezone.now()
        for course in courses:
            if course.teacher_id is None:
                continue
            for _ in range(rng.randint(6, 10)):
                start = (now + timedelta(days=rng.randint(2, 60))).replace(
                    hour=rng.randint(9, 19), minute=rng.choice((0, 30)), second=0, microsecond=0
                )
                Lesson.objects.create(
                    course=course,
                    teacher_id=course.teacher_id,
                    title="Lesson: " + " ".join(rng.sample(LESSON_WORDS, 3)),
                    starts_at=start,
                    ends_at=start + timedelta(minutes=rng.choice((60, 90, 120))),
                )

        statuses = EnrollmentStatus.values
        for course in courses:
            take = min(rng.randint(10, 25), len(students))
            Enrollment.objects.bulk_create(
                Enrollment(course=course, student=student, status=rng.choice(statuses))
                for student in rng.sample(students, take)
            )
        logger.info("Seeded %d courses for %d teachers and %d students", len(courses), len(teachers), len(students))

    def _user(self, rng: random.Random, username: str, role: Role, password: str):
        user = User.objects.create_user(
            username=username,
            email=f"{username}@mail.com",
            password=password,
            first_name=rng.choice(FIRST_NAMES),
            last_name=rng.choice(LAST_NAMES),
        )
        user.profile.role = role
        user.profile.save(update_fields=["role"])
        return user

    def _course(self, rng: random.Random, teacher) -> Course:
        language = rng.choice(LANGUAGES)
        level = rng.choice(Level.values)
        return Course.objects.create(
            title=f"{language} {level} - {rng.choice(TOPICS)}",
            language=language,
            level=level,
            teacher=teacher,
            is_active=rng.random() > 0.15,
        )
