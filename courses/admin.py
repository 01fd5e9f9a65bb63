from django.contrib import admin

from .models import Course, Enrollment, Lesson


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("title", "language", "level", "teacher", "is_active")
    list_filter = ("is_active", "level", "language")
    search_fields = ("title", "language", "teacher__username")


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "teacher", "starts_at", "ends_at")
    search_fields = ("title", "course__title")


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("course", "student", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("course__title", "student__username")
