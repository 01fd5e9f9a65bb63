"""Signals for automatic profile management.

On user creation, create a default `UserProfile`. Regular sign-ups start
as students; superusers created through `createsuperuser` start as
admins so the admin-only API is usable out of the box.
"""
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Role, UserProfile


@receiver(post_save, sender=User)
def create_user_profile(sender, instance: User, created: bool, **kwargs):  # noqa: D401
    """Create a profile for new users."""
    if created:
        role = Role.ADMIN if instance.is_superuser else Role.STUDENT
        full_name = instance.get_full_name()
        UserProfile.objects.create(user=instance, role=role, full_name=full_name)
