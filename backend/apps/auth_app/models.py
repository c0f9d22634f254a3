"""
Profile model - the identity record referenced by ASK participants,
conversation threads and messages.
"""
from django.db import models
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.common.models import TimestampedModel, UUIDModel


class Profile(UUIDModel, TimestampedModel):
    """
    Person record used for display names in conversations.

    A profile may exist without a login account (participants invited by
    email before they ever sign in), so the link to the auth user is
    optional. Every "user id" handled by the conversation core is a
    profile id.
    """
    user = models.OneToOneField(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='profile',
    )
    email = models.EmailField(blank=True, default='')
    full_name = models.CharField(max_length=255, blank=True, default='')
    first_name = models.CharField(max_length=150, blank=True, default='')
    last_name = models.CharField(max_length=150, blank=True, default='')
    description = models.TextField(
        blank=True,
        default='',
        help_text="Short bio shown to the conversation agent"
    )

    class Meta:
        db_table = 'profiles'
        ordering = ['email']
        indexes = [
            models.Index(fields=['email'], name='profiles_email_idx'),
        ]

    def __str__(self):
        return self.full_name or self.email or f"Profile {self.id}"


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """
    Auto-create a profile when a login account is created
    """
    if created and not Profile.objects.filter(user=instance).exists():
        Profile.objects.create(
            user=instance,
            email=instance.email or '',
            first_name=instance.first_name or '',
            last_name=instance.last_name or '',
        )
