"""
Project models - the parent records an ASK session can hang off
"""
from django.db import models

from apps.common.models import TimestampedModel, UUIDModel


class Project(UUIDModel, TimestampedModel):
    """
    Top-level container for challenges and ASK sessions

    Its system prompt is layered into the conversation agent's
    instructions for every ASK attached to it.
    """
    name = models.CharField(max_length=500)
    description = models.TextField(blank=True, default='')
    system_prompt = models.TextField(blank=True, default='')

    is_archived = models.BooleanField(default=False)

    class Meta:
        db_table = 'projects'
        ordering = ['-updated_at']

    def __str__(self):
        return self.name


class Challenge(UUIDModel, TimestampedModel):
    """A problem statement inside a project that ASK sessions explore"""
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='challenges'
    )
    name = models.CharField(max_length=500)
    description = models.TextField(blank=True, default='')
    system_prompt = models.TextField(blank=True, default='')

    class Meta:
        db_table = 'challenges'
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['project', '-updated_at'], name='challenges_project_recent_idx'),
        ]

    def __str__(self):
        return self.name
