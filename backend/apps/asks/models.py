"""
ASK models - sessions, participants, conversation threads and messages
"""
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.common.models import TimestampedModel, UUIDModel


class ConversationMode(models.TextChoices):
    INDIVIDUAL_PARALLEL = 'individual_parallel', 'Individual (parallel)'
    COLLABORATIVE = 'collaborative', 'Collaborative'
    GROUP_REPORTER = 'group_reporter', 'Group with reporter'
    CONSULTANT = 'consultant', 'Consultant'


class AudienceScope(models.TextChoices):
    """Legacy: superseded by ConversationMode"""
    INDIVIDUAL = 'individual', 'Individual'
    GROUP = 'group', 'Group'


class ResponseMode(models.TextChoices):
    """Legacy: superseded by ConversationMode"""
    INDIVIDUAL = 'individual', 'Individual'
    COLLECTIVE = 'collective', 'Collective'


class AskStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    CLOSED = 'closed', 'Closed'


class SenderType(models.TextChoices):
    USER = 'user', 'User'
    AI = 'ai', 'AI'


class AskSession(UUIDModel, TimestampedModel):
    """
    One configured round of structured questioning, addressed by a public key.

    Created by the admin screens; the conversation core only reads it.
    """
    key = models.CharField(max_length=255, unique=True)
    question = models.TextField()
    description = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=AskStatus.choices,
        default=AskStatus.ACTIVE,
    )
    system_prompt = models.TextField(blank=True, default='')

    project = models.ForeignKey(
        'projects.Project',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ask_sessions'
    )
    challenge = models.ForeignKey(
        'projects.Challenge',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ask_sessions'
    )

    is_anonymous = models.BooleanField(
        default=False,
        help_text="Allow people who are not listed participants to take part"
    )
    conversation_mode = models.CharField(
        max_length=32,
        choices=ConversationMode.choices,
        null=True,
        blank=True,
        help_text="Decides whether participants share one thread or get their own"
    )

    # Pre-conversation_mode configuration, still honoured when conversation_mode is empty
    audience_scope = models.CharField(
        max_length=20,
        choices=AudienceScope.choices,
        null=True,
        blank=True,
    )
    response_mode = models.CharField(
        max_length=20,
        choices=ResponseMode.choices,
        null=True,
        blank=True,
    )

    expected_duration_minutes = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = 'ask_sessions'
        ordering = ['-created_at']

    def __str__(self):
        return self.key


class AskParticipant(UUIDModel):
    """A person attached to an ASK session, optionally linked to a profile"""
    ask_session = models.ForeignKey(
        AskSession,
        on_delete=models.CASCADE,
        related_name='participants'
    )
    user = models.ForeignKey(
        'auth_app.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ask_participations'
    )
    participant_name = models.CharField(max_length=255, blank=True, default='')
    participant_email = models.EmailField(blank=True, default='')
    role = models.CharField(max_length=100, blank=True, default='')
    is_spokesperson = models.BooleanField(default=False)

    invite_token = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Per-participant secret used in personal invite links"
    )

    joined_at = models.DateTimeField(default=timezone.now)
    last_active = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'ask_participants'
        ordering = ['joined_at']
        indexes = [
            models.Index(fields=['ask_session', 'joined_at'], name='ask_part_session_joined_idx'),
        ]

    def __str__(self):
        return self.participant_name or f"Participant {self.id}"


class ConversationThread(UUIDModel):
    """
    Grouping unit for messages: one shared thread per session, or one
    individual thread per (session, profile).

    Created lazily by ThreadResolver; the partial unique constraints are
    what make concurrent first access converge on a single row.
    """
    ask_session = models.ForeignKey(
        AskSession,
        on_delete=models.CASCADE,
        related_name='conversation_threads'
    )
    user = models.ForeignKey(
        'auth_app.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='conversation_threads'
    )
    is_shared = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'conversation_threads'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['ask_session'],
                condition=Q(is_shared=True, user__isnull=True),
                name='unique_shared_thread_per_ask',
            ),
            models.UniqueConstraint(
                fields=['ask_session', 'user'],
                condition=Q(is_shared=False),
                name='unique_user_thread_per_ask',
            ),
        ]

    def __str__(self):
        scope = 'shared' if self.is_shared else f"user {self.user_id}"
        return f"Thread {self.id} ({scope})"


class PlanStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    COMPLETED = 'completed', 'Completed'
    ABANDONED = 'abandoned', 'Abandoned'


class PlanStepStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACTIVE = 'active', 'Active'
    COMPLETED = 'completed', 'Completed'
    SKIPPED = 'skipped', 'Skipped'


class ConversationPlan(UUIDModel, TimestampedModel):
    """Step-by-step discussion plan attached to a conversation thread"""
    conversation_thread = models.OneToOneField(
        ConversationThread,
        on_delete=models.CASCADE,
        related_name='conversation_plan'
    )
    title = models.CharField(max_length=500, blank=True, default='')
    objective = models.TextField(blank=True, default='')
    total_steps = models.PositiveIntegerField(default=0)
    completed_steps = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=PlanStatus.choices,
        default=PlanStatus.ACTIVE,
    )
    current_step_identifier = models.CharField(
        max_length=50,
        blank=True,
        default='',
        help_text="step_identifier of the active step, e.g. step_2"
    )

    class Meta:
        db_table = 'ask_conversation_plans'

    def __str__(self):
        return self.title or f"Plan for {self.conversation_thread_id}"


class ConversationPlanStep(UUIDModel):
    plan = models.ForeignKey(
        ConversationPlan,
        on_delete=models.CASCADE,
        related_name='steps'
    )
    step_identifier = models.CharField(max_length=50)
    step_order = models.PositiveIntegerField()
    title = models.CharField(max_length=500)
    objective = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=PlanStepStatus.choices,
        default=PlanStepStatus.PENDING,
    )
    summary = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    activated_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'ask_conversation_plan_steps'
        ordering = ['step_order']
        constraints = [
            models.UniqueConstraint(
                fields=['plan', 'step_identifier'],
                name='unique_step_identifier_per_plan',
            ),
        ]

    def __str__(self):
        return f"{self.step_identifier}: {self.title}"


class Message(UUIDModel):
    """
    One utterance in an ASK session. Append-only.

    conversation_thread is NULL for rows written before threads existed;
    those stay visible in every thread of their session.
    """
    ask_session = models.ForeignKey(
        AskSession,
        on_delete=models.CASCADE,
        related_name='messages'
    )
    conversation_thread = models.ForeignKey(
        ConversationThread,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='messages'
    )
    user = models.ForeignKey(
        'auth_app.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='ask_messages'
    )
    sender_type = models.CharField(
        max_length=10,
        choices=SenderType.choices,
        default=SenderType.USER,
    )
    content = models.TextField()
    message_type = models.CharField(max_length=50, default='text')
    metadata = models.JSONField(
        default=dict,
        blank=True,
        help_text="Free-form; metadata.senderName overrides the displayed sender"
    )
    created_at = models.DateTimeField(default=timezone.now)
    plan_step = models.ForeignKey(
        ConversationPlanStep,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='messages'
    )

    class Meta:
        db_table = 'messages'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['ask_session', 'created_at'], name='messages_session_created_idx'),
            models.Index(fields=['conversation_thread', 'created_at'], name='messages_thread_created_idx'),
        ]

    def __str__(self):
        return f"{self.sender_type}: {self.content[:50]}..."
