# Generated manually for ASK sessions, threads, plans and messages

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth_app", "0001_initial"),
        ("projects", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AskSession",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("key", models.CharField(max_length=255, unique=True)),
                ("question", models.TextField()),
                ("description", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("active", "Active"),
                            ("inactive", "Inactive"),
                            ("closed", "Closed"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("system_prompt", models.TextField(blank=True, default="")),
                (
                    "is_anonymous",
                    models.BooleanField(
                        default=False,
                        help_text="Allow people who are not listed participants to take part",
                    ),
                ),
                (
                    "conversation_mode",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("individual_parallel", "Individual (parallel)"),
                            ("collaborative", "Collaborative"),
                            ("group_reporter", "Group with reporter"),
                            ("consultant", "Consultant"),
                        ],
                        help_text="Decides whether participants share one thread or get their own",
                        max_length=32,
                        null=True,
                    ),
                ),
                (
                    "audience_scope",
                    models.CharField(
                        blank=True,
                        choices=[("individual", "Individual"), ("group", "Group")],
                        max_length=20,
                        null=True,
                    ),
                ),
                (
                    "response_mode",
                    models.CharField(
                        blank=True,
                        choices=[("individual", "Individual"), ("collective", "Collective")],
                        max_length=20,
                        null=True,
                    ),
                ),
                ("expected_duration_minutes", models.PositiveIntegerField(blank=True, null=True)),
                (
                    "challenge",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ask_sessions",
                        to="projects.challenge",
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ask_sessions",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "db_table": "ask_sessions",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="AskParticipant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("participant_name", models.CharField(blank=True, default="", max_length=255)),
                ("participant_email", models.EmailField(blank=True, default="", max_length=254)),
                ("role", models.CharField(blank=True, default="", max_length=100)),
                ("is_spokesperson", models.BooleanField(default=False)),
                (
                    "invite_token",
                    models.CharField(
                        blank=True,
                        help_text="Per-participant secret used in personal invite links",
                        max_length=64,
                        null=True,
                        unique=True,
                    ),
                ),
                ("joined_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("last_active", models.DateTimeField(blank=True, null=True)),
                (
                    "ask_session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="asks.asksession",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ask_participations",
                        to="auth_app.profile",
                    ),
                ),
            ],
            options={
                "db_table": "ask_participants",
                "ordering": ["joined_at"],
                "indexes": [
                    models.Index(fields=["ask_session", "joined_at"], name="ask_part_session_joined_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ConversationThread",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("is_shared", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "ask_session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="conversation_threads",
                        to="asks.asksession",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="conversation_threads",
                        to="auth_app.profile",
                    ),
                ),
            ],
            options={
                "db_table": "conversation_threads",
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_shared", True), ("user__isnull", True)),
                        fields=("ask_session",),
                        name="unique_shared_thread_per_ask",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("is_shared", False)),
                        fields=("ask_session", "user"),
                        name="unique_user_thread_per_ask",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ConversationPlan",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("title", models.CharField(blank=True, default="", max_length=500)),
                ("objective", models.TextField(blank=True, default="")),
                ("total_steps", models.PositiveIntegerField(default=0)),
                ("completed_steps", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("completed", "Completed"), ("abandoned", "Abandoned")],
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "current_step_identifier",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="step_identifier of the active step, e.g. step_2",
                        max_length=50,
                    ),
                ),
                (
                    "conversation_thread",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="conversation_plan",
                        to="asks.conversationthread",
                    ),
                ),
            ],
            options={
                "db_table": "ask_conversation_plans",
            },
        ),
        migrations.CreateModel(
            name="ConversationPlanStep",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("step_identifier", models.CharField(max_length=50)),
                ("step_order", models.PositiveIntegerField()),
                ("title", models.CharField(max_length=500)),
                ("objective", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("active", "Active"),
                            ("completed", "Completed"),
                            ("skipped", "Skipped"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("summary", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("activated_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "plan",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="steps",
                        to="asks.conversationplan",
                    ),
                ),
            ],
            options={
                "db_table": "ask_conversation_plan_steps",
                "ordering": ["step_order"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("plan", "step_identifier"),
                        name="unique_step_identifier_per_plan",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "sender_type",
                    models.CharField(choices=[("user", "User"), ("ai", "AI")], default="user", max_length=10),
                ),
                ("content", models.TextField()),
                ("message_type", models.CharField(default="text", max_length=50)),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Free-form; metadata.senderName overrides the displayed sender",
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "ask_session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="asks.asksession",
                    ),
                ),
                (
                    "conversation_thread",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="messages",
                        to="asks.conversationthread",
                    ),
                ),
                (
                    "plan_step",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="messages",
                        to="asks.conversationplanstep",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ask_messages",
                        to="auth_app.profile",
                    ),
                ),
            ],
            options={
                "db_table": "messages",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["ask_session", "created_at"], name="messages_session_created_idx"),
                    models.Index(fields=["conversation_thread", "created_at"], name="messages_thread_created_idx"),
                ],
            },
        ),
    ]
