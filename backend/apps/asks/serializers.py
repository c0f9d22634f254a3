"""
Asks serializers

Read-only serializers over the conversation records. They take the frozen
dataclasses from apps.asks.records / apps.asks.context, not model instances.
"""
from rest_framework import serializers

from . import plans


class AskSessionSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    key = serializers.CharField(read_only=True)
    question = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True, allow_null=True)
    status = serializers.CharField(read_only=True, allow_null=True)
    system_prompt = serializers.CharField(read_only=True, allow_null=True)
    project_id = serializers.UUIDField(read_only=True, allow_null=True)
    challenge_id = serializers.UUIDField(read_only=True, allow_null=True)
    is_anonymous = serializers.BooleanField(read_only=True)
    conversation_mode = serializers.CharField(read_only=True, allow_null=True)
    audience_scope = serializers.CharField(read_only=True, allow_null=True)
    response_mode = serializers.CharField(read_only=True, allow_null=True)
    expected_duration_minutes = serializers.IntegerField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)


class ParticipantSummarySerializer(serializers.Serializer):
    name = serializers.CharField(read_only=True)
    role = serializers.CharField(read_only=True, allow_null=True)
    description = serializers.CharField(read_only=True, allow_null=True)


class MessageSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    sender_type = serializers.CharField(read_only=True)
    sender_name = serializers.CharField(read_only=True)
    content = serializers.CharField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True, allow_null=True)
    plan_step_id = serializers.UUIDField(read_only=True, allow_null=True)


class ProjectSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True, allow_null=True)
    system_prompt = serializers.CharField(read_only=True, allow_null=True)


class ChallengeSerializer(ProjectSerializer):
    pass


class ThreadSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True, allow_null=True)
    is_shared = serializers.BooleanField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)


class PlanStepSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    step_identifier = serializers.CharField(read_only=True)
    step_order = serializers.IntegerField(read_only=True)
    title = serializers.CharField(read_only=True)
    objective = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    summary = serializers.CharField(read_only=True, allow_null=True)
    activated_at = serializers.DateTimeField(read_only=True, allow_null=True)
    completed_at = serializers.DateTimeField(read_only=True, allow_null=True)


class ConversationPlanSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    title = serializers.CharField(read_only=True, allow_null=True)
    objective = serializers.CharField(read_only=True, allow_null=True)
    total_steps = serializers.IntegerField(read_only=True)
    completed_steps = serializers.IntegerField(read_only=True)
    status = serializers.CharField(read_only=True)
    current_step_identifier = serializers.CharField(read_only=True, allow_null=True)
    steps = PlanStepSerializer(many=True, read_only=True)
    current_step = serializers.SerializerMethodField()
    progress = serializers.SerializerMethodField()

    def get_current_step(self, plan):
        step = plans.get_current_step(plan)
        return PlanStepSerializer(step).data if step else None

    def get_progress(self, plan):
        return plans.format_plan_progress(plan)


class ConversationContextSerializer(serializers.Serializer):
    """Full context payload for the chat stream and voice-agent initialiser."""

    ask_session = AskSessionSerializer(read_only=True)
    participants = ParticipantSummarySerializer(many=True, read_only=True)
    messages = MessageSummarySerializer(many=True, read_only=True)
    project = ProjectSerializer(read_only=True, allow_null=True)
    challenge = ChallengeSerializer(read_only=True, allow_null=True)
    conversation_plan = ConversationPlanSerializer(read_only=True, allow_null=True)
    conversation_thread = ThreadSerializer(read_only=True, allow_null=True)


def context_payload(context, matched_by, participant_id=None) -> dict:
    """
    Serialized context plus how the session was located and, when an
    invite token was used, which participant is viewing it.
    """
    payload = dict(ConversationContextSerializer(context).data)
    payload['matched_by'] = matched_by
    payload['participant_id'] = str(participant_id) if participant_id else None
    return payload
