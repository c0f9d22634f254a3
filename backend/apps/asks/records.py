"""
Typed records for the conversation core.

The store projects ORM rows into these at its boundary so identity,
threading and aggregation logic never touch model instances (and never
trigger lazy queries from async code). Summaries are the derived shapes
handed to callers.
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple


def normalise_metadata(raw: Any) -> Mapping[str, Any]:
    """
    Message metadata is a JSON object, but older rows stored it as a
    JSON-encoded string. Anything that is not an object becomes empty.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return MappingProxyType({})
    if isinstance(raw, dict):
        return MappingProxyType(dict(raw))
    return MappingProxyType({})


@dataclass(frozen=True)
class UserRecord:
    id: uuid.UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_model(cls, profile) -> UserRecord:
        return cls(
            id=profile.id,
            email=profile.email or None,
            full_name=profile.full_name or None,
            first_name=profile.first_name or None,
            last_name=profile.last_name or None,
            description=profile.description or None,
        )


@dataclass(frozen=True)
class ParticipantRecord:
    id: uuid.UUID
    ask_session_id: uuid.UUID
    participant_name: Optional[str] = None
    participant_email: Optional[str] = None
    role: Optional[str] = None
    is_spokesperson: bool = False
    user_id: Optional[uuid.UUID] = None
    last_active: Optional[datetime] = None

    @classmethod
    def from_model(cls, participant) -> ParticipantRecord:
        return cls(
            id=participant.id,
            ask_session_id=participant.ask_session_id,
            participant_name=participant.participant_name or None,
            participant_email=participant.participant_email or None,
            role=participant.role or None,
            is_spokesperson=bool(participant.is_spokesperson),
            user_id=participant.user_id,
            last_active=participant.last_active,
        )


@dataclass(frozen=True)
class AskSessionRecord:
    id: uuid.UUID
    key: str
    question: str = ''
    description: Optional[str] = None
    status: Optional[str] = None
    system_prompt: Optional[str] = None
    project_id: Optional[uuid.UUID] = None
    challenge_id: Optional[uuid.UUID] = None
    is_anonymous: bool = False
    conversation_mode: Optional[str] = None
    audience_scope: Optional[str] = None
    response_mode: Optional[str] = None
    expected_duration_minutes: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, session) -> AskSessionRecord:
        return cls(
            id=session.id,
            key=session.key,
            question=session.question,
            description=session.description or None,
            status=session.status,
            system_prompt=session.system_prompt or None,
            project_id=session.project_id,
            challenge_id=session.challenge_id,
            is_anonymous=bool(session.is_anonymous),
            conversation_mode=session.conversation_mode or None,
            audience_scope=session.audience_scope or None,
            response_mode=session.response_mode or None,
            expected_duration_minutes=session.expected_duration_minutes,
            created_at=session.created_at,
        )


@dataclass(frozen=True)
class ThreadRecord:
    id: uuid.UUID
    ask_session_id: uuid.UUID
    user_id: Optional[uuid.UUID]
    is_shared: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, thread) -> ThreadRecord:
        return cls(
            id=thread.id,
            ask_session_id=thread.ask_session_id,
            user_id=thread.user_id,
            is_shared=thread.is_shared,
            created_at=thread.created_at,
        )


@dataclass(frozen=True)
class MessageRecord:
    id: uuid.UUID
    ask_session_id: uuid.UUID
    content: str
    conversation_thread_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    sender_type: Optional[str] = None
    message_type: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    created_at: Optional[datetime] = None
    plan_step_id: Optional[uuid.UUID] = None

    @classmethod
    def from_model(cls, message) -> MessageRecord:
        return cls(
            id=message.id,
            ask_session_id=message.ask_session_id,
            content=message.content,
            conversation_thread_id=message.conversation_thread_id,
            user_id=message.user_id,
            sender_type=message.sender_type or None,
            message_type=message.message_type or None,
            metadata=normalise_metadata(message.metadata),
            created_at=message.created_at,
            plan_step_id=message.plan_step_id,
        )


@dataclass(frozen=True)
class ProjectRecord:
    id: uuid.UUID
    name: Optional[str] = None
    system_prompt: Optional[str] = None

    @classmethod
    def from_model(cls, project) -> ProjectRecord:
        return cls(id=project.id, name=project.name or None, system_prompt=project.system_prompt or None)


@dataclass(frozen=True)
class ChallengeRecord:
    id: uuid.UUID
    name: Optional[str] = None
    system_prompt: Optional[str] = None

    @classmethod
    def from_model(cls, challenge) -> ChallengeRecord:
        return cls(id=challenge.id, name=challenge.name or None, system_prompt=challenge.system_prompt or None)


@dataclass(frozen=True)
class PlanStepRecord:
    id: uuid.UUID
    step_identifier: str
    step_order: int
    title: str
    objective: str
    status: str
    summary: Optional[str] = None
    created_at: Optional[datetime] = None
    activated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, step) -> PlanStepRecord:
        return cls(
            id=step.id,
            step_identifier=step.step_identifier,
            step_order=step.step_order,
            title=step.title,
            objective=step.objective,
            status=step.status,
            summary=step.summary,
            created_at=step.created_at,
            activated_at=step.activated_at,
            completed_at=step.completed_at,
        )


@dataclass(frozen=True)
class ConversationPlanRecord:
    id: uuid.UUID
    conversation_thread_id: uuid.UUID
    title: Optional[str]
    objective: Optional[str]
    total_steps: int
    completed_steps: int
    status: str
    current_step_identifier: Optional[str]
    steps: Tuple[PlanStepRecord, ...] = ()

    @classmethod
    def from_model(cls, plan, steps) -> ConversationPlanRecord:
        return cls(
            id=plan.id,
            conversation_thread_id=plan.conversation_thread_id,
            title=plan.title or None,
            objective=plan.objective or None,
            total_steps=plan.total_steps,
            completed_steps=plan.completed_steps,
            status=plan.status,
            current_step_identifier=plan.current_step_identifier or None,
            steps=tuple(PlanStepRecord.from_model(step) for step in steps),
        )


# ---------------------------------------------------------------------------
# Derived shapes handed to callers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConversationMessageSummary:
    """
    The only message shape any caller sees. plan_step_id is always set,
    to None when the message is not tied to a plan step.
    """
    id: uuid.UUID
    sender_type: str
    sender_name: str
    content: str
    timestamp: Optional[datetime]
    plan_step_id: Optional[uuid.UUID]


@dataclass(frozen=True)
class ConversationParticipantSummary:
    name: str
    role: Optional[str] = None
    description: Optional[str] = None
