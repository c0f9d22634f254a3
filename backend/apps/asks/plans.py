"""
Conversation plans - the step-by-step discussion plan attached to a thread.

Plans are generated and advanced elsewhere; the conversation core only
reads them so they can be attached to an assembled context, with the
current step and progress line the context payload reports.
"""
import re
import uuid
from typing import Optional

from .models import PlanStepStatus
from .records import ConversationPlanRecord, PlanStepRecord
from .store import ConversationStore

STEP_COMPLETE_PATTERN = re.compile(r'STEP_COMPLETE:(\w+)')


class ConversationPlanService:

    def __init__(self, store: ConversationStore):
        self.store = store

    async def get_plan_with_steps(self, thread_id: uuid.UUID) -> Optional[ConversationPlanRecord]:
        """Plan for a thread with its steps in step_order, or None."""
        return await self.store.get_conversation_plan(thread_id)


def get_current_step(plan: Optional[ConversationPlanRecord]) -> Optional[PlanStepRecord]:
    """
    The step named by current_step_identifier, falling back to the first
    step whose status is active.
    """
    if plan is None:
        return None
    if plan.current_step_identifier:
        for step in plan.steps:
            if step.step_identifier == plan.current_step_identifier:
                return step
    for step in plan.steps:
        if step.status == PlanStepStatus.ACTIVE:
            return step
    return None


def format_plan_progress(plan: ConversationPlanRecord) -> str:
    total = plan.total_steps
    completed = plan.completed_steps
    percentage = round(completed / total * 100) if total > 0 else 0
    return f"Plan progress: {completed}/{total} steps ({percentage}%)"


def detect_step_completion(content: str) -> Optional[str]:
    """
    Return the step identifier from a STEP_COMPLETE:<id> marker, if any.

    Exported for the chat stream, which advances plans from agent replies.
    """
    if not content:
        return None
    match = STEP_COMPLETE_PATTERN.search(content)
    return match.group(1) if match else None
