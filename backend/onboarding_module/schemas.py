from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .checklist import ChecklistItem, ChecklistItemId, ChecklistStatus
from .repository import ProgressSnapshot
from .steps import OnboardingStep, StepDefinition
from .workflow import WorkflowSummary


class StepOut(BaseModel):
    id: OnboardingStep
    title: str
    description: str
    required_for_go_live: bool
    tips: list[str] = []


class StepStateOut(StepOut):
    completed: bool
    current: bool
    navigable: bool


class ProgressOut(BaseModel):
    institution_id: int
    current_step: OnboardingStep
    completed_steps: list[OnboardingStep]
    step_data: dict[str, Any]
    is_locked: bool
    version: int
    started_at: datetime | None = None
    completed_at: datetime | None = None
    completed_by_user_id: int | None = None


class OnboardingStateOut(BaseModel):
    progress: ProgressOut
    steps: list[StepStateOut]
    completion_percentage: int
    tips: list[str]


class StepRequest(BaseModel):
    step: OnboardingStep
    step_data: dict[str, Any] | None = None
    expected_version: int | None = Field(default=None, ge=1)


class StepDataRequest(BaseModel):
    step: OnboardingStep
    data: dict[str, Any]
    expected_version: int | None = Field(default=None, ge=1)


class VersionedRequest(BaseModel):
    expected_version: int | None = Field(default=None, ge=1)


class ChecklistItemOut(BaseModel):
    id: ChecklistItemId
    label: str
    description: str
    status: ChecklistStatus
    required: bool
    count: int
    degraded: bool


class ChecklistOut(BaseModel):
    items: list[ChecklistItemOut]
    can_go_live: bool
    missing: list[str]


def step_out(definition: StepDefinition, tips: tuple[str, ...] = ()) -> StepOut:
    return StepOut(
        id=definition.id,
        title=definition.title,
        description=definition.description,
        required_for_go_live=definition.required_for_go_live,
        tips=list(tips),
    )


def progress_out(progress: ProgressSnapshot) -> ProgressOut:
    return ProgressOut(
        institution_id=progress.institution_id,
        current_step=progress.current_step,
        completed_steps=sorted(progress.completed_steps, key=list(OnboardingStep).index),
        step_data=dict(progress.step_data),
        is_locked=progress.is_locked,
        version=progress.version,
        started_at=progress.started_at,
        completed_at=progress.completed_at,
        completed_by_user_id=progress.completed_by_user_id,
    )


def state_out(summary: WorkflowSummary) -> OnboardingStateOut:
    return OnboardingStateOut(
        progress=progress_out(summary.progress),
        steps=[
            StepStateOut(
                **step_out(state.definition).model_dump(),
                completed=state.completed,
                current=state.current,
                navigable=state.navigable,
            )
            for state in summary.steps
        ],
        completion_percentage=summary.completion_percentage,
        tips=list(summary.tips),
    )


def checklist_item_out(item: ChecklistItem) -> ChecklistItemOut:
    return ChecklistItemOut(
        id=item.id,
        label=item.label,
        description=item.description,
        status=item.status,
        required=item.required,
        count=item.count,
        degraded=item.degraded,
    )
