from functools import partial

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, sessionmaker

from rbac_module.database import get_db_session, get_session_factory
from rbac_module.middleware import get_current_actor
from rbac_module.roles import Actor
from school_module.counters import SqlDomainCounters

from .checklist import build_checklist, can_go_live, unmet_required
from .config import settings
from .errors import (
    ConcurrentUpdate,
    IncompleteRequirements,
    InvalidTransition,
    NoAccessibleSteps,
    NotPermitted,
    OnboardingError,
    ProgressNotInitialized,
    StoreUnavailable,
)
from .repository import ProgressRepository
from .schemas import (
    ChecklistOut,
    OnboardingStateOut,
    StepDataRequest,
    StepOut,
    StepRequest,
    VersionedRequest,
    checklist_item_out,
    state_out,
    step_out,
)
from .steps import tips_for_roles
from .workflow import OnboardingWorkflow

router = APIRouter(prefix="/api/v1/onboarding", tags=["Onboarding"])

ERROR_STATUS = {
    InvalidTransition: status.HTTP_409_CONFLICT,
    IncompleteRequirements: status.HTTP_409_CONFLICT,
    ConcurrentUpdate: status.HTTP_409_CONFLICT,
    NoAccessibleSteps: status.HTTP_403_FORBIDDEN,
    NotPermitted: status.HTTP_403_FORBIDDEN,
    ProgressNotInitialized: status.HTTP_404_NOT_FOUND,
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _http_error(exc: OnboardingError) -> HTTPException:
    detail = {"code": exc.code, "message": str(exc)}
    if isinstance(exc, IncompleteRequirements):
        detail["missing"] = list(exc.missing)
    return HTTPException(status_code=ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST), detail=detail)


def get_workflow(
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db_session),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> OnboardingWorkflow:
    counters = SqlDomainCounters(session_factory)
    builder = partial(build_checklist, counters, max_workers=settings.checklist_workers)
    return OnboardingWorkflow(ProgressRepository(db), actor, builder)


@router.get("/steps", response_model=list[StepOut])
def list_steps(workflow: OnboardingWorkflow = Depends(get_workflow)):
    roles = workflow.actor.roles
    return [step_out(definition, tips_for_roles(definition.id, roles)) for definition in workflow.step_definitions]


@router.get("/progress", response_model=OnboardingStateOut)
def read_progress(workflow: OnboardingWorkflow = Depends(get_workflow)):
    try:
        progress = workflow.open()
    except OnboardingError as exc:
        raise _http_error(exc) from exc
    return state_out(workflow.summary(progress))


@router.post("/progress/step", response_model=OnboardingStateOut)
def move_to_step(payload: StepRequest, workflow: OnboardingWorkflow = Depends(get_workflow)):
    try:
        progress = workflow.update_step(payload.step, payload.step_data, payload.expected_version)
    except OnboardingError as exc:
        raise _http_error(exc) from exc
    return state_out(workflow.summary(progress))


@router.post("/progress/complete", response_model=OnboardingStateOut)
def complete_step(payload: StepRequest, workflow: OnboardingWorkflow = Depends(get_workflow)):
    try:
        progress = workflow.complete_step(payload.step, payload.step_data, payload.expected_version)
    except OnboardingError as exc:
        raise _http_error(exc) from exc
    return state_out(workflow.summary(progress))


@router.post("/progress/back", response_model=OnboardingStateOut)
def go_back(payload: VersionedRequest, workflow: OnboardingWorkflow = Depends(get_workflow)):
    try:
        progress = workflow.go_back(payload.expected_version)
    except OnboardingError as exc:
        raise _http_error(exc) from exc
    return state_out(workflow.summary(progress))


@router.put("/progress/step-data", response_model=OnboardingStateOut)
def save_step_data(payload: StepDataRequest, workflow: OnboardingWorkflow = Depends(get_workflow)):
    try:
        progress = workflow.save_step_data(payload.step, payload.data, payload.expected_version)
    except OnboardingError as exc:
        raise _http_error(exc) from exc
    return state_out(workflow.summary(progress))


@router.get("/checklist", response_model=ChecklistOut)
def read_checklist(workflow: OnboardingWorkflow = Depends(get_workflow)):
    items = workflow.checklist()
    return ChecklistOut(
        items=[checklist_item_out(item) for item in items],
        can_go_live=can_go_live(items),
        missing=unmet_required(items),
    )


@router.post("/go-live", response_model=OnboardingStateOut)
def go_live(payload: VersionedRequest, workflow: OnboardingWorkflow = Depends(get_workflow)):
    try:
        progress = workflow.go_live(payload.expected_version)
    except OnboardingError as exc:
        raise _http_error(exc) from exc
    return state_out(workflow.summary(progress))
