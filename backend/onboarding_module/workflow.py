"""Workflow controller for institution onboarding.

One ``OnboardingWorkflow`` is built per request for a single actor. It owns
every mutation of the progress record: navigation, completion, draft saves
and the final go-live lock. All writes go through the repository as
compare-and-set updates, so two tabs racing on the same institution get a
``ConcurrentUpdate`` instead of silently overwriting each other.
"""
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass

from rbac_module.roles import Actor

from .checklist import ChecklistItem, rules_for_roles, unmet_required
from .errors import (
    IncompleteRequirements,
    InvalidTransition,
    NoAccessibleSteps,
    NotPermitted,
    ProgressNotInitialized,
)
from .navigation import (
    can_navigate_to_step,
    completion_percentage,
    next_visible_step,
    previous_visible_step,
    resolve_current_step,
)
from .repository import ProgressPatch, ProgressRepository, ProgressSnapshot
from .steps import STEP_DEFINITIONS, OnboardingStep, StepDefinition, tips_for_roles, visible_steps

logger = logging.getLogger(__name__)

ChecklistBuilder = Callable[[int, Iterable[str]], list[ChecklistItem]]


@dataclass(frozen=True)
class StepState:
    definition: StepDefinition
    completed: bool
    current: bool
    navigable: bool


@dataclass(frozen=True)
class WorkflowSummary:
    progress: ProgressSnapshot
    steps: list[StepState]
    completion_percentage: int
    tips: tuple[str, ...]


class OnboardingWorkflow:
    def __init__(
        self,
        repository: ProgressRepository,
        actor: Actor,
        checklist_builder: ChecklistBuilder,
        steps: Sequence[StepDefinition] = STEP_DEFINITIONS,
    ):
        self.repository = repository
        self.actor = actor
        self.checklist_builder = checklist_builder
        self.step_definitions = visible_steps(steps, actor.roles)
        self.visible = [definition.id for definition in self.step_definitions]

    @property
    def institution_id(self) -> int:
        return self.actor.institution_id

    def load(self) -> ProgressSnapshot | None:
        return self.repository.get(self.institution_id)

    def initialize(self) -> ProgressSnapshot:
        existing = self.load()
        if existing is not None:
            return existing
        if not self.visible:
            raise NoAccessibleSteps("No onboarding steps are available for your role")
        return self.repository.create(self.institution_id, self.visible[0])

    def open(self) -> ProgressSnapshot:
        progress = self.load()
        if progress is None:
            progress = self.initialize()
        return self.reconcile(progress)

    def reconcile(self, progress: ProgressSnapshot) -> ProgressSnapshot:
        """Move an actor off a step their roles cannot see."""
        if progress.is_locked or not self.visible:
            return progress
        target = resolve_current_step(self.visible, progress.completed_steps, progress.current_step)
        if target is None or target == progress.current_step:
            return progress
        logger.info(
            f"Institution {self.institution_id}: step {progress.current_step.value} not visible "
            f"to user {self.actor.user_id}, moving to {target.value}"
        )
        return self._write(progress, ProgressPatch(current_step=target), None)

    def update_step(
        self,
        target: OnboardingStep | str,
        step_data: dict | None = None,
        expected_version: int | None = None,
    ) -> ProgressSnapshot:
        target = OnboardingStep(target)
        progress = self._editable()
        if not can_navigate_to_step(self.visible, progress.completed_steps, progress.current_step, target):
            logger.warning(f"Institution {self.institution_id}: navigation to {target.value} rejected")
            raise InvalidTransition(f"Cannot navigate to {target.value} yet")
        patch = ProgressPatch(current_step=target, step_data=_data_for(target, step_data))
        return self._write(progress, patch, expected_version)

    def complete_step(
        self,
        step: OnboardingStep | str,
        step_data: dict | None = None,
        expected_version: int | None = None,
    ) -> ProgressSnapshot:
        step = OnboardingStep(step)
        progress = self._editable()
        self._require_visible(step)
        following = next_visible_step(self.visible, step)
        patch = ProgressPatch(
            current_step=following,
            add_completed=frozenset({step}),
            step_data=_data_for(step, step_data),
        )
        updated = self._write(progress, patch, expected_version)
        logger.info(f"Institution {self.institution_id}: step {step.value} completed by user {self.actor.user_id}")
        return updated

    def go_back(self, expected_version: int | None = None) -> ProgressSnapshot:
        progress = self._editable()
        previous = previous_visible_step(self.visible, progress.current_step)
        if previous is None:
            raise InvalidTransition("Already at the first step")
        return self.update_step(previous, expected_version=expected_version)

    def save_step_data(
        self,
        step: OnboardingStep | str,
        data: dict,
        expected_version: int | None = None,
    ) -> ProgressSnapshot:
        step = OnboardingStep(step)
        progress = self._editable()
        self._require_visible(step)
        return self._write(progress, ProgressPatch(step_data={step: data}), expected_version)

    def checklist(self) -> list[ChecklistItem]:
        return self.checklist_builder(self.institution_id, self.actor.roles)

    def go_live(self, expected_version: int | None = None) -> ProgressSnapshot:
        progress = self._editable()
        if not self.visible or not rules_for_roles(self.actor.roles):
            logger.warning(f"Institution {self.institution_id}: go-live refused for user {self.actor.user_id}")
            raise NotPermitted("Your role cannot take this institution live")
        missing = unmet_required(self.checklist())
        if missing:
            logger.warning(f"Institution {self.institution_id}: go-live blocked by {', '.join(missing)}")
            raise IncompleteRequirements(missing)
        patch = ProgressPatch(
            current_step=OnboardingStep.GO_LIVE,
            add_completed=frozenset({OnboardingStep.GO_LIVE}),
            lock=True,
            completed_by_user_id=self.actor.user_id,
        )
        locked = self._write(progress, patch, expected_version)
        logger.info(f"Institution {self.institution_id} is live (user {self.actor.user_id})")
        return locked

    def summary(self, progress: ProgressSnapshot) -> WorkflowSummary:
        states = [
            StepState(
                definition=definition,
                completed=definition.id in progress.completed_steps,
                current=definition.id == progress.current_step,
                navigable=not progress.is_locked
                and can_navigate_to_step(
                    self.visible, progress.completed_steps, progress.current_step, definition.id
                ),
            )
            for definition in self.step_definitions
        ]
        tips = tips_for_roles(progress.current_step, self.actor.roles) if progress.current_step in self.visible else ()
        return WorkflowSummary(
            progress=progress,
            steps=states,
            completion_percentage=completion_percentage(self.visible, progress.completed_steps),
            tips=tips,
        )

    def _editable(self) -> ProgressSnapshot:
        progress = self.load()
        if progress is None:
            raise ProgressNotInitialized("Onboarding has not been started for this institution")
        if progress.is_locked:
            raise InvalidTransition("Onboarding is locked")
        return progress

    def _require_visible(self, step: OnboardingStep) -> None:
        if step not in self.visible:
            raise InvalidTransition(f"Step {step.value} is not available for your role")

    def _write(
        self,
        progress: ProgressSnapshot,
        patch: ProgressPatch,
        expected_version: int | None,
    ) -> ProgressSnapshot:
        version = progress.version if expected_version is None else expected_version
        return self.repository.update(self.institution_id, patch, expected_version=version)


def _data_for(step: OnboardingStep, data: dict | None) -> Mapping[OnboardingStep, dict] | None:
    return {step: data} if data is not None else None
