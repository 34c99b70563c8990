"""Progress store for the onboarding wizard.

The workflow never touches ORM rows directly: reads come back as frozen
``ProgressSnapshot`` values and every write goes through ``update`` as a
compare-and-set on the ``version`` column.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rbac_module.database import utc_now
from rbac_module.models import Institution, OnboardingStatus

from .errors import ConcurrentUpdate, InvalidTransition, ProgressNotInitialized, StoreUnavailable
from .models import OnboardingProgress
from .steps import OnboardingStep, canonical_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressSnapshot:
    institution_id: int
    current_step: OnboardingStep
    completed_steps: frozenset[OnboardingStep]
    is_locked: bool
    version: int
    step_data: Mapping[str, dict] = field(default_factory=dict, compare=False)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    completed_by_user_id: int | None = None

    @classmethod
    def from_row(cls, row: OnboardingProgress) -> "ProgressSnapshot":
        return cls(
            institution_id=row.institution_id,
            current_step=OnboardingStep(row.current_step),
            completed_steps=frozenset(OnboardingStep(s) for s in row.completed_steps or ()),
            is_locked=row.is_locked,
            version=row.version,
            step_data=dict(row.step_data or {}),
            started_at=row.started_at,
            completed_at=row.completed_at,
            completed_by_user_id=row.completed_by_user_id,
        )


@dataclass(frozen=True)
class ProgressPatch:
    current_step: OnboardingStep | None = None
    add_completed: frozenset[OnboardingStep] = frozenset()
    step_data: Mapping[OnboardingStep, dict] | None = None
    lock: bool = False
    completed_by_user_id: int | None = None


def ordered_steps(steps) -> list[str]:
    return [OnboardingStep(s).value for s in sorted(set(steps), key=canonical_index)]


class ProgressRepository:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, institution_id: int) -> OnboardingProgress | None:
        return self.db.execute(
            select(OnboardingProgress)
            .where(OnboardingProgress.institution_id == institution_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get(self, institution_id: int) -> ProgressSnapshot | None:
        try:
            row = self._row(institution_id)
        except SQLAlchemyError as exc:
            self._fail("read", institution_id, exc)
        return ProgressSnapshot.from_row(row) if row else None

    def create(self, institution_id: int, current_step: OnboardingStep) -> ProgressSnapshot:
        row = OnboardingProgress(
            institution_id=institution_id,
            current_step=current_step,
            completed_steps=[],
            step_data={},
            is_locked=False,
            version=1,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError as exc:
            # Another session initialized the same institution first.
            self.db.rollback()
            existing = self.get(institution_id)
            if existing is None:
                self._fail("create", institution_id, exc)
            return existing
        except SQLAlchemyError as exc:
            self._fail("create", institution_id, exc)
        logger.info(f"Onboarding progress created for institution {institution_id} at {current_step.value}")
        return self.get(institution_id)

    def update(self, institution_id: int, patch: ProgressPatch, *, expected_version: int) -> ProgressSnapshot:
        try:
            row = self._row(institution_id)
            if row is None:
                raise ProgressNotInitialized(f"No onboarding progress for institution {institution_id}")
            if row.is_locked:
                raise InvalidTransition("Onboarding is locked")
            if row.version != expected_version:
                raise ConcurrentUpdate(
                    f"Progress changed (expected version {expected_version}, found {row.version})"
                )

            now = utc_now()
            values = {
                "version": expected_version + 1,
                "updated_at": now,
                "completed_steps": ordered_steps([*row.completed_steps, *patch.add_completed]),
            }
            if patch.current_step is not None:
                values["current_step"] = patch.current_step
            if patch.step_data:
                merged = dict(row.step_data or {})
                merged.update({OnboardingStep(k).value: v for k, v in patch.step_data.items()})
                values["step_data"] = merged
            if patch.lock:
                values.update(is_locked=True, completed_at=now, completed_by_user_id=patch.completed_by_user_id)

            result = self.db.execute(
                update(OnboardingProgress)
                .where(
                    OnboardingProgress.id == row.id,
                    OnboardingProgress.version == expected_version,
                    OnboardingProgress.is_locked.is_(False),
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.db.rollback()
                raise ConcurrentUpdate("Progress changed while saving")

            if patch.lock:
                self.db.execute(
                    update(Institution)
                    .where(Institution.id == institution_id)
                    .values(onboarding_status=OnboardingStatus.COMPLETED, go_live_at=now)
                    .execution_options(synchronize_session=False)
                )
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail("update", institution_id, exc)
        return self.get(institution_id)

    def _fail(self, action: str, institution_id: int, exc: SQLAlchemyError):
        self.db.rollback()
        logger.error(f"Onboarding progress {action} failed for institution {institution_id}: {exc}")
        raise StoreUnavailable(f"Could not {action} onboarding progress") from exc
