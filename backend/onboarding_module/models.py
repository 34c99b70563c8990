from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from rbac_module.database import Base, utc_now

from .steps import OnboardingStep


class OnboardingProgress(Base):
    __tablename__ = "onboarding_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    institution_id: Mapped[int] = mapped_column(
        ForeignKey("rbac_institutions.id"), unique=True, nullable=False, index=True
    )
    current_step: Mapped[OnboardingStep] = mapped_column(
        Enum(OnboardingStep, values_callable=lambda e: [m.value for m in e]), nullable=False
    )
    completed_steps: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    step_data: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Bumped on every write; compare-and-set token for concurrent editors.
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("rbac_users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )
