from rbac_module.database import Base, engine

from . import models
from .routes import router
from .workflow import OnboardingWorkflow


def init_onboarding_module() -> None:
    Base.metadata.create_all(bind=engine)


__all__ = ["OnboardingWorkflow", "models", "router", "init_onboarding_module"]
