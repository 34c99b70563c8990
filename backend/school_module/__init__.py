from rbac_module.database import Base, engine

from . import models
from .counters import SqlDomainCounters
from .routes import router


def init_school_module() -> None:
    Base.metadata.create_all(bind=engine)


__all__ = ["SqlDomainCounters", "models", "router", "init_school_module"]
