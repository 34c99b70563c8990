from sqlalchemy.orm import Session

from .database import Base, engine
from .roles import Actor, Role
from .routes import router
from .services import seed_default_users


def init_rbac_module() -> None:
    Base.metadata.create_all(bind=engine)
    db = Session(bind=engine)
    try:
        seed_default_users(db)
    finally:
        db.close()


__all__ = ["Actor", "Role", "router", "init_rbac_module"]
