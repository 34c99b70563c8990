from collections.abc import Callable

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db_session
from .models import Institution, RoleAssignment, User
from .roles import Actor, Role, has_any_role, normalize_roles
from .security import AuthError, decode_access_token


def _parse_token(auth_header: str | None) -> str:
    if not auth_header:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")
    parts = auth_header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")
    return parts[1].strip()


def get_current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> User:
    token = _parse_token(authorization)
    try:
        payload = decode_access_token(token)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    user = db.query(User).filter(User.email == payload["sub"]).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user")
    return user


def roles_in_institution(db: Session, *, user_id: int, institution_id: int) -> frozenset[str]:
    rows = (
        db.query(RoleAssignment.role)
        .filter(
            RoleAssignment.user_id == user_id,
            (RoleAssignment.institution_id == institution_id) | (RoleAssignment.institution_id.is_(None)),
        )
        .all()
    )
    return normalize_roles(row[0] for row in rows)


def platform_roles(db: Session, *, user_id: int) -> frozenset[str]:
    rows = (
        db.query(RoleAssignment.role)
        .filter(RoleAssignment.user_id == user_id, RoleAssignment.institution_id.is_(None))
        .all()
    )
    return normalize_roles(row[0] for row in rows)


def get_current_actor(
    x_institution_id: int | None = Header(default=None, alias=settings.institution_header),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db_session),
) -> Actor:
    if x_institution_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Institution context required")
    if not db.get(Institution, x_institution_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Institution not found")

    roles = roles_in_institution(db, user_id=current_user.id, institution_id=x_institution_id)
    if not roles:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role in this institution")
    return Actor(user_id=current_user.id, institution_id=x_institution_id, roles=roles)


def require_platform_roles(*allowed_roles: Role) -> Callable:
    def dependency(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db_session),
    ) -> User:
        if not has_any_role(platform_roles(db, user_id=current_user.id), allowed_roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role privileges")
        return current_user

    return dependency


def require_roles(*allowed_roles: Role) -> Callable:
    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not has_any_role(actor.roles, allowed_roles):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role privileges")
        return actor

    return dependency
