import logging
import re

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from .config import settings
from .models import Institution, RoleAssignment, User
from .roles import ADMIN_ROLES, PLATFORM_ADMIN_ROLES, Role
from .security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def _normalize_email(value: str) -> str:
    normalized = value.lower().strip()
    if not EMAIL_PATTERN.match(normalized):
        raise HTTPException(status_code=400, detail="Invalid email format")
    return normalized


def login_user(db: Session, *, email: str, password: str) -> str:
    user = db.query(User).filter(User.email == _normalize_email(email)).first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return create_access_token(subject=user.email)


def create_institution(db: Session, *, name: str, email: str | None, actor: User) -> Institution:
    institution = Institution(
        name=name.strip(),
        email=_normalize_email(email) if email else None,
        created_by_user_id=actor.id,
    )
    db.add(institution)
    db.commit()
    db.refresh(institution)
    logger.info(f"Institution {institution.id} created by user {actor.id}")
    return institution


def can_manage_institution_users(db: Session, *, user: User, institution_id: int) -> bool:
    roles = {
        row[0]
        for row in db.query(RoleAssignment.role)
        .filter(
            RoleAssignment.user_id == user.id,
            (RoleAssignment.institution_id == institution_id) | (RoleAssignment.institution_id.is_(None)),
        )
        .all()
    }
    return bool(roles & ADMIN_ROLES)


def add_institution_user(
    db: Session,
    *,
    institution_id: int,
    email: str,
    full_name: str | None,
    raw_password: str,
    role: Role,
) -> User:
    if role.value in PLATFORM_ADMIN_ROLES:
        raise HTTPException(status_code=400, detail="Platform roles cannot be assigned per institution")
    if not db.get(Institution, institution_id):
        raise HTTPException(status_code=404, detail="Institution not found")

    email = _normalize_email(email)
    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(email=email, full_name=(full_name or "").strip() or None, password_hash=hash_password(raw_password))
        db.add(user)
        db.flush()

    exists = (
        db.query(RoleAssignment)
        .filter(
            RoleAssignment.user_id == user.id,
            RoleAssignment.role == role.value,
            RoleAssignment.institution_id == institution_id,
        )
        .first()
    )
    if not exists:
        db.add(RoleAssignment(user_id=user.id, role=role.value, institution_id=institution_id))
    db.commit()
    db.refresh(user)
    return user


def seed_default_users(db: Session) -> None:
    email = settings.root_admin_email.lower().strip()
    user = db.query(User).filter(User.email == email).first()
    if user:
        return
    user = User(
        email=email,
        full_name="Super Admin",
        password_hash=hash_password(settings.root_admin_password),
        is_active=True,
    )
    db.add(user)
    db.flush()
    db.add(RoleAssignment(user_id=user.id, role=Role.SUPER_ADMIN.value, institution_id=None))
    db.commit()
    logger.info(f"Seeded platform super admin {email}")
