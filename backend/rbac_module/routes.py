from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db_session
from .middleware import get_current_user, require_platform_roles, roles_in_institution
from .models import Institution, User
from .roles import Role
from .schemas import (
    InstitutionCreateRequest,
    InstitutionOut,
    InstitutionUserCreateRequest,
    LoginRequest,
    LoginResponse,
    RoleAssignmentOut,
    UserOut,
)
from .services import add_institution_user, can_manage_institution_users, create_institution, login_user

router = APIRouter(prefix="/api/v1/rbac", tags=["RBAC Auth"])


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        roles=[RoleAssignmentOut(role=a.role, institution_id=a.institution_id) for a in user.role_assignments],
    )


def _institution_out(institution: Institution) -> InstitutionOut:
    return InstitutionOut(
        id=institution.id,
        name=institution.name,
        email=institution.email,
        onboarding_status=institution.onboarding_status,
        go_live_at=institution.go_live_at,
        created_at=institution.created_at,
    )


@router.post("/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db_session)):
    token = login_user(db, email=payload.email, password=payload.password)
    return LoginResponse(access_token=token)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return _user_out(current_user)


@router.post("/institutions", response_model=InstitutionOut, status_code=status.HTTP_201_CREATED)
def platform_create_institution(
    payload: InstitutionCreateRequest,
    db: Session = Depends(get_db_session),
    current_user: User = Depends(require_platform_roles(Role.SUPER_ADMIN, Role.SUPPORT_ADMIN)),
):
    institution = create_institution(db, name=payload.name, email=payload.email, actor=current_user)
    return _institution_out(institution)


@router.get("/institutions/{institution_id}", response_model=InstitutionOut)
def get_institution(
    institution_id: int,
    db: Session = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    institution = db.get(Institution, institution_id)
    if not institution:
        raise HTTPException(status_code=404, detail="Institution not found")
    if not roles_in_institution(db, user_id=current_user.id, institution_id=institution_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role in this institution")
    return _institution_out(institution)


@router.post(
    "/institutions/{institution_id}/users",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
)
def institution_add_user(
    institution_id: int,
    payload: InstitutionUserCreateRequest,
    db: Session = Depends(get_db_session),
    current_user: User = Depends(get_current_user),
):
    if not can_manage_institution_users(db, user=current_user, institution_id=institution_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role privileges")
    user = add_institution_user(
        db,
        institution_id=institution_id,
        email=payload.email,
        full_name=payload.full_name,
        raw_password=payload.password,
        role=payload.role,
    )
    return _user_out(user)
