from datetime import datetime

from pydantic import BaseModel, Field

from .models import OnboardingStatus
from .roles import Role


class LoginRequest(BaseModel):
    email: str = Field(min_length=5, max_length=255)
    password: str = Field(min_length=8)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RoleAssignmentOut(BaseModel):
    role: str
    institution_id: int | None = None


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str | None = None
    roles: list[RoleAssignmentOut]


class InstitutionCreateRequest(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: str | None = Field(default=None, max_length=255)


class InstitutionOut(BaseModel):
    id: int
    name: str
    email: str | None = None
    onboarding_status: OnboardingStatus
    go_live_at: datetime | None = None
    created_at: datetime


class InstitutionUserCreateRequest(BaseModel):
    email: str = Field(min_length=5, max_length=255)
    full_name: str | None = Field(default=None, max_length=255)
    password: str = Field(min_length=8)
    role: Role
