import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    jwt_secret: str = os.getenv("RBAC_JWT_SECRET", os.getenv("JWT_SECRET", "change-me-in-production"))
    jwt_algorithm: str = os.getenv("RBAC_JWT_ALGORITHM", "HS256")
    jwt_exp_minutes: int = int(os.getenv("RBAC_JWT_EXP_MINUTES", "60"))
    root_admin_email: str = os.getenv("ROOT_ADMIN_EMAIL", "superadmin@school.local")
    root_admin_password: str = os.getenv("ROOT_ADMIN_PASSWORD", "ChangeMe@123")
    institution_header: str = os.getenv("RBAC_INSTITUTION_HEADER", "X-Institution-Id")


settings = Settings()
