"""Role tags and role categories shared by every module.

Role tags are opaque strings on the wire; ``Role`` names the ones this
backend knows about. Unknown tags are tolerated everywhere and simply match
no category.
"""
import enum
from dataclasses import dataclass, field
from collections.abc import Iterable


class Role(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    SUPPORT_ADMIN = "support_admin"
    INSTITUTION_OWNER = "institution_owner"
    INSTITUTION_ADMIN = "institution_admin"
    TEACHER = "teacher"
    ACADEMIC_DIRECTOR = "academic_director"
    FINANCE_OFFICER = "finance_officer"
    ACCOUNTANT = "accountant"
    BURSAR = "bursar"
    HR_MANAGER = "hr_manager"
    ICT_ADMIN = "ict_admin"
    LIBRARIAN = "librarian"
    COACH = "coach"
    PARENT = "parent"
    STUDENT = "student"


class RoleCategory(str, enum.Enum):
    ADMIN = "admin"
    FINANCE = "finance"
    ACADEMIC = "academic"
    HR = "hr"


PLATFORM_ADMIN_ROLES = frozenset({Role.SUPER_ADMIN.value, Role.SUPPORT_ADMIN.value})
INSTITUTION_ADMIN_ROLES = frozenset({Role.INSTITUTION_OWNER.value, Role.INSTITUTION_ADMIN.value})

ROLE_CATEGORIES: dict[RoleCategory, frozenset[str]] = {
    RoleCategory.ADMIN: PLATFORM_ADMIN_ROLES | INSTITUTION_ADMIN_ROLES,
    RoleCategory.FINANCE: frozenset({Role.FINANCE_OFFICER.value, Role.ACCOUNTANT.value, Role.BURSAR.value}),
    RoleCategory.ACADEMIC: frozenset({Role.TEACHER.value, Role.ACADEMIC_DIRECTOR.value}),
    RoleCategory.HR: frozenset({Role.HR_MANAGER.value}),
}

ADMIN_ROLES = ROLE_CATEGORIES[RoleCategory.ADMIN]
FINANCE_ROLES = ROLE_CATEGORIES[RoleCategory.FINANCE]
ACADEMIC_ROLES = ROLE_CATEGORIES[RoleCategory.ACADEMIC]
HR_ROLES = ROLE_CATEGORIES[RoleCategory.HR]


def normalize_roles(roles: Iterable[str | Role]) -> frozenset[str]:
    return frozenset(r.value if isinstance(r, Role) else str(r) for r in roles)


def has_any_role(actor_roles: Iterable[str], target_roles: Iterable[str]) -> bool:
    return not normalize_roles(actor_roles).isdisjoint(normalize_roles(target_roles))


def categories_for(actor_roles: Iterable[str]) -> frozenset[RoleCategory]:
    roles = normalize_roles(actor_roles)
    return frozenset(category for category, members in ROLE_CATEGORIES.items() if not roles.isdisjoint(members))


@dataclass(frozen=True)
class Actor:
    """The acting user inside one institution's context."""

    user_id: int
    institution_id: int
    roles: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", normalize_roles(self.roles))

    @property
    def categories(self) -> frozenset[RoleCategory]:
        return categories_for(self.roles)
