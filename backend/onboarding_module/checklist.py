"""Go-live readiness checklist.

Which items an actor sees, and which of those block go-live, is a pure
lookup on the actor's role categories (``CHECKLIST_RULES``). Record counts
come from a ``DomainCounters`` implementation and are fetched concurrently;
a failing counter degrades its own item to the empty default instead of
failing the whole checklist.
"""
import enum
import logging
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol

from rbac_module.roles import RoleCategory, categories_for

logger = logging.getLogger(__name__)


class ChecklistItemId(str, enum.Enum):
    PROFILE = "profile"
    ACADEMIC_YEARS = "academic_years"
    CLASSES = "classes"
    SUBJECTS = "subjects"
    FEE_ITEMS = "fee_items"
    STUDENTS = "students"
    STAFF = "staff"


class ChecklistStatus(str, enum.Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    WARNING = "warning"


@dataclass(frozen=True)
class ChecklistItem:
    id: ChecklistItemId
    label: str
    description: str
    status: ChecklistStatus
    required: bool
    count: int
    degraded: bool = False


class DomainCounters(Protocol):
    def profile_email(self, institution_id: int) -> str | None: ...

    def count(self, kind: str, institution_id: int) -> int: ...


def _required_for_core(categories: frozenset[RoleCategory]) -> bool:
    return RoleCategory.ADMIN in categories or RoleCategory.ACADEMIC in categories


def _never(categories: frozenset[RoleCategory]) -> bool:
    return False


@dataclass(frozen=True)
class ChecklistRule:
    id: ChecklistItemId
    label: str
    shown_to: frozenset[RoleCategory]
    required_when: Callable[[frozenset[RoleCategory]], bool]
    done_text: str
    todo_text: str


ADMIN_ONLY = frozenset({RoleCategory.ADMIN})
ADMIN_OR_ACADEMIC = frozenset({RoleCategory.ADMIN, RoleCategory.ACADEMIC})
ADMIN_OR_FINANCE = frozenset({RoleCategory.ADMIN, RoleCategory.FINANCE})

CHECKLIST_RULES: tuple[ChecklistRule, ...] = (
    ChecklistRule(
        ChecklistItemId.PROFILE, "Institution Profile", ADMIN_ONLY,
        lambda c: RoleCategory.ADMIN in c,
        "Profile configured", "Add email address",
    ),
    ChecklistRule(
        ChecklistItemId.ACADEMIC_YEARS, "Academic Calendar", ADMIN_OR_ACADEMIC,
        _required_for_core,
        "Calendar configured", "Create at least one academic year",
    ),
    ChecklistRule(
        ChecklistItemId.CLASSES, "Classes", ADMIN_OR_ACADEMIC,
        _required_for_core,
        "Classes configured", "Create at least one class",
    ),
    ChecklistRule(
        ChecklistItemId.SUBJECTS, "Subjects", ADMIN_OR_ACADEMIC,
        _never,
        "Subjects configured", "Add subjects (optional)",
    ),
    ChecklistRule(
        ChecklistItemId.FEE_ITEMS, "Fee Structure", ADMIN_OR_FINANCE,
        # Required only for finance staff without admin rights.
        lambda c: RoleCategory.FINANCE in c and RoleCategory.ADMIN not in c,
        "Fee structure configured", "Add fee items",
    ),
    ChecklistRule(
        ChecklistItemId.STUDENTS, "Students", ADMIN_ONLY,
        _never,
        "Students enrolled", "Add students (can be done later)",
    ),
    ChecklistRule(
        ChecklistItemId.STAFF, "Staff", ADMIN_ONLY,
        _never,
        "Staff added", "Add staff members (can be done later)",
    ),
)


def rules_for_roles(actor_roles: Iterable[str]) -> list[tuple[ChecklistRule, bool]]:
    categories = categories_for(actor_roles)
    return [
        (rule, rule.required_when(categories))
        for rule in CHECKLIST_RULES
        if not rule.shown_to.isdisjoint(categories)
    ]


def _status(satisfied: bool, required: bool) -> ChecklistStatus:
    if satisfied:
        return ChecklistStatus.COMPLETE
    return ChecklistStatus.INCOMPLETE if required else ChecklistStatus.WARNING


def _measure(counters: DomainCounters, item_id: ChecklistItemId, institution_id: int) -> tuple[int, bool, bool]:
    """Return (count, satisfied, degraded) for one item."""
    try:
        if item_id is ChecklistItemId.PROFILE:
            email = counters.profile_email(institution_id)
            has_email = bool(email and email.strip())
            return int(has_email), has_email, False
        count = int(counters.count(item_id.value, institution_id) or 0)
        return count, count > 0, False
    except Exception as exc:
        logger.warning(f"Checklist item {item_id.value} degraded for institution {institution_id}: {exc}")
        return 0, False, True


def build_checklist(
    counters: DomainCounters,
    institution_id: int,
    actor_roles: Iterable[str],
    *,
    max_workers: int = 7,
) -> list[ChecklistItem]:
    rules = rules_for_roles(actor_roles)
    if not rules:
        return []

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(rules)))) as executor:
        futures = [executor.submit(_measure, counters, rule.id, institution_id) for rule, _ in rules]
        measurements = [future.result() for future in futures]

    items = []
    for (rule, required), (count, satisfied, degraded) in zip(rules, measurements):
        items.append(
            ChecklistItem(
                id=rule.id,
                label=rule.label,
                description=rule.done_text if satisfied else rule.todo_text,
                status=_status(satisfied, required),
                required=required,
                count=count,
                degraded=degraded,
            )
        )
    return items


def unmet_required(items: Sequence[ChecklistItem]) -> list[str]:
    return [item.id.value for item in items if item.required and item.status is not ChecklistStatus.COMPLETE]


def can_go_live(items: Sequence[ChecklistItem]) -> bool:
    return not unmet_required(items)
