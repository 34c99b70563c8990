"""Step registry for the institution onboarding wizard.

The canonical order of ``STEP_DEFINITIONS`` is the order of the
``OnboardingStep`` enum. ``visible_steps`` is the role gate: it filters the
registry down to what an actor may see without ever reordering it.
"""
import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from rbac_module.roles import (
    ACADEMIC_ROLES,
    ADMIN_ROLES,
    FINANCE_ROLES,
    HR_ROLES,
    RoleCategory,
    categories_for,
    normalize_roles,
)


class OnboardingStep(str, enum.Enum):
    INSTITUTION_PROFILE = "institution_profile"
    ACADEMIC_CALENDAR = "academic_calendar"
    CLASS_SETUP = "class_setup"
    SUBJECT_SETUP = "subject_setup"
    FEE_STRUCTURE = "fee_structure"
    DATA_IMPORT = "data_import"
    GO_LIVE = "go_live"


@dataclass(frozen=True)
class StepDefinition:
    id: OnboardingStep
    title: str
    description: str
    # Empty means visible to every role.
    visible_to_roles: frozenset[str] = frozenset()
    required_for_go_live: bool = False
    tips: dict[str, tuple[str, ...]] = field(default_factory=dict, compare=False)

    def is_visible_to(self, actor_roles: Iterable[str]) -> bool:
        if not self.visible_to_roles:
            return True
        return not self.visible_to_roles.isdisjoint(normalize_roles(actor_roles))


STEP_DEFINITIONS: tuple[StepDefinition, ...] = (
    StepDefinition(
        id=OnboardingStep.INSTITUTION_PROFILE,
        title="Institution Profile",
        description="Set up your school's basic information",
        visible_to_roles=ADMIN_ROLES,
        required_for_go_live=True,
        tips={
            "default": (
                "Your school name will appear on all official documents",
                "Email is used for system notifications and parent communications",
                "Select the curriculum your school follows for proper grading",
            ),
            "admin": (
                "Complete the profile before inviting other staff to onboard",
                "The curriculum selection affects grading scales and report formats",
                "Institution type determines available features and templates",
            ),
        },
    ),
    StepDefinition(
        id=OnboardingStep.ACADEMIC_CALENDAR,
        title="Academic Calendar",
        description="Set up academic years and terms",
        visible_to_roles=ADMIN_ROLES | ACADEMIC_ROLES,
        required_for_go_live=True,
        tips={
            "default": (
                "Use Quick Setup to create an entire year with terms in one click",
                "Create at least one academic year to proceed",
                'Mark one year as "current" for default selection',
            ),
            "academic": (
                "Terms define grading periods for report cards",
                "The calendar affects exam scheduling and grade entry",
                "Ensure term dates align with your school calendar",
            ),
            "admin": (
                "Academic years are required before enrolling students",
                "Consider setting up next year in advance for planning",
            ),
        },
    ),
    StepDefinition(
        id=OnboardingStep.CLASS_SETUP,
        title="Classes & Streams",
        description="Configure class structure for your school",
        visible_to_roles=ADMIN_ROLES | ACADEMIC_ROLES,
        required_for_go_live=True,
        tips={
            "default": (
                "Use bulk creation to quickly set up multiple classes",
                "Streams help organize large classes (e.g., Grade 1 A, Grade 1 B)",
                "Capacity helps track enrollment limits",
            ),
            "academic": (
                "Classes are used for timetabling and teacher assignments",
                "Consider your streaming policy when setting up",
                "You can add more classes later as enrollment grows",
            ),
            "admin": (
                "Students will be assigned to these classes during enrollment",
                "Fee structures can be linked to specific class levels",
            ),
        },
    ),
    StepDefinition(
        id=OnboardingStep.SUBJECT_SETUP,
        title="Subjects",
        description="Add subjects taught in your school",
        visible_to_roles=ADMIN_ROLES | ACADEMIC_ROLES,
        required_for_go_live=True,
        tips={
            "default": (
                "Use preset subjects for quick setup",
                "Subject codes are used for reports and transcripts",
                "Categories help organize subjects by department",
            ),
            "academic": (
                "Subjects are linked to teachers for workload management",
                "Each subject can have specific grading configurations",
                "Consider elective vs. core subject designations",
            ),
            "admin": (
                "Fee items can be linked to optional subjects",
                "Subjects appear on report cards and transcripts",
            ),
        },
    ),
    StepDefinition(
        id=OnboardingStep.FEE_STRUCTURE,
        title="Fee Structure",
        description="Set up tuition and other fee items",
        visible_to_roles=ADMIN_ROLES | FINANCE_ROLES,
        required_for_go_live=False,
        tips={
            "default": (
                "Use Quick Setup to apply a pre-configured fee template",
                "Create separate fee items for different purposes",
                "Mandatory fees are applied to all students by default",
            ),
            "finance": (
                "Set up Chart of Accounts before configuring fees",
                "Link fee items to appropriate ledger accounts for proper accounting",
                "Configure payment plans for term-based fee collection",
                "Consider fee exemption rules for sponsored students",
            ),
            "admin": (
                "Fee structures determine student billing during enrollment",
                "Different class levels can have different fee amounts",
                "You can modify fee items before the next billing cycle",
            ),
        },
    ),
    StepDefinition(
        id=OnboardingStep.DATA_IMPORT,
        title="Data Import",
        description="Import existing data from your previous system",
        visible_to_roles=ADMIN_ROLES | FINANCE_ROLES | ACADEMIC_ROLES | HR_ROLES,
        required_for_go_live=False,
        tips={
            "default": (
                "Download CSV templates for each data type",
                "Validate data before importing to avoid errors",
                "You can import in batches for large datasets",
            ),
            "finance": (
                "Import opening balances for students with outstanding fees",
                "Historical payment records help track fee payment patterns",
                "Ensure student records exist before importing payments",
            ),
            "academic": (
                "Import historical grades for transcript generation",
                "Student and class data should be imported first",
                "Attendance history is optional but useful for reports",
            ),
            "hr": (
                "Import staff records with their qualifications",
                "Ensure staff IDs match any existing records",
                "Leave balance history can be imported separately",
            ),
            "admin": (
                "Core data (Students, Staff) should be imported first",
                "Use rollback if import produces unexpected results",
                "Consider importing in stages: Core, then Financial, then Historical",
            ),
        },
    ),
    StepDefinition(
        id=OnboardingStep.GO_LIVE,
        title="Go Live",
        description="Review and activate your school system",
        visible_to_roles=ADMIN_ROLES,
        required_for_go_live=True,
        tips={
            "default": (
                "Review all configuration before going live",
                "Ensure at least one admin user is set up",
                "You can still make changes after going live",
            ),
            "admin": (
                "Going live enables the system for all users",
                "Parent and student portals become accessible",
                "Make sure key staff have been assigned their roles",
            ),
        },
    ),
)

_STEPS_BY_ID = {definition.id: definition for definition in STEP_DEFINITIONS}

if len(_STEPS_BY_ID) != len(STEP_DEFINITIONS) or [d.id for d in STEP_DEFINITIONS] != list(OnboardingStep):
    raise RuntimeError("Onboarding step registry must list every step exactly once in canonical order")

# Tip precedence when an actor spans several categories.
TIP_PRECEDENCE = (RoleCategory.FINANCE, RoleCategory.ACADEMIC, RoleCategory.HR, RoleCategory.ADMIN)


def get_step_definition(step: OnboardingStep | str) -> StepDefinition:
    return _STEPS_BY_ID[OnboardingStep(step)]


def canonical_index(step: OnboardingStep | str) -> int:
    return list(OnboardingStep).index(OnboardingStep(step))


def visible_steps(
    all_steps: Sequence[StepDefinition],
    actor_roles: Iterable[str],
) -> list[StepDefinition]:
    roles = normalize_roles(actor_roles)
    return [step for step in all_steps if step.is_visible_to(roles)]


def visible_step_ids(actor_roles: Iterable[str]) -> list[OnboardingStep]:
    return [step.id for step in visible_steps(STEP_DEFINITIONS, actor_roles)]


def can_access_step(step: OnboardingStep | str, actor_roles: Iterable[str]) -> bool:
    return get_step_definition(step).is_visible_to(actor_roles)


def tips_for_roles(step: OnboardingStep | str, actor_roles: Iterable[str]) -> tuple[str, ...]:
    definition = get_step_definition(step)
    categories = categories_for(actor_roles)
    for category in TIP_PRECEDENCE:
        if category in categories and category.value in definition.tips:
            return definition.tips[category.value]
    return definition.tips.get("default", ())
