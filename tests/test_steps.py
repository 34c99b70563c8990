import pytest

from onboarding_module.steps import (
    STEP_DEFINITIONS,
    OnboardingStep,
    StepDefinition,
    can_access_step,
    canonical_index,
    get_step_definition,
    tips_for_roles,
    visible_step_ids,
    visible_steps,
)

CANONICAL = [
    "institution_profile",
    "academic_calendar",
    "class_setup",
    "subject_setup",
    "fee_structure",
    "data_import",
    "go_live",
]


def test_registry_is_in_canonical_order_without_duplicates():
    ids = [step.id.value for step in STEP_DEFINITIONS]
    assert ids == CANONICAL
    assert len(set(ids)) == len(ids)


def test_unknown_step_id_is_rejected_at_construction():
    with pytest.raises(ValueError):
        OnboardingStep("payroll_setup")


def test_admin_sees_every_step():
    assert [s.value for s in visible_step_ids({"institution_admin"})] == CANONICAL


def test_finance_officer_sees_fee_structure_and_import_only():
    assert visible_step_ids({"finance_officer"}) == [OnboardingStep.FEE_STRUCTURE, OnboardingStep.DATA_IMPORT]


def test_teacher_sees_academic_steps():
    assert visible_step_ids({"teacher"}) == [
        OnboardingStep.ACADEMIC_CALENDAR,
        OnboardingStep.CLASS_SETUP,
        OnboardingStep.SUBJECT_SETUP,
        OnboardingStep.DATA_IMPORT,
    ]


def test_multiple_roles_take_the_union_in_canonical_order():
    ids = visible_step_ids({"bursar", "hr_manager", "teacher"})
    assert ids == sorted(ids, key=canonical_index)
    assert OnboardingStep.FEE_STRUCTURE in ids
    assert OnboardingStep.INSTITUTION_PROFILE not in ids


@pytest.mark.parametrize("roles", [set(), {"parent"}, {"student", "librarian"}, {"made_up_role"}])
def test_roles_matching_nothing_see_no_steps(roles):
    assert visible_steps(STEP_DEFINITIONS, roles) == []


def test_visible_steps_is_an_ordered_subset():
    for roles in ({"teacher"}, {"accountant", "academic_director"}, {"super_admin"}):
        result = visible_steps(STEP_DEFINITIONS, roles)
        assert all(step in STEP_DEFINITIONS for step in result)
        positions = [STEP_DEFINITIONS.index(step) for step in result]
        assert positions == sorted(positions)


def test_step_without_role_restriction_is_visible_to_everyone():
    open_step = StepDefinition(id=OnboardingStep.DATA_IMPORT, title="Import", description="Anyone")
    assert visible_steps([open_step], {"parent"}) == [open_step]


def test_can_access_step():
    assert can_access_step("go_live", {"institution_owner"})
    assert not can_access_step("go_live", {"finance_officer"})


def test_tips_follow_category_precedence():
    finance_tips = tips_for_roles("fee_structure", {"institution_admin", "bursar"})
    assert finance_tips == get_step_definition("fee_structure").tips["finance"]
    assert tips_for_roles("go_live", {"institution_admin"}) == get_step_definition("go_live").tips["admin"]
    assert tips_for_roles("go_live", {"parent"}) == get_step_definition("go_live").tips["default"]
