from onboarding_module.navigation import (
    can_navigate_to_step,
    completion_percentage,
    next_visible_step,
    previous_visible_step,
    resolve_current_step,
)
from onboarding_module.steps import OnboardingStep as S

ALL = list(S)


def test_completed_and_current_steps_are_navigable():
    completed = {S.INSTITUTION_PROFILE, S.ACADEMIC_CALENDAR}
    for target in completed | {S.CLASS_SETUP}:
        assert can_navigate_to_step(ALL, completed, S.CLASS_SETUP, target)


def test_next_incomplete_step_is_navigable_but_not_further():
    completed = {S.INSTITUTION_PROFILE, S.ACADEMIC_CALENDAR}
    assert can_navigate_to_step(ALL, completed, S.INSTITUTION_PROFILE, S.CLASS_SETUP)
    assert not can_navigate_to_step(ALL, completed, S.INSTITUTION_PROFILE, S.SUBJECT_SETUP)
    assert not can_navigate_to_step(ALL, completed, S.INSTITUTION_PROFILE, S.GO_LIVE)


def test_gate_holds_for_every_prefix_of_completion():
    for done in range(len(ALL)):
        completed = set(ALL[:done])
        for index, target in enumerate(ALL):
            expected = index <= done
            assert can_navigate_to_step(ALL, completed, ALL[0], target) is expected, (done, target)


def test_invisible_step_is_never_navigable():
    visible = [S.FEE_STRUCTURE, S.DATA_IMPORT]
    assert not can_navigate_to_step(visible, set(ALL), S.FEE_STRUCTURE, S.INSTITUTION_PROFILE)


def test_gate_only_counts_visible_predecessors():
    # Finance staff do not see the academic steps, so those never block them.
    visible = [S.FEE_STRUCTURE, S.DATA_IMPORT]
    assert can_navigate_to_step(visible, {S.FEE_STRUCTURE}, S.FEE_STRUCTURE, S.DATA_IMPORT)
    assert not can_navigate_to_step(visible, set(), S.FEE_STRUCTURE, S.DATA_IMPORT)


def test_empty_visible_set_allows_nothing():
    assert not can_navigate_to_step([], set(), S.INSTITUTION_PROFILE, S.INSTITUTION_PROFILE)
    assert resolve_current_step([], set(), S.INSTITUTION_PROFILE) is None
    assert completion_percentage([], set()) == 0


def test_next_and_previous_visible_step():
    visible = [S.ACADEMIC_CALENDAR, S.CLASS_SETUP, S.DATA_IMPORT]
    assert next_visible_step(visible, S.CLASS_SETUP) == S.DATA_IMPORT
    assert next_visible_step(visible, S.DATA_IMPORT) is None
    assert previous_visible_step(visible, S.CLASS_SETUP) == S.ACADEMIC_CALENDAR
    assert previous_visible_step(visible, S.ACADEMIC_CALENDAR) is None
    assert next_visible_step(visible, S.GO_LIVE) is None


def test_role_mismatch_resolves_to_first_incomplete_visible_step():
    visible = [S.INSTITUTION_PROFILE, S.ACADEMIC_CALENDAR, S.CLASS_SETUP, S.GO_LIVE]
    completed = {S.INSTITUTION_PROFILE, S.ACADEMIC_CALENDAR}
    assert resolve_current_step(visible, completed, S.FEE_STRUCTURE) == S.CLASS_SETUP


def test_resolution_falls_back_to_first_visible_step_when_all_done():
    visible = [S.FEE_STRUCTURE, S.DATA_IMPORT]
    assert resolve_current_step(visible, set(visible), S.GO_LIVE) == S.FEE_STRUCTURE


def test_resolution_is_idempotent():
    visible = [S.INSTITUTION_PROFILE, S.ACADEMIC_CALENDAR, S.CLASS_SETUP, S.GO_LIVE]
    completed = {S.INSTITUTION_PROFILE}
    first = resolve_current_step(visible, completed, S.FEE_STRUCTURE)
    second = resolve_current_step(visible, completed, first)
    assert first == second == S.ACADEMIC_CALENDAR


def test_completion_percentage_counts_visible_steps_only():
    visible = [S.FEE_STRUCTURE, S.DATA_IMPORT]
    assert completion_percentage(visible, {S.INSTITUTION_PROFILE, S.FEE_STRUCTURE}) == 50
    assert completion_percentage(ALL, {S.INSTITUTION_PROFILE}) == 14
