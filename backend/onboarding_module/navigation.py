"""Pure navigation rules for the onboarding wizard.

All functions take the actor's visible step ids (already in canonical
order), the completed set and the current step, and derive everything from
those. Nothing here touches the store.
"""
from collections.abc import Collection, Sequence

from .steps import OnboardingStep


def can_navigate_to_step(
    visible: Sequence[OnboardingStep],
    completed: Collection[OnboardingStep],
    current: OnboardingStep | None,
    target: OnboardingStep,
) -> bool:
    if target not in visible:
        return False
    if target == current or target in completed:
        return True
    preceding = visible[: visible.index(target)]
    return all(step in completed for step in preceding)


def next_visible_step(visible: Sequence[OnboardingStep], step: OnboardingStep) -> OnboardingStep | None:
    if step not in visible:
        return None
    index = visible.index(step)
    return visible[index + 1] if index + 1 < len(visible) else None


def previous_visible_step(visible: Sequence[OnboardingStep], step: OnboardingStep) -> OnboardingStep | None:
    if step not in visible:
        return None
    index = visible.index(step)
    return visible[index - 1] if index > 0 else None


def resolve_current_step(
    visible: Sequence[OnboardingStep],
    completed: Collection[OnboardingStep],
    current: OnboardingStep,
) -> OnboardingStep | None:
    """Step the actor should be positioned at.

    Returns ``current`` when it is visible; otherwise the first visible step
    not yet completed, falling back to the first visible step. ``None`` when
    nothing is visible.
    """
    if not visible:
        return None
    if current in visible:
        return current
    for step in visible:
        if step not in completed:
            return step
    return visible[0]


def completion_percentage(visible: Sequence[OnboardingStep], completed: Collection[OnboardingStep]) -> int:
    if not visible:
        return 0
    done = sum(1 for step in visible if step in completed)
    return round(done * 100 / len(visible))
