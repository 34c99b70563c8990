class OnboardingError(Exception):
    code = "onboarding_error"


class InvalidTransition(OnboardingError):
    code = "invalid_transition"


class IncompleteRequirements(OnboardingError):
    code = "incomplete_requirements"

    def __init__(self, missing):
        self.missing = tuple(missing)
        super().__init__(f"Required items incomplete: {', '.join(self.missing)}")


class NoAccessibleSteps(OnboardingError):
    code = "no_accessible_steps"


class ProgressNotInitialized(OnboardingError):
    code = "progress_not_initialized"


class ConcurrentUpdate(OnboardingError):
    code = "concurrent_update"


class StoreUnavailable(OnboardingError):
    code = "store_unavailable"


class NotPermitted(OnboardingError):
    code = "not_permitted"
