"""Domain-specific errors for plan generation.

Each pipeline stage raises its own error type so the HTTP layer can map
failures to status codes without inspecting messages.
"""


class GymPlannerError(Exception):
    """Base exception for all gym planner errors."""

    pass


class PreferencesValidationError(GymPlannerError):
    """Raised when submitted preferences do not match the schema.

    Attributes:
        violations: One entry per failing field, each with "field" and "message"
    """

    def __init__(self, violations: list[dict[str, str]]):
        self.violations = violations
        summary = "; ".join(f"{v['field']}: {v['message']}" for v in violations)
        super().__init__(f"Invalid preferences: {summary}")


class RateLimitExceededError(GymPlannerError):
    """Raised when a user has used up the generation quota for the current window."""

    def __init__(self, user_id: str, limit: int, window_seconds: int, retry_after_seconds: int):
        self.user_id = user_id
        self.limit = limit
        self.window_seconds = window_seconds
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limit of {limit} requests per {window_seconds}s exceeded for user {user_id}")


class PlanSchemaError(GymPlannerError):
    """Raised when LLM output does not satisfy the training plan schema.

    Attributes:
        violations: Human-readable descriptions of each schema violation
    """

    def __init__(self, violations: list[str]):
        self.violations = violations
        super().__init__(f"Generated plan failed schema validation: {violations}")


class GenerationFailedError(GymPlannerError):
    """Raised when plan generation cannot produce a valid plan.

    Covers both models failing, a plan rejected by schema validation,
    and the request-level timeout.
    """

    def __init__(self, message: str, error_type: str = "generation"):
        self.error_type = error_type
        super().__init__(message)
