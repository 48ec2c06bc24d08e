"""Workflow error taxonomy.

Every error raised by the editorial core derives from ``WorkflowError`` and
carries the HTTP status it maps to at the request boundary (see
``newsroom.main``). None of them are fatal to the process.
"""

from dataclasses import dataclass


class WorkflowError(Exception):
    """Base class for recoverable editorial errors."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WorkflowError):
    """The requested entity does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: object | None = None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ForbiddenError(WorkflowError):
    """Role or assignment check failed.

    The public message is deliberately generic; ``reason`` is for logs only.
    """

    status_code = 403
    public_message = "Insufficient permissions for this action"

    def __init__(self, reason: str = ""):
        super().__init__(self.public_message)
        self.reason = reason


@dataclass(frozen=True)
class MissingRequirement:
    """One unmet gate precondition."""

    code: str
    message: str


class GuardFailedError(WorkflowError):
    """One or more named preconditions are unmet."""

    status_code = 400

    def __init__(self, missing: list[MissingRequirement]):
        self.missing = list(missing)
        joined = "; ".join(m.message for m in self.missing)
        super().__init__(f"Requirements not met: {joined}")


class InvalidTransitionError(WorkflowError):
    """The requested edge does not exist from the item's current stage."""

    status_code = 400


class ValidationError(WorkflowError):
    """Malformed or semantically invalid input."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
