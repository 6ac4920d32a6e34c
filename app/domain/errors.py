"""Timeline workflow errors.

Every failure raised by the engine carries a stable ``code`` so callers can
branch on it instead of matching message text.
"""

from typing import Any, Optional


class TimelineError(Exception):
    """Base error for timeline workflow failures."""

    code = "timeline_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a JSON-friendly payload."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class PermissionDeniedError(TimelineError):
    """Raised when the caller's role may not perform the operation."""

    code = "permission_denied"

    def __init__(self, role: str, action: str) -> None:
        self.role = role
        self.action = action
        super().__init__(f"Role '{role}' is not authorized to {action}", role=role)


class RemarksRequiredError(TimelineError):
    """Raised when a remarks-required step is completed without remarks."""

    code = "remarks_required"

    def __init__(self, step_id: str) -> None:
        super().__init__("Remarks are required for this step", step_id=step_id)


class AttachmentsNotAllowedError(TimelineError):
    """Raised when attachments are supplied for a step that does not accept them."""

    code = "attachments_not_allowed"

    def __init__(self, step_id: str) -> None:
        super().__init__("Attachments are not allowed for this step", step_id=step_id)


class AlreadyCompletedError(TimelineError):
    """Raised when completing a step that is already completed."""

    code = "already_completed"

    def __init__(self, lead_step_id: str) -> None:
        super().__init__("Step is already completed", lead_step_id=lead_step_id)


class LeadClosedError(TimelineError):
    """Raised when a non-admin caller mutates a closed lead."""

    code = "lead_closed"

    def __init__(self, lead_id: str) -> None:
        super().__init__(
            "This project is closed. Only an admin can modify closed projects.",
            lead_id=lead_id,
        )


class NotFoundError(TimelineError):
    """Raised when a referenced entity does not exist."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found", entity=entity, id=entity_id)


class AlreadyInitializedError(TimelineError):
    """Raised when a lead's timeline has already been materialized."""

    code = "already_initialized"

    def __init__(self, lead_id: str) -> None:
        super().__init__("Timeline already initialized for this lead", lead_id=lead_id)


class InvalidTransitionError(TimelineError):
    """Raised when a status change is not allowed from the current status."""

    code = "invalid_transition"

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            f"Invalid {entity} status transition from '{current}' to '{target}'",
            current=current,
            target=target,
        )


class ValidationFailedError(TimelineError):
    """Raised when an input fails a domain validation rule."""

    code = "validation_failed"


class ConflictError(TimelineError):
    """Raised on a concurrent write conflict reported by the store."""

    code = "conflict"

    def __init__(self, message: str = "Concurrent write conflict", **details: Any) -> None:
        super().__init__(message, **details)


class DuplicateOrderIndexError(TimelineError):
    """Raised when a template order index collides with another active template."""

    code = "duplicate_order_index"

    def __init__(self, order_index: int, existing_id: Optional[str] = None) -> None:
        super().__init__(
            f"order_index {order_index} is already used by another step",
            order_index=order_index,
            existing_id=existing_id,
        )


class TransactionTimeoutError(TimelineError):
    """Raised when the store cancels a transaction after its timeout."""

    code = "timeout"

    def __init__(self, message: str = "Transaction timed out") -> None:
        super().__init__(message)
