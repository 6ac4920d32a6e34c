"""Step template entity."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from app.domain.errors import ValidationFailedError
from app.domain.value_objects.user_role import UserRole


@dataclass
class StepTemplate:
    """Admin-defined configuration for one stage of the lead workflow."""

    name: str
    order_index: int
    allowed_roles: frozenset[UserRole]
    remarks_required: bool = False
    attachments_allowed: bool = False
    customer_upload: bool = False
    is_active: bool = True
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """Normalize and validate configuration."""
        self.assign_roles(self.allowed_roles)
        if not self.name or not self.name.strip():
            raise ValidationFailedError("step name must not be empty")

    def assign_roles(self, roles: Iterable["UserRole | str"]) -> None:
        """
        Replace the roles allowed to act on this step.

        Raises:
            ValidationFailedError: If a role is unknown or none is given
        """
        try:
            parsed = frozenset(UserRole.parse(role) for role in roles)
        except ValueError as err:
            raise ValidationFailedError(str(err)) from err
        if not parsed:
            raise ValidationFailedError("allowed_roles must not be empty")
        self.allowed_roles = parsed

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now(timezone.utc)

    def snapshot(self) -> dict:
        """Return a JSON-friendly view for activity log entries."""
        return {
            "name": self.name,
            "order_index": self.order_index,
            "allowed_roles": sorted(role.value for role in self.allowed_roles),
            "remarks_required": self.remarks_required,
            "attachments_allowed": self.attachments_allowed,
            "customer_upload": self.customer_upload,
            "is_active": self.is_active,
        }
