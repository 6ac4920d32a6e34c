"""Lead step (timeline instance) entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from app.domain.errors import InvalidTransitionError
from app.domain.value_objects.remarks import Remarks, remarks_type, serialize_remarks


class LeadStepStatus(str, Enum):
    """Status of one step in a lead's timeline."""

    UPCOMING = "upcoming"
    PENDING = "pending"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


@dataclass
class LeadStep:
    """Per-lead state of one step template."""

    lead_id: str
    step_id: str
    status: LeadStepStatus = LeadStepStatus.UPCOMING
    completed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    remarks: Optional[Remarks] = None
    attachments: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_completed(self) -> bool:
        return self.status == LeadStepStatus.COMPLETED

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now(timezone.utc)

    def complete(
        self,
        user_id: str,
        remarks: Optional[Remarks],
        attachments: Optional[list[str]] = None,
    ) -> None:
        """
        Mark the step completed.

        Args:
            user_id: User completing the step
            remarks: Remarks recorded with the completion
            attachments: Attachment references; existing ones are kept when None
        """
        if self.is_completed:
            raise InvalidTransitionError("lead step", self.status.value, "completed")
        now = datetime.now(timezone.utc)
        self.status = LeadStepStatus.COMPLETED
        self.completed_by = user_id
        self.completed_at = now
        self.remarks = remarks
        if attachments is not None:
            self.attachments = list(attachments)
        self.updated_at = now

    def enable(self) -> bool:
        """
        Move an upcoming step to pending.

        Returns:
            True if the status changed
        """
        if self.status != LeadStepStatus.UPCOMING:
            return False
        self.status = LeadStepStatus.PENDING
        self.touch()
        return True

    def reset(self, status: LeadStepStatus, remarks: Optional[Remarks] = None) -> None:
        """
        Clear completion data and put the step back to an open status.

        Args:
            status: pending or upcoming
            remarks: Remarks to keep on the reset step
        """
        if status == LeadStepStatus.COMPLETED:
            raise InvalidTransitionError("lead step", self.status.value, status.value)
        self.status = status
        self.completed_by = None
        self.completed_at = None
        self.remarks = remarks
        self.touch()

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-friendly view for activity log entries."""
        return {
            "status": self.status.value,
            "completed_by": self.completed_by,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "remarks": serialize_remarks(self.remarks),
            "remarks_type": remarks_type(self.remarks),
            "attachments": list(self.attachments),
        }
