"""Activity log port."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from app.domain.entities.activity_entry import ActivityEntry


class ActivityLog(ABC):
    """Port interface for the activity log sink.

    Entries are written inside the caller's transaction and become durable
    only when it commits.
    """

    @abstractmethod
    async def record(
        self,
        user_id: str,
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        lead_id: Optional[str] = None,
        old_value: Optional[dict[str, Any]] = None,
        new_value: Optional[dict[str, Any]] = None,
    ) -> ActivityEntry:
        """
        Record an activity entry.

        Args:
            user_id: Acting user
            action: Action name (e.g., 'complete_step')
            entity_type: Entity kind (e.g., 'lead_step')
            entity_id: Entity identifier
            lead_id: Lead the entry belongs to
            old_value: Snapshot before the change
            new_value: Snapshot after the change

        Returns:
            The recorded entry
        """
        pass

    @abstractmethod
    async def list_for_lead(self, lead_id: str) -> list[ActivityEntry]:
        """
        List entries of a lead, newest first.

        Args:
            lead_id: Lead identifier

        Returns:
            Activity entries
        """
        pass
