"""Lead step repository port."""

from abc import ABC, abstractmethod
from typing import Optional

from app.domain.entities.lead_step import LeadStep


class LeadStepRepository(ABC):
    """Port interface for per-lead timeline steps."""

    @abstractmethod
    async def list_for_lead(self, lead_id: str) -> list[LeadStep]:
        """
        List all steps of a lead's timeline.

        Args:
            lead_id: Lead identifier

        Returns:
            Lead steps (unordered; order comes from the templates)
        """
        pass

    @abstractmethod
    async def get_for_lead(
        self, lead_id: str, step_id: str, for_update: bool = False
    ) -> Optional[LeadStep]:
        """
        Get a lead's step for a template.

        Args:
            lead_id: Lead identifier
            step_id: Step template identifier
            for_update: Lock the row for the rest of the transaction

        Returns:
            LeadStep, or None if the lead has no step for this template
        """
        pass

    @abstractmethod
    async def add_many(self, steps: list[LeadStep]) -> None:
        """
        Insert timeline steps.

        Raises:
            ConflictError: If a step already exists for a (lead, template) pair
        """
        pass

    @abstractmethod
    async def update(self, step: LeadStep) -> None:
        """
        Persist changes to an existing step.

        Args:
            step: Step to update
        """
        pass
