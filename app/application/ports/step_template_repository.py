"""Step template repository port."""

from abc import ABC, abstractmethod
from typing import Optional

from app.domain.entities.step_template import StepTemplate


class StepTemplateRepository(ABC):
    """Port interface for step template storage."""

    @abstractmethod
    async def get(self, template_id: str) -> Optional[StepTemplate]:
        """
        Get a template by id.

        Args:
            template_id: Template identifier

        Returns:
            StepTemplate, or None if not found
        """
        pass

    @abstractmethod
    async def list(self, include_inactive: bool = False) -> list[StepTemplate]:
        """
        List templates ordered by order_index.

        Args:
            include_inactive: Include deactivated templates

        Returns:
            Templates in order
        """
        pass

    @abstractmethod
    async def add(self, template: StepTemplate) -> None:
        """
        Insert a template.

        Raises:
            DuplicateOrderIndexError: If an active template already uses the order index
        """
        pass

    @abstractmethod
    async def update(self, template: StepTemplate) -> None:
        """
        Persist changes to an existing template.

        Raises:
            DuplicateOrderIndexError: If an active template already uses the order index
        """
        pass
