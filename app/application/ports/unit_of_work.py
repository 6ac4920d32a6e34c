"""Unit of work port."""

from abc import ABC, abstractmethod
from typing import Callable

from app.application.ports.activity_log import ActivityLog
from app.application.ports.lead_repository import LeadRepository
from app.application.ports.lead_step_repository import LeadStepRepository
from app.application.ports.step_template_repository import StepTemplateRepository


class UnitOfWork(ABC):
    """Port interface for one serializable transaction against the timeline store.

    Use as an async context manager. Changes are discarded unless ``commit``
    is awaited before the block exits.
    """

    templates: StepTemplateRepository
    leads: LeadRepository
    lead_steps: LeadStepRepository
    activity_log: ActivityLog

    async def __aenter__(self) -> "UnitOfWork":
        await self.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None or not self.committed:
                await self.rollback()
        finally:
            await self.close()

    @property
    @abstractmethod
    def committed(self) -> bool:
        """Whether commit has succeeded."""
        pass

    @abstractmethod
    async def begin(self) -> None:
        """
        Start the transaction.

        Raises:
            TransactionTimeoutError: If the store cannot start it in time
        """
        pass

    @abstractmethod
    async def commit(self) -> None:
        """
        Commit all changes.

        Raises:
            ConflictError: If the store detected a concurrent write
        """
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Discard all changes."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release resources held by the transaction."""
        pass


UnitOfWorkFactory = Callable[[], UnitOfWork]
