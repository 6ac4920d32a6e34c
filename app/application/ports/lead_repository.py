"""Lead repository port."""

from abc import ABC, abstractmethod
from typing import Optional

from app.domain.entities.lead import Lead


class LeadRepository(ABC):
    """Port interface for lead repository."""

    @abstractmethod
    async def get(self, lead_id: str, for_update: bool = False) -> Optional[Lead]:
        """
        Get a lead by id.

        Args:
            lead_id: Lead identifier
            for_update: Lock the row for the rest of the transaction

        Returns:
            Lead, or None if not found
        """
        pass

    @abstractmethod
    async def add(self, lead: Lead) -> None:
        """
        Insert a lead.

        Args:
            lead: Lead to insert
        """
        pass

    @abstractmethod
    async def update(self, lead: Lead) -> None:
        """
        Persist changes to an existing lead.

        Args:
            lead: Lead to update
        """
        pass

    @abstractmethod
    async def find_unlinked_by_phone(self, phone: str) -> Optional[Lead]:
        """
        Find the newest lead with this phone and no linked customer account.

        The returned row is locked for the rest of the transaction.

        Args:
            phone: Normalized phone number

        Returns:
            Lead, or None if no unlinked lead matches
        """
        pass

    @abstractmethod
    async def find_linked_by_phone(self, phone: str, customer_id: str) -> Optional[Lead]:
        """
        Find a lead with this phone already linked to the customer account.

        Args:
            phone: Normalized phone number
            customer_id: Customer account identifier

        Returns:
            Lead, or None if the customer has no lead with this phone
        """
        pass
