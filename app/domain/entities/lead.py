"""Lead entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4


class LeadStatus(str, Enum):
    """Lead lifecycle status."""

    INQUIRY = "inquiry"
    ONGOING = "ongoing"
    INTERESTED = "interested"
    NOT_INTERESTED = "not_interested"
    CLOSED = "closed"
    WITHDRAWN = "withdrawn"

    def __str__(self) -> str:
        return self.value


class LeadSource(str, Enum):
    """Channel through which a lead entered the system."""

    AGENT = "agent"
    OFFICE = "office"
    CUSTOMER = "customer"
    SELF = "self"

    def __str__(self) -> str:
        return self.value


AUTO_CREATED_NOTE = "Auto-created from customer signup"


@dataclass
class Lead:
    """Customer lead tracked through the installation workflow."""

    customer_name: str
    phone: str
    created_by: str
    source: LeadSource
    address: str = "Not provided"
    email: Optional[str] = None
    notes: Optional[str] = None
    status: LeadStatus = LeadStatus.ONGOING
    customer_account_id: Optional[str] = None
    installer_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_closed(self) -> bool:
        return self.status == LeadStatus.CLOSED

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now(timezone.utc)


def normalize_phone(phone: str) -> str:
    """
    Normalize a phone number for matching.

    Strips whitespace, dashes, dots and parentheses; keeps a leading '+'.

    Args:
        phone: Phone number as typed by the user

    Returns:
        Normalized phone number
    """
    return "".join(ch for ch in phone.strip() if ch.isdigit() or ch == "+")
