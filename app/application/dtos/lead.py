"""Lead DTOs."""

from typing import Optional

from pydantic import Field, field_validator

from app.application.dtos.base import DTO


def _required_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("name must not be blank")
    return name


class LeadCreate(DTO):
    """Lead intake by an agent or the office team."""

    customer_name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str = "Not provided"
    email: Optional[str] = None
    notes: Optional[str] = None
    source: Optional[str] = None  # Derived from the caller role when omitted
    installer_id: Optional[str] = None

    @field_validator("customer_name")
    @classmethod
    def _strip_customer_name(cls, value: str) -> str:
        return _required_name(value)


class CustomerLinkRequest(DTO):
    """Self-registering customer to match against existing leads."""

    customer_id: str
    phone: str = Field(min_length=1)
    name: str = Field(min_length=1)
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return _required_name(value)


class CustomerLinkResult(DTO):
    """Outcome of linking a customer account to a lead."""

    action: str  # linked or created
    lead_id: str
    customer_id: str
