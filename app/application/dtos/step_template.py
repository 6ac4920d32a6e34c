"""Step template DTOs."""

from typing import Optional

from pydantic import ConfigDict, Field

from app.application.dtos.base import DTO


class StepTemplateCreate(DTO):
    """Configuration for a new step template."""

    name: str = Field(min_length=1)
    allowed_roles: list[str]
    order_index: Optional[int] = None  # Appended after the last step when omitted
    remarks_required: bool = False
    attachments_allowed: bool = False
    customer_upload: bool = False

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "Payment received",
                "allowed_roles": ["office"],
                "remarks_required": True,
                "attachments_allowed": True,
                "customer_upload": False,
            }
        },
    )


class StepTemplatePatch(DTO):
    """Partial update of a step template; only fields that are set are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    allowed_roles: Optional[list[str]] = None
    order_index: Optional[int] = None
    remarks_required: Optional[bool] = None
    attachments_allowed: Optional[bool] = None
    customer_upload: Optional[bool] = None


class StepReorder(DTO):
    """Full ordering of the active step templates."""

    step_ids: list[str]
