"""HTTP adapter response schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from app.application.dtos.timeline import TimelineEntry
from app.domain.entities.activity_entry import ActivityEntry
from app.domain.entities.lead import Lead
from app.domain.entities.lead_step import LeadStep
from app.domain.entities.step_template import StepTemplate
from app.domain.value_objects.remarks import remarks_type, serialize_remarks


class StepTemplateView(BaseModel):
    """Step template as returned by the API."""

    id: str
    name: str
    order_index: int
    allowed_roles: list[str]
    remarks_required: bool
    attachments_allowed: bool
    customer_upload: bool
    is_active: bool

    @classmethod
    def from_entity(cls, template: StepTemplate) -> "StepTemplateView":
        return cls(
            id=template.id,
            name=template.name,
            order_index=template.order_index,
            allowed_roles=sorted(role.value for role in template.allowed_roles),
            remarks_required=template.remarks_required,
            attachments_allowed=template.attachments_allowed,
            customer_upload=template.customer_upload,
            is_active=template.is_active,
        )


class LeadView(BaseModel):
    """Lead as returned by the API."""

    id: str
    customer_name: str
    phone: str
    email: Optional[str] = None
    address: str
    notes: Optional[str] = None
    status: str
    source: str
    created_by: str
    customer_account_id: Optional[str] = None
    installer_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, lead: Lead) -> "LeadView":
        return cls(
            id=lead.id,
            customer_name=lead.customer_name,
            phone=lead.phone,
            email=lead.email,
            address=lead.address,
            notes=lead.notes,
            status=lead.status.value,
            source=lead.source.value,
            created_by=lead.created_by,
            customer_account_id=lead.customer_account_id,
            installer_id=lead.installer_id,
            created_at=lead.created_at,
            updated_at=lead.updated_at,
        )


class LeadStepView(BaseModel):
    """Lead step as returned by the API."""

    id: str
    lead_id: str
    step_id: str
    status: str
    completed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    remarks: Optional[str] = None
    remarks_type: Optional[str] = None
    attachments: list[str]

    @classmethod
    def from_entity(cls, step: LeadStep) -> "LeadStepView":
        return cls(
            id=step.id,
            lead_id=step.lead_id,
            step_id=step.step_id,
            status=step.status.value,
            completed_by=step.completed_by,
            completed_at=step.completed_at,
            remarks=serialize_remarks(step.remarks),
            remarks_type=remarks_type(step.remarks),
            attachments=list(step.attachments),
        )


class TimelineEntryView(BaseModel):
    """One row of a lead's timeline."""

    step: LeadStepView
    template: StepTemplateView

    @classmethod
    def from_entry(cls, entry: TimelineEntry) -> "TimelineEntryView":
        return cls(
            step=LeadStepView.from_entity(entry.step),
            template=StepTemplateView.from_entity(entry.template),
        )


class ActivityEntryView(BaseModel):
    """Activity log entry as returned by the API."""

    id: str
    user_id: str
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    lead_id: Optional[str] = None
    old_value: Optional[dict[str, Any]] = None
    new_value: Optional[dict[str, Any]] = None
    timestamp: datetime

    @classmethod
    def from_entity(cls, entry: ActivityEntry) -> "ActivityEntryView":
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            action=entry.action,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            lead_id=entry.lead_id,
            old_value=entry.old_value,
            new_value=entry.new_value,
            timestamp=entry.timestamp,
        )


class MoveStepRequest(BaseModel):
    """Place a step right after another one, or first."""

    after_id: Optional[str] = None


class ErrorBody(BaseModel):
    """Error payload."""

    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Error response envelope."""

    error: ErrorBody

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "remarks_required",
                    "message": "Remarks are required to complete this step",
                }
            }
        }
    )
