"""Timeline DTOs."""

from dataclasses import dataclass
from typing import Any, Optional, Union

from app.application.dtos.base import DTO
from app.domain.entities.lead_step import LeadStep
from app.domain.entities.step_template import StepTemplate


class CompleteStepRequest(DTO):
    """Completion payload for a timeline step."""

    remarks: Optional[Union[str, dict[str, Any]]] = None  # Text or a structured record
    attachments: Optional[list[str]] = None


class MoveBackwardRequest(DTO):
    """Admin request to rewind a timeline to a step."""

    step_id: str
    remarks: Optional[str] = None


@dataclass(frozen=True)
class TimelineEntry:
    """A lead step together with its template."""

    template: StepTemplate
    step: LeadStep
