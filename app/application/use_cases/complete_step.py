"""Complete step use case."""

from typing import Optional, Union

from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.base import (
    TimelineUseCase,
    load_lead,
    load_lead_step,
    load_template,
    parse_role,
)
from app.application.use_cases.progress_timeline import advance_timeline
from app.domain.entities.lead_step import LeadStep
from app.domain.errors import (
    AlreadyCompletedError,
    AttachmentsNotAllowedError,
    LeadClosedError,
    PermissionDeniedError,
    RemarksRequiredError,
)
from app.domain.services.permissions import can_act
from app.domain.value_objects.remarks import Remarks, coerce_remarks, remarks_are_blank
from app.domain.value_objects.user_role import UserRole


class CompleteStep(TimelineUseCase):
    """Mark a lead step completed and advance the timeline."""

    component = "completion"

    async def execute(
        self,
        lead_id: str,
        step_id: str,
        user_id: str,
        role: "UserRole | str",
        remarks: Union[str, dict, Remarks, None] = None,
        attachments: Optional[list[str]] = None,
    ) -> LeadStep:
        """
        Complete a step of a lead's timeline.

        Checks run in a fixed order so the first failing rule decides the
        error: closed lead, already completed, role, remarks, attachments.
        Completion, the activity entry and the progression of the next step
        commit in one transaction.

        Args:
            lead_id: Lead identifier
            step_id: Step template identifier
            user_id: Acting user
            role: Acting role
            remarks: Free text, a JSON object or a structured record
            attachments: Attachment references; existing ones are kept when None

        Returns:
            The completed lead step

        Raises:
            NotFoundError: If the lead, template or lead step does not exist
            LeadClosedError: If the lead is closed and the caller is not an admin
            AlreadyCompletedError: If the step is already completed
            PermissionDeniedError: If the role may not act on the step
            RemarksRequiredError: If the template requires remarks and none were given
            AttachmentsNotAllowedError: If attachments were given for a step without them
        """
        user_role = parse_role(role, "complete_step")
        parsed_remarks = coerce_remarks(remarks)
        if remarks_are_blank(parsed_remarks):
            parsed_remarks = None

        async def work(uow: UnitOfWork) -> tuple[LeadStep, Optional[LeadStep], str, bool]:
            lead = await load_lead(uow, lead_id, for_update=True)
            if lead.is_closed and user_role != UserRole.ADMIN:
                raise LeadClosedError(lead_id)

            template = await load_template(uow, step_id)
            step = await load_lead_step(uow, lead_id, step_id, for_update=True)
            if step.is_completed:
                raise AlreadyCompletedError(step.id)

            if not can_act(user_role, template):
                raise PermissionDeniedError(user_role.value, "complete_step")
            if template.remarks_required and parsed_remarks is None:
                raise RemarksRequiredError(step_id)
            if attachments and not template.attachments_allowed:
                raise AttachmentsNotAllowedError(step_id)

            override = user_role == UserRole.ADMIN and (
                lead.is_closed or user_role not in template.allowed_roles
            )
            old_value = step.snapshot()
            step.complete(
                user_id,
                parsed_remarks,
                attachments if template.attachments_allowed else None,
            )
            await uow.lead_steps.update(step)

            new_value = step.snapshot()
            if override:
                new_value["admin_override"] = True
            await uow.activity_log.record(
                user_id,
                "complete_step",
                "lead_step",
                entity_id=step.id,
                lead_id=lead_id,
                old_value=old_value,
                new_value=new_value,
            )

            enabled = await advance_timeline(uow, lead_id, template.order_index)
            return step, enabled, old_value["status"], override

        step, enabled, status_before, override = await self._transaction(work)
        self._log(
            "step_completed",
            lead_id=lead_id,
            step_id=step_id,
            status_before=status_before,
            status_after=step.status.value,
            admin_override=override or None,
        )
        if enabled is not None:
            self._logger(
                "progression",
                "step_enabled",
                lead_id=lead_id,
                step_id=enabled.step_id,
                status_before="upcoming",
                status_after=enabled.status.value,
            )
        return step
