"""Admin timeline override use case."""

from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.base import (
    TimelineUseCase,
    load_lead,
    load_lead_step,
    load_template,
    parse_role,
)
from app.domain.entities.lead_step import LeadStep, LeadStepStatus
from app.domain.errors import InvalidTransitionError, LeadClosedError, PermissionDeniedError
from app.domain.services.permissions import can_act
from app.domain.value_objects.remarks import PlainNote, coerce_remarks, remarks_are_blank
from app.domain.value_objects.user_role import UserRole

MOVE_BACKWARD_NOTE = "Admin override - moved timeline backward"


class AdminTimelineOverride(TimelineUseCase):
    """Manual regressions of a lead's timeline."""

    component = "override"

    async def reopen_step(
        self, lead_id: str, step_id: str, user_id: str, role: "UserRole | str"
    ) -> LeadStep:
        """
        Put a completed step back to pending.

        Roles allowed on the step may reopen it while the lead is open; admins
        may always reopen. Completion data is cleared and later steps are left
        as they are.

        Args:
            lead_id: Lead identifier
            step_id: Step template identifier
            user_id: Acting user
            role: Acting role

        Returns:
            The reopened lead step

        Raises:
            LeadClosedError: If the lead is closed and the caller is not an admin
            InvalidTransitionError: If the step is not completed
            PermissionDeniedError: If the role may not act on the step
        """
        user_role = parse_role(role, "reopen_step")
        action = "admin_override_reopen" if user_role == UserRole.ADMIN else "reopen_step"

        async def work(uow: UnitOfWork) -> LeadStep:
            lead = await load_lead(uow, lead_id, for_update=True)
            if lead.is_closed and user_role != UserRole.ADMIN:
                raise LeadClosedError(lead_id)
            template = await load_template(uow, step_id)
            step = await load_lead_step(uow, lead_id, step_id, for_update=True)
            if not step.is_completed:
                raise InvalidTransitionError("lead step", step.status.value, "pending")
            if not can_act(user_role, template):
                raise PermissionDeniedError(user_role.value, "reopen_step")

            old_value = step.snapshot()
            step.reset(LeadStepStatus.PENDING)
            await uow.lead_steps.update(step)
            await uow.activity_log.record(
                user_id,
                action,
                "lead_step",
                entity_id=step.id,
                lead_id=lead_id,
                old_value=old_value,
                new_value=step.snapshot(),
            )
            return step

        step = await self._transaction(work)
        self._log(
            "step_reopened",
            lead_id=lead_id,
            step_id=step_id,
            status_before="completed",
            status_after=step.status.value,
            action=action,
        )
        return step

    async def move_backward(
        self,
        lead_id: str,
        step_id: str,
        user_id: str,
        role: "UserRole | str",
        remarks: "str | None" = None,
    ) -> list[LeadStep]:
        """
        Rewind a timeline to an earlier step.

        The target step becomes pending and every later step in the current
        template order becomes upcoming. Each changed step gets its own
        activity entry.

        Args:
            lead_id: Lead identifier
            step_id: Step template to rewind to
            user_id: Acting admin
            role: Acting role (admin only)
            remarks: Note kept on the target step; MOVE_BACKWARD_NOTE when blank

        Returns:
            Lead steps that changed, in template order

        Raises:
            PermissionDeniedError: If the caller is not an admin
            NotFoundError: If the lead, template or lead step does not exist
        """
        if parse_role(role, "move_timeline_backward") != UserRole.ADMIN:
            raise PermissionDeniedError(str(role), "move_timeline_backward")
        note = coerce_remarks(remarks)
        if remarks_are_blank(note):
            note = PlainNote(MOVE_BACKWARD_NOTE)

        async def work(uow: UnitOfWork) -> list[LeadStep]:
            await load_lead(uow, lead_id, for_update=True)
            target = await load_template(uow, step_id)
            await load_lead_step(uow, lead_id, step_id, for_update=True)

            steps = {s.step_id: s for s in await uow.lead_steps.list_for_lead(lead_id)}
            templates = sorted(await uow.templates.list(), key=lambda t: t.order_index)
            changed = []
            for template in templates:
                step = steps.get(template.id)
                if step is None:
                    continue
                if template.id == target.id:
                    status, kept_remarks = LeadStepStatus.PENDING, note
                elif template.order_index > target.order_index:
                    status, kept_remarks = LeadStepStatus.UPCOMING, None
                else:
                    continue
                if step.status == status and step.remarks == kept_remarks:
                    continue
                old_value = step.snapshot()
                step.reset(status, remarks=kept_remarks)
                await uow.lead_steps.update(step)
                await uow.activity_log.record(
                    user_id,
                    "admin_override_reopen",
                    "lead_step",
                    entity_id=step.id,
                    lead_id=lead_id,
                    old_value=old_value,
                    new_value=step.snapshot(),
                )
                changed.append(step)
            return changed

        changed = await self._transaction(work)
        self._log(
            "timeline_moved_backward",
            lead_id=lead_id,
            step_id=step_id,
            changed=len(changed),
        )
        return changed
