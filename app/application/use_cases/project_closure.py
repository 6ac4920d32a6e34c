"""Project closure use case."""

from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.base import TimelineUseCase, load_lead, parse_role
from app.domain.entities.lead import Lead, LeadStatus
from app.domain.errors import InvalidTransitionError, PermissionDeniedError
from app.domain.services.permissions import can_close_project, can_reopen_project
from app.domain.value_objects.user_role import UserRole


class ProjectClosure(TimelineUseCase):
    """Close and reopen lead projects."""

    component = "closure"

    async def _set_status(
        self, lead_id: str, user_id: str, action: str, target: LeadStatus, closing: bool
    ) -> tuple[Lead, str]:
        async def work(uow: UnitOfWork) -> tuple[Lead, str]:
            lead = await load_lead(uow, lead_id, for_update=True)
            if lead.is_closed == closing:
                raise InvalidTransitionError("lead", lead.status.value, target.value)
            status_before = lead.status.value
            lead.status = target
            lead.touch()
            await uow.leads.update(lead)
            await uow.activity_log.record(
                user_id,
                action,
                "lead",
                entity_id=lead.id,
                lead_id=lead.id,
                old_value={"status": status_before},
                new_value={"status": target.value},
            )
            return lead, status_before

        return await self._transaction(work)

    async def close(self, lead_id: str, user_id: str, role: "UserRole | str") -> Lead:
        """
        Close a lead's project.

        Args:
            lead_id: Lead identifier
            user_id: Acting user
            role: Acting role (office or admin)

        Returns:
            The closed lead

        Raises:
            PermissionDeniedError: If the role may not close projects
            NotFoundError: If the lead does not exist
            InvalidTransitionError: If the lead is already closed
        """
        if not can_close_project(parse_role(role, "close_project")):
            raise PermissionDeniedError(str(role), "close_project")
        lead, status_before = await self._set_status(
            lead_id, user_id, "close_project", LeadStatus.CLOSED, closing=True
        )
        self._log(
            "lead_status_change",
            lead_id=lead_id,
            status_before=status_before,
            status_after=lead.status.value,
        )
        return lead

    async def reopen(self, lead_id: str, user_id: str, role: "UserRole | str") -> Lead:
        """
        Reopen a closed project; the lead goes back to ongoing.

        Raises:
            PermissionDeniedError: If the caller is not an admin
            NotFoundError: If the lead does not exist
            InvalidTransitionError: If the lead is not closed
        """
        if not can_reopen_project(parse_role(role, "reopen_project")):
            raise PermissionDeniedError(str(role), "reopen_project")
        lead, status_before = await self._set_status(
            lead_id, user_id, "reopen_project", LeadStatus.ONGOING, closing=False
        )
        self._log(
            "lead_status_change",
            lead_id=lead_id,
            status_before=status_before,
            status_after=lead.status.value,
        )
        return lead
