"""Lead intake use case."""

from app.application.dtos.lead import LeadCreate
from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.base import TimelineUseCase, parse_role
from app.application.use_cases.initialize_lead_timeline import initialize_timeline
from app.domain.entities.lead import Lead, LeadSource, normalize_phone
from app.domain.errors import PermissionDeniedError, ValidationFailedError
from app.domain.value_objects.user_role import INTAKE_ROLES, UserRole


def _default_source(role: UserRole) -> LeadSource:
    return LeadSource.AGENT if role == UserRole.AGENT else LeadSource.OFFICE


class CreateLead(TimelineUseCase):
    """Register a lead and initialize its timeline in one transaction."""

    component = "intake"

    async def execute(self, user_id: str, role: "UserRole | str", request: LeadCreate) -> Lead:
        """
        Create a lead for an agent or office user.

        Args:
            user_id: Acting user
            role: Acting role (agent, office or admin)
            request: Lead details

        Returns:
            Created lead

        Raises:
            PermissionDeniedError: If the role may not register leads
            ValidationFailedError: If the phone or source is invalid
        """
        user_role = parse_role(role, "create_lead")
        if user_role not in INTAKE_ROLES:
            raise PermissionDeniedError(user_role.value, "create_lead")

        phone = normalize_phone(request.phone)
        if not any(ch.isdigit() for ch in phone):
            raise ValidationFailedError("phone must contain digits", phone=request.phone)
        try:
            source = LeadSource(request.source) if request.source else _default_source(user_role)
        except ValueError:
            raise ValidationFailedError(f"Unknown lead source: {request.source}") from None

        async def work(uow: UnitOfWork) -> Lead:
            lead = Lead(
                customer_name=request.customer_name.strip(),
                phone=phone,
                address=request.address,
                email=request.email,
                notes=request.notes,
                created_by=user_id,
                source=source,
                installer_id=request.installer_id,
            )
            await uow.leads.add(lead)
            steps = await initialize_timeline(uow, lead.id)
            await uow.activity_log.record(
                user_id,
                "create_lead",
                "lead",
                entity_id=lead.id,
                lead_id=lead.id,
                new_value={
                    "status": lead.status.value,
                    "source": lead.source.value,
                    "steps": len(steps),
                },
            )
            return lead

        lead = await self._transaction(work)
        self._log("lead_created", lead_id=lead.id, source=lead.source.value)
        return lead
