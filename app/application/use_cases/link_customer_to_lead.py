"""Link customer account to lead use case."""

from typing import Optional

from app.application.dtos.lead import CustomerLinkRequest, CustomerLinkResult
from app.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from app.application.use_cases.base import LoggerFunc, TimelineUseCase, parse_role
from app.application.use_cases.initialize_lead_timeline import initialize_timeline
from app.domain.entities.lead import (
    AUTO_CREATED_NOTE,
    Lead,
    LeadSource,
    LeadStatus,
    normalize_phone,
)
from app.domain.errors import PermissionDeniedError, ValidationFailedError
from app.domain.value_objects.user_role import UserRole


class LinkCustomerToLead(TimelineUseCase):
    """Attach a self-registering customer to an existing lead or create one."""

    component = "linker"

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        logger: Optional[LoggerFunc] = None,
        retries: int = 1,
        default_address: str = "Not provided",
    ) -> None:
        super().__init__(uow_factory, logger=logger, retries=retries)
        self._default_address = default_address

    async def execute(
        self, user_id: str, role: "UserRole | str", request: CustomerLinkRequest
    ) -> CustomerLinkResult:
        """
        Link the customer to the newest unlinked lead with the same phone.

        When no such lead exists a new inquiry lead is created with its
        timeline, in the same transaction. Repeating the call for a customer
        that is already linked returns the existing link.

        Args:
            user_id: Acting user; must be the customer being linked
            role: Acting role; only customer accounts can be linked
            request: Customer account and contact details

        Returns:
            Link result with action "linked" or "created"

        Raises:
            PermissionDeniedError: If the caller is not the customer being linked
            ValidationFailedError: If the phone has no digits
        """
        user_role = parse_role(role, "link_customer")
        if user_role != UserRole.CUSTOMER or user_id != request.customer_id:
            raise PermissionDeniedError(user_role.value, "link_customer")

        phone = normalize_phone(request.phone)
        if not any(ch.isdigit() for ch in phone):
            raise ValidationFailedError("phone must contain digits", phone=request.phone)

        async def work(uow: UnitOfWork) -> CustomerLinkResult:
            linked = await uow.leads.find_linked_by_phone(phone, request.customer_id)
            if linked is not None:
                return CustomerLinkResult(
                    action="linked", lead_id=linked.id, customer_id=request.customer_id
                )

            lead = await uow.leads.find_unlinked_by_phone(phone)
            if lead is not None:
                lead.customer_account_id = request.customer_id
                lead.touch()
                await uow.leads.update(lead)
                await uow.activity_log.record(
                    request.customer_id,
                    "link_customer",
                    "lead",
                    entity_id=lead.id,
                    lead_id=lead.id,
                    old_value={"customer_account_id": None},
                    new_value={"customer_account_id": request.customer_id},
                )
                return CustomerLinkResult(
                    action="linked", lead_id=lead.id, customer_id=request.customer_id
                )

            lead = Lead(
                customer_name=request.name.strip(),
                phone=phone,
                email=request.email,
                address=self._default_address,
                created_by=request.customer_id,
                source=LeadSource.SELF,
                status=LeadStatus.INQUIRY,
                customer_account_id=request.customer_id,
                notes=AUTO_CREATED_NOTE,
            )
            await uow.leads.add(lead)
            steps = await initialize_timeline(uow, lead.id)
            await uow.activity_log.record(
                request.customer_id,
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
            return CustomerLinkResult(
                action="created", lead_id=lead.id, customer_id=request.customer_id
            )

        result = await self._transaction(work)
        self._log(
            "customer_linked",
            action=result.action,
            lead_id=result.lead_id,
            customer_id=result.customer_id,
        )
        return result
