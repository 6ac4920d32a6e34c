"""Initialize lead timeline use case."""

from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.base import TimelineUseCase, load_lead
from app.domain.entities.lead_step import LeadStep
from app.domain.errors import AlreadyInitializedError
from app.domain.services.progression import build_timeline


async def initialize_timeline(uow: UnitOfWork, lead_id: str) -> list[LeadStep]:
    """
    Materialize a lead's timeline inside an open transaction.

    Args:
        uow: Open unit of work
        lead_id: Lead that already exists in this transaction

    Returns:
        Created lead steps in template order

    Raises:
        AlreadyInitializedError: If the lead already has steps
        DuplicateOrderIndexError: If the active templates share an order index
    """
    if await uow.lead_steps.list_for_lead(lead_id):
        raise AlreadyInitializedError(lead_id)
    steps = build_timeline(lead_id, await uow.templates.list())
    await uow.lead_steps.add_many(steps)
    return steps


class InitializeLeadTimeline(TimelineUseCase):
    """Create one step per active template for a lead."""

    component = "initialization"

    async def execute(self, lead_id: str) -> list[LeadStep]:
        """
        Initialize the lead's timeline.

        Two concurrent calls for the same lead cannot both succeed: the second
        one conflicts on the (lead, step) uniqueness, is retried and then finds
        the timeline already present.

        Args:
            lead_id: Lead identifier

        Returns:
            Created lead steps in template order

        Raises:
            NotFoundError: If the lead does not exist
            AlreadyInitializedError: If the lead already has steps
        """

        async def work(uow: UnitOfWork) -> list[LeadStep]:
            await load_lead(uow, lead_id, for_update=True)
            return await initialize_timeline(uow, lead_id)

        steps = await self._transaction(work)
        self._log("timeline_initialized", lead_id=lead_id, steps=len(steps))
        return steps
