"""Read-only timeline queries."""

from app.application.dtos.timeline import TimelineEntry
from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.base import TimelineUseCase, load_lead
from app.domain.entities.activity_entry import ActivityEntry
from app.domain.entities.lead import Lead


class TimelineQueries(TimelineUseCase):
    """Queries over leads, their timelines and their activity."""

    component = "queries"

    async def get_lead(self, lead_id: str) -> Lead:
        async def work(uow: UnitOfWork) -> Lead:
            return await load_lead(uow, lead_id)

        return await self._transaction(work)

    async def get_timeline(self, lead_id: str) -> list[TimelineEntry]:
        """
        Get a lead's steps in template order.

        Steps of deactivated templates stay in the timeline.

        Args:
            lead_id: Lead identifier

        Returns:
            Timeline entries ordered by order index

        Raises:
            NotFoundError: If the lead does not exist
        """

        async def work(uow: UnitOfWork) -> list[TimelineEntry]:
            await load_lead(uow, lead_id)
            templates = {t.id: t for t in await uow.templates.list(include_inactive=True)}
            entries = [
                TimelineEntry(template=templates[step.step_id], step=step)
                for step in await uow.lead_steps.list_for_lead(lead_id)
                if step.step_id in templates
            ]
            return sorted(
                entries,
                key=lambda e: (e.template.order_index, not e.template.is_active),
            )

        return await self._transaction(work)

    async def list_activity(self, lead_id: str) -> list[ActivityEntry]:
        """List a lead's activity entries, newest first."""

        async def work(uow: UnitOfWork) -> list[ActivityEntry]:
            await load_lead(uow, lead_id)
            return await uow.activity_log.list_for_lead(lead_id)

        return await self._transaction(work)
