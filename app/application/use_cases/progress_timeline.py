"""Timeline progression after a step completion."""

from typing import Optional

from app.application.ports.unit_of_work import UnitOfWork
from app.domain.entities.lead_step import LeadStep
from app.domain.services.progression import next_eligible_step


async def advance_timeline(
    uow: UnitOfWork, lead_id: str, completed_order_index: int
) -> Optional[LeadStep]:
    """
    Enable the step that follows a completed one.

    Runs in the completing transaction so completion and progression commit
    together. Only the immediate successor in the current template order is
    considered; nothing cascades past it.

    Args:
        uow: Open unit of work
        lead_id: Lead whose step was completed
        completed_order_index: Order index of the completed step's template

    Returns:
        The step moved to pending, or None if nothing changed
    """
    templates = await uow.templates.list()
    steps = {step.step_id: step for step in await uow.lead_steps.list_for_lead(lead_id)}
    candidate = next_eligible_step(completed_order_index, templates, steps)
    if candidate is None or not candidate.enable():
        return None
    await uow.lead_steps.update(candidate)
    return candidate
