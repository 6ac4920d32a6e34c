"""Timeline materialization and progression rules."""

from collections.abc import Iterable, Mapping
from typing import Optional

from app.domain.entities.lead_step import LeadStep, LeadStepStatus
from app.domain.entities.step_template import StepTemplate
from app.domain.errors import DuplicateOrderIndexError


def order_templates(templates: Iterable[StepTemplate]) -> list[StepTemplate]:
    """
    Sort active templates by order index.

    Raises:
        DuplicateOrderIndexError: If two active templates share an order index
    """
    ordered = sorted((t for t in templates if t.is_active), key=lambda t: t.order_index)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.order_index == current.order_index:
            raise DuplicateOrderIndexError(current.order_index, existing_id=previous.id)
    return ordered


def build_timeline(lead_id: str, templates: Iterable[StepTemplate]) -> list[LeadStep]:
    """
    Create the initial steps of a lead's timeline.

    The lowest-order step starts pending, every other step upcoming.

    Args:
        lead_id: Lead identifier
        templates: Step templates (inactive ones are ignored)

    Returns:
        Lead steps in template order
    """
    steps = []
    for position, template in enumerate(order_templates(templates)):
        status = LeadStepStatus.PENDING if position == 0 else LeadStepStatus.UPCOMING
        steps.append(LeadStep(lead_id=lead_id, step_id=template.id, status=status))
    return steps


def next_eligible_step(
    completed_order_index: int,
    templates: Iterable[StepTemplate],
    steps_by_template: Mapping[str, LeadStep],
) -> Optional[LeadStep]:
    """
    Find the step to enable after a completion.

    Only the immediate successor in the current template order is considered,
    and only when it is still upcoming. A successor that is already pending or
    completed stops progression; later steps are never enabled out of turn.
    Templates without a step in this lead's timeline are not part of it.

    Args:
        completed_order_index: Order index of the step that was just completed
        templates: Current step templates
        steps_by_template: The lead's steps keyed by template id

    Returns:
        Step to move to pending, or None
    """
    for template in order_templates(templates):
        if template.order_index <= completed_order_index:
            continue
        step = steps_by_template.get(template.id)
        if step is None:
            continue
        if step.status == LeadStepStatus.UPCOMING:
            return step
        return None
    return None
