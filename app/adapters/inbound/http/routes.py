"""HTTP routes."""

from dataclasses import dataclass

from fastapi import APIRouter, Depends, Header, status

from app.adapters.inbound.http.schemas import (
    ActivityEntryView,
    LeadStepView,
    LeadView,
    MoveStepRequest,
    StepTemplateView,
    TimelineEntryView,
)
from app.application.dtos.lead import CustomerLinkRequest, CustomerLinkResult, LeadCreate
from app.application.dtos.step_template import StepReorder, StepTemplateCreate, StepTemplatePatch
from app.application.dtos.timeline import CompleteStepRequest, MoveBackwardRequest
from app.infrastructure.logging.logger import log_event
from app.infrastructure.wiring.container import Container

router = APIRouter()

# Create container instance (wired with the configured timeline store)
_container = Container()


def get_container() -> Container:
    """Return the application container; overridden in tests."""
    return _container


@dataclass(frozen=True)
class Caller:
    """Identity forwarded by the upstream auth layer."""

    user_id: str
    role: str


def get_caller(
    x_user_id: str = Header(..., alias="X-User-Id"),
    x_user_role: str = Header(..., alias="X-User-Role"),
) -> Caller:
    return Caller(user_id=x_user_id, role=x_user_role.strip().lower())


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, str]:
    """
    Health check endpoint for liveness/readiness.

    Returns:
        Health status
    """
    return {"status": "ok"}


@router.get("/steps", response_model=list[StepTemplateView])
async def list_steps(
    include_inactive: bool = False,
    container: Container = Depends(get_container),
) -> list[StepTemplateView]:
    """List step templates in order."""
    templates = await container.registry.list_templates(include_inactive=include_inactive)
    return [StepTemplateView.from_entity(t) for t in templates]


@router.post("/steps", status_code=status.HTTP_201_CREATED, response_model=StepTemplateView)
async def create_step(
    request: StepTemplateCreate,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> StepTemplateView:
    """
    Create a step template (admin only).

    Args:
        request: Template configuration; appended last when order_index is omitted

    Returns:
        Created template
    """
    template = await container.registry.create_template(caller.user_id, caller.role, request)
    return StepTemplateView.from_entity(template)


@router.put("/steps/reorder", response_model=list[StepTemplateView])
async def reorder_steps(
    request: StepReorder,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> list[StepTemplateView]:
    """Renumber all active templates in the given order (admin only)."""
    templates = await container.registry.reorder_templates(
        caller.user_id, caller.role, request.step_ids
    )
    return [StepTemplateView.from_entity(t) for t in templates]


@router.patch("/steps/{step_id}", response_model=StepTemplateView)
async def update_step(
    step_id: str,
    request: StepTemplatePatch,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> StepTemplateView:
    """Update a step template (admin only)."""
    template = await container.registry.update_template(
        caller.user_id, caller.role, step_id, request
    )
    return StepTemplateView.from_entity(template)


@router.post("/steps/{step_id}/move", response_model=StepTemplateView)
async def move_step(
    step_id: str,
    request: MoveStepRequest,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> StepTemplateView:
    """Place a template right after another one, or first (admin only)."""
    template = await container.registry.move_after(
        caller.user_id, caller.role, step_id, after_id=request.after_id
    )
    return StepTemplateView.from_entity(template)


@router.delete("/steps/{step_id}", response_model=StepTemplateView)
async def deactivate_step(
    step_id: str,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> StepTemplateView:
    """Deactivate a step template; existing lead steps are kept (admin only)."""
    template = await container.registry.deactivate_template(caller.user_id, caller.role, step_id)
    return StepTemplateView.from_entity(template)


@router.post("/leads", status_code=status.HTTP_201_CREATED, response_model=LeadView)
async def create_lead(
    request: LeadCreate,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> LeadView:
    """Register a lead and initialize its timeline."""
    lead = await container.create_lead.execute(caller.user_id, caller.role, request)
    log_event("http", "lead_created", lead_id=lead.id, user_id=caller.user_id)
    return LeadView.from_entity(lead)


@router.get("/leads/{lead_id}", response_model=LeadView)
async def get_lead(lead_id: str, container: Container = Depends(get_container)) -> LeadView:
    """Get a lead."""
    return LeadView.from_entity(await container.queries.get_lead(lead_id))


@router.get("/leads/{lead_id}/steps", response_model=list[TimelineEntryView])
async def get_timeline(
    lead_id: str, container: Container = Depends(get_container)
) -> list[TimelineEntryView]:
    """Get a lead's timeline in step order."""
    entries = await container.queries.get_timeline(lead_id)
    return [TimelineEntryView.from_entry(entry) for entry in entries]


@router.post(
    "/leads/{lead_id}/steps/initialize",
    status_code=status.HTTP_201_CREATED,
    response_model=list[LeadStepView],
)
async def initialize_timeline(
    lead_id: str, container: Container = Depends(get_container)
) -> list[LeadStepView]:
    """Materialize a lead's timeline from the active templates."""
    steps = await container.initialize_timeline.execute(lead_id)
    return [LeadStepView.from_entity(step) for step in steps]


@router.post("/leads/{lead_id}/steps/{step_id}/complete", response_model=LeadStepView)
async def complete_step(
    lead_id: str,
    step_id: str,
    request: CompleteStepRequest,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> LeadStepView:
    """
    Complete a step of a lead's timeline.

    Args:
        lead_id: Lead identifier
        step_id: Step template identifier
        request: Remarks and attachment references

    Returns:
        The completed step
    """
    step = await container.complete_step.execute(
        lead_id,
        step_id,
        caller.user_id,
        caller.role,
        remarks=request.remarks,
        attachments=request.attachments,
    )
    return LeadStepView.from_entity(step)


@router.post("/leads/{lead_id}/steps/{step_id}/reopen", response_model=LeadStepView)
async def reopen_step(
    lead_id: str,
    step_id: str,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> LeadStepView:
    """Put a completed step back to pending."""
    step = await container.override.reopen_step(lead_id, step_id, caller.user_id, caller.role)
    return LeadStepView.from_entity(step)


@router.post("/leads/{lead_id}/admin/move-backward", response_model=list[LeadStepView])
async def move_timeline_backward(
    lead_id: str,
    request: MoveBackwardRequest,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> list[LeadStepView]:
    """Rewind a lead's timeline to a step (admin only)."""
    steps = await container.override.move_backward(
        lead_id, request.step_id, caller.user_id, caller.role, remarks=request.remarks
    )
    return [LeadStepView.from_entity(step) for step in steps]


@router.post("/leads/{lead_id}/close", response_model=LeadView)
async def close_project(
    lead_id: str,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> LeadView:
    """Close a lead's project (office or admin)."""
    lead = await container.closure.close(lead_id, caller.user_id, caller.role)
    return LeadView.from_entity(lead)


@router.post("/leads/{lead_id}/reopen", response_model=LeadView)
async def reopen_project(
    lead_id: str,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> LeadView:
    """Reopen a closed project (admin only)."""
    lead = await container.closure.reopen(lead_id, caller.user_id, caller.role)
    return LeadView.from_entity(lead)


@router.get("/leads/{lead_id}/activity", response_model=list[ActivityEntryView])
async def list_activity(
    lead_id: str, container: Container = Depends(get_container)
) -> list[ActivityEntryView]:
    """List a lead's activity entries, newest first."""
    entries = await container.queries.list_activity(lead_id)
    return [ActivityEntryView.from_entity(entry) for entry in entries]


@router.post("/customers/link", response_model=CustomerLinkResult)
async def link_customer(
    request: CustomerLinkRequest,
    caller: Caller = Depends(get_caller),
    container: Container = Depends(get_container),
) -> CustomerLinkResult:
    """Link the calling customer to a lead, creating one when needed."""
    return await container.linker.execute(caller.user_id, caller.role, request)
