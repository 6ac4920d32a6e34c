"""Unit tests for timeline queries."""

import pytest

from app.adapters.outbound.timeline_store import InMemoryTimelineStore
from app.application.dtos.lead import LeadCreate
from app.application.dtos.step_template import StepTemplateCreate
from app.application.use_cases.create_lead import CreateLead
from app.application.use_cases.step_template_registry import StepTemplateRegistry
from app.application.use_cases.timeline_queries import TimelineQueries
from app.domain.errors import NotFoundError


@pytest.fixture
def store():
    """Create an empty in-memory timeline store."""
    return InMemoryTimelineStore(timeout_seconds=1.0)


@pytest.mark.asyncio
async def test_timeline_keeps_steps_of_deactivated_templates(store):
    """Test that deactivating a template does not hide existing lead steps."""
    registry = StepTemplateRegistry(store.unit_of_work)
    a = await registry.create_template(
        "admin-1", "admin", StepTemplateCreate(name="A", allowed_roles=["office"])
    )
    await registry.create_template(
        "admin-1", "admin", StepTemplateCreate(name="B", allowed_roles=["office"])
    )
    lead = await CreateLead(store.unit_of_work).execute(
        "agent-1", "agent", LeadCreate(customer_name="Om", phone="12345")
    )

    await registry.deactivate_template("admin-1", "admin", a.id)
    timeline = await TimelineQueries(store.unit_of_work).get_timeline(lead.id)

    assert [(e.template.name, e.template.is_active) for e in timeline] == [
        ("A", False),
        ("B", True),
    ]


@pytest.mark.asyncio
async def test_queries_require_existing_lead(store):
    """Test not-found handling for lead queries."""
    queries = TimelineQueries(store.unit_of_work)

    with pytest.raises(NotFoundError):
        await queries.get_lead("missing")
    with pytest.raises(NotFoundError):
        await queries.get_timeline("missing")
    with pytest.raises(NotFoundError):
        await queries.list_activity("missing")
