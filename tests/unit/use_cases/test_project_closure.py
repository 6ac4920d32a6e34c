"""Unit tests for project closure."""

import pytest

from app.adapters.outbound.timeline_store import InMemoryTimelineStore
from app.application.dtos.lead import LeadCreate
from app.application.use_cases.create_lead import CreateLead
from app.application.use_cases.project_closure import ProjectClosure
from app.application.use_cases.timeline_queries import TimelineQueries
from app.domain.entities.lead import LeadStatus
from app.domain.errors import InvalidTransitionError, NotFoundError, PermissionDeniedError


@pytest.fixture
def store():
    """Create an empty in-memory timeline store."""
    return InMemoryTimelineStore(timeout_seconds=1.0)


async def _new_lead(store):
    return await CreateLead(store.unit_of_work).execute(
        "office-1", "office", LeadCreate(customer_name="Meera", phone="+91 90000 11111")
    )


@pytest.mark.asyncio
async def test_office_closes_and_admin_reopens(store):
    """Test the close/reopen cycle and its audit trail."""
    lead = await _new_lead(store)
    closure = ProjectClosure(store.unit_of_work)

    closed = await closure.close(lead.id, "office-1", "office")
    assert closed.status == LeadStatus.CLOSED

    reopened = await closure.reopen(lead.id, "admin-1", "admin")
    assert reopened.status == LeadStatus.ONGOING

    activity = await TimelineQueries(store.unit_of_work).list_activity(lead.id)
    assert [e.action for e in activity[:2]] == ["reopen_project", "close_project"]
    assert activity[1].old_value == {"status": "ongoing"}
    assert activity[1].new_value == {"status": "closed"}


@pytest.mark.asyncio
async def test_close_permissions(store):
    """Test that agents cannot close and office cannot reopen."""
    lead = await _new_lead(store)
    closure = ProjectClosure(store.unit_of_work)

    with pytest.raises(PermissionDeniedError):
        await closure.close(lead.id, "agent-1", "agent")

    await closure.close(lead.id, "office-1", "office")
    with pytest.raises(PermissionDeniedError):
        await closure.reopen(lead.id, "office-1", "office")


@pytest.mark.asyncio
async def test_double_close_and_reopen_are_invalid(store):
    """Test that closing a closed lead or reopening an open one fails."""
    lead = await _new_lead(store)
    closure = ProjectClosure(store.unit_of_work)

    with pytest.raises(InvalidTransitionError):
        await closure.reopen(lead.id, "admin-1", "admin")

    await closure.close(lead.id, "office-1", "office")
    with pytest.raises(InvalidTransitionError):
        await closure.close(lead.id, "admin-1", "admin")


@pytest.mark.asyncio
async def test_close_unknown_lead(store):
    """Test closing a lead that does not exist."""
    with pytest.raises(NotFoundError):
        await ProjectClosure(store.unit_of_work).close("missing", "office-1", "office")
