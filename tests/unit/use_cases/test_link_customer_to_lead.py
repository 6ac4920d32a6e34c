"""Unit tests for linking customer accounts to leads."""

import pytest
from pydantic import ValidationError

from app.adapters.outbound.timeline_store import InMemoryTimelineStore
from app.application.dtos.lead import CustomerLinkRequest, LeadCreate
from app.application.dtos.step_template import StepTemplateCreate
from app.application.use_cases.create_lead import CreateLead
from app.application.use_cases.link_customer_to_lead import LinkCustomerToLead
from app.application.use_cases.step_template_registry import StepTemplateRegistry
from app.application.use_cases.timeline_queries import TimelineQueries
from app.domain.entities.lead import AUTO_CREATED_NOTE, LeadSource, LeadStatus
from app.domain.entities.lead_step import LeadStepStatus
from app.domain.errors import PermissionDeniedError, ValidationFailedError


@pytest.fixture
def store():
    """Create an empty in-memory timeline store."""
    return InMemoryTimelineStore(timeout_seconds=1.0)


def _request(customer_id="cust-1", phone="98765-43210"):
    return CustomerLinkRequest(customer_id=customer_id, phone=phone, name="Kiran")


async def _link(linker, **kwargs):
    request = _request(**kwargs)
    return await linker.execute(request.customer_id, "customer", request)


@pytest.mark.asyncio
async def test_links_existing_unlinked_lead(store):
    """Test that a matching unlinked lead is linked to the customer."""
    lead = await CreateLead(store.unit_of_work).execute(
        "agent-1", "agent", LeadCreate(customer_name="Kiran", phone="9876543210")
    )

    result = await _link(LinkCustomerToLead(store.unit_of_work))

    assert result.action == "linked"
    assert result.lead_id == lead.id
    linked = await TimelineQueries(store.unit_of_work).get_lead(lead.id)
    assert linked.customer_account_id == "cust-1"
    activity = await TimelineQueries(store.unit_of_work).list_activity(lead.id)
    assert activity[0].action == "link_customer"


@pytest.mark.asyncio
async def test_creates_lead_with_timeline_when_no_match(store):
    """Test that an unmatched customer gets a self-sourced inquiry lead."""
    registry = StepTemplateRegistry(store.unit_of_work)
    for name in ("Survey", "Design"):
        await registry.create_template(
            "admin-1", "admin", StepTemplateCreate(name=name, allowed_roles=["office"])
        )

    result = await _link(LinkCustomerToLead(store.unit_of_work, default_address="Not provided"))

    assert result.action == "created"
    queries = TimelineQueries(store.unit_of_work)
    lead = await queries.get_lead(result.lead_id)
    assert lead.source == LeadSource.SELF
    assert lead.status == LeadStatus.INQUIRY
    assert lead.customer_account_id == "cust-1"
    assert lead.phone == "9876543210"
    assert lead.notes == AUTO_CREATED_NOTE
    timeline = await queries.get_timeline(result.lead_id)
    assert [e.step.status for e in timeline] == [LeadStepStatus.PENDING, LeadStepStatus.UPCOMING]


@pytest.mark.asyncio
async def test_repeated_signup_returns_existing_link(store):
    """Test that linking the same customer twice does not create a second lead."""
    linker = LinkCustomerToLead(store.unit_of_work)

    first = await _link(linker)
    second = await _link(linker, phone="9876543210")

    assert first.action == "created"
    assert second.action == "linked"
    assert second.lead_id == first.lead_id


@pytest.mark.asyncio
async def test_already_linked_lead_is_not_taken_by_other_customer(store):
    """Test that a lead linked to one customer is not relinked to another."""
    linker = LinkCustomerToLead(store.unit_of_work)
    first = await _link(linker)

    other = await _link(linker, customer_id="cust-2")

    assert other.action == "created"
    assert other.lead_id != first.lead_id


@pytest.mark.asyncio
async def test_phone_without_digits_is_rejected(store):
    """Test phone validation."""
    with pytest.raises(ValidationFailedError):
        await _link(LinkCustomerToLead(store.unit_of_work), phone="n/a")


@pytest.mark.asyncio
async def test_only_customers_can_link(store):
    """Test that staff roles cannot link customer accounts."""
    linker = LinkCustomerToLead(store.unit_of_work)

    with pytest.raises(PermissionDeniedError):
        await linker.execute("cust-1", "office", _request())
    with pytest.raises(PermissionDeniedError):
        await linker.execute("admin-1", "admin", _request())


@pytest.mark.asyncio
async def test_customer_cannot_link_another_account(store):
    """Test that a customer can only link their own account."""
    lead = await CreateLead(store.unit_of_work).execute(
        "agent-1", "agent", LeadCreate(customer_name="Kiran", phone="9876543210")
    )

    with pytest.raises(PermissionDeniedError):
        await LinkCustomerToLead(store.unit_of_work).execute(
            "cust-2", "customer", _request(customer_id="cust-1")
        )

    unchanged = await TimelineQueries(store.unit_of_work).get_lead(lead.id)
    assert unchanged.customer_account_id is None


def test_blank_customer_name_is_rejected():
    """Test that a self-registering customer must give a name."""
    with pytest.raises(ValidationError):
        CustomerLinkRequest(customer_id="cust-1", phone="9876543210", name=" \t ")
