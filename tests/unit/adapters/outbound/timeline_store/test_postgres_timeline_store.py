"""Unit tests for the Postgres timeline store using SQLite in-memory."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.adapters.outbound.timeline_store.models import Base
from app.adapters.outbound.timeline_store.postgres_store import PostgresTimelineStore
from app.application.dtos.lead import CustomerLinkRequest, LeadCreate
from app.application.dtos.step_template import StepTemplateCreate
from app.application.use_cases.complete_step import CompleteStep
from app.application.use_cases.create_lead import CreateLead
from app.application.use_cases.initialize_lead_timeline import InitializeLeadTimeline
from app.application.use_cases.link_customer_to_lead import LinkCustomerToLead
from app.application.use_cases.step_template_registry import StepTemplateRegistry
from app.application.use_cases.timeline_queries import TimelineQueries
from app.domain.entities.lead_step import LeadStep, LeadStepStatus
from app.domain.errors import AlreadyInitializedError, ConflictError, DuplicateOrderIndexError
from app.domain.value_objects.remarks import SubsidyRecord


@pytest.fixture
def sqlite_engine():
    """Create SQLite in-memory engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def store(sqlite_engine, monkeypatch):
    """Create Postgres store with SQLite in-memory database for testing."""
    # Patch get_db_session to use our test session
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sqlite_engine)

    def get_test_db_session():
        return SessionLocal()

    monkeypatch.setattr(
        "app.adapters.outbound.timeline_store.postgres_store.get_db_session",
        get_test_db_session,
    )

    return PostgresTimelineStore()


async def _seed(store):
    registry = StepTemplateRegistry(store.unit_of_work)
    a = await registry.create_template(
        "admin-1", "admin", StepTemplateCreate(name="Subsidy", allowed_roles=["office"])
    )
    b = await registry.create_template(
        "admin-1", "admin", StepTemplateCreate(name="Net meter", allowed_roles=["office"])
    )
    lead = await CreateLead(store.unit_of_work).execute(
        "agent-1", "agent", LeadCreate(customer_name="Sita", phone="+91 98111 22222")
    )
    return a, b, lead


@pytest.mark.asyncio
async def test_lead_and_timeline_round_trip(store):
    """Test that leads and their timelines persist."""
    a, b, lead = await _seed(store)
    queries = TimelineQueries(store.unit_of_work)

    loaded = await queries.get_lead(lead.id)
    timeline = await queries.get_timeline(lead.id)

    assert loaded.customer_name == "Sita"
    assert loaded.phone == "+919811122222"
    assert loaded.created_at.tzinfo is not None
    assert [(e.template.id, e.step.status) for e in timeline] == [
        (a.id, LeadStepStatus.PENDING),
        (b.id, LeadStepStatus.UPCOMING),
    ]


@pytest.mark.asyncio
async def test_completion_persists_typed_remarks_and_progression(store):
    """Test that completion, remarks and progression are stored together."""
    a, b, lead = await _seed(store)

    await CompleteStep(store.unit_of_work).execute(
        lead.id,
        a.id,
        "office-1",
        "office",
        remarks={
            "type": "subsidy_application",
            "applicationReference": "SUB-7",
            "submissionDate": "2026-04-01",
            "subsidyAmount": 78000,
            "subsidyScheme": "PM Surya Ghar",
        },
    )

    timeline = await TimelineQueries(store.unit_of_work).get_timeline(lead.id)
    first, second = timeline
    assert first.step.status == LeadStepStatus.COMPLETED
    assert isinstance(first.step.remarks, SubsidyRecord)
    assert first.step.remarks.subsidy_amount == 78000.0
    assert first.step.completed_at.tzinfo is not None
    assert second.step.status == LeadStepStatus.PENDING

    activity = await TimelineQueries(store.unit_of_work).list_activity(lead.id)
    assert activity[0].action == "complete_step"
    assert activity[0].new_value["remarks_type"] == "subsidy_application"


@pytest.mark.asyncio
async def test_second_initialization_rejected(store):
    """Test that a lead timeline is initialized once."""
    _, _, lead = await _seed(store)

    with pytest.raises(AlreadyInitializedError):
        await InitializeLeadTimeline(store.unit_of_work).execute(lead.id)


@pytest.mark.asyncio
async def test_unique_lead_step_violation_is_a_conflict(store):
    """Test that the database uniqueness error surfaces as a conflict."""
    a, _, lead = await _seed(store)

    with pytest.raises(ConflictError):
        async with store.unit_of_work() as uow:
            await uow.lead_steps.add_many([LeadStep(lead_id=lead.id, step_id=a.id)])


@pytest.mark.asyncio
async def test_reorder_renumbers_without_collisions(store):
    """Test the two-phase renumber against the partial unique index."""
    a, b, _ = await _seed(store)
    registry = StepTemplateRegistry(store.unit_of_work)

    await registry.reorder_templates("admin-1", "admin", [b.id, a.id])

    templates = await registry.list_templates()
    assert [(t.id, t.order_index) for t in templates] == [(b.id, 1000), (a.id, 2000)]
    with pytest.raises(DuplicateOrderIndexError):
        await registry.reorder("admin-1", "admin", a.id, 1000)


@pytest.mark.asyncio
async def test_linker_matches_unlinked_lead(store):
    """Test phone matching through the database."""
    _, _, lead = await _seed(store)

    result = await LinkCustomerToLead(store.unit_of_work).execute(
        "cust-9",
        "customer",
        CustomerLinkRequest(customer_id="cust-9", phone="+91-98111-22222", name="Sita"),
    )

    assert result.action == "linked"
    assert result.lead_id == lead.id
    again = await LinkCustomerToLead(store.unit_of_work).execute(
        "cust-9",
        "customer",
        CustomerLinkRequest(customer_id="cust-9", phone="+919811122222", name="Sita"),
    )
    assert again.lead_id == lead.id


@pytest.mark.asyncio
async def test_reorder_near_final_indices_respects_unique_index(store):
    """Test that renumbering never trips the partial unique index."""
    registry = StepTemplateRegistry(store.unit_of_work)
    a = await registry.create_template(
        "admin-1", "admin", StepTemplateCreate(name="A", allowed_roles=["office"], order_index=1)
    )
    b = await registry.create_template(
        "admin-1", "admin", StepTemplateCreate(name="B", allowed_roles=["office"], order_index=998)
    )

    await registry.reorder_templates("admin-1", "admin", [a.id, b.id])

    templates = await registry.list_templates()
    assert [(t.id, t.order_index) for t in templates] == [(a.id, 1000), (b.id, 2000)]
