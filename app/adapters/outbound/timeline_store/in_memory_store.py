"""In-memory timeline store adapter."""

import asyncio
import copy
from dataclasses import dataclass, field
from typing import Any, Optional

from app.application.ports.activity_log import ActivityLog
from app.application.ports.lead_repository import LeadRepository
from app.application.ports.lead_step_repository import LeadStepRepository
from app.application.ports.step_template_repository import StepTemplateRepository
from app.application.ports.unit_of_work import UnitOfWork
from app.domain.entities.activity_entry import ActivityEntry
from app.domain.entities.lead import Lead
from app.domain.entities.lead_step import LeadStep
from app.domain.entities.step_template import StepTemplate
from app.domain.errors import ConflictError, DuplicateOrderIndexError, TransactionTimeoutError


@dataclass
class _StoreState:
    templates: dict[str, StepTemplate] = field(default_factory=dict)
    leads: dict[str, Lead] = field(default_factory=dict)
    lead_steps: dict[str, LeadStep] = field(default_factory=dict)
    activity: list[ActivityEntry] = field(default_factory=list)


class InMemoryStepTemplateRepository(StepTemplateRepository):
    """In-memory implementation of step template repository."""

    def __init__(self, state: _StoreState) -> None:
        self._state = state

    def _check_order_index(self, template: StepTemplate) -> None:
        if not template.is_active:
            return
        for other in self._state.templates.values():
            if (
                other.id != template.id
                and other.is_active
                and other.order_index == template.order_index
            ):
                raise DuplicateOrderIndexError(template.order_index, existing_id=other.id)

    async def get(self, template_id: str) -> Optional[StepTemplate]:
        return self._state.templates.get(template_id)

    async def list(self, include_inactive: bool = False) -> list[StepTemplate]:
        templates = [t for t in self._state.templates.values() if include_inactive or t.is_active]
        return sorted(templates, key=lambda t: t.order_index)

    async def add(self, template: StepTemplate) -> None:
        if template.id in self._state.templates:
            raise ConflictError("Step template already exists", template_id=template.id)
        self._check_order_index(template)
        self._state.templates[template.id] = template

    async def update(self, template: StepTemplate) -> None:
        self._check_order_index(template)
        self._state.templates[template.id] = template


class InMemoryLeadRepository(LeadRepository):
    """In-memory implementation of lead repository."""

    def __init__(self, state: _StoreState) -> None:
        self._state = state

    async def get(self, lead_id: str, for_update: bool = False) -> Optional[Lead]:
        return self._state.leads.get(lead_id)

    async def add(self, lead: Lead) -> None:
        if lead.id in self._state.leads:
            raise ConflictError("Lead already exists", lead_id=lead.id)
        self._state.leads[lead.id] = lead

    async def update(self, lead: Lead) -> None:
        self._state.leads[lead.id] = lead

    def _newest(self, phone: str, customer_id: Optional[str]) -> Optional[Lead]:
        matches = [
            lead
            for lead in self._state.leads.values()
            if lead.phone == phone and lead.customer_account_id == customer_id
        ]
        return max(matches, key=lambda lead: lead.created_at, default=None)

    async def find_unlinked_by_phone(self, phone: str) -> Optional[Lead]:
        return self._newest(phone, None)

    async def find_linked_by_phone(self, phone: str, customer_id: str) -> Optional[Lead]:
        return self._newest(phone, customer_id)


class InMemoryLeadStepRepository(LeadStepRepository):
    """In-memory implementation of lead step repository."""

    def __init__(self, state: _StoreState) -> None:
        self._state = state

    async def list_for_lead(self, lead_id: str) -> list[LeadStep]:
        return [step for step in self._state.lead_steps.values() if step.lead_id == lead_id]

    async def get_for_lead(
        self, lead_id: str, step_id: str, for_update: bool = False
    ) -> Optional[LeadStep]:
        for step in self._state.lead_steps.values():
            if step.lead_id == lead_id and step.step_id == step_id:
                return step
        return None

    async def add_many(self, steps: list[LeadStep]) -> None:
        taken = {(s.lead_id, s.step_id) for s in self._state.lead_steps.values()}
        for step in steps:
            key = (step.lead_id, step.step_id)
            if key in taken:
                raise ConflictError("Lead step already exists", lead_id=step.lead_id)
            taken.add(key)
        for step in steps:
            self._state.lead_steps[step.id] = step

    async def update(self, step: LeadStep) -> None:
        self._state.lead_steps[step.id] = step


class InMemoryActivityLog(ActivityLog):
    """In-memory implementation of the activity log."""

    def __init__(self, state: _StoreState) -> None:
        self._state = state

    async def record(
        self,
        user_id: str,
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        lead_id: Optional[str] = None,
        old_value: Optional[dict[str, Any]] = None,
        new_value: Optional[dict[str, Any]] = None,
    ) -> ActivityEntry:
        entry = ActivityEntry(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            lead_id=lead_id,
            old_value=old_value,
            new_value=new_value,
        )
        self._state.activity.append(entry)
        return entry

    async def list_for_lead(self, lead_id: str) -> list[ActivityEntry]:
        return [entry for entry in reversed(self._state.activity) if entry.lead_id == lead_id]


class InMemoryUnitOfWork(UnitOfWork):
    """Transaction over a private copy of the store state.

    Transactions are serialized by the store lock; commit publishes the copy.
    """

    def __init__(self, store: "InMemoryTimelineStore") -> None:
        self._store = store
        self._working: Optional[_StoreState] = None
        self._committed = False
        self._locked = False

    @property
    def committed(self) -> bool:
        return self._committed

    async def begin(self) -> None:
        try:
            await asyncio.wait_for(self._store.lock.acquire(), timeout=self._store.timeout_seconds)
        except asyncio.TimeoutError:
            raise TransactionTimeoutError(
                f"Could not start transaction within {self._store.timeout_seconds}s"
            ) from None
        self._locked = True
        self._working = copy.deepcopy(self._store.state)
        self.templates = InMemoryStepTemplateRepository(self._working)
        self.leads = InMemoryLeadRepository(self._working)
        self.lead_steps = InMemoryLeadStepRepository(self._working)
        self.activity_log = InMemoryActivityLog(self._working)

    async def commit(self) -> None:
        if self._working is None:
            raise RuntimeError("Transaction is not active")
        # Callers keep references to working entities; publish a copy
        self._store.state = copy.deepcopy(self._working)
        self._committed = True

    async def rollback(self) -> None:
        self._working = None

    async def close(self) -> None:
        self._working = None
        if self._locked:
            self._locked = False
            self._store.lock.release()


class InMemoryTimelineStore:
    """Process-local timeline store for development and tests."""

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        """
        Initialize in-memory store.

        Args:
            timeout_seconds: Maximum wait to start a transaction
        """
        self.lock = asyncio.Lock()
        self.state = _StoreState()
        self.timeout_seconds = timeout_seconds

    def unit_of_work(self) -> InMemoryUnitOfWork:
        """Create a unit of work bound to this store."""
        return InMemoryUnitOfWork(self)
