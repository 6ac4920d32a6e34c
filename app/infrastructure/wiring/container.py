"""Dependency injection container."""

from typing import Optional

from app.application.use_cases.admin_timeline_override import AdminTimelineOverride
from app.application.use_cases.complete_step import CompleteStep
from app.application.use_cases.create_lead import CreateLead
from app.application.use_cases.initialize_lead_timeline import InitializeLeadTimeline
from app.application.use_cases.link_customer_to_lead import LinkCustomerToLead
from app.application.use_cases.project_closure import ProjectClosure
from app.application.use_cases.step_template_registry import StepTemplateRegistry
from app.application.use_cases.timeline_queries import TimelineQueries
from app.infrastructure.wiring.dependencies import (
    TimelineStore,
    create_admin_timeline_override,
    create_complete_step,
    create_create_lead,
    create_initialize_lead_timeline,
    create_link_customer_to_lead,
    create_project_closure,
    create_step_template_registry,
    create_timeline_queries,
    create_timeline_store,
)


class Container:
    """Use cases sharing one timeline store."""

    def __init__(self, store: Optional[TimelineStore] = None) -> None:
        """
        Initialize container with dependencies.

        Args:
            store: Timeline store; the configured store when omitted
        """
        self._store = store or create_timeline_store()
        self._registry = create_step_template_registry(self._store)
        self._initialize_timeline = create_initialize_lead_timeline(self._store)
        self._complete_step = create_complete_step(self._store)
        self._closure = create_project_closure(self._store)
        self._linker = create_link_customer_to_lead(self._store)
        self._create_lead = create_create_lead(self._store)
        self._override = create_admin_timeline_override(self._store)
        self._queries = create_timeline_queries(self._store)

    @property
    def store(self) -> TimelineStore:
        return self._store

    @property
    def registry(self) -> StepTemplateRegistry:
        return self._registry

    @property
    def initialize_timeline(self) -> InitializeLeadTimeline:
        return self._initialize_timeline

    @property
    def complete_step(self) -> CompleteStep:
        return self._complete_step

    @property
    def closure(self) -> ProjectClosure:
        return self._closure

    @property
    def linker(self) -> LinkCustomerToLead:
        return self._linker

    @property
    def create_lead(self) -> CreateLead:
        return self._create_lead

    @property
    def override(self) -> AdminTimelineOverride:
        return self._override

    @property
    def queries(self) -> TimelineQueries:
        return self._queries
