"""Dependency injection factory functions."""

from typing import Any, Optional, Union

from app.adapters.outbound.timeline_store import InMemoryTimelineStore, PostgresTimelineStore
from app.application.ports.unit_of_work import UnitOfWorkFactory
from app.application.use_cases.admin_timeline_override import AdminTimelineOverride
from app.application.use_cases.complete_step import CompleteStep
from app.application.use_cases.create_lead import CreateLead
from app.application.use_cases.initialize_lead_timeline import InitializeLeadTimeline
from app.application.use_cases.link_customer_to_lead import LinkCustomerToLead
from app.application.use_cases.project_closure import ProjectClosure
from app.application.use_cases.step_template_registry import StepTemplateRegistry
from app.application.use_cases.timeline_queries import TimelineQueries
from app.infrastructure.config.settings import settings
from app.infrastructure.logging.logger import (
    log_event,
    log_lead_status_change,
    log_step_transition,
    log_template_change,
)

TimelineStore = Union[InMemoryTimelineStore, PostgresTimelineStore]


def _logger_func(component: str, event: str, **kwargs: Any) -> None:
    """Route use case events to the structured log helpers."""
    if event == "lead_status_change":
        log_lead_status_change(**kwargs)
    elif "step_id" in kwargs and "status_after" in kwargs:
        log_step_transition(source=component, transition=event, **kwargs)
    elif component == "registry" and "template_id" in kwargs:
        log_template_change(kwargs.pop("template_id"), event, **kwargs)
    else:
        log_event(component, event, **kwargs)


def create_timeline_store() -> TimelineStore:
    """
    Factory function to create the timeline store.

    Returns:
        Postgres store when TIMELINE_STORE=postgres, in-memory store otherwise
    """
    if settings.timeline_store == "postgres":
        if not settings.database_url:
            raise ValueError("DATABASE_URL is required when TIMELINE_STORE=postgres")
        return PostgresTimelineStore()
    else:
        return InMemoryTimelineStore(timeout_seconds=settings.transaction_timeout_seconds)


def _uow_factory(store: Optional[TimelineStore]) -> UnitOfWorkFactory:
    return (store or create_timeline_store()).unit_of_work


def create_step_template_registry(store: Optional[TimelineStore] = None) -> StepTemplateRegistry:
    """
    Factory function to create the step template registry.

    Args:
        store: Timeline store to use; the configured store when omitted

    Returns:
        StepTemplateRegistry instance
    """
    return StepTemplateRegistry(
        _uow_factory(store),
        logger=_logger_func,
        retries=settings.transaction_retry_attempts,
        order_index_gap=settings.order_index_gap,
    )


def create_initialize_lead_timeline(
    store: Optional[TimelineStore] = None,
) -> InitializeLeadTimeline:
    """Factory function to create InitializeLeadTimeline."""
    return InitializeLeadTimeline(
        _uow_factory(store), logger=_logger_func, retries=settings.transaction_retry_attempts
    )


def create_complete_step(store: Optional[TimelineStore] = None) -> CompleteStep:
    """Factory function to create CompleteStep."""
    return CompleteStep(
        _uow_factory(store), logger=_logger_func, retries=settings.transaction_retry_attempts
    )


def create_project_closure(store: Optional[TimelineStore] = None) -> ProjectClosure:
    """Factory function to create ProjectClosure."""
    return ProjectClosure(
        _uow_factory(store), logger=_logger_func, retries=settings.transaction_retry_attempts
    )


def create_link_customer_to_lead(store: Optional[TimelineStore] = None) -> LinkCustomerToLead:
    """Factory function to create LinkCustomerToLead."""
    return LinkCustomerToLead(
        _uow_factory(store),
        logger=_logger_func,
        retries=settings.transaction_retry_attempts,
        default_address=settings.customer_lead_default_address,
    )


def create_create_lead(store: Optional[TimelineStore] = None) -> CreateLead:
    """Factory function to create CreateLead."""
    return CreateLead(
        _uow_factory(store), logger=_logger_func, retries=settings.transaction_retry_attempts
    )


def create_admin_timeline_override(
    store: Optional[TimelineStore] = None,
) -> AdminTimelineOverride:
    """Factory function to create AdminTimelineOverride."""
    return AdminTimelineOverride(
        _uow_factory(store), logger=_logger_func, retries=settings.transaction_retry_attempts
    )


def create_timeline_queries(store: Optional[TimelineStore] = None) -> TimelineQueries:
    """Factory function to create TimelineQueries."""
    return TimelineQueries(
        _uow_factory(store), logger=_logger_func, retries=settings.transaction_retry_attempts
    )
