"""Shared plumbing for timeline use cases."""

from collections.abc import Awaitable
from typing import Any, Callable, Optional, TypeVar

from app.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from app.domain.entities.lead import Lead
from app.domain.entities.lead_step import LeadStep
from app.domain.entities.step_template import StepTemplate
from app.domain.errors import ConflictError, NotFoundError, PermissionDeniedError
from app.domain.value_objects.user_role import UserRole

T = TypeVar("T")

LoggerFunc = Callable[..., None]


def _noop_logger(component: str, event: str, **kwargs: Any) -> None:
    return None


async def run_in_transaction(
    uow_factory: UnitOfWorkFactory,
    work: Callable[[UnitOfWork], Awaitable[T]],
    retries: int = 1,
    logger: Optional[LoggerFunc] = None,
) -> T:
    """
    Run work inside one transaction and commit it.

    Any exception rolls the transaction back. A write conflict reported by the
    store is retried with a fresh transaction up to ``retries`` times; every
    other error propagates unchanged.

    Args:
        uow_factory: Creates a new unit of work
        work: Coroutine function receiving the open unit of work
        retries: Retries allowed after a conflict
        logger: Optional structured logger

    Returns:
        Result of ``work``
    """
    attempt = 0
    while True:
        try:
            async with uow_factory() as uow:
                result = await work(uow)
                await uow.commit()
                return result
        except ConflictError as err:
            if attempt >= retries:
                raise
            attempt += 1
            if logger:
                logger("transaction", "conflict_retry", attempt=attempt, error=err.message)


class TimelineUseCase:
    """Base class holding the store and logger dependencies."""

    component = "timeline"

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        logger: Optional[LoggerFunc] = None,
        retries: int = 1,
    ) -> None:
        """
        Initialize use case.

        Args:
            uow_factory: Creates a unit of work per transaction
            logger: Optional logger function (component, event, **kwargs)
            retries: Retries allowed after a write conflict
        """
        self._uow_factory = uow_factory
        self._logger = logger or _noop_logger
        self._retries = retries

    async def _transaction(self, work: Callable[[UnitOfWork], Awaitable[T]]) -> T:
        return await run_in_transaction(
            self._uow_factory, work, retries=self._retries, logger=self._logger
        )

    def _log(self, event: str, **kwargs: Any) -> None:
        self._logger(self.component, event, **kwargs)


def parse_role(role: "UserRole | str", action: str) -> UserRole:
    """Parse a caller role; unknown roles are denied."""
    try:
        return UserRole.parse(role)
    except ValueError:
        raise PermissionDeniedError(str(role), action) from None


async def load_lead(uow: UnitOfWork, lead_id: str, for_update: bool = False) -> Lead:
    """Load a lead or raise NotFoundError."""
    lead = await uow.leads.get(lead_id, for_update=for_update)
    if lead is None:
        raise NotFoundError("Lead", lead_id)
    return lead


async def load_template(uow: UnitOfWork, template_id: str) -> StepTemplate:
    """Load a step template or raise NotFoundError."""
    template = await uow.templates.get(template_id)
    if template is None:
        raise NotFoundError("Step", template_id)
    return template


async def load_lead_step(
    uow: UnitOfWork, lead_id: str, step_id: str, for_update: bool = False
) -> LeadStep:
    """Load a lead's step for a template or raise NotFoundError."""
    step = await uow.lead_steps.get_for_lead(lead_id, step_id, for_update=for_update)
    if step is None:
        raise NotFoundError("Lead step", f"{lead_id}/{step_id}")
    return step
