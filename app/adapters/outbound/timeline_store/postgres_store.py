"""Postgres-backed timeline store adapter."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.application.ports.activity_log import ActivityLog
from app.application.ports.lead_repository import LeadRepository
from app.application.ports.lead_step_repository import LeadStepRepository
from app.application.ports.step_template_repository import StepTemplateRepository
from app.application.ports.unit_of_work import UnitOfWork
from app.domain.entities.activity_entry import ActivityEntry
from app.domain.entities.lead import Lead, LeadSource, LeadStatus
from app.domain.entities.lead_step import LeadStep, LeadStepStatus
from app.domain.entities.step_template import StepTemplate
from app.domain.errors import ConflictError, TimelineError, TransactionTimeoutError
from app.domain.value_objects.remarks import parse_remarks, serialize_remarks
from app.infrastructure.db import get_db_session
from app.infrastructure.logging.logger import logger

from .models import ActivityLogModel, LeadModel, LeadStepModel, StepTemplateModel

# PostgreSQL SQLSTATE codes
SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"
QUERY_CANCELED = "57014"


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite returns naive datetimes; treat them as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def translate_db_error(err: SQLAlchemyError) -> Optional[TimelineError]:
    """
    Map a database error to a timeline error.

    Args:
        err: Error raised by SQLAlchemy

    Returns:
        ConflictError for serialization failures, deadlocks and uniqueness
        violations, TransactionTimeoutError for cancelled statements, None
        for anything else
    """
    pgcode = getattr(getattr(err, "orig", None), "pgcode", None)
    if pgcode == QUERY_CANCELED:
        return TransactionTimeoutError("Statement timed out")
    if pgcode in (SERIALIZATION_FAILURE, DEADLOCK_DETECTED) or isinstance(err, IntegrityError):
        return ConflictError(pgcode=pgcode)
    return None


class _SessionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session


class PostgresStepTemplateRepository(_SessionRepository, StepTemplateRepository):
    """Postgres implementation of step template repository."""

    def _to_entity(self, model: StepTemplateModel) -> StepTemplate:
        return StepTemplate(
            id=model.id,
            name=model.step_name,
            order_index=model.order_index,
            allowed_roles=frozenset(model.allowed_roles),
            remarks_required=model.remarks_required,
            attachments_allowed=model.attachments_allowed,
            customer_upload=model.customer_upload,
            is_active=model.is_active,
            created_at=_aware(model.created_at),
            updated_at=_aware(model.updated_at),
        )

    def _apply(self, template: StepTemplate, model: StepTemplateModel) -> None:
        model.step_name = template.name
        model.order_index = template.order_index
        model.allowed_roles = sorted(role.value for role in template.allowed_roles)
        model.remarks_required = template.remarks_required
        model.attachments_allowed = template.attachments_allowed
        model.customer_upload = template.customer_upload
        model.is_active = template.is_active
        model.updated_at = template.updated_at

    async def get(self, template_id: str) -> Optional[StepTemplate]:
        model = self._session.get(StepTemplateModel, template_id)
        return self._to_entity(model) if model else None

    async def list(self, include_inactive: bool = False) -> list[StepTemplate]:
        query = self._session.query(StepTemplateModel)
        if not include_inactive:
            query = query.filter(StepTemplateModel.is_active.is_(True))
        return [self._to_entity(m) for m in query.order_by(StepTemplateModel.order_index).all()]

    async def add(self, template: StepTemplate) -> None:
        model = StepTemplateModel(id=template.id, created_at=template.created_at)
        self._apply(template, model)
        self._session.add(model)
        self._session.flush()

    async def update(self, template: StepTemplate) -> None:
        model = self._session.get(StepTemplateModel, template.id)
        if model is None:
            raise ConflictError("Step template disappeared", template_id=template.id)
        self._apply(template, model)
        self._session.flush()


class PostgresLeadRepository(_SessionRepository, LeadRepository):
    """Postgres implementation of lead repository."""

    def _to_entity(self, model: LeadModel) -> Lead:
        return Lead(
            id=model.id,
            customer_name=model.customer_name,
            phone=model.phone,
            email=model.email,
            address=model.address,
            notes=model.notes,
            status=LeadStatus(model.status),
            source=LeadSource(model.source),
            created_by=model.created_by,
            customer_account_id=model.customer_account_id,
            installer_id=model.installer_id,
            created_at=_aware(model.created_at),
            updated_at=_aware(model.updated_at),
        )

    def _apply(self, lead: Lead, model: LeadModel) -> None:
        model.customer_name = lead.customer_name
        model.phone = lead.phone
        model.email = lead.email
        model.address = lead.address
        model.notes = lead.notes
        model.status = lead.status.value
        model.source = lead.source.value
        model.created_by = lead.created_by
        model.customer_account_id = lead.customer_account_id
        model.installer_id = lead.installer_id
        model.updated_at = lead.updated_at

    async def get(self, lead_id: str, for_update: bool = False) -> Optional[Lead]:
        query = self._session.query(LeadModel).filter(LeadModel.id == lead_id)
        if for_update:
            query = query.with_for_update()
        model = query.first()
        return self._to_entity(model) if model else None

    async def add(self, lead: Lead) -> None:
        model = LeadModel(id=lead.id, created_at=lead.created_at)
        self._apply(lead, model)
        self._session.add(model)
        self._session.flush()

    async def update(self, lead: Lead) -> None:
        model = self._session.get(LeadModel, lead.id)
        if model is None:
            raise ConflictError("Lead disappeared", lead_id=lead.id)
        self._apply(lead, model)
        self._session.flush()

    async def find_unlinked_by_phone(self, phone: str) -> Optional[Lead]:
        model = (
            self._session.query(LeadModel)
            .filter(LeadModel.phone == phone, LeadModel.customer_account_id.is_(None))
            .order_by(LeadModel.created_at.desc())
            .with_for_update()
            .first()
        )
        return self._to_entity(model) if model else None

    async def find_linked_by_phone(self, phone: str, customer_id: str) -> Optional[Lead]:
        model = (
            self._session.query(LeadModel)
            .filter(LeadModel.phone == phone, LeadModel.customer_account_id == customer_id)
            .order_by(LeadModel.created_at.desc())
            .first()
        )
        return self._to_entity(model) if model else None


class PostgresLeadStepRepository(_SessionRepository, LeadStepRepository):
    """Postgres implementation of lead step repository."""

    def _to_entity(self, model: LeadStepModel) -> LeadStep:
        return LeadStep(
            id=model.id,
            lead_id=model.lead_id,
            step_id=model.step_id,
            status=LeadStepStatus(model.status),
            completed_by=model.completed_by,
            completed_at=_aware(model.completed_at),
            remarks=parse_remarks(model.remarks),
            attachments=list(model.attachments or []),
            created_at=_aware(model.created_at),
            updated_at=_aware(model.updated_at),
        )

    def _apply(self, step: LeadStep, model: LeadStepModel) -> None:
        model.status = step.status.value
        model.completed_by = step.completed_by
        model.completed_at = step.completed_at
        model.remarks = serialize_remarks(step.remarks)
        model.attachments = list(step.attachments)
        model.updated_at = step.updated_at

    async def list_for_lead(self, lead_id: str) -> list[LeadStep]:
        models = self._session.query(LeadStepModel).filter(LeadStepModel.lead_id == lead_id).all()
        return [self._to_entity(model) for model in models]

    async def get_for_lead(
        self, lead_id: str, step_id: str, for_update: bool = False
    ) -> Optional[LeadStep]:
        query = self._session.query(LeadStepModel).filter(
            LeadStepModel.lead_id == lead_id, LeadStepModel.step_id == step_id
        )
        if for_update:
            query = query.with_for_update()
        model = query.first()
        return self._to_entity(model) if model else None

    async def add_many(self, steps: list[LeadStep]) -> None:
        for step in steps:
            model = LeadStepModel(
                id=step.id,
                lead_id=step.lead_id,
                step_id=step.step_id,
                created_at=step.created_at,
            )
            self._apply(step, model)
            self._session.add(model)
        self._session.flush()

    async def update(self, step: LeadStep) -> None:
        model = self._session.get(LeadStepModel, step.id)
        if model is None:
            raise ConflictError("Lead step disappeared", lead_step_id=step.id)
        self._apply(step, model)
        self._session.flush()


class PostgresActivityLog(_SessionRepository, ActivityLog):
    """Postgres implementation of the activity log."""

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
        self._session.add(
            ActivityLogModel(
                id=entry.id,
                user_id=entry.user_id,
                action=entry.action,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                lead_id=entry.lead_id,
                old_value=entry.old_value,
                new_value=entry.new_value,
                timestamp=entry.timestamp,
            )
        )
        self._session.flush()
        return entry

    async def list_for_lead(self, lead_id: str) -> list[ActivityEntry]:
        models = (
            self._session.query(ActivityLogModel)
            .filter(ActivityLogModel.lead_id == lead_id)
            .order_by(ActivityLogModel.timestamp.desc())
            .all()
        )
        return [
            ActivityEntry(
                id=model.id,
                user_id=model.user_id,
                action=model.action,
                entity_type=model.entity_type,
                entity_id=model.entity_id,
                lead_id=model.lead_id,
                old_value=model.old_value,
                new_value=model.new_value,
                timestamp=_aware(model.timestamp),
            )
            for model in models
        ]


class PostgresUnitOfWork(UnitOfWork):
    """One SERIALIZABLE database transaction.

    Isolation level and statement timeout come from the engine options.
    """

    def __init__(self) -> None:
        self._session: Optional[Session] = None
        self._committed = False

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await super().__aexit__(exc_type, exc, tb)
        if isinstance(exc, DBAPIError):
            mapped = translate_db_error(exc)
            if mapped is not None:
                logger.warning(f"Database error in timeline transaction: {str(exc)}")
                raise mapped from exc

    @property
    def committed(self) -> bool:
        return self._committed

    async def begin(self) -> None:
        self._session = get_db_session()
        self.templates = PostgresStepTemplateRepository(self._session)
        self.leads = PostgresLeadRepository(self._session)
        self.lead_steps = PostgresLeadStepRepository(self._session)
        self.activity_log = PostgresActivityLog(self._session)

    async def commit(self) -> None:
        if self._session is None:
            raise RuntimeError("Transaction is not active")
        self._session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._session is not None:
            self._session.rollback()

    async def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None


class PostgresTimelineStore:
    """Timeline store backed by the configured database."""

    def unit_of_work(self) -> PostgresUnitOfWork:
        """Create a unit of work with its own session."""
        return PostgresUnitOfWork()
