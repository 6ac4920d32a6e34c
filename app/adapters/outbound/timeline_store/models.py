"""SQLAlchemy ORM models for the timeline store."""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StepTemplateModel(Base):
    """SQLAlchemy model for step_master table."""

    __tablename__ = "step_master"

    id = Column(String, primary_key=True)
    step_name = Column(String, nullable=False)
    order_index = Column(Integer, nullable=False)
    allowed_roles = Column(JSON, nullable=False)
    remarks_required = Column(Boolean, nullable=False, default=False)
    attachments_allowed = Column(Boolean, nullable=False, default=False)
    customer_upload = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # Order index is unique among active templates only
    __table_args__ = (
        Index(
            "uq_step_master_active_order_index",
            "order_index",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )


class LeadModel(Base):
    """SQLAlchemy model for leads table."""

    __tablename__ = "leads"

    id = Column(String, primary_key=True)
    customer_name = Column(String, nullable=False)
    phone = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String, nullable=False)
    source = Column(String, nullable=False)
    created_by = Column(String, nullable=False)
    customer_account_id = Column(String, nullable=True, index=True)
    installer_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class LeadStepModel(Base):
    """SQLAlchemy model for lead_steps table."""

    __tablename__ = "lead_steps"

    id = Column(String, primary_key=True)
    lead_id = Column(String, ForeignKey("leads.id"), nullable=False, index=True)
    step_id = Column(String, ForeignKey("step_master.id"), nullable=False)
    status = Column(String, nullable=False)
    completed_by = Column(String, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    remarks = Column(Text, nullable=True)  # Plain text or a JSON record
    attachments = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (UniqueConstraint("lead_id", "step_id", name="uq_lead_steps_lead_step"),)


class ActivityLogModel(Base):
    """SQLAlchemy model for activity_log table."""

    __tablename__ = "activity_log"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String, nullable=True)
    lead_id = Column(String, nullable=True, index=True)
    old_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
