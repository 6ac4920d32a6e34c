"""Structured logger for observability."""

import logging
from typing import Any, Optional

# Configure root logger with JSON-like structured format
_logger = logging.getLogger("lead_timeline")
_logger.setLevel(logging.INFO)

# Create console handler if not exists
if not _logger.handlers:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    _logger.addHandler(handler)


def log_event(
    component: str,
    event: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """
    Log structured engine event.

    Args:
        component: Component name (e.g., 'http', 'completion', 'progression')
        event: Event name (e.g., 'step_completed')
        level: Log level (default: INFO)
        **kwargs: Additional structured fields to log
    """
    fields = {
        "component": component,
        "event": event,
    }
    fields.update({k: v for k, v in kwargs.items() if v is not None})

    # Format as key=value pairs for readability
    log_parts = [f"{k}={v!r}" for k, v in fields.items()]
    log_message = " | ".join(log_parts)

    _logger.log(level, log_message)


def log_step_transition(
    lead_id: str,
    step_id: str,
    status_before: Optional[str] = None,
    status_after: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """
    Log lead step status transition.

    Args:
        lead_id: Lead identifier
        step_id: Step template identifier
        status_before: Previous status
        status_after: New status
        **kwargs: Additional fields
    """
    log_event(
        component="timeline",
        event="step_transition",
        lead_id=lead_id,
        step_id=step_id,
        status_before=status_before,
        status_after=status_after,
        **kwargs,
    )


def log_lead_status_change(
    lead_id: str,
    status_before: str,
    status_after: str,
    **kwargs: Any,
) -> None:
    """
    Log lead status change.

    Args:
        lead_id: Lead identifier
        status_before: Previous status
        status_after: New status
        **kwargs: Additional fields
    """
    log_event(
        component="closure",
        event="lead_status_change",
        lead_id=lead_id,
        status_before=status_before,
        status_after=status_after,
        **kwargs,
    )


def log_template_change(
    template_id: str,
    action: str,
    **kwargs: Any,
) -> None:
    """
    Log step template registry change.

    Args:
        template_id: Template identifier
        action: Registry action (e.g., 'create', 'reorder')
        **kwargs: Additional fields
    """
    log_event(
        component="registry",
        event=action,
        template_id=template_id,
        **kwargs,
    )


# Shared logger instance for adapters
logger = _logger
