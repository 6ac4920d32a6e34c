"""Role-based permission rules for timeline steps."""

from app.domain.entities.step_template import StepTemplate
from app.domain.value_objects.user_role import CLOSURE_ROLES, UserRole


def can_act(role: UserRole, template: StepTemplate) -> bool:
    """
    Check whether a role may complete or reopen a step.

    Admins may act on every step; other roles only on steps that list them.

    Args:
        role: Caller role
        template: Step template being acted on

    Returns:
        True if the role is allowed
    """
    return role == UserRole.ADMIN or role in template.allowed_roles


def can_close_project(role: UserRole) -> bool:
    """Office staff and admins may close a project."""
    return role in CLOSURE_ROLES


def can_reopen_project(role: UserRole) -> bool:
    """Only admins may reopen a closed project."""
    return role == UserRole.ADMIN
