"""User role value object."""

from enum import Enum


class UserRole(str, Enum):
    """Roles supplied by the authentication layer."""

    ADMIN = "admin"
    OFFICE = "office"
    AGENT = "agent"
    INSTALLER = "installer"
    CUSTOMER = "customer"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "str | UserRole") -> "UserRole":
        """
        Parse a role tag.

        Args:
            value: Role tag (case-insensitive) or role

        Returns:
            UserRole member

        Raises:
            ValueError: If the tag is not a known role
        """
        if isinstance(value, UserRole):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None


# Roles allowed to close a project
CLOSURE_ROLES = frozenset({UserRole.OFFICE, UserRole.ADMIN})

# Roles allowed to register new leads
INTAKE_ROLES = frozenset({UserRole.AGENT, UserRole.OFFICE, UserRole.ADMIN})
