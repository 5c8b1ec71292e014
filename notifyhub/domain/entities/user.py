"""Domain entity representing a user."""

from dataclasses import dataclass

ROLE_ADMIN = "admin"
ROLE_CLIENT = "client"


@dataclass
class User:
    """Identity resolved for the caller of a request."""

    id: int | None
    email: str
    name: str
    role: str = ROLE_CLIENT
    is_active: bool = True

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role matches ``alias``."""

        return self.role.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ROLE_ADMIN)


__all__ = ["User", "ROLE_ADMIN", "ROLE_CLIENT"]
