"""Verified caller identity passed into every service operation."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from campus_cart.core.exceptions import ForbiddenError


class Role(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    RIDER = "rider"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """A caller whose identity and role were established by authentication.

    Operations state the roles they accept with :meth:`require` before
    touching the store; relationship checks (owner, buyer, assigned rider)
    live in the guarded statements themselves.
    """

    id: UUID
    role: Role

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles

    def require(self, *roles: Role) -> "Actor":
        if not self.has_role(*roles):
            allowed = ", ".join(r.value for r in roles)
            raise ForbiddenError(
                f"This action requires one of the roles: {allowed}",
                code="ROLE_REQUIRED",
            )
        return self
