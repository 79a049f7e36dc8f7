from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from coursehub.models.user import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated bearer token.

    Carried through the request via FastAPI's dependency system.  The
    identity provider owns authentication; this service only trusts the
    ``(user_id, role)`` pair it signed.
    """

    user_id: UUID
    role: Role

    def has_any_role(self, roles: set[Role]) -> bool:
        return self.role in roles

    def is_staff(self) -> bool:
        return self.role.is_staff
