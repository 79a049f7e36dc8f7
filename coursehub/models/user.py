from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID, uuid4


class Role(StrEnum):
    USER = "USER"
    LEADER = "LEADER"
    ADMIN = "ADMIN"

    @property
    def is_staff(self) -> bool:
        return self in (Role.LEADER, Role.ADMIN)

    @classmethod
    def parse(cls, raw: str, *, default: Role | None = None) -> Role:
        """Parse a role name case-insensitively.

        Raises ValueError for unknown names unless a default is given.
        """
        try:
            return cls(raw.strip().upper())
        except ValueError:
            if default is not None:
                return default
            raise


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    name: str = ""
    role: Role = Role.USER
    password_hash: str | None = None
    created_at: int = field(default_factory=lambda: int(time.time()))

    @staticmethod
    def new(
        *,
        email: str,
        name: str = "",
        role: Role = Role.USER,
        password_hash: str | None = None,
    ) -> User:
        return User(
            id=uuid4(),
            email=normalize_email(email),
            name=name.strip(),
            role=role,
            password_hash=password_hash,
        )


def normalize_email(email: str) -> str:
    return email.strip().lower()
