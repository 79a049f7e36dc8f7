"""User administration: listing, provisioning, role changes, deletion.

Every operation that can take the ADMIN role away from someone goes
through ``ensure_admin_remains``, so the platform can never end up with
zero administrators.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from uuid import UUID

from argon2 import PasswordHasher

from coursehub.models.user import Role, User, normalize_email
from coursehub.repos.stores import Stores
from coursehub.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

PAGE_SIZE = 10
MIN_PASSWORD_LENGTH = 8

# Argon2 hash strings encode parameters + salt
_ph = PasswordHasher()


class UserValidationError(ValueError):
    pass


class UserAlreadyExistsError(ConflictError):
    pass


class LastAdminError(ConflictError):
    pass


class SelfModificationError(ConflictError):
    pass


@dataclass(frozen=True, slots=True)
class UserSummary:
    user: User
    completions: int


@dataclass(frozen=True, slots=True)
class UserPage:
    items: list[UserSummary]
    total: int
    page: int
    total_pages: int


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


async def ensure_admin_remains(
    stores: Stores, target: User, next_role: Role | None
) -> None:
    """Reject a change that would leave the platform without an ADMIN.

    ``next_role`` is the role ``target`` would hold afterwards, or None when
    the target is being deleted.
    """
    if target.role != Role.ADMIN or next_role == Role.ADMIN:
        return
    admins = await stores.users.count_by_role(Role.ADMIN)
    if admins <= 1:
        logger.warning("Rejected change removing the last admin user=%s", target.id)
        raise LastAdminError("at least one ADMIN must remain")


async def list_users(stores: Stores, q: str = "", page: int = 1) -> UserPage:
    page = max(page, 1)
    users, total = await stores.users.search(
        q, offset=(page - 1) * PAGE_SIZE, limit=PAGE_SIZE
    )
    counts = await stores.completions.count_by_user([u.id for u in users])
    return UserPage(
        items=[UserSummary(user=u, completions=counts.get(u.id, 0)) for u in users],
        total=total,
        page=page,
        total_pages=max(math.ceil(total / PAGE_SIZE), 1),
    )


async def create_user(
    stores: Stores,
    *,
    email: str,
    password: str,
    name: str = "",
    role: str = "USER",
) -> User:
    email = normalize_email(email)
    if not email:
        logger.warning("Rejected blank email")
        raise UserValidationError("email must be non-empty")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise UserValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if await stores.users.get_by_email(email) is not None:
        logger.warning("Rejected duplicate email=%s", email)
        raise UserAlreadyExistsError(email)

    user = User.new(
        email=email,
        name=name,
        role=Role.parse(role, default=Role.USER),
        password_hash=hash_password(password),
    )
    try:
        await stores.users.add(user)
    except ValueError:
        raise UserAlreadyExistsError(email) from None
    logger.info("Created user id=%s email=%s role=%s", user.id, user.email, user.role)
    return user


async def change_role(
    stores: Stores, *, actor_id: UUID, user_id: UUID, next_role: Role
) -> User:
    target = await stores.users.get_by_id(user_id)
    if target is None:
        raise NotFoundError("user", user_id)
    if target.role == next_role:
        return target

    await ensure_admin_remains(stores, target, next_role)
    if target.id == actor_id and next_role != Role.ADMIN:
        logger.warning("Rejected self-demotion user=%s", actor_id)
        raise SelfModificationError("admins cannot demote themselves")

    updated = await stores.users.update_role(user_id, next_role)
    if updated is None:
        raise NotFoundError("user", user_id)
    logger.info(
        "Role changed user=%s %s -> %s by=%s",
        user_id,
        target.role,
        next_role,
        actor_id,
    )
    return updated


async def delete_user(stores: Stores, *, actor_id: UUID, user_id: UUID) -> None:
    target = await stores.users.get_by_id(user_id)
    if target is None:
        raise NotFoundError("user", user_id)

    await ensure_admin_remains(stores, target, None)
    if target.id == actor_id:
        logger.warning("Rejected self-deletion user=%s", actor_id)
        raise SelfModificationError("admins cannot delete themselves")

    removed = await stores.completions.delete_all(user_id)
    await stores.enrollments.delete_all_for_user(user_id)
    await stores.users.delete(user_id)
    logger.info(
        "Deleted user=%s completions_removed=%d by=%s", user_id, removed, actor_id
    )
