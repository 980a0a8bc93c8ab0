"""Back-office user administration.

Access follows the role ladder OWNER > MANAGER > ADMIN: owners manage managers
and admins, managers manage admins, admins manage nobody. Everyone may read and
edit their own record.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from minbar.core.auth.errors import ConflictError, ForbiddenError, InvalidRequestError, NotFoundError
from minbar.core.auth.password import hash_password
from minbar.core.users.models import Role, User
from minbar.core.users.schemas import UserCreateRequest, UserUpdateRequest
from minbar.extensions import db

logger = logging.getLogger(__name__)

_MANAGEABLE = {
    Role.OWNER: {Role.MANAGER, Role.ADMIN},
    Role.MANAGER: {Role.ADMIN},
    Role.ADMIN: set(),
}


def can_manage_user(actor_role: Role, target_role: Role) -> bool:
    return target_role in _MANAGEABLE.get(actor_role, set())


def can_assign_role(actor_role: Role, role: Role) -> bool:
    if actor_role is Role.OWNER:
        return True
    if actor_role is Role.MANAGER:
        return role is Role.ADMIN
    return False


def list_users() -> List[User]:
    return User.query.order_by(User.id.desc()).all()


# Largest value a 64-bit INTEGER primary key can hold.
MAX_USER_ID = 2**63 - 1


def find_user(user_id: int) -> Optional[User]:
    """Row for ``user_id``, or ``None`` (also for ids no row could have)."""
    if user_id < 1 or user_id > MAX_USER_ID:
        return None
    return db.session.get(User, user_id)


def get_user(user_id: int) -> User:
    user = find_user(user_id)
    if not user:
        raise NotFoundError()
    return user


def get_user_for(actor: User, user_id: int) -> User:
    user = get_user(user_id)
    if actor.id != user.id and not can_manage_user(actor.role, user.role):
        raise ForbiddenError()
    return user


def _commit_or_conflict() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError()


def create_user(actor: User, payload: UserCreateRequest) -> User:
    if not can_assign_role(actor.role, payload.role):
        raise ForbiddenError()
    if User.query.filter_by(email=payload.email).first():
        raise ConflictError()

    user = User(
        email=payload.email,
        name=payload.name,
        role=payload.role,
        password_hash=hash_password(payload.password),
    )
    db.session.add(user)
    _commit_or_conflict()
    logger.info("User %s created user %s with role %s", actor.id, user.id, user.role.value)
    return user


def update_user(actor: User, user_id: int, payload: UserUpdateRequest) -> User:
    user = get_user_for(actor, user_id)

    # Check everything before touching the row.
    change_role = payload.role is not None and payload.role is not user.role
    if change_role and not (
        can_assign_role(actor.role, payload.role) and can_manage_user(actor.role, user.role)
    ):
        raise ForbiddenError("role_change_forbidden")
    change_email = bool(payload.email) and payload.email != user.email
    if change_email and User.query.filter(User.email == payload.email, User.id != user.id).first():
        raise ConflictError()

    if change_email:
        user.email = payload.email
    if payload.name:
        user.name = payload.name
    if payload.password:
        user.password_hash = hash_password(payload.password)
    if change_role:
        user.role = payload.role

    _commit_or_conflict()
    return user


def delete_user(actor: User, user_id: int) -> None:
    user = get_user(user_id)
    if actor.id == user.id:
        raise InvalidRequestError("cannot_delete_self")
    if not can_manage_user(actor.role, user.role):
        raise ForbiddenError()
    db.session.delete(user)
    db.session.commit()
    logger.info("User %s deleted user %s", actor.id, user_id)
