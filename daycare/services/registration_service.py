"""Self-registration, optionally with a first child claimed by external id."""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.config import get_settings
from daycare.crud import crud_user
from daycare.errors import ConflictError, ValidationError
from daycare.models.child import Child
from daycare.models.user import User, UserRole
from daycare.schemas.user import RegisterRequest, UserCreate
from daycare.services import link_resolver

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    user: User
    child: Optional[Child] = None
    child_created: bool = False


def _resolve_role(payload: RegisterRequest) -> UserRole:
    if payload.email.lower() in get_settings().get_admin_emails():
        return UserRole.admin
    if payload.role == UserRole.admin:
        # Admin accounts only come from the ADMIN_EMAILS bootstrap list
        return UserRole.parent
    return payload.role


async def register_user(db: AsyncSession, payload: RegisterRequest) -> RegistrationResult:
    """Create the account, then link-or-create its child if one was supplied.

    The account is committed before the child step. If the child step fails
    the account is deleted again and that deletion is committed, so a failed
    registration never leaves a parent behind.
    """
    role = _resolve_role(payload)
    if payload.child is not None:
        if role != UserRole.parent:
            raise ValidationError("Only parent accounts can register a child", reason="not_a_parent")
        # Fail fast on a malformed code before anything is written
        link_resolver.normalize_external_id(payload.child.external_id)

    try:
        async with db.begin_nested():
            user = await crud_user.create(
                db, obj_in=UserCreate(name=payload.name, email=payload.email, role=role)
            )
    except IntegrityError as exc:
        raise ConflictError("Email is already registered", reason="email_taken") from exc

    if payload.child is None:
        return RegistrationResult(user=user)

    await db.commit()
    user_id = user.id
    try:
        linked = await link_resolver.self_serve_link_or_create(
            db,
            user_id,
            payload.child.external_id,
            name_hint=payload.child.name,
            birth_date_hint=payload.child.birth_date,
        )
    except Exception as exc:
        # Any failure here, domain or storage, must not leave the account behind
        await db.rollback()
        await crud_user.hard_delete(db, user_id)
        await db.commit()
        logger.warning(
            "Registration of %s rolled back, child step failed: %s", payload.email, exc
        )
        raise

    return RegistrationResult(user=user, child=linked.child, child_created=linked.created)
