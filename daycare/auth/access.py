"""Child-scoped authorization.

Admins pass unconditionally, parents pass when they own the child, everyone
else is refused. Report access is always decided through the report's child.
"""

import logging
from typing import Union

from sqlalchemy.ext.asyncio import AsyncSession

from daycare.crud import crud_child, crud_user
from daycare.errors import ForbiddenError, NotFoundError
from daycare.models.child import Child
from daycare.models.report import DailyReport, MonthlyReport
from daycare.models.user import User, UserRole
from daycare.services.ownership import owns

logger = logging.getLogger(__name__)


def can_access_child(user: User, child: Child) -> bool:
    if user.role == UserRole.admin:
        return True
    if user.role == UserRole.parent:
        return owns(user.id, child)
    return False


async def resolve_user(db: AsyncSession, user_id: int) -> User | None:
    return await crud_user.get(db, user_id)


async def ensure_child_access(db: AsyncSession, user: User, child_id: int) -> Child:
    """Return the child, or raise NotFoundError / ForbiddenError."""
    child = await crud_child.get(db, child_id)
    if child is None:
        raise NotFoundError("Child not found")
    if not can_access_child(user, child):
        logger.info("User %d denied access to child %d", user.id, child_id)
        raise ForbiddenError("Not authorized to access this child")
    return child


async def ensure_report_access(
    db: AsyncSession, user: User, report: Union[DailyReport, MonthlyReport]
) -> Child:
    return await ensure_child_access(db, user, report.child_id)
