"""Parent/child linking endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.api.v1.deps import require_admin, require_parent
from daycare.database import get_db
from daycare.models.user import User
from daycare.schemas.child import ChildResponse
from daycare.schemas.link import (
    LinkChildrenRequest,
    LinkChildrenResponse,
    SelfServeLinkRequest,
    SelfServeLinkResponse,
)
from daycare.services import link_resolver

router = APIRouter(prefix="/parents", tags=["parents"])


@router.post("/link-child", response_model=SelfServeLinkResponse)
async def link_child(
    body: SelfServeLinkRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent)],
):
    """Link the calling parent to a child by its code, creating the child if new."""
    result = await link_resolver.self_serve_link_or_create(
        db, user.id, body.external_id, name_hint=body.name, birth_date_hint=body.birth_date
    )
    response.status_code = 201 if result.created else 200
    return SelfServeLinkResponse(
        created=result.created, child=ChildResponse.model_validate(result.child)
    )


@router.post("/{parent_id}/link-children", response_model=LinkChildrenResponse)
async def link_children(
    parent_id: int,
    body: LinkChildrenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
):
    result = await link_resolver.administrative_link(db, parent_id, body.child_ids)
    return LinkChildrenResponse(matched=result.matched, modified=result.modified)


@router.post("/{parent_id}/unlink-children", response_model=LinkChildrenResponse)
async def unlink_children(
    parent_id: int,
    body: LinkChildrenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
):
    result = await link_resolver.administrative_unlink(db, parent_id, body.child_ids)
    return LinkChildrenResponse(matched=result.matched, modified=result.modified)
