"""Kick router - API endpoints for kicks and their comments."""
from fastapi import APIRouter, Depends, status

from app.database import get_database
from app.dependencies import CurrentIdentity, SettingsDep, get_current_identity
from app.models.kick import (
    Comment,
    CommentText,
    Kick,
    KickCreate,
    KickStatusUpdate,
    KickUpdate,
    MessageResponse,
)
from app.services.comment_service import CommentService
from app.services.kick_service import KickService


# Every kick route sits behind the authentication gate
router = APIRouter(
    prefix="/kicks",
    tags=["kicks"],
    dependencies=[Depends(get_current_identity)],
)


def kick_service(db, settings) -> KickService:
    return KickService(
        db,
        description_required=settings.kick_description_required,
        restrict_reads_to_owner=settings.restrict_kick_reads_to_owner,
    )


@router.post("", response_model=Kick, status_code=status.HTTP_201_CREATED)
async def create_kick(
    kick: KickCreate,
    identity: CurrentIdentity,
    settings: SettingsDep,
    db=Depends(get_database),
):
    """
    Create a new kick.

    - Requires authentication
    - Owner is always the caller
    - Status defaults to Open
    """
    service = kick_service(db, settings)
    return await service.create_kick(owner_id=identity.user_id, kick_create=kick)


@router.get("", response_model=list[Kick])
async def list_kicks(
    identity: CurrentIdentity,
    settings: SettingsDep,
    db=Depends(get_database),
):
    """
    List the caller's kicks, newest first.
    """
    service = kick_service(db, settings)
    return await service.list_kicks(owner_id=identity.user_id)


@router.get("/{kick_id}", response_model=Kick)
async def get_kick(
    kick_id: str,
    identity: CurrentIdentity,
    settings: SettingsDep,
    db=Depends(get_database),
):
    """
    Get a single kick with its comments.

    - Returns 400 for a malformed id, 404 if the kick does not exist
    """
    service = kick_service(db, settings)
    return await service.get_kick(kick_id=kick_id, caller_id=identity.user_id)


@router.put("/{kick_id}", response_model=Kick)
async def update_kick(
    kick_id: str,
    kick_update: KickUpdate,
    identity: CurrentIdentity,
    settings: SettingsDep,
    db=Depends(get_database),
):
    """
    Update any subset of a kick's fields.

    - Owner only (403 otherwise)
    - Returns 400 if no field is supplied
    """
    service = kick_service(db, settings)
    return await service.update_kick(
        kick_id=kick_id,
        caller_id=identity.user_id,
        kick_update=kick_update,
    )


@router.patch("/{kick_id}/status", response_model=Kick)
async def update_kick_status(
    kick_id: str,
    body: KickStatusUpdate,
    identity: CurrentIdentity,
    settings: SettingsDep,
    db=Depends(get_database),
):
    """
    Mark a kick Open or Completed. Owner only.
    """
    service = kick_service(db, settings)
    return await service.update_status(
        kick_id=kick_id,
        caller_id=identity.user_id,
        status=body.status,
    )


@router.delete("/{kick_id}", response_model=MessageResponse)
async def delete_kick(
    kick_id: str,
    identity: CurrentIdentity,
    settings: SettingsDep,
    db=Depends(get_database),
):
    """
    Delete a kick and all of its comments. Owner only.
    """
    service = kick_service(db, settings)
    return await service.delete_kick(kick_id=kick_id, caller_id=identity.user_id)


@router.post(
    "/{kick_id}/comments",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    kick_id: str,
    body: CommentText,
    identity: CurrentIdentity,
    db=Depends(get_database),
):
    """
    Comment on a kick.

    - Any authenticated user may comment, not just the owner
    """
    service = CommentService(db)
    return await service.add_comment(kick_id=kick_id, author_id=identity.user_id, body=body)


@router.put("/{kick_id}/comments/{comment_id}", response_model=Comment)
async def update_comment(
    kick_id: str,
    comment_id: str,
    body: CommentText,
    identity: CurrentIdentity,
    db=Depends(get_database),
):
    """
    Edit a comment's text. Comment author only.
    """
    service = CommentService(db)
    return await service.update_comment(
        kick_id=kick_id,
        comment_id=comment_id,
        caller_id=identity.user_id,
        body=body,
    )


@router.delete("/{kick_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    kick_id: str,
    comment_id: str,
    identity: CurrentIdentity,
    db=Depends(get_database),
):
    """
    Delete a comment. Comment author only.
    """
    service = CommentService(db)
    return await service.delete_comment(
        kick_id=kick_id,
        comment_id=comment_id,
        caller_id=identity.user_id,
    )
