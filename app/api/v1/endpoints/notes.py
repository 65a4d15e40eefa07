import uuid
from dataclasses import asdict
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_active_user
from app.domain.access_control import NotePartition, NotePermissions, note_permissions
from app.domain.records import MemberRecord, NoteRecord
from app.models.user import User
from app.schemas.note import (
    NoteListResponse,
    NoteResponse,
    NoteShareCreate,
    NoteUpdate,
)
from app.schemas.workspace import MemberResponse
from app.services import notes as note_service
from app.api.v1.endpoints.members import member_to_response

router = APIRouter()


def note_to_response(note: NoteRecord, permissions: NotePermissions) -> NoteResponse:
    """Convert a note record and the viewer's permissions to the API shape"""
    return NoteResponse(
        id=note.id,
        workspace_id=note.workspace_id,
        author_id=note.author_id,
        author=asdict(note.author) if note.author else None,
        title=note.title,
        content=note.content,
        is_shared=note.is_shared,
        shared_at=note.shared_at,
        shares=[asdict(share) for share in note.shares],
        permissions=asdict(permissions),
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def partition_to_response(viewer: MemberRecord, partition: NotePartition) -> NoteListResponse:
    def convert(notes):
        return [
            note_to_response(note, note_permissions(viewer.role, viewer.user_id, note))
            for note in notes
        ]

    return NoteListResponse(
        own=convert(partition.own),
        team=convert(partition.team),
        shared=convert(partition.shared),
    )


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a specific note the current user can see"""
    access = await note_service.get_note_access(db, current_user.id, note_id)
    return note_to_response(access.note, access.permissions)


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: uuid.UUID,
    note_update: NoteUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Update a note (author, or the workspace owner for team notes)"""
    update_data = note_update.model_dump(exclude_unset=True)
    access = await note_service.update_note(db, current_user.id, note_id, **update_data)
    return note_to_response(access.note, access.permissions)


@router.delete("/{note_id}")
async def delete_note(
    note_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a note (author, or the workspace owner for team notes)"""
    await note_service.delete_note(db, current_user.id, note_id)
    return {"message": "Note deleted successfully"}


@router.get("/{note_id}/share-targets", response_model=List[MemberResponse])
async def get_share_targets(
    note_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Members the note can still be shared with"""
    members = await note_service.list_share_targets(db, current_user.id, note_id)
    return [member_to_response(member, current_user.id) for member in members]


@router.post("/{note_id}/shares", response_model=NoteResponse, status_code=201)
async def share_note(
    note_id: uuid.UUID,
    share: NoteShareCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Share a note with a workspace member"""
    access = await note_service.grant_share(
        db, current_user.id, note_id, share.user_id, share.permission_level
    )
    return note_to_response(access.note, access.permissions)


@router.delete("/{note_id}/shares/{user_id}", response_model=NoteResponse)
async def unshare_note(
    note_id: uuid.UUID,
    user_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove sharing of a note with a user"""
    access = await note_service.revoke_share(db, current_user.id, note_id, user_id)
    return note_to_response(access.note, access.permissions)
