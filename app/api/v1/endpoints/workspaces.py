from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import WorkspaceContext, get_workspace_context
from app.api.v1.endpoints.notes import note_to_response, partition_to_response
from app.core.database import get_db
from app.core.security import get_current_active_user
from app.domain.access_control import can_delete_workspace, can_invite
from app.models.user import User
from app.schemas.note import NoteCreate, NoteListResponse, NoteResponse
from app.schemas.workspace import (
    WorkspaceCreate,
    WorkspaceDetailResponse,
    WorkspaceResponse,
    WorkspaceStats,
    WorkspaceSummaryResponse,
    WorkspaceUpdate,
)
from app.services import notes as note_service
from app.services import workspaces as workspace_service

router = APIRouter()


def detail_response(ctx: WorkspaceContext) -> WorkspaceDetailResponse:
    workspace = WorkspaceResponse.model_validate(ctx.workspace)
    return WorkspaceDetailResponse(
        **workspace.model_dump(),
        current_user_role=ctx.role,
        can_manage_members=can_invite(ctx.role),
        can_delete=can_delete_workspace(ctx.role),
    )


@router.post("/", response_model=WorkspaceResponse, status_code=201)
async def create_workspace(
    workspace: WorkspaceCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a workspace owned by the current user"""
    return await workspace_service.create_workspace(
        db, current_user, workspace.name, workspace.description
    )


@router.get("/", response_model=List[WorkspaceSummaryResponse])
async def list_workspaces(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Workspaces the current user is an active member of"""
    summaries = await workspace_service.list_user_workspaces(db, current_user.id)
    return [
        WorkspaceSummaryResponse(
            **WorkspaceResponse.model_validate(summary.workspace).model_dump(),
            current_user_role=summary.current_user_role,
            member_count=summary.member_count,
        )
        for summary in summaries
    ]


@router.get("/stats", response_model=WorkspaceStats)
async def get_workspace_stats(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Dashboard counters for the current user"""
    return await workspace_service.workspace_stats(db, current_user.id)


@router.get("/{workspace_id}", response_model=WorkspaceDetailResponse)
async def get_workspace(ctx: WorkspaceContext = Depends(get_workspace_context)):
    """Get a workspace with the current user's role and capabilities"""
    return detail_response(ctx)


@router.patch("/{workspace_id}", response_model=WorkspaceDetailResponse)
async def update_workspace(
    update: WorkspaceUpdate,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """Rename or describe a workspace (owner only)"""
    await workspace_service.update_workspace(
        db, ctx.membership, ctx.workspace, update.name, update.description
    )
    return detail_response(ctx)


@router.delete("/{workspace_id}")
async def delete_workspace(
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """Delete a workspace with all its members and notes (owner only)"""
    await workspace_service.delete_workspace(db, ctx.membership, ctx.workspace)
    return {"message": "Workspace deleted"}


@router.get("/{workspace_id}/notes", response_model=NoteListResponse)
async def list_workspace_notes(
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """The workspace's notes split into own, team and shared for the current user"""
    partition = await note_service.list_workspace_notes(db, ctx.membership)
    return partition_to_response(ctx.membership, partition)


@router.post("/{workspace_id}/notes", response_model=NoteResponse, status_code=201)
async def create_note(
    note: NoteCreate,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """Create a note in the workspace"""
    access = await note_service.create_note(
        db, ctx.membership, note.title, note.content, note.is_shared
    )
    return note_to_response(access.note, access.permissions)
