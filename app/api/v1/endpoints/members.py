import uuid
from dataclasses import asdict
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import WorkspaceContext, get_workspace_context
from app.core.database import get_db
from app.domain.access_control import can_manage_members
from app.domain.records import MemberRecord, Role
from app.schemas.workspace import (
    MemberInvite,
    MemberResponse,
    MemberRoleUpdate,
    MemberStatusUpdate,
)
from app.services import members as member_service

router = APIRouter()


def member_to_response(member: MemberRecord, current_user_id: uuid.UUID, viewer_role: Role = None) -> MemberResponse:
    is_current_user = member.user_id == current_user_id
    return MemberResponse(
        id=member.id,
        workspace_id=member.workspace_id,
        user_id=member.user_id,
        role=member.role,
        status=member.status,
        invited_email=member.invited_email,
        profile=asdict(member.profile) if member.profile else None,
        is_current_user=is_current_user,
        # Owners manage everyone except themselves
        can_manage=can_manage_members(viewer_role) and not is_current_user,
    )


@router.get("/{workspace_id}/members", response_model=List[MemberResponse])
async def list_members(
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """List the active members of a workspace"""
    members = await member_service.list_members(db, ctx.membership)
    return [member_to_response(member, ctx.user.id, ctx.role) for member in members]


@router.post("/{workspace_id}/members", response_model=MemberResponse, status_code=201)
async def invite_member(
    invite: MemberInvite,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """Invite an existing user by email (owner/admin; admin role owner-only)"""
    member = await member_service.invite_member(db, ctx.membership, invite.email, invite.role)
    return member_to_response(member, ctx.user.id, ctx.role)


@router.patch("/{workspace_id}/members/{member_id}", response_model=MemberResponse)
async def change_member_role(
    member_id: uuid.UUID,
    update: MemberRoleUpdate,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """Change a member's role (owner only, never on themselves)"""
    member = await member_service.change_role(db, ctx.membership, member_id, update.role)
    return member_to_response(member, ctx.user.id, ctx.role)


@router.patch("/{workspace_id}/members/{member_id}/status", response_model=MemberResponse)
async def change_member_status(
    member_id: uuid.UUID,
    update: MemberStatusUpdate,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """Activate or deactivate a member (owner only, never on themselves)"""
    member = await member_service.change_status(db, ctx.membership, member_id, update.status)
    return member_to_response(member, ctx.user.id, ctx.role)


@router.delete("/{workspace_id}/members/{member_id}")
async def remove_member(
    member_id: uuid.UUID,
    ctx: WorkspaceContext = Depends(get_workspace_context),
    db: AsyncSession = Depends(get_db)
):
    """Remove a member from the workspace (owner only, never themselves)"""
    await member_service.remove_member(db, ctx.membership, member_id)
    return {"message": "Member removed from the workspace"}
