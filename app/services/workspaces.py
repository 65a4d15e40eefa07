import uuid
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound, Unauthorized, ValidationError
from app.core.logging_config import get_logger
from app.domain.access_control import check_workspace_permission
from app.domain.membership import owner_membership_fields
from app.domain.records import MemberRecord, Role
from app.models.membership import WorkspaceMember
from app.models.user import User
from app.models.workspace import Workspace
from app.services import store

logger = get_logger(__name__)


@dataclass(frozen=True)
class WorkspaceSummary:
    workspace: Workspace
    current_user_role: Role
    member_count: int


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Workspace name is required")
    return cleaned


async def create_workspace(
    db: AsyncSession, user: User, name: str, description: Optional[str] = None
) -> Workspace:
    """Create a workspace and its owner membership in one transaction."""
    name = _clean_name(name)
    profile = await store.ensure_profile(db, user)

    workspace = Workspace(name=name, description=description, owner_id=profile.id)
    db.add(workspace)
    await db.flush()

    fields = owner_membership_fields(profile.email)
    db.add(
        WorkspaceMember(
            workspace_id=workspace.id,
            user_id=profile.id,
            role=fields["role"].value,
            status=fields["status"].value,
            invited_email=fields["invited_email"],
        )
    )
    await store.commit(db)

    logger.info(
        "Workspace created",
        extra={"workspace_id": str(workspace.id), "owner_id": str(profile.id)},
    )
    return workspace


async def resolve_workspace_access(
    db: AsyncSession, workspace_id: uuid.UUID, user_id: uuid.UUID
) -> Tuple[Workspace, MemberRecord]:
    """The workspace plus the caller's active membership; role is recomputed on every call."""
    workspace = await store.get_workspace(db, workspace_id)
    if workspace is None:
        raise NotFound("Workspace not found")

    membership = await store.get_active_membership(db, workspace_id, user_id)
    if membership is None:
        raise Unauthorized("You are not a member of this workspace")
    return workspace, membership


async def list_user_workspaces(db: AsyncSession, user_id: uuid.UUID) -> List[WorkspaceSummary]:
    memberships = await store.list_active_memberships(db, user_id)
    if not memberships:
        return []

    roles = {membership.workspace_id: membership.role for membership in memberships}
    result = await db.execute(
        select(Workspace)
        .where(Workspace.id.in_(list(roles)))
        .order_by(Workspace.created_at.desc())
    )
    workspaces = result.scalars().all()
    counts = await store.count_active_members(db, list(roles))

    return [
        WorkspaceSummary(
            workspace=workspace,
            current_user_role=roles[workspace.id],
            member_count=counts.get(workspace.id, 0),
        )
        for workspace in workspaces
    ]


async def workspace_stats(db: AsyncSession, user_id: uuid.UUID) -> dict:
    """Dashboard counters: workspaces joined and distinct teammates across them."""
    memberships = await store.list_active_memberships(db, user_id)
    workspace_ids = [membership.workspace_id for membership in memberships]
    member_ids = await store.list_active_member_ids(db, workspace_ids)
    return {
        "workspace_count": len(workspace_ids),
        "unique_member_count": len(member_ids),
    }


async def update_workspace(
    db: AsyncSession,
    actor: MemberRecord,
    workspace: Workspace,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Workspace:
    check_workspace_permission(actor.role, "update_workspace")

    if name is not None:
        workspace.name = _clean_name(name)
    if description is not None:
        workspace.description = description
    await store.commit(db)

    logger.info("Workspace updated", extra={"workspace_id": str(workspace.id)})
    return workspace


async def delete_workspace(db: AsyncSession, actor: MemberRecord, workspace: Workspace) -> None:
    """Owner-only; memberships, notes and shares cascade in the store."""
    check_workspace_permission(actor.role, "delete_workspace")

    workspace_id = workspace.id
    await db.delete(workspace)
    await store.commit(db)

    logger.info(
        "Workspace deleted",
        extra={"workspace_id": str(workspace_id), "deleted_by": str(actor.user_id)},
    )
