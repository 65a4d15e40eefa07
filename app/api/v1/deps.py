import uuid
from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_active_user
from app.domain.records import MemberRecord
from app.models.user import User
from app.models.workspace import Workspace
from app.services.workspaces import resolve_workspace_access


@dataclass(frozen=True)
class WorkspaceContext:
    """Resolved per request: the workspace and the caller's active membership in it."""
    user: User
    workspace: Workspace
    membership: MemberRecord

    @property
    def role(self):
        return self.membership.role


async def get_workspace_context(
    workspace_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> WorkspaceContext:
    workspace, membership = await resolve_workspace_access(db, workspace_id, current_user.id)
    return WorkspaceContext(user=current_user, workspace=workspace, membership=membership)
