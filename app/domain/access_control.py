"""Access Control Engine

Stateless decisions about who sees which note and who may do what inside a
workspace. The caller's role is always passed in explicitly; nothing here
reads ambient state or performs I/O.

Note visibility for a viewer V with role R:

- own:    authored by V. Always visible, always manageable by V.
- team:   authored by someone else, no explicit share names V. Visible to
          owner/admin only, manageable by the owner only.
- shared: authored by someone else and explicitly shared with V, or (members
          only) blanket-shared. Read-only for V.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional

from app.core.errors import NotFound, Unauthorized
from app.domain.records import NoteRecord, Role


class NoteBucket(str, enum.Enum):
    OWN = "own"
    TEAM = "team"
    SHARED = "shared"


@dataclass(frozen=True)
class NotePermissions:
    can_view: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_share: bool = False


NO_ACCESS = NotePermissions()
READ_ONLY = NotePermissions(can_view=True)
FULL_ACCESS = NotePermissions(can_view=True, can_edit=True, can_delete=True, can_share=True)


@dataclass(frozen=True)
class NotePartition:
    own: List[NoteRecord]
    team: List[NoteRecord]
    shared: List[NoteRecord]

    @property
    def visible(self) -> List[NoteRecord]:
        return self.own + self.team + self.shared


def is_oversight_role(role: Role) -> bool:
    """Owners and admins get the workspace-wide view."""
    return role in (Role.OWNER, Role.ADMIN)


def classify_note(role: Role, viewer_id: uuid.UUID, note: NoteRecord) -> Optional[NoteBucket]:
    """Return the display bucket of ``note`` for the viewer, or None if hidden."""
    if note.author_id == viewer_id:
        return NoteBucket.OWN

    explicitly_shared = note.is_shared_with(viewer_id)

    if is_oversight_role(role):
        return NoteBucket.SHARED if explicitly_shared else NoteBucket.TEAM

    if explicitly_shared or note.is_shared:
        return NoteBucket.SHARED
    return None


def note_permissions(role: Role, viewer_id: uuid.UUID, note: NoteRecord) -> NotePermissions:
    bucket = classify_note(role, viewer_id, note)
    if bucket is None:
        return NO_ACCESS
    if bucket == NoteBucket.OWN:
        return FULL_ACCESS
    if bucket == NoteBucket.TEAM and role == Role.OWNER:
        return FULL_ACCESS
    return READ_ONLY


def partition_notes(role: Role, viewer_id: uuid.UUID, notes: Iterable[NoteRecord]) -> NotePartition:
    """Bucket a workspace's notes for one viewer. Input order is preserved per bucket."""
    buckets = {NoteBucket.OWN: [], NoteBucket.TEAM: [], NoteBucket.SHARED: []}
    for note in notes:
        bucket = classify_note(role, viewer_id, note)
        if bucket is not None:
            buckets[bucket].append(note)
    return NotePartition(
        own=buckets[NoteBucket.OWN],
        team=buckets[NoteBucket.TEAM],
        shared=buckets[NoteBucket.SHARED],
    )


def require_note_permission(role: Role, viewer_id: uuid.UUID, note: NoteRecord, action: str) -> NotePermissions:
    """
    Check that the viewer may perform ``action`` on ``note``.

    Actions: 'view', 'edit', 'delete', 'share'.
    A note the viewer cannot see is reported as missing so its existence does not leak.
    """
    permissions = note_permissions(role, viewer_id, note)
    if not permissions.can_view:
        raise NotFound("Note not found")
    if not getattr(permissions, f"can_{action}"):
        raise Unauthorized(f"You do not have permission to {action} this note")
    return permissions


def check_workspace_permission(role: Optional[Role], operation: str) -> None:
    """
    Check if a caller holding ``role`` in a workspace can perform the operation.

    Operations: 'read', 'create_note', 'invite', 'manage_members',
    'update_workspace', 'delete_workspace'.
    ``role`` is None when the caller has no active membership.

    Raises Unauthorized if denied. Returns None if allowed.
    """
    if role is None:
        raise Unauthorized("You are not a member of this workspace")

    # Read and note creation: every active member
    if operation in ("read", "create_note"):
        return

    # Invite flow: owner + admin
    if operation == "invite":
        if not is_oversight_role(role):
            raise Unauthorized("Only owners and admins can invite members")
        return

    # Role/status changes and removals: owner only
    if operation == "manage_members":
        if role != Role.OWNER:
            raise Unauthorized("Only the workspace owner can manage members")
        return

    if operation in ("update_workspace", "delete_workspace"):
        if role != Role.OWNER:
            raise Unauthorized("Only the workspace owner can modify or delete the workspace")
        return

    raise ValueError(f"Unknown workspace operation: {operation}")


def can_manage_members(role: Optional[Role]) -> bool:
    return role == Role.OWNER


def can_invite(role: Optional[Role]) -> bool:
    return role is not None and is_oversight_role(role)


def can_delete_workspace(role: Optional[Role]) -> bool:
    return role == Role.OWNER
