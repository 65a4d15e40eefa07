from .records import (
    MemberRecord,
    MembershipStatus,
    NoteRecord,
    PermissionLevel,
    ProfileRecord,
    Role,
    ShareRecord,
)
from .access_control import (
    NoteBucket,
    NotePartition,
    NotePermissions,
    check_workspace_permission,
    classify_note,
    note_permissions,
    partition_notes,
    require_note_permission,
)

__all__ = [
    "MemberRecord", "MembershipStatus", "NoteRecord", "PermissionLevel",
    "ProfileRecord", "Role", "ShareRecord",
    "NoteBucket", "NotePartition", "NotePermissions",
    "check_workspace_permission", "classify_note", "note_permissions",
    "partition_notes", "require_note_permission",
]
