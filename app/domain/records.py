"""In-memory records

Immutable, fixed-shape records the access-control core operates on.
The store adapter builds them from ORM rows; nothing here touches the database.
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


class Role(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class MembershipStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING = "pending"      # modelled by the schema, never produced by invites
    INACTIVE = "inactive"


class PermissionLevel(str, enum.Enum):
    VIEW = "view"
    EDIT = "edit"


@dataclass(frozen=True)
class ProfileRecord:
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


@dataclass(frozen=True)
class ShareRecord:
    """One explicit grant of a note to one user."""
    note_id: uuid.UUID
    shared_with_user_id: uuid.UUID
    permission_level: PermissionLevel = PermissionLevel.VIEW


@dataclass(frozen=True)
class NoteRecord:
    id: uuid.UUID
    workspace_id: uuid.UUID
    author_id: uuid.UUID
    title: str
    content: str = ""
    is_shared: bool = False
    shared_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[ProfileRecord] = None
    shares: Tuple[ShareRecord, ...] = field(default_factory=tuple)

    def is_shared_with(self, user_id: uuid.UUID) -> bool:
        return any(share.shared_with_user_id == user_id for share in self.shares)


@dataclass(frozen=True)
class MemberRecord:
    """One user's membership in one workspace."""
    id: uuid.UUID
    workspace_id: uuid.UUID
    user_id: uuid.UUID
    role: Role
    status: MembershipStatus = MembershipStatus.ACTIVE
    invited_email: Optional[str] = None
    profile: Optional[ProfileRecord] = None

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE
