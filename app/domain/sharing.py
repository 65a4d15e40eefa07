"""Note Sharing Lifecycle Manager

Two write paths touch a note's sharing state: the blanket ``is_shared`` toggle
(create/edit) and explicit per-user grants. Granting always leaves the note
blanket-shared; revoking never clears the flag, even when no grant remains.
"""

import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from app.core.errors import NotFound, ValidationError
from app.domain.records import MemberRecord, NoteRecord


def resolve_shared_at(
    was_shared: bool,
    previous_shared_at: Optional[datetime],
    is_shared: bool,
    now: datetime,
) -> Optional[datetime]:
    """``shared_at`` after a toggle: stamped on false->true, kept on true->true, cleared on ->false."""
    if not is_shared:
        return None
    if was_shared:
        return previous_shared_at
    return now


def blanket_state_after_grant(note: NoteRecord, now: datetime) -> Tuple[bool, Optional[datetime]]:
    """(is_shared, shared_at) once an explicit grant lands on ``note``."""
    return True, resolve_shared_at(note.is_shared, note.shared_at, True, now)


def available_share_targets(note: NoteRecord, members: Iterable[MemberRecord]) -> List[MemberRecord]:
    """Active members who are neither the author nor already holding a grant."""
    return [
        member for member in members
        if member.is_active
        and member.user_id != note.author_id
        and not note.is_shared_with(member.user_id)
    ]


def check_share_target(note: NoteRecord, target_user_id: uuid.UUID, target: Optional[MemberRecord]) -> None:
    """The grant target must be an active member of the note's workspace other than the author."""
    if target_user_id == note.author_id:
        raise ValidationError("A note cannot be shared with its author")
    if target is None or not target.is_active or target.workspace_id != note.workspace_id:
        raise NotFound("User is not an active member of this workspace")


def find_share(note: NoteRecord, user_id: uuid.UUID):
    for share in note.shares:
        if share.shared_with_user_id == user_id:
            return share
    raise NotFound("Share not found")
