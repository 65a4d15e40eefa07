import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import utc_now
from app.core.errors import AppError, DuplicateShare, NotFound, ValidationError
from app.core.logging_config import get_logger
from app.domain.access_control import (
    NotePartition,
    NotePermissions,
    check_workspace_permission,
    note_permissions,
    partition_notes,
    require_note_permission,
)
from app.domain.records import MemberRecord, NoteRecord, PermissionLevel
from app.domain.sharing import (
    available_share_targets,
    blanket_state_after_grant,
    check_share_target,
    find_share,
    resolve_shared_at,
)
from app.models.note import Note
from app.models.note_share import NoteShare
from app.services import store

logger = get_logger(__name__)


@dataclass(frozen=True)
class NoteAccess:
    """A note together with the viewer's membership and resulting permissions."""
    note: NoteRecord
    viewer: MemberRecord
    permissions: NotePermissions


def _clean_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Note title is required")
    return cleaned


async def list_workspace_notes(db: AsyncSession, viewer: MemberRecord) -> NotePartition:
    check_workspace_permission(viewer.role, "read")
    notes = await store.list_notes(db, viewer.workspace_id)
    return partition_notes(viewer.role, viewer.user_id, notes)


async def get_note_access(
    db: AsyncSession, user_id: uuid.UUID, note_id: uuid.UUID, action: str = "view"
) -> NoteAccess:
    """Load a note for a user who must be an active member of its workspace."""
    note = await store.get_note(db, note_id)
    if note is None:
        raise NotFound("Note not found")

    viewer = await store.get_active_membership(db, note.workspace_id, user_id)
    if viewer is None:
        raise NotFound("Note not found")

    try:
        permissions = require_note_permission(viewer.role, user_id, note, action)
    except AppError as e:
        logger.warning(
            f"Note {action} rejected: {e.detail}",
            extra={"note_id": str(note_id), "user_id": str(user_id)},
        )
        raise
    return NoteAccess(note=note, viewer=viewer, permissions=permissions)


async def _reload(db: AsyncSession, viewer: MemberRecord, note_id: uuid.UUID) -> NoteAccess:
    note = await store.get_note(db, note_id)
    return NoteAccess(
        note=note,
        viewer=viewer,
        permissions=note_permissions(viewer.role, viewer.user_id, note),
    )


async def create_note(
    db: AsyncSession, author: MemberRecord, title: str, content: str = "", is_shared: bool = False
) -> NoteAccess:
    check_workspace_permission(author.role, "create_note")
    title = _clean_title(title)

    note = Note(
        workspace_id=author.workspace_id,
        author_id=author.user_id,
        title=title,
        content=content or "",
        is_shared=is_shared,
        shared_at=resolve_shared_at(False, None, is_shared, utc_now()),
    )
    db.add(note)
    await store.commit(db)

    logger.info(
        "Note created",
        extra={"note_id": str(note.id), "workspace_id": str(author.workspace_id), "is_shared": is_shared},
    )
    return await _reload(db, author, note.id)


async def update_note(
    db: AsyncSession,
    user_id: uuid.UUID,
    note_id: uuid.UUID,
    title: Optional[str] = None,
    content: Optional[str] = None,
    is_shared: Optional[bool] = None,
) -> NoteAccess:
    access = await get_note_access(db, user_id, note_id, "edit")
    note = await store.get_note_row(db, note_id)

    if title is not None:
        note.title = _clean_title(title)
    if content is not None:
        note.content = content
    if is_shared is not None:
        note.shared_at = resolve_shared_at(note.is_shared, note.shared_at, is_shared, utc_now())
        note.is_shared = is_shared
    note.updated_at = utc_now()
    await store.commit(db)

    logger.info("Note updated", extra={"note_id": str(note_id), "updated_by": str(user_id)})
    return await _reload(db, access.viewer, note_id)


async def delete_note(db: AsyncSession, user_id: uuid.UUID, note_id: uuid.UUID) -> None:
    await get_note_access(db, user_id, note_id, "delete")
    note = await store.get_note_row(db, note_id)

    await db.delete(note)
    await store.commit(db)

    logger.info("Note deleted", extra={"note_id": str(note_id), "deleted_by": str(user_id)})


async def list_share_targets(db: AsyncSession, user_id: uuid.UUID, note_id: uuid.UUID) -> List[MemberRecord]:
    access = await get_note_access(db, user_id, note_id, "share")
    members = await store.list_members(db, access.note.workspace_id)
    return available_share_targets(access.note, members)


async def grant_share(
    db: AsyncSession,
    user_id: uuid.UUID,
    note_id: uuid.UUID,
    target_user_id: uuid.UUID,
    permission_level: PermissionLevel = PermissionLevel.VIEW,
) -> NoteAccess:
    """
    Share a note with one member.

    The blanket flag flip and the share insert are committed together, so a
    failed insert leaves the note exactly as it was.
    """
    access = await get_note_access(db, user_id, note_id, "share")
    target = await store.get_active_membership(db, access.note.workspace_id, target_user_id)
    try:
        check_share_target(access.note, target_user_id, target)
    except AppError as e:
        logger.warning(f"Share rejected: {e.detail}", extra={"note_id": str(note_id)})
        raise

    note = await store.get_note_row(db, note_id)
    note.is_shared, note.shared_at = blanket_state_after_grant(access.note, utc_now())
    db.add(
        NoteShare(
            note_id=note_id,
            shared_with_user_id=target_user_id,
            permission_level=permission_level.value,
        )
    )
    # Double grants are left to the (note, user) uniqueness constraint
    await store.commit(db, DuplicateShare)

    logger.info(
        "Note shared",
        extra={
            "note_id": str(note_id),
            "shared_with": str(target_user_id),
            "permission_level": permission_level.value,
        },
    )
    return await _reload(db, access.viewer, note_id)


async def revoke_share(
    db: AsyncSession, user_id: uuid.UUID, note_id: uuid.UUID, target_user_id: uuid.UUID
) -> NoteAccess:
    """Delete one explicit share. The note's blanket flag is left untouched."""
    access = await get_note_access(db, user_id, note_id, "share")
    find_share(access.note, target_user_id)

    await db.execute(
        delete(NoteShare).where(
            NoteShare.note_id == note_id,
            NoteShare.shared_with_user_id == target_user_id,
        )
    )
    await store.commit(db)

    logger.info(
        "Note share removed",
        extra={"note_id": str(note_id), "shared_with": str(target_user_id)},
    )
    return await _reload(db, access.viewer, note_id)
