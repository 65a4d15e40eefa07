"""Tests for note visibility and workspace permissions across roles.

Covers:
- Own notes: always visible and manageable, never team/shared
- Members: see others' notes only when blanket-shared or explicitly shared
- Owner/admin: team vs shared split decided by explicit shares only
- Team notes manageable by the owner only, shared notes read-only for everyone
- Workspace operations per role
"""
import uuid

import pytest

from app.core.errors import NotFound, Unauthorized
from app.domain.access_control import (
    FULL_ACCESS,
    NO_ACCESS,
    READ_ONLY,
    NoteBucket,
    check_workspace_permission,
    classify_note,
    note_permissions,
    partition_notes,
    require_note_permission,
)
from app.domain.records import NoteRecord, Role, ShareRecord


VIEWER = uuid.uuid4()
COLLEAGUE = uuid.uuid4()
WORKSPACE = uuid.uuid4()


# --- Fixtures ---

def _note(author=COLLEAGUE, is_shared=False, shared_with=()) -> NoteRecord:
    note_id = uuid.uuid4()
    return NoteRecord(
        id=note_id,
        workspace_id=WORKSPACE,
        author_id=author,
        title="Quarterly plan",
        is_shared=is_shared,
        shares=tuple(ShareRecord(note_id=note_id, shared_with_user_id=user) for user in shared_with),
    )


ALL_ROLES = [Role.OWNER, Role.ADMIN, Role.MEMBER]


# --- Own notes ---

class TestOwnNotes:

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_own_note_is_always_own(self, role):
        note = _note(author=VIEWER)
        assert classify_note(role, VIEWER, note) == NoteBucket.OWN

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_own_note_stays_own_when_shared_with_others(self, role):
        note = _note(author=VIEWER, is_shared=True, shared_with=[COLLEAGUE])
        partition = partition_notes(role, VIEWER, [note])
        assert partition.own == [note]
        assert partition.team == []
        assert partition.shared == []

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_own_note_fully_manageable(self, role):
        assert note_permissions(role, VIEWER, _note(author=VIEWER)) == FULL_ACCESS


# --- Member visibility ---

class TestMemberVisibility:

    def test_private_colleague_note_hidden(self):
        note = _note()
        assert classify_note(Role.MEMBER, VIEWER, note) is None
        assert note_permissions(Role.MEMBER, VIEWER, note) == NO_ACCESS

    def test_blanket_shared_note_visible_as_shared(self):
        note = _note(is_shared=True)
        assert classify_note(Role.MEMBER, VIEWER, note) == NoteBucket.SHARED

    def test_explicitly_shared_note_visible_as_shared(self):
        note = _note(shared_with=[VIEWER])
        assert classify_note(Role.MEMBER, VIEWER, note) == NoteBucket.SHARED

    def test_share_naming_someone_else_does_not_reveal(self):
        note = _note(shared_with=[uuid.uuid4()])
        assert classify_note(Role.MEMBER, VIEWER, note) is None

    def test_shared_note_is_read_only(self):
        note = _note(is_shared=True, shared_with=[VIEWER])
        assert note_permissions(Role.MEMBER, VIEWER, note) == READ_ONLY

    def test_member_never_gets_team_bucket(self):
        notes = [_note(), _note(is_shared=True), _note(shared_with=[VIEWER])]
        partition = partition_notes(Role.MEMBER, VIEWER, notes)
        assert partition.team == []
        assert len(partition.shared) == 2

    @pytest.mark.parametrize("is_shared", [True, False])
    @pytest.mark.parametrize("explicit", [True, False])
    def test_visible_iff_blanket_or_explicit(self, is_shared, explicit):
        note = _note(is_shared=is_shared, shared_with=[VIEWER] if explicit else [])
        visible = note_permissions(Role.MEMBER, VIEWER, note).can_view
        assert visible == (is_shared or explicit)


# --- Owner / admin visibility ---

class TestOversightVisibility:

    @pytest.mark.parametrize("role", [Role.OWNER, Role.ADMIN])
    def test_private_colleague_note_in_team(self, role):
        assert classify_note(role, VIEWER, _note()) == NoteBucket.TEAM

    @pytest.mark.parametrize("role", [Role.OWNER, Role.ADMIN])
    def test_blanket_shared_without_explicit_share_in_team(self, role):
        assert classify_note(role, VIEWER, _note(is_shared=True)) == NoteBucket.TEAM

    @pytest.mark.parametrize("role", [Role.OWNER, Role.ADMIN])
    def test_explicit_share_moves_note_to_shared(self, role):
        note = _note(is_shared=True, shared_with=[VIEWER])
        partition = partition_notes(role, VIEWER, [note])
        assert partition.shared == [note]
        assert partition.team == []

    def test_owner_manages_team_notes(self):
        assert note_permissions(Role.OWNER, VIEWER, _note()) == FULL_ACCESS

    def test_admin_reads_team_notes_only(self):
        assert note_permissions(Role.ADMIN, VIEWER, _note()) == READ_ONLY

    @pytest.mark.parametrize("role", [Role.OWNER, Role.ADMIN])
    def test_explicitly_shared_note_read_only_even_for_owner(self, role):
        note = _note(shared_with=[VIEWER])
        assert note_permissions(role, VIEWER, note) == READ_ONLY


# --- Partition ---

class TestPartition:

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_buckets_are_disjoint(self, role):
        notes = [
            _note(author=VIEWER),
            _note(author=VIEWER, shared_with=[COLLEAGUE]),
            _note(),
            _note(is_shared=True),
            _note(shared_with=[VIEWER]),
            _note(is_shared=True, shared_with=[VIEWER, COLLEAGUE]),
        ]
        partition = partition_notes(role, VIEWER, notes)
        ids = [note.id for note in partition.visible]
        assert len(ids) == len(set(ids))
        assert {note.id for note in partition.own} == {notes[0].id, notes[1].id}

    def test_order_preserved_within_bucket(self):
        first, second = _note(author=VIEWER), _note(author=VIEWER)
        partition = partition_notes(Role.MEMBER, VIEWER, [first, second])
        assert partition.own == [first, second]


# --- require_note_permission ---

class TestRequireNotePermission:

    def test_hidden_note_reported_missing(self):
        with pytest.raises(NotFound):
            require_note_permission(Role.MEMBER, VIEWER, _note(), "view")

    def test_read_only_note_cannot_be_edited(self):
        with pytest.raises(Unauthorized) as exc_info:
            require_note_permission(Role.MEMBER, VIEWER, _note(is_shared=True), "edit")
        assert "edit" in exc_info.value.detail

    def test_admin_cannot_delete_team_note(self):
        with pytest.raises(Unauthorized):
            require_note_permission(Role.ADMIN, VIEWER, _note(), "delete")

    def test_owner_can_share_team_note(self):
        permissions = require_note_permission(Role.OWNER, VIEWER, _note(), "share")
        assert permissions.can_share


# --- Workspace operations ---

class TestWorkspacePermissions:

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_every_member_can_read_and_create_notes(self, role):
        check_workspace_permission(role, "read")
        check_workspace_permission(role, "create_note")

    def test_non_member_denied(self):
        with pytest.raises(Unauthorized) as exc_info:
            check_workspace_permission(None, "read")
        assert exc_info.value.status_code == 403

    @pytest.mark.parametrize("role", [Role.OWNER, Role.ADMIN])
    def test_owner_and_admin_can_invite(self, role):
        check_workspace_permission(role, "invite")

    def test_member_cannot_invite(self):
        with pytest.raises(Unauthorized):
            check_workspace_permission(Role.MEMBER, "invite")

    @pytest.mark.parametrize("operation", ["manage_members", "update_workspace", "delete_workspace"])
    def test_owner_only_operations(self, operation):
        check_workspace_permission(Role.OWNER, operation)
        for role in (Role.ADMIN, Role.MEMBER):
            with pytest.raises(Unauthorized):
                check_workspace_permission(role, operation)

    def test_unknown_operation_is_a_programming_error(self):
        with pytest.raises(ValueError):
            check_workspace_permission(Role.OWNER, "archive")
