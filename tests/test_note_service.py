"""Note visibility and sharing through the services, end to end against SQLite."""
import uuid

import pytest

from app.core.errors import DuplicateShare, NotFound, Unauthorized, ValidationError
from app.domain.records import PermissionLevel, Role
from app.services import members as member_service
from app.services import notes as note_service
from app.services import store
from app.services import workspaces as workspace_service


@pytest.fixture
async def team(db, make_user):
    """Workspace with an owner, an admin and two plain members."""
    owner = await make_user("owner@example.com", "Olivia")
    await make_user("admin@example.com", "Adam")
    await make_user("mia@example.com", "Mia")
    await make_user("max@example.com", "Max")

    workspace = await workspace_service.create_workspace(db, owner, "Team")
    owner_member = await store.get_active_membership(db, workspace.id, owner.id)
    return {
        "workspace": workspace,
        "owner": owner_member,
        "admin": await member_service.invite_member(db, owner_member, "admin@example.com", Role.ADMIN),
        "mia": await member_service.invite_member(db, owner_member, "mia@example.com", Role.MEMBER),
        "max": await member_service.invite_member(db, owner_member, "max@example.com", Role.MEMBER),
    }


def _ids(notes):
    return [note.id for note in notes]


class TestOwnerSharesWithMember:

    async def test_grant_reveals_and_revoke_keeps_blanket_flag(self, db, team):
        owner, mia = team["owner"], team["mia"]
        created = await note_service.create_note(db, owner, "n1", "quarterly numbers")
        note_id = created.note.id
        assert created.note.is_shared is False
        assert created.note.shared_at is None

        partition = await note_service.list_workspace_notes(db, mia)
        assert note_id not in _ids(partition.visible)
        with pytest.raises(NotFound):
            await note_service.get_note_access(db, mia.user_id, note_id)

        shared = await note_service.grant_share(db, owner.user_id, note_id, mia.user_id)
        assert shared.note.is_shared is True
        assert shared.note.shared_at is not None
        assert shared.note.is_shared_with(mia.user_id)

        partition = await note_service.list_workspace_notes(db, mia)
        assert _ids(partition.shared) == [note_id]

        revoked = await note_service.revoke_share(db, owner.user_id, note_id, mia.user_id)
        assert not revoked.note.is_shared_with(mia.user_id)
        assert revoked.note.is_shared is True
        assert revoked.note.shared_at is not None

    async def test_explicit_share_moves_note_from_team_to_shared_for_admin(self, db, team):
        mia, admin = team["mia"], team["admin"]
        created = await note_service.create_note(db, mia, "Draft")

        partition = await note_service.list_workspace_notes(db, admin)
        assert _ids(partition.team) == [created.note.id]

        await note_service.grant_share(db, mia.user_id, created.note.id, admin.user_id)
        partition = await note_service.list_workspace_notes(db, admin)
        assert partition.team == []
        assert _ids(partition.shared) == [created.note.id]


class TestMemberBroadcastsNote:

    async def test_blanket_shared_note_visible_to_everyone(self, db, team):
        mia = team["mia"]
        created = await note_service.create_note(db, mia, "n2", "hello all", is_shared=True)
        note_id = created.note.id
        assert created.note.shared_at is not None

        assert _ids((await note_service.list_workspace_notes(db, mia)).own) == [note_id]
        assert _ids((await note_service.list_workspace_notes(db, team["max"])).shared) == [note_id]
        # No explicit share names owner or admin, so it is a team note for them
        assert _ids((await note_service.list_workspace_notes(db, team["owner"])).team) == [note_id]
        assert _ids((await note_service.list_workspace_notes(db, team["admin"])).team) == [note_id]

    async def test_private_note_hidden_from_other_members(self, db, team):
        created = await note_service.create_note(db, team["mia"], "Private")
        partition = await note_service.list_workspace_notes(db, team["max"])
        assert created.note.id not in _ids(partition.visible)


class TestBlanketToggle:

    async def test_true_to_true_preserves_shared_at(self, db, team):
        mia = team["mia"]
        created = await note_service.create_note(db, mia, "Toggle", is_shared=True)
        first = await store.get_note(db, created.note.id)

        await note_service.update_note(db, mia.user_id, created.note.id, content="more", is_shared=True)
        again = await store.get_note(db, created.note.id)
        assert again.shared_at == first.shared_at
        assert again.content == "more"

    async def test_true_to_false_clears_shared_at(self, db, team):
        mia = team["mia"]
        created = await note_service.create_note(db, mia, "Toggle", is_shared=True)

        updated = await note_service.update_note(db, mia.user_id, created.note.id, is_shared=False)
        assert updated.note.is_shared is False
        assert updated.note.shared_at is None

    async def test_false_to_true_stamps_shared_at(self, db, team):
        mia = team["mia"]
        created = await note_service.create_note(db, mia, "Toggle")

        updated = await note_service.update_note(db, mia.user_id, created.note.id, is_shared=True)
        assert updated.note.is_shared is True
        assert updated.note.shared_at is not None

    async def test_blank_title_rejected(self, db, team):
        with pytest.raises(ValidationError):
            await note_service.create_note(db, team["mia"], "  ")


class TestNotePermissions:

    async def test_owner_edits_team_note(self, db, team):
        created = await note_service.create_note(db, team["mia"], "Draft")
        updated = await note_service.update_note(db, team["owner"].user_id, created.note.id, title="Reviewed")
        assert updated.note.title == "Reviewed"
        assert updated.permissions.can_edit

    async def test_admin_reads_but_cannot_edit_team_note(self, db, team):
        created = await note_service.create_note(db, team["mia"], "Draft")
        access = await note_service.get_note_access(db, team["admin"].user_id, created.note.id)
        assert access.permissions.can_view
        assert not access.permissions.can_edit

        with pytest.raises(Unauthorized):
            await note_service.update_note(db, team["admin"].user_id, created.note.id, title="Nope")
        with pytest.raises(Unauthorized):
            await note_service.delete_note(db, team["admin"].user_id, created.note.id)

    async def test_member_cannot_edit_shared_note(self, db, team):
        created = await note_service.create_note(db, team["mia"], "Broadcast", is_shared=True)
        with pytest.raises(Unauthorized):
            await note_service.update_note(db, team["max"].user_id, created.note.id, title="Hijacked")

    async def test_edit_permission_level_grants_no_write(self, db, team):
        mia, max_ = team["mia"], team["max"]
        created = await note_service.create_note(db, mia, "Pair notes")
        await note_service.grant_share(db, mia.user_id, created.note.id, max_.user_id, PermissionLevel.EDIT)

        with pytest.raises(Unauthorized):
            await note_service.update_note(db, max_.user_id, created.note.id, content="edited")

    async def test_owner_deletes_team_note(self, db, team):
        created = await note_service.create_note(db, team["mia"], "Obsolete")
        await note_service.delete_note(db, team["owner"].user_id, created.note.id)
        assert await store.get_note(db, created.note.id) is None

    async def test_outsider_sees_nothing(self, db, team, make_user):
        outsider = await make_user("outsider@example.com")
        created = await note_service.create_note(db, team["mia"], "Open", is_shared=True)
        with pytest.raises(NotFound):
            await note_service.get_note_access(db, outsider.id, created.note.id)

    async def test_unknown_note(self, db, team):
        with pytest.raises(NotFound):
            await note_service.get_note_access(db, team["owner"].user_id, uuid.uuid4())


class TestExplicitShares:

    async def test_duplicate_grant_conflicts_and_leaves_state(self, db, team):
        mia, max_ = team["mia"], team["max"]
        created = await note_service.create_note(db, mia, "Once")
        await note_service.grant_share(db, mia.user_id, created.note.id, max_.user_id)
        before = await store.get_note(db, created.note.id)

        with pytest.raises(DuplicateShare) as exc_info:
            await note_service.grant_share(db, mia.user_id, created.note.id, max_.user_id)
        assert exc_info.value.status_code == 409

        after = await store.get_note(db, created.note.id)
        assert len(after.shares) == 1
        assert after.is_shared is True
        assert after.shared_at == before.shared_at

    async def test_grant_to_author_rejected(self, db, team):
        mia = team["mia"]
        created = await note_service.create_note(db, mia, "Mine")
        with pytest.raises(ValidationError):
            await note_service.grant_share(db, mia.user_id, created.note.id, mia.user_id)

    async def test_grant_to_non_member_not_found(self, db, team, make_user):
        mia = team["mia"]
        outsider = await make_user("outsider@example.com")
        created = await note_service.create_note(db, mia, "Mine")
        with pytest.raises(NotFound):
            await note_service.grant_share(db, mia.user_id, created.note.id, outsider.id)

        unchanged = await store.get_note(db, created.note.id)
        assert unchanged.is_shared is False
        assert unchanged.shares == ()

    async def test_revoke_missing_share_not_found(self, db, team):
        mia = team["mia"]
        created = await note_service.create_note(db, mia, "Mine")
        with pytest.raises(NotFound):
            await note_service.revoke_share(db, mia.user_id, created.note.id, team["max"].user_id)

    async def test_share_targets_exclude_author_and_grantees(self, db, team):
        mia = team["mia"]
        created = await note_service.create_note(db, mia, "Targets")
        await note_service.grant_share(db, mia.user_id, created.note.id, team["max"].user_id)

        targets = await note_service.list_share_targets(db, mia.user_id, created.note.id)
        assert {member.user_id for member in targets} == {team["owner"].user_id, team["admin"].user_id}

    async def test_member_cannot_share_colleague_note(self, db, team):
        created = await note_service.create_note(db, team["mia"], "Broadcast", is_shared=True)
        with pytest.raises(Unauthorized):
            await note_service.grant_share(db, team["max"].user_id, created.note.id, team["admin"].user_id)
