"""
Page route tests against a mongomock-backed app, signed in through demo mode.
"""

import time
from itertools import count

import anyio
import httpx
import pytest
from bson import ObjectId

from em_diary.main import create_app
from em_diary.models import Mood, OneOnOneNoteCreate, TeamMemberCreate
from em_diary.store import CreateError, FetchError, StorePermissionError, UpdateError


def _member(store, **overrides):
    data = {
        "name": "John Doe",
        "role": "Developer",
        "birthday": "1990-01-01",
        "hiringDate": "2020-01-01",
        "location": "New York, NY",
    }
    data.update(overrides)
    return store.members.create(TeamMemberCreate.model_validate(data))


def _note(store, member_id, day="2024-01-15", **overrides):
    data = {
        "userId": member_id,
        "date": day,
        "talkingPoints": "Career plans",
        "mood": Mood.HAPPY,
    }
    data.update(overrides)
    return store.notes.create(OneOnOneNoteCreate.model_validate(data))


MEMBER_FORM = {
    "name": "Jane Doe",
    "role": "Designer",
    "birthday": "1992-03-04",
    "hiring_date": "2021-09-01",
    "location": "Berlin",
}


class TestHealth:

    def test_healthz(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "up"}


class TestTeamPages:
    """Tests for the roster and member pages."""

    def test_empty_roster(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "No team members yet" in response.text

    def test_roster_shows_members_with_summary(self, client, store):
        member = _member(store)
        _note(store, member.id, "2024-01-10", mood=Mood.SAD, flag=True, flagDescription="Workload")
        _note(store, member.id, "2024-01-15")

        response = client.get("/")

        assert response.status_code == 200
        assert "John Doe" in response.text
        assert "2 notes" in response.text
        assert "1 flagged" in response.text
        assert Mood.SAD.value in response.text

    def test_roster_fetch_failure_shows_error(self, client, store, monkeypatch):
        def fail():
            raise FetchError("Failed to fetch team members")
        monkeypatch.setattr(store.members, "list_all", fail)

        response = client.get("/")

        assert response.status_code == 200
        assert "Failed to fetch users" in response.text

    def test_create_member_redirects_to_roster(self, client, store):
        response = client.post("/members/new", data=MEMBER_FORM, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/"
        [member] = store.members.list_all()
        assert member.name == "Jane Doe"
        assert member.hiring_date.isoformat() == "2021-09-01"

    def test_create_member_missing_field(self, client, store):
        response = client.post("/members/new", data=dict(MEMBER_FORM, name=""))

        assert response.status_code == 400
        assert "Name is required" in response.text
        assert store.members.list_all() == []

    def test_create_member_store_failure(self, client, store, monkeypatch):
        def fail(data):
            raise CreateError("Failed to create team member")
        monkeypatch.setattr(store.members, "create", fail)

        response = client.post("/members/new", data=MEMBER_FORM)

        assert response.status_code == 502
        assert "Failed to add team member. Please try again." in response.text

    def test_view_member_lists_notes_newest_first(self, client, store):
        member = _member(store)
        _note(store, member.id, "2024-01-10", talkingPoints="Older chat")
        _note(store, member.id, "2024-01-15", talkingPoints="Newer chat")

        response = client.get(f"/members/{member.id}")

        assert response.status_code == 200
        assert response.text.index("Newer chat") < response.text.index("Older chat")

    def test_view_unknown_member(self, client):
        response = client.get(f"/members/{ObjectId()}")

        assert response.status_code == 404
        assert "User not found" in response.text

    def test_view_malformed_member_id(self, client):
        response = client.get("/members/not-an-id")
        assert response.status_code == 404

    def test_edit_member(self, client, store):
        member = _member(store)

        response = client.post(
            f"/members/{member.id}/edit",
            data=dict(MEMBER_FORM, name="John Q. Doe"),
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == f"/members/{member.id}"
        assert store.members.get_by_id(member.id).name == "John Q. Doe"

    def test_edit_unknown_member(self, client):
        response = client.get(f"/members/{ObjectId()}/edit")
        assert response.status_code == 404

    def test_delete_member_keeps_notes(self, client, store):
        member = _member(store)
        note = _note(store, member.id)

        confirm = client.get(f"/members/{member.id}/delete")
        response = client.post(f"/members/{member.id}/delete", follow_redirects=False)

        assert confirm.status_code == 200
        assert "Are you sure you want to delete John Doe?" in confirm.text
        assert response.status_code == 303
        assert store.members.get_by_id(member.id) is None
        assert store.notes.get_by_id(note.id) is not None


class TestNotePages:
    """Tests for the note routes under a member."""

    def test_new_note_form_defaults(self, client, store):
        member = _member(store)

        response = client.get(f"/members/{member.id}/notes/new")

        assert response.status_code == 200
        assert Mood.HAPPY.value in response.text

    def test_create_note_with_action_items(self, client, store):
        member = _member(store)

        response = client.post(
            f"/members/{member.id}/notes/new",
            data={
                "date": "2024-01-15",
                "talking_points": "Promotion path",
                "mood": Mood.TIRED.value,
                "flag": "true",
                "flag_description": "Feeling overloaded",
                "action_item_description": ["Draft growth plan", ""],
                "action_item_due_date": ["2024-02-01", ""],
                "action_item_done": ["false", "false"],
            },
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == f"/members/{member.id}"
        [note] = store.notes.list_by_user(member.id)
        assert note.mood == Mood.TIRED
        assert note.flag is True
        assert note.flag_description == "Feeling overloaded"
        assert len(note.action_items) == 1
        assert note.action_items[0].description == "Draft growth plan"
        assert note.action_items[0].due_date.isoformat() == "2024-02-01"

    def test_unflagged_note_drops_description(self, client, store):
        member = _member(store)

        client.post(
            f"/members/{member.id}/notes/new",
            data={
                "date": "2024-01-15",
                "talking_points": "Weekly sync",
                "mood": Mood.NEUTRAL.value,
                "flag_description": "left over text",
            },
        )

        [note] = store.notes.list_by_user(member.id)
        assert note.flag is False
        assert note.flag_description == ""

    def test_flag_without_description_rejected(self, client, store):
        member = _member(store)

        response = client.post(
            f"/members/{member.id}/notes/new",
            data={
                "date": "2024-01-15",
                "talking_points": "Weekly sync",
                "mood": Mood.HAPPY.value,
                "flag": "true",
            },
        )

        assert response.status_code == 400
        assert "Flag description is required when flagging a note" in response.text
        assert store.notes.list_by_user(member.id) == []

    def test_note_for_unknown_member(self, client):
        response = client.get(f"/members/{ObjectId()}/notes/new")
        assert response.status_code == 404

    def test_edit_note(self, client, store):
        member = _member(store)
        note = _note(store, member.id)

        response = client.post(
            f"/members/{member.id}/notes/{note.id}/edit",
            data={
                "date": "2024-01-16",
                "talking_points": "Updated points",
                "mood": Mood.FRUSTRATED.value,
            },
            follow_redirects=False,
        )

        assert response.status_code == 303
        updated = store.notes.get_by_id(note.id)
        assert updated.talking_points == "Updated points"
        assert updated.date.isoformat() == "2024-01-16"
        assert updated.created_at == note.created_at
        assert updated.user_id == member.id

    def test_edit_unknown_note(self, client, store):
        member = _member(store)
        response = client.get(f"/members/{member.id}/notes/{ObjectId()}/edit")
        assert response.status_code == 404

    def test_delete_note(self, client, store):
        member = _member(store)
        note = _note(store, member.id)

        confirm = client.get(f"/members/{member.id}/notes/{note.id}/delete")
        response = client.post(f"/members/{member.id}/notes/{note.id}/delete", follow_redirects=False)

        assert "Remove Note" in confirm.text
        assert response.status_code == 303
        assert store.notes.get_by_id(note.id) is None

    def test_resolve_flag(self, client, store):
        member = _member(store)
        note = _note(store, member.id, flag=True, flagDescription="Wants promotion")

        confirm = client.get(f"/members/{member.id}/notes/{note.id}/resolve-flag")
        response = client.post(
            f"/members/{member.id}/notes/{note.id}/resolve-flag", follow_redirects=False
        )

        assert "Wants promotion" in confirm.text
        assert response.status_code == 303
        resolved = store.notes.get_by_id(note.id)
        assert resolved.flag is False
        assert resolved.flag_description == ""

    def test_resolve_flag_on_unflagged_note_redirects(self, client, store):
        member = _member(store)
        note = _note(store, member.id)

        response = client.get(
            f"/members/{member.id}/notes/{note.id}/resolve-flag", follow_redirects=False
        )

        assert response.status_code == 303

    def test_resolve_flag_failure(self, client, store, monkeypatch):
        member = _member(store)
        note = _note(store, member.id, flag=True, flagDescription="Wants promotion")

        def fail(entity_id, changes):
            raise UpdateError("Failed to update document")
        monkeypatch.setattr(store.notes, "update", fail)

        response = client.post(f"/members/{member.id}/notes/{note.id}/resolve-flag")

        assert response.status_code == 502
        assert "Failed to resolve flag. Please try again." in response.text
        assert store.notes.get_by_id(note.id).flag is True

    def test_toggle_action_item(self, client, store):
        member = _member(store)
        note = _note(store, member.id, actionItems=[{"description": "Write RFC"}])

        response = client.post(
            f"/members/{member.id}/notes/{note.id}/action-items/0",
            data={"done": "true"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert store.notes.get_by_id(note.id).action_items[0].done is True

    def test_toggle_missing_action_item(self, client, store):
        member = _member(store)
        note = _note(store, member.id)

        response = client.post(
            f"/members/{member.id}/notes/{note.id}/action-items/2", data={"done": "true"}
        )

        assert response.status_code == 502
        assert "Failed to update action item" in response.text

    def test_permission_failure_sends_to_login(self, client, store, monkeypatch):
        member = _member(store)
        note = _note(store, member.id, flag=True, flagDescription="Wants promotion")

        def fail(entity_id, changes):
            raise StorePermissionError("Not allowed to update document")
        monkeypatch.setattr(store.notes, "update", fail)

        response = client.post(
            f"/members/{member.id}/notes/{note.id}/resolve-flag", follow_redirects=False
        )

        assert response.status_code == 303
        assert response.headers["location"].startswith("/login?next=")


class TestConcurrentRoster:
    """The roster page renders its own fetch even while another request refetches."""

    pytestmark = pytest.mark.anyio

    async def test_overlapping_roster_requests(self, store, demo_mode, monkeypatch):
        _member(store)
        list_all = store.members.list_all
        list_by_users = store.notes.list_by_users
        calls = count()

        def slow_list_all():
            # First request returns quickly; the second is still loading when
            # the first renders
            time.sleep(0.05 if next(calls) == 0 else 1.0)
            return list_all()

        def slow_list_by_users(user_ids):
            time.sleep(0.5)
            return list_by_users(user_ids)

        monkeypatch.setattr(store.members, "list_all", slow_list_all)
        monkeypatch.setattr(store.notes, "list_by_users", slow_list_by_users)

        transport = httpx.ASGITransport(app=create_app(store))
        responses = {}

        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            async def get_roster(name, delay):
                await anyio.sleep(delay)
                responses[name] = await client.get("/")

            async with anyio.create_task_group() as tg:
                tg.start_soon(get_roster, "first", 0)
                tg.start_soon(get_roster, "second", 0.2)

        for name in ("first", "second"):
            response = responses[name]
            assert response.status_code == 200
            assert "Loading users" not in response.text
            assert "John Doe" in response.text
