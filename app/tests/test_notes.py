import pytest

from app.core.exceptions import Forbidden, InvalidInput, NotFound
from app.schemas.note import NoteCreate, NoteUpdate
from app.services import notes


@pytest.fixture
def create_note_factory(db, principal_for):
    async def _create_note(author, related_user=None, title="Follow up", content="Call back tomorrow", tags=None):
        payload = NoteCreate(
            title=title,
            content=content,
            related_user_id=related_user.id if related_user else None,
            tags=tags or [],
        )
        return await notes.create_note(db, principal_for(author), payload)

    return _create_note


@pytest.mark.integration
class TestNoteAuthoring:

    @pytest.mark.asyncio
    async def test_agent_creates_note(self, create_note_factory, agent, user):
        note = await create_note_factory(agent, user, tags=["vip", " vip ", "billing"])

        assert note.author_id == agent.id
        assert note.author_name == agent.name
        assert note.related_user_id == user.id
        assert note.related_user_name == user.name
        assert note.tags == ["vip", "billing"]

    @pytest.mark.asyncio
    async def test_user_cannot_create_note(self, db, user, principal_for):
        with pytest.raises(Forbidden):
            await notes.create_note(db, principal_for(user), NoteCreate(title="x", content="y"))

    @pytest.mark.asyncio
    async def test_note_about_missing_user(self, db, agent, principal_for):
        with pytest.raises(NotFound):
            await notes.create_note(db, principal_for(agent), NoteCreate(title="x", content="y", related_user_id=999))

    @pytest.mark.asyncio
    async def test_note_about_agent_is_rejected(self, db, agent, agent_2, principal_for):
        with pytest.raises(InvalidInput):
            await notes.create_note(
                db, principal_for(agent), NoteCreate(title="x", content="y", related_user_id=agent_2.id)
            )

    @pytest.mark.asyncio
    async def test_author_updates_note(self, db, create_note_factory, agent, user, principal_for):
        note = await create_note_factory(agent, user)

        updated = await notes.update_note(db, principal_for(agent), note.id, NoteUpdate(title="Escalated"))

        assert updated.title == "Escalated"
        assert updated.content == note.content

    @pytest.mark.asyncio
    async def test_other_agent_cannot_edit(self, db, create_note_factory, agent, agent_2, user, principal_for):
        note = await create_note_factory(agent, user)

        with pytest.raises(Forbidden):
            await notes.update_note(db, principal_for(agent_2), note.id, NoteUpdate(content="mine now"))
        with pytest.raises(Forbidden):
            await notes.delete_note(db, principal_for(agent_2), note.id)

    @pytest.mark.asyncio
    async def test_missing_note(self, db, agent, principal_for):
        with pytest.raises(NotFound):
            await notes.update_note(db, principal_for(agent), 404, NoteUpdate(title="nope"))

    @pytest.mark.asyncio
    async def test_delete_note(self, db, create_note_factory, agent, principal_for):
        note = await create_note_factory(agent)

        await notes.delete_note(db, principal_for(agent), note.id)

        assert await notes.list_own_notes(db, principal_for(agent)) == []

    @pytest.mark.asyncio
    async def test_list_own_notes(self, db, create_note_factory, agent, agent_2, user, principal_for):
        await create_note_factory(agent, user, title="first")
        await create_note_factory(agent_2, user, title="not mine")
        await create_note_factory(agent, title="second")

        own = await notes.list_own_notes(db, principal_for(agent))
        assert [n.title for n in own] == ["second", "first"]


@pytest.mark.integration
class TestNoteVisibility:

    @pytest.mark.asyncio
    async def test_user_must_name_an_agent(self, db, create_note_factory, agent, user, principal_for):
        await create_note_factory(agent, user)

        with pytest.raises(InvalidInput) as exc_info:
            await notes.notes_about_user(db, principal_for(user), user.id)
        assert exc_info.value.detail == "agent id required"

    @pytest.mark.asyncio
    async def test_user_sees_one_agent_at_a_time(self, db, create_note_factory, agent, agent_2, user, principal_for):
        await create_note_factory(agent, user, title="from alice")
        await create_note_factory(agent_2, user, title="from bob")

        visible = await notes.notes_about_user(db, principal_for(user), user.id, agent_id=agent.id)

        assert [n.title for n in visible] == ["from alice"]

    @pytest.mark.asyncio
    async def test_user_cannot_read_notes_about_others(self, db, user, other_user, agent, principal_for):
        with pytest.raises(Forbidden):
            await notes.notes_about_user(db, principal_for(user), other_user.id, agent_id=agent.id)

    @pytest.mark.asyncio
    async def test_agent_never_sees_other_agents_notes(
        self, db, create_note_factory, agent, agent_2, user, principal_for
    ):
        await create_note_factory(agent, user, title="alice only")

        visible = await notes.notes_about_user(db, principal_for(agent_2), user.id, agent_id=agent.id)
        assert visible == []

        own = await notes.notes_about_user(db, principal_for(agent), user.id)
        assert [n.title for n in own] == ["alice only"]

    @pytest.mark.asyncio
    async def test_summary_per_agent(self, db, create_note_factory, agent, agent_2, user, other_user, principal_for):
        await create_note_factory(agent, user, title="a1")
        await create_note_factory(agent, user, title="a2")
        await create_note_factory(agent_2, user, title="b1")
        await create_note_factory(agent_2, other_user, title="elsewhere")

        summary = await notes.notes_summary(db, principal_for(user))

        assert [s.agent.id for s in summary] == [agent_2.id, agent.id]
        assert {s.agent.id: s.total_notes for s in summary} == {agent.id: 2, agent_2.id: 1}
        assert summary[0].latest_note_date >= summary[1].latest_note_date

    @pytest.mark.asyncio
    async def test_summary_is_for_users_only(self, db, agent, principal_for):
        with pytest.raises(Forbidden):
            await notes.notes_summary(db, principal_for(agent))


@pytest.mark.integration
class TestNotesApi:

    @pytest.mark.asyncio
    async def test_crud_over_http(self, client, agent, user, auth_headers):
        headers = auth_headers(agent)

        created = await client.post(
            "/notes/", json={"title": "Intro", "content": "Met on call", "related_user_id": user.id}, headers=headers
        )
        assert created.status_code == 201
        note_id = created.json()["id"]

        updated = await client.put(f"/notes/{note_id}", json={"tags": ["warm"]}, headers=headers)
        assert updated.status_code == 200
        assert updated.json()["tags"] == ["warm"]

        listed = await client.get("/notes/", headers=headers)
        assert [n["id"] for n in listed.json()] == [note_id]

        deleted = await client.delete(f"/notes/{note_id}", headers=headers)
        assert deleted.status_code == 200
        assert (await client.get("/notes/", headers=headers)).json() == []

    @pytest.mark.asyncio
    async def test_user_read_requires_agent_id(self, client, user, agent, auth_headers):
        response = await client.get(f"/notes/user/{user.id}", headers=auth_headers(user))
        assert response.status_code == 400
        assert response.json()["detail"] == "agent id required"

        response = await client.get(f"/notes/user/{user.id}?agent_id={agent.id}", headers=auth_headers(user))
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_summary_route_is_not_shadowed(self, client, user, auth_headers):
        response = await client.get("/notes/summary", headers=auth_headers(user))
        assert response.status_code == 200
        assert response.json() == []
