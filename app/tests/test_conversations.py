from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.core.enums import MessageChannel, UserRole
from app.services import conversations, messages
from app.services.conversations import merge_conversations

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def person(id, name, role=UserRole.AGENT):
    return SimpleNamespace(id=id, name=name, role=role)


def dm(id, sender_id, receiver_id, minutes, content="hi"):
    return SimpleNamespace(
        id=id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        created_at=T0 + timedelta(minutes=minutes),
    )


class TestMergeConversations:
    """Ordering and de-duplication of the inbox view"""

    def setup_method(self):
        self.me = person(1, "Me", UserRole.USER)
        self.carol = person(2, "Carol")
        self.bob = person(3, "Bob")
        self.dave = person(4, "Dave")
        self.partners = {2: self.carol, 3: self.bob}

    def test_history_then_alphabetical(self):
        history = [
            dm(1, 1, 2, 0, "old"),
            dm(2, 3, 1, 5, "from bob"),
            dm(3, 1, 2, 10, "latest to carol"),
        ]
        entries = merge_conversations(1, history, self.partners, [self.dave, self.bob, self.carol])

        assert [e.partner.id for e in entries] == [2, 3, 4]
        assert entries[0].last_message_content == "latest to carol"
        assert entries[1].last_message_content == "from bob"
        assert entries[2].last_message_at is None

    def test_no_duplicates_for_eligible_partner(self):
        entries = merge_conversations(1, [dm(1, 1, 2, 0)], {2: self.carol}, [self.carol, self.bob])
        ids = [e.partner.id for e in entries]
        assert ids == [2, 3]
        assert len(ids) == len(set(ids))

    def test_untouched_contacts_sorted_by_name_then_id(self):
        twin = person(9, "Bob")
        entries = merge_conversations(1, [], {}, [self.dave, twin, self.bob, self.carol])
        assert [e.partner.id for e in entries] == [3, 9, 2, 4]

    def test_same_timestamp_breaks_ties_on_id(self):
        history = [dm(5, 1, 2, 0, "first"), dm(6, 1, 2, 0, "second")]
        entries = merge_conversations(1, history, {2: self.carol}, [])
        assert entries[0].last_message_content == "second"

    def test_self_is_never_listed(self):
        entries = merge_conversations(1, [], {}, [self.me, self.bob])
        assert [e.partner.id for e in entries] == [3]


@pytest.mark.integration
class TestListConversations:

    @pytest.mark.asyncio
    async def test_user_with_one_thread_and_another_active_agent(self, db, user, agent, agent_2, principal_for):
        await messages.send_direct(db, principal_for(user), agent.id, "hello agent")

        entries = await conversations.list_conversations(db, principal_for(user))

        assert [e.user.id for e in entries] == [agent.id, agent_2.id]
        assert entries[0].last_message.content == "hello agent"
        assert entries[1].last_message is None

    @pytest.mark.asyncio
    async def test_user_never_sees_other_users(self, db, user, other_user, agent, principal_for):
        entries = await conversations.list_conversations(db, principal_for(user))
        assert [e.user.id for e in entries] == [agent.id]

    @pytest.mark.asyncio
    async def test_redirect_records_are_not_history(self, db, user, agent, agent_2, principal_for):
        sender = await messages.load_sender(db, principal_for(user))
        await messages.store_message(db, sender, "open wa.me", receiver=agent_2, channel=MessageChannel.WHATSAPP_REDIRECT)
        await db.commit()

        entries = await conversations.list_conversations(db, principal_for(user))

        by_id = {e.user.id: e for e in entries}
        assert by_id[agent_2.id].last_message is None

    @pytest.mark.asyncio
    async def test_agent_sees_users_and_agents_but_not_inactive(
        self, db, create_user_factory, user, agent, agent_2, principal_for
    ):
        pending = await create_user_factory(name="Pat Pending", role=UserRole.AGENT, is_active=False)
        await messages.send_direct(db, principal_for(agent), user.id, "welcome")

        entries = await conversations.list_conversations(db, principal_for(agent))
        ids = [e.user.id for e in entries]

        assert ids[0] == user.id
        assert agent_2.id in ids
        assert agent.id not in ids
        assert pending.id not in ids
