"""
Tests for wire <-> domain mapping.

Covers field renames, zero-value defaults for omitted fields, extension
fields, user references resolved through the user context, and list
order preservation.
"""

from datetime import UTC, datetime

import pytest

from chat_sync_storage.mapping import (
    ChannelRecord,
    MessageRecord,
    ReactionRecord,
    UserContext,
    UserRecord,
    channel_to_domain,
    channel_to_wire,
    message_to_domain,
    message_to_wire,
    reaction_to_domain,
    reaction_to_wire,
    to_domain,
    to_wire,
    user_to_domain,
    user_to_wire,
)
from chat_sync_storage.protocol import Attachment, Reaction, SyncStatus, User


class TestUserMapping:
    """Tests for user records."""

    def test_round_trip(self, alice):
        alice.last_active = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)
        assert user_to_domain(user_to_wire(alice)) == alice

    def test_omitted_fields_get_zero_values(self):
        user = user_to_domain(UserRecord.from_json({"id": "carol"}))

        assert user.id == "carol"
        assert user.name is None
        assert user.role == "user"
        assert user.online is False
        assert user.banned is False
        assert user.extra_data == {}

    def test_unknown_keys_become_extra_data(self):
        record = UserRecord.from_json({"id": "carol", "favorite_color": "teal"})

        assert record.extra_data == {"favorite_color": "teal"}
        assert user_to_domain(record).extra_data == {"favorite_color": "teal"}

    def test_trailing_z_timestamp(self):
        user = user_to_domain(UserRecord(id="carol", created_at="2024-01-15T10:00:00Z"))
        assert user.created_at == datetime(2024, 1, 15, 10, 0, tzinfo=UTC)


class TestChannelMapping:
    """Tests for channel records."""

    def test_round_trip(self, general_channel):
        decoded = channel_to_domain(channel_to_wire(general_channel))
        assert decoded == general_channel

    def test_round_trip_through_json(self, general_channel):
        """Encoding to JSON and back preserves every field."""
        payload = channel_to_wire(general_channel).to_json()
        decoded = channel_to_domain(ChannelRecord.from_json(payload))
        assert decoded == general_channel

    def test_cid_and_creator_on_the_wire(self, general_channel):
        payload = channel_to_wire(general_channel).to_json()

        assert payload["cid"] == "messaging:general"
        assert payload["created_by_id"] == "alice"
        assert payload["created_by"]["name"] == "Alice"

    def test_absent_optionals_encode_as_null(self, make_channel):
        payload = channel_to_wire(make_channel("empty")).to_json()

        assert payload["created_by"] is None
        assert payload["deleted_at"] is None
        assert payload["members"] == []

    def test_minimal_record_gets_defaults(self):
        channel = channel_to_domain(ChannelRecord.from_json({"id": "x", "type": "team"}))

        assert channel.cid == "team:x"
        assert channel.member_count == 0
        assert channel.members == []
        assert channel.frozen is False
        assert channel.created_by is None
        assert channel.sync_status == SyncStatus.COMPLETED

    def test_extra_data_flattened_and_recovered(self, general_channel):
        """Extension fields survive encode -> decode -> encode unchanged."""
        first = channel_to_wire(general_channel).to_json()
        assert first["topic"] == "everything"

        second = channel_to_wire(channel_to_domain(ChannelRecord.from_json(first))).to_json()
        assert second == first

    def test_modelled_keys_win_over_extra_data(self, make_channel):
        channel = make_channel("clash", extra_data={"frozen": "yes", "color": "red"})
        payload = channel_to_wire(channel).to_json()

        assert payload["frozen"] is False
        assert payload["color"] == "red"

    def test_creator_resolved_from_context(self, alice):
        context = UserContext(current_user=alice)
        record = ChannelRecord.from_json({"id": "x", "type": "team", "created_by_id": "alice"})

        channel = channel_to_domain(record, context)

        assert channel.created_by is alice

    def test_unknown_creator_becomes_reference(self):
        record = ChannelRecord.from_json({"id": "x", "type": "team", "created_by_id": "zed"})

        channel = channel_to_domain(record)

        assert channel.created_by == User(id="zed")

    def test_member_order_preserved(self, alice):
        carol = User(id="carol", name="Carol")
        record = ChannelRecord.from_json(
            {
                "id": "ordered",
                "type": "messaging",
                "members": [
                    {"user_id": "carol"},
                    {"user": {"id": "bob"}},
                    {"user_id": "alice", "channel_role": "owner"},
                ],
            }
        )

        channel = channel_to_domain(record, UserContext.for_user(alice, [carol]))

        assert [m.user.id for m in channel.members] == ["carol", "bob", "alice"]
        assert channel.members[2].role == "owner"
        assert channel.members[0].user is carol

    def test_member_extra_data_survives(self):
        """Unknown member keys survive encode -> decode -> encode."""
        first = ChannelRecord.from_json(
            {
                "id": "muted",
                "type": "messaging",
                "members": [{"user": {"id": "bob"}, "notifications_muted": True}],
            }
        ).to_json()

        channel = channel_to_domain(ChannelRecord.from_json(first))
        second = channel_to_wire(channel).to_json()

        assert channel.members[0].extra_data == {"notifications_muted": True}
        assert second["members"][0]["notifications_muted"] is True
        third = channel_to_wire(channel_to_domain(ChannelRecord.from_json(second))).to_json()
        assert third == second

    def test_sync_status_never_on_the_wire(self, make_channel):
        payload = channel_to_wire(make_channel("p", sync_status=SyncStatus.PENDING)).to_json()
        assert "sync_status" not in payload


class TestMessageMapping:
    """Tests for message records."""

    def _full_message(self, make_message, alice, bob):
        return make_message(
            "m1",
            user=alice,
            attachments=[
                Attachment(type="image", image_url="https://cdn.example.com/a.png", file_size=42),
                Attachment(type="file", title="notes.txt"),
            ],
            mentioned_users=[bob, alice],
            latest_reactions=[
                Reaction(message_id="m1", type="like", user=bob, user_id="bob"),
            ],
            reaction_counts={"like": 1},
            reaction_scores={"like": 1},
            thread_participants=[alice, bob],
            parent_id="m0",
            reply_message_id="m-quoted",
            reply_count=3,
            pinned=True,
            pinned_at=datetime(2024, 1, 15, 11, 0, tzinfo=UTC),
            pinned_by=alice,
            i18n={"fr_text": "bonjour"},
            created_at=datetime(2024, 1, 15, 10, 5, tzinfo=UTC),
            extra_data={"priority": "high"},
        )

    def test_round_trip(self, make_message, alice, bob):
        message = self._full_message(make_message, alice, bob)
        assert message_to_domain(message_to_wire(message)) == message

    def test_round_trip_through_json(self, make_message, alice, bob):
        message = self._full_message(make_message, alice, bob)
        payload = message_to_wire(message).to_json()
        assert message_to_domain(MessageRecord.from_json(payload)) == message

    def test_reply_id_maps_to_quoted_message_id(self, make_message, alice, bob):
        payload = message_to_wire(self._full_message(make_message, alice, bob)).to_json()

        assert payload["quoted_message_id"] == "m-quoted"
        assert "reply_message_id" not in payload

    def test_mentioned_ids_follow_mention_order(self, make_message, alice, bob):
        payload = message_to_wire(self._full_message(make_message, alice, bob)).to_json()
        assert payload["mentioned_users_ids"] == ["bob", "alice"]

    def test_list_order_preserved(self, make_message, alice, bob):
        payload = message_to_wire(self._full_message(make_message, alice, bob)).to_json()

        assert [a["type"] for a in payload["attachments"]] == ["image", "file"]
        assert [u["id"] for u in payload["thread_participants"]] == ["alice", "bob"]

    def test_minimal_record_gets_defaults(self):
        message = message_to_domain(MessageRecord.from_json({"id": "m9"}))

        assert message.text == ""
        assert message.type == "regular"
        assert message.attachments == []
        assert message.mentioned_users == []
        assert message.reaction_counts == {}
        assert message.reply_count == 0
        assert message.pinned is False
        assert message.user is None
        assert message.reply_message_id is None

    def test_mention_ids_resolved_via_context(self, alice):
        context = UserContext(current_user=alice)
        record = MessageRecord.from_json(
            {"id": "m2", "user_id": "alice", "mentioned_users_ids": ["alice", "dave"]}
        )

        message = message_to_domain(record, context)

        assert message.user is alice
        assert message.mentioned_users == [alice, User(id="dave")]

    def test_extra_data_round_trip(self, make_message, alice, bob):
        first = message_to_wire(self._full_message(make_message, alice, bob)).to_json()
        assert first["priority"] == "high"

        second = message_to_wire(message_to_domain(MessageRecord.from_json(first))).to_json()
        assert second == first

    def test_decoded_status_can_be_overridden(self):
        message = message_to_domain(MessageRecord(id="m3"), sync_status=SyncStatus.PENDING)
        assert message.sync_status == SyncStatus.PENDING


class TestReactionMapping:
    """Tests for reaction records."""

    def test_known_user_substituted(self, alice):
        context = UserContext(current_user=alice)
        record = ReactionRecord(message_id="m1", type="love", user_id="alice")

        reaction = reaction_to_domain(record, context)

        assert reaction.user is alice
        assert reaction.user_id == "alice"
        assert reaction.score == 1

    def test_unknown_user_left_as_id(self, alice):
        context = UserContext(current_user=alice)
        record = ReactionRecord(message_id="m1", type="love", user_id="stranger")

        reaction = reaction_to_domain(record, context)

        assert reaction.user is None
        assert reaction.user_id == "stranger"

    def test_round_trip_derives_user_id_from_user(self, bob):
        reaction = Reaction(message_id="m1", type="like", user=bob)

        assert reaction.user_id == "bob"
        assert reaction_to_domain(reaction_to_wire(reaction)) == reaction

    def test_message_with_user_only_reactions_round_trips(self, make_message, alice, bob):
        message = make_message(
            "m1",
            user=alice,
            latest_reactions=[Reaction(message_id="m1", type="like", user=bob)],
            own_reactions=[Reaction(message_id="m1", type="love", user=alice)],
        )

        assert message_to_domain(message_to_wire(message)) == message


class TestDispatch:
    """Tests for to_wire / to_domain dispatch."""

    def test_dispatch_by_type(self, general_channel, make_message):
        record = to_wire(general_channel)
        assert isinstance(record, ChannelRecord)
        assert to_domain(record) == general_channel

        message = make_message("m1")
        message_record = to_wire(message)
        assert isinstance(message_record, MessageRecord)
        assert to_domain(message_record) == message

    def test_unknown_type_rejected(self, alice):
        with pytest.raises(TypeError):
            to_wire(alice)
        with pytest.raises(TypeError):
            to_domain(user_to_wire(alice))


class TestUserContext:
    """Tests for the user context."""

    def test_current_user_is_known(self, alice):
        context = UserContext(current_user=alice)
        assert context.get("alice") is alice

    def test_for_user_with_others(self, alice, bob):
        context = UserContext.for_user(alice, [bob])

        assert context.get("bob") is bob
        assert context.resolve("alice") is alice

    def test_resolve_unknown(self):
        assert UserContext().resolve("ghost") == User(id="ghost")

    def test_add(self, bob):
        context = UserContext()
        context.add(bob)
        assert context.get("bob") is bob
        assert context.get(None) is None
