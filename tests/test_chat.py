import asyncio
import html
import json

import pytest

from webchat.chat import EMOJIS, Chat
from webchat.event_bus import EventBus
from webchat.protocol import (
    MsgType,
    WebSocketMessage,
    avatar_url,
    decode_message,
    encode_message,
)


class RecordingService:
    def __init__(self):
        self.sent = []

    def send(self, text):
        self.sent.append(text)


class FullService:
    def send(self, text):
        raise asyncio.QueueFull


def users_envelope(names):
    return encode_message(WebSocketMessage(MsgType.USERS, data_array=list(names)))


def message_envelope(sender, text, reactions=None):
    payload = {"from": sender, "message": text, "reactions": reactions}
    return encode_message(WebSocketMessage(MsgType.MESSAGE, data=json.dumps(payload)))


def test_register_sends_register_envelope():
    service = RecordingService()
    chat = Chat("alice", service)
    assert chat.register() is True
    assert len(service.sent) == 1
    envelope = decode_message(service.sent[0])
    assert envelope.message_type is MsgType.REGISTER
    assert envelope.data == "alice"
    assert envelope.data_array is None


def test_register_fails_quietly_when_queue_full():
    chat = Chat("alice", FullService())
    assert chat.register() is False


def test_register_without_service():
    assert Chat("alice").register() is False


def test_users_envelope_replaces_user_list():
    chat = Chat("alice")
    assert chat.handle_message(users_envelope(["alice", "bob"])) is True
    assert [user.name for user in chat.users] == ["alice", "bob"]
    assert [user.avatar for user in chat.users] == [avatar_url("alice"), avatar_url("bob")]
    assert chat.handle_message(users_envelope(["carol"])) is True
    assert [user.name for user in chat.users] == ["carol"]


def test_users_envelope_without_array_clears_users():
    chat = Chat("alice")
    chat.handle_message(users_envelope(["bob"]))
    assert chat.handle_message(encode_message(WebSocketMessage(MsgType.USERS))) is True
    assert chat.users == []


def test_message_envelope_appends_message():
    chat = Chat("alice")
    assert chat.handle_message(message_envelope("bob", "hello")) is True
    assert len(chat.messages) == 1
    assert chat.messages[0].sender == "bob"
    assert chat.messages[0].message == "hello"
    assert chat.messages[0].reactions is None


def test_register_envelope_changes_nothing():
    chat = Chat("alice")
    envelope = encode_message(WebSocketMessage(MsgType.REGISTER, data="bob"))
    assert chat.handle_message(envelope) is False
    assert chat.users == [] and chat.messages == []


def test_malformed_envelopes_raise():
    chat = Chat("alice")
    with pytest.raises(ValueError):
        chat.handle_message("not json")
    with pytest.raises(ValueError):
        chat.handle_message(encode_message(WebSocketMessage(MsgType.MESSAGE)))
    assert chat.messages == []


def test_submit_message_sends_text():
    service = RecordingService()
    chat = Chat("alice", service)
    assert chat.submit_message(" hi there ") is True
    envelope = decode_message(service.sent[-1])
    assert envelope.message_type is MsgType.MESSAGE
    assert envelope.data == " hi there "


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_submit_blank_message_is_not_sent(text):
    service = RecordingService()
    chat = Chat("alice", service)
    assert chat.submit_message(text) is False
    assert service.sent == []


def test_react_toggles_current_user():
    chat = Chat("alice")
    chat.handle_message(message_envelope("bob", "hello"))
    assert chat.react(0, "👍") is True
    assert chat.messages[0].reactions == [("👍", ["alice"])]
    assert chat.reaction_count(0, "👍") == 1
    assert chat.react(0, "👍") is True
    assert chat.reaction_count(0, "👍") == 0
    assert chat.messages[0].reactions == [("👍", [])]


def test_react_appends_new_emoji():
    chat = Chat("alice")
    chat.handle_message(message_envelope("bob", "hello"))
    chat.react(0, "👍")
    chat.react(0, "😂")
    assert [emoji for emoji, _ in chat.messages[0].reactions] == ["👍", "😂"]
    assert chat.reaction_count(0, "😂") == 1


def test_react_joins_reactions_from_server():
    chat = Chat("alice")
    chat.handle_message(message_envelope("bob", "hello", [["❤️", ["bob"]]]))
    assert chat.reaction_count(0, "❤️") == 1
    chat.react(0, "❤️")
    assert chat.messages[0].reactions == [("❤️", ["bob", "alice"])]
    assert chat.reaction_count(0, "❤️") == 2


@pytest.mark.parametrize("index", [-1, 1, 5])
def test_react_out_of_range(index):
    chat = Chat("alice")
    chat.handle_message(message_envelope("bob", "hello"))
    assert chat.react(index, "👍") is False
    assert chat.messages[0].reactions is None


def test_reaction_count_out_of_range_raises():
    with pytest.raises(IndexError):
        Chat("alice").reaction_count(0, "👍")


def test_profile_for_known_and_unknown():
    chat = Chat("alice")
    chat.handle_message(users_envelope(["bob"]))
    assert chat.profile_for("bob") is chat.users[0]
    stranger = chat.profile_for("zed")
    assert stranger.name == "zed"
    assert stranger.avatar == avatar_url("zed")


def test_render_shows_users_and_escaped_messages():
    chat = Chat("alice")
    chat.handle_message(users_envelope(["bob"]))
    chat.handle_message(message_envelope("bob", "<b>hi</b>"))
    page = chat.render()
    assert html.escape(avatar_url("bob")) in page
    assert html.escape("<b>hi</b>") in page
    assert "<b>hi</b>" not in page
    for emoji in EMOJIS:
        assert emoji in page


def test_render_shows_reaction_counts_only_when_positive():
    chat = Chat("alice")
    chat.handle_message(message_envelope("bob", "hello"))
    assert chat.render().count("ml-1 text-xs font-semibold") == 0
    chat.react(0, "👏")
    assert chat.render().count("ml-1 text-xs font-semibold") == 1


def test_bus_delivers_envelopes_to_chat():
    bus = EventBus()
    chat = Chat("alice", bus=bus)
    bus.publish(message_envelope("bob", "hello"))
    bus.publish(users_envelope(["alice", "bob"]))
    assert [m.message for m in chat.messages] == ["hello"]
    assert [u.name for u in chat.users] == ["alice", "bob"]