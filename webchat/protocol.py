"""Wire format of the chat server: envelopes, chat messages and user profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

AVATAR_URL_TEMPLATE = "https://avatars.dicebear.com/api/adventurer-neutral/{}.svg"

Reaction = tuple[str, list[str]]


class MsgType(str, Enum):
    """Kind of an envelope sent over the websocket."""

    USERS = "users"
    REGISTER = "register"
    MESSAGE = "message"


@dataclass
class WebSocketMessage:
    """Envelope exchanged with the server."""

    message_type: MsgType
    data_array: list[str] | None = None
    data: str | None = None


@dataclass
class MessageData:
    """A chat message as broadcast by the server, with its reactions."""

    sender: str
    message: str
    reactions: list[Reaction] | None = None


@dataclass
class UserProfile:
    """A connected user and the avatar shown for them."""

    name: str
    avatar: str


def avatar_url(name: str) -> str:
    """Return the avatar image URL for a user name."""
    return AVATAR_URL_TEMPLATE.format(name)


def encode_message(message: WebSocketMessage) -> str:
    """Serialise an envelope to its compact JSON wire form."""
    payload = {
        "messageType": MsgType(message.message_type).value,
        "dataArray": None if message.data_array is None else list(message.data_array),
        "data": message.data,
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def _load_object(data: str | bytes) -> dict[str, Any]:
    obj = json.loads(data)
    if not isinstance(obj, dict):
        raise ValueError("expected a JSON object")
    return obj


def _optional_str(obj: dict[str, Any], key: str) -> str | None:
    value = obj.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string or null")
    return value


def _required_str(obj: dict[str, Any], key: str) -> str:
    if key not in obj:
        raise ValueError(f"missing field {key!r}")
    value = obj[key]
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _string_list(value: Any, what: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{what} must be a list of strings")
    return list(value)


def decode_message(data: str | bytes) -> WebSocketMessage:
    """Parse an envelope from JSON; raise ValueError if it is malformed."""
    obj = _load_object(data)
    raw_type = _required_str(obj, "messageType")
    try:
        message_type = MsgType(raw_type)
    except ValueError:
        raise ValueError(f"unknown message type {raw_type!r}") from None
    raw_array = obj.get("dataArray")
    data_array = None if raw_array is None else _string_list(raw_array, "dataArray")
    return WebSocketMessage(
        message_type=message_type,
        data_array=data_array,
        data=_optional_str(obj, "data"),
    )


def _parse_reaction(item: Any) -> Reaction:
    if not isinstance(item, list) or len(item) != 2 or not isinstance(item[0], str):
        raise ValueError("a reaction must be a pair of an emoji and a list of users")
    return item[0], _string_list(item[1], "reaction users")


def parse_message_data(data: str | bytes) -> MessageData:
    """Parse a chat message payload; raise ValueError if it is malformed."""
    obj = _load_object(data)
    raw_reactions = obj.get("reactions")
    if raw_reactions is None:
        reactions = None
    elif isinstance(raw_reactions, list):
        reactions = [_parse_reaction(item) for item in raw_reactions]
    else:
        raise ValueError("reactions must be a list or null")
    return MessageData(
        sender=_required_str(obj, "from"),
        message=_required_str(obj, "message"),
        reactions=reactions,
    )