"""Chat view state: connected users, messages and their reactions."""

from __future__ import annotations

import asyncio
import logging
from html import escape
from typing import Protocol

from webchat.event_bus import EventBus
from webchat.protocol import (
    MessageData,
    MsgType,
    UserProfile,
    WebSocketMessage,
    avatar_url,
    decode_message,
    encode_message,
    parse_message_data,
)

EMOJIS = ("👍", "❤️", "😂", "😮", "😢", "👏")

log = logging.getLogger(__name__)


class Sender(Protocol):
    """Anything that can queue text for the server."""

    def send(self, text: str) -> None: ...


class Chat:
    """State of the chat screen for one logged-in user.

    Outgoing envelopes go to ``service``; if a bus is given, the chat
    subscribes to it and handles every incoming envelope.
    """

    def __init__(
        self,
        username: str,
        service: Sender | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.current_user = username
        self.users: list[UserProfile] = []
        self.messages: list[MessageData] = []
        self._service = service
        self._handler_id = None if bus is None else bus.connect(self.handle_message)

    def _send(self, message: WebSocketMessage) -> bool:
        if self._service is None:
            return False
        try:
            self._service.send(encode_message(message))
        except (asyncio.QueueFull, RuntimeError):
            return False
        return True

    def register(self) -> bool:
        """Announce the current user to the server; return whether it was queued."""
        sent = self._send(WebSocketMessage(MsgType.REGISTER, data=self.current_user))
        if sent:
            log.debug("Registered user %s", self.current_user)
        return sent

    def handle_message(self, data: str) -> bool:
        """Apply an envelope from the server; return whether the view changed.

        Raises ValueError if the envelope or its payload is malformed.
        """
        envelope = decode_message(data)
        if envelope.message_type is MsgType.USERS:
            self.users = [
                UserProfile(name=name, avatar=avatar_url(name))
                for name in envelope.data_array or []
            ]
            return True
        if envelope.message_type is MsgType.MESSAGE:
            if envelope.data is None:
                raise ValueError("message envelope carries no data")
            self.messages.append(parse_message_data(envelope.data))
            return True
        return False

    def submit_message(self, text: str) -> bool:
        """Send text as a chat message unless it is blank; return whether it was queued."""
        if not text.strip():
            return False
        return self._send(WebSocketMessage(MsgType.MESSAGE, data=text))

    def react(self, index: int, emoji: str) -> bool:
        """Toggle the current user's reaction on a message; False if there is no such message."""
        if not 0 <= index < len(self.messages):
            return False
        message = self.messages[index]
        user = self.current_user
        if message.reactions is None:
            message.reactions = [(emoji, [user])]
            return True
        for existing, users in message.reactions:
            if existing == emoji:
                if user in users:
                    users[:] = [name for name in users if name != user]
                else:
                    users.append(user)
                return True
        message.reactions.append((emoji, [user]))
        return True

    def reaction_count(self, index: int, emoji: str) -> int:
        """Number of users who reacted to a message with an emoji."""
        if not 0 <= index < len(self.messages):
            raise IndexError("message index out of range")
        reactions = self.messages[index].reactions or []
        return next((len(users) for existing, users in reactions if existing == emoji), 0)

    def profile_for(self, name: str) -> UserProfile:
        """Profile of a connected user, or a default one for an unknown name."""
        return next(
            (user for user in self.users if user.name == name),
            UserProfile(name=name, avatar=avatar_url(name)),
        )

    def render(self) -> str:
        """Render the chat screen as HTML."""
        users = "".join(self._render_user(user) for user in self.users)
        messages = "".join(
            self._render_message(index, message)
            for index, message in enumerate(self.messages)
        )
        return (
            '<div class="flex w-screen">'
            '<div class="w-56 h-screen bg-gray-100 overflow-auto">'
            '<div class="text-xl p-3 font-semibold">Users</div>'
            f"{users}"
            "</div>"
            '<div class="flex-1 flex flex-col h-screen">'
            '<div class="h-14 border-b p-3 text-xl font-semibold">💬 Chat!</div>'
            '<div class="flex-1 overflow-auto border-b p-4 space-y-4">'
            f"{messages}"
            "</div>"
            '<div class="h-16 flex items-center p-4">'
            '<input type="text" placeholder="Type a message..." '
            'class="flex-1 rounded-full bg-gray-100 px-4 py-2 focus:outline-none"/>'
            '<button class="ml-2 w-10 h-10 bg-blue-600 rounded-full flex items-center '
            'justify-center text-white">'
            '<svg class="w-5 h-5 fill-current" viewBox="0 0 24 24">'
            '<path d="M2.01 21L23 12 2.01 3 2 10l15 2-15 2z"/></svg>'
            "</button>"
            "</div>"
            "</div>"
            "</div>"
        )

    @staticmethod
    def _render_user(user: UserProfile) -> str:
        return (
            '<div class="flex m-3 bg-white rounded-lg p-2">'
            f'<img class="w-12 h-12 rounded-full" src="{escape(user.avatar)}" alt="avatar"/>'
            '<div class="p-3 text-sm">'
            f'<div class="font-medium">{escape(user.name)}</div>'
            '<div class="text-xs text-gray-400">Hi there!</div>'
            "</div>"
            "</div>"
        )

    def _render_message(self, index: int, message: MessageData) -> str:
        profile = self.profile_for(message.sender)
        buttons = "".join(self._render_reaction(index, emoji) for emoji in EMOJIS)
        return (
            '<div class="flex items-start space-x-3 bg-gray-100 p-3 rounded-xl max-w-lg">'
            f'<img class="w-10 h-10 rounded-full" src="{escape(profile.avatar)}" alt="avatar"/>'
            "<div>"
            f'<div class="text-sm font-medium">{escape(message.sender)}</div>'
            f'<div class="text-base">{escape(message.message)}</div>'
            f'<div class="mt-2 flex flex-wrap gap-1">{buttons}</div>'
            "</div>"
            "</div>"
        )

    def _render_reaction(self, index: int, emoji: str) -> str:
        count = self.reaction_count(index, emoji)
        badge = f'<span class="ml-1 text-xs font-semibold">{count}</span>' if count > 0 else ""
        return (
            f'<button data-index="{index}" data-emoji="{escape(emoji)}" '
            'class="flex items-center bg-white px-2 py-1 text-sm rounded-full border '
            'hover:bg-gray-200 transition">'
            f"<span>{escape(emoji)}</span>{badge}"
            "</button>"
        )