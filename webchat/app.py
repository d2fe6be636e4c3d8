"""Routes, login and the command-line chat client."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from html import escape

from websockets.exceptions import WebSocketException

from webchat.chat import Chat
from webchat.event_bus import EventBus
from webchat.websocket import DEFAULT_URL, WebsocketService

INITIAL_USERNAME = "initial"

log = logging.getLogger(__name__)


class Route(str, Enum):
    """Pages of the application, keyed by path."""

    LOGIN = "/"
    CHAT = "/chat"
    NOT_FOUND = "/404"


@dataclass
class User:
    """The user shared between the login and chat screens."""

    username: str = INITIAL_USERNAME


def resolve_route(path: str) -> Route:
    """Map a path to its route; unknown paths go to NOT_FOUND."""
    path = path.split("#", 1)[0].split("?", 1)[0] or "/"
    return next((route for route in Route if route.value == path), Route.NOT_FOUND)


def _render_login(username: str = "") -> str:
    disabled = " disabled" if len(username) < 1 else ""
    return (
        '<div class="bg-gray-800 flex w-screen">'
        '<div class="container mx-auto flex flex-col justify-center items-center">'
        '<form class="m-4 flex">'
        '<input class="rounded-l-lg p-4 border-t mr-0 border-b border-l text-gray-800 '
        f'border-gray-200 bg-white" placeholder="Username" value="{escape(username)}"/>'
        f'<a href="{Route.CHAT.value}">'
        f'<button{disabled} class="px-8 rounded-r-lg bg-violet-600 text-white font-bold p-4 '
        'uppercase border-violet-600 border-t border-b border-r">Go Chatting!</button>'
        "</a>"
        "</form>"
        "</div>"
        "</div>"
    )


def render_route(route: Route) -> str:
    """Render the page for a route inside the application layout."""
    if route is Route.LOGIN:
        body = _render_login()
    elif route is Route.CHAT:
        body = Chat(INITIAL_USERNAME).render()
    else:
        body = "<h1>404 baby</h1>"
    return f'<div class="flex w-screen h-screen">{body}</div>'


def login(user: User, username: str) -> Route:
    """Set the shared user's name and return the route to go to next."""
    if len(username) < 1:
        raise ValueError("username must not be empty")
    user.username = username
    return Route.CHAT


async def _run_client(user: User, url: str) -> None:
    bus = EventBus()
    service = WebsocketService(bus, url)
    chat = Chat(user.username, service)
    shown = 0

    def on_event(text: str) -> None:
        nonlocal shown
        try:
            changed = chat.handle_message(text)
        except ValueError as exc:
            log.warning("ignoring malformed message: %s", exc)
            return
        new_messages = chat.messages[shown:]
        for message in new_messages:
            print(f"{message.sender}: {message.message}", flush=True)
        shown = len(chat.messages)
        if changed and not new_messages:
            names = ", ".join(profile.name for profile in chat.users)
            print(f"online: {names}", flush=True)

    bus.connect(on_event)
    async with service:
        chat.register()
        loop = asyncio.get_running_loop()
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            chat.submit_message(line.rstrip("\n"))


def main(argv: list[str] | None = None) -> int:
    """Run the chat client, or print the page for a path with --render."""
    parser = argparse.ArgumentParser(
        prog="webchat", description="Chat client for a websocket chat server."
    )
    parser.add_argument("username", nargs="?", help="name to chat under")
    parser.add_argument("--url", default=DEFAULT_URL, help="chat server address")
    parser.add_argument("--render", metavar="PATH", help="print the page for PATH and exit")
    args = parser.parse_args(argv)

    if args.render is not None:
        print(render_route(resolve_route(args.render)))
        return 0
    if args.username is None:
        parser.error("a username is required")

    user = User()
    try:
        login(user, args.username)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        asyncio.run(_run_client(user, args.url))
    except KeyboardInterrupt:
        pass
    except (OSError, WebSocketException) as exc:
        print(f"webchat: {exc}", file=sys.stderr)
        return 1
    return 0