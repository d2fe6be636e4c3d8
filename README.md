# webchat

A small chat client that talks to a chat server over a WebSocket. It
registers you under a username, keeps track of the connected users, shows
incoming messages and keeps emoji reactions on each message.

## Installation

```
pip install .
```

To run the test suite, install the test extra and run pytest:

```
pip install ".[test]"
pytest
```

## Running

```
webchat alice
```

The client connects to `ws://127.0.0.1:8080` and registers the given
username with the server. Each line you type on standard input is then
sent as a chat message. Empty or whitespace-only lines are not sent. End
of input (Ctrl-D) or Ctrl-C stops the client.

Incoming chat messages are printed as `sender: text`. When the server
sends a new list of users, the client prints `online: name, name, ...`.
Malformed frames from the server are logged as warnings and skipped.

Options:

- `--url URL` connects to another chat server.
- `--render PATH` prints the HTML page for a path (`/`, `/chat`, or any
  other path, which gives the not-found page) and exits without
  connecting.

If the connection fails, the error is printed to standard error and the
command exits with status 1.

## Modules

- `webchat.protocol` holds the JSON wire format. Every frame is a
  `WebSocketMessage` carrying a `MsgType` (`users`, `register` or
  `message`) with optional `data` and `data_array` fields, sent as
  `messageType`, `data` and `dataArray`. `encode_message` and
  `decode_message` convert frames to and from JSON text, and
  `parse_message_data` reads the `MessageData` inside a chat message: its
  `sender` (the `from` field), its `message` text and its `reactions`.
  `UserProfile` pairs a user name with the avatar URL that `avatar_url`
  builds for it. Malformed input raises `ValueError`.
- `webchat.event_bus` provides `EventBus`, a small publish/subscribe hub.
  `connect` registers a callback and returns a handler id, `disconnect`
  removes that handler, and `publish` delivers a text to every connected
  subscriber.
- `webchat.websocket` provides `WebsocketService`, which owns the
  connection. `start` opens it, `send` queues outgoing text without
  waiting (raising `RuntimeError` once closed and `asyncio.QueueFull` when
  the queue of 1000 is full), and `close` shuts it down; it can also be
  used as an `async with` block. Incoming text frames and UTF-8 binary
  frames are turned into text by `decode_frame` and published on the
  event bus; other binary frames are dropped.
- `webchat.chat` provides `Chat`, the chat state for one user.
  `register` announces the user, `handle_message` applies frames from the
  server (user lists and new messages), `submit_message` sends non-blank
  text, and `react` toggles the user's reaction on a message: reacting
  twice with the same emoji takes it back. `reaction_count` tells how many
  users used an emoji on a message, `profile_for` finds the profile for a
  sender, and `render` returns the chat screen as HTML, with a button for
  each of 👍 ❤️ 😂 😮 😢 👏 under every message.
- `webchat.app` ties it together: `Route` names the pages (login, chat
  and not found), `resolve_route` maps a path to a route, `render_route`
  renders its page as HTML, `login` sets the `User`'s name (rejecting an
  empty one), and `main` is the `webchat` command.

## Using it from Python

```python
from webchat.event_bus import EventBus

bus = EventBus()
received = []
handler = bus.connect(received.append)
bus.publish("hello")
bus.disconnect(handler)
bus.publish("nobody hears this")
# received == ["hello"]
```

```python
from webchat.chat import Chat

chat = Chat("alice")
chat.handle_message(
    '{"messageType":"message","data":"{\\"from\\":\\"bob\\",\\"message\\":\\"hi\\"}"}'
)
chat.react(0, "👍")
# chat.reaction_count(0, "👍") == 1
```

## What it does not do

- There is no chat server here; the client needs one to talk to.
- Reactions are kept only in the local `Chat` state. They are not sent
  to the server, and the `webchat` command offers no way to react.
- The HTML pages from `render` and `--render` are plain strings. Nothing
  serves them to a browser, and their buttons and inputs do nothing.