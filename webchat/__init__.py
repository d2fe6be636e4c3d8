"""WebSocket chat client with user lists, messages and emoji reactions."""

__version__ = "0.1.0"