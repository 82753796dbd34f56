"""Wire lines exchanged with chat clients.

The literal strings below are the client contract; browser clients and
tests match on them verbatim.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


LOGIN_PREFIX = "LOGIN:"
LOGIN_PROMPT = "Введите ваш логин:"
ERROR_PREFIX = "ERROR: "
SERVER_PREFIX = "Server: "
ECHO_PREFIX = "Вы: "


@dataclass(frozen=True)
class LoginFrame:
    """Parsed ``LOGIN:<name>[:<room>]`` frame (values already trimmed)."""

    name: str
    room: Optional[str] = None


def is_login_frame(frame: str) -> bool:
    return frame.startswith(LOGIN_PREFIX)


def parse_login(frame: str) -> LoginFrame:
    """Parse a login frame.

    The frame is split on the first ``:`` into key and value. The value
    carries the display name and, optionally, the room after its last
    ``:``. An empty room means "use the server default".
    """
    _key, _, value = frame.partition(":")
    name, sep, room = value.rpartition(":")
    if not sep:
        return LoginFrame(name=value.strip())
    return LoginFrame(name=name.strip(), room=room.strip() or None)


def error_line(reason: str) -> str:
    return f"{ERROR_PREFIX}{reason}"


def chat_line(name: str, text: str) -> str:
    return f"{name}: {text}"


def echo_line(text: str) -> str:
    return f"{ECHO_PREFIX}{text}"


def joined_text(name: str) -> str:
    return f"{name} подключился"


def left_text(name: str) -> str:
    return f"{name} покинул чат"


def server_line(text: str) -> str:
    return f"{SERVER_PREFIX}{text}"


__all__ = [
    "LOGIN_PREFIX",
    "LOGIN_PROMPT",
    "LoginFrame",
    "is_login_frame",
    "parse_login",
    "error_line",
    "chat_line",
    "echo_line",
    "joined_text",
    "left_text",
    "server_line",
]
