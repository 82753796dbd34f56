"""Domain exceptions for the chat broker.

The core layer only maps these to wire/HTTP responses; the domain layer
never depends on core.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import ChatErrorCode


class ChatException(Exception):
    """Base class for user-visible chat errors.

    ``message`` is the literal reason sent back to the client after the
    ``ERROR: `` prefix, so it is part of the wire contract.
    """

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "ChatError",
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        super().__init__(self.message)


class LoginEmptyException(ChatException):
    def __init__(self):
        super().__init__(
            code=ChatErrorCode.LOGIN_EMPTY,
            message="Логин не может быть пустым",
            error_type="LoginEmpty",
        )


class LoginTakenException(ChatException):
    def __init__(self, name: str):
        super().__init__(
            code=ChatErrorCode.LOGIN_TAKEN,
            message="Логин уже занят",
            error_type="LoginTaken",
            details={"name": name},
        )


__all__ = [
    "ChatException",
    "LoginEmptyException",
    "LoginTakenException",
]
