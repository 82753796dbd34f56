"""
Shared error codes used across layers (Domain/Core/API).

This module provides a single source of truth to avoid drift between
multiple enum definitions scattered across the codebase.
"""
from enum import IntEnum


class ChatErrorCode(IntEnum):
    """Chat broker error codes (single source of truth)."""

    # Login errors (1xxxx)
    LOGIN_EMPTY = 10001
    LOGIN_TAKEN = 10002

    # Transport errors (2xxxx)
    TRANSPORT_CLOSED = 20001

    # System errors (4xxxx)
    SYSTEM_ERROR = 40000
    SERVICE_UNAVAILABLE = 40003


__all__ = ["ChatErrorCode"]
