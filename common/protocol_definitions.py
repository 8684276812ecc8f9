"""
Protocol definitions for the broadcast chat service.

This module defines the auth payload structure and the text notices exchanged
between client and server.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from common.constants import DISPLAY_TIMESTAMP_FORMAT, Notices


class AuthFormatError(ValueError):
    """Raised when the first frame cannot be parsed into an auth payload.

    ``notice`` is the text sent back to the client.
    """

    def __init__(self, notice: str):
        super().__init__(notice)
        self.notice = notice


@dataclass
class AuthPayload:
    """Credentials carried by the first frame of a connection."""
    username: str
    password: str


def parse_auth_payload(frame: str) -> AuthPayload:
    """
    Parse the first inbound frame as ``{"username": ..., "password": ...}``.

    Raises AuthFormatError with INVALID_AUTH_FORMAT when the frame is not a JSON
    object, and with CREDENTIALS_REQUIRED when either field is missing, empty or
    not a string. Extra keys are ignored.

    Surrounding whitespace is stripped from the username, so " alice" and
    "alice" name the same account. The password is used exactly as sent.
    """
    try:
        data = json.loads(frame)
    except (TypeError, ValueError):
        raise AuthFormatError(Notices.INVALID_AUTH_FORMAT) from None

    if not isinstance(data, dict):
        raise AuthFormatError(Notices.INVALID_AUTH_FORMAT) from None

    username = data.get('username')
    password = data.get('password')

    if not isinstance(username, str) or not isinstance(password, str):
        raise AuthFormatError(Notices.CREDENTIALS_REQUIRED)

    username = username.strip()
    if not username or not password:
        raise AuthFormatError(Notices.CREDENTIALS_REQUIRED)

    return AuthPayload(username=username, password=password)


def create_auth_message(username: str, password: str) -> str:
    """Create the auth frame a client sends first."""
    return json.dumps({
        "username": username,
        "password": password
    })


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Human readable local timestamp used in chat lines."""
    return (moment or datetime.now()).strftime(DISPLAY_TIMESTAMP_FORMAT)


def create_joined_notice(username: str) -> str:
    """Create a user joined announcement."""
    return f"{username} has joined"


def create_left_notice(username: str) -> str:
    """Create a user left announcement."""
    return f"{username} has left"


def create_chat_line(timestamp: str, username: str, text: str) -> str:
    """Create the relayed chat line."""
    return f"{timestamp}: {username} said: {text}"


def is_error_notice(text: Any) -> bool:
    """True if a server notice reports a failure."""
    return isinstance(text, str) and text.startswith(Notices.ERROR_PREFIX)

