# cvchat_server/core/errors.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — Error taxonomy
-------------------------------
- InvalidRequest      : the caller sent something we cannot use (HTTP 400).
- UnknownSession      : unknown sessionId under the "reject" policy (HTTP 404).
- ProviderUnavailable : the completion provider failed, timed out, or returned
                        unusable content. Absorbed into a fallback reply.
- ConfigurationFatal  : required configuration is missing; do not serve traffic.
"""

from __future__ import annotations

from typing import Optional


class ChatServerError(Exception):
    """Base class for all errors raised by the chat server."""


class InvalidRequest(ChatServerError):
    """Raised when a request cannot be processed as sent."""

    status_code: int = 400

    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(message)
        self.message = message


class UnknownSession(InvalidRequest):
    """Raised when a client refers to a session that does not exist."""

    status_code = 404

    def __init__(self, session_id: str) -> None:
        super().__init__("Unknown session")
        self.session_id = session_id


class ProviderUnavailable(ChatServerError):
    """Raised when the completion provider fails in a recoverable way."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.message}"
        return self.message


class ConfigurationFatal(ChatServerError):
    """Raised at startup when the server cannot run with the given config."""
