# cvchat_server/models/chat_request.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — ChatRequest model
----------------------------------
Request payload for POST /api/chat.

The front-end sends camelCase JSON:

    {"message": "How do I format my skills?", "sessionId": "3f2a..."}

`message` is deliberately optional here: an absent or empty message must be
answered with 400 {"error": "No message provided"}, not a 422 validation
error, so the emptiness check lives in the orchestrator.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """
    Fields
    ------
    message:
        The visitor's chat message.
    session_id:
        Id returned by a previous reply. Omit it to start a new conversation.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"message": "Hello"},
                {
                    "message": "What format should my education use?",
                    "sessionId": "9b1de7a3c2f44e0c8f7d2a6b5e4c3d21",
                },
            ]
        },
    )

    message: Optional[str] = Field(
        default=None,
        description="User chat message (required, non-empty).",
    )
    session_id: Optional[str] = Field(
        default=None,
        alias="sessionId",
        description="Conversation id from a previous reply.",
    )
