# cvchat_server/models/chat_response.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — ChatResponse model
-----------------------------------
Response payload for POST /api/chat (camelCase on the wire).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from cvchat_server.core.types import ChatResult


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str = Field(..., description="Assistant reply (or fallback text).")
    session_id: str = Field(
        ...,
        alias="sessionId",
        description="Send this back as sessionId to continue the conversation.",
    )
    history_length: int = Field(
        ...,
        alias="historyLength",
        description="Turns currently remembered for this session.",
    )

    @classmethod
    def from_result(cls, result: ChatResult) -> "ChatResponse":
        return cls(
            reply=result.reply,
            session_id=result.session_id,
            history_length=result.history_length,
        )


class ErrorResponse(BaseModel):
    error: str
