# cvchat_server/providers/openai_responses.py
# -*- coding: utf-8 -*-
"""
CV Chat Server — OpenAI Responses API provider
----------------------------------------------
This module is the ONLY place that knows how to talk to the model API.

Responsibilities:
- Build the HTTP request (URL, headers, JSON payload).
- Validate the response body against a typed schema.
- Return the generated text, or raise ProviderUnavailable.

The HTTP call uses `requests`, which blocks, so `complete()` runs it in
Starlette's threadpool and the event loop keeps serving other requests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, ConfigDict, ValidationError
from starlette.concurrency import run_in_threadpool

from cvchat_server.core.config import Settings
from cvchat_server.core.errors import ProviderUnavailable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------


class ContentPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    text: Optional[str] = None


class OutputItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    content: List[ContentPart] = []


class ResponsesPayload(BaseModel):
    """
    The subset of a Responses API body we rely on:

        {"output": [{"type": "message",
                     "content": [{"type": "output_text", "text": "..."}]}]}
    """

    model_config = ConfigDict(extra="ignore")

    output: List[OutputItem]

    def first_text(self) -> Optional[str]:
        """First non-empty text part across all output items, stripped."""
        for item in self.output:
            for part in item.content:
                if part.text and part.text.strip():
                    return part.text.strip()
        return None


def _build_payload(prompt: str, model: str) -> Dict[str, Any]:
    return {"model": model, "input": prompt}


def _error_message(resp: requests.Response) -> str:
    """Pull `error.message` out of an error body, else a short text preview."""
    try:
        data = resp.json()
        message = data["error"]["message"]
        if isinstance(message, str) and message:
            return message
    except (ValueError, KeyError, TypeError):
        pass
    return resp.text[:200].replace("\n", " ")


def parse_response_text(data: Any) -> str:
    """
    Extract reply text from a decoded Responses API body.

    Raises
    ------
    ProviderUnavailable
        If the body does not match the schema or carries no text.
    """
    try:
        payload = ResponsesPayload.model_validate(data)
    except ValidationError as exc:
        raise ProviderUnavailable(
            f"Provider response did not match schema: {exc.error_count()} error(s)"
        ) from exc

    text = payload.first_text()
    if text is None:
        raise ProviderUnavailable("Provider returned no text.")
    return text


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class OpenAIResponsesProvider:
    """
    Completion provider backed by the OpenAI Responses API.

    Parameters
    ----------
    api_key:
        Bearer token for the API.
    base_url:
        Full URL of the responses endpoint.
    timeout_s:
        requests timeout for connect/read.
    session:
        Optional requests.Session (tests inject a stub).
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.openai.com/v1/responses",
        timeout_s: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIResponsesProvider":
        settings.require_credentials()
        return cls(
            settings.openai_api_key,
            base_url=settings.provider_base_url,
            timeout_s=settings.provider_timeout_s,
        )

    def complete_sync(self, prompt: str, *, model: str) -> str:
        """Blocking call. Returns the stripped reply text."""
        try:
            resp = self._session.post(
                self.base_url,
                json=_build_payload(prompt, model),
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            raise ProviderUnavailable(f"Provider HTTP error: {exc}") from exc

        if resp.status_code != 200:
            raise ProviderUnavailable(
                _error_message(resp), status_code=resp.status_code
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderUnavailable(
                "Provider returned non-JSON response.", status_code=resp.status_code
            ) from exc

        return parse_response_text(data)

    async def complete(self, prompt: str, *, model: str) -> str:
        return await run_in_threadpool(self.complete_sync, prompt, model=model)

    def close(self) -> None:
        self._session.close()
