"""Client for the Gemini ``generateContent`` endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from .config import DEFAULT_ENDPOINT, DEFAULT_MODEL_ID
from .transport import Transport, TransportError

logger = logging.getLogger("imgharvest")


def build_request_body(prompt: str) -> Dict[str, Any]:
    """Wrap a prompt in a single user-authored content block."""
    return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}


def extract_text(response: str) -> str:
    """Return ``candidates[0].content.parts[0].text`` or an empty string."""
    if not response:
        return ""
    try:
        data = json.loads(response)
        candidates = data.get("candidates")
        if candidates:
            text = candidates[0]["content"]["parts"][0]["text"]
            if isinstance(text, str):
                return text
            logger.error("Unexpected text field in Gemini response: %r", text)
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
        logger.error("Error when parsing response from Gemini: %s", exc)
    return ""


class GeminiClient:
    """Thin wrapper issuing single-prompt requests against a Gemini model."""

    def __init__(
        self,
        api_key: str,
        transport: Transport,
        model_id: str = DEFAULT_MODEL_ID,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key
        self.transport = transport
        self.model_id = model_id
        self.endpoint = endpoint
        self.timeout = timeout

    def build_url(self) -> str:
        base = self.endpoint.rstrip("/")
        return f"{base}/{self.model_id}:generateContent?key={self.api_key}"

    def post(self, prompt: str) -> str:
        """Send ``prompt`` and return the raw response body, or ``""`` on failure."""
        try:
            return self.transport.post_json(
                self.build_url(), build_request_body(prompt), timeout=self.timeout
            )
        except TransportError as exc:
            logger.error("Error in request to %s: %s", self.model_id, exc)
            return ""

    def generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the first candidate's text."""
        return extract_text(self.post(prompt))
