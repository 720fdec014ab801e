"""Generative model client that turns a page into a draft item."""

import json
import logging
import re
from typing import Any

import httpx

from page_clipper.ai.prompts import build_prompt
from page_clipper.config import ModelConfig
from page_clipper.errors import (
    DecodingError,
    HTTPError,
    ModelError,
    RateLimited,
    ServerError,
)
from page_clipper.http.executor import ResilientExecutor
from page_clipper.store.models import DraftItem, Property

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[a-zA-Z]*")


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence markers such as ```json and ```."""
    return _FENCE_RE.sub("", text).strip()


def first_candidate_text(payload: Any) -> str | None:
    """Text of the first part of the first candidate, if any."""
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    for part in parts:
        if isinstance(part, dict) and isinstance(part.get("text"), str):
            return part["text"]
    return None


def parse_draft(text: str) -> DraftItem:
    """Parse model output into a JSON object, tolerating fences and chatter."""
    cleaned = strip_code_fences(text)
    try:
        item = json.loads(cleaned)
    except json.JSONDecodeError:
        item = None
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if 0 <= start < end:
            try:
                item = json.loads(cleaned[start:end + 1])
            except json.JSONDecodeError:
                item = None
    if not isinstance(item, dict):
        raise DecodingError("The AI model returned invalid JSON", cleaned)
    return item


def model_error(status: int, body: str) -> Exception:
    """Map a failed model response onto the error taxonomy."""
    if status == 429:
        return RateLimited(body)
    if status >= 500:
        return ServerError(status, body)
    try:
        error = json.loads(body).get("error")
    except (json.JSONDecodeError, AttributeError):
        error = None
    if isinstance(error, dict) and (error.get("message") or error.get("status")):
        return ModelError(
            error.get("message") or "unknown error",
            status=error.get("status"),
            code=error.get("code") if isinstance(error.get("code"), int) else status,
        )
    return HTTPError(status, body)


class GeminiClient:
    """Client for the ``generateContent`` text-generation endpoint."""

    def __init__(self, executor: ResilientExecutor, api_key: str, config: ModelConfig | None = None):
        self.executor = executor
        self.config = config or ModelConfig()
        self._api_key = api_key

    @property
    def endpoint(self) -> str:
        return f"{self.config.endpoint.rstrip('/')}/{self.config.model}:generateContent"

    def _request(self, prompt: str) -> httpx.Request:
        # Key goes in a header so it never shows up in URLs or proxy logs.
        return httpx.Request(
            "POST",
            self.endpoint,
            headers={self.config.api_key_header: self._api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
            extensions={"timeout": httpx.Timeout(self.config.timeout_ms / 1000).as_dict()},
        )

    async def generate_item(
        self,
        url: str,
        page_content: str,
        schema: list[Property],
        content_key: str,
        user_guidance: str = "",
        suggested_image_url: str = "",
    ) -> DraftItem:
        """Ask the model for a draft item matching ``schema``."""
        prompt = build_prompt(
            url,
            page_content,
            schema,
            content_key,
            user_guidance=user_guidance,
            suggested_image_url=suggested_image_url,
            max_content_chars=self.config.max_content_chars,
        )
        logger.debug("Prompting %s with %d characters", self.config.model, len(prompt))

        try:
            body, _ = await self.executor.execute(self._request(prompt))
        except HTTPError as e:
            raise model_error(e.status, e.body) from e

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise DecodingError("The AI model returned a non-JSON response", body) from e

        text = first_candidate_text(payload)
        if text is None:
            raise DecodingError("The AI model returned no candidates", body)
        return parse_draft(text)
