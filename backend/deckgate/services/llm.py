import json
import logging
import re

import httpx

from deckgate.core.config import settings
from deckgate.core.errors import LLMError, LLMQuotaError, LLMUnavailableError

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = ("credits", "quota", "limit")

MOCK_RESPONSE = '{"pass": true, "reasons": ["Mock reasoning service: metadata looks acceptable"]}'


def extract_json_string(raw: str) -> str:
    """Strip markdown code fences and return the first balanced JSON object."""
    s = raw.strip()
    for pattern in (r"^```(?:json)?\s*\n?(.*?)\n?```\s*$", r"^```\s*\n?(.*?)\n?```\s*$"):
        m = re.search(pattern, s, re.DOTALL)
        if m:
            s = m.group(1).strip()
    start = s.find("{")
    if start == -1:
        return s
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(s)):
        ch = s[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return s[start : i + 1]
    return s


def parse_json_object(content: str) -> dict:
    """Parse raw model output into a dict, tolerating prose and code fences around it."""
    if not content or not content.strip():
        raise LLMError("empty model output", code="LLM_OUTPUT_INVALID")
    last_error: Exception | None = None
    for candidate in (content.strip(), extract_json_string(content)):
        if not candidate:
            continue
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as exc:
            last_error = exc
            continue
        if isinstance(parsed, dict):
            return parsed
    snippet = content.strip()[:200]
    raise LLMError(f"cannot parse JSON. Raw snippet: {snippet!r}", code="LLM_OUTPUT_INVALID") from last_error


def _raise_for_status(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    detail = resp.text[:500]
    message = f"LLM_API_ERROR ({resp.status_code}): {detail}"
    lowered = detail.lower()
    if resp.status_code in (402, 429) or any(m in lowered for m in _QUOTA_MARKERS):
        raise LLMQuotaError(message)
    raise LLMError(message)


class LLMClient:
    """Thin async client for an OpenAI-compatible or Anthropic chat endpoint."""

    def __init__(self, provider: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.provider = (provider or settings.llm_provider).lower()
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        if self.provider == "mock":
            return True
        if self.provider == "anthropic":
            return bool(settings.anthropic_auth_token or settings.llm_api_key)
        return bool(settings.llm_api_key)

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazily-created, reusable client with connection pooling."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=settings.llm_timeout_seconds,
                trust_env=False,
                transport=self._transport,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def complete(self, system: str, user: str) -> str:
        """Return the raw text of a single completion."""
        if self.provider == "mock":
            return MOCK_RESPONSE
        if self.provider == "anthropic":
            return await self._call_anthropic_raw(system, user)
        return await self._call_openai_raw(system, user)

    async def _call_openai_raw(self, system: str, user: str) -> str:
        if not settings.llm_api_key:
            raise LLMUnavailableError("LLM_API_KEY not configured")

        payload = {
            "model": settings.llm_model,
            "temperature": settings.llm_temperature,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }

        url = f"{settings.llm_base_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {settings.llm_api_key}", "Content-Type": "application/json"}

        try:
            resp = await self.http_client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise LLMError(f"LLM_API_ERROR: {exc!s}") from exc
        _raise_for_status(resp)
        data = resp.json()

        return data.get("choices", [{}])[0].get("message", {}).get("content", "") or ""

    async def _call_anthropic_raw(self, system: str, user: str) -> str:
        token = settings.anthropic_auth_token or settings.llm_api_key
        if not token:
            raise LLMUnavailableError("ANTHROPIC_AUTH_TOKEN not configured")

        payload = {
            "model": settings.llm_model,
            "max_tokens": 600,
            "temperature": settings.llm_temperature,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }

        url = f"{settings.anthropic_base_url.rstrip('/')}/v1/messages"
        headers = {
            "x-api-key": token,
            "anthropic-version": settings.anthropic_version,
            "content-type": "application/json",
        }

        try:
            resp = await self.http_client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise LLMError(f"LLM_API_ERROR: {exc!s}") from exc
        _raise_for_status(resp)
        data = resp.json()

        blocks = data.get("content", [])
        text_parts = [b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type") == "text"]
        return "\n".join([p for p in text_parts if p]).strip()
