"""
Thin wrapper around an OpenAI-compatible chat-completions endpoint.
Requests JSON-object responses, unwraps choices[0].message.content, and retries
rate-limited calls with exponential backoff.
"""

from __future__ import annotations

import json
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from .config import Settings

MessageContent = Union[str, List[Dict[str, Any]]]


class OpenAIAPIError(RuntimeError):
    def __init__(self, status_code: int, err_type: str, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.err_type = err_type
        self.message = message
        self.raw = raw


def _parse_error(resp: requests.Response) -> OpenAIAPIError:
    """Fold any provider error body into an OpenAIAPIError."""
    status = resp.status_code
    raw = resp.text
    try:
        body = resp.json()
    except ValueError:
        return OpenAIAPIError(status, "api_error", raw, raw=raw)
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        err_type = str(body["error"].get("type") or "api_error")
        message = str(body["error"].get("message") or raw)
        return OpenAIAPIError(status, err_type, message, raw=raw)
    if isinstance(body, dict) and "message" in body:
        return OpenAIAPIError(status, "api_error", str(body["message"]), raw=raw)
    return OpenAIAPIError(status, "api_error", raw, raw=raw)


def _unwrap_content(data: Any) -> Any:
    """
    Return choices[0].message.content, decoded when it is a JSON string.
    """
    if not (isinstance(data, dict) and isinstance(data.get("choices"), list) and data["choices"]):
        return data
    first = data["choices"][0] or {}
    content = (first.get("message") or {}).get("content")
    if content is None:
        content = first.get("text")
    if isinstance(content, str):
        text = content.strip()
        if (text.startswith("{") and text.endswith("}")) or (
            text.startswith("[") and text.endswith("]")
        ):
            try:
                return json.loads(text)
            except ValueError:
                return content
    return content


class OpenAIClient:
    """
    Explicitly constructed client; pass one instance to each collaborator that
    needs model access.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        session: Optional[requests.Session] = None,
        timeout: float = 60.0,
        max_retries: int = 6,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_retries = max_retries
        self.sleep = sleep
        self.log = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "OpenAIClient":
        return cls(
            api_key=settings.require_openai(),
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            **kwargs,
        )

    def json_call(self, system: str, user: MessageContent, max_tokens: int = 1500) -> Any:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "response_format": {"type": "json_object"},
            "max_tokens": max_tokens,
        }
        return self._with_backoff(lambda: self._post(payload))

    def _post(self, payload: Dict[str, Any]) -> Any:
        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            self.log.warning("Model provider unreachable: %s", exc)
            raise OpenAIAPIError(0, "connection_error", str(exc)) from exc
        if response.status_code >= 400:
            raise _parse_error(response)
        try:
            data = response.json()
        except ValueError:
            self.log.warning("Model provider returned non-JSON body")
            return {"raw_text": response.text}
        return _unwrap_content(data)

    def _with_backoff(self, fn: Callable[[], Any], base_sleep: float = 1.0, max_sleep: float = 30.0) -> Any:
        last_exc: Optional[OpenAIAPIError] = None
        for attempt in range(self.max_retries):
            try:
                return fn()
            except OpenAIAPIError as api_err:
                # Only rate limits are retried; quota exhaustion is final.
                if api_err.status_code != 429 or api_err.err_type == "insufficient_quota":
                    raise
                last_exc = api_err
                delay = min(max_sleep, base_sleep * (2 ** attempt))
                delay += random.uniform(0, 0.3 * delay)
                self.log.info("Rate limited (attempt %d), retrying in %.1fs", attempt + 1, delay)
                self.sleep(delay)
        if last_exc is not None:
            raise last_exc
        raise RuntimeError("rate limit: exceeded retries")
