# api_handler.py
"""Provider registry for the LLM backends used by the generation services.

Each supported provider is a small class exposing the same
``send(prompt, *, temperature, max_tokens) -> str`` capability:

- ``openai``    → Chat Completions through the ``openai`` SDK
- ``anthropic`` → Messages API over plain HTTP (``httpx``)
- ``custom``    → a self-hosted endpoint taking ``{prompt, temperature, max_tokens}``

The registry itself is immutable and built once from configuration, so a
missing secret only surfaces when that provider is actually called.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import httpx
import openai

from .errors import GenerationCancelled, GenerationUnavailable, InvalidPromptInput, UnsupportedProvider

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

OPENAI_DEFAULT_BASE = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-3.5-turbo"
ANTHROPIC_DEFAULT_BASE = "https://api.anthropic.com/v1"
ANTHROPIC_DEFAULT_MODEL = "claude-3-sonnet-20240229"
ANTHROPIC_VERSION = "2023-06-01"

# Seconds between cancellation checks while a request is in flight.
CANCEL_POLL_INTERVAL = 0.1


@dataclass(frozen=True)
class ProviderSettings:
    provider_id: str
    display_name: str
    base_url: Optional[str]
    api_key: Optional[str] = None
    model_name: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


class BaseProvider:
    """Common request lifecycle shared by every provider variant."""

    requires_api_key = True

    def __init__(self, settings: ProviderSettings, *, http_client: Optional[httpx.Client] = None) -> None:
        self.settings = settings
        self._http_client = http_client

    @property
    def provider_id(self) -> str:
        return self.settings.provider_id

    @property
    def display_name(self) -> str:
        return self.settings.display_name

    # ---------------- public API ----------------
    def send(
        self,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """Run one request and return the reply text.

        With a ``cancel_event`` the request runs on a worker thread; setting the
        event closes the connection and raises ``GenerationCancelled`` right away.
        """

        if not isinstance(prompt, str) or not prompt.strip():
            raise InvalidPromptInput("prompt")
        temperature, max_tokens = check_generation_parameters(temperature, max_tokens)

        self._ensure_configured()
        client = self._http_client or httpx.Client(timeout=self.settings.timeout)
        try:
            if cancel_event is None:
                return self._request(client, prompt, temperature, max_tokens, None)
            return self._request_cancellable(client, prompt, temperature, max_tokens, cancel_event)
        finally:
            # Closing an owned client also tears down a request still running on a worker.
            if self._http_client is None:
                client.close()

    def signature(self) -> Tuple[str, str]:
        # Never return raw secrets
        key = self.settings.api_key or ""
        redacted = (key[:4] + "…" + key[-4:]) if key else ""
        return (self.provider_id, redacted)

    def build_payload(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        raise NotImplementedError

    def auth_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    # ---------------- internals ----------------
    def _ensure_configured(self) -> None:
        if self.requires_api_key and not (self.settings.api_key or "").strip():
            LOGGER.warning("No API key configured for the %s provider.", self.display_name)
            raise GenerationUnavailable(self.provider_id)
        if not (self.settings.base_url or "").strip():
            LOGGER.warning("No endpoint configured for the %s provider.", self.display_name)
            raise GenerationUnavailable(self.provider_id)

    def _request(
        self,
        client: httpx.Client,
        prompt: str,
        temperature: float,
        max_tokens: int,
        cancel_event: Optional[threading.Event],
    ) -> str:
        try:
            text = self._dispatch(client, prompt, temperature, max_tokens)
        except (httpx.HTTPError, openai.OpenAIError, ValueError) as exc:
            if cancel_event is None or not cancel_event.is_set():
                LOGGER.warning("%s request failed: %s", self.display_name, _shorten_debug(str(exc)))
            raise GenerationUnavailable(self.provider_id) from exc

        if not text or not text.strip():
            LOGGER.warning("%s returned no text content.", self.display_name)
            raise GenerationUnavailable(self.provider_id)
        return text

    def _request_cancellable(
        self,
        client: httpx.Client,
        prompt: str,
        temperature: float,
        max_tokens: int,
        cancel_event: threading.Event,
    ) -> str:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{self.provider_id}-request")
        future = executor.submit(self._request, client, prompt, temperature, max_tokens, cancel_event)
        executor.shutdown(wait=False)

        while True:
            if cancel_event.is_set():
                LOGGER.info("%s request cancelled; closing the connection.", self.display_name)
                raise GenerationCancelled()
            try:
                return future.result(timeout=CANCEL_POLL_INTERVAL)
            except FutureTimeoutError:
                continue

    def _dispatch(self, client: httpx.Client, prompt: str, temperature: float, max_tokens: int) -> str:
        raise NotImplementedError

    def _post_json(self, client: httpx.Client, url: str, payload: Dict[str, Any]) -> Any:
        response = client.post(
            url,
            json=payload,
            headers=self.auth_headers(),
            timeout=self.settings.timeout,
        )
        if response.is_error:
            LOGGER.warning(
                "%s returned HTTP %s: %s",
                self.display_name,
                response.status_code,
                _shorten_debug(response.text),
            )
        response.raise_for_status()
        return response.json()


class OpenAIChatProvider(BaseProvider):
    """Chat Completions via the official SDK (bearer-token auth)."""

    def build_payload(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "model": self.settings.model_name or OPENAI_DEFAULT_MODEL,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

    def _dispatch(self, client: httpx.Client, prompt: str, temperature: float, max_tokens: int) -> str:
        # No SDK retries: every failure is terminal for the call.
        sdk = openai.OpenAI(
            api_key=self.settings.api_key,
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
            max_retries=0,
            http_client=client,
        )
        resp = sdk.chat.completions.create(**self.build_payload(prompt, temperature, max_tokens))
        return self._extract_text_from_chat(resp)

    def _extract_text_from_chat(self, resp: Any) -> str:
        choices = getattr(resp, "choices", []) or []
        if not choices:
            return ""
        first = choices[0]
        msg = getattr(first, "message", None)
        if isinstance(msg, dict):
            content = msg.get("content")
        else:
            content = getattr(msg, "content", None)
        if isinstance(content, list):
            parts: List[str] = []
            for p in content:
                if isinstance(p, dict) and p.get("type") == "text":
                    parts.append(str(p.get("text") or ""))
            return "\n".join([p for p in parts if p])
        return str(content or "")


class AnthropicMessagesProvider(BaseProvider):
    """Messages API; authenticated with a dedicated ``x-api-key`` header."""

    def build_payload(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "model": self.settings.model_name or ANTHROPIC_DEFAULT_MODEL,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    def auth_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.settings.api_key or "",
            "Content-Type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def _dispatch(self, client: httpx.Client, prompt: str, temperature: float, max_tokens: int) -> str:
        endpoint = f"{self.settings.base_url.rstrip('/')}/messages"
        body = self._post_json(client, endpoint, self.build_payload(prompt, temperature, max_tokens))
        blocks = body.get("content") if isinstance(body, dict) else None
        if not isinstance(blocks, list) or not blocks:
            return ""
        first = blocks[0]
        if not isinstance(first, dict):
            return ""
        return str(first.get("text") or "")


class CustomEndpointProvider(BaseProvider):
    """Self-hosted endpoint; the reply text may live under ``result``, ``text`` or ``content``."""

    requires_api_key = False

    def build_payload(self, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "prompt": prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

    def auth_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def _dispatch(self, client: httpx.Client, prompt: str, temperature: float, max_tokens: int) -> str:
        body = self._post_json(client, self.settings.base_url, self.build_payload(prompt, temperature, max_tokens))
        if not isinstance(body, dict):
            return ""
        for key in ("result", "text", "content"):
            value = body.get(key)
            if value:
                return str(value)
        return ""


class ProviderRegistry:
    """Read-only, ordered lookup of providers by model id."""

    def __init__(self, providers: Iterable[BaseProvider]) -> None:
        ordered: Dict[str, BaseProvider] = {}
        for provider in providers:
            if provider.provider_id in ordered:
                raise ValueError(f"Duplicate provider id: {provider.provider_id}")
            ordered[provider.provider_id] = provider
        self._providers: Mapping[str, BaseProvider] = MappingProxyType(ordered)

    def resolve(self, model_id: str) -> BaseProvider:
        try:
            return self._providers[model_id]
        except KeyError:
            raise UnsupportedProvider(model_id) from None

    def list_models(self) -> List[Dict[str, str]]:
        return [
            {"id": provider.provider_id, "name": provider.display_name}
            for provider in self._providers.values()
        ]

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)


def build_registry(
    config: Mapping[str, Any],
    *,
    http_client: Optional[httpx.Client] = None,
) -> ProviderRegistry:
    """Create the built-in providers from a Flask config or ``os.environ``-like mapping."""

    timeout = _coerce_timeout(config.get("AI_REQUEST_TIMEOUT"))

    return ProviderRegistry(
        [
            OpenAIChatProvider(
                ProviderSettings(
                    provider_id="openai",
                    display_name="OpenAI",
                    base_url=_clean(config.get("OPENAI_API_BASE")) or OPENAI_DEFAULT_BASE,
                    api_key=_clean(config.get("OPENAI_API_KEY")),
                    model_name=_clean(config.get("OPENAI_MODEL")) or OPENAI_DEFAULT_MODEL,
                    timeout=timeout,
                ),
                http_client=http_client,
            ),
            AnthropicMessagesProvider(
                ProviderSettings(
                    provider_id="anthropic",
                    display_name="Anthropic",
                    base_url=_clean(config.get("ANTHROPIC_API_BASE")) or ANTHROPIC_DEFAULT_BASE,
                    api_key=_clean(config.get("ANTHROPIC_API_KEY")),
                    model_name=_clean(config.get("ANTHROPIC_MODEL")) or ANTHROPIC_DEFAULT_MODEL,
                    timeout=timeout,
                ),
                http_client=http_client,
            ),
            CustomEndpointProvider(
                ProviderSettings(
                    provider_id="custom",
                    display_name="Custom",
                    base_url=_clean(config.get("CUSTOM_AI_API_URL")),
                    api_key=_clean(config.get("CUSTOM_AI_API_KEY")),
                    timeout=timeout,
                ),
                http_client=http_client,
            ),
        ]
    )


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_timeout(value: Any) -> float:
    if value in (None, ""):
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid AI_REQUEST_TIMEOUT %r; using %s seconds.", value, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_TIMEOUT


def _shorten_debug(s: str, limit: int = 1200) -> str:
    s = s.replace("\n", " ")
    return (s[:limit] + "…") if len(s) > limit else s


def check_generation_parameters(temperature: Any, max_tokens: Any) -> Tuple[float, int]:
    """Validate sampling parameters before they reach a provider."""

    if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
        raise InvalidPromptInput("temperature", "'temperature' must be a number.")
    if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens <= 0:
        raise InvalidPromptInput("max_tokens", "'max_tokens' must be a positive integer.")
    return float(temperature), max_tokens
