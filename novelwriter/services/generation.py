"""Generation orchestrator: prompt → provider → interpreted result."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from flask import current_app

from ..api_handler import BaseProvider, ProviderRegistry, build_registry, check_generation_parameters
from ..errors import GenerationCancelled, GenerationUnavailable
from ..models import ChapterContext, OutlineDocument, PriorChapter
from ..system_prompts import GENERATION_PARAMETERS
from .continuity import assemble_continuity_context
from .outline_parser import extract_chapter_text, parse_outline
from .prompts import build_chapter_prompt, build_edit_prompt, build_outline_prompt

LOGGER = logging.getLogger(__name__)

EXTENSION_KEY = "novelwriter.generation"
DEFAULT_MODEL = "openai"
DEFAULT_TARGET_WORDS = 1500

_GENERATION_PARAMETER_KEYS = ("temperature", "max_tokens")


class GenerationService:
    """Stateless facade over the provider registry.

    Every call is an independent unit of work: one provider request followed
    by local parsing. Instances can be shared freely between threads.
    """

    def __init__(self, registry: ProviderRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    def list_supported_models(self) -> List[Dict[str, str]]:
        return self._registry.list_models()

    def generate_outline(
        self,
        theme: str,
        style: str,
        length: str,
        volume_count: int,
        model: str = DEFAULT_MODEL,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> OutlineDocument:
        provider = self._registry.resolve(model)
        prompt = build_outline_prompt(theme, style, length, volume_count)
        raw_response = self._dispatch(
            provider,
            "outline",
            prompt,
            {"temperature": temperature, "max_tokens": max_tokens},
            cancel_event,
        )
        return parse_outline(raw_response)

    def generate_chapter(
        self,
        context: ChapterContext,
        prior_chapters: Iterable[Union[PriorChapter, Mapping[str, Any]]] = (),
        target_words: int = DEFAULT_TARGET_WORDS,
        model: str = DEFAULT_MODEL,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """Draft a chapter, feeding excerpts of ``prior_chapters`` in as continuity.

        The returned prose is stripped but otherwise untouched; word counting and
        persistence are left to the caller.
        """

        provider = self._registry.resolve(model)
        continuity = assemble_continuity_context(prior_chapters)
        prompt = build_chapter_prompt(context, continuity, target_words)
        raw_response = self._dispatch(
            provider,
            "chapter",
            prompt,
            {"temperature": temperature, "max_tokens": max_tokens},
            cancel_event,
        )
        return extract_chapter_text(raw_response)

    def edit_chapter(
        self,
        chapter_title: str,
        original_content: str,
        model: str = DEFAULT_MODEL,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        provider = self._registry.resolve(model)
        prompt = build_edit_prompt(chapter_title, original_content)
        raw_response = self._dispatch(
            provider,
            "edit",
            prompt,
            {"temperature": temperature, "max_tokens": max_tokens},
            cancel_event,
        )
        return extract_chapter_text(raw_response)

    def _dispatch(
        self,
        provider: BaseProvider,
        task: str,
        prompt: str,
        overrides: Mapping[str, Any],
        cancel_event: Optional[threading.Event],
    ) -> str:
        parameters = _generation_parameters(task, overrides)
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled()

        try:
            raw_response = provider.send(prompt, cancel_event=cancel_event, **parameters)
        except GenerationUnavailable:
            LOGGER.warning("%s generation via %s failed.", task.capitalize(), provider.display_name)
            raise

        if cancel_event is not None and cancel_event.is_set():
            LOGGER.info("%s generation via %s cancelled; discarding response.", task.capitalize(), provider.display_name)
            raise GenerationCancelled()

        LOGGER.info(
            "%s generation via %s returned %d characters (temperature=%s, max_tokens=%s).",
            task.capitalize(),
            provider.display_name,
            len(raw_response),
            parameters["temperature"],
            parameters["max_tokens"],
        )
        return raw_response


def _generation_parameters(task: str, overrides: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge per-call overrides onto the task defaults, ignoring unset values.

    Raises ``InvalidPromptInput`` for a non-numeric temperature or a
    non-positive token limit.
    """

    kwargs: Dict[str, Any] = dict(GENERATION_PARAMETERS[task])
    if isinstance(overrides, Mapping):
        for key in _GENERATION_PARAMETER_KEYS:
            if overrides.get(key) is not None:
                kwargs[key] = overrides[key]

    kwargs["temperature"], kwargs["max_tokens"] = check_generation_parameters(
        kwargs["temperature"], kwargs["max_tokens"]
    )
    return kwargs


def get_generation_service() -> GenerationService:
    app = current_app
    service = app.extensions.get(EXTENSION_KEY)
    if service is not None:
        return service

    app.logger.info("Generation service not registered; building providers from app config.")
    service = GenerationService(build_registry(app.config))
    app.extensions[EXTENSION_KEY] = service
    return service
