"""Prompt construction for outline generation, chapter drafting and chapter editing.

All builders are pure: identical inputs always produce the identical prompt.
"""

from __future__ import annotations

import json
import re
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..errors import InvalidPromptInput
from ..models import ChapterContext, OutlineCharacter
from ..system_prompts import MIN_CHAPTERS_PER_VOLUME, OUTLINE_JSON_SKELETON, SECTION_ORDER, SYSTEM_PROMPTS

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def build_outline_prompt(theme: str, style: str, length: str, volume_count: int) -> str:
    values = {
        "theme": _require_text("theme", theme),
        "style": _require_text("style", style),
        "length": _require_text("length", length),
        "volume_count": str(_require_positive_int("volume_count", volume_count)),
        "schema_example": OUTLINE_JSON_SKELETON,
        "min_chapters": str(MIN_CHAPTERS_PER_VOLUME),
    }
    return _render("outline", values)


def build_chapter_prompt(
    context: ChapterContext,
    continuity_context: Optional[str],
    target_words: int,
) -> str:
    """Render the chapter-drafting prompt.

    ``continuity_context`` is the assembled block of prior-chapter excerpts;
    when it is empty the prompt states that the chapter opens the volume.
    """

    if context is None:
        raise InvalidPromptInput("context")

    chapter_index = _require_positive_int("chapter_index", context.chapter_index)
    total_chapters = _require_positive_int("total_chapters", context.total_chapters)
    if chapter_index > total_chapters:
        raise InvalidPromptInput(
            "chapter_index",
            f"chapter_index {chapter_index} exceeds total_chapters {total_chapters}.",
        )

    continuity = (continuity_context or "").strip() or SYSTEM_PROMPTS["chapter"]["continuity_empty"]

    values = {
        "novel_title": _require_text("novel_title", context.novel_title),
        "core_theme": _optional_text(context.core_theme),
        "volume_title": _require_text("volume_title", context.volume_title),
        "volume_summary": _optional_text(context.volume_summary),
        "chapter_title": _require_text("chapter_title", context.chapter_title),
        "chapter_summary": _optional_text(context.chapter_summary),
        "chapter_index": str(chapter_index),
        "total_chapters": str(total_chapters),
        "characters": format_characters(context.characters),
        "world_setting": _optional_text(context.world_setting),
        "continuity_context": continuity,
        "target_words": str(_require_positive_int("target_words", target_words)),
    }
    return _render("chapter", values)


def build_edit_prompt(chapter_title: str, original_content: str) -> str:
    values = {
        "chapter_title": _require_text("chapter_title", chapter_title),
        "original_content": _require_raw_text("original_content", original_content),
    }
    return _render("edit", values)


def format_characters(characters: Optional[Iterable[Any]]) -> str:
    """Serialise the character roster as indented JSON, keeping non-ASCII text readable."""

    roster: List[Dict[str, Any]] = []
    for character in characters or []:
        if isinstance(character, OutlineCharacter):
            roster.append(character.to_dict())
        elif is_dataclass(character) and not isinstance(character, type):
            roster.append({k: v for k, v in asdict(character).items() if v is not None})
        elif isinstance(character, Mapping):
            roster.append(dict(character))
    return json.dumps(roster, ensure_ascii=False, indent=2, default=str)


def _render(task: str, values: Mapping[str, str]) -> str:
    sections = SYSTEM_PROMPTS[task]
    rendered = [_apply_template(sections[name], values) for name in SECTION_ORDER[task]]
    return "\n\n".join(rendered)


def _apply_template(template: str, values: Mapping[str, str]) -> str:
    # Single pass so substituted text is never rescanned for placeholders.
    return _PLACEHOLDER.sub(lambda match: values.get(match.group(1), match.group(0)), template)


def _require_text(field: str, value: object) -> str:
    if value is None:
        raise InvalidPromptInput(field)
    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    if not text:
        raise InvalidPromptInput(field)
    return text


def _require_raw_text(field: str, value: object) -> str:
    # Leading full-width indents and line breaks are part of the manuscript.
    if not isinstance(value, str) or not value.strip():
        raise InvalidPromptInput(field)
    return value


def _optional_text(value: object) -> str:
    if value is None:
        return ""
    return (value if isinstance(value, str) else str(value)).strip()


def _require_positive_int(field: str, value: object) -> int:
    if isinstance(value, bool):
        raise InvalidPromptInput(field, f"'{field}' must be a positive integer.")
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidPromptInput(field, f"'{field}' must be a positive integer.") from exc
    if number <= 0:
        raise InvalidPromptInput(field, f"'{field}' must be a positive integer.")
    return number
