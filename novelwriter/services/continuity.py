"""Continuity context assembly for chapter generation.

Prior chapters are reduced to short excerpts so the chapter prompt stays
bounded no matter how much of the volume has already been written.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Sequence, Tuple, TypeVar, Union

from ..errors import InvalidPromptInput
from ..models import ChapterContext, ContinuityEntry, PriorChapter

EXCERPT_LIMIT = 500

_CHARACTER_FIELDS = ("name", "role", "description", "personality", "background", "goals")

T = TypeVar("T")


def select_prior_chapters(chapters: Sequence[T], chapter_index: int) -> List[T]:
    """Return the chapters that precede the 1-based ``chapter_index``, in order."""

    if chapter_index < 1:
        raise InvalidPromptInput("chapter_index", "chapter_index must be 1 or greater.")
    return list(chapters[: chapter_index - 1])


def build_continuity_entries(
    prior_chapters: Iterable[Union[PriorChapter, Mapping[str, Any]]],
    *,
    excerpt_limit: int = EXCERPT_LIMIT,
) -> List[ContinuityEntry]:
    entries: List[ContinuityEntry] = []
    for item in prior_chapters:
        chapter = _as_prior_chapter(item)
        content = chapter.content or ""
        if not content:
            continue
        entries.append(
            ContinuityEntry(
                title=chapter.title,
                summary=chapter.summary,
                excerpt=content[:excerpt_limit],
            )
        )
    return entries


def format_continuity_context(entries: Iterable[ContinuityEntry]) -> str:
    return "\n\n".join(f"【{entry.title}】\n{entry.excerpt}" for entry in entries)


def assemble_continuity_context(
    prior_chapters: Iterable[Union[PriorChapter, Mapping[str, Any]]],
    *,
    excerpt_limit: int = EXCERPT_LIMIT,
) -> str:
    return format_continuity_context(build_continuity_entries(prior_chapters, excerpt_limit=excerpt_limit))


def chapter_request_from_novel(
    novel: Mapping[str, Any],
    volume_index: int,
    chapter_index: int,
) -> Tuple[ChapterContext, List[PriorChapter]]:
    """Build the chapter context and prior chapters from a stored novel document.

    ``volume_index`` and ``chapter_index`` are 1-based, matching how chapters
    are addressed by callers. Both camelCase (stored) and snake_case keys are
    accepted for the novel-level fields.
    """

    volumes = _sequence(novel.get("volumes"))
    volume = _pick(volumes, volume_index, "volume_index")
    chapters = _sequence(volume.get("chapters"))
    chapter = _pick(chapters, chapter_index, "chapter_index")

    context = ChapterContext(
        novel_title=_text(novel.get("title")),
        core_theme=_text(_first(novel, "coreTheme", "core_theme")),
        volume_title=_text(volume.get("title")),
        volume_summary=_text(volume.get("summary")),
        chapter_title=_text(chapter.get("title")),
        chapter_summary=_text(chapter.get("summary")),
        chapter_index=chapter_index,
        total_chapters=len(chapters),
        characters=[
            {key: item[key] for key in _CHARACTER_FIELDS if item.get(key) not in (None, "")}
            for item in _sequence(novel.get("characters"))
        ],
        world_setting=_text(_first(novel, "worldSetting", "world_setting")),
    )

    prior = [_as_prior_chapter(item) for item in select_prior_chapters(chapters, chapter_index)]
    return context, prior


def _pick(items: List[Mapping[str, Any]], index: int, field: str) -> Mapping[str, Any]:
    if isinstance(index, bool) or not isinstance(index, int) or not 1 <= index <= len(items):
        raise InvalidPromptInput(field, f"{field} {index!r} does not exist.")
    return items[index - 1]


def _sequence(value: object) -> List[Mapping[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _text(value: object) -> str:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value)


def _as_prior_chapter(item: Union[PriorChapter, Mapping[str, Any]]) -> PriorChapter:
    if isinstance(item, PriorChapter):
        return item
    return PriorChapter(
        title=_text(item.get("title")),
        summary=_text(item.get("summary")),
        content=item.get("content") or "",
    )
