"""Transient data records exchanged with the generation services.

None of these objects are persisted here; callers hand outlines and chapter
text to their own store.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


ROLE_ALIASES: Dict[str, str] = {
    "主角": "protagonist",
    "男主": "protagonist",
    "女主": "protagonist",
    "protagonist": "protagonist",
    "main": "protagonist",
    "hero": "protagonist",
    "配角": "supporting",
    "supporting": "supporting",
    "support": "supporting",
    "反派": "antagonist",
    "antagonist": "antagonist",
    "villain": "antagonist",
}


def normalise_role(value: object) -> str:
    """Map a model-supplied role label onto protagonist/supporting/antagonist.

    Unknown labels are returned unchanged (stripped) rather than rejected.
    """

    text = _text(value)
    return ROLE_ALIASES.get(text.casefold(), text)


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return "、".join(text for text in (_text(item) for item in value) if text)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False)
    return str(value).strip()


def _optional_text(value: object) -> Optional[str]:
    cleaned = _text(value)
    return cleaned or None


def _dict_items(value: object) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _extra(data: Mapping[str, Any], known: Tuple[str, ...]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


def _with_extra(data: Dict[str, Any], extra: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in extra.items():
        data.setdefault(key, value)
    return data


@dataclass
class OutlineCharacter:
    name: str
    role: str
    description: str
    personality: Optional[str] = None
    background: Optional[str] = None
    goals: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("name", "role", "description", "personality", "background", "goals")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OutlineCharacter":
        return cls(
            name=_text(data.get("name")),
            role=normalise_role(data.get("role")),
            description=_text(data.get("description")),
            personality=_optional_text(data.get("personality")),
            background=_optional_text(data.get("background")),
            goals=_optional_text(data.get("goals")),
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {key: getattr(self, key) for key in self.FIELDS if getattr(self, key) is not None}
        return _with_extra(data, self.extra)


@dataclass
class OutlineChapter:
    title: str
    summary: str
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("title", "summary")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OutlineChapter":
        return cls(
            title=_text(data.get("title")),
            summary=_text(data.get("summary")),
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _with_extra({"title": self.title, "summary": self.summary}, self.extra)


@dataclass
class OutlineVolume:
    title: str
    summary: str
    chapters: List[OutlineChapter] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("title", "summary", "chapters")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OutlineVolume":
        return cls(
            title=_text(data.get("title")),
            summary=_text(data.get("summary")),
            chapters=[OutlineChapter.from_dict(item) for item in _dict_items(data.get("chapters"))],
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "title": self.title,
            "summary": self.summary,
            "chapters": [chapter.to_dict() for chapter in self.chapters],
        }
        return _with_extra(data, self.extra)


@dataclass
class OutlineDocument:
    """Story skeleton returned by outline generation.

    ``from_dict`` is lenient: absent keys become empty strings or lists and
    malformed list entries are dropped. No counts are enforced, so a volume
    may arrive without chapters. Keys the model adds beyond the known ones are
    kept in ``extra`` at every level and written back by ``to_dict``.
    """

    title: str = ""
    core_theme: str = ""
    characters: List[OutlineCharacter] = field(default_factory=list)
    synopsis: str = ""
    volumes: List[OutlineVolume] = field(default_factory=list)
    world_setting: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("title", "core_theme", "characters", "synopsis", "volumes", "world_setting")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OutlineDocument":
        return cls(
            title=_text(data.get("title")),
            core_theme=_text(data.get("core_theme")),
            characters=[OutlineCharacter.from_dict(item) for item in _dict_items(data.get("characters"))],
            synopsis=_text(data.get("synopsis")),
            volumes=[OutlineVolume.from_dict(item) for item in _dict_items(data.get("volumes"))],
            world_setting=_text(data.get("world_setting")),
            extra=_extra(data, cls.FIELDS),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "title": self.title,
            "core_theme": self.core_theme,
            "characters": [character.to_dict() for character in self.characters],
            "synopsis": self.synopsis,
            "volumes": [volume.to_dict() for volume in self.volumes],
            "world_setting": self.world_setting,
        }
        return _with_extra(data, self.extra)


@dataclass
class PriorChapter:
    title: str
    summary: str = ""
    content: str = ""


@dataclass
class ContinuityEntry:
    title: str
    summary: str
    excerpt: str


@dataclass
class ChapterContext:
    """Everything the chapter prompt needs apart from the continuity block."""

    novel_title: str
    core_theme: str
    volume_title: str
    volume_summary: str
    chapter_title: str
    chapter_summary: str
    chapter_index: int
    total_chapters: int
    characters: List[Dict[str, Any]] = field(default_factory=list)
    world_setting: str = ""
