"""Service layer helpers for AI-assisted novel generation."""

from __future__ import annotations

from .continuity import assemble_continuity_context, chapter_request_from_novel  # noqa: F401
from .generation import GenerationService, get_generation_service  # noqa: F401
from .outline_parser import extract_chapter_text, parse_outline  # noqa: F401
from .prompts import build_chapter_prompt, build_edit_prompt, build_outline_prompt  # noqa: F401

__all__ = [
    "GenerationService",
    "assemble_continuity_context",
    "build_chapter_prompt",
    "build_edit_prompt",
    "build_outline_prompt",
    "chapter_request_from_novel",
    "extract_chapter_text",
    "get_generation_service",
    "parse_outline",
]
