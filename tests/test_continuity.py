import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from novelwriter.errors import InvalidPromptInput
from novelwriter.models import PriorChapter
from novelwriter.services.continuity import (
    EXCERPT_LIMIT,
    assemble_continuity_context,
    build_continuity_entries,
    chapter_request_from_novel,
    format_continuity_context,
    select_prior_chapters,
)


@pytest.fixture
def novel():
    return {
        "title": "Glass Harbour",
        "coreTheme": "Trust and betrayal",
        "worldSetting": "An archipelago ruled by merchant houses.",
        "characters": [
            {"name": "Ines", "role": "protagonist", "description": "A cartographer.", "_id": "abc123", "notes": ""},
            {"name": "Corvo", "role": "antagonist", "description": "A smuggler king."},
        ],
        "volumes": [
            {
                "title": "Volume One",
                "summary": "Arrival.",
                "chapters": [
                    {"title": "Landfall", "summary": "Ines arrives.", "content": "L" * 700},
                    {"title": "Ledger", "summary": "A missing ledger.", "content": ""},
                    {"title": "Knives", "summary": "An ambush.", "content": "K" * 20},
                    {"title": "Tides", "summary": "Escape by sea."},
                ],
            },
            {"title": "Volume Two", "summary": "Return.", "chapters": [{"title": "Home", "summary": "Back again."}]},
        ],
    }


def test_excerpts_are_capped_and_keep_order():
    prior = [
        PriorChapter(title="One", content="a" * 100),
        PriorChapter(title="Two", content="b" * 600),
        PriorChapter(title="Three", content="c" * 10),
    ]

    entries = build_continuity_entries(prior)

    assert [entry.title for entry in entries] == ["One", "Two", "Three"]
    assert [len(entry.excerpt) for entry in entries] == [100, EXCERPT_LIMIT, 10]


def test_chapters_without_content_are_skipped():
    prior = [
        {"title": "Drafted", "summary": "s", "content": "Some text."},
        {"title": "Planned", "summary": "not written yet", "content": ""},
        {"title": "Missing"},
    ]

    entries = build_continuity_entries(prior)

    assert [entry.title for entry in entries] == ["Drafted"]


def test_context_block_format():
    context = assemble_continuity_context(
        [PriorChapter(title="第一章", content="开篇。"), PriorChapter(title="第二章", content="转折。")]
    )

    assert context == "【第一章】\n开篇。\n\n【第二章】\n转折。"


def test_empty_history_yields_empty_context():
    assert assemble_continuity_context([]) == ""
    assert format_continuity_context([]) == ""


def test_custom_excerpt_limit():
    context = assemble_continuity_context([PriorChapter(title="T", content="abcdef")], excerpt_limit=3)

    assert context == "【T】\nabc"


def test_select_prior_chapters_returns_preceding_only():
    assert select_prior_chapters(["a", "b", "c", "d"], 3) == ["a", "b"]
    assert select_prior_chapters(["a", "b"], 1) == []

    with pytest.raises(InvalidPromptInput):
        select_prior_chapters(["a"], 0)


def test_chapter_request_from_novel(novel):
    context, prior = chapter_request_from_novel(novel, 1, 4)

    assert context.novel_title == "Glass Harbour"
    assert context.core_theme == "Trust and betrayal"
    assert context.world_setting == "An archipelago ruled by merchant houses."
    assert context.volume_title == "Volume One"
    assert context.chapter_title == "Tides"
    assert context.chapter_index == 4
    assert context.total_chapters == 4
    assert context.characters[0] == {"name": "Ines", "role": "protagonist", "description": "A cartographer."}
    assert [chapter.title for chapter in prior] == ["Landfall", "Ledger", "Knives"]

    assert assemble_continuity_context(prior) == "【Landfall】\n" + "L" * 500 + "\n\n【Knives】\n" + "K" * 20


def test_first_chapter_of_volume_has_no_prior_chapters(novel):
    context, prior = chapter_request_from_novel(novel, 2, 1)

    assert context.volume_title == "Volume Two"
    assert context.total_chapters == 1
    assert prior == []


@pytest.mark.parametrize(
    "volume_index, chapter_index, field",
    [(0, 1, "volume_index"), (3, 1, "volume_index"), (1, 5, "chapter_index"), (1, 0, "chapter_index"), (1, True, "chapter_index")],
)
def test_chapter_request_rejects_out_of_range_indices(novel, volume_index, chapter_index, field):
    with pytest.raises(InvalidPromptInput) as excinfo:
        chapter_request_from_novel(novel, volume_index, chapter_index)

    assert excinfo.value.field == field
