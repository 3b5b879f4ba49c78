import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from novelwriter.errors import OutlineParseError
from novelwriter.models import OutlineDocument, normalise_role
from novelwriter.services.outline_parser import extract_chapter_text, parse_outline


OUTLINE = {
    "title": "Ashes of the Tide",
    "core_theme": "Redemption through sacrifice",
    "characters": [
        {"name": "Kael", "role": "主角", "description": "A disgraced harbour guard."},
        {"name": "Ysolde", "role": "villain", "description": "The tide witch.", "goals": "Drown the city."},
    ],
    "synopsis": "A guard must stop the sea from swallowing his home.",
    "volumes": [
        {
            "title": "Book One",
            "summary": "The first flood.",
            "chapters": [
                {"title": "Low Water", "summary": "Kael notices the sea retreating."},
                {"title": "The Bell", "summary": "The warning bell is stolen."},
            ],
        }
    ],
    "world_setting": "A port city built on drowned ruins.",
}


def test_parses_clean_json_object():
    outline = parse_outline(json.dumps(OUTLINE))

    assert isinstance(outline, OutlineDocument)
    assert outline.title == "Ashes of the Tide"
    assert outline.volumes[0].chapters[1].title == "The Bell"
    assert outline.characters[0].role == "protagonist"
    assert outline.characters[1].role == "antagonist"
    assert outline.characters[1].goals == "Drown the city."
    assert outline.world_setting == "A port city built on drowned ruins."


def test_extracts_object_surrounded_by_commentary():
    raw = "Here is your outline:\n" + json.dumps(OUTLINE, ensure_ascii=False) + "\nHope it helps!"

    assert parse_outline(raw) == parse_outline(json.dumps(OUTLINE))


def test_extracts_object_from_markdown_fence():
    raw = "```json\n" + json.dumps(OUTLINE, indent=2) + "\n```"

    assert parse_outline(raw).synopsis == OUTLINE["synopsis"]


@pytest.mark.parametrize("raw", ["I cannot comply.", "", "{not: valid json}", '["just", "a", "list"]'])
def test_unparseable_output_raises_with_raw_text(raw):
    with pytest.raises(OutlineParseError) as excinfo:
        parse_outline(raw)

    assert excinfo.value.raw_text == raw


def test_serialised_outline_parses_back_to_equal_value():
    outline = parse_outline(json.dumps(OUTLINE))

    again = parse_outline(json.dumps(outline.to_dict(), ensure_ascii=False))

    assert again == outline
    assert list(outline.to_dict()) == ["title", "core_theme", "characters", "synopsis", "volumes", "world_setting"]


def test_missing_fields_are_tolerated():
    outline = parse_outline('{"title": "Fragment", "volumes": [{"title": "Only volume"}, "junk"]}')

    assert outline.title == "Fragment"
    assert outline.characters == []
    assert outline.synopsis == ""
    assert len(outline.volumes) == 1
    assert outline.volumes[0].chapters == []


@pytest.mark.parametrize(
    "label, expected",
    [("主角", "protagonist"), ("配角", "supporting"), ("反派", "antagonist"), (" Hero ", "protagonist"), ("mentor", "mentor")],
)
def test_role_labels_are_normalised(label, expected):
    assert normalise_role(label) == expected


def test_chapter_text_is_trimmed_but_otherwise_unchanged():
    assert extract_chapter_text(" \n  Chapter text here.  \n") == "Chapter text here."
    assert extract_chapter_text("Line one.\n\n  Line two.") == "Line one.\n\n  Line two."
    assert extract_chapter_text(None) == ""


def test_list_values_and_unknown_keys_survive_parsing():
    raw = json.dumps(
        {
            "title": "Ashes of the Tide",
            "characters": [
                {"name": "Kael", "role": "主角", "description": "Guard.", "goals": ["复仇", "守护"], "age": "20"}
            ],
            "volumes": [
                {
                    "title": "Book One",
                    "summary": "Flood.",
                    "theme": "loss",
                    "chapters": [{"title": "Low Water", "summary": "Retreat.", "pov": "Kael"}],
                }
            ],
            "world_setting": "Ruins.",
            "tone": "bleak",
        },
        ensure_ascii=False,
    )

    outline = parse_outline(raw)
    data = outline.to_dict()

    assert outline.characters[0].goals == "复仇、守护"
    assert data["characters"][0]["age"] == "20"
    assert data["volumes"][0]["theme"] == "loss"
    assert data["volumes"][0]["chapters"][0]["pov"] == "Kael"
    assert data["tone"] == "bleak"
    assert "extra" not in data
    assert parse_outline(json.dumps(data, ensure_ascii=False)) == outline
