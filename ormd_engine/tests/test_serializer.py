# tests/test_serializer.py

from ormd_engine.intake.parser import parse
from ormd_engine.intake.serializer import serialize
from ormd_engine.testing.stubs import full_frontmatter, minimal_frontmatter


def test_round_trip_preserves_frontmatter_values(make_text):
    d0 = parse(make_text(full_frontmatter(), "# Notes\n\nSome *markdown*.")).data
    d1 = parse(serialize(d0)).data

    assert d1.metadata == d0.metadata
    assert d1.content == d0.content


def test_serialized_text_has_version_comment_and_no_warnings(valid_ormd_text):
    text = serialize(parse(valid_ormd_text).data)
    result = parse(text)

    assert text.startswith("<!-- ormd:0.1 -->\n---\n")
    assert result.success
    assert result.warnings is None


def test_key_order_is_preserved(valid_ormd_text):
    text = serialize(parse(valid_ormd_text).data)

    assert text.index("title:") < text.index("dates:")


def test_timestamp_strings_survive_as_strings(valid_ormd_text):
    d1 = parse(serialize(parse(valid_ormd_text).data)).data

    assert d1.dates["created"] == "2024-01-01T00:00:00Z"
    assert isinstance(d1.dates["created"], str)


def test_unicode_is_kept_readable(make_text):
    d0 = parse(make_text(minimal_frontmatter("Kontext für Übergaben"))).data
    text = serialize(d0)

    assert "Kontext für Übergaben" in text
    assert parse(text).data.title == "Kontext für Übergaben"
