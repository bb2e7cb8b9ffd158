# tests/test_parser.py

import pytest

from ormd_engine.intake.parser import (
    MISSING_FRONTMATTER_ERROR,
    MISSING_VERSION_WARNING,
    is_valid_iso8601,
    parse,
)


def test_example_document_parses_without_warnings(valid_ormd_text):
    result = parse(valid_ormd_text)

    assert result.success
    assert result.data.frontmatter["title"] == "X"
    assert result.data.content == "Body"
    assert result.data.raw == valid_ormd_text
    assert result.warnings is None
    assert result.errors is None


@pytest.mark.parametrize(
    "text",
    [
        "",
        "# Just markdown\n\nNo frontmatter here.",
        "<!-- ormd:0.1 -->\ntitle: X\n",
        "---\ntitle: X\n",  # never closed
    ],
)
def test_missing_frontmatter_fails_with_single_error(text):
    result = parse(text)

    assert not result.success
    assert result.data is None
    assert result.errors == (MISSING_FRONTMATTER_ERROR,)


def test_plain_text_reports_version_warning_with_failure():
    result = parse("just text")

    assert not result.success
    assert result.errors == (MISSING_FRONTMATTER_ERROR,)
    assert result.warnings == (MISSING_VERSION_WARNING,)


def test_missing_version_comment_is_warning_only(make_text):
    result = parse(make_text(with_version=False))

    assert result.success
    assert MISSING_VERSION_WARNING in result.warnings


def test_missing_version_warning_survives_field_errors():
    result = parse("---\ndates:\n  created: '2024-01-01T00:00:00Z'\n---\n\nBody")

    assert not result.success
    assert result.warnings == (MISSING_VERSION_WARNING,)
    assert "Missing required field: title" in result.errors


def test_field_errors_accumulate():
    text = "<!-- ormd:0.1 -->\n---\nauthor: nobody\n---\n\nBody"
    result = parse(text)

    assert not result.success
    assert result.errors == ("Missing required field: title", "Missing required field: dates")


def test_dates_without_created():
    text = "<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n  modified: '2024-01-01T00:00:00Z'\n---\n\nBody"
    result = parse(text)

    assert result.errors == ("Missing required field: dates.created",)


def test_invalid_date_format_reported_per_field():
    text = (
        "<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n"
        "  created: 'yesterday'\n  modified: '01/02/2024'\n---\n\nBody"
    )
    result = parse(text)

    assert result.errors == (
        "Invalid date format for dates.created (must be ISO-8601)",
        "Invalid date format for dates.modified (must be ISO-8601)",
    )


def test_invalid_yaml_is_structural_failure():
    text = "<!-- ormd:0.1 -->\n---\ntitle: [unclosed\n---\n\nBody"
    result = parse(text)

    assert not result.success
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Invalid YAML frontmatter:")
    assert result.warnings is None


def test_structural_failure_keeps_version_warning():
    result = parse("---\ntitle: [unclosed\n---\n\nBody")

    assert not result.success
    assert result.data is None
    assert result.warnings == (MISSING_VERSION_WARNING,)


def test_non_mapping_frontmatter_is_rejected():
    result = parse("<!-- ormd:0.1 -->\n---\n- a\n- b\n---\n\nBody")

    assert result.errors == ("Invalid YAML frontmatter: expected a mapping",)


def test_unquoted_timestamp_stays_as_written():
    text = "<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n  created: 2024-01-01T00:00:00Z\n---\n\nBody"
    result = parse(text)

    assert result.success
    assert result.data.dates["created"] == "2024-01-01T00:00:00Z"


@pytest.mark.parametrize(
    "created",
    [
        "2024-01-01T00:00:00.123456Z",
        "2024-01-01T00:00:00.1Z",
        "2024-01-01 00:00:00Z",
        "2024-01-01T00:00:00+00:00",
        "2024-01-01",
    ],
)
def test_unquoted_timestamp_off_pattern_is_rejected(created):
    text = f"<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n  created: {created}\n---\n\nBody"
    result = parse(text)

    assert not result.success
    assert result.errors == ("Invalid date format for dates.created (must be ISO-8601)",)


def test_unquoted_modified_is_checked_as_written():
    text = (
        "<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n  created: 2024-01-01T00:00:00Z\n"
        "  modified: 2024-01-02 10:00:00\n---\n\nBody"
    )
    result = parse(text)

    assert result.errors == ("Invalid date format for dates.modified (must be ISO-8601)",)


def test_trailing_newline_in_quoted_date_is_rejected():
    text = "<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n  created: \"2024-01-01T00:00:00Z\\n\"\n---\n\nBody"
    result = parse(text)

    assert not result.success
    assert result.errors == ("Invalid date format for dates.created (must be ISO-8601)",)


def test_content_is_stripped_and_unknown_keys_kept():
    text = (
        "<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n  created: '2024-01-01T00:00:00Z'\n"
        "custom:\n  nested: true\n---\n\n\n  # Heading\n\ntext  \n\n"
    )
    result = parse(text)

    assert result.data.content == "# Heading\n\ntext"
    assert result.data.frontmatter["custom"] == {"nested": True}


def test_calendar_invalid_date_passes_lexical_check():
    text = "<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n  created: '2024-02-30T00:00:00Z'\n---\n\nBody"

    assert parse(text).success


@pytest.mark.parametrize(
    "value,ok",
    [
        ("2024-01-01T00:00:00Z", True),
        ("2024-01-01T00:00:00.123Z", True),
        ("2024-01-01T00:00:00", True),
        ("2024-01-01", False),
        ("2024-01-01T00:00:00+02:00", False),
        ("2024-01-01T00:00:00Z\n", False),
        (20240101, False),
    ],
)
def test_is_valid_iso8601(value, ok):
    assert is_valid_iso8601(value) is ok
