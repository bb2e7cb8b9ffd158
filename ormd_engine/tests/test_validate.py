# tests/test_validate.py

from ormd_engine.intake.parser import parse
from ormd_engine.invariants.rules import collect_violations
from ormd_engine.invariants.validate import validate, validate_document
from ormd_engine.testing.stubs import full_frontmatter, minimal_frontmatter


def test_valid_document_has_no_errors(make_document):
    result = validate(make_document(full_frontmatter()))

    assert result.valid
    assert result.errors is None
    assert result.warnings is None


def test_missing_title_after_parse_is_invalid(valid_ormd_text):
    doc = parse(valid_ormd_text).data.with_frontmatter(title="")
    result = validate(doc)

    assert not result.valid
    assert any("title" in e.lower() for e in result.errors)


def test_link_missing_to_yields_exactly_one_indexed_error(make_document):
    fm = minimal_frontmatter(
        links=[
            {"id": "l0", "rel": "supports", "to": "#a"},
            {"id": "l1", "rel": "refutes"},
        ]
    )
    result = validate(make_document(fm))

    assert not result.valid
    assert result.errors == ("Link 1: missing required fields (id, rel, to)",)


def test_link_relationship_is_open_ended(make_document):
    fm = minimal_frontmatter(links=[{"id": "l0", "rel": "inspired_by_a_dream", "to": "#a"}])

    assert validate(make_document(fm)).valid


def test_all_violations_reported_in_rule_order(make_document):
    fm = {
        "title": " ",
        "dates": {},
        "status": "published",
        "context": {"resolution": {"confidence": "certain", "evidence_strength": "overwhelming"}},
        "authors": [{"id": "a1"}],
    }
    result = validate(make_document(fm))

    assert result.errors == (
        "Title is required and cannot be empty",
        "Created date is required",
        "Invalid confidence level: certain",
        "Invalid evidence strength: overwhelming",
        "Invalid status: published",
        "Author 0: missing required fields (id, display)",
    )


def test_non_list_links_reported(make_document):
    result = validate(make_document(minimal_frontmatter(links={"id": "l0"})))

    assert result.errors == ("links must be a list",)


def test_empty_content_is_warning_not_error(make_document):
    result = validate(make_document(content="   "))

    assert result.valid
    assert result.warnings == ("Document content is empty",)


def test_strict_dates_rejects_impossible_calendar_date(make_document):
    fm = minimal_frontmatter(dates={"created": "2024-02-30T00:00:00Z"})
    doc = make_document(fm)

    assert validate_document(doc).valid
    strict = validate_document(doc, strict_dates=True)
    assert not strict.valid
    assert strict.errors == ("Invalid calendar date for dates.created: 2024-02-30T00:00:00Z",)


def test_collect_violations_exposes_rule_names(make_document):
    violations = collect_violations(make_document(minimal_frontmatter(status="gone")))

    rules = {v.rule for v in violations}
    assert "status_enum" in rules
