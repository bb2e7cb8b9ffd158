# tests/test_models_smoke.py

from ormd_engine.models.bundle import BundlePolicy, ContextBundle
from ormd_engine.models.document import ParseResult, ValidationResult
from ormd_engine.models.types import (
    BUNDLE_ID_PATTERN,
    ConfidenceLevel,
    is_suggested_relationship,
    new_bundle_ulid,
    now_iso,
)
from ormd_engine.intake.projector import generate_bundle_id
from ormd_engine.testing.stubs import full_frontmatter


def test_empty_result_lists_collapse_to_none():
    r = ParseResult(success=True, errors=[], warnings=())
    v = ValidationResult(valid=True, errors=[])

    assert r.errors is None and r.warnings is None
    assert v.errors is None and v.ok


def test_document_accessors_and_helpers(make_document):
    doc = make_document(full_frontmatter())

    assert doc.title == "Context Engineering Notes"
    assert doc.confidence == "validated"
    assert doc.lineage["source"] == "urn:ormd:notes-v1"
    assert doc.metadata is doc.frontmatter
    assert doc.body == doc.content

    renamed = doc.with_frontmatter(title="Renamed")
    assert renamed.title == "Renamed"
    assert doc.title == "Context Engineering Notes"
    assert doc.with_content("x").content == "x"


def test_document_accessors_tolerate_wrong_shapes(make_document):
    doc = make_document({"title": "T", "dates": "soon", "context": ["x"]})

    assert doc.dates == {}
    assert doc.context == {}
    assert doc.lineage is None
    assert doc.confidence is None


def test_bundle_ids_and_timestamps():
    ulid = new_bundle_ulid()
    assert ulid == ulid.upper()
    assert BUNDLE_ID_PATTERN.match(generate_bundle_id())
    assert BUNDLE_ID_PATTERN.match("urn:cb:ABC\n") is None
    assert now_iso().endswith("Z")


def test_enum_values_are_plain_strings():
    policy = BundlePolicy(access_level="public")
    assert ConfidenceLevel("working") == "working"
    assert policy.to_dict() == {"access_level": "public"}


def test_bundle_wire_round_trip_and_updates():
    d = {
        "id": "urn:cb:RT",
        "version": "1.0",
        "content": {"type": "text/markdown", "data": "x"},
        "frame": {"type": "ormd.document", "scope": "local"},
        "resolution": {"confidence": "working", "uncertainty_bounds": {"temporal": "2024"}},
        "explain": {"reasoning_trace": ["a", "b"], "evidence_summary": {"support_count": 2}},
    }
    bundle = ContextBundle.from_dict(d)

    assert bundle.to_dict() == d
    assert bundle.explain.reasoning_trace == ("a", "b")

    updated = bundle.with_updates(frame={"type": "ormd.note", "domain": "research"})
    assert updated.frame.domain == "research"
    assert bundle.frame.domain is None


def test_suggested_relationships():
    assert is_suggested_relationship("supports")
    assert not is_suggested_relationship("inspired_by")
