# tests/test_projector.py

import json

from ormd_engine.intake.parser import parse
from ormd_engine.intake.projector import ProjectionPolicy, to_context_bundle
from ormd_engine.invariants.bundle_schema import validate_bundle_id, validate_context_bundle
from ormd_engine.testing.stubs import full_frontmatter, minimal_frontmatter


def test_example_projects_with_defaults(valid_ormd_text):
    doc = parse(valid_ormd_text).data
    bundle = to_context_bundle(doc)

    assert bundle.resolution.confidence == "working"
    assert bundle.policy.access_level == "public"
    assert bundle.policy.usage_rights == "cc-by-sa-4.0"
    assert bundle.version == "1.0"
    assert bundle.created == "2024-01-01T00:00:00Z"
    assert bundle.frame.type == "ormd.document"
    assert bundle.frame.scope == "local"
    assert bundle.lineage is None


def test_content_data_is_the_whole_raw_text(valid_ormd_text):
    bundle = to_context_bundle(parse(valid_ormd_text).data)

    assert bundle.content.type == "text/markdown"
    assert bundle.content.encoding == "utf-8"
    assert bundle.content.data == valid_ormd_text


def test_generated_ids_are_unique_and_well_formed(valid_ormd_text):
    doc = parse(valid_ormd_text).data
    a = to_context_bundle(doc)
    b = to_context_bundle(doc)

    assert a.id != b.id
    assert validate_bundle_id(a.id)
    assert validate_bundle_id(b.id)


def test_projection_is_deterministic_with_explicit_id(valid_ormd_text):
    doc = parse(valid_ormd_text).data
    a = to_context_bundle(doc, "urn:cb:FIXED1")
    b = to_context_bundle(doc, "urn:cb:FIXED1")

    assert a == b
    assert json.dumps(a.to_dict()) == json.dumps(b.to_dict())


def test_lineage_and_resolution_carried_over(make_text):
    doc = parse(make_text(full_frontmatter())).data
    bundle = to_context_bundle(doc, "urn:cb:FULL")

    assert bundle.version == "2.0"
    assert bundle.resolution.confidence == "validated"
    assert bundle.resolution.evidence_strength == "strong"
    assert bundle.resolution.validation_status == "active"
    assert bundle.lineage.source_type == "ormd"
    assert bundle.lineage.source_id == "urn:ormd:notes-v1"
    assert bundle.lineage.parent_bundles == ("urn:ormd:outline",)
    assert bundle.lineage.derivation == "extraction"
    assert bundle.lineage.confidence_flow == "degraded"


def test_lineage_defaults_fill_missing_fields(make_text):
    fm = minimal_frontmatter(context={"lineage": {}})
    bundle = to_context_bundle(parse(make_text(fm)).data)

    # an empty mapping is still a lineage block
    assert bundle.lineage.source_id == "unknown"
    assert bundle.lineage.derivation == "synthesis"
    assert bundle.lineage.confidence_flow == "preserved"


def test_numeric_version_is_stringified(make_text):
    text = make_text(minimal_frontmatter()).replace("title:", "version: 2.5\ntitle:", 1)
    bundle = to_context_bundle(parse(text).data)

    assert bundle.version == "2.5"


def test_projection_policy_overrides_envelope(valid_ormd_text):
    policy = ProjectionPolicy(frame_scope="global", access_level="private", usage_rights=None)
    bundle = to_context_bundle(parse(valid_ormd_text).data, policy=policy)

    assert bundle.frame.scope == "global"
    assert bundle.policy.access_level == "private"
    assert "usage_rights" not in bundle.to_dict()["policy"]


def test_projected_bundles_satisfy_the_wire_schema(valid_ormd_text, make_text):
    for text in (valid_ormd_text, make_text(full_frontmatter())):
        bundle = to_context_bundle(parse(text).data)
        report = validate_context_bundle(bundle.to_dict())
        assert report.valid, report.errors


def test_wire_dict_has_stable_key_order_and_no_nulls(valid_ormd_text):
    d = to_context_bundle(parse(valid_ormd_text).data, "urn:cb:ORDER").to_dict()

    assert list(d) == ["id", "version", "created", "content", "frame", "policy", "resolution"]
    assert "evidence_strength" not in d["resolution"]
