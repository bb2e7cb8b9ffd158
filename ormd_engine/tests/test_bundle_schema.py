# tests/test_bundle_schema.py

import pytest

from ormd_engine.invariants.bundle_schema import (
    validate_bundle_id,
    validate_context_bundle,
    validate_timestamp,
)
from ormd_engine.models.bundle import BundleContent, BundleFrame, BundleResolution, ContextBundle


def _wire(**overrides):
    d = {
        "id": "urn:cb:ABC123",
        "version": "1.0",
        "content": {"type": "text/markdown", "data": "x"},
        "frame": {"type": "ormd.document"},
        "resolution": {"confidence": "working"},
    }
    d.update(overrides)
    return d


def test_minimal_bundle_is_valid():
    assert validate_context_bundle(_wire()).valid


def test_dataclass_input_is_accepted():
    bundle = ContextBundle(
        id="urn:cb:ABC123",
        content=BundleContent(type="text/markdown", data="x"),
        frame=BundleFrame(type="ormd.document"),
        resolution=BundleResolution(confidence="exploratory"),
    )

    assert validate_context_bundle(bundle).valid


def test_every_violation_reported_with_its_path():
    bad = _wire(
        id="cb:ABC",
        resolution={"confidence": "certain"},
        policy={"access_level": "secret"},
    )
    report = validate_context_bundle(bad)

    assert not report.valid
    paths = [e.split(":", 1)[0] for e in report.errors]
    assert "/id" in paths
    assert "/resolution/confidence" in paths
    assert "/policy/access_level" in paths


def test_missing_required_and_unknown_keys_reported_at_root():
    d = _wire(extra=True)
    del d["frame"]
    report = validate_context_bundle(d)

    assert not report.valid
    assert all(e.startswith("root:") for e in report.errors)
    assert len(report.errors) == 2


def test_optional_sections_check_their_own_required_fields():
    report = validate_context_bundle(_wire(lineage={"source_type": "ormd"}))

    assert not report.valid
    assert all(e.startswith("/lineage") for e in report.errors)


@pytest.mark.parametrize(
    "bundle_id,ok",
    [
        ("urn:cb:01HX0ABCDEF", True),
        ("urn:cb:abc", False),
        ("urn:cb:", False),
        ("cb:ABC", False),
        ("urn:cb:ABC\n", False),
        (None, False),
    ],
)
def test_validate_bundle_id(bundle_id, ok):
    assert validate_bundle_id(bundle_id) is ok


@pytest.mark.parametrize(
    "ts,ok",
    [
        ("2024-01-01T00:00:00Z", True),
        ("2024-01-01T00:00:00.500Z", True),
        ("2024-02-30T00:00:00Z", False),
        ("2024-13-01T00:00:00Z", False),
        ("2024-01-01T00:00:00Z\n", False),
        ("not a date", False),
    ],
)
def test_validate_timestamp_checks_calendar(ts, ok):
    assert validate_timestamp(ts) is ok
