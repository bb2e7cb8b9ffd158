# ormd_engine/scripts/run_pipeline_demo.py
from __future__ import annotations

import json

from ormd_engine.errors import OrmdParseError, OrmdValidationError
from ormd_engine.runtime.in_memory_store import InMemoryContextStore
from ormd_engine.runtime.pipeline import OrmdPipeline
from ormd_engine.runtime.store import ContextQuery
from ormd_engine.testing.stubs import full_frontmatter, minimal_frontmatter, ormd_text


def _print_report(report) -> None:
    print("\n=== INGEST REPORT ===")
    print("bundle:", report.bundle.id)
    print("rev:", report.stored.rev)
    print("tags:", ", ".join(report.stored.tags))
    if report.warnings:
        print("warnings:")
        for w in report.warnings:
            print(f"- {w}")


def main() -> None:
    store = InMemoryContextStore()
    pipeline = OrmdPipeline(store)

    notes = pipeline.ingest(ormd_text(full_frontmatter(), "# Notes\n\nContext engineering in practice."))
    _print_report(notes)

    outline = pipeline.ingest(ormd_text(minimal_frontmatter("Outline"), "", with_version=False))
    _print_report(outline)

    store.add_relationship(notes.bundle.id, outline.bundle.id, "derived_from", strength=0.8)

    # Rejected: no frontmatter at all
    try:
        pipeline.ingest("# just markdown")
    except OrmdParseError as exc:
        print("\nparse rejected:", list(exc.errors))

    # Rejected: bad confidence value
    bad = minimal_frontmatter("Bad", context={"resolution": {"confidence": "certain"}})
    try:
        pipeline.ingest(ormd_text(bad))
    except OrmdValidationError as exc:
        print("validation rejected:", list(exc.errors))

    print("\n=== QUERY confidence:validated ===")
    for s in store.query(ContextQuery(tags=("confidence:validated",))).bundles:
        print("-", s.id)

    print("\n=== RELATED to notes ===")
    for s in store.find_related(notes.bundle.id):
        print("-", s.id)

    print("\n=== STATS ===")
    print(json.dumps(store.get_stats().__dict__, indent=2))


if __name__ == "__main__":
    main()
