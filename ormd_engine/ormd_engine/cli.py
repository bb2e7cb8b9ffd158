"""Command line interface: parse, validate and convert ORMD files."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from ormd_engine.intake.parser import parse
from ormd_engine.intake.projector import to_context_bundle
from ormd_engine.invariants.bundle_schema import validate_context_bundle
from ormd_engine.invariants.validate import validate_document
from ormd_engine.models.document import ParseResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def _print_list(header: str, items: Optional[Sequence[str]]) -> None:
    if not items:
        return
    print(f"\n{header}:")
    for item in items:
        print(f"  - {item}")


def _read(path: Path) -> Optional[str]:
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("could not read %s: %s", path, exc)
        print(f"Error: Cannot read file: {path} ({exc})", file=sys.stderr)
        return None


def _parsed_or_report(result: ParseResult, action: str) -> bool:
    if result.success and result.data is not None:
        return True
    print(f"Cannot {action}: parse failed")
    _print_list("Errors", result.errors)
    return False


def default_output_path(path: Path) -> Path:
    if path.suffix == ".ormd":
        return path.with_suffix(".contextbundle.json")
    return path.with_name(path.name + ".contextbundle.json")


def cmd_parse(args: argparse.Namespace) -> int:
    text = _read(args.file)
    if text is None:
        return EXIT_FAILED
    print(f"Parsing ORMD file: {args.file}")

    result = parse(text)
    if not result.success or result.data is None:
        print("Parse failed")
        _print_list("Errors", result.errors)
        return EXIT_FAILED

    doc = result.data
    print("Parse successful")
    print("\nDocument metadata:")
    print(f"  Title: {doc.title}")
    print(f"  Status: {doc.status or 'not specified'}")
    print(f"  Created: {doc.dates.get('created')}")
    print(f"  Content length: {len(doc.content)} characters")
    if doc.confidence:
        print(f"  Confidence: {doc.confidence}")
    _print_list("Warnings", result.warnings)
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    text = _read(args.file)
    if text is None:
        return EXIT_FAILED
    print(f"Validating ORMD file: {args.file}")

    result = parse(text)
    if not _parsed_or_report(result, "validate"):
        return EXIT_FAILED

    report = validate_document(result.data, strict_dates=args.strict_dates)
    if not report.valid:
        print("Validation failed")
        _print_list("Errors", report.errors)
        return EXIT_FAILED

    print("Validation successful")
    _print_list("Warnings", [*(result.warnings or ()), *(report.warnings or ())])
    return EXIT_OK


def cmd_convert(args: argparse.Namespace) -> int:
    text = _read(args.file)
    if text is None:
        return EXIT_FAILED
    print(f"Converting ORMD to ContextBundle: {args.file}")

    result = parse(text)
    if not _parsed_or_report(result, "convert"):
        return EXIT_FAILED

    bundle = to_context_bundle(result.data, args.bundle_id)
    payload = bundle.to_dict()

    check = validate_context_bundle(payload)
    if not check.valid:
        print("Generated ContextBundle is invalid")
        _print_list("Errors", check.errors)
        return EXIT_FAILED

    rendered = json.dumps(payload, indent=2, ensure_ascii=False)
    print("Conversion successful")
    print("\nContextBundle:")
    print(rendered)

    out = args.out or default_output_path(args.file)
    out.write_text(rendered, encoding="utf-8")
    logger.info("wrote %s", out)
    print(f"\nSaved to: {out}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ormd", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="parse an ORMD file and print its metadata")
    p_parse.add_argument("file", type=Path)
    p_parse.set_defaults(func=cmd_parse)

    p_validate = sub.add_parser("validate", help="parse and validate an ORMD file")
    p_validate.add_argument("file", type=Path)
    p_validate.add_argument("--strict-dates", action="store_true", help="also reject impossible calendar dates")
    p_validate.set_defaults(func=cmd_validate)

    p_convert = sub.add_parser("convert", help="convert an ORMD file to a ContextBundle JSON file")
    p_convert.add_argument("file", type=Path)
    p_convert.add_argument("--out", type=Path, default=None, help="output path (default: <file>.contextbundle.json)")
    p_convert.add_argument("--id", dest="bundle_id", default=None, help="bundle id (default: generated urn:cb:...)")
    p_convert.set_defaults(func=cmd_convert)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
