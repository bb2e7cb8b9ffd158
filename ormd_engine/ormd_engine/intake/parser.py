"""
ORMD parser.

Text → ParseResult[OrmdDocument]

Two failure taxonomies, never mixed:
- structural (no frontmatter block, undecodable YAML): abort on the first error
- field-level (missing/invalid required fields): accumulate every error, keep warnings

The version warning is collected first and reported with either kind of failure.
"""

from __future__ import annotations

import logging
import re
from typing import Any, List, Mapping

import yaml

from ormd_engine.models.document import OrmdDocument, ParseResult
from ormd_engine.models.types import ISO8601_PATTERN, ORMD_DEFAULT_VERSION, ORMD_VERSION_COMMENT

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(r"^(?:<!--.*?-->\s*\n)?---\s*\n([\s\S]*?)\n---\s*\n([\s\S]*)\Z")

MISSING_VERSION_WARNING = f"Missing ORMD version comment (<!-- ormd:{ORMD_DEFAULT_VERSION} -->)"
MISSING_FRONTMATTER_ERROR = "Invalid ORMD format: missing YAML frontmatter"

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class FrontmatterLoader(yaml.SafeLoader):
    """
    SafeLoader that leaves unquoted timestamps as the string the author wrote,
    so date checks see the literal text and frontmatter stays JSON-compatible.
    """


FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_frontmatter(block: str) -> Any:
    return yaml.load(block, Loader=FrontmatterLoader)


def is_valid_iso8601(value: Any) -> bool:
    """Lexical check only; 2024-02-30T00:00:00Z passes."""
    return isinstance(value, str) and ISO8601_PATTERN.match(value) is not None


def _check_required_fields(frontmatter: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []

    if not frontmatter.get("title"):
        errors.append("Missing required field: title")

    dates = frontmatter.get("dates")
    if not dates:
        errors.append("Missing required field: dates")
    elif not isinstance(dates, Mapping) or not dates.get("created"):
        errors.append("Missing required field: dates.created")

    if isinstance(dates, Mapping):
        created = dates.get("created")
        modified = dates.get("modified")
        if created and not is_valid_iso8601(created):
            errors.append("Invalid date format for dates.created (must be ISO-8601)")
        if modified and not is_valid_iso8601(modified):
            errors.append("Invalid date format for dates.modified (must be ISO-8601)")

    return errors


def parse(text: str) -> ParseResult:
    """
    Parse ORMD text.

    Missing version comment is a warning only. No partial document is ever
    returned on failure.
    """
    try:
        warnings: List[str] = []

        first_line = text.split("\n", 1)[0]
        if not ORMD_VERSION_COMMENT.match(first_line):
            warnings.append(MISSING_VERSION_WARNING)

        match = FRONTMATTER_PATTERN.match(text)
        if match is None:
            logger.debug("parse: no frontmatter block found")
            return ParseResult(success=False, errors=[MISSING_FRONTMATTER_ERROR], warnings=warnings)

        frontmatter_yaml, markdown = match.group(1), match.group(2)

        try:
            frontmatter = load_frontmatter(frontmatter_yaml)
        except yaml.YAMLError as exc:
            logger.debug("parse: YAML decode failed: %s", exc)
            return ParseResult(success=False, errors=[f"Invalid YAML frontmatter: {exc}"], warnings=warnings)

        if not isinstance(frontmatter, Mapping):
            return ParseResult(
                success=False, errors=["Invalid YAML frontmatter: expected a mapping"], warnings=warnings
            )

        errors = _check_required_fields(frontmatter)
        if errors:
            logger.debug("parse: %d field error(s)", len(errors))
            return ParseResult(success=False, errors=errors, warnings=warnings)

        document = OrmdDocument(frontmatter=frontmatter, content=markdown.strip(), raw=text)
        return ParseResult(success=True, data=document, warnings=warnings)

    except Exception as exc:  # boundary: parse() reports, never raises
        logger.exception("parse: unexpected failure")
        return ParseResult(success=False, errors=[f"Parse error: {exc}"])
