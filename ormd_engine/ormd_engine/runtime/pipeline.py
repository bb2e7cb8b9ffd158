from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ormd_engine.errors import OrmdParseError, OrmdValidationError
from ormd_engine.intake.parser import parse
from ormd_engine.intake.projector import ProjectionPolicy, to_context_bundle
from ormd_engine.invariants.validate import validate_document
from ormd_engine.models.bundle import ContextBundle
from ormd_engine.models.document import ParseResult, ValidationResult

from .store import ContextStoreProtocol, StoredContextBundle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    """
    Ingest configuration.

    validate        run the semantic validator after a successful parse
    reject_invalid  raise OrmdValidationError instead of storing an invalid document
    strict_dates    calendar-check dates on top of the lexical check
    """
    validate: bool = True
    reject_invalid: bool = True
    strict_dates: bool = False
    projection: ProjectionPolicy = field(default_factory=ProjectionPolicy)


@dataclass(frozen=True)
class IngestReport:
    parse: ParseResult
    validation: Optional[ValidationResult] = None
    bundle: Optional[ContextBundle] = None
    stored: Optional[StoredContextBundle] = None

    @property
    def warnings(self) -> tuple[str, ...]:
        out = list(self.parse.warnings or ())
        if self.validation is not None:
            out.extend(self.validation.warnings or ())
        return tuple(out)


class OrmdPipeline:
    """
    Orchestrates parse → validate → project → store.

    Parse failures always raise; validation failures raise only when
    config.reject_invalid is set. The store is an injected collaborator.
    """

    def __init__(self, store: ContextStoreProtocol, config: Optional[PipelineConfig] = None) -> None:
        self.store = store
        self.config = config or PipelineConfig()

    def ingest(self, text: str, bundle_id: Optional[str] = None) -> IngestReport:
        parsed = parse(text)
        if not parsed.success or parsed.data is None:
            raise OrmdParseError(parsed.errors or ())
        document = parsed.data

        validation: Optional[ValidationResult] = None
        if self.config.validate:
            validation = validate_document(document, strict_dates=self.config.strict_dates)
            if not validation.valid and self.config.reject_invalid:
                raise OrmdValidationError(validation.errors or ())

        bundle = to_context_bundle(document, bundle_id, policy=self.config.projection)
        stored = self.store.store(bundle)
        logger.info("ingested %r as %s", document.title, bundle.id)

        return IngestReport(parse=parsed, validation=validation, bundle=bundle, stored=stored)

    def ingest_file(self, path: Union[str, Path], bundle_id: Optional[str] = None) -> IngestReport:
        p = Path(path)
        logger.debug("ingesting %s", p)
        return self.ingest(p.read_text(encoding="utf-8"), bundle_id)
