from __future__ import annotations

from typing import Sequence


class OrmdError(Exception):
    """Base class for ormd_engine errors."""


class _ErrorListMixin:
    def _init_errors(self, message: str, errors: Sequence[str]) -> None:
        self.errors = tuple(errors)
        detail = "; ".join(self.errors)
        Exception.__init__(self, f"{message}: {detail}" if detail else message)


class OrmdParseError(_ErrorListMixin, OrmdError):
    """Raised by callers that need a document and got a failed ParseResult."""

    def __init__(self, errors: Sequence[str], message: str = "ORMD parse failed") -> None:
        self._init_errors(message, errors)


class OrmdValidationError(_ErrorListMixin, OrmdError):
    def __init__(self, errors: Sequence[str], message: str = "ORMD validation failed") -> None:
        self._init_errors(message, errors)


# ---------------------------
# Storage
# ---------------------------

class StorageError(OrmdError):
    pass


class NotFoundError(StorageError, KeyError):
    def __init__(self, bundle_id: str) -> None:
        self.bundle_id = bundle_id
        super().__init__(f"Context bundle not found: {bundle_id}")

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise
        return str(self.args[0])


class ConflictError(StorageError):
    def __init__(self, bundle_id: str) -> None:
        self.bundle_id = bundle_id
        super().__init__(f"Context bundle already exists: {bundle_id}")


class StoreClosedError(StorageError):
    pass
