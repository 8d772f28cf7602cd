"""Error taxonomy for registry sync runs.

Fatal conditions are exceptions and abort the stage that raised them.
Data-quality findings are plain records: they are collected on stage results
and logged, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from codedict.shared.enums import WarningKind


class CodeDictError(Exception):
    """Base class for fatal registry sync errors."""

    pass


class FetchError(CodeDictError):
    """Raised when an external source cannot be reached or decoded."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class StorageError(CodeDictError):
    """Raised when the registry file is missing, empty, or cannot be written."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class DataQualityWarning:
    """A non-fatal finding about the registry contents."""

    kind: WarningKind
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, **self.context}


__all__ = [
    "CodeDictError",
    "FetchError",
    "StorageError",
    "DataQualityWarning",
]
