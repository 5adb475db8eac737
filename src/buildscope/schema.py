"""Typed records exchanged between the resolver, orchestrator and report."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class MatchKind(str, Enum):
    """Strategy that produced a resolved path."""

    EXACT = "exact"
    RELATIVE = "relative"
    RECURSIVE = "recursive"
    FUZZY = "fuzzy"
    UNRESOLVED = "unresolved"


class IssueKind(str, Enum):
    """Diagnostic collection an issue was pulled from."""

    ERROR = "error"
    WARNING = "warning"
    ANALYZER = "analyzer"
    TEST_FAILURE = "test_failure"

    @property
    def label(self) -> str:
        return _ISSUE_LABELS[self]


_ISSUE_LABELS = {
    IssueKind.ERROR: "Error",
    IssueKind.WARNING: "Warning",
    IssueKind.ANALYZER: "Analyzer Issue",
    IssueKind.TEST_FAILURE: "Test Failure",
}


class ResolvedPath(RecordModel):
    """Outcome of resolving a user supplied path.

    ``resolved`` always holds a usable value: when no strategy succeeds it is
    the original string and ``match_kind`` is ``UNRESOLVED``.
    """

    original: str
    resolved: str = ""
    warning: str = ""
    match_kind: MatchKind = MatchKind.UNRESOLVED
    score: float = 0.0

    @model_validator(mode="before")
    @classmethod
    def _resolved_never_empty(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("resolved"):
            return {**data, "resolved": data.get("original", "")}
        return data

    @property
    def found(self) -> bool:
        return self.match_kind != MatchKind.UNRESOLVED


class DiagnosticIssue(RecordModel):
    """Normalised diagnostic.

    A location is either complete (path, start/end line and start column) or
    absent entirely; partial locations are rejected.
    """

    kind: IssueKind
    message: str
    file_path: Optional[str] = None
    start_line: Optional[int] = None
    end_line: Optional[int] = None
    start_column: Optional[int] = None

    @model_validator(mode="after")
    def _location_all_or_nothing(self) -> "DiagnosticIssue":
        fields = (self.file_path, self.start_line, self.end_line, self.start_column)
        present = [value is not None for value in fields]
        if any(present) and not all(present):
            raise ValueError("location requires file_path, start_line, end_line and start_column")
        return self

    @property
    def located(self) -> bool:
        return self.file_path is not None


class SnippetResult(RecordModel):
    """Source text captured for a path, or an explanatory message."""

    path: str
    language: str = "text"
    text: str = ""
    warning: str = ""
    ok: bool = True


class Report(BaseModel):
    """Accumulated report entries plus the set of files they reference."""

    model_config = ConfigDict(extra="forbid")

    entries: list[str] = Field(default_factory=list)
    files: set[str] = Field(default_factory=set)

    def sorted_files(self) -> list[str]:
        return sorted(self.files)


__all__ = [
    "DiagnosticIssue",
    "IssueKind",
    "MatchKind",
    "RecordModel",
    "Report",
    "ResolvedPath",
    "SnippetResult",
]
