"""Normalise raw diagnostics pulled from a completed build session."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable

from ..schema import DiagnosticIssue, IssueKind

LOGGER = logging.getLogger(__name__)

__all__ = ["COLLECTIONS", "collect_issues", "normalize_issue"]

# Bridge accessor name for each collection, in report order.
COLLECTIONS: tuple[tuple[str, IssueKind], ...] = (
    ("build_errors", IssueKind.ERROR),
    ("build_warnings", IssueKind.WARNING),
    ("analyzer_issues", IssueKind.ANALYZER),
    ("test_failures", IssueKind.TEST_FAILURE),
)

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "message": ("message",),
    "file_path": ("file_path", "filePath", "path"),
    "start_line": ("start_line", "startLine", "starting_line_number", "startingLineNumber"),
    "end_line": ("end_line", "endLine", "ending_line_number", "endingLineNumber"),
    "start_column": ("start_column", "startColumn", "starting_column_number", "startingColumnNumber"),
}


def _field(raw: Any, name: str) -> Any:
    for alias in _FIELD_ALIASES[name]:
        if isinstance(raw, Mapping):
            value = raw.get(alias)
        else:
            value = getattr(raw, alias, None)
        if callable(value):
            value = value()
        if value is not None:
            return value
    return None


def _coerce_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_issue(raw: Any, kind: IssueKind) -> DiagnosticIssue | None:
    """Return a uniform issue, or ``None`` when ``raw`` carries no message.

    The location is attached only when path, start/end line and start column
    are all present; otherwise the issue is bare.
    """

    message = _field(raw, "message")
    if not isinstance(message, str) or not message.strip():
        return None

    file_path = _field(raw, "file_path")
    start_line = _coerce_int(_field(raw, "start_line"))
    end_line = _coerce_int(_field(raw, "end_line"))
    start_column = _coerce_int(_field(raw, "start_column"))

    if isinstance(file_path, str) and file_path.strip() and None not in (start_line, end_line, start_column):
        return DiagnosticIssue(
            kind=kind,
            message=message.strip(),
            file_path=file_path.strip(),
            start_line=start_line,
            end_line=end_line,
            start_column=start_column,
        )
    return DiagnosticIssue(kind=kind, message=message.strip())


def _pull(result: Any, accessor: str) -> Iterable[Any]:
    source: Callable[[], Any] | Any = getattr(result, accessor, None)
    if source is None:
        return ()
    items = source() if callable(source) else source
    return items or ()


def collect_issues(result: Any) -> list[DiagnosticIssue]:
    """Normalise the four issue collections of a completed build result.

    A collection the result does not expose contributes no issues.
    """

    issues: list[DiagnosticIssue] = []
    for accessor, kind in COLLECTIONS:
        raw_items = _pull(result, accessor)
        count = 0
        for raw in raw_items:
            issue = normalize_issue(raw, kind)
            if issue is None:
                continue
            issues.append(issue)
            count += 1
        LOGGER.debug("Collected %d %s issue(s)", count, kind.value)
    return issues
