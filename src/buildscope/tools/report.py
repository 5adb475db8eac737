"""Assemble diagnostics and their source snippets into one text report."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..schema import DiagnosticIssue, Report, SnippetResult
from .snippets import SnippetExtractor, fence

LOGGER = logging.getLogger(__name__)

__all__ = ["BUILD_SUCCESS", "ReportAssembler", "format_issue_line"]

BUILD_SUCCESS = "Built successfully"


def format_issue_line(issue: DiagnosticIssue) -> str:
    label = issue.kind.label
    if issue.located:
        return f"{issue.file_path}:{issue.start_line}:{issue.start_column} [{label}] {issue.message}"
    return f"[{label}] {issue.message}"


def _render_snippet(snippet: SnippetResult) -> str:
    body = snippet.text.rstrip("\n")
    if snippet.warning:
        body = f"{snippet.warning}\n\n{body}"
    return fence(snippet.language, body)


class ReportAssembler:
    """Build the final report for one set of issues.

    Each located issue is followed by a snippet of its line range, and every
    referenced file is appended once, in sorted order, as a full listing.
    """

    def __init__(self, extractor: SnippetExtractor | None = None) -> None:
        self.extractor = extractor or SnippetExtractor()

    def collect(self, issues: Iterable[DiagnosticIssue]) -> Report:
        report = Report()
        for issue in issues:
            report.entries.append(format_issue_line(issue))
            if not issue.located:
                continue
            snippet = self.extractor.extract(
                issue.file_path or "",
                issue.start_line,
                issue.end_line,
            )
            report.entries.append(_render_snippet(snippet))
            report.files.add(issue.file_path or "")
        return report

    def render(self, report: Report) -> str:
        if not report.entries:
            return BUILD_SUCCESS

        lines = list(report.entries)
        for path in report.sorted_files():
            snippet = self.extractor.extract(path, entire_file=True)
            lines.append(f"File:`{path}`:")
            lines.append(_render_snippet(snippet))
        LOGGER.debug("Report has %d entries and %d file listing(s)", len(report.entries), len(report.files))
        return "\n".join(lines) + "\n"

    def assemble(self, issues: Iterable[DiagnosticIssue]) -> str:
        return self.render(self.collect(issues))
