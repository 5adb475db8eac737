"""On-demand source snippet utilities used by the report and the API."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..config import ProjectContext
from ..schema import ResolvedPath, SnippetResult
from .resolver import PathResolver
from .security import SecurityGate

LOGGER = logging.getLogger(__name__)

__all__ = [
    "INVALID_LINE_NUMBERS",
    "LANGUAGE_BY_EXTENSION",
    "SnippetExtractor",
    "detect_language",
    "fence",
]

INVALID_LINE_NUMBERS = "Invalid line numbers."
_READ_ERROR = "Error reading file: {reason}"
_NOT_FOUND = "File not found. Tried searching for {path} in multiple locations."

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    "swift": "swift",
    "m": "objc",
    "h": "objc",
    "c": "c",
    "cpp": "c",
    "cc": "c",
    "js": "javascript",
    "py": "python",
    "rb": "ruby",
    "java": "java",
    "html": "html",
    "htm": "html",
    "css": "css",
    "json": "json",
    "xml": "xml",
}


def detect_language(path: str) -> str:
    """Map a file extension onto a code-fence language tag."""
    suffix = Path(path).suffix.lower().lstrip(".")
    return LANGUAGE_BY_EXTENSION.get(suffix, "text")


def fence(language: str, body: str) -> str:
    return f"```{language}\n{body}\n```"


class SnippetExtractor:
    """Resolve a path and return a line range (or the whole file) from it.

    Problems are reported through the returned :class:`SnippetResult` text so a
    report can keep going past one bad reference.  When a ``gate`` is supplied
    the resolved path must pass it before the file is read.
    """

    def __init__(
        self,
        resolver: PathResolver | None = None,
        *,
        gate: SecurityGate | None = None,
    ) -> None:
        self.resolver = resolver or PathResolver()
        self.gate = gate

    @classmethod
    def for_context(cls, context: ProjectContext, *, guarded: bool = True) -> "SnippetExtractor":
        gate = SecurityGate(context.permitted_root) if guarded else None
        return cls(PathResolver(context), gate=gate)

    def extract(
        self,
        path: str,
        start_line: int | None = None,
        end_line: int | None = None,
        *,
        entire_file: bool = False,
    ) -> SnippetResult:
        resolved = self.resolver.resolve(path)
        return self.extract_resolved(resolved, start_line, end_line, entire_file=entire_file)

    def extract_resolved(
        self,
        resolved: ResolvedPath,
        start_line: int | None = None,
        end_line: int | None = None,
        *,
        entire_file: bool = False,
    ) -> SnippetResult:
        target = resolved.resolved
        language = detect_language(target)

        def _message(text: str) -> SnippetResult:
            return SnippetResult(
                path=target,
                language=language,
                text=text,
                warning=resolved.warning,
                ok=False,
            )

        if not os.path.isfile(target):
            return _message(_READ_ERROR.format(reason=_NOT_FOUND.format(path=resolved.original)))

        if self.gate is not None:
            decision = self.gate.check(target)
            if not decision.allowed:
                return _message(decision.reason or "")

        try:
            content = Path(target).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            LOGGER.warning("Failed to read %s: %s", target, error)
            return _message(_READ_ERROR.format(reason=error))

        if entire_file:
            return SnippetResult(path=target, language=language, text=content, warning=resolved.warning)

        lines = content.splitlines()
        if (
            start_line is None
            or end_line is None
            or start_line < 1
            or end_line < start_line
            or end_line > len(lines)
        ):
            return _message(INVALID_LINE_NUMBERS)

        return SnippetResult(
            path=target,
            language=language,
            text="\n".join(lines[start_line - 1 : end_line]),
            warning=resolved.warning,
        )
