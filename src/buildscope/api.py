"""Operations exposed to the tool-dispatch layer."""

from __future__ import annotations

from .bridge import AutomationBridge
from .config import ProjectContext
from .orchestrator import BuildOrchestrator
from .schema import ResolvedPath, SnippetResult
from .tools.resolver import PathResolver
from .tools.snippets import SnippetExtractor


def resolve_path(path: str, context: ProjectContext | None = None) -> ResolvedPath:
    return PathResolver(context).resolve(path)


def build_project(
    target: str | None,
    run: bool,
    bridge: AutomationBridge,
    context: ProjectContext | None = None,
) -> str:
    """Build or launch ``target`` and return the report or a status string."""
    return BuildOrchestrator(bridge, context).build(target, run=run)


def extract_snippet(
    path: str,
    start_line: int | None = None,
    end_line: int | None = None,
    entire_file: bool = False,
    context: ProjectContext | None = None,
) -> SnippetResult:
    """Resolve ``path`` and return the requested lines, checked against the permitted root."""
    extractor = SnippetExtractor.for_context(context or ProjectContext(), guarded=True)
    return extractor.extract(path, start_line, end_line, entire_file=entire_file)


__all__ = ["build_project", "extract_snippet", "resolve_path"]
