"""Build-session orchestration with path-resolving diagnostic reports."""

from .api import build_project, extract_snippet, resolve_path
from .config import ProjectContext, load_context
from .orchestrator import BuildOrchestrator, BuildSession, SessionStatus
from .schema import DiagnosticIssue, IssueKind, MatchKind, ResolvedPath, SnippetResult

__all__ = [
    "BuildOrchestrator",
    "BuildSession",
    "DiagnosticIssue",
    "IssueKind",
    "MatchKind",
    "ProjectContext",
    "ResolvedPath",
    "SessionStatus",
    "SnippetResult",
    "build_project",
    "extract_snippet",
    "load_context",
    "resolve_path",
]
