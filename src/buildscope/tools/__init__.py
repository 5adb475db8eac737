"""Filesystem and reporting helpers used by the orchestrator."""

from .fuzzy import FuzzyMatch, best_match, levenshtein, similarity
from .issues import collect_issues, normalize_issue
from .report import BUILD_SUCCESS, ReportAssembler
from .resolver import PathResolver
from .security import SecurityDecision, SecurityDenied, SecurityGate
from .snippets import SnippetExtractor, detect_language
from .waiting import ProcessTimeout, wait_until

__all__ = [
    "BUILD_SUCCESS",
    "FuzzyMatch",
    "PathResolver",
    "ProcessTimeout",
    "ReportAssembler",
    "SecurityDecision",
    "SecurityDenied",
    "SecurityGate",
    "SnippetExtractor",
    "best_match",
    "collect_issues",
    "detect_language",
    "levenshtein",
    "normalize_issue",
    "similarity",
    "wait_until",
]
