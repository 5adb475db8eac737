"""Cascading path resolution across the project's search roots.

Diagnostics coming back from a build session often reference files by a bare
name, a path relative to some unknown folder, or a slightly wrong spelling.
:class:`PathResolver` tries progressively looser strategies and reports which
one succeeded.  Ambiguity is surfaced as a warning on the result, never as an
exception, so callers can always continue with ``ResolvedPath.resolved``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from ..config import ProjectContext
from ..schema import MatchKind, ResolvedPath
from .fuzzy import FUZZY_MAX_DEPTH, FUZZY_THRESHOLD, best_match, walk_files

LOGGER = logging.getLogger(__name__)

RECURSIVE_MAX_DEPTH = 3


class PathResolver:
    """Resolve user supplied paths against a :class:`ProjectContext`."""

    def __init__(
        self,
        context: ProjectContext | None = None,
        *,
        recursive_depth: int = RECURSIVE_MAX_DEPTH,
        fuzzy_depth: int = FUZZY_MAX_DEPTH,
        fuzzy_threshold: float = FUZZY_THRESHOLD,
    ) -> None:
        self.context = context or ProjectContext()
        self.recursive_depth = recursive_depth
        self.fuzzy_depth = fuzzy_depth
        self.fuzzy_threshold = fuzzy_threshold

    def resolve(self, path: str) -> ResolvedPath:
        """Return the best concrete location for ``path``; never raises."""

        original = path
        stripped = path.strip()
        if not stripped:
            return ResolvedPath(original=original)

        exact = self._exact(stripped)
        if exact is not None:
            return ResolvedPath(original=original, resolved=exact, match_kind=MatchKind.EXACT, score=1.0)

        relative = self._relative_to_project(stripped)
        if relative is not None:
            return ResolvedPath(original=original, resolved=relative, match_kind=MatchKind.RELATIVE, score=1.0)

        filename = Path(stripped.replace("\\", "/").rstrip("/")).name
        if not filename:
            return ResolvedPath(original=original)

        candidates = self.candidates(filename)
        if len(candidates) == 1:
            return ResolvedPath(
                original=original,
                resolved=candidates[0],
                match_kind=MatchKind.RECURSIVE,
                score=1.0,
            )
        if candidates:
            LOGGER.warning("Ambiguous path %r matched %d files", filename, len(candidates))
            return ResolvedPath(
                original=original,
                resolved=candidates[0],
                warning=format_ambiguity_warning(filename, candidates),
                match_kind=MatchKind.RECURSIVE,
                score=1.0,
            )

        match = best_match(
            filename,
            self.fuzzy_roots(),
            max_depth=self.fuzzy_depth,
            threshold=self.fuzzy_threshold,
        )
        if match is not None:
            LOGGER.info("Fuzzy matched %r to %s (%.2f)", filename, match.path, match.score)
            return ResolvedPath(
                original=original,
                resolved=str(match.path),
                warning=(
                    f"Warning: Couldn't find exact file '{filename}'. Using similar file: "
                    f"'{match.path.name}' (similarity: {int(match.score * 100)}%)"
                ),
                match_kind=MatchKind.FUZZY,
                score=match.score,
            )

        LOGGER.debug("Could not resolve %r", original)
        return ResolvedPath(original=original)

    def _exact(self, path: str) -> str | None:
        expanded = os.path.expanduser(path)
        if os.path.exists(expanded):
            return expanded
        if not os.path.isabs(expanded):
            joined = os.path.join(self.context.working_dir, expanded)
            if os.path.exists(joined):
                return joined
        return None

    def _relative_to_project(self, path: str) -> str | None:
        root = self.context.project_root
        if root is None or os.path.isabs(path) or path.startswith("~"):
            return None
        relative = path
        while relative.startswith("./"):
            relative = relative[2:]
        joined = os.path.join(root, relative)
        if os.path.exists(joined):
            return joined
        return None

    def candidates(self, filename: str) -> List[str]:
        """Collect every location holding ``filename``, sorted and de-duplicated."""

        found: list[str] = []
        seen: set[str] = set()

        def _add(candidate: Path) -> None:
            key = os.path.normpath(os.path.abspath(candidate))
            if key in seen or not os.path.isfile(key):
                return
            seen.add(key)
            found.append(key)

        _add(self.context.working_dir / filename)

        roots = self.context.all_search_roots()
        for root in roots:
            _add(root / filename)
        for root in roots:
            if not os.path.isdir(root):
                continue
            for entry in walk_files(root, max_depth=self.recursive_depth):
                if entry.name == filename:
                    _add(entry)

        anchor = self.context.project_anchor()
        if anchor is not None:
            parent = anchor.parent
            _add(parent / filename)
            _add(parent.parent / filename)

        return sorted(found)

    def fuzzy_roots(self) -> List[Path]:
        """Every directory the fuzzy fallback scans."""

        roots: list[Path] = [self.context.working_dir, *self.context.all_search_roots()]
        anchor = self.context.project_anchor()
        if anchor is not None:
            roots.extend([anchor.parent, anchor.parent.parent])

        unique: list[Path] = []
        seen: set[str] = set()
        for root in roots:
            key = os.path.realpath(root)
            if key in seen:
                continue
            seen.add(key)
            unique.append(root)
        return unique


def format_ambiguity_warning(filename: str, candidates: List[str]) -> str:
    """Describe every candidate with a 1-based index."""
    listing = "\n".join(f"[{index}] {candidate}" for index, candidate in enumerate(candidates, start=1))
    return f"Warning: Found multiple files matching '{filename}':\n{listing}\nUsing the first match."


__all__ = ["PathResolver", "RECURSIVE_MAX_DEPTH", "format_ambiguity_warning"]
