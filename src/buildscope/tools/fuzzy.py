"""Edit-distance helpers for nearest-filename lookups."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

LOGGER = logging.getLogger(__name__)

FUZZY_THRESHOLD = 0.7
FUZZY_MAX_DEPTH = 2


@dataclass(frozen=True, slots=True)
class FuzzyMatch:
    """Best scoring file found during a fuzzy scan."""

    path: Path
    score: float


def levenshtein(left: str, right: str) -> int:
    """Return the edit distance between ``left`` and ``right``."""
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)

    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def similarity(left: str, right: str) -> float:
    """Case-insensitive normalised similarity in ``[0, 1]``."""
    a = left.lower()
    b = right.lower()
    if not a:
        return 1.0 if not b else 0.0
    if not b:
        return 0.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def walk_files(root: Path, *, max_depth: int) -> Iterator[Path]:
    """Yield files below ``root`` up to ``max_depth`` directory levels.

    Entries are visited in sorted order; unreadable directories are skipped
    and each real directory is expanded at most once.
    """

    visited: set[str] = set()

    def _walk(directory: Path, depth: int) -> Iterator[Path]:
        try:
            real = os.path.realpath(directory)
        except OSError:
            return
        if real in visited:
            return
        visited.add(real)
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as error:
            LOGGER.debug("Skipping unreadable directory %s: %s", directory, error)
            return
        for entry in entries:
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            if is_dir:
                if depth < max_depth:
                    yield from _walk(Path(entry.path), depth + 1)
            else:
                yield Path(entry.path)

    yield from _walk(root, 0)


def best_match(
    filename: str,
    roots: Iterable[Path],
    *,
    max_depth: int = FUZZY_MAX_DEPTH,
    threshold: float = FUZZY_THRESHOLD,
) -> FuzzyMatch | None:
    """Return the most similar file named like ``filename`` across ``roots``.

    Only a score strictly above ``threshold`` is accepted.  On ties the first
    file encountered wins.
    """

    best: FuzzyMatch | None = None
    for root in roots:
        if not os.path.isdir(root):
            continue
        for path in walk_files(root, max_depth=max_depth):
            score = similarity(filename, path.name)
            if best is None or score > best.score:
                best = FuzzyMatch(path=path, score=score)

    if best is None or best.score <= threshold:
        if best is not None:
            LOGGER.debug("Best fuzzy candidate %s scored %.2f; below threshold", best.path, best.score)
        return None
    return best


__all__ = [
    "FUZZY_MAX_DEPTH",
    "FUZZY_THRESHOLD",
    "FuzzyMatch",
    "best_match",
    "levenshtein",
    "similarity",
    "walk_files",
]
