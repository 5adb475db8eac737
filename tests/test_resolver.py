from __future__ import annotations

import os
from pathlib import Path

import pytest

from buildscope.schema import MatchKind
from buildscope.tools import fuzzy
from buildscope.tools.resolver import PathResolver


def test_existing_absolute_path_is_returned_unchanged(workspace) -> None:
    target = workspace.write("ws/App/Sources/main.swift", "print(1)\n")
    result = PathResolver(workspace.context()).resolve(str(target))

    assert result.resolved == str(target)
    assert result.match_kind == MatchKind.EXACT
    assert result.warning == ""
    assert result.score == 1.0


def test_relative_path_is_joined_to_project_root(workspace) -> None:
    target = workspace.write("Sources/main.swift", "print(1)\n", base=workspace.project_root)
    result = PathResolver(workspace.context()).resolve("./Sources/main.swift")

    assert result.match_kind == MatchKind.RELATIVE
    assert Path(result.resolved) == target
    assert result.warning == ""


def test_single_candidate_in_search_root_has_no_warning(workspace) -> None:
    target = workspace.write("only.swift", "let x = 1\n", base=workspace.shared)
    result = PathResolver(workspace.context()).resolve("Lib/only.swift")

    assert result.match_kind == MatchKind.RECURSIVE
    assert Path(result.resolved) == target
    assert result.warning == ""


def test_nested_candidate_is_found_by_recursive_scan(workspace) -> None:
    target = workspace.write("a/b/c/found.swift", "", base=workspace.shared)
    result = PathResolver(workspace.context()).resolve("found.swift")

    assert result.match_kind == MatchKind.RECURSIVE
    assert Path(result.resolved) == target


def test_recursive_scan_stops_at_depth_limit(workspace) -> None:
    workspace.write("a/b/c/d/hidden.swift", "", base=workspace.shared)
    result = PathResolver(workspace.context()).resolve("hidden.swift")

    assert result.match_kind == MatchKind.UNRESOLVED
    assert result.resolved == "hidden.swift"


def test_project_grandparent_is_searched(workspace) -> None:
    target = workspace.write("ws/Top.swift", "")
    result = PathResolver(workspace.context()).resolve("Top.swift")

    assert result.match_kind == MatchKind.RECURSIVE
    assert Path(result.resolved) == target


def test_multiple_candidates_pick_sorted_first_with_warning(workspace) -> None:
    in_project = workspace.write("Sources/dup.swift", "", base=workspace.project_root)
    in_shared = workspace.write("lib/dup.swift", "", base=workspace.shared)
    result = PathResolver(workspace.context()).resolve("elsewhere/dup.swift")

    expected = sorted([str(in_project), str(in_shared)])
    assert result.resolved == expected[0]
    assert result.warning.startswith("Warning: Found multiple files matching 'dup.swift':")
    assert f"[1] {expected[0]}" in result.warning
    assert f"[2] {expected[1]}" in result.warning
    assert result.warning.endswith("Using the first match.")


def test_ambiguity_choice_is_stable_across_calls(workspace) -> None:
    for folder in ("zeta", "alpha", "mid"):
        workspace.write(f"{folder}/dup.swift", "", base=workspace.shared)
    resolver = PathResolver(workspace.context())

    first = resolver.resolve("dup.swift")
    second = resolver.resolve("dup.swift")

    assert first.resolved == second.resolved
    assert first.resolved.endswith(os.path.join("alpha", "dup.swift"))
    assert first.warning.count("[") == 3


def test_fuzzy_fallback_accepts_close_name(workspace) -> None:
    target = workspace.write("NetworkManager.swift", "", base=workspace.shared)
    result = PathResolver(workspace.context()).resolve("NetworkManagr.swift")

    assert result.match_kind == MatchKind.FUZZY
    assert Path(result.resolved) == target
    assert result.score > 0.7
    assert "similarity" in result.warning


def test_unrelated_name_is_unresolved(workspace) -> None:
    workspace.write("NetworkManager.swift", "", base=workspace.shared)
    result = PathResolver(workspace.context()).resolve("Completely/Different.txt")

    assert result.match_kind == MatchKind.UNRESOLVED
    assert result.resolved == "Completely/Different.txt"
    assert result.warning == ""
    assert result.score == 0.0


def test_blank_path_is_unresolved() -> None:
    result = PathResolver().resolve("   ")

    assert result.match_kind == MatchKind.UNRESOLVED
    assert result.resolved == "   "


def test_unreadable_subtree_is_skipped(workspace, monkeypatch: pytest.MonkeyPatch) -> None:
    blocked = workspace.shared / "blocked"
    workspace.write("blocked/target.swift", "", base=workspace.shared)
    target = workspace.write("open/target.swift", "", base=workspace.shared)
    real_scandir = os.scandir

    def _scandir(path):
        if Path(path) == blocked:
            raise PermissionError("denied")
        return real_scandir(path)

    monkeypatch.setattr(fuzzy.os, "scandir", _scandir)
    result = PathResolver(workspace.context()).resolve("target.swift")

    assert result.match_kind == MatchKind.RECURSIVE
    assert Path(result.resolved) == target
    assert result.warning == ""


def test_symlink_cycle_does_not_duplicate_candidates(workspace) -> None:
    target = workspace.write("pkg/cycle.swift", "", base=workspace.shared)
    (workspace.shared / "pkg" / "loop").symlink_to(workspace.shared / "pkg", target_is_directory=True)
    result = PathResolver(workspace.context()).resolve("cycle.swift")

    assert Path(result.resolved) == target
    assert result.warning == ""


def test_unusable_search_root_is_skipped(workspace) -> None:
    bad_root = workspace.root / ("y" * 300)
    target = workspace.write("Sources/present.swift", "", base=workspace.project_root)
    resolver = PathResolver(workspace.context(search_roots=(bad_root, workspace.shared)))

    missing = resolver.resolve("nothing_here.swift")
    found = resolver.resolve("present.swift")

    assert missing.match_kind == MatchKind.UNRESOLVED
    assert found.match_kind == MatchKind.RECURSIVE
    assert Path(found.resolved) == target
