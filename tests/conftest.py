from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from buildscope.config import BuildSettings, ProjectContext  # noqa: E402


@dataclass(slots=True)
class Workspace:
    """Synthetic multi-root layout used by resolver and report tests.

    ``root/ws/App`` is the project folder, ``root/ws/App/App.proj`` the
    project file and ``root/shared`` an extra search root.
    """

    root: Path
    project_root: Path
    project_path: Path
    shared: Path

    def write(self, relative: str, content: str, *, base: Path | None = None) -> Path:
        target = (base or self.root) / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    def context(self, **overrides: Any) -> ProjectContext:
        values: dict[str, Any] = {
            "project_root": self.project_root,
            "project_path": self.project_path,
            "search_roots": (self.shared,),
            "working_dir": self.root / "cwd",
            "permitted_root": self.root,
            "build": BuildSettings(poll_interval=0.01, timeout=2.0, run_grace_period=0.0),
        }
        values.update(overrides)
        return ProjectContext(**values)


@pytest.fixture()
def workspace(tmp_path: Path) -> Workspace:
    root = tmp_path / "layout"
    project_root = root / "ws" / "App"
    project_root.mkdir(parents=True)
    project_path = project_root / "App.proj"
    project_path.write_text("project", encoding="utf-8")
    shared = root / "shared"
    shared.mkdir()
    (root / "cwd").mkdir()
    return Workspace(root=root, project_root=project_root, project_path=project_path, shared=shared)


@dataclass
class FakeIssue:
    message: str | None
    filePath: str | None = None
    startingLineNumber: int | None = None
    endingLineNumber: int | None = None
    startingColumnNumber: int | None = None


@dataclass
class FakeResult:
    """Build result whose ``completed`` flag flips after ``polls_needed`` reads."""

    errors: list[Any] | None = None
    warnings: list[Any] | None = None
    analyzer: list[Any] | None = None
    failures: list[Any] | None = None
    polls_needed: int = 1
    polls: int = 0

    @property
    def completed(self) -> bool:
        self.polls += 1
        return self.polls >= self.polls_needed

    def build_errors(self) -> list[Any] | None:
        return self.errors

    def build_warnings(self) -> list[Any] | None:
        return self.warnings

    def analyzer_issues(self) -> list[Any] | None:
        return self.analyzer

    def test_failures(self) -> list[Any] | None:
        return self.failures


@dataclass
class FakeSession:
    result: FakeResult | None = None
    calls: list[str] = field(default_factory=list)
    run_started: threading.Event = field(default_factory=threading.Event)
    run_release: threading.Event | None = None

    def stop(self) -> None:
        self.calls.append("stop")

    def build(self) -> FakeResult | None:
        self.calls.append("build")
        return self.result

    def run_async(self) -> None:
        self.calls.append("run")
        self.run_started.set()
        if self.run_release is not None:
            self.run_release.wait(5)


@dataclass
class FakeBridge:
    session: Any = None
    opened: list[str] = field(default_factory=list)
    error: Exception | None = None

    def open(self, target: str) -> Any:
        self.opened.append(target)
        if self.error is not None:
            raise self.error
        return self.session


@dataclass(slots=True)
class Fakes:
    issue: Callable[..., FakeIssue] = FakeIssue
    result: Callable[..., FakeResult] = FakeResult
    session: Callable[..., FakeSession] = FakeSession
    bridge: Callable[..., FakeBridge] = FakeBridge


@pytest.fixture()
def fakes() -> Fakes:
    return Fakes()
