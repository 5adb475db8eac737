"""Drive one build or run cycle against the automation bridge.

Every call to :meth:`BuildOrchestrator.build` creates a fresh
:class:`BuildSession` and walks it through

    idle -> opening -> (building | launching) -> polling -> completed | failed

Failures are reported as short status strings and never retried.  Run mode is
fire-and-forget: the launch is dispatched on a daemon thread and the call
returns immediately.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Literal

from .bridge import AutomationBridge, AutomationUnavailable, BuildResult, Session
from .config import BuildSettings, ProjectContext
from .schema import DiagnosticIssue
from .tools.issues import collect_issues
from .tools.report import BUILD_SUCCESS, ReportAssembler
from .tools.resolver import PathResolver
from .tools.snippets import SnippetExtractor
from .tools.waiting import ProcessTimeout, wait_until

LOGGER = logging.getLogger(__name__)

BuildMode = Literal["build", "run"]

RUN_SUCCESS = "Ran successfully"
FAILED_TO_CONNECT = "Failed to connect to the automation bridge"
NO_WORKSPACE_FOUND = "No workspace found"
FAILED_TO_START_BUILD = "Failed to start build"
FAILED_TO_GET_BUILD_RESULT = "Failed to get build result"
NO_TARGET = "No build target configured"


class SessionStatus(str, Enum):
    """Lifecycle states of a build session."""

    IDLE = "idle"
    OPENING = "opening"
    BUILDING = "building"
    LAUNCHING = "launching"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS: dict[SessionStatus, frozenset[SessionStatus]] = {
    SessionStatus.IDLE: frozenset({SessionStatus.OPENING, SessionStatus.FAILED}),
    SessionStatus.OPENING: frozenset({SessionStatus.BUILDING, SessionStatus.LAUNCHING, SessionStatus.FAILED}),
    SessionStatus.BUILDING: frozenset({SessionStatus.POLLING, SessionStatus.FAILED}),
    SessionStatus.LAUNCHING: frozenset({SessionStatus.COMPLETED, SessionStatus.FAILED}),
    SessionStatus.POLLING: frozenset({SessionStatus.COMPLETED, SessionStatus.FAILED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.FAILED: frozenset(),
}


@dataclass(slots=True)
class BuildSession:
    """State local to a single :meth:`BuildOrchestrator.build` call."""

    target: str
    mode: BuildMode
    status: SessionStatus = SessionStatus.IDLE
    message: str = ""
    issues: List[DiagnosticIssue] = field(default_factory=list)
    history: List[SessionStatus] = field(default_factory=list)

    def advance(self, status: SessionStatus) -> None:
        if status not in _TRANSITIONS[self.status]:
            raise RuntimeError(f"Illegal build session transition {self.status.value} -> {status.value}")
        LOGGER.info("Build session %s: %s -> %s", self.target, self.status.value, status.value)
        self.history.append(self.status)
        self.status = status

    def fail(self, message: str) -> str:
        self.advance(SessionStatus.FAILED)
        self.message = message
        LOGGER.warning("Build session %s failed: %s", self.target, message)
        return message


class BuildOrchestrator:
    """Open, stop, build or run a target and report its diagnostics."""

    def __init__(
        self,
        bridge: AutomationBridge,
        context: ProjectContext | None = None,
        *,
        settings: BuildSettings | None = None,
        assembler: ReportAssembler | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._bridge = bridge
        self.context = context or ProjectContext()
        self.settings = settings or self.context.build
        self.assembler = assembler or ReportAssembler(SnippetExtractor(PathResolver(self.context)))
        self._sleep = sleep

    def build(self, target: str | None = None, run: bool = False) -> str:
        """Build (or launch, when ``run``) ``target`` and return the report."""
        return self.build_session(target, run=run).message

    def build_session(self, target: str | None = None, run: bool = False) -> BuildSession:
        """Like :meth:`build` but return the finished session itself."""

        target = target or (str(self.context.project_path) if self.context.project_path else "")
        session = BuildSession(target=target, mode="run" if run else "build")
        if not target:
            session.fail(NO_TARGET)
            return session

        session.advance(SessionStatus.OPENING)
        try:
            handle = self._bridge.open(target)
            if handle is None or not isinstance(handle, Session):
                session.fail(NO_WORKSPACE_FOUND)
                return session

            handle.stop()

            if run:
                self._launch(session, handle)
            else:
                self._build(session, handle)
        except AutomationUnavailable as error:
            LOGGER.warning("Automation bridge unavailable: %s", error)
            session.fail(FAILED_TO_CONNECT)
        return session

    def _launch(self, session: BuildSession, handle: Session) -> str:
        session.advance(SessionStatus.LAUNCHING)
        if self.settings.run_grace_period > 0:
            # Let the previous run finish terminating.
            self._sleep(self.settings.run_grace_period)

        def _dispatch() -> None:
            try:
                handle.run_async()
            except Exception:  # noqa: BLE001 - nobody is waiting for this thread
                LOGGER.exception("Run request for %s failed", session.target)

        threading.Thread(target=_dispatch, name="buildscope-run", daemon=True).start()
        session.advance(SessionStatus.COMPLETED)
        session.message = RUN_SUCCESS
        return RUN_SUCCESS

    def _build(self, session: BuildSession, handle: Session) -> str:
        session.advance(SessionStatus.BUILDING)
        result = handle.build()
        if result is None:
            return session.fail(FAILED_TO_START_BUILD)

        session.advance(SessionStatus.POLLING)
        try:
            wait_until(
                lambda: bool(_completed(result)),
                interval=self.settings.poll_interval,
                timeout=self.settings.timeout,
                on_timeout=handle.stop,
            )
        except ProcessTimeout as error:
            return session.fail(f"Build timed out after {error.timeout:g} seconds")
        except AutomationUnavailable as error:
            LOGGER.warning("Lost the automation bridge while polling: %s", error)
            return session.fail(FAILED_TO_GET_BUILD_RESULT)

        session.advance(SessionStatus.COMPLETED)
        session.issues = collect_issues(result)
        report = self.assembler.assemble(session.issues)
        session.message = report
        return report

    def run_project(self, target: str | None = None) -> str:
        """Build ``target`` and launch it only when the build is clean."""

        report = self.build(target, run=False)
        if report != BUILD_SUCCESS:
            return report
        return self.build(target, run=True)


def _completed(result: BuildResult | Any) -> bool:
    value = getattr(result, "completed", False)
    if callable(value):
        value = value()
    return bool(value)


__all__ = [
    "BuildMode",
    "BuildOrchestrator",
    "BuildSession",
    "FAILED_TO_CONNECT",
    "FAILED_TO_GET_BUILD_RESULT",
    "FAILED_TO_START_BUILD",
    "NO_TARGET",
    "NO_WORKSPACE_FOUND",
    "RUN_SUCCESS",
    "SessionStatus",
]
