"""Interfaces consumed from the external automation bridge.

The bridge is whatever drives the interactive development session (an IDE
scripting interface, a remote build agent, ...).  buildscope only relies on
the small surface described here; concrete bridges are loaded from the
``automation.bridge`` configuration entry.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, runtime_checkable


class AutomationUnavailable(RuntimeError):
    """Raised when the automation bridge cannot be reached."""


@runtime_checkable
class BuildResult(Protocol):
    """Handle returned by :meth:`Session.build`; ``completed`` is polled."""

    @property
    def completed(self) -> bool: ...

    def build_errors(self) -> Optional[Iterable[Any]]: ...

    def build_warnings(self) -> Optional[Iterable[Any]]: ...

    def analyzer_issues(self) -> Optional[Iterable[Any]]: ...

    def test_failures(self) -> Optional[Iterable[Any]]: ...


@runtime_checkable
class Session(Protocol):
    """An opened build target inside the development session."""

    def stop(self) -> None: ...

    def build(self) -> Optional[BuildResult]: ...

    def run_async(self) -> None: ...


class AutomationBridge(Protocol):
    def open(self, target: str) -> Optional[Session]: ...


__all__ = ["AutomationBridge", "AutomationUnavailable", "BuildResult", "Session"]
