"""Permitted-root checks performed before touching the filesystem."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

LOGGER = logging.getLogger(__name__)


class SecurityDenied(RuntimeError):
    """Raised when a path lies outside the permitted root."""

    def __init__(self, path: str, root: Path) -> None:
        self.path = path
        self.root = root
        super().__init__(denial_message(root))


def denial_message(root: Path) -> str:
    return f"Security Error: Access denied. Operations are restricted to {root}"


@dataclass(frozen=True, slots=True)
class SecurityDecision:
    """Outcome of :meth:`SecurityGate.check`."""

    allowed: bool
    path: str
    reason: str | None = None


class SecurityGate:
    """Confine reads and writes to a single permitted root directory."""

    def __init__(self, permitted_root: Path | str | None = None) -> None:
        root = Path(permitted_root).expanduser() if permitted_root is not None else Path.home()
        self.root = Path(os.path.realpath(root))

    def check(self, path: Path | str) -> SecurityDecision:
        canonical = Path(os.path.realpath(os.path.expanduser(str(path))))
        if canonical == self.root or canonical.is_relative_to(self.root):
            return SecurityDecision(allowed=True, path=str(canonical))
        LOGGER.warning("Denied access to %s outside %s", canonical, self.root)
        return SecurityDecision(allowed=False, path=str(canonical), reason=denial_message(self.root))

    def require(self, path: Path | str) -> str:
        """Return the canonical path or raise :class:`SecurityDenied`."""
        decision = self.check(path)
        if not decision.allowed:
            raise SecurityDenied(str(path), self.root)
        return decision.path


__all__ = ["SecurityDecision", "SecurityDenied", "SecurityGate", "denial_message"]
