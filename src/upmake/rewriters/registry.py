"""Rewriter registry with deterministic selection behavior."""

from __future__ import annotations

from dataclasses import dataclass, field

from upmake.rewriters.base import Rewriter


@dataclass(slots=True)
class RewriterRegistry:
    """Ordered rewriter registry, selectable by path or by name."""

    _rewriters: list[Rewriter] = field(default_factory=list)

    def register(self, rewriter: Rewriter) -> None:
        """Register a rewriter in deterministic insertion order."""
        self._rewriters.append(rewriter)

    def select(self, path: str) -> Rewriter:
        """Select the first rewriter that supports the path."""
        for rewriter in self._rewriters:
            if rewriter.supports_path(path):
                return rewriter
        raise LookupError(f"No rewriter supports path: {path}")

    def get(self, name: str) -> Rewriter:
        """Return the rewriter registered under ``name``."""
        for rewriter in self._rewriters:
            if rewriter.name == name:
                return rewriter
        raise LookupError(f"Unknown format: {name}")

    def names(self) -> tuple[str, ...]:
        """Return registered rewriter names in deterministic order."""
        return tuple(rewriter.name for rewriter in self._rewriters)
