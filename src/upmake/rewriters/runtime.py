"""Runtime rewriter registry construction."""

from __future__ import annotations

from upmake.rewriters.bakefile0 import Bakefile0Rewriter
from upmake.rewriters.makefile import MakefileRewriter
from upmake.rewriters.registry import RewriterRegistry

KNOWN_FORMATS = ("makefile", "bakefile0")


def build_rewriter_registry() -> RewriterRegistry:
    """Build the registry of all supported build file dialects."""
    registry = RewriterRegistry()
    registry.register(MakefileRewriter())
    registry.register(Bakefile0Rewriter())
    return registry
