"""Build file dialect rewriters."""

from .bakefile0 import Bakefile0Rewriter, update_bakefile_0
from .base import FileLists, Rewriter, Updater
from .extensions import get_extension, sort_lines, translate_extension
from .makefile import MakefileRewriter, resolve_variable_name, update_makefile
from .registry import RewriterRegistry
from .runtime import KNOWN_FORMATS, build_rewriter_registry

__all__ = [
    "Bakefile0Rewriter",
    "FileLists",
    "KNOWN_FORMATS",
    "MakefileRewriter",
    "Rewriter",
    "RewriterRegistry",
    "Updater",
    "build_rewriter_registry",
    "get_extension",
    "resolve_variable_name",
    "sort_lines",
    "translate_extension",
    "update_bakefile_0",
    "update_makefile",
]
