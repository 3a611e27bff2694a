from .context import ROUTE, RewriteContext
from .errors import PatternCompilationError, RewriteError, UnresolvedPlaceholderError
from .handler import RewriteHandler, dispatch, rewrite_middleware
from .pattern import Key, path_to_regex
from .rewrite import CaptureSlot, Rewrite, apply_rules, rewrite

__all__ = [
    "ROUTE",
    "RewriteContext",
    "Rewrite",
    "rewrite",
    "apply_rules",
    "CaptureSlot",
    "RewriteHandler",
    "rewrite_middleware",
    "dispatch",
    "Key",
    "path_to_regex",
    "RewriteError",
    "PatternCompilationError",
    "UnresolvedPlaceholderError",
]
