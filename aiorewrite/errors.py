"""Exceptions raised by aiorewrite."""


class RewriteError(Exception):
    """Base for all aiorewrite errors."""


class PatternCompilationError(RewriteError, ValueError):
    """Raised when a source pattern can't be compiled into a regular expression.

    Args:
        pattern: The offending source pattern.
        reason: What the regular expression engine complained about.
    """

    def __init__(self, pattern, reason: str):
        super().__init__(f"Invalid rewrite pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class UnresolvedPlaceholderError(RewriteError, LookupError):
    """Raised in strict mode when a destination placeholder has no value.

    Args:
        placeholder: The placeholder as written in the template, e.g. ``:id`` or ``$2``.
        template: The destination template containing it.
    """

    def __init__(self, placeholder: str, template: str):
        super().__init__(f"Placeholder {placeholder} in {template!r} can't be resolved")
        self.placeholder = placeholder
        self.template = template
