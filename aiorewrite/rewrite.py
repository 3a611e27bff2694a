import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from aiorewrite.context import ROUTE, Params, RewriteContext
from aiorewrite.errors import UnresolvedPlaceholderError
from aiorewrite.pattern import PatternSource, path_to_regex

log = logging.getLogger(__name__)

# "$<digits>" is a positional reference, ":<word>" a named one
PLACEHOLDER = re.compile(r"\$(\d+)|:(\w+)", re.ASCII)

Forward = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class CaptureSlot:
    """A capture group of the source pattern and its position among all groups."""

    name: str | int
    index: int


class RewriteMode:
    """Rewrites URLs matching a compiled source pattern into a destination template."""

    forward_args: tuple = ()

    def __init__(
        self,
        source: PatternSource,
        template: str,
        strict: bool = False,
        sensitive: bool = False,
        strict_slash: bool = False,
        end: bool = True,
    ):
        keys = []
        self.matcher: re.Pattern = path_to_regex(
            source, keys, sensitive=sensitive, strict=strict_slash, end=end
        )
        self.slots: tuple[CaptureSlot, ...] = tuple(
            CaptureSlot(name=key.name, index=index) for index, key in enumerate(keys)
        )
        self.slot_index: dict[str, CaptureSlot] = {
            str(slot.name): slot for slot in self.slots
        }
        self.template = template
        self.strict = strict
        if strict:
            self._validate()

    def _validate(self):
        for placeholder in PLACEHOLDER.finditer(self.template):
            position, name = placeholder.groups()
            if name is not None and name not in self.slot_index:
                raise UnresolvedPlaceholderError(placeholder.group(0), self.template)
            if position is not None and int(position) > self.matcher.groups:
                raise UnresolvedPlaceholderError(placeholder.group(0), self.template)

    def substitute(self, url: str, params: Params) -> str | None:
        match = self.matcher.search(url)
        if match is None:
            return None

        def resolve(placeholder: re.Match) -> str:
            position, name = placeholder.groups()
            if name is not None:
                slot = self.slot_index.get(name)
                group = None if slot is None else slot.index + 1
            else:
                group = int(position)
            if group is None or group > self.matcher.groups:
                if self.strict:
                    raise UnresolvedPlaceholderError(placeholder.group(0), self.template)
                return ""
            # Groups that didn't take part in the match
            return match.group(group) or ""

        return PLACEHOLDER.sub(resolve, self.template)

    def __repr__(self) -> str:
        return f"<RewriteMode {self.matcher.pattern!r} -> {self.template!r}>"


class RouteMiddlewareMode:
    """Fills the template from parameters an upstream router already resolved."""

    forward_args: tuple = (ROUTE,)

    def __init__(self, template: str, strict: bool = False):
        self.template = template
        self.strict = strict

    def substitute(self, url: str, params: Params) -> str:
        def resolve(placeholder: re.Match) -> str:
            position, name = placeholder.groups()
            if name is not None:
                value = params.get(name) if isinstance(params, Mapping) else None
            else:
                value = _positional(params, int(position))
            if value is None:
                if self.strict:
                    raise UnresolvedPlaceholderError(placeholder.group(0), self.template)
                return ""
            return str(value)

        return PLACEHOLDER.sub(resolve, self.template)

    def __repr__(self) -> str:
        return f"<RouteMiddlewareMode {self.template!r}>"


def _positional(params: Params, position: int):
    if isinstance(params, Mapping):
        return params.get(str(position), params.get(position))
    try:
        return params[position]
    except IndexError:
        return None


class Rewrite:
    """A URL rewriting rule.

    With a destination the rule rewrites every URL matching ``rfrom`` into
    ``rto``, substituting ``$n`` with the n-th capture and ``:name`` with the
    named one, and lets the pipeline carry on. Without a destination
    ``rfrom`` is itself the template, filled from the parameters of the route
    that matched, and the pipeline is told to route the new URL again.

    Args:
        rfrom: The source pattern; a path pattern, a compiled regular
            expression or a list of either. The template in route middleware mode.
        rto: The destination template.
        strict: Raise ``UnresolvedPlaceholderError`` for placeholders that
            have no value instead of substituting an empty string.
        sensitive: Match the source pattern case sensitively.
        strict_slash: Don't match an extra trailing slash.
        end: Require the pattern to match up to the end of the URL.

    Raises:
        ValueError: If ``rfrom`` is empty, or is not a string in route middleware mode.
        PatternCompilationError: If ``rfrom`` is not a valid pattern.
        UnresolvedPlaceholderError: In strict mode, if ``rto`` references
            captures ``rfrom`` doesn't declare.
    """

    def __init__(
        self,
        rfrom: PatternSource,
        rto: str | None = None,
        *,
        strict: bool = False,
        sensitive: bool = False,
        strict_slash: bool = False,
        end: bool = True,
    ):
        if not isinstance(rfrom, re.Pattern) and not rfrom:
            raise ValueError("The rewrite source must not be empty")
        self.rfrom = rfrom
        self.rto = rto

        if rto is None:
            if not isinstance(rfrom, str):
                raise ValueError("Only a string can be used as a route middleware template")
            self._mode = RouteMiddlewareMode(rfrom, strict=strict)
        else:
            self._mode = RewriteMode(
                rfrom,
                rto,
                strict=strict,
                sensitive=sensitive,
                strict_slash=strict_slash,
                end=end,
            )
            log.debug("rewrite %s -> %s    %s", rfrom, rto, self._mode.matcher.pattern)

    @property
    def restarts_routing(self) -> bool:
        """Whether the rule asks the pipeline to route the rewritten URL again."""
        return bool(self._mode.forward_args)

    def execute(self, url: str, params: Params | None = None) -> str | None:
        """Rewrite a URL without touching any request state.

        Args:
            url: The path to rewrite, including its query string.
            params: Upstream route parameters, used in route middleware mode.

        Returns:
            The rewritten URL, or None if the source pattern doesn't match.
        """
        return self._mode.substitute(url, params if params is not None else {})

    def __call__(self, ctx: RewriteContext, forward: Forward):
        """Rewrite the context URL and hand control to ``forward``.

        Args:
            ctx: The URL state of the current request.
            forward: Continuation; called without arguments to carry on,
                or with ``ROUTE`` to route the rewritten URL again.

        Returns:
            Whatever ``forward`` returns.
        """
        rewritten = self.execute(ctx.url, ctx.params)
        if rewritten is None:
            return forward()

        log.debug("rewrite %s -> %s", ctx.url, rewritten)
        ctx.url = rewritten
        ctx.update_query()
        return forward(*self._mode.forward_args)

    def __repr__(self) -> str:
        return f"<Rewrite {self._mode!r}>"


def rewrite(source: PatternSource, destination: str | None = None, **options: Any) -> Rewrite:
    """Create a rewriting rule; see ``Rewrite`` for the arguments."""
    return Rewrite(source, destination, **options)


def _signal(signal=None):
    return signal


def apply_rules(rules: Iterable[Rewrite], ctx: RewriteContext):
    """Run rules in order over one context.

    Stops at the first rule that asks for routing to restart.

    Returns:
        ``ROUTE`` if a rule asked to restart routing, None otherwise.
    """
    signal = None
    for rule in rules:
        signal = rule(ctx, _signal)
        if signal == ROUTE:
            break
    return signal
