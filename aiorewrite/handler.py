import logging
from typing import Awaitable, Callable

from aiohttp import web

from aiorewrite.context import RewriteContext
from aiorewrite.rewrite import Rewrite, apply_rules

log = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


async def dispatch(request: web.Request, ctx: RewriteContext) -> web.StreamResponse:
    """Route the rewritten URL through the application router and call its handler.

    Unknown paths and methods raise the usual ``HTTPNotFound`` and
    ``HTTPMethodNotAllowed`` through the handler aiohttp resolves for them.

    Args:
        request: The request as it came in.
        ctx: The context holding the rewritten URL.

    Returns:
        The response of the handler the rewritten URL routes to.
    """
    app = request.match_info.apps[0]
    rewritten = request.clone(rel_url=ctx.rel_url)

    match_info = await app.router.resolve(rewritten)
    match_info.add_app(app)
    match_info.freeze()
    # aiohttp has no public way to route a request again
    rewritten._match_info = match_info

    log.debug("dispatch %s -> %s", request.rel_url, rewritten.rel_url)
    return await match_info.handler(rewritten)


def rewrite_middleware(*rules: Rewrite):
    """Create an aiohttp middleware applying ``rules`` to every request.

    A request whose URL the rules leave alone goes on to the handler aiohttp
    already resolved. A rewritten one is routed again and handed straight to
    the handler of the new route, so middlewares registered after this one
    don't see it; register it last.

    Args:
        rules: The rules to apply, in order.
    """

    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        ctx = RewriteContext.from_request(request)
        original = ctx.url
        apply_rules(rules, ctx)
        if ctx.url == original:
            return await handler(request)
        return await dispatch(request, ctx)

    return middleware


class RewriteHandler:
    """A route handler rewriting the request and routing it again.

    Typically used with route middleware rules, filled from the ``match_info``
    of the route the handler is registered on:

        router.add_get("/route/{var}", RewriteHandler("/rewritten/:var"))

    Args:
        rules: Rules to apply, in order. Strings are turned into route
            middleware rules.

    Raises:
        ValueError: If no rule is given.
    """

    def __init__(self, *rules: Rewrite | str):
        if not rules:
            raise ValueError("At least one rewrite rule is required")
        self.rules: list[Rewrite] = [
            Rewrite(rule) if isinstance(rule, str) else rule for rule in rules
        ]

    async def __call__(self, request: web.Request) -> web.StreamResponse:
        """Handle the request by rewriting it.

        Raises:
            HTTPNotFound: If no rule matched the request URL.
        """
        ctx = RewriteContext.from_request(request)
        original = ctx.url
        signal = apply_rules(self.rules, ctx)
        if signal is None and ctx.url == original:
            raise web.HTTPNotFound()
        return await dispatch(request, ctx)
