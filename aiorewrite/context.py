from typing import Any, Mapping, Sequence

from aiohttp import web
from multidict import MultiDict
from yarl import URL

ROUTE = "route"
"""Signal passed to ``forward`` to restart route dispatch with the rewritten URL."""

Params = Sequence[Any] | Mapping[str, Any]


class RewriteContext:
    """Mutable URL state of a request going through the rewrite rules.

    Rules read and overwrite the ``url`` (path plus optional query string),
    replace the ``query`` mapping when the new URL carries a query string, and
    look up values in ``params`` when used as route middleware. The context
    belongs to the request; rules never keep a reference to it.

    Args:
        url: The request path, including the query string if there is one.
        query: The parsed query parameters. Defaults to an empty mapping.
        params: Parameters resolved by an upstream router, either positional
            (a sequence) or named (a mapping). Defaults to an empty mapping.
    """

    def __init__(
        self,
        url: str,
        query: Mapping[str, str] | None = None,
        params: Params | None = None,
    ):
        self.url: str = url
        self.query: MultiDict[str] = MultiDict(query or {})
        self.params: Params = params if params is not None else {}

    @classmethod
    def from_request(cls, request: web.Request) -> "RewriteContext":
        """Build the context from an incoming aiohttp request.

        Args:
            request: The incoming request. Its ``match_info`` becomes ``params``.
        """
        return cls(
            url=str(request.rel_url),
            query=request.query,
            params=dict(request.match_info),
        )

    @property
    def rel_url(self) -> URL:
        """The relative URL to hand to the next stage.

        The query mapping is only applied when the URL itself has no query
        string, so a query string set by a rewrite always wins.
        """
        url = URL(self.url)
        if not url.query_string and self.query:
            url = url.with_query(self.query)
        return url

    def update_query(self):
        """Replace the query mapping with the one parsed from ``url``.

        Only happens when the URL has a query string after a non-empty path.
        """
        if self.url.find("?") > 0:
            self.query = MultiDict(URL(self.url).query)

    def __repr__(self) -> str:
        return f"<RewriteContext url={self.url!r} query={dict(self.query)!r}>"
