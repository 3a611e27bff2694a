from unittest.mock import Mock

import pytest
from aiohttp import web

from aiorewrite import rewrite_middleware


async def echo(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "path": request.path,
            "query": dict(request.query),
            "match_info": dict(request.match_info),
        }
    )


@pytest.fixture
def forward():
    """Stand-in for the pipeline continuation."""
    return Mock(return_value=None)


@pytest.fixture
def make_app():
    """Build an application echoing the URL its handlers are called with."""

    def factory(*rules) -> web.Application:
        middlewares = [rewrite_middleware(*rules)] if rules else []
        app = web.Application(middlewares=middlewares)
        app.router.add_get("/items/{id}", echo)
        app.router.add_get("/commits/{src}/to/{dst}", echo)
        app.router.add_get("/anotherpath", echo)
        app.router.add_get("/file/{name}", echo)
        app.router.add_get("/rewritten/{name}", echo)
        return app

    return factory
