import logging
import re

from aiohttp import web

from aiorewrite import RewriteHandler, rewrite, rewrite_middleware

log = logging.getLogger(__name__)


async def item(request: web.Request) -> web.Response:
    log.info("Item requested: %s", request.match_info["id"])
    return web.json_response({"id": request.match_info["id"], "query": dict(request.query)})


async def asset(request: web.Request) -> web.Response:
    return web.Response(text=f"asset {request.match_info['path']}")


application = web.Application(
    middlewares=[
        rewrite_middleware(
            rewrite(re.compile(r"^/i(\w+)"), "/items/$1"),
            rewrite("/js/*", "/public/assets/js/$1"),
            rewrite("/search", "/items/all?sort=name"),
        )
    ]
)

application.router.add_routes(
    [
        web.get("/items/{id}", item),
        web.get("/public/assets/js/{path:.*}", asset),
        web.get("/products/{id}", RewriteHandler("/items/:id")),
    ]
)

logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

web.run_app(application)
