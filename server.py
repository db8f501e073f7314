"""HTTP trigger for the discovery pipeline (aiohttp.web).

Routes:
    POST /api/discover    Run one discovery pass (scheduler entry point)
    GET  /api/discover    Capability status, runs nothing

Authentication:
    When CRON_SECRET is set, POST requires ``Authorization: Bearer <secret>``.
    When it is unset, POST is open; set REQUIRE_CRON_SECRET=true to refuse
    to start without one.

Responses:
    200 DiscoveryRunResult JSON
    401 {"error": "Unauthorized"}
    500 {"error": "Discovery pipeline failed", "details": "<message>"}
"""

import hmac
import logging

from aiohttp import web

from config import Config
from pipeline import DiscoveryPipeline, PipelineError, status_message

logger = logging.getLogger(__name__)

PIPELINE_KEY = web.AppKey("pipeline", DiscoveryPipeline)
CONFIG_KEY = web.AppKey("config", Config)

routes = web.RouteTableDef()


def is_authorized(request: web.Request, secret: str) -> bool:
    """Check the bearer token against the shared secret.

    Always True when no secret is configured.
    """
    if not secret:
        return True
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return False
    return hmac.compare_digest(auth_header[7:].encode(), secret.encode())


@routes.post("/api/discover")
async def discover(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    if not is_authorized(request, config.cron_secret):
        logger.warning("Unauthorized discovery trigger | remote=%s", request.remote)
        return web.json_response({"error": "Unauthorized"}, status=401)

    pipeline = request.app[PIPELINE_KEY]
    try:
        result = await pipeline.run_once()
    except PipelineError as e:
        return web.json_response(
            {"error": "Discovery pipeline failed", "details": str(e)},
            status=500,
        )
    return web.json_response(result.to_dict())


@routes.get("/api/discover")
async def status(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    configured = request.app[PIPELINE_KEY].capability_status()
    return web.json_response({
        "status": "ok",
        "message": status_message(configured),
        "configured": {**configured, "cron": bool(config.cron_secret)},
    })


def create_app(pipeline: DiscoveryPipeline, config: Config) -> web.Application:
    """Build the aiohttp application around an existing pipeline."""
    app = web.Application()
    app[PIPELINE_KEY] = pipeline
    app[CONFIG_KEY] = config
    app.add_routes(routes)

    async def close_pipeline(app: web.Application) -> None:
        await app[PIPELINE_KEY].close()

    app.on_cleanup.append(close_pipeline)
    return app


def serve(config: Config) -> None:
    """Run the HTTP trigger until interrupted."""
    if not config.cron_secret:
        logger.warning("CRON_SECRET not set: POST /api/discover is unauthenticated")
    app = create_app(DiscoveryPipeline(config), config)
    logger.info("Serving | host=%s port=%d", config.host, config.port)
    web.run_app(app, host=config.host, port=config.port, print=None)
