"""FastAPI transport for the mock dispatcher.

Every request outside the health probe is forwarded to Dispatcher.dispatch.
Handlers are plain functions, so FastAPI runs each request on a worker
thread; the dispatcher gives each one its own generator.
"""

import json
import logging
import time

import uvicorn
from fastapi import FastAPI, Request, Response

from api_mock_engine.config import SERVER_NAME, ServerConfig
from api_mock_engine.errors import EncodingFailure
from api_mock_engine.mock.dispatcher import Dispatcher, DispatchResult
from api_mock_engine.parser.base import Schema

logger = logging.getLogger(__name__)

MOCK_HEADER = "X-Mock-Server"
JSON_MEDIA_TYPE = "application/json"
ROUTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def encode_body(body) -> bytes:
    try:
        return json.dumps(body, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingFailure(f"response body is not JSON serializable: {e}") from e


def to_response(result: DispatchResult) -> Response:
    headers = {MOCK_HEADER: "true"}
    if result.allowed_methods:
        headers["Allow"] = ", ".join(result.allowed_methods)
    try:
        content = encode_body(result.body)
        status = result.status_code
    except EncodingFailure as e:
        logger.error("%s", e)
        content = encode_body({"error": "Failed to encode mock response"})
        status = 500
    return Response(content=content, status_code=status, media_type=JSON_MEDIA_TYPE, headers=headers)


def create_app(schema: Schema, dispatcher: Dispatcher | None = None, server_name: str = SERVER_NAME) -> FastAPI:
    """Build the mock application for a schema."""
    dispatcher = dispatcher or Dispatcher(schema)
    app = FastAPI(
        title=f"Mock server for {schema.title or 'API'}",
        version=schema.version or "0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.dispatcher = dispatcher

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s %d %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "server": server_name}

    @app.api_route("/{full_path:path}", methods=ROUTED_METHODS)
    def mock_endpoint(request: Request) -> Response:
        result = dispatcher.dispatch(request.url.path, request.method)
        return to_response(result)

    return app


def run_server(schema: Schema, config: ServerConfig) -> None:
    """Serve the schema until SIGINT/SIGTERM.

    uvicorn owns signal handling; on shutdown it stops accepting
    connections and waits up to ``config.grace_period`` seconds for
    in-flight requests before closing them.
    """
    app = create_app(schema, Dispatcher(schema, seed=config.seed), server_name=config.server_name)

    logger.info("Mock server starting on http://%s:%d", config.host, config.port)
    logger.info("Schema: %s (version %s)", schema.title, schema.version)
    logger.info("Registered %d paths, %d operations", len(schema.paths), schema.endpoint_count)

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            timeout_graceful_shutdown=config.grace_period,
            log_config=None,
            log_level=config.log_level.lower(),
        )
    )
    server.run()
    logger.info("Mock server stopped")
