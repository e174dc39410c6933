from fastapi import FastAPI, Request
from fastapi.responses import Response
import argparse
import logging
import sys
from typing import Optional

import httpx

from subcache.core.cache_store import CacheStore
from subcache.core.config import ConfigError, Settings, UpstreamConfig, load_upstream_config
from subcache.core.handler import SubscriptionHandler

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    upstream: UpstreamConfig,
    app_settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Builds the app around one SubscriptionHandler.
    Every path and method gets the same subscription bytes with status 200;
    an empty body is the only sign that both upstream and cache failed.
    """
    if app_settings is None:
        app_settings = Settings()
    app = FastAPI(title=app_settings.PROJECT_NAME, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.handler = SubscriptionHandler(
        upstream=upstream,
        cache=CacheStore(app_settings.CACHE_PATH, app_settings.CACHE_FILE_MODE),
        timeout=app_settings.UPSTREAM_TIMEOUT,
        transport=transport,
    )

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def serve_subscription(request: Request, path: str):
        handler: SubscriptionHandler = request.app.state.handler
        data = await handler.handle()
        return Response(content=data, media_type="text/plain; charset=utf-8")

    return app


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve a Clash subscription with an on-disk fallback cache")
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=Settings.DEFAULT_CONFIG_PATH,
        help=f"set configuration file (default: {Settings.DEFAULT_CONFIG_PATH})"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        app_settings = Settings()
        upstream = load_upstream_config(args.config)
    except ConfigError as e:
        logger.critical(f"Failed to read configuration, err: {e}")
        sys.exit(1)

    app = create_app(upstream, app_settings)
    logger.info(f"Service started, upstream: {upstream.url}, cache: {app_settings.CACHE_PATH}")

    import uvicorn
    uvicorn.run(app, host=app_settings.HOST, port=app_settings.PORT)


if __name__ == "__main__":
    main()
