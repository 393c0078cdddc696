# Copyright iX.
# SPDX-License-Identifier: MIT-0
from typing import Optional
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from core.config import app_config, env_config, DeployConfig
from core.errors import ResourceNotFoundError, register_error_handlers
from core.routing import API_PREFIX
from common.logger import logger
from common.middleware import RequestIDMiddleware
from common.spa import StaticAssetMiddleware, create_spa_router
from api.well_known import create_well_known_router
from api.health import create_health_router
from api.applepay import create_applepay_router


# Get configurations from app_config
server_config = app_config.server_config
cors_config = app_config.cors_config


API_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def api_not_found(request: Request):
    """Any /api path no sub-router claimed, whatever the method."""
    raise ResourceNotFoundError("Not found")


class Dispatcher:
    """Installs the request stages on an app in their fixed precedence.

    1. domain association file (both spellings)
    2. static assets from the build output   (packaged only)
    3. /api routers, then a JSON 404 for the rest of /api
    4. SPA bootstrap fallback                 (packaged only)
    5. error handlers

    Stage 2 is middleware that steps aside for stage 1's two paths; the rest
    are routes, and Starlette tries routes in registration order.
    Call ``install`` before adding outer middleware so stage 2 runs innermost.
    """

    def __init__(self, config: DeployConfig, payment_router: Optional[APIRouter] = None):
        self.config = config
        self.payment_router = payment_router or create_applepay_router(config)

    def install(self, app: FastAPI) -> FastAPI:
        app.include_router(create_well_known_router(self.config))

        if self.config.packaged:
            app.add_middleware(StaticAssetMiddleware, directory=self.config.dist_dir)

        app.include_router(create_health_router(self.config), prefix=API_PREFIX)
        app.include_router(self.payment_router, prefix=API_PREFIX)
        for path in (API_PREFIX, API_PREFIX + "/{rest:path}"):
            app.add_api_route(path, api_not_found, methods=API_METHODS, include_in_schema=False)

        if self.config.packaged:
            app.include_router(create_spa_router(self.config))

        register_error_handlers(app)
        return app


def create_app(config: Optional[DeployConfig] = None, payment_router: Optional[APIRouter] = None) -> FastAPI:
    """Build the edge server. ``config`` is frozen for the life of the app."""
    config = config or DeployConfig.from_app_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for FastAPI app"""
        logger.info(f"Environment: {config.app_env} (packaged={config.packaged})")
        logger.info(f"Apple Merchant ID: {env_config.applepay_config['merchant_id'] or '<unset>'}")
        logger.info(f"Authorize.Net Mode: {env_config.authorize_net_config['mode']}")
        if config.packaged:
            logger.info(f"Serving build output from {config.dist_dir}")
        yield
        logger.info("Shutting down application...")

    app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.deploy_config = config
    Dispatcher(config, payment_router).install(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config['allow_origins'],
        allow_credentials=True,
        allow_methods=cors_config['allow_methods'],
        allow_headers=cors_config['allow_headers'],
        max_age=3600
    )
    # Added last so it runs first: the id exists before any routing decision
    app.add_middleware(RequestIDMiddleware)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=server_config['host'],
        port=server_config['port'],
        log_level=server_config['log_level']
    )
