import os
import stat
from typing import Optional, Tuple
from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.types import ASGIApp, Receive, Scope, Send
from core.config import DeployConfig
from core.errors import MisconfigurationError, ResourceNotFoundError
from core.resources import ResourceIdentity, candidate_paths, resolve, log_resolution
from core.routing import RouteMatch, is_api_path, is_verification_path, is_well_known_path, mark_route
from common.logger import setup_logger

logger = setup_logger('common.spa')


class StaticAssetMiddleware:
    """Serve a file from the build output when one exists for the request path.

    Sits in front of the route table but after the verification routes:
    the two domain association paths always go straight through. Unlike
    ``app.mount("/", StaticFiles(...))`` this only answers when a file is
    actually on disk; otherwise the request continues to the routes.
    """

    def __init__(self, app: ASGIApp, directory):
        self.app = app
        self.directory = str(directory)
        self.files = StaticFiles(directory=self.directory, html=True, check_dir=False)

    def _lookup(self, path: str) -> Optional[Tuple[str, os.stat_result]]:
        relative = os.path.normpath(os.path.join(*path.split("/")))
        full_path, stat_result = self.files.lookup_path(relative)
        if stat_result is None:
            return None
        if stat.S_ISREG(stat_result.st_mode):
            return full_path, stat_result
        if stat.S_ISDIR(stat_result.st_mode) and os.path.isfile(os.path.join(full_path, "index.html")):
            return full_path, stat_result
        return None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (scope["type"] == "http"
                and scope["method"] in ("GET", "HEAD")
                and not is_verification_path(scope["path"])):
            found = await run_in_threadpool(self._lookup, scope["path"])
            if found is not None:
                mark_route(scope, RouteMatch.STATIC_ASSET)
                await self.files(scope, receive, send)
                return
        await self.app(scope, receive, send)


def create_spa_router(config: DeployConfig) -> APIRouter:
    """Catch-all that hands client-side routes the bootstrap document.

    Must be included after every API router.
    """
    router = APIRouter(tags=["spa"])

    @router.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
    async def spa_fallback(request: Request, full_path: str):
        path = request.url.path
        mark_route(request.scope, RouteMatch.SPA_FALLBACK)

        # API misses stay JSON, never the bootstrap page
        if is_api_path(path):
            raise ResourceNotFoundError("Not found")
        # Verification routes are claimed earlier; reaching here is a routing bug
        if is_well_known_path(path):
            logger.warning(f"Unclaimed well-known request reached SPA fallback: {path}")
            return PlainTextResponse("Not found", status_code=404)

        candidates = candidate_paths(ResourceIdentity.SPA_ENTRY, config)
        index_path = await run_in_threadpool(resolve, candidates)
        if index_path is None:
            log_resolution(path, candidates, None)
            raise MisconfigurationError("index.html not found in dist directory")
        return FileResponse(index_path)

    return router
