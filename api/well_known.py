# Copyright iX.
# SPDX-License-Identifier: MIT-0
from pathlib import Path
from typing import Sequence
from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.types import Receive, Scope, Send
from core.config import DeployConfig
from core.resources import ResourceIdentity, candidate_paths, combined_candidates, resolve, log_resolution
from core.routing import RouteMatch, DOMAIN_ASSOCIATION_PATH, DOMAIN_ASSOCIATION_TXT_PATH, mark_route
from common.logger import setup_logger

logger = setup_logger('api.well_known')

# Explicit header: media_type='text/plain' would get '; charset=utf-8' appended
DOMAIN_ASSOCIATION_HEADERS = {
    'Content-Type': 'text/plain',
    'Cache-Control': 'public, max-age=3600',
}


class DomainAssociationResponse(FileResponse):
    """FileResponse that degrades to a plain-text 500 if sending fails before headers go out.

    Once ``http.response.start`` has been sent a second response is impossible,
    so a later failure is only logged.
    """

    def __init__(self, path: Path):
        super().__init__(path, headers=DOMAIN_ASSOCIATION_HEADERS)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        started = False

        async def tracking_send(message):
            nonlocal started
            if message['type'] == 'http.response.start':
                started = True
            await send(message)

        try:
            await super().__call__(scope, receive, tracking_send)
        except (OSError, RuntimeError) as e:
            logger.error(f"Error sending file {self.path}: {e}")
            if started:
                return
            error = PlainTextResponse('Error serving domain association file', status_code=500)
            await error(scope, receive, send)


async def _serve(request: Request, candidates: Sequence[Path]):
    mark_route(request.scope, RouteMatch.VERIFICATION)
    resolved = await run_in_threadpool(resolve, candidates)
    log_resolution(request.url.path, candidates, resolved)

    if resolved is None:
        return PlainTextResponse('Domain association file not found', status_code=404)
    return DomainAssociationResponse(resolved)


def create_well_known_router(config: DeployConfig) -> APIRouter:
    """Routes for the Apple Pay merchant domain association file.

    These are installed ahead of every other stage: Apple's validator does
    not follow redirects or accept an HTML body.
    """
    router = APIRouter(tags=["well-known"])

    @router.api_route(DOMAIN_ASSOCIATION_PATH, methods=["GET", "HEAD"], include_in_schema=False)
    async def domain_association(request: Request):
        candidates = candidate_paths(ResourceIdentity.VERIFICATION_FILE, config)
        return await _serve(request, candidates)

    @router.api_route(DOMAIN_ASSOCIATION_TXT_PATH, methods=["GET", "HEAD"], include_in_schema=False)
    async def domain_association_txt(request: Request):
        # .txt spelling first, then the bare file under the .txt URL
        candidates = combined_candidates(
            ResourceIdentity.VERIFICATION_FILE_TXT,
            ResourceIdentity.VERIFICATION_FILE,
            config=config,
        )
        return await _serve(request, candidates)

    return router
