# Copyright iX.
# SPDX-License-Identifier: MIT-0
from datetime import datetime, timezone
from fastapi import APIRouter
from core.config import DeployConfig


def create_health_router(config: DeployConfig) -> APIRouter:
    router = APIRouter(prefix="/health", tags=["health"])

    @router.get("")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "ok",
            "environment": config.app_env,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return router
