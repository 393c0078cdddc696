# Copyright iX.
# SPDX-License-Identifier: MIT-0
from fastapi import APIRouter
from pydantic import BaseModel
from core.config import DeployConfig, env_config
from common.logger import setup_logger

logger = setup_logger('api.applepay')


class MerchantConfig(BaseModel):
    merchantId: str
    displayName: str
    domain: str
    environment: str
    gatewayMode: str


def create_applepay_router(config: DeployConfig) -> APIRouter:
    """Default payment sub-router, mounted under /api/applepay.

    Only exposes the public merchant settings the browser needs to open an
    Apple Pay session. Merchant validation and payment capture belong to the
    gateway integration, which replaces this router via ``create_app(payment_router=...)``.
    """
    router = APIRouter(prefix="/applepay", tags=["applepay"])

    @router.get("/config", response_model=MerchantConfig)
    async def get_merchant_config():
        applepay = env_config.applepay_config
        if not applepay['merchant_id']:
            logger.warning("APPLE_MERCHANT_ID is not set")
        return MerchantConfig(
            merchantId=applepay['merchant_id'],
            displayName=applepay['display_name'],
            domain=applepay['domain'],
            environment=config.app_env,
            gatewayMode=env_config.authorize_net_config['mode'],
        )

    return router
