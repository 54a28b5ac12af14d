"""KB API credential configuration routes"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request

from app.api.responses import render
from config import config
from middleware.tenant_dependencies import (
    TenantContext,
    get_configuration_service,
    get_tenant_context,
    require_jsonapi_content_type,
)
from schemas.jsonapi import parse_request_document
from services.configuration_service import ConfigurationService
from utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_tenant_context)])


@router.get("/configuration")
def get_configuration(
    context: TenantContext = Depends(get_tenant_context),
    service: ConfigurationService = Depends(get_configuration_service),
):
    """Stored credentials of the tenant, api key masked"""
    return render(service.read(context.tenant))


@router.put("/configuration", dependencies=[Depends(require_jsonapi_content_type)])
@limiter.limit(config.WRITE_RATE_LIMIT)
async def update_configuration(
    request: Request,
    context: TenantContext = Depends(get_tenant_context),
    service: ConfigurationService = Depends(get_configuration_service),
):
    document = parse_request_document(await request.body())
    logger.info(f"Updating KB configuration for tenant {context.tenant}")
    # credential verification calls the upstream
    loop = asyncio.get_running_loop()
    outcome = await loop.run_in_executor(None, service.write, context.tenant, document.data.attributes)
    return render(outcome)
