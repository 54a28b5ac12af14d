"""Resource routes: a title as held in one package"""

import asyncio

from fastapi import APIRouter, Depends, Request

from app.api.responses import render
from config import config
from middleware.tenant_dependencies import get_kb_facade, get_tenant_context, require_jsonapi_content_type
from schemas.jsonapi import parse_request_document
from services.kb_facade import KBFacade
from utils.rate_limit import limiter

router = APIRouter(dependencies=[Depends(get_tenant_context)])


@router.post("/resources", dependencies=[Depends(require_jsonapi_content_type)])
@limiter.limit(config.WRITE_RATE_LIMIT)
async def create_resource(request: Request, facade: KBFacade = Depends(get_kb_facade)):
    """Add a custom title to a custom package"""
    document = parse_request_document(await request.body())
    loop = asyncio.get_running_loop()
    outcome = await loop.run_in_executor(None, facade.create_resource, document.data.attributes)
    return render(outcome)


@router.get("/resources/{resource_id}")
def get_resource(resource_id: str, facade: KBFacade = Depends(get_kb_facade)):
    return render(facade.get_resource(resource_id))


@router.put("/resources/{resource_id}", dependencies=[Depends(require_jsonapi_content_type)])
@limiter.limit(config.WRITE_RATE_LIMIT)
async def update_resource(resource_id: str, request: Request, facade: KBFacade = Depends(get_kb_facade)):
    document = parse_request_document(await request.body())
    loop = asyncio.get_running_loop()
    outcome = await loop.run_in_executor(None, facade.update_resource, resource_id, document.data.attributes)
    return render(outcome)


@router.delete("/resources/{resource_id}")
@limiter.limit(config.WRITE_RATE_LIMIT)
def delete_resource(resource_id: str, request: Request, facade: KBFacade = Depends(get_kb_facade)):
    """Remove a custom title from its package"""
    return render(facade.destroy_resource(resource_id))
