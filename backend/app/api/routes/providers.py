"""Provider routes"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.api.responses import render
from config import config
from middleware.tenant_dependencies import get_kb_facade, get_tenant_context, require_jsonapi_content_type
from schemas.jsonapi import parse_request_document
from services.kb_facade import KBFacade
from services.validation.query import parse_filter
from utils.rate_limit import limiter

router = APIRouter(dependencies=[Depends(get_tenant_context)])


@router.get("/providers")
def search_providers(
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    sort: Optional[str] = None,
    facade: KBFacade = Depends(get_kb_facade),
):
    return render(facade.search_providers(q, page=page, sort=sort))


@router.get("/providers/{provider_id}")
def get_provider(provider_id: str, facade: KBFacade = Depends(get_kb_facade)):
    return render(facade.get_provider(provider_id))


@router.put("/providers/{provider_id}", dependencies=[Depends(require_jsonapi_content_type)])
@limiter.limit(config.WRITE_RATE_LIMIT)
async def update_provider(provider_id: str, request: Request, facade: KBFacade = Depends(get_kb_facade)):
    """Update the provider token value and proxy"""
    document = parse_request_document(await request.body())
    loop = asyncio.get_running_loop()
    outcome = await loop.run_in_executor(None, facade.update_provider, provider_id, document.data.attributes)
    return render(outcome)


@router.get("/providers/{provider_id}/packages")
def search_provider_packages(
    provider_id: str,
    request: Request,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    sort: Optional[str] = None,
    facade: KBFacade = Depends(get_kb_facade),
):
    search_filter = parse_filter(request.query_params)
    return render(facade.search_packages(
        q, page=page, sort=sort, search_filter=search_filter, provider_id=provider_id
    ))
