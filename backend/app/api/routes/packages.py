"""Package routes"""

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


@router.get("/packages")
def search_packages(
    request: Request,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    sort: Optional[str] = None,
    facade: KBFacade = Depends(get_kb_facade),
):
    """Search packages; filter[selected], filter[type] and filter[custom] narrow the results"""
    search_filter = parse_filter(request.query_params)
    return render(facade.search_packages(q, page=page, sort=sort, search_filter=search_filter))


@router.get("/packages/{package_id}")
def get_package(package_id: str, facade: KBFacade = Depends(get_kb_facade)):
    return render(facade.get_package(package_id))


@router.put("/packages/{package_id}", dependencies=[Depends(require_jsonapi_content_type)])
@limiter.limit(config.WRITE_RATE_LIMIT)
async def update_package(package_id: str, request: Request, facade: KBFacade = Depends(get_kb_facade)):
    document = parse_request_document(await request.body())
    loop = asyncio.get_running_loop()
    outcome = await loop.run_in_executor(None, facade.update_package, package_id, document.data.attributes)
    return render(outcome)


@router.get("/packages/{package_id}/resources")
def list_package_resources(
    package_id: str,
    page: int = Query(1, ge=1),
    facade: KBFacade = Depends(get_kb_facade),
):
    return render(facade.list_package_resources(package_id, page=page))
