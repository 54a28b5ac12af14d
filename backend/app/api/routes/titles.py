"""Title routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.responses import render
from middleware.tenant_dependencies import get_kb_facade, get_tenant_context
from services.kb_facade import KBFacade

router = APIRouter(dependencies=[Depends(get_tenant_context)])


@router.get("/titles")
def search_titles(
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    sort: Optional[str] = None,
    facade: KBFacade = Depends(get_kb_facade),
):
    return render(facade.search_titles(q, page=page, sort=sort))


@router.get("/titles/{title_id}")
def get_title(title_id: str, facade: KBFacade = Depends(get_kb_facade)):
    return render(facade.get_title(title_id))
