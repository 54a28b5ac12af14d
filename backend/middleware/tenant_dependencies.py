"""
FastAPI dependencies for the tenant context of a request.

This module provides reusable dependencies that handle:
- Tenant header extraction (X-Okapi-Tenant, X-Okapi-Url, X-Okapi-Token)
- The JSON:API content type contract on mutating requests
- Building the tenant's KB API client and facade from stored credentials

Usage:
    from middleware.tenant_dependencies import get_kb_facade, require_jsonapi_content_type

    @router.put("/{id}", dependencies=[Depends(require_jsonapi_content_type)])
    async def endpoint(id: str, request: Request, facade: KBFacade = Depends(get_kb_facade)):
        ...
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

from data.configuration_store import ConfigurationStore, get_configuration_store
from integrations.kb_api import KBApiClient
from services.configuration_service import ConfigurationService
from services.kb_facade import KBFacade
from services.validation.configuration import content_type_is_valid
from utils.errors import HeaderContractError, KBNotConfiguredError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    tenant: str
    okapi_url: str
    token: str


def get_tenant_context(
    tenant: str = Header(None, alias="X-Okapi-Tenant"),
    okapi_url: str = Header(None, alias="X-Okapi-Url"),
    token: str = Header(None, alias="X-Okapi-Token"),
) -> TenantContext:
    """
    FastAPI dependency requiring the tenant headers on every KB route.

    Raises:
        HTTPException: 400 if any tenant header is missing
    """
    if not okapi_url:
        raise HTTPException(status_code=400, detail="X-Okapi-Url header required")
    if not tenant:
        raise HTTPException(status_code=400, detail="X-Okapi-Tenant header required")
    if not token:
        raise HTTPException(status_code=400, detail="X-Okapi-Token header required")
    return TenantContext(tenant=tenant, okapi_url=okapi_url, token=token)


def require_jsonapi_content_type(content_type: str = Header(None, alias="Content-Type")) -> None:
    """Reject mutating requests whose Content-Type is not application/vnd.api+json, before the body is read."""
    if not content_type_is_valid(content_type):
        logger.info(f"Rejected request with Content-Type {content_type!r}")
        raise HeaderContractError("Content-Type")


def get_kb_client(
    context: TenantContext = Depends(get_tenant_context),
    store: ConfigurationStore = Depends(get_configuration_store),
) -> KBApiClient:
    """KB API client built from the tenant's stored credentials."""
    record = store.get(context.tenant)
    if record is None:
        raise KBNotConfiguredError(context.tenant)
    return KBApiClient(record["customer_id"], record["api_key"], record["base_url"])


def get_kb_facade(client: KBApiClient = Depends(get_kb_client)) -> KBFacade:
    return KBFacade(client)


def get_configuration_service(
    store: ConfigurationStore = Depends(get_configuration_store),
) -> ConfigurationService:
    return ConfigurationService(store)
