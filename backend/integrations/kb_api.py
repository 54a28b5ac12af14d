"""
Upstream KB API integration.

Thin HTTP wrapper around the vendor management service that owns providers,
packages and titles. Records are returned exactly as the upstream sends them;
translating them is the attribute mapper's job.
"""
import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config import config
from utils.errors import UpstreamError, UpstreamNotFoundError

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "vendors": {"name": "vendorname", "relevance": "relevance"},
    "packages": {"name": "packagename", "relevance": "relevance"},
    "titles": {"name": "titlename", "relevance": "relevance"},
}

SELECTION_FILTERS = {
    "true": "selected",
    "false": "notselected",
    "ebsco": "orderedthroughebsco",
}


class KBApiClient:
    """
    KB API client for one customer account.

    All paths live under ``{base_url}/rm/rmaccounts/{customer_id}``. GET
    requests are retried on 429/502/503/504; writes are sent once.
    """

    def __init__(self, customer_id: str, api_key: str, base_url: str,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.customer_id = customer_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else config.KB_API_TIMEOUT
        self.api_base = f"{self.base_url}/rm/rmaccounts/{customer_id}"

        self.session = session or requests.Session()

        retry_strategy = Retry(
            total=config.KB_API_MAX_RETRIES,
            backoff_factor=0.5,
            status_forcelist=[429, 502, 503, 504],
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False,
        )
        self.session.mount("https://", HTTPAdapter(max_retries=retry_strategy))
        self.session.mount("http://", HTTPAdapter(max_retries=retry_strategy))

        self.session.headers.update({
            "x-api-key": api_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "KB-Facade/1.0",
        })

    # Transport

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                 json: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.api_base}{path}"
        logger.debug(f"KB API {method} {url} params={params}")

        try:
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"KB API unreachable for {method} {path}: {str(e)}")
            raise UpstreamError(f"KB API unavailable: {str(e)}")

        logger.info(f"KB API {method} {path} -> {response.status_code}")

        if response.status_code == 404:
            raise UpstreamNotFoundError(messages=self._error_messages(response))
        if response.status_code >= 400:
            messages = self._error_messages(response)
            logger.error(f"KB API error {response.status_code} for {method} {path}: {messages}")
            raise UpstreamError(
                f"KB API error: {response.status_code}",
                status_code=response.status_code,
                messages=messages,
            )

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            raise UpstreamError("KB API returned a non-JSON response", status_code=response.status_code)

    @staticmethod
    def _error_messages(response: requests.Response) -> List[str]:
        try:
            body = response.json()
        except ValueError:
            return [response.text] if response.text else []
        if not isinstance(body, dict):
            return []
        errors = body.get("Errors") or body.get("errors") or []
        return [e.get("Message") or e.get("message") for e in errors
                if isinstance(e, dict) and (e.get("Message") or e.get("message"))]

    def _search_params(self, kind: str, query: Optional[str], page: int, sort: str) -> Dict[str, Any]:
        return {
            "search": query or "",
            "offset": page,
            "count": config.PAGE_SIZE,
            "orderby": SORT_FIELDS[kind].get(sort, "relevance"),
        }

    @staticmethod
    def _package_filters(params: Dict[str, Any], selected: Optional[str], content_type: Optional[str],
                         custom: Optional[str]) -> Dict[str, Any]:
        params["selection"] = SELECTION_FILTERS.get(selected, "all")
        params["contenttype"] = content_type or "all"
        if custom == "true":
            params["packagetype"] = "custom"
        return params

    # Account

    def get_custom_provider_id(self) -> str:
        """The customer's own provider, which holds its custom packages."""
        root = self._request("GET", "/")
        return str(root.get("vendorId"))

    def verify_credentials(self) -> bool:
        try:
            self._request("GET", "/")
        except UpstreamError as e:
            if e.status_code in (401, 403, 404):
                return False
            raise
        return True

    # Providers

    def search_providers(self, query: Optional[str], page: int = 1, sort: str = "relevance") -> Dict[str, Any]:
        return self._request("GET", "/vendors", params=self._search_params("vendors", query, page, sort))

    def get_provider(self, provider_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/vendors/{provider_id}")

    def update_provider(self, provider_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/vendors/{provider_id}", json=payload)

    # Packages

    def search_packages(self, query: Optional[str], page: int = 1, sort: str = "relevance",
                        selected: Optional[str] = None, content_type: Optional[str] = None,
                        custom: Optional[str] = None) -> Dict[str, Any]:
        params = self._package_filters(self._search_params("packages", query, page, sort),
                                       selected, content_type, custom)
        return self._request("GET", "/packages", params=params)

    def search_provider_packages(self, provider_id: str, query: Optional[str], page: int = 1,
                                 sort: str = "relevance", selected: Optional[str] = None,
                                 content_type: Optional[str] = None, custom: Optional[str] = None) -> Dict[str, Any]:
        params = self._package_filters(self._search_params("packages", query, page, sort),
                                       selected, content_type, custom)
        return self._request("GET", f"/vendors/{provider_id}/packages", params=params)

    def get_package(self, vendor_id: str, package_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/vendors/{vendor_id}/packages/{package_id}")

    def update_package(self, vendor_id: str, package_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/vendors/{vendor_id}/packages/{package_id}", json=payload)

    # Resources

    def list_package_resources(self, vendor_id: str, package_id: str, query: Optional[str] = None,
                               page: int = 1, sort: str = "name", count: Optional[int] = None) -> Dict[str, Any]:
        params = self._search_params("titles", query, page, sort)
        params["searchfield"] = "titlename"
        if count:
            params["count"] = count
        return self._request("GET", f"/vendors/{vendor_id}/packages/{package_id}/titles", params=params)

    def get_resource(self, vendor_id: str, package_id: str, title_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/vendors/{vendor_id}/packages/{package_id}/titles/{title_id}")

    def create_resource(self, vendor_id: str, package_id: str, payload: Dict[str, Any]) -> str:
        """Add a custom title to a custom package, returning the new title id."""
        result = self._request("POST", f"/vendors/{vendor_id}/packages/{package_id}/titles", json=payload)
        return str(result.get("titleId"))

    def update_resource(self, vendor_id: str, package_id: str, title_id: str,
                        payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/vendors/{vendor_id}/packages/{package_id}/titles/{title_id}", json=payload)

    def delete_resource(self, vendor_id: str, package_id: str, title_id: str) -> None:
        # custom titles are removed by deselecting them
        self._request("PUT", f"/vendors/{vendor_id}/packages/{package_id}/titles/{title_id}",
                      json={"isSelected": False})

    # Titles

    def search_titles(self, query: Optional[str], page: int = 1, sort: str = "relevance") -> Dict[str, Any]:
        params = self._search_params("titles", query, page, sort)
        params["searchfield"] = "titlename"
        return self._request("GET", "/titles", params=params)

    def get_title(self, title_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/titles/{title_id}")
