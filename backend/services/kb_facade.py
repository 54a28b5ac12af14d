"""
KB facade: the write pipeline and read projections over the upstream KB API.

Every write follows the same steps: decode the path id, fetch the current
upstream state when the rules need it, validate the incoming attributes
against it, and only then call the upstream. Validation and business rule
failures come back as an ``Outcome``; malformed ids raise
``MalformedIdentifierError`` and upstream failures raise ``UpstreamError``
unchanged. Nothing here retries or caches.
"""

import logging
from typing import Any, Dict, List, Optional

from config import config
from integrations.kb_api import KBApiClient
from schemas.jsonapi import collection_document, resource_object, single_document
from services import attribute_mapper as mapper
from services import identifiers
from services.identifiers import ResourceIdentifier
from services.outcomes import Outcome
from services.validation.base import Failure, is_blank
from services.validation.packages import validate_package_update
from services.validation.providers import validate_provider_update
from services.validation.query import Filter, effective_sort, validate_search
from services.validation.resources import (
    validate_resource_create,
    validate_resource_destroy,
    validate_resource_update,
)
from utils.errors import MalformedIdentifierError, UpstreamNotFoundError

logger = logging.getLogger(__name__)

PROVIDERS = "providers"
PACKAGES = "packages"
RESOURCES = "resources"
TITLES = "titles"


class KBFacade:
    """Request scoped facade bound to one tenant's KB API client"""

    def __init__(self, client: KBApiClient):
        self.client = client

    def _rejected(self, operation: str, identifier: Any, failures: List[Failure]) -> Outcome:
        outcome = Outcome.from_failures(failures)
        logger.info(
            f"[KB] {operation} {identifier} rejected ({outcome.status.value}): "
            f"{', '.join(failure.title for failure in outcome.failures)}"
        )
        return outcome

    # Documents

    @staticmethod
    def _provider_object(vendor: Dict[str, Any], detail: bool = True) -> Dict[str, Any]:
        return resource_object(PROVIDERS, mapper.provider_id(vendor), mapper.provider_to_public(vendor, detail))

    @staticmethod
    def _package_object(package: Dict[str, Any]) -> Dict[str, Any]:
        return resource_object(PACKAGES, mapper.package_id(package), mapper.package_to_public(package))

    @staticmethod
    def _resource_object(title: Dict[str, Any], ref: ResourceIdentifier) -> Dict[str, Any]:
        return resource_object(
            RESOURCES,
            mapper.resource_id(title, ref.vendor_id, ref.package_id),
            mapper.resource_to_public(title, ref.vendor_id, ref.package_id),
        )

    @staticmethod
    def _title_object(title: Dict[str, Any]) -> Dict[str, Any]:
        return resource_object(TITLES, mapper.title_id(title), mapper.title_to_public(title))

    # Providers

    def search_providers(self, query: Optional[str], page: int = 1, sort: Optional[str] = None) -> Outcome:
        failures = validate_search(sort)
        if failures:
            return self._rejected("search providers", query, failures)

        result = self.client.search_providers(query, page=page, sort=effective_sort(sort, query))
        vendors = result.get("vendors") or []
        return Outcome.ok(collection_document(
            [self._provider_object(vendor, detail=False) for vendor in vendors],
            result.get("totalResults", len(vendors)),
        ))

    def get_provider(self, provider_id: str) -> Outcome:
        provider_id = identifiers.decode_single(provider_id)
        try:
            vendor = self.client.get_provider(provider_id)
        except UpstreamNotFoundError:
            return Outcome.not_found("Provider not found")
        return Outcome.ok(single_document(self._provider_object(vendor)))

    def update_provider(self, provider_id: str, attributes: Dict[str, Any]) -> Outcome:
        provider_id = identifiers.decode_single(provider_id)
        try:
            current = self.client.get_provider(provider_id)
        except UpstreamNotFoundError:
            return Outcome.not_found("Provider not found")

        intent = mapper.provider_intent(attributes)
        failures = validate_provider_update(intent, mapper.provider_to_public(current))
        if failures:
            return self._rejected("update provider", provider_id, failures)

        self.client.update_provider(provider_id, mapper.provider_to_upstream(intent, current))
        logger.info(f"[KB] Updated provider {provider_id}: {sorted(intent)}")
        return Outcome.ok(single_document(self._provider_object(self.client.get_provider(provider_id))))

    # Packages

    def search_packages(self, query: Optional[str], page: int = 1, sort: Optional[str] = None,
                        search_filter: Optional[Filter] = None, provider_id: Optional[str] = None) -> Outcome:
        failures = validate_search(sort, search_filter)
        if failures:
            return self._rejected("search packages", query, failures)

        filters = {}
        if search_filter is not None:
            filters = {
                "selected": search_filter.selected,
                "content_type": search_filter.type,
                "custom": search_filter.custom,
            }
        sort = effective_sort(sort, query)

        if provider_id is not None:
            provider_id = identifiers.decode_single(provider_id)
            try:
                result = self.client.search_provider_packages(provider_id, query, page=page, sort=sort, **filters)
            except UpstreamNotFoundError:
                return Outcome.not_found("Provider not found")
        else:
            result = self.client.search_packages(query, page=page, sort=sort, **filters)

        packages = result.get("packagesList") or []
        return Outcome.ok(collection_document(
            [self._package_object(package) for package in packages],
            result.get("totalResults", len(packages)),
        ))

    def get_package(self, package_id: str) -> Outcome:
        ref = identifiers.decode_package(package_id)
        try:
            package = self.client.get_package(ref.vendor_id, ref.package_id)
        except UpstreamNotFoundError:
            return Outcome.not_found("Package not found")
        return Outcome.ok(single_document(self._package_object(package)))

    def update_package(self, package_id: str, attributes: Dict[str, Any]) -> Outcome:
        ref = identifiers.decode_package(package_id)
        try:
            current = self.client.get_package(ref.vendor_id, ref.package_id)
        except UpstreamNotFoundError:
            return Outcome.not_found("Package not found")

        intent = mapper.package_intent(attributes)
        failures = validate_package_update(intent, mapper.package_to_public(current))
        if failures:
            return self._rejected("update package", ref, failures)

        self.client.update_package(ref.vendor_id, ref.package_id, mapper.package_to_upstream(intent, current))
        logger.info(f"[KB] Updated package {ref}: {sorted(intent)}")
        return Outcome.no_content()

    def list_package_resources(self, package_id: str, page: int = 1) -> Outcome:
        ref = identifiers.decode_package(package_id)
        try:
            result = self.client.list_package_resources(ref.vendor_id, ref.package_id, page=page)
        except UpstreamNotFoundError:
            return Outcome.not_found("Package not found")

        titles = result.get("titles") or []
        return Outcome.ok(collection_document(
            [self._resource_object(title, ref) for title in titles],
            result.get("totalResults", len(titles)),
        ))

    # Titles

    def search_titles(self, query: Optional[str], page: int = 1, sort: Optional[str] = None) -> Outcome:
        failures = validate_search(sort)
        if failures:
            return self._rejected("search titles", query, failures)

        result = self.client.search_titles(query, page=page, sort=effective_sort(sort, query))
        titles = result.get("titles") or []
        return Outcome.ok(collection_document(
            [self._title_object(title) for title in titles],
            result.get("totalResults", len(titles)),
        ))

    def get_title(self, title_id: str) -> Outcome:
        title_id = identifiers.decode_single(title_id)
        try:
            title = self.client.get_title(title_id)
        except UpstreamNotFoundError:
            return Outcome.not_found("Title not found")
        return Outcome.ok(single_document(self._title_object(title)))

    # Resources

    def _fetch_resource(self, ref: ResourceIdentifier) -> Optional[Dict[str, Any]]:
        """Current title, or None when it is not part of the package upstream."""
        try:
            title = self.client.get_resource(ref.vendor_id, ref.package_id, ref.title_id)
        except UpstreamNotFoundError:
            return None
        if mapper.find_customer_resource(title, ref.vendor_id, ref.package_id) is None:
            return None
        return title

    def get_resource(self, resource_id: str) -> Outcome:
        ref = identifiers.decode_resource(resource_id)
        title = self._fetch_resource(ref)
        if title is None:
            return Outcome.not_found("Resource not found")
        return Outcome.ok(single_document(self._resource_object(title, ref)))

    def _resolve_package(self, value: Any) -> Optional[ResourceIdentifier]:
        """``packageId`` is either ``vendor-package`` or a package of the customer's custom provider."""
        value = str(value)
        try:
            if identifiers.SEPARATOR in value:
                return identifiers.decode_package(value)
            return ResourceIdentifier(self.client.get_custom_provider_id(), identifiers.decode_single(value))
        except MalformedIdentifierError:
            return None

    def create_resource(self, attributes: Dict[str, Any]) -> Outcome:
        intent = mapper.resource_intent(attributes)

        ref = None
        package = None
        existing_names: List[str] = []
        if not is_blank(intent.get("package_id")):
            ref = self._resolve_package(intent["package_id"])
            if ref is not None:
                try:
                    package = mapper.package_to_public(self.client.get_package(ref.vendor_id, ref.package_id))
                except UpstreamNotFoundError:
                    package = None

            title_name = intent.get("titleName")
            if package is not None and package["isCustom"] and isinstance(title_name, str) and title_name.strip():
                result = self.client.list_package_resources(
                    ref.vendor_id, ref.package_id, query=title_name, count=config.PAGE_SIZE
                )
                existing_names = [mapper.title_to_public(title)["name"] for title in result.get("titles") or []]

        failures = validate_resource_create(intent, package, existing_names)
        if failures:
            return self._rejected("create resource", intent.get("package_id"), failures)

        title_id = self.client.create_resource(ref.vendor_id, ref.package_id, mapper.resource_create_to_upstream(intent))
        created = ResourceIdentifier(ref.vendor_id, ref.package_id, title_id)
        logger.info(f"[KB] Created custom title {created}")

        title = self.client.get_resource(created.vendor_id, created.package_id, created.title_id)
        return Outcome.ok(single_document(self._resource_object(title, created)))

    def update_resource(self, resource_id: str, attributes: Dict[str, Any]) -> Outcome:
        ref = identifiers.decode_resource(resource_id)
        current = self._fetch_resource(ref)
        if current is None:
            return Outcome.not_found("Resource not found")

        intent = mapper.resource_intent(attributes)
        failures = validate_resource_update(intent, mapper.resource_to_public(current, ref.vendor_id, ref.package_id))
        if failures:
            return self._rejected("update resource", ref, failures)

        payload = mapper.resource_update_to_upstream(intent, current, ref.vendor_id, ref.package_id)
        self.client.update_resource(ref.vendor_id, ref.package_id, ref.title_id, payload)
        logger.info(f"[KB] Updated resource {ref}: {sorted(intent)}")

        title = self.client.get_resource(ref.vendor_id, ref.package_id, ref.title_id)
        return Outcome.ok(single_document(self._resource_object(title, ref)))

    def destroy_resource(self, resource_id: str) -> Outcome:
        ref = identifiers.decode_resource(resource_id)
        current = self._fetch_resource(ref)
        if current is None:
            return Outcome.not_found("Resource not found")

        failures = validate_resource_destroy(mapper.resource_to_public(current, ref.vendor_id, ref.package_id))
        if failures:
            return self._rejected("destroy resource", ref, failures)

        self.client.delete_resource(ref.vendor_id, ref.package_id, ref.title_id)
        logger.info(f"[KB] Deleted custom title {ref}")
        return Outcome.no_content()
