"""
Configuration service for tenant KB API credentials
"""

import logging
from typing import Callable

from config import config
from data.configuration_store import ConfigurationStore
from integrations.kb_api import KBApiClient
from schemas.jsonapi import resource_object, single_document
from services import attribute_mapper as mapper
from services.outcomes import Outcome
from services.validation.base import Failure
from services.validation.configuration import (
    INVALID_CREDENTIALS,
    resolve_base_url,
    validate_configuration_write,
)

logger = logging.getLogger(__name__)

CONFIGURATIONS = "configurations"
CONFIGURATION_ID = "configuration"


class ConfigurationService:
    """Reads and writes the stored KB API credentials of a tenant"""

    def __init__(self, store: ConfigurationStore, client_factory: Callable[..., KBApiClient] = KBApiClient):
        self.store = store
        self.client_factory = client_factory

    def _document(self, record):
        return single_document(resource_object(CONFIGURATIONS, CONFIGURATION_ID, mapper.configuration_to_public(record)))

    def read(self, tenant: str) -> Outcome:
        record = self.store.get(tenant)
        if record is None:
            return Outcome.not_found("Configuration not found")
        return Outcome.ok(self._document(record))

    def write(self, tenant: str, attributes) -> Outcome:
        """
        Validate, verify against the upstream and persist new credentials.

        A write without ``rmapiBaseUrl`` keeps the URL already stored for the
        tenant, or the service default on first write. The api key is only
        ever returned masked.
        """
        failures = validate_configuration_write(attributes)
        if failures:
            return Outcome.from_failures(failures)

        stored = self.store.get(tenant)
        base_url = resolve_base_url(attributes, stored, config.KB_API_DEFAULT_BASE_URL)
        customer_id = str(attributes["customerId"]).strip()
        api_key = str(attributes["apiKey"]).strip()

        client = self.client_factory(customer_id, api_key, base_url)
        if not client.verify_credentials():
            logger.warning(f"Rejected KB configuration for tenant {tenant}: credentials refused by {base_url}")
            return Outcome.from_failures([Failure(title=INVALID_CREDENTIALS)])

        record = self.store.put(tenant, customer_id, api_key, base_url)
        return Outcome.ok(self._document(record))
