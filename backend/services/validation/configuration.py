"""Configuration write rules and the JSON:API content type contract"""

from typing import Any, Dict, List, Optional

from services.validation.base import Failure, field_failure, is_blank

JSONAPI_CONTENT_TYPE = "application/vnd.api+json"

INVALID_CREDENTIALS = "Invalid KB API credentials"


def content_type_is_valid(header: Optional[str]) -> bool:
    """Mutating requests must declare exactly ``application/vnd.api+json``."""
    if header is None:
        return False
    return header.strip() == JSONAPI_CONTENT_TYPE


def validate_configuration_write(attributes: Dict[str, Any]) -> List[Failure]:
    failures = []
    if is_blank(attributes.get("customerId")):
        failures.append(field_failure("customerId", "can't be blank"))
    if is_blank(attributes.get("apiKey")):
        failures.append(field_failure("apiKey", "can't be blank"))

    base_url = attributes.get("rmapiBaseUrl")
    if not is_blank(base_url):
        if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
            failures.append(field_failure("rmapiBaseUrl", "must be an http(s) URL"))
    return failures


def resolve_base_url(attributes: Dict[str, Any], stored: Optional[Dict[str, Any]], default: str) -> str:
    """An omitted base URL keeps the stored one, or the service default on first write."""
    base_url = attributes.get("rmapiBaseUrl")
    if not is_blank(base_url):
        return base_url.rstrip("/")
    if stored and stored.get("base_url"):
        return stored["base_url"]
    return default
