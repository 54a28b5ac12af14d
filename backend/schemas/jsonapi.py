"""JSON:API request and response documents"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from utils.errors import InvalidDocumentError

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


class ResourceData(BaseModel):
    type: Optional[str] = None
    id: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)


class RequestDocument(BaseModel):
    data: ResourceData


def parse_request_document(body: bytes) -> RequestDocument:
    """Parse a raw request body; anything that is not a JSON:API document is rejected."""
    try:
        payload = json.loads(body or b"null")
    except ValueError:
        raise InvalidDocumentError("Request body is not valid JSON")

    try:
        return RequestDocument.model_validate(payload)
    except ValidationError as e:
        raise InvalidDocumentError(f"Request body is not a JSON:API document: {e.error_count()} error(s)")


def resource_object(resource_type: str, resource_id: Any, attributes: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": str(resource_id), "type": resource_type, "attributes": attributes}


def single_document(data: Dict[str, Any]) -> Dict[str, Any]:
    return {"data": data, "jsonapi": {"version": "1.0"}}


def collection_document(data: List[Dict[str, Any]], total: int) -> Dict[str, Any]:
    return {"data": data, "meta": {"totalResults": total}, "jsonapi": {"version": "1.0"}}


def error_document(errors: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"errors": errors, "jsonapi": {"version": "1.0"}}
