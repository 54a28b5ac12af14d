"""Common error classes raised across the KB facade"""

from typing import Any, Dict, List, Optional


class MalformedIdentifierError(ValueError):
    """Path id does not decode to a valid provider, package or resource reference"""
    def __init__(self, identifier: str, detail: str = "Identifier is malformed"):
        self.identifier = identifier
        self.detail = detail
        super().__init__(f"{detail}: {identifier!r}")


class HeaderContractError(Exception):
    """A required request header is missing or has the wrong value"""
    message = "Missing/Invalid header Content-Type"

    def __init__(self, header: str = "Content-Type"):
        self.header = header
        super().__init__(self.message)


class InvalidDocumentError(ValueError):
    """Request body is not a usable JSON:API document"""
    def __init__(self, detail: str = "Invalid JSON:API request body"):
        self.detail = detail
        super().__init__(detail)


class KBNotConfiguredError(Exception):
    """Tenant has no stored KB API credentials"""
    def __init__(self, tenant: str):
        self.tenant = tenant
        super().__init__(f"KB API credentials are not configured for tenant {tenant}")


class UpstreamError(Exception):
    """The upstream KB API errored or was unreachable"""
    def __init__(self, detail: str = "KB API error", status_code: Optional[int] = None,
                 messages: Optional[List[str]] = None):
        self.detail = detail
        self.status_code = status_code
        self.messages = messages or []
        super().__init__(detail)

    @property
    def unreachable(self) -> bool:
        return self.status_code is None

    def to_errors(self) -> List[Dict[str, Any]]:
        titles = self.messages or [self.detail]
        return [{"title": title} for title in titles]


class UpstreamNotFoundError(UpstreamError):
    """The requested record does not exist upstream"""
    def __init__(self, detail: str = "Record not found", messages: Optional[List[str]] = None):
        super().__init__(detail, status_code=404, messages=messages)
