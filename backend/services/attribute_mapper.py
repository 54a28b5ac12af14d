"""
Attribute mapping between the upstream KB API and the public JSON:API surface.

This is the only module that knows upstream field names (``vendorName``,
``customerResourcesList``, ``vendorToken`` ...). Everything else in the
service speaks the public, lower camel case vocabulary.

Reading goes through the ``*_to_public`` functions. Writing is two steps:
``*_intent`` whitelists and canonicalizes the incoming request attributes
(the shape the validation rules inspect), then ``*_to_upstream`` turns an
intent plus the current upstream record into the upstream write payload.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from services import identifiers
from services.enumerations import (
    CONTENT_TYPES,
    IDENTIFIER_SUBTYPES,
    IDENTIFIER_TYPES,
    PUBLICATION_TYPES,
    to_code,
    to_label,
)
from services.validation.base import effective_selection

logger = logging.getLogger(__name__)

MASKED_API_KEY = "*" * 40

# Upstream reason strings that are rewritten on the way out
VISIBILITY_REASONS = {
    "Hidden by EP": "Set by system",
}


# ---------------------------------------------------------------------------
# Nested structures
# ---------------------------------------------------------------------------

def visibility_to_public(visibility: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    visibility = visibility or {}
    reason = visibility.get("reason") or ""
    return {
        "isHidden": bool(visibility.get("isHidden", False)),
        "reason": VISIBILITY_REASONS.get(reason, reason),
    }


def coverage_to_public(coverage: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    coverage = coverage or {}
    return {
        "beginCoverage": coverage.get("beginCoverage") or None,
        "endCoverage": coverage.get("endCoverage") or None,
    }


def coverages_to_public(coverages: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [coverage_to_public(coverage) for coverage in (coverages or [])]


def embargo_to_public(embargo: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not embargo:
        return None
    return {
        "embargoUnit": embargo.get("embargoUnit"),
        "embargoValue": embargo.get("embargoValue", 0),
    }


def token_to_public(token: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    return {
        "factName": token.get("factName"),
        "prompt": token.get("prompt"),
        "helpText": token.get("helpText"),
        # an empty upstream value is a cleared token
        "value": token.get("value") or None,
    }


def proxy_to_public(proxy: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not proxy:
        return None
    return {
        "id": proxy.get("id"),
        "inherited": bool(proxy.get("inherited", False)),
    }


def identifiers_to_public(identifiers_list: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {
            "id": identifier.get("id"),
            "type": to_label(IDENTIFIER_TYPES, identifier.get("type")),
            "subtype": to_label(IDENTIFIER_SUBTYPES, identifier.get("subtype")),
        }
        for identifier in (identifiers_list or [])
    ]


def subjects_to_public(subjects_list: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [{"type": s.get("type"), "subject": s.get("subject")} for s in (subjects_list or [])]


def contributors_to_public(contributors_list: Optional[Iterable[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [{"type": c.get("type"), "contributor": c.get("contributor")} for c in (contributors_list or [])]


def publication_type_to_public(pub_type: Optional[str]) -> Optional[str]:
    if pub_type is None:
        return None
    return to_label(PUBLICATION_TYPES, pub_type)


def publication_type_to_upstream(value: Any) -> Any:
    """Accept either a public label or an upstream code; unknown values pass through."""
    resolved = PUBLICATION_TYPES.resolve(value)
    return resolved if resolved is not None else to_code(PUBLICATION_TYPES, value)


# ---------------------------------------------------------------------------
# Upstream -> public
# ---------------------------------------------------------------------------

def provider_to_public(vendor: Dict[str, Any], detail: bool = True) -> Dict[str, Any]:
    """Provider attributes; search results leave out token and proxy."""
    attributes = {
        "name": vendor.get("vendorName"),
        "packagesTotal": vendor.get("packagesTotal", 0),
        "packagesSelected": vendor.get("packagesSelected", 0),
        "supportsCustomPackages": bool(vendor.get("isCustomer", False)),
    }
    if detail:
        attributes["providerToken"] = token_to_public(vendor.get("vendorToken"))
        attributes["proxy"] = proxy_to_public(vendor.get("proxy"))
    return attributes


def provider_id(vendor: Dict[str, Any]) -> str:
    return str(vendor.get("vendorId"))


def package_to_public(package: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": package.get("packageName"),
        "packageId": package.get("packageId"),
        "vendorId": package.get("vendorId"),
        "vendorName": package.get("vendorName"),
        "providerId": package.get("vendorId"),
        "providerName": package.get("vendorName"),
        "contentType": to_label(CONTENT_TYPES, package.get("contentType")),
        "packageType": package.get("packageType"),
        "isCustom": bool(package.get("isCustom", False)),
        "isSelected": bool(package.get("isSelected", False)),
        "titleCount": package.get("titleCount", 0),
        "selectedCount": package.get("selectedCount", 0),
        "allowKbToAddTitles": package.get("allowEbscoToAddTitles"),
        "customCoverage": coverage_to_public(package.get("customCoverage")),
        "visibilityData": visibility_to_public(package.get("visibilityData")),
        "proxy": proxy_to_public(package.get("proxy")),
        "packageToken": token_to_public(package.get("packageToken")),
    }


def package_id(package: Dict[str, Any]) -> str:
    return identifiers.encode(package.get("vendorId"), package.get("packageId"))


def title_to_public(title: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": title.get("titleName"),
        "publisherName": title.get("publisherName"),
        "isTitleCustom": bool(title.get("isTitleCustom", False)),
        "publicationType": publication_type_to_public(title.get("pubType")),
        "subjects": subjects_to_public(title.get("subjectsList")),
        "identifiers": identifiers_to_public(title.get("identifiersList")),
        "contributors": contributors_to_public(title.get("contributorsList")),
        "edition": title.get("edition"),
        "description": title.get("description"),
        "isPeerReviewed": bool(title.get("isPeerReviewed", False)),
    }


def title_id(title: Dict[str, Any]) -> str:
    return str(title.get("titleId"))


def find_customer_resource(title: Dict[str, Any], vendor_id: Any, package_id_: Any) -> Optional[Dict[str, Any]]:
    """Pick the title's customer resource entry for one package."""
    for entry in title.get("customerResourcesList") or []:
        if str(entry.get("vendorId")) == str(vendor_id) and str(entry.get("packageId")) == str(package_id_):
            return entry
    return None


def resource_to_public(title: Dict[str, Any], vendor_id: Any, package_id_: Any) -> Dict[str, Any]:
    """Customer resource attributes: the title plus its customization within one package."""
    entry = find_customer_resource(title, vendor_id, package_id_) or {}
    attributes = title_to_public(title)
    attributes.update({
        "titleId": title.get("titleId"),
        "url": entry.get("url"),
        "vendorId": entry.get("vendorId", vendor_id),
        "vendorName": entry.get("vendorName"),
        "providerId": entry.get("vendorId", vendor_id),
        "providerName": entry.get("vendorName"),
        "packageId": identifiers.encode(vendor_id, package_id_),
        "packageName": entry.get("packageName"),
        "isPackageCustom": bool(entry.get("isPackageCustom", False)),
        "isSelected": bool(entry.get("isSelected", False)),
        "isTokenNeeded": bool(entry.get("isTokenNeeded", False)),
        "visibilityData": visibility_to_public(entry.get("visibilityData")),
        "managedCoverages": coverages_to_public(entry.get("managedCoverageList")),
        "customCoverages": coverages_to_public(entry.get("customCoverageList")),
        "managedEmbargoPeriod": embargo_to_public(entry.get("managedEmbargoPeriod")),
        "customEmbargoPeriod": embargo_to_public(entry.get("customEmbargoPeriod")),
        "coverageStatement": entry.get("coverageStatement"),
    })
    return attributes


def resource_id(title: Dict[str, Any], vendor_id: Any, package_id_: Any) -> str:
    return identifiers.encode(vendor_id, package_id_, title.get("titleId"))


def configuration_to_public(record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "customerId": record.get("customer_id"),
        "apiKey": MASKED_API_KEY if record.get("api_key") else None,
        "rmapiBaseUrl": record.get("base_url"),
    }


# ---------------------------------------------------------------------------
# Incoming request attributes -> write intents
# ---------------------------------------------------------------------------

PACKAGE_WRITE_ATTRIBUTES = (
    "isSelected", "allowKbToAddTitles", "contentType", "name",
)

RESOURCE_WRITE_ATTRIBUTES = (
    "isSelected", "coverageStatement", "isPeerReviewed", "publisherName",
    "edition", "description", "url",
)

# public name -> canonical intent name
RESOURCE_ALIASES = {
    "name": "titleName",
    "titleName": "titleName",
    "publicationType": "pubType",
    "pubType": "pubType",
    "packageId": "package_id",
    "package_id": "package_id",
    "customCoverages": "customCoverages",
    "customCoverageList": "customCoverages",
}


def _pick(source: Dict[str, Any], key: str, *fields: str) -> Optional[Dict[str, Any]]:
    nested = source.get(key)
    if not isinstance(nested, dict):
        return None
    return {field: nested[field] for field in fields if field in nested}


def package_intent(attributes: Dict[str, Any]) -> Dict[str, Any]:
    """Whitelist package update attributes. ``visibilityData.reason`` is read-only and dropped."""
    intent = {key: attributes[key] for key in PACKAGE_WRITE_ATTRIBUTES if key in attributes}

    visibility = _pick(attributes, "visibilityData", "isHidden")
    if visibility is not None:
        intent["visibilityData"] = visibility
    coverage = _pick(attributes, "customCoverage", "beginCoverage", "endCoverage")
    if coverage is not None:
        intent["customCoverage"] = coverage
    token = _pick(attributes, "packageToken", "value")
    if token is not None:
        intent["packageToken"] = token
    proxy = _pick(attributes, "proxy", "id")
    if proxy is not None:
        intent["proxy"] = proxy
    return intent


def resource_intent(attributes: Dict[str, Any]) -> Dict[str, Any]:
    """Whitelist and canonicalize resource create/update attributes."""
    intent = {key: attributes[key] for key in RESOURCE_WRITE_ATTRIBUTES if key in attributes}

    for public_name, canonical in RESOURCE_ALIASES.items():
        if public_name in attributes and canonical not in intent:
            intent[canonical] = attributes[public_name]

    # anything but a list is left as sent for the rules to reject
    if isinstance(intent.get("customCoverages"), list):
        intent["customCoverages"] = [
            {field: c[field] for field in ("beginCoverage", "endCoverage") if field in c}
            if isinstance(c, dict) else c
            for c in intent["customCoverages"]
        ]

    visibility = _pick(attributes, "visibilityData", "isHidden")
    if visibility is not None:
        intent["visibilityData"] = visibility
    embargo = _pick(attributes, "customEmbargoPeriod", "embargoUnit", "embargoValue")
    if embargo is not None:
        intent["customEmbargoPeriod"] = embargo
    return intent


def provider_intent(attributes: Dict[str, Any]) -> Dict[str, Any]:
    intent = {}
    token = _pick(attributes, "providerToken", "value")
    if token is not None:
        intent["providerToken"] = token
    proxy = _pick(attributes, "proxy", "id")
    if proxy is not None:
        intent["proxy"] = proxy
    return intent


# ---------------------------------------------------------------------------
# Write intents -> upstream payloads
# ---------------------------------------------------------------------------

def _coverage_to_upstream(coverage: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "beginCoverage": coverage.get("beginCoverage") or "",
        "endCoverage": coverage.get("endCoverage") or "",
    }


def package_to_upstream(intent: Dict[str, Any], current: Dict[str, Any]) -> Dict[str, Any]:
    """Full package PUT body: the current record overlaid with the intent."""
    is_selected = effective_selection(intent, current)
    payload: Dict[str, Any] = {
        "isSelected": is_selected,
        "allowEbscoToAddTitles": intent.get("allowKbToAddTitles", current.get("allowEbscoToAddTitles")),
    }

    if is_selected:
        visibility = intent.get("visibilityData", {})
        current_visibility = current.get("visibilityData") or {}
        payload["isHidden"] = bool(visibility.get("isHidden", current_visibility.get("isHidden", False)))

        coverage = dict(coverage_to_public(current.get("customCoverage")))
        coverage.update(intent.get("customCoverage", {}))
        payload["customCoverage"] = _coverage_to_upstream(coverage)

    if "packageToken" in intent:
        payload["packageToken"] = {"value": intent["packageToken"].get("value")}
    if "proxy" in intent:
        payload["proxy"] = {"id": intent["proxy"].get("id")}

    if current.get("isCustom"):
        payload["packageName"] = intent.get("name", current.get("packageName"))
        if "contentType" in intent:
            payload["contentType"] = to_code(CONTENT_TYPES, intent["contentType"])
        else:
            payload["contentType"] = current.get("contentType") or "Unknown"
    return payload


def provider_to_upstream(intent: Dict[str, Any], current: Dict[str, Any]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if "providerToken" in intent:
        payload["vendorToken"] = {"value": intent["providerToken"].get("value")}
    if "proxy" in intent:
        payload["proxy"] = {"id": intent["proxy"].get("id")}
    elif current.get("proxy") and not current["proxy"].get("inherited", True):
        payload["proxy"] = {"id": current["proxy"].get("id")}
    return payload


def _embargo_to_upstream(embargo: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    embargo = embargo or {}
    return {
        "embargoUnit": embargo.get("embargoUnit"),
        "embargoValue": embargo.get("embargoValue") or 0,
    }


def resource_create_to_upstream(intent: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "titleName": intent.get("titleName"),
        "pubType": publication_type_to_upstream(intent.get("pubType")),
        "isPeerReviewed": bool(intent.get("isPeerReviewed", False)),
        "publisherName": intent.get("publisherName"),
        "edition": intent.get("edition"),
        "description": intent.get("description"),
        "url": intent.get("url"),
        "contributorsList": [],
        "identifiersList": [],
    }


def resource_update_to_upstream(intent: Dict[str, Any], current: Dict[str, Any],
                                vendor_id: Any, package_id_: Any) -> Dict[str, Any]:
    """Full resource PUT body: the current title/resource overlaid with the intent."""
    entry = find_customer_resource(current, vendor_id, package_id_) or {}
    is_selected = effective_selection(intent, entry)
    payload: Dict[str, Any] = {"isSelected": is_selected}

    if is_selected:
        visibility = intent.get("visibilityData", {})
        current_visibility = entry.get("visibilityData") or {}
        payload["isHidden"] = bool(visibility.get("isHidden", current_visibility.get("isHidden", False)))

        if "customCoverages" in intent:
            payload["customCoverageList"] = [_coverage_to_upstream(c) for c in intent["customCoverages"] or []]
        else:
            payload["customCoverageList"] = [_coverage_to_upstream(c) for c in entry.get("customCoverageList") or []]

        payload["coverageStatement"] = intent.get("coverageStatement", entry.get("coverageStatement"))
        payload["customEmbargoPeriod"] = _embargo_to_upstream(
            intent.get("customEmbargoPeriod", entry.get("customEmbargoPeriod"))
        )

    if current.get("isTitleCustom"):
        payload.update({
            "titleName": intent.get("titleName", current.get("titleName")),
            "pubType": publication_type_to_upstream(intent.get("pubType", current.get("pubType"))),
            "isPeerReviewed": bool(intent.get("isPeerReviewed", current.get("isPeerReviewed", False))),
            "publisherName": intent.get("publisherName", current.get("publisherName")),
            "edition": intent.get("edition", current.get("edition")),
            "description": intent.get("description", current.get("description")),
            "url": intent.get("url", entry.get("url")),
            "contributorsList": current.get("contributorsList") or [],
            "identifiersList": current.get("identifiersList") or [],
        })
    return payload
