"""Customer resource create, update and destroy rules"""

from typing import Any, Dict, Iterable, List, Optional

from services.enumerations import PUBLICATION_TYPES
from services.validation.base import (
    Failure,
    FailureKind,
    coverage_failures,
    dig,
    effective_selection,
    field_failure,
    is_absent,
    is_blank,
    rule_violation,
    selection_failures,
)

TITLE_NAME_MAX_LENGTH = 400
EMBARGO_UNITS = ("Days", "Weeks", "Months", "Years")

MANAGED_PACKAGE = "Custom Title can not be added to the provided package"
DUPLICATE_TITLE = "Custom Title with the provided name already exists"
NOT_DELETABLE = "Resource cannot be deleted"


def _title_name_failures(value: Any) -> List[Failure]:
    if not isinstance(value, str) or is_blank(value):
        return [field_failure("titleName", "can't be blank")]
    if len(value) > TITLE_NAME_MAX_LENGTH:
        return [field_failure("titleName", f"is too long (maximum is {TITLE_NAME_MAX_LENGTH} characters)")]
    return []


def _pub_type_failures(value: Any) -> List[Failure]:
    if is_blank(value):
        return [field_failure("pubType", "can't be blank")]
    if PUBLICATION_TYPES.resolve(value) is None:
        return [field_failure("pubType", "is not included in the list")]
    return []


def _embargo_failures(embargo: Dict[str, Any]) -> List[Failure]:
    failures = []
    unit = embargo.get("embargoUnit")
    value = embargo.get("embargoValue")
    if not is_blank(unit) and unit not in EMBARGO_UNITS:
        failures.append(field_failure("customEmbargoPeriod.embargoUnit", "is not included in the list"))
    if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
        failures.append(field_failure("customEmbargoPeriod.embargoValue", "must be a non-negative integer"))
    return failures


def _has_embargo(embargo: Any) -> bool:
    if not isinstance(embargo, dict):
        return False
    return not is_blank(embargo.get("embargoUnit")) or embargo.get("embargoValue") not in (None, 0)


def _normalized(name: str) -> str:
    return " ".join(name.split()).lower()


def validate_resource_create(incoming: Dict[str, Any], package: Optional[Dict[str, Any]] = None,
                             existing_title_names: Iterable[str] = ()) -> List[Failure]:
    """
    Validate a custom title creation.

    ``package`` is the public projection of the package ``package_id`` points
    at, or None when it could not be found. ``existing_title_names`` are the
    names of titles already in that package.
    """
    failures: List[Failure] = []
    failures.extend(_title_name_failures(incoming.get("titleName")))
    failures.extend(_pub_type_failures(incoming.get("pubType")))

    if is_blank(incoming.get("package_id")):
        failures.append(field_failure("package_id", "can't be blank"))
    elif package is None:
        failures.append(field_failure("package_id", "does not reference an existing package"))

    if package is not None:
        if not package.get("isCustom"):
            failures.append(rule_violation(MANAGED_PACKAGE, field="package_id"))
        elif isinstance(incoming.get("titleName"), str):
            wanted = _normalized(incoming["titleName"])
            if any(_normalized(name) == wanted for name in existing_title_names if name):
                failures.append(rule_violation(DUPLICATE_TITLE, field="titleName"))
    return failures


def validate_resource_update(incoming: Dict[str, Any], current: Optional[Dict[str, Any]] = None) -> List[Failure]:
    """
    Validate a resource update intent against the current public resource.

    Mirrors the package rule: a deselected resource cannot carry coverage,
    embargo, hiding or a coverage statement in the same payload.
    """
    failures: List[Failure] = selection_failures(incoming)

    if "titleName" in incoming:
        failures.extend(_title_name_failures(incoming["titleName"]))
    if "pubType" in incoming:
        failures.extend(_pub_type_failures(incoming["pubType"]))

    coverages = incoming.get("customCoverages")
    if coverages is not None and not isinstance(coverages, list):
        failures.append(field_failure("customCoverages", "must be a list"))
    else:
        for index, coverage in enumerate(coverages or []):
            if not isinstance(coverage, dict):
                failures.append(field_failure(f"customCoverages.{index}", "must be an object"))
            else:
                failures.extend(coverage_failures(coverage, f"customCoverages.{index}"))
    if isinstance(incoming.get("customEmbargoPeriod"), dict):
        failures.extend(_embargo_failures(incoming["customEmbargoPeriod"]))

    if not effective_selection(incoming, current):
        detail = "must be blank when the resource is not selected"
        if incoming.get("customCoverages"):
            failures.append(field_failure("customCoverages", detail, kind=FailureKind.RULE))
        if _has_embargo(incoming.get("customEmbargoPeriod")):
            failures.append(field_failure("customEmbargoPeriod", detail, kind=FailureKind.RULE))
        if not is_absent(dig(incoming, "visibilityData.isHidden")):
            failures.append(field_failure("visibilityData.isHidden", detail, kind=FailureKind.RULE))
        if not is_absent(incoming.get("coverageStatement")):
            failures.append(field_failure("coverageStatement", detail, kind=FailureKind.RULE))
    return failures


def validate_resource_destroy(current: Dict[str, Any]) -> List[Failure]:
    """Only titles that live in a custom package can be deleted."""
    if current.get("isPackageCustom"):
        return []
    return [rule_violation(NOT_DELETABLE, detail="Titles can only be deleted from custom packages")]
