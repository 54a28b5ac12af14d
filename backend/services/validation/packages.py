"""Package update rules"""

from typing import Any, Dict, List, Optional

from services.validation.base import (
    Failure,
    FailureKind,
    coverage_failures,
    dig,
    effective_selection,
    field_failure,
    is_absent,
    selection_failures,
)

# Customizations that only make sense on a selected package
DESELECTED_FORBIDDEN = (
    "visibilityData.isHidden",
    "customCoverage.beginCoverage",
    "customCoverage.endCoverage",
)


def validate_package_update(incoming: Dict[str, Any], current: Optional[Dict[str, Any]] = None) -> List[Failure]:
    """
    Validate a package update intent against the current public package.

    Deselected packages cannot be customized: when ``isSelected`` resolves to
    false, hiding and custom coverage must be absent from the payload. Only
    the incoming payload is inspected; customizations already stored on the
    package are left to the upstream service.
    """
    failures: List[Failure] = selection_failures(incoming)

    if "contentType" in incoming and not isinstance(incoming["contentType"], str):
        failures.append(field_failure("contentType", "must be a content type name"))
    if isinstance(incoming.get("customCoverage"), dict):
        failures.extend(coverage_failures(incoming["customCoverage"], "customCoverage"))

    if not effective_selection(incoming, current):
        for path in DESELECTED_FORBIDDEN:
            if not is_absent(dig(incoming, path)):
                failures.append(field_failure(path, "must be blank when the package is not selected",
                                              kind=FailureKind.RULE))
    return failures
