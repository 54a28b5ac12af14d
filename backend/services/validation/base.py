"""Shared pieces of the validation rule sets"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class FailureKind(str, Enum):
    FIELD = "field"            # malformed or missing value -> 422
    RULE = "business_rule"     # well formed but forbidden by policy -> 400
    QUERY = "query"            # bad query parameter -> 400


@dataclass(frozen=True)
class Failure:
    """One failed predicate: the field it concerns and a human readable title"""
    title: str
    field: Optional[str] = None
    detail: Optional[str] = None
    kind: FailureKind = FailureKind.FIELD

    def to_error(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"title": self.title}
        if self.detail:
            error["detail"] = self.detail
        if self.field:
            error["source"] = {"pointer": "/data/attributes/" + self.field.replace(".", "/")}
        return error


def field_failure(field: str, detail: str, kind: FailureKind = FailureKind.FIELD) -> Failure:
    """Failure titled after the last segment of the field path, e.g. ``Invalid isHidden``."""
    return Failure(title=f"Invalid {field.split('.')[-1]}", field=field, detail=detail, kind=kind)


def rule_violation(title: str, field: Optional[str] = None, detail: Optional[str] = None) -> Failure:
    return Failure(title=title, field=field, detail=detail, kind=FailureKind.RULE)


def field_failures(failures: List[Failure]) -> List[Failure]:
    return [f for f in failures if f.kind is FailureKind.FIELD]


def rule_violations(failures: List[Failure]) -> List[Failure]:
    return [f for f in failures if f.kind is not FailureKind.FIELD]


def is_absent(value: Any) -> bool:
    """None, False, blank strings and empty collections count as absent."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def dig(source: Optional[Dict[str, Any]], path: str) -> Any:
    """Follow a dotted path through nested dicts, None when any step is missing."""
    current: Any = source
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def has_path(source: Optional[Dict[str, Any]], path: str) -> bool:
    current: Any = source
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current:
            return False
        current = current[key]
    return True


def effective_selection(incoming: Dict[str, Any], current: Optional[Dict[str, Any]]) -> bool:
    """
    ``isSelected`` from the payload, falling back to the current state when
    omitted or null. Both the rules and the upstream payload builders read
    selection through here.
    """
    value = incoming.get("isSelected")
    if isinstance(value, bool):
        return value
    return bool((current or {}).get("isSelected", False))


def selection_failures(incoming: Dict[str, Any]) -> List[Failure]:
    value = incoming.get("isSelected")
    if value is not None and not isinstance(value, bool):
        return [field_failure("isSelected", "must be true or false")]
    return []


ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: Any) -> Optional[date]:
    if not isinstance(value, str) or not ISO_DATE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def coverage_failures(coverage: Dict[str, Any], prefix: str) -> List[Failure]:
    """Bounds must be ISO dates and begin must not be after end."""
    failures = []
    begin_raw, end_raw = coverage.get("beginCoverage"), coverage.get("endCoverage")
    begin = parse_iso_date(begin_raw)
    end = parse_iso_date(end_raw)

    if not is_blank(begin_raw) and begin is None:
        failures.append(field_failure(f"{prefix}.beginCoverage", "must be a date formatted YYYY-MM-DD"))
    if not is_blank(end_raw) and end is None:
        failures.append(field_failure(f"{prefix}.endCoverage", "must be a date formatted YYYY-MM-DD"))
    if begin and end and begin > end:
        failures.append(field_failure(f"{prefix}.beginCoverage", "must not be after endCoverage"))
    return failures
