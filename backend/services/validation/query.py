"""Search query parameters: sort and the filter variant"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Union

from services.enumerations import CONTENT_TYPE_FILTERS
from services.validation.base import Failure, FailureKind

SORT_VALUES = ("name", "relevance")
SELECTED_VALUES = ("true", "false", "ebsco")
CUSTOM_VALUES = ("true",)


@dataclass(frozen=True)
class ScalarFilter:
    """A bare ``filter=value`` parameter"""
    value: str


@dataclass(frozen=True)
class StructuredFilter:
    """``filter[selected]``, ``filter[type]`` and ``filter[custom]`` parameters"""
    selected: Optional[str] = None
    type: Optional[str] = None
    custom: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.selected is None and self.type is None and self.custom is None


Filter = Union[ScalarFilter, StructuredFilter]


def parse_filter(params: Mapping[str, str]) -> Filter:
    """Decide once, at the API boundary, which filter shape the client sent."""
    if "filter" in params:
        return ScalarFilter(params["filter"])
    return StructuredFilter(
        selected=params.get("filter[selected]"),
        type=params.get("filter[type]"),
        custom=params.get("filter[custom]"),
    )


def _query_failure(title: str, detail: str) -> Failure:
    return Failure(title=title, detail=detail, kind=FailureKind.QUERY)


def validate_sort(sort: Optional[str]) -> List[Failure]:
    if sort is not None and sort not in SORT_VALUES:
        return [_query_failure("Invalid sortFilter", "Invalid Query Parameter for sort")]
    return []


def validate_filter(search_filter: Filter) -> List[Failure]:
    if isinstance(search_filter, ScalarFilter):
        return [_query_failure("Invalid filter parameter", f"Unsupported filter value {search_filter.value!r}")]

    failures = []
    if search_filter.selected is not None and search_filter.selected not in SELECTED_VALUES:
        failures.append(_query_failure("Invalid selectedFilter", "Invalid Query Parameter for filter[selected]"))
    if search_filter.type is not None and search_filter.type not in CONTENT_TYPE_FILTERS:
        failures.append(_query_failure("Invalid contentTypeFilter", "Invalid Query Parameter for filter[type]"))
    if search_filter.custom is not None and search_filter.custom not in CUSTOM_VALUES:
        failures.append(_query_failure("Invalid customFilter", "Invalid Query Parameter for filter[custom]"))
    return failures


def validate_search(sort: Optional[str], search_filter: Optional[Filter] = None) -> List[Failure]:
    failures = validate_sort(sort)
    if search_filter is not None:
        failures.extend(validate_filter(search_filter))
    return failures


def effective_sort(sort: Optional[str], query: Optional[str]) -> str:
    """Relevance when searching, name otherwise."""
    if sort:
        return sort
    return "relevance" if query else "name"
