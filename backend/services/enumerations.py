"""
Enumeration tables translating upstream KB API codes to public labels.

Tables are built once at import time and exposed through ``to_label`` and
``to_code``. Each table declares what an unknown code maps to.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Hashable, Iterable, Mapping, Optional, Tuple

UNKNOWN = "Unknown"


class Fallback(str, Enum):
    """What a lookup returns for a code or label the table does not know"""
    UNKNOWN = "unknown"            # the literal "Unknown" label/code
    PASS_THROUGH = "pass_through"  # the raw value, unchanged
    EMPTY = "empty"                # the empty string


class EnumerationTable:
    """Closed, ordered code <-> label mapping"""

    def __init__(self, name: str, entries: Iterable[Tuple[Hashable, str]], fallback: Fallback,
                 case_insensitive: bool = False, reversible: bool = True):
        self.name = name
        self.entries: Tuple[Tuple[Hashable, str], ...] = tuple(entries)
        self.fallback = fallback
        self.case_insensitive = case_insensitive
        self.reversible = reversible

        self._labels: Mapping[Hashable, str] = MappingProxyType(
            {self._key(code): label for code, label in self.entries}
        )
        self._codes: Mapping[str, Hashable] = MappingProxyType(
            {label: code for code, label in self.entries}
        )

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"EnumerationTable({self.name!r}, {len(self)} entries)"

    @property
    def codes(self) -> Tuple[Hashable, ...]:
        return tuple(code for code, _ in self.entries)

    def _key(self, code: Any) -> Any:
        if self.case_insensitive and isinstance(code, str):
            return code.lower()
        return code

    def _fallback_for(self, raw: Any) -> Any:
        if self.fallback is Fallback.UNKNOWN:
            return UNKNOWN
        if self.fallback is Fallback.EMPTY:
            return ""
        return raw

    def label_for(self, code: Any) -> Any:
        try:
            return self._labels[self._key(code)]
        except (KeyError, TypeError):
            return self._fallback_for(code)

    def code_for(self, label: Any) -> Any:
        if not self.reversible:
            raise ValueError(f"{self.name} table is read-only and has no label to code mapping")
        if self.has_label(label):
            return self._codes[label]
        return self._fallback_for(label)

    def has_code(self, code: Any) -> bool:
        try:
            return self._key(code) in self._labels
        except TypeError:
            return False

    def has_label(self, label: Any) -> bool:
        try:
            return label in self._codes
        except TypeError:
            return False

    def resolve(self, value: Any) -> Optional[Hashable]:
        """Return the upstream code for a label or code, or None if neither is known."""
        if self.has_label(value):
            return self._codes[value]
        if self.has_code(value):
            return next(code for code in self.codes if self._key(code) == self._key(value))
        return None


CONTENT_TYPES = EnumerationTable(
    "content type",
    [
        ("AggregatedFullText", "Aggregated Full Text"),
        ("AbstractAndIndex", "Abstract and Index"),
        ("EBook", "E-Book"),
        ("EJournal", "E-Journal"),
        ("Print", "Print"),
        ("Unknown", "Unknown"),
        ("OnlineReference", "Online Reference"),
    ],
    fallback=Fallback.UNKNOWN,
    case_insensitive=True,
)

PUBLICATION_TYPES = EnumerationTable(
    "publication type",
    [
        ("All", "All"),
        ("Audiobook", "Audiobook"),
        ("Book", "Book"),
        ("BookSeries", "Book Series"),
        ("Database", "Database"),
        ("Journal", "Journal"),
        ("Newsletter", "Newsletter"),
        ("Newspaper", "Newspaper"),
        ("Proceedings", "Proceedings"),
        ("Report", "Report"),
        ("StreamingAudio", "Streaming Audio"),
        ("StreamingVideo", "Streaming Video"),
        ("ThesisDissertation", "Thesis & Dissertation"),
        ("Website", "Website"),
        ("Unspecified", "Unspecified"),
    ],
    fallback=Fallback.PASS_THROUGH,
    case_insensitive=True,
)

IDENTIFIER_TYPES = EnumerationTable(
    "identifier type",
    enumerate(["ISSN", "ISBN", "TSDID", "SPID", "EjsJournalID", "NewsbankID", "ZDBID", "EPBookID", "Mid", "BHM"]),
    fallback=Fallback.EMPTY,
    reversible=False,
)

IDENTIFIER_SUBTYPES = EnumerationTable(
    "identifier subtype",
    enumerate(["Empty", "Print", "Online", "Preceding", "Succeeding", "Regional", "Linking", "Invalid"]),
    fallback=Fallback.EMPTY,
    reversible=False,
)

# Lower-cased content type codes accepted by filter[type]
CONTENT_TYPE_FILTERS = tuple(code.lower() for code in CONTENT_TYPES.codes)


def to_label(table: EnumerationTable, code: Any) -> Any:
    """Map an upstream code to its public label, applying the table's fallback."""
    return table.label_for(code)


def to_code(table: EnumerationTable, label: Any) -> Any:
    """Map a public label back to the upstream code it was derived from."""
    return table.code_for(label)
