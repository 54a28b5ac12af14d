"""
Compound resource identifiers.

Packages are addressed as ``"{vendorId}-{packageId}"`` and customer resources
as ``"{vendorId}-{packageId}-{titleId}"``. Segments are opaque tokens; they are
numeric in practice but nothing here assumes so.
"""

from dataclasses import dataclass
from typing import Optional, Union

from utils.errors import MalformedIdentifierError

SEPARATOR = "-"

Segment = Union[str, int]


@dataclass(frozen=True)
class ResourceIdentifier:
    """Decoded package (two segments) or customer resource (three segments) id"""
    vendor_id: str
    package_id: str
    title_id: Optional[str] = None

    @property
    def is_package(self) -> bool:
        return self.title_id is None

    def __str__(self) -> str:
        return encode(self.vendor_id, self.package_id, self.title_id)


def decode(identifier: str) -> ResourceIdentifier:
    """Split a compound id into its vendor, package and optional title parts."""
    if not isinstance(identifier, str):
        raise MalformedIdentifierError(str(identifier), "Identifier must be a string")

    segments = identifier.split(SEPARATOR)
    if len(segments) not in (2, 3):
        raise MalformedIdentifierError(identifier, "Identifier must have 2 or 3 segments")
    if any(segment == "" for segment in segments):
        raise MalformedIdentifierError(identifier, "Identifier segments cannot be empty")

    return ResourceIdentifier(*segments)


def decode_package(identifier: str) -> ResourceIdentifier:
    parsed = decode(identifier)
    if not parsed.is_package:
        raise MalformedIdentifierError(identifier, "Package identifier must have 2 segments")
    return parsed


def decode_resource(identifier: str) -> ResourceIdentifier:
    parsed = decode(identifier)
    if parsed.is_package:
        raise MalformedIdentifierError(identifier, "Resource identifier must have 3 segments")
    return parsed


def decode_single(identifier: str) -> str:
    """Validate a single-segment id (providers, titles)."""
    if not identifier or SEPARATOR in identifier:
        raise MalformedIdentifierError(identifier, "Identifier must be a single non-empty segment")
    return identifier


def encode(vendor_id: Segment, package_id: Segment, title_id: Optional[Segment] = None) -> str:
    """Compose a compound id; the inverse of ``decode``."""
    parts = [vendor_id, package_id] if title_id is None else [vendor_id, package_id, title_id]
    segments = [str(part) for part in parts]

    for segment in segments:
        # a separator inside a segment would not survive decode
        if segment == "" or SEPARATOR in segment:
            raise MalformedIdentifierError(SEPARATOR.join(segments), f"Invalid identifier segment {segment!r}")

    return SEPARATOR.join(segments)
