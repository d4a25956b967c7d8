"""Metadata detection, dialect parsing and trait extraction."""

from .detector import Detection, Dialect, detect_dialect, detect_standard
from .parser import parse_metadata
from .schema import BRIDGED_COLLECTION_LABEL, MetadataKind, MetadataOptions, UnifiedMetadata
from .traits import extract_traits, stringify_value

__all__ = [
    "BRIDGED_COLLECTION_LABEL",
    "Detection",
    "Dialect",
    "MetadataKind",
    "MetadataOptions",
    "UnifiedMetadata",
    "detect_dialect",
    "detect_standard",
    "extract_traits",
    "parse_metadata",
    "stringify_value",
]
