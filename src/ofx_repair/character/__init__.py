"""Character processing layer for OFX markup repair.

This module provides encoding detection for raw downloads and the escaping
routine that keeps repaired character data well-formed.
"""

from .encoding import (
    BOMDetector,
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
    OFXHeaderParser,
    UTF8Validator,
    XMLDeclarationParser,
    normalize_encoding,
    search_codec,
)
from .escape import REPLACEMENT_CHARACTER, escape, is_in_character_range

__all__ = [
    # Modules
    "encoding",
    # Encoding detection
    "BOMDetector",
    "DetectionMethod",
    "EncodingDetector",
    "EncodingResult",
    "OFXHeaderParser",
    "UTF8Validator",
    "XMLDeclarationParser",
    "normalize_encoding",
    "search_codec",
    # Escaping
    "REPLACEMENT_CHARACTER",
    "escape",
    "is_in_character_range",
]
