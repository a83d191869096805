"""Escaping of character data for well-formed markup output.

Every character is classified exactly once: the eight reserved or whitespace
characters become entity references, characters outside the XML 1.0
``Char`` production become U+FFFD, and everything else passes through.
"""

import re
from typing import Dict

REPLACEMENT_CHARACTER = "\ufffd"

ESCAPES: Dict[str, str] = {
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    "\r": "&#xD;",
}

# Reserved characters plus everything outside
# #x9 | #xA | #xD | [#x20-#xD7FF] | [#xE000-#xFFFD] | [#x10000-#x10FFFF]
_NEEDS_ESCAPE = re.compile(
    "[\"'&<>\t\n\r\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


def is_in_character_range(code_point: int) -> bool:
    """Check whether a code point is a legal XML 1.0 character."""
    return (
        code_point in (0x09, 0x0A, 0x0D)
        or 0x20 <= code_point <= 0xD7FF
        or 0xE000 <= code_point <= 0xFFFD
        or 0x10000 <= code_point <= 0x10FFFF
    )


def _replace(match: "re.Match[str]") -> str:
    return ESCAPES.get(match.group(), REPLACEMENT_CHARACTER)


def escape(text: str) -> str:
    """Escape text so that re-parsing the markup yields the original characters.

    Args:
        text: Raw character data (already decoded)

    Returns:
        Markup-safe text. Illegal code points are replaced with U+FFFD.
    """
    if not _NEEDS_ESCAPE.search(text):
        return text
    return _NEEDS_ESCAPE.sub(_replace, text)
