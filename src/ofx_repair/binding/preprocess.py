"""One-off byte-level fix-ups for known vendor defects.

Applied to the raw download before the repair pass.
"""

import re
from typing import Tuple

# Some banks omit the <BANKACCTFROM> start tag right after the currency
FIXUPS: Tuple[Tuple["re.Pattern[bytes]", bytes], ...] = (
    (re.compile(rb"(</CURDEF>\s+)(<BANKID>)"), rb"\1<BANKACCTFROM>\2"),
)


def preprocess(data: bytes) -> bytes:
    """Apply every known fix-up to the raw bytes."""
    for pattern, replacement in FIXUPS:
        data = pattern.sub(replacement, data)
    return data
