"""Multi-stage encoding detection for OFX downloads.

OFX 1.x files announce their character set in an SGML header
(``ENCODING:USASCII`` / ``CHARSET:1252``) while OFX 2.x files carry an XML
declaration. Detection cascades through BOM, XML declaration, OFX header,
UTF-8 validation and finally a configured fallback. It never raises.
"""

import codecs
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple

# Only the head of the file is inspected for declarations and headers
HEADER_SAMPLE_SIZE = 1024

CONFIDENCE_BOM = 1.0
CONFIDENCE_XML_DECLARATION = 0.9
CONFIDENCE_OFX_HEADER = 0.85
CONFIDENCE_UTF8_VALID = 0.8
CONFIDENCE_FALLBACK = 0.5


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    OFX_HEADER = "ofx_header"
    UTF8_VALIDATION = "utf8_validation"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Result of encoding detection with confidence scoring and metadata.

    Attributes:
        encoding: Detected encoding name (Python codec name)
        confidence: Confidence score from 0.0 to 1.0
        method: Detection method used
        issues: List of issues found during detection
        bom_length: Number of leading bytes occupied by a byte order mark
    """
    encoding: str
    confidence: float
    method: DetectionMethod
    issues: List[str] = field(default_factory=list)
    bom_length: int = 0

    def __post_init__(self) -> None:
        """Validate confidence score range."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Confidence must be between 0.0 and 1.0, got {self.confidence}"
            )


def normalize_encoding(name: str) -> str:
    """Normalize an encoding label to a Python codec name.

    Returns an empty string when Python has no codec for the label.
    """
    aliases = {
        "utf8": "utf-8",
        "usascii": "ascii",
        "us-ascii": "ascii",
        "iso-8859-1": "latin-1",
        "iso8859-1": "latin-1",
        "windows-1252": "cp1252",
        "1252": "cp1252",
    }
    label = name.strip().lower()
    label = aliases.get(label, label)
    try:
        return codecs.lookup(label).name
    except LookupError:
        return ""


def search_codec(encoding: str) -> str:
    """Return a codec that encodes without emitting a byte order mark."""
    if encoding in ("utf-16", "utf-32"):
        return f"{encoding}-le"
    if encoding == "utf-8-sig":
        return "utf-8"
    return encoding


class BOMDetector:
    """Byte Order Mark (BOM) detection for the Unicode encodings."""

    # Longer marks first so UTF-32 LE is not mistaken for UTF-16 LE
    BOM_PATTERNS: ClassVar[Tuple[Tuple[bytes, str], ...]] = (
        (b"\xff\xfe\x00\x00", "utf-32-le"),
        (b"\x00\x00\xfe\xff", "utf-32-be"),
        (b"\xef\xbb\xbf", "utf-8"),
        (b"\xff\xfe", "utf-16-le"),
        (b"\xfe\xff", "utf-16-be"),
    )

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if BOM detected, None otherwise
        """
        for bom_bytes, encoding in self.BOM_PATTERNS:
            if data.startswith(bom_bytes):
                return EncodingResult(
                    encoding=encoding,
                    confidence=CONFIDENCE_BOM,
                    method=DetectionMethod.BOM,
                    bom_length=len(bom_bytes),
                )
        return None


class XMLDeclarationParser:
    """Parser for the XML declaration used by OFX 2.x files."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'<\?xml\s+[^>]*?encoding\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE
    )

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from an XML declaration in the file head."""
        match = self.XML_DECLARATION_PATTERN.search(data[:HEADER_SAMPLE_SIZE])
        if not match:
            return None

        declared = match.group(1).decode("ascii", errors="ignore")
        encoding = normalize_encoding(declared)
        if not encoding:
            return None
        return EncodingResult(
            encoding=encoding,
            confidence=CONFIDENCE_XML_DECLARATION,
            method=DetectionMethod.XML_DECLARATION,
        )


def _is_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8", errors="strict")
    except UnicodeDecodeError:
        return False
    return True


class OFXHeaderParser:
    """Parser for the colon-separated SGML header of OFX 1.x files."""

    HEADER_LINE_PATTERN = re.compile(rb"^\s*([A-Z]+)\s*:\s*([^\r\n<]*)", re.MULTILINE)

    def parse_header(self, data: bytes) -> Optional[EncodingResult]:
        """Derive the encoding from ``ENCODING`` and ``CHARSET`` header lines.

        Without a charset the body is taken as UTF-8 when it decodes
        cleanly, otherwise as Windows-1252.
        """
        head = data[:HEADER_SAMPLE_SIZE]
        root = head.find(b"<")
        if root != -1:
            head = head[:root]

        fields: Dict[str, str] = {}
        for match in self.HEADER_LINE_PATTERN.finditer(head):
            key = match.group(1).decode("ascii")
            fields[key] = match.group(2).decode("ascii", errors="ignore").strip()

        if "OFXHEADER" not in fields and "ENCODING" not in fields:
            return None

        issues: List[str] = []
        declared_encoding = fields.get("ENCODING", "").upper()
        if declared_encoding in ("UTF-8", "UTF8", "UNICODE"):
            encoding = "utf-8"
        else:
            charset = fields.get("CHARSET", "").upper()
            if charset in ("", "NONE"):
                encoding = "utf-8" if _is_utf8(data) else "cp1252"
            else:
                encoding = normalize_encoding(charset)
                if not encoding:
                    issues.append(f"Unknown OFX charset: {charset}")
                    encoding = "cp1252"

        return EncodingResult(
            encoding=encoding,
            confidence=CONFIDENCE_OFX_HEADER,
            method=DetectionMethod.OFX_HEADER,
            issues=issues,
        )


class UTF8Validator:
    """Strict UTF-8 validation of the whole input."""

    def validate(self, data: bytes) -> Optional[EncodingResult]:
        """Return a UTF-8 result if the input decodes cleanly, else None."""
        if not _is_utf8(data):
            return None
        return EncodingResult(
            encoding="utf-8",
            confidence=CONFIDENCE_UTF8_VALID,
            method=DetectionMethod.UTF8_VALIDATION,
        )


class EncodingDetector:
    """Main encoding detection class with never-fail guarantee.

    Implements a cascading detection strategy:
    1. BOM detection
    2. XML declaration parsing
    3. OFX SGML header parsing
    4. UTF-8 validation
    5. Fallback to the configured encoding
    """

    def __init__(
        self,
        fallback_encoding: str = "utf-8",
        detect_bom: bool = True,
        honor_ofx_header: bool = True,
    ) -> None:
        """Initialize detection components."""
        self.fallback_encoding = normalize_encoding(fallback_encoding) or "utf-8"
        self.detect_bom = detect_bom
        self.honor_ofx_header = honor_ofx_header
        self.bom_detector = BOMDetector()
        self.xml_parser = XMLDeclarationParser()
        self.header_parser = OFXHeaderParser()
        self.utf8_validator = UTF8Validator()

    def detect(self, data: bytes) -> EncodingResult:
        """Detect encoding using the multi-stage detection system.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult with detected encoding and metadata
        """
        if self.detect_bom:
            bom_result = self.bom_detector.detect(data)
            if bom_result:
                return bom_result

        xml_result = self.xml_parser.parse_declaration(data)
        if xml_result:
            return xml_result

        if self.honor_ofx_header:
            header_result = self.header_parser.parse_header(data)
            if header_result:
                return header_result

        utf8_result = self.utf8_validator.validate(data)
        if utf8_result:
            return utf8_result

        return EncodingResult(
            encoding=self.fallback_encoding,
            confidence=CONFIDENCE_FALLBACK,
            method=DetectionMethod.FALLBACK,
            issues=["All detection methods failed, using fallback"],
        )
