"""Tests for OFX encoding detection."""

import pytest

from ofx_repair.character.encoding import (
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

OFX1_HEADER = (
    b"OFXHEADER:100\r\nDATA:OFXSGML\r\nVERSION:102\r\nSECURITY:NONE\r\n"
    b"ENCODING:USASCII\r\nCHARSET:1252\r\nCOMPRESSION:NONE\r\n\r\n"
)


class TestEncodingResult:
    """Test EncodingResult validation."""

    def test_valid_result(self):
        result = EncodingResult("utf-8", 0.8, DetectionMethod.UTF8_VALIDATION)
        assert result.issues == []
        assert result.bom_length == 0

    def test_confidence_out_of_range(self):
        with pytest.raises(ValueError, match="Confidence must be between 0.0 and 1.0"):
            EncodingResult("utf-8", 1.5, DetectionMethod.FALLBACK)


class TestNormalizeEncoding:
    """Test encoding label normalization."""

    @pytest.mark.parametrize("label,expected", [
        ("UTF-8", "utf-8"),
        ("utf8", "utf-8"),
        ("USASCII", "ascii"),
        ("ISO-8859-1", "iso8859-1"),
        ("1252", "cp1252"),
        ("windows-1252", "cp1252"),
        ("no-such-codec", ""),
    ])
    def test_labels(self, label, expected):
        assert normalize_encoding(label) == expected

    def test_search_codec_avoids_byte_order_marks(self):
        assert search_codec("utf-16") == "utf-16-le"
        assert search_codec("utf-32") == "utf-32-le"
        assert search_codec("utf-8-sig") == "utf-8"
        assert search_codec("cp1252") == "cp1252"


class TestBOMDetector:
    """Test byte order mark detection."""

    @pytest.mark.parametrize("bom,encoding", [
        (b"\xef\xbb\xbf", "utf-8"),
        (b"\xff\xfe", "utf-16-le"),
        (b"\xfe\xff", "utf-16-be"),
        (b"\xff\xfe\x00\x00", "utf-32-le"),
        (b"\x00\x00\xfe\xff", "utf-32-be"),
    ])
    def test_boms(self, bom, encoding):
        result = BOMDetector().detect(bom + b"<")
        assert result.encoding == encoding
        assert result.method == DetectionMethod.BOM
        assert result.confidence == 1.0
        assert result.bom_length == len(bom)

    def test_no_bom(self):
        assert BOMDetector().detect(b"<OFX>") is None


class TestXMLDeclarationParser:
    """Test OFX 2.x declaration parsing."""

    def test_declared_encoding(self):
        data = b'<?xml version="1.0" encoding="windows-1252" standalone="no"?>\n<?OFX OFXHEADER="200"?>'
        result = XMLDeclarationParser().parse_declaration(data)
        assert result.encoding == "cp1252"
        assert result.method == DetectionMethod.XML_DECLARATION

    def test_unknown_encoding_is_ignored(self):
        data = b'<?xml version="1.0" encoding="x-unknown"?>'
        assert XMLDeclarationParser().parse_declaration(data) is None

    def test_no_declaration(self):
        assert XMLDeclarationParser().parse_declaration(b"<OFX>") is None


class TestOFXHeaderParser:
    """Test OFX 1.x SGML header parsing."""

    def test_windows_charset(self):
        result = OFXHeaderParser().parse_header(OFX1_HEADER + b"<OFX>")
        assert result.encoding == "cp1252"
        assert result.method == DetectionMethod.OFX_HEADER
        assert result.issues == []

    def test_unicode_encoding(self):
        data = b"OFXHEADER:100\nENCODING:UTF-8\nCHARSET:NONE\n<OFX>"
        assert OFXHeaderParser().parse_header(data).encoding == "utf-8"

    def test_missing_charset_with_utf8_body(self):
        data = "OFXHEADER:100\nENCODING:USASCII\nCHARSET:NONE\n<OFX><NAME>Café".encode("utf-8")
        assert OFXHeaderParser().parse_header(data).encoding == "utf-8"

    def test_missing_charset_with_windows_body(self):
        data = b"OFXHEADER:100\nENCODING:USASCII\n<OFX><NAME>Caf\xe9"
        result = OFXHeaderParser().parse_header(data)
        assert result.encoding == "cp1252"
        assert result.method == DetectionMethod.OFX_HEADER

    def test_latin1_charset(self):
        data = b"OFXHEADER:100\nENCODING:USASCII\nCHARSET:ISO-8859-1\n<OFX>"
        assert OFXHeaderParser().parse_header(data).encoding == "iso8859-1"

    def test_unknown_charset(self):
        data = b"OFXHEADER:100\nENCODING:USASCII\nCHARSET:KLINGON\n<OFX>"
        result = OFXHeaderParser().parse_header(data)
        assert result.encoding == "cp1252"
        assert result.issues == ["Unknown OFX charset: KLINGON"]

    def test_no_header(self):
        assert OFXHeaderParser().parse_header(b"<OFX><CODE>0") is None

    def test_body_is_not_read_as_header(self):
        data = b"<OFX>\nOFXHEADER:100\n"
        assert OFXHeaderParser().parse_header(data) is None


class TestUTF8Validator:
    """Test strict UTF-8 validation."""

    def test_valid_utf8(self):
        result = UTF8Validator().validate("Café".encode("utf-8"))
        assert result.encoding == "utf-8"
        assert result.confidence == 0.8

    def test_invalid_utf8(self):
        assert UTF8Validator().validate(b"Caf\xe9") is None


class TestEncodingDetector:
    """Test the detection cascade."""

    def test_bom_wins(self):
        data = b"\xef\xbb\xbf" + OFX1_HEADER
        assert EncodingDetector().detect(data).method == DetectionMethod.BOM

    def test_bom_detection_can_be_disabled(self):
        data = b"\xef\xbb\xbf" + OFX1_HEADER
        result = EncodingDetector(detect_bom=False).detect(data)
        assert result.method == DetectionMethod.OFX_HEADER

    def test_header_can_be_ignored(self):
        result = EncodingDetector(honor_ofx_header=False).detect(OFX1_HEADER)
        assert result.method == DetectionMethod.UTF8_VALIDATION

    def test_fallback(self):
        result = EncodingDetector(fallback_encoding="latin-1").detect(b"<OFX>\xe9")
        assert result.encoding == "iso8859-1"
        assert result.method == DetectionMethod.FALLBACK
        assert result.confidence == 0.5
        assert result.issues == ["All detection methods failed, using fallback"]

    def test_unknown_fallback_defaults_to_utf8(self):
        assert EncodingDetector(fallback_encoding="bogus").fallback_encoding == "utf-8"
