"""Repair pass orchestration: raw bytes in, balanced markup out."""

import time
import uuid
from typing import Optional

from ofx_repair.character.encoding import EncodingDetector, search_codec
from ofx_repair.shared.config import RepairConfig
from ofx_repair.shared.errors import (
    InputTooLargeError,
    MissingRootTagError,
    RepairError,
    TokenizerError,
)
from ofx_repair.shared.logging import get_logger
from ofx_repair.shared.result import DiagnosticSeverity, RepairResult
from ofx_repair.tokenization.tokenizer import RawTokenizer

from .classifier import TagClassifier
from .engine import RecoveryEngine

COMPONENT = "ofx_cleaner"


class OFXCleaner:
    """Turns a raw OFX download into well-formed markup.

    Steps: size check, encoding detection, root search, decoding,
    tokenizing and the recovery pass. Every step either succeeds or raises a
    ``RepairError``; no partial output is ever returned.

    Examples:
        >>> cleaner = OFXCleaner()
        >>> cleaner.cleanup(b"<OFX><CODE>0</OFX>").data
        b'<OFX><CODE>0</CODE></OFX>'
    """

    def __init__(
        self,
        config: Optional[RepairConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or RepairConfig()
        self.correlation_id = correlation_id
        recovery = self.config.recovery
        self.classifier = TagClassifier(recovery.extra_container_tags, recovery.root_tag)
        character = self.config.character
        self.detector = EncodingDetector(
            fallback_encoding=character.fallback_encoding,
            detect_bom=character.detect_bom,
            honor_ofx_header=character.honor_ofx_header,
        )

    def cleanup(self, data: bytes) -> RepairResult:
        """Repair one document.

        Args:
            data: Raw bytes of the download, headers included

        Returns:
            RepairResult holding the UTF-8 encoded, balanced markup

        Raises:
            InputTooLargeError: If the input exceeds ``max_input_size_bytes``
            MissingRootTagError: If the root start tag does not occur
            TokenizerError: On undecodable bytes or malformed markup
            OrphanedTextError: If a text run cannot be attached to an element
            AmbiguousClosingTagsError: If a close tag cannot be resolved
        """
        start_time = time.time()
        correlation_id = self.correlation_id or str(uuid.uuid4())[:8]
        logger = get_logger(__name__, correlation_id, COMPONENT)
        logger.info("Starting repair pass", extra={"input_bytes": len(data)})

        try:
            result = self._cleanup(data, correlation_id)
        except RepairError as e:
            logger.error(
                f"Repair pass failed: {e}",
                extra={"error_type": type(e).__name__},
            )
            raise

        result.metrics.processing_time_ms = (time.time() - start_time) * 1000
        logger.info(
            "Repair pass completed",
            extra={
                "output_bytes": result.metrics.output_bytes,
                "repair_count": result.metrics.repair_count,
                "warning_count": len(result.warnings),
                "processing_time_ms": result.metrics.processing_time_ms,
            },
        )
        return result

    def _cleanup(self, data: bytes, correlation_id: str) -> RepairResult:
        limit = self.config.global_.max_input_size_bytes
        if limit is not None and len(data) > limit:
            raise InputTooLargeError(len(data), limit)

        detection = self.detector.detect(data)
        result = RepairResult(
            data=b"", encoding=detection.encoding, correlation_id=correlation_id
        )
        result.metrics.input_bytes = len(data)
        result.add_diagnostic(
            DiagnosticSeverity.DEBUG,
            f"Detected encoding {detection.encoding}",
            COMPONENT,
            details={
                "method": detection.method.value,
                "confidence": detection.confidence,
            },
        )
        for issue in detection.issues:
            result.add_diagnostic(DiagnosticSeverity.INFO, issue, COMPONENT)

        text = self._decode_from_root(data, detection.encoding, result)
        tokenizer = RawTokenizer(correlation_id)
        engine = RecoveryEngine(
            self.config.recovery, self.classifier, correlation_id
        )
        return engine.recover(tokenizer.tokenize(text), result)

    def _decode_from_root(self, data: bytes, encoding: str, result: RepairResult) -> str:
        """Discard everything before the root start tag and decode the rest."""
        root_tag = self.config.recovery.root_tag
        codec = search_codec(encoding)
        index = data.find(f"<{root_tag}>".encode(codec))
        if index == -1:
            raise MissingRootTagError(root_tag)
        if index > 0:
            result.add_diagnostic(
                DiagnosticSeverity.DEBUG,
                f"Skipped {index} bytes before <{root_tag}>",
                COMPONENT,
            )

        try:
            return data[index:].decode(codec, errors=self.config.character.decode_errors)
        except UnicodeDecodeError as e:
            raise TokenizerError(
                f"malformed byte sequence for {encoding} at byte {index + e.start}: "
                f"{e.reason}"
            ) from e


def repair(
    data: bytes,
    config: Optional[RepairConfig] = None,
    correlation_id: Optional[str] = None,
) -> bytes:
    """Repair a raw OFX document and return the balanced markup.

    Examples:
        >>> repair(b"<OFX><SIGNONMSGSRSV1></OFX>")
        b'<OFX><SIGNONMSGSRSV1></SIGNONMSGSRSV1></OFX>'
    """
    return OFXCleaner(config, correlation_id).cleanup(data).data
