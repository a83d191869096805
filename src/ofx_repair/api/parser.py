"""Statement parsing API with progressive disclosure.

From simple module-level functions to a configurable, reusable parser class:

- ``repair(data)``: raw bytes in, balanced markup out
- ``parse(source)``: any input source in, ``Document`` out
- ``StatementParser``: configuration, an injectable cleaner and usage statistics

Unlike a never-fail tree parser, every function here raises an
``OFXRepairError`` subclass when the download cannot be repaired or bound.
"""

import time
from pathlib import Path
from typing import IO, Any, Dict, Optional, Protocol, Tuple, Union, runtime_checkable

from ofx_repair.binding import bind, count_transactions, preprocess
from ofx_repair.binding.model import Document
from ofx_repair.repair.cleaner import OFXCleaner, repair
from ofx_repair.shared import RepairConfig, RepairResult, get_logger

# Type definitions for input data
InputType = Union[str, bytes, bytearray, Path, IO[bytes], IO[str]]

MS_PER_SECOND = 1000


@runtime_checkable
class Cleaner(Protocol):
    """Anything that turns raw download bytes into balanced markup."""

    def cleanup(self, data: bytes) -> RepairResult:
        ...


def read_source(source: InputType) -> bytes:
    """Materialize an input source as bytes.

    Text is encoded as UTF-8; paths and file-like objects are read whole.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str):
        return source.encode("utf-8")
    if isinstance(source, Path):
        return source.read_bytes()
    if hasattr(source, "read"):
        content = source.read()
        if isinstance(content, str):
            return content.encode("utf-8")
        return bytes(content)
    raise TypeError(f"Unsupported input type: {type(source).__name__}")


def parse(
    source: InputType,
    cleaner: Optional[Cleaner] = None,
    config: Optional[RepairConfig] = None,
    correlation_id: Optional[str] = None,
) -> Document:
    """Repair and bind an OFX download.

    Args:
        source: Raw bytes, text, a Path, or a file-like object
        cleaner: Cleaner to use instead of ``OFXCleaner``
        config: Repair configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        The bound Document

    Examples:
        >>> document = parse(b"<OFX><BANKMSGSRSV1></BANKMSGSRSV1></OFX>")
        >>> len(document.bank_responses)
        1
    """
    parser = StatementParser(config=config, cleaner=cleaner, correlation_id=correlation_id)
    return parser.parse(source)


def parse_file(
    file_path: Union[str, Path],
    config: Optional[RepairConfig] = None,
    correlation_id: Optional[str] = None,
) -> Document:
    """Repair and bind an OFX file.

    Raises:
        FileNotFoundError: If the file does not exist
        OFXRepairError: If the file cannot be repaired or bound
    """
    path_obj = Path(file_path) if isinstance(file_path, str) else file_path
    logger = get_logger(__name__, correlation_id, "parse_file")
    logger.info("Starting file parse operation", extra={"file_path": str(path_obj)})
    return parse(path_obj, config=config, correlation_id=correlation_id)


class StatementParser:
    """Reusable statement parser.

    Attributes:
        config: Repair configuration
        cleaner: Cleaner used for the repair pass
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> parser = StatementParser(RepairConfig.lenient())
        >>> documents = [parser.parse(path) for path in paths]
        >>> parser.statistics["failed_parses"]
        0
    """

    def __init__(
        self,
        config: Optional[RepairConfig] = None,
        cleaner: Optional[Cleaner] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or RepairConfig()
        self.correlation_id = correlation_id
        self.cleaner: Cleaner = cleaner or OFXCleaner(self.config, correlation_id)
        self.logger = get_logger(__name__, correlation_id, "statement_parser")

        self._parse_count = 0
        self._failed_parses = 0
        self._total_processing_time = 0.0

    def parse(self, source: InputType) -> Document:
        """Repair and bind one download."""
        _, document = self.parse_detailed(source)
        return document

    def parse_detailed(self, source: InputType) -> Tuple[RepairResult, Document]:
        """Repair and bind one download, also returning the repair result.

        Raises:
            OFXRepairError: If the download cannot be repaired or bound
        """
        start_time = time.time()
        self._parse_count += 1
        try:
            data = read_source(source)
            if self.config.binding.apply_preprocessing:
                data = preprocess(data)
            result = self.cleaner.cleanup(data)
            document = bind(
                result.data,
                result.correlation_id or self.correlation_id,
                self.config.recovery.root_tag,
            )
            if self.config.binding.count_transactions:
                document.transaction_count = count_transactions(result.data)
        except Exception:
            self._failed_parses += 1
            raise
        finally:
            self._total_processing_time += (time.time() - start_time) * MS_PER_SECOND

        self.logger.info(
            "Statement parsed",
            extra={
                "statement_count": len(document.bank_responses),
                "transaction_count": document.transaction_count,
                "repair_count": result.metrics.repair_count,
            },
        )
        return result, document

    def repair(self, source: InputType) -> RepairResult:
        """Run only the repair pass (after preprocessing) on one download."""
        data = read_source(source)
        if self.config.binding.apply_preprocessing:
            data = preprocess(data)
        return self.cleaner.cleanup(data)

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "failed_parses": self._failed_parses,
            "success_rate": (
                (self._parse_count - self._failed_parses) / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._failed_parses = 0
        self._total_processing_time = 0.0


__all__ = [
    "Cleaner",
    "InputType",
    "StatementParser",
    "parse",
    "parse_file",
    "read_source",
    "repair",
]
