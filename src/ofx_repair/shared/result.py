"""Result objects and diagnostic types for OFX markup repair.

A successful repair pass returns a ``RepairResult`` holding the corrected
markup together with the non-fatal diagnostics and counters gathered on the
way. Fatal conditions are raised instead (see ``ofx_repair.shared.errors``).
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Anomalies that were tolerated


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entry to a JSON-friendly dictionary."""
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "position": self.position,
            "details": self.details,
        }


@dataclass
class RepairMetrics:
    """Counters collected during one recovery pass."""

    input_bytes: int = 0
    output_bytes: int = 0
    tokens_processed: int = 0
    containers_opened: int = 0
    containers_closed: int = 0
    containers_auto_closed: int = 0
    leaf_closes_inferred: int = 0
    leaf_starts_recovered: int = 0
    ignored_closes: int = 0
    max_depth: int = 0
    processing_time_ms: float = 0.0

    @property
    def repair_count(self) -> int:
        """Total number of structural repairs applied to the input."""
        return (
            self.containers_auto_closed
            + self.leaf_closes_inferred
            + self.leaf_starts_recovered
            + self.ignored_closes
        )

    @property
    def bytes_per_second(self) -> float:
        """Calculate input bytes processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.input_bytes * 1000.0) / self.processing_time_ms

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to a dictionary including derived values."""
        return {
            "input_bytes": self.input_bytes,
            "output_bytes": self.output_bytes,
            "tokens_processed": self.tokens_processed,
            "containers_opened": self.containers_opened,
            "containers_closed": self.containers_closed,
            "containers_auto_closed": self.containers_auto_closed,
            "leaf_closes_inferred": self.leaf_closes_inferred,
            "leaf_starts_recovered": self.leaf_starts_recovered,
            "ignored_closes": self.ignored_closes,
            "max_depth": self.max_depth,
            "repair_count": self.repair_count,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class RepairResult:
    """Outcome of a successful repair pass."""

    data: bytes
    encoding: str = "utf-8"
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    metrics: RepairMetrics = field(default_factory=RepairMetrics)
    unclosed_tags: List[str] = field(default_factory=list)
    correlation_id: Optional[str] = None

    @property
    def has_repairs(self) -> bool:
        """Check whether the input needed any structural repair."""
        return self.metrics.repair_count > 0

    @property
    def warnings(self) -> List[DiagnosticEntry]:
        """Diagnostics at WARNING severity."""
        return [
            entry for entry in self.diagnostics
            if entry.severity == DiagnosticSeverity.WARNING
        ]

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append a diagnostic entry tagged with this pass's correlation ID."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                position=position,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def text(self) -> str:
        """Decode the repaired markup."""
        return self.data.decode("utf-8")

    def summary(self) -> Dict[str, Any]:
        """Summarize the pass for reporting."""
        return {
            "encoding": self.encoding,
            "has_repairs": self.has_repairs,
            "unclosed_tags": list(self.unclosed_tags),
            "metrics": self.metrics.to_dict(),
            "diagnostics": [entry.to_dict() for entry in self.diagnostics],
        }
