"""Shared utilities for OFX markup repair.

This module provides the configuration objects, result and diagnostic types,
exception hierarchy, and logging helpers used across all processing layers.
"""

from .config import (
    BindingConfig,
    CharacterConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    RecoveryConfig,
    RepairConfig,
    TrailingTextPolicy,
)
from .errors import (
    AmbiguousClosingTagsError,
    DateParseError,
    DocumentBindingError,
    EmptyStackError,
    InputTooLargeError,
    MissingRootTagError,
    OFXRepairError,
    OrphanedTextError,
    RepairError,
    TokenizerError,
    UnmatchedClosingTagError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    RepairMetrics,
    RepairResult,
)

__all__ = [
    "AmbiguousClosingTagsError",
    "BindingConfig",
    "CharacterConfig",
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "DateParseError",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "DocumentBindingError",
    "EmptyStackError",
    "GlobalConfig",
    "InputTooLargeError",
    "MissingRootTagError",
    "OFXRepairError",
    "OrphanedTextError",
    "RecoveryConfig",
    "RepairConfig",
    "RepairError",
    "RepairMetrics",
    "RepairResult",
    "TokenizerError",
    "TrailingTextPolicy",
    "UnmatchedClosingTagError",
    "configure_logging",
    "get_logger",
]
