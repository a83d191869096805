"""OFX Repair.

Repairs malformed, SGML-derived OFX statement downloads into well-formed
markup and binds the result to a typed statement model.

Progressive API Disclosure:
- Level 1: Simple functions - repair(), parse(), parse_file()
- Level 2: Configured parser - StatementParser class
- Level 3: Pipeline pieces - OFXCleaner, RecoveryEngine, RawTokenizer
"""

__version__ = "0.1.0"
__author__ = "OFX Repair Team"

# Progressive API disclosure - Level 1 and 2
from .api import Cleaner, StatementParser, parse, parse_file, repair

# Statement model
from .binding import Document, Transaction, TransactionType, parse_date

# Pipeline pieces for advanced usage
from .repair import OFXCleaner, RecoveryEngine, TagClassifier, classify

# Configuration, results and errors
from .shared import (
    AmbiguousClosingTagsError,
    MissingRootTagError,
    OFXRepairError,
    OrphanedTextError,
    RepairConfig,
    RepairError,
    RepairResult,
    TokenizerError,
)
from .tokenization import RawTokenizer

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse",
    "parse_file",
    "repair",

    # Level 2: Configured parser
    "Cleaner",
    "StatementParser",

    # Statement model
    "Document",
    "Transaction",
    "TransactionType",
    "parse_date",

    # Pipeline pieces
    "OFXCleaner",
    "RawTokenizer",
    "RecoveryEngine",
    "TagClassifier",
    "classify",

    # Configuration, results and errors
    "AmbiguousClosingTagsError",
    "MissingRootTagError",
    "OFXRepairError",
    "OrphanedTextError",
    "RepairConfig",
    "RepairError",
    "RepairResult",
    "TokenizerError",
]
