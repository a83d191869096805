"""Tokenization layer for OFX markup repair.

Key Components:
    RawTokenizer: Pull-based tokenizer producing unmodified text runs and tags
    Token: Represents individual markup tokens with position information
    TokenType: Enumeration of the supported token types
    TokenPosition: Position tracking for debugging and error reporting
    TokenizerState: Markup construct being read, used in error reports
"""

from .tokenizer import (
    STANDARD_ENTITIES,
    RawTokenizer,
    Token,
    TokenizerState,
    TokenPosition,
    TokenType,
    resolve_entities,
)

__all__ = [
    "STANDARD_ENTITIES",
    "RawTokenizer",
    "Token",
    "TokenPosition",
    "TokenType",
    "TokenizerState",
    "resolve_entities",
]
