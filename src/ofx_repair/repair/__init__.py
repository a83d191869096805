"""Streaming tag recovery for malformed OFX markup.

Key Components:
    TagClassifier: Container/leaf classification of tag names
    OpenTagStack: LIFO stack of containers awaiting their close tag
    RecoveryEngine: Single-pass state machine producing balanced markup
    OFXCleaner: Orchestrates detection, decoding, tokenizing and recovery
"""

from .classifier import (
    DEFAULT_CONTAINER_TAGS,
    TagClassifier,
    TagKind,
    classify,
    is_container,
    local_name,
)
from .cleaner import OFXCleaner, repair
from .engine import RecoveryEngine
from .stack import OpenElement, OpenTagStack
from .writer import MarkupWriter

__all__ = [
    "DEFAULT_CONTAINER_TAGS",
    "MarkupWriter",
    "OFXCleaner",
    "OpenElement",
    "OpenTagStack",
    "RecoveryEngine",
    "TagClassifier",
    "TagKind",
    "classify",
    "is_container",
    "local_name",
    "repair",
]
