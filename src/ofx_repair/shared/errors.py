"""Exception hierarchy for OFX markup repair.

A repair pass either succeeds with a complete buffer or fails with one of the
``RepairError`` subclasses below. There is no partial output.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ofx_repair.tokenization.tokenizer import TokenPosition


class OFXRepairError(Exception):
    """Base exception for every error raised by this package."""


class RepairError(OFXRepairError):
    """Base exception for errors that abort a repair pass."""

    def __init__(
        self, message: str, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (line {self.position.line}, column {self.position.column})"


class MissingRootTagError(RepairError):
    """The literal opening tag of the document root does not occur in the input."""

    def __init__(self, root_tag: str) -> None:
        super().__init__(f"invalid file, <{root_tag}> tag not found")
        self.root_tag = root_tag


class OrphanedTextError(RepairError):
    """A text run has neither a start nor an end tag it can be attached to."""

    def __init__(
        self, text: str, position: Optional["TokenPosition"] = None
    ) -> None:
        super().__init__(f"charData({text}) missing start and end tags", position)
        self.text = text


class AmbiguousClosingTagsError(RepairError):
    """A close tag cannot be resolved against a differently named pending leaf."""

    def __init__(
        self,
        text: str,
        pending_tag: Optional[str],
        closing_tag: str,
        position: Optional["TokenPosition"] = None,
    ) -> None:
        super().__init__(f"charData({text}) has ambiguous closing tags", position)
        self.text = text
        self.pending_tag = pending_tag
        self.closing_tag = closing_tag


class UnmatchedClosingTagError(AmbiguousClosingTagsError):
    """A leaf close tag arrived with nothing pending (strict mode only)."""

    def __init__(
        self,
        closing_tag: str,
        pending_tag: Optional[str] = None,
        position: Optional["TokenPosition"] = None,
    ) -> None:
        super().__init__("", pending_tag, closing_tag, position)
        self.message = f"closing tag </{closing_tag}> has no matching start tag"


class TokenizerError(RepairError):
    """The raw markup could not be tokenized (malformed bytes or markup)."""


class InputTooLargeError(RepairError):
    """The input exceeds the configured size limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"input of {size} bytes exceeds the limit of {limit} bytes")
        self.size = size
        self.limit = limit


class EmptyStackError(OFXRepairError):
    """Raised when popping or peeking an empty open-tag stack."""

    def __init__(self) -> None:
        super().__init__("popping from empty stack")


class DocumentBindingError(OFXRepairError):
    """Repaired markup could not be bound to the statement model."""


class DateParseError(OFXRepairError):
    """A statement date string could not be parsed."""
