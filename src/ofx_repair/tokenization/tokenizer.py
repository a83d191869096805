"""Raw, non-normalizing markup tokenizer.

The tokenizer turns decoded text into a pull-based stream of start tags, end
tags and text runs. It performs no balancing, no whitespace coalescing and
no trimming: the recovery engine depends on seeing the text exactly as it
appeared in the download. Only the standard entities and numeric character
references are resolved.
"""

import re
from bisect import bisect_left
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Tuple

from ofx_repair.shared.errors import TokenizerError
from ofx_repair.shared.logging import get_logger

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"
PI_CLOSE = "?>"

STANDARD_ENTITIES: Dict[str, str] = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}

MAX_CODE_POINT = 0x10FFFF

_NAME_START_CHARS = r"A-Za-z_:\u00C0-\uD7FF\uF900-\uFFFD\U00010000-\U000EFFFF"
_NAME_PATTERN = re.compile(
    rf"[{_NAME_START_CHARS}][-0-9.\u00B7{_NAME_START_CHARS}]*"
)
_ENTITY_PATTERN = re.compile(r"&(#[0-9]+|#[xX][0-9A-Fa-f]+|[A-Za-z][A-Za-z0-9]*);")
_WHITESPACE = " \t\r\n"


class TokenType(Enum):
    """Markup token types produced by the raw tokenizer."""

    START = auto()                   # Opening tag with ordered attributes
    END = auto()                     # Closing tag
    TEXT = auto()                    # Character data, including CDATA content
    COMMENT = auto()                 # <!-- ... -->
    PROCESSING_INSTRUCTION = auto()  # <? ... ?>
    DIRECTIVE = auto()               # <!DOCTYPE ...> and other declarations


class TokenizerState(Enum):
    """Markup construct the tokenizer is currently reading."""

    TEXT_CONTENT = auto()
    TAG_OPEN = auto()
    START_TAG = auto()
    ATTRIBUTE_VALUE = auto()
    END_TAG = auto()
    COMMENT = auto()
    CDATA = auto()
    PROCESSING_INSTRUCTION = auto()
    DIRECTIVE = auto()


@dataclass(frozen=True)
class TokenPosition:
    """Position information for markup tokens."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass
class Token:
    """A single markup token.

    ``value`` holds the tag name for START and END tokens and the content for
    every other token type.
    """

    type: TokenType
    value: str
    position: TokenPosition
    attributes: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def name(self) -> str:
        """Tag name of a START or END token."""
        if self.type not in (TokenType.START, TokenType.END):
            raise AttributeError(f"{self.type.name} token has no tag name")
        return self.value

    @property
    def is_tag(self) -> bool:
        return self.type in (TokenType.START, TokenType.END)


def resolve_entities(text: str) -> str:
    """Resolve standard entities and numeric character references.

    Unknown named entities and out-of-range references are kept literally.
    """
    if "&" not in text:
        return text

    def _resolve(match: "re.Match[str]") -> str:
        reference = match.group(1)
        if reference[0] != "#":
            return STANDARD_ENTITIES.get(reference, match.group(0))
        if reference[1] in "xX":
            code_point = int(reference[2:], 16)
        else:
            code_point = int(reference[1:])
        if code_point > MAX_CODE_POINT:
            return match.group(0)
        return chr(code_point)

    return _ENTITY_PATTERN.sub(_resolve, text)


class RawTokenizer:
    """Pull-based tokenizer for SGML-style OFX markup.

    Tokens are produced lazily by ``tokenize``; a ``TokenizerError`` carrying
    the line and column of the offending construct is raised as soon as
    malformed markup is reached.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the tokenizer.

        Args:
            correlation_id: Optional correlation ID for tracking requests
        """
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "raw_tokenizer")
        self._reset_state("")

    def _reset_state(self, text: str) -> None:
        """Reset tokenizer state for new input."""
        self.state = TokenizerState.TEXT_CONTENT
        self._text = text
        self._length = len(text)
        self._pos = 0
        self._newlines = [i for i, char in enumerate(text) if char == "\n"]
        self._pending_end: Optional[Token] = None
        self.token_count = 0

    def position_at(self, offset: int) -> TokenPosition:
        """Translate a character offset into a line/column position."""
        line_index = bisect_left(self._newlines, offset)
        if line_index == 0:
            column = offset + 1
        else:
            column = offset - self._newlines[line_index - 1]
        return TokenPosition(line_index + 1, column, offset)

    def tokenize(self, text: str) -> Iterator[Token]:
        """Tokenize decoded markup.

        Args:
            text: Markup text, starting at or before the document root

        Yields:
            Tokens in document order

        Raises:
            TokenizerError: On malformed markup or end of input inside markup
        """
        self._reset_state(text)
        self.logger.debug(
            "Starting tokenization", extra={"char_count": self._length}
        )

        while self._pos < self._length:
            if self._text[self._pos] == "<":
                token = self._read_markup()
            else:
                token = self._read_text()
            self.state = TokenizerState.TEXT_CONTENT
            self.token_count += 1
            yield token
            if self._pending_end is not None:
                # Self-closing tag: <X/> is reported as <X></X>
                pending, self._pending_end = self._pending_end, None
                self.token_count += 1
                yield pending

        self.logger.debug(
            "Tokenization completed", extra={"token_count": self.token_count}
        )

    def _error(self, message: str, offset: int) -> TokenizerError:
        position = self.position_at(min(offset, max(self._length - 1, 0)))
        self.logger.debug(
            "Tokenizer error",
            extra={"state": self.state.name, "offset": offset, "error": message},
        )
        return TokenizerError(message, position)

    def _unexpected_end(self, offset: int) -> TokenizerError:
        construct = self.state.name.lower().replace("_", " ")
        return self._error(f"unexpected end of input in {construct}", offset)

    def _read_text(self) -> Token:
        start = self._pos
        end = self._text.find("<", start)
        if end == -1:
            end = self._length
        self._pos = end
        return Token(
            TokenType.TEXT,
            resolve_entities(self._text[start:end]),
            self.position_at(start),
        )

    def _read_markup(self) -> Token:
        start = self._pos
        self.state = TokenizerState.TAG_OPEN
        if start + 1 >= self._length:
            raise self._unexpected_end(start)

        if self._text.startswith(COMMENT_OPEN, start):
            return self._read_delimited(
                TokenizerState.COMMENT, TokenType.COMMENT,
                len(COMMENT_OPEN), COMMENT_CLOSE,
            )
        if self._text.startswith(CDATA_OPEN, start):
            return self._read_delimited(
                TokenizerState.CDATA, TokenType.TEXT,
                len(CDATA_OPEN), CDATA_CLOSE,
            )

        next_char = self._text[start + 1]
        if next_char == "!":
            return self._read_directive()
        if next_char == "?":
            return self._read_delimited(
                TokenizerState.PROCESSING_INSTRUCTION,
                TokenType.PROCESSING_INSTRUCTION, 2, PI_CLOSE,
            )
        if next_char == "/":
            return self._read_end_tag()
        name_match = _NAME_PATTERN.match(self._text, start + 1)
        if name_match:
            return self._read_start_tag(name_match)
        raise self._error("expected a tag name after '<'", start)

    def _read_delimited(
        self,
        state: TokenizerState,
        token_type: TokenType,
        open_length: int,
        terminator: str,
    ) -> Token:
        start = self._pos
        self.state = state
        content_start = start + open_length
        end = self._text.find(terminator, content_start)
        if end == -1:
            raise self._unexpected_end(start)
        self._pos = end + len(terminator)
        return Token(token_type, self._text[content_start:end], self.position_at(start))

    def _read_directive(self) -> Token:
        start = self._pos
        self.state = TokenizerState.DIRECTIVE
        depth = 0
        index = start + 2
        while index < self._length:
            char = self._text[index]
            if char == "[":
                depth += 1
            elif char == "]":
                depth = max(depth - 1, 0)
            elif char == ">" and depth == 0:
                self._pos = index + 1
                return Token(
                    TokenType.DIRECTIVE,
                    self._text[start + 2:index],
                    self.position_at(start),
                )
            index += 1
        raise self._unexpected_end(start)

    def _skip_whitespace(self) -> None:
        while self._pos < self._length and self._text[self._pos] in _WHITESPACE:
            self._pos += 1

    def _read_end_tag(self) -> Token:
        start = self._pos
        self.state = TokenizerState.END_TAG
        self._pos = start + 2
        match = _NAME_PATTERN.match(self._text, self._pos)
        if not match:
            if self._pos >= self._length:
                raise self._unexpected_end(start)
            raise self._error("malformed end tag: expected a tag name after '</'", start)
        self._pos = match.end()
        self._skip_whitespace()
        if self._pos >= self._length:
            raise self._unexpected_end(start)
        if self._text[self._pos] != ">":
            raise self._error(
                f"malformed end tag </{match.group()}>: unexpected "
                f"{self._text[self._pos]!r}",
                self._pos,
            )
        self._pos += 1
        return Token(TokenType.END, match.group(), self.position_at(start))

    def _read_start_tag(self, match: re.Match) -> Token:
        start = self._pos
        self.state = TokenizerState.START_TAG
        name = match.group()
        self._pos = match.end()
        attributes: List[Tuple[str, str]] = []

        while True:
            had_whitespace = self._pos < self._length and self._text[self._pos] in _WHITESPACE
            self._skip_whitespace()
            if self._pos >= self._length:
                raise self._unexpected_end(start)

            char = self._text[self._pos]
            if char == ">":
                self._pos += 1
                return Token(TokenType.START, name, self.position_at(start), attributes)
            if char == "/":
                if not self._text.startswith("/>", self._pos):
                    if self._pos + 1 >= self._length:
                        raise self._unexpected_end(start)
                    raise self._error(f"malformed start tag <{name}>", self._pos)
                self._pos += 2
                self._pending_end = Token(
                    TokenType.END, name, self.position_at(start)
                )
                return Token(TokenType.START, name, self.position_at(start), attributes)
            if not had_whitespace:
                raise self._error(
                    f"malformed start tag <{name}>: unexpected {char!r}", self._pos
                )
            attributes.append(self._read_attribute(name, start))

    def _read_attribute(self, tag_name: str, tag_start: int) -> Tuple[str, str]:
        match = _NAME_PATTERN.match(self._text, self._pos)
        if not match:
            raise self._error(
                f"malformed attribute in <{tag_name}>: unexpected "
                f"{self._text[self._pos]!r}",
                self._pos,
            )
        attr_name = match.group()
        self._pos = match.end()
        self._skip_whitespace()
        if self._pos >= self._length:
            raise self._unexpected_end(tag_start)
        if self._text[self._pos] != "=":
            raise self._error(
                f"attribute {attr_name!r} in <{tag_name}> has no value", self._pos
            )
        self._pos += 1
        self._skip_whitespace()
        if self._pos >= self._length:
            raise self._unexpected_end(tag_start)

        self.state = TokenizerState.ATTRIBUTE_VALUE
        quote = self._text[self._pos]
        if quote in "\"'":
            end = self._text.find(quote, self._pos + 1)
            if end == -1:
                raise self._unexpected_end(tag_start)
            raw_value = self._text[self._pos + 1:end]
            self._pos = end + 1
        else:
            value_start = self._pos
            while (
                self._pos < self._length
                and self._text[self._pos] not in _WHITESPACE
                and self._text[self._pos] not in "<>"
                and not self._text.startswith("/>", self._pos)
            ):
                self._pos += 1
            raw_value = self._text[value_start:self._pos]
            if not raw_value:
                raise self._error(
                    f"attribute {attr_name!r} in <{tag_name}> has no value",
                    value_start,
                )
        self.state = TokenizerState.START_TAG
        return attr_name, resolve_entities(raw_value)
