"""Tests for the exception hierarchy."""

from ofx_repair.shared.errors import (
    AmbiguousClosingTagsError,
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
from ofx_repair.tokenization.tokenizer import TokenPosition


class TestRepairErrors:
    """Test messages and hierarchy of the repair errors."""

    def test_hierarchy(self):
        for error_type in (
            MissingRootTagError, OrphanedTextError, AmbiguousClosingTagsError,
            TokenizerError, InputTooLargeError,
        ):
            assert issubclass(error_type, RepairError)
        assert issubclass(UnmatchedClosingTagError, AmbiguousClosingTagsError)
        assert issubclass(RepairError, OFXRepairError)
        assert issubclass(DocumentBindingError, OFXRepairError)
        assert not issubclass(DocumentBindingError, RepairError)

    def test_missing_root(self):
        error = MissingRootTagError("OFX")
        assert str(error) == "invalid file, <OFX> tag not found"
        assert error.root_tag == "OFX"

    def test_orphaned_text_with_position(self):
        error = OrphanedTextError("foo", TokenPosition(3, 7, 40))
        assert str(error) == "charData(foo) missing start and end tags (line 3, column 7)"
        assert error.message == "charData(foo) missing start and end tags"
        assert error.text == "foo"

    def test_ambiguous_closing_tags(self):
        error = AmbiguousClosingTagsError("bar", "CODE", "SEVERITY")
        assert str(error) == "charData(bar) has ambiguous closing tags"
        assert (error.pending_tag, error.closing_tag) == ("CODE", "SEVERITY")

    def test_unmatched_closing_tag(self):
        error = UnmatchedClosingTagError("MEMO")
        assert str(error) == "closing tag </MEMO> has no matching start tag"
        assert error.pending_tag is None

    def test_input_too_large(self):
        error = InputTooLargeError(2048, 1024)
        assert str(error) == "input of 2048 bytes exceeds the limit of 1024 bytes"
        assert (error.size, error.limit) == (2048, 1024)

    def test_empty_stack(self):
        assert str(EmptyStackError()) == "popping from empty stack"
