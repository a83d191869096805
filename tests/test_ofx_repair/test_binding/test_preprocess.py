"""Tests for the vendor-defect fix-ups."""

from ofx_repair.binding.preprocess import preprocess


class TestPreprocess:
    """Test byte-level fix-ups applied before repair."""

    def test_missing_account_start_tag_is_inserted(self):
        data = b"<CURDEF>USD</CURDEF>\n  <BANKID>456</BANKID><ACCTID>789</ACCTID></BANKACCTFROM>"
        assert preprocess(data) == (
            b"<CURDEF>USD</CURDEF>\n  <BANKACCTFROM><BANKID>456</BANKID>"
            b"<ACCTID>789</ACCTID></BANKACCTFROM>"
        )

    def test_well_formed_input_is_unchanged(self):
        data = b"<CURDEF>USD</CURDEF>\n<BANKACCTFROM><BANKID>456</BANKID>"
        assert preprocess(data) == data

    def test_adjacent_tags_are_unchanged(self):
        data = b"<CURDEF>USD</CURDEF><BANKID>456"
        assert preprocess(data) == data
