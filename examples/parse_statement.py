#!/usr/bin/env python3
"""
Quick start for OFX Repair.

Repairs a typical OFX 1.x download (leaf close tags omitted, SGML header
in front of the root) and walks the bound statement.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ofx_repair import RepairConfig, RepairError, StatementParser, repair

DOWNLOAD = b"""OFXHEADER:100
DATA:OFXSGML
VERSION:102
ENCODING:USASCII
CHARSET:1252

<OFX>
<SIGNONMSGSRSV1><SONRS>
    <STATUS><CODE>0<SEVERITY>INFO</STATUS>
    <DTSERVER>20190923042445<LANGUAGE>ENG
    <FI><ORG>Test Bank</ORG><FID>123</FID></FI>
</SONRS></SIGNONMSGSRSV1>
<BANKMSGSRSV1><STMTTRNRS>
    <TRNUID>0
    <STATUS><CODE>0<SEVERITY>INFO</STATUS>
    <STMTRS>
        <CURDEF>USD
        <BANKACCTFROM><BANKID>456<ACCTID>789<ACCTTYPE>CREDITLINE</BANKACCTFROM>
        <BANKTRANLIST>
            <DTSTART>20190101120000.000[0:GMT]<DTEND>20190131120000.000[0:GMT]
            <STMTTRN><TRNTYPE>DEBIT<DTPOSTED>20190119090000<TRNAMT>-20.96<FITID>20190119090001<NAME>Sample Expense</STMTTRN>
            <STMTTRN><TRNTYPE>DEBIT<DTPOSTED>20191115090000<TRNAMT>-115.26<FITID>20190122090002<NAME>Another Expense</STMTTRN>
        </BANKTRANLIST>
        <LEDGERBAL>
            <BALAMT>315.50<DTASOF>20190131120000.000[0:GMT]
        </LEDGERBAL>
        <AVAILBAL>
            <BALAMT>315.50<DTASOF>20190131120000.000[-7:GMT]
        </AVAILBAL>
    </STMTRS>
</STMTTRNRS></BANKMSGSRSV1>
</OFX>
"""


def show_repair():
    """Print the balanced markup produced by the repair pass."""
    print("🔧 Repaired markup")
    print("-" * 30)
    print(repair(DOWNLOAD).decode("utf-8"))


def show_statement():
    """Parse the download and print the statement it contains."""
    print("\n📄 Statement")
    print("-" * 30)

    parser = StatementParser()
    result, document = parser.parse_detailed(DOWNLOAD)

    sign_on = document.sign_on
    print(f"Institution: {sign_on.organization} ({sign_on.organization_id})")
    print(f"Server status: {sign_on.code} {sign_on.severity}")

    for message_set in document.bank_responses:
        statement = message_set.response.statement
        print(f"Account {statement.account_id} at bank {statement.bank_id} "
              f"({statement.account_type}, {statement.currency})")
        for txn in statement.transactions:
            posted = txn.posted_at().date()
            print(f"  {posted}  {txn.type.value:<6} {txn.amount:>10}  {txn.name}")
        print(f"  Ledger balance: {statement.ledger_balance.amount}")

    print(f"\nTransactions: {document.transaction_count}")
    print(f"Encoding: {result.encoding}, repairs applied: {result.metrics.repair_count}")


def show_strictness():
    """Show how presets change the handling of questionable input."""
    print("\n⚠️  Presets")
    print("-" * 30)

    stray_close = b"<OFX><CODE>0</CODE></MEMO></OFX>"
    result = StatementParser().repair(stray_close)
    for entry in result.warnings:
        print(f"default: {entry.message}")

    try:
        StatementParser(RepairConfig.strict()).repair(stray_close)
    except RepairError as e:
        print(f"strict: {type(e).__name__}: {e}")


if __name__ == "__main__":
    show_repair()
    show_statement()
    show_strictness()
