"""Main CLI entry point for the ofx-repair command-line tool.

Commands:
    clean: write the repaired markup of one or more downloads
    parse: repair, bind and summarize one or more statements
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ofx_repair import __version__
from ofx_repair.api import StatementParser
from ofx_repair.binding.model import Document
from ofx_repair.shared import (
    ConfigError,
    OFXRepairError,
    RepairConfig,
    RepairResult,
    configure_logging,
    get_logger,
)

PRESETS = ["default", "compatible", "strict", "lenient"]


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="ofx-repair",
        description="Repair malformed OFX/QFX statement downloads",
    )

    parser.add_argument("--version", action="version", version=__version__)

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output (debug logging)"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )
    parser.add_argument(
        "--preset",
        choices=PRESETS,
        default="default",
        help="Repair configuration preset (default: default)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file (overrides --preset)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Clean command
    clean_parser = subparsers.add_parser("clean", help="Write repaired markup")
    clean_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="OFX files to repair"
    )
    destination = clean_parser.add_mutually_exclusive_group()
    destination.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (single input only, default: stdout)"
    )
    destination.add_argument(
        "--output-dir", "-d",
        type=Path,
        help="Output directory for repaired files"
    )
    clean_parser.add_argument(
        "--suffix",
        default="_repaired",
        help="Suffix for files written to --output-dir (default: _repaired)"
    )

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse and summarize statements")
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="OFX files to parse"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )

    return parser


def load_config(args: argparse.Namespace) -> RepairConfig:
    """Build the repair configuration from --config or --preset."""
    if args.config:
        return RepairConfig.from_json(args.config.read_text())
    return RepairConfig.preset(args.preset)


def cmd_clean(args: argparse.Namespace, config: RepairConfig) -> int:
    """Handle clean command."""
    if args.output and len(args.paths) > 1:
        print("--output accepts a single input file", file=sys.stderr)
        return 1

    parser = StatementParser(config)
    failures = 0
    for path in args.paths:
        try:
            result = parser.repair(path)
        except (OFXRepairError, OSError) as e:
            print(f"Failed to repair {path}: {e}", file=sys.stderr)
            failures += 1
            continue

        if args.output_dir:
            output_path = args.output_dir / f"{path.stem}{args.suffix}{path.suffix}"
        else:
            output_path = args.output

        if output_path is None:
            sys.stdout.buffer.write(result.data + b"\n")
            sys.stdout.flush()
            continue

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(result.data)
        except OSError as e:
            print(f"Error writing {output_path}: {e}", file=sys.stderr)
            failures += 1
            continue
        if not args.quiet:
            print(
                f"Repaired: {path} -> {output_path} "
                f"({result.metrics.repair_count} repairs)",
                file=sys.stderr,
            )

    return 0 if failures == 0 else 1


def format_document(path: Path, document: Document, result: RepairResult) -> List[str]:
    """Render a statement summary as text lines."""
    sign_on = document.sign_on
    lines = [str(path)]
    lines.append(
        f"  Sign-on: code {sign_on.code} ({sign_on.severity or 'n/a'}), "
        f"server date {sign_on.date or 'n/a'}, institution {sign_on.organization or 'n/a'}"
    )
    for index, message_set in enumerate(document.bank_responses, start=1):
        statement = message_set.response.statement
        lines.append(
            f"  Statement {index}: account {statement.account_id or 'n/a'} "
            f"({statement.account_type or 'n/a'}), {statement.currency or 'n/a'}, "
            f"{statement.start_date or '?'} - {statement.end_date or '?'}"
        )
        lines.append(
            f"    Ledger balance: {statement.ledger_balance.amount}, "
            f"available: {statement.available_balance.amount}"
        )
        for txn in statement.transactions:
            txn_type = txn.type.value if txn.type else "-"
            lines.append(
                f"    {txn.posted[:8]:<8}  {txn_type:<11} {txn.amount:>12}  "
                f"{txn.name or txn.payee or txn.memo}"
            )
    lines.append(
        f"  Transactions: {document.transaction_count}, "
        f"repairs: {result.metrics.repair_count}, warnings: {len(result.warnings)}"
    )
    return lines


def cmd_parse(args: argparse.Namespace, config: RepairConfig) -> int:
    """Handle parse command."""
    parser = StatementParser(config)
    results: List[Dict[str, Any]] = []
    text_lines: List[str] = []

    for path in args.paths:
        try:
            result, document = parser.parse_detailed(path)
        except (OFXRepairError, OSError) as e:
            results.append({"file": str(path), "success": False, "error": str(e)})
            text_lines.append(f"{path}\n  Error: {e}")
            continue

        results.append({
            "file": str(path),
            "success": True,
            "document": document.to_dict(),
            "repair": result.summary(),
        })
        text_lines.extend(format_document(path, document, result))

    if args.format == "json":
        print(json.dumps(results, indent=2))
    else:
        print("\n".join(text_lines))

    return 0 if all(entry["success"] for entry in results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args)
    except (ConfigError, OSError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    # Set up logging verbosity
    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.global_.logging_level)

    logger = get_logger(__name__, None, "cli")
    logger.debug(
        "Running command",
        extra={"command": args.command, "preset": config.name or args.preset},
    )

    # Route to appropriate command handler
    try:
        if args.command == "clean":
            return cmd_clean(args, config)
        if args.command == "parse":
            return cmd_parse(args, config)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
