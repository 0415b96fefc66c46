#!/usr/bin/env python3
"""
Command-line entry point for forgery.

Either pipe a live run through it, `medusa fuzz | forgery`, or point it at a
saved log, `forgery --file medusa.log`. The reproducers are written to a new
ForgeReproducer test contract, or printed with `--stdout`.
"""

import argparse
import io
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from forgery.config import load_medusa_config
from forgery.contract import write_reproducer_contract
from forgery.errors import ForgeryError
from forgery.parser import TraceParser
from forgery.reader import parse_trace, render_reproducers
from forgery.utils import collect_run_stats, format_run_summary, save_run_stats


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate Foundry reproducer tests from a medusa fuzzing trace.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  medusa fuzz | %(prog)s                    # Parse a live run
  %(prog)s --file medusa.log --stdout       # Print reproducers from a saved log
  %(prog)s --file medusa.log --medusa-config medusa.json
        """,
    )
    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        help="Path to a saved medusa trace. Read from stdin when omitted.",
    )
    parser.add_argument(
        "--medusa-config",
        type=Path,
        help="Path to medusa.json; reproducers inherit and sit next to its compilation target.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Directory for the reproducer contract (default: next to the entry point, or the current directory).",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the reproducer functions instead of writing a contract file.",
    )
    parser.add_argument(
        "--echo",
        action="store_true",
        help="Copy every trace line to stderr while parsing it.",
    )
    parser.add_argument(
        "--stats-file",
        type=Path,
        help="Save run statistics as JSON to this path.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every reproducer and call as it is parsed.",
    )
    return parser


def main() -> None:
    """Parse a trace and write out the reproducers it contains."""
    arg_parser = build_arg_parser()
    args = arg_parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    if args.file is None and sys.stdin.isatty():
        arg_parser.error("no trace to read: pipe medusa's output or pass --file")

    start_time = datetime.now(timezone.utc)
    trace_parser = TraceParser()
    echo = sys.stderr if args.echo else None
    entry_point = None
    output_dir = args.output_dir

    try:
        if args.medusa_config is not None:
            config = load_medusa_config(args.medusa_config)
            entry_point = config.entry_point()
            if output_dir is None:
                output_dir = entry_point.parent
            if config.shrink_limit is not None:
                print(f"[*] medusa shrink limit: {config.shrink_limit}", file=sys.stderr)

        if args.file is not None:
            if not args.file.is_file():
                print(f"Error: Trace file not found at {args.file}", file=sys.stderr)
                sys.exit(1)
            with open(args.file, "r", encoding="utf-8", errors="ignore") as f:
                reproducers = parse_trace(f, echo=echo, parser=trace_parser)
        else:
            # Undecodable bytes are dropped, as for --file.
            if isinstance(sys.stdin, io.TextIOWrapper):
                sys.stdin.reconfigure(encoding="utf-8", errors="ignore")
            reproducers = parse_trace(sys.stdin, echo=echo, parser=trace_parser)

        if not reproducers:
            print("[*] No failing properties found in the trace.", file=sys.stderr)
        elif args.stdout:
            sys.stdout.write(render_reproducers(reproducers))
        else:
            write_reproducer_contract(
                render_reproducers(reproducers),
                output_dir if output_dir is not None else Path.cwd(),
                entry_point,
            )
    except (ForgeryError, OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.__cause__ is not None:
            print(f"  Caused by: {e.__cause__}", file=sys.stderr)
        sys.exit(1)

    stats = collect_run_stats(trace_parser.counters, start_time)
    print(format_run_summary(stats), file=sys.stderr)
    if args.stats_file is not None:
        save_run_stats(stats, args.stats_file)


if __name__ == "__main__":
    main()
