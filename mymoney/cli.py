"""
cli.py - Command-line entry point

Run:
    mymoney input.txt          # batch: run every line, print each output
    mymoney - < input.txt      # read commands from stdin
    mymoney --shell            # interactive prompt
    python -m mymoney input.txt
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional, TextIO

from .commands import CommandProcessor
from .engine import PortfolioLedger

EXIT_COMMANDS = {"EXIT", "QUIT"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mymoney",
        description="Simulate a portfolio over one year of ALLOCATE/SIP/CHANGE/BALANCE/REBALANCE commands.",
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        help="File of commands, one per line ('-' for stdin)",
    )
    parser.add_argument("--shell", action="store_true", help="Run an interactive prompt")
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Print ledger diagnostics to stderr",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true",
        help="Do not report rejected commands",
    )
    return parser


def run_batch(processor: CommandProcessor, lines, out: TextIO) -> None:
    for result in processor.process_lines(lines):
        if result is not None:
            print(result, file=out)


def run_shell(processor: CommandProcessor, stdin: TextIO, out: TextIO) -> None:
    """Read commands until EOF or EXIT/QUIT, printing each output."""
    print("Switching to SHELL mode (EXIT to quit)", file=out)
    while True:
        print("> ", end="", file=out, flush=True)
        line = stdin.readline()
        if not line or line.strip().upper() in EXIT_COMMANDS:
            break
        if not line.strip():
            continue
        result = processor.process(line)
        if result is not None:
            print(result, file=out)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.shell == bool(args.input_file):
        parser.error("specify exactly one of INPUT_FILE or --shell")

    ledger = PortfolioLedger(verbose=args.verbose)
    processor = CommandProcessor(ledger, verbose=not args.quiet)

    if args.shell:
        run_shell(processor, sys.stdin, sys.stdout)
        return 0
    if args.input_file == "-":
        run_batch(processor, sys.stdin, sys.stdout)
        return 0
    try:
        outputs = processor.process_file(args.input_file)
    except OSError as e:
        print(f"Invalid input file: {e}", file=sys.stderr)
        return 1
    for output in outputs:
        print(output)
    return 0


if __name__ == "__main__":  # pragma: no cover - thin CLI wrapper
    sys.exit(main())
