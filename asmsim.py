#!/usr/bin/env python3
"""
asmsim — run a program on the assembly simulator

Usage:
    python asmsim.py <program.asm> [--max-steps N] [--trace] [--dump]
                                   [--tokens | --labels | --listing | --check]
                                   [-v] [-q] [--log-file PATH]

PRINT output goes to stdout, one integer per line. Diagnostics and logs
go to stderr.

Exit codes:
    0   halted (EXIT, or ran past the last line)
    1   simulator error (load, label, decode or run-time)
    2   internal error
    3   step limit reached (--max-steps)

Examples:
    python asmsim.py examples/sum.asm
    python asmsim.py loop.asm --max-steps 1000 --trace
    python asmsim.py prog.asm --listing
"""

import argparse
import logging
import sys
import os
from pathlib import Path

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from asm_simulator import __version__
from asm_simulator.errors import SimulatorError
from asm_simulator.executor import DEFAULT_MAX_STEPS, Executor, StopReason
from asm_simulator.labels import build_label_table
from asm_simulator.lexer import tokenize_line
from asm_simulator.listing import check_program, get_listing
from asm_simulator.loader import load_program

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERNAL = 2
EXIT_TIMEOUT = 3

logger = logging.getLogger("asmsim")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asmsim",
        description="Line-oriented assembly simulator",
        epilog="Exit codes: 0 halted, 1 simulator error, 2 internal error, 3 step limit",
    )
    parser.add_argument("program", help="Program source file")
    parser.add_argument("--max-steps", type=int, default=DEFAULT_MAX_STEPS,
                        help=f"Instruction budget, 0 = unlimited (default: {DEFAULT_MAX_STEPS})")
    parser.add_argument("--trace", action="store_true",
                        help="Print an execution trace to stderr after the run")
    parser.add_argument("--dump", action="store_true",
                        help="Print final registers and stack to stderr")

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--tokens", action="store_true",
                       help="Dump the token stream of every line and exit (debug)")
    modes.add_argument("--labels", action="store_true",
                       help="Dump the label table and exit (debug)")
    modes.add_argument("--listing", action="store_true",
                       help="Print a decoded listing of every line and exit")
    modes.add_argument("--check", action="store_true",
                       help="Decode every line without running, report errors")

    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log errors")
    parser.add_argument("--log-file", type=str,
                        help="Also write a debug log to this file")
    parser.add_argument("--version", action="version",
                        version=f"asmsim {__version__}")
    return parser


def setup_logging(args):
    """Configure logging from -v / -q / --log-file.

    The console handler writes to stderr; stdout carries PRINT output.
    """
    if args.quiet:
        level = logging.ERROR
    elif args.verbose == 0:
        level = logging.WARNING
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    handlers.append(console)

    if args.log_file:
        log_path = Path(args.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if args.log_file else level,
        handlers=handlers,
        force=True
    )


def format_error(e: SimulatorError) -> str:
    """Human-readable error: kind, failing line, and the line itself."""
    if e.line_num:
        msg = f"{e.kind} at line {e.line_num}: {e.message}"
        if e.line_text.strip():
            msg += f"\n    > {e.line_text.strip()}"
        return msg
    return f"{e.kind}: {e.message}"


def _print_value(value: int):
    sys.stdout.write(f"{value}\n")


def _dump_tokens(lines):
    for index, line in enumerate(lines):
        tokens = tokenize_line(line, index + 1)
        if tokens:
            print(f"{index + 1:5d}  " + " ".join(repr(t) for t in tokens))


def _dump_labels(lines):
    for name, index in sorted(build_label_table(lines).items(), key=lambda kv: kv[1]):
        print(f"@{name:16s} line {index + 1}")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args)

    try:
        lines = load_program(args.program)
        logger.info("Loaded %s (%d lines)", args.program, len(lines))

        if args.tokens:
            _dump_tokens(lines)
            return EXIT_OK

        if args.labels:
            _dump_labels(lines)
            return EXIT_OK

        if args.listing:
            print(get_listing(lines))
            return EXIT_OK

        if args.check:
            errors = check_program(lines)
            for e in errors:
                print(format_error(e), file=sys.stderr)
            if errors:
                return EXIT_ERROR
            print(f"{args.program}: OK ({len(lines)} lines)", file=sys.stderr)
            return EXIT_OK

        executor = Executor(lines, sink=_print_value)
        executor.enable_trace(args.trace)
        reason = executor.run(max_steps=args.max_steps)
        sys.stdout.flush()

        if args.trace:
            print(executor.get_trace(), file=sys.stderr)
        if args.dump:
            print(executor.machine.display(), file=sys.stderr)

        if reason is StopReason.ERROR:
            logger.error("Execution failed after %d step(s)", executor.machine.steps)
            print(format_error(executor.error), file=sys.stderr)
            return EXIT_ERROR

        if reason is StopReason.TIMEOUT:
            print(f"Step limit reached: {args.max_steps} instruction(s) executed "
                  f"without halting (ip={executor.machine.ip})", file=sys.stderr)
            return EXIT_TIMEOUT

        return EXIT_OK

    except SimulatorError as e:
        print(format_error(e), file=sys.stderr)
        return EXIT_ERROR
    except Exception as e:
        print(f"Internal simulator error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_INTERNAL


def cli_entry():
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
