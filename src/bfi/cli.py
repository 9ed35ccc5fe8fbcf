from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .api import RunOptions, compile_string, run_program
from .errors import BFInternalError, BFParseError
from .parser import Program

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARSE_ERROR = 1
EXIT_HALTED = 3
EXIT_INTERNAL = 70

_EOF_VALUES = {'zero': 0, 'keep': None, 'max': 255}


def init_logging(verbosity: int = 0) -> None:
    """Send log records to stderr. 0 = warnings, 1 = info, 2+ = debug."""
    if verbosity >= 2:
        lvl = logging.DEBUG
    elif verbosity == 1:
        lvl = logging.INFO
    else:
        lvl = logging.WARNING

    # no-op when the root logger is already configured by an embedding program
    logging.basicConfig(stream=sys.stderr, format="%(levelname)5s %(message)s")
    logging.getLogger("bfi").setLevel(lvl)


def format_program(program: Program) -> str:
    lines: List[str] = []
    for idx, ins in enumerate(program):
        target = getattr(ins, 'target', None)
        repeat = getattr(ins, 'repeat', 1)
        if target is not None:
            detail = f" -> {target}"
        elif repeat > 1:
            detail = f" x{repeat}"
        else:
            detail = ""
        lines.append(f"{idx:6d}  @{ins.offset:<6d} {ins.char}{detail}")
    return "\n".join(lines)


def format_tape(cells: bytes, cursor: int, *, width: int = 8) -> str:
    rows: List[str] = []
    for start in range(0, len(cells), width):
        parts = []
        for i, value in enumerate(cells[start:start + width], start):
            parts.append(f"[{value:3d}]" if i == cursor else f" {value:3d} ")
        rows.append(f"{start:6d}: " + "".join(parts))
    return "\n".join(rows)


def _non_negative(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {n}")
    return n


def _stdout_sink(byte: int) -> None:
    out = sys.stdout.buffer
    out.write(bytes((byte,)))
    if byte == 10:
        out.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfi",
        description="Reference interpreter for the eight-instruction tape language.",
    )
    parser.add_argument("file", nargs="?", help="program file ('-' reads the program from stdin)")
    parser.add_argument("-e", "--eval", dest="code", help="program text given on the command line")
    parser.add_argument("--input", help="input bytes for ',' (default: read from stdin)")
    parser.add_argument("--eof", choices=sorted(_EOF_VALUES), default="zero",
                        help="value stored by ',' once input is exhausted (keep = leave cell unchanged)")
    parser.add_argument("--max-steps", type=_non_negative, default=None, help="halt after this many instructions")
    parser.add_argument("--max-tape", type=_non_negative, default=None, help="halt if the tape would grow past this many cells")
    parser.add_argument("--no-coalesce", action="store_true", help="do not fold runs of + - < > into one instruction")
    parser.add_argument("--show-program", action="store_true", help="print the resolved instruction stream to stderr")
    parser.add_argument("--dump-tape", action="store_true", help="print the final tape to stderr")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="more logging (-vv for debug)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    init_logging(args.verbose)

    if args.code is not None and args.file is not None:
        parser.error("give either a program file or --eval, not both")
    if args.code is None and args.file is None:
        parser.error("a program file or --eval is required")

    program_from_stdin = False
    if args.code is not None:
        source = args.code
    elif args.file == "-":
        source = sys.stdin.read()
        program_from_stdin = True
    else:
        try:
            with open(args.file, "r", encoding="utf-8") as f:
                source = f.read()
        except FileNotFoundError:
            print(f"Couldn't find file: {args.file}", file=sys.stderr)
            return EXIT_PARSE_ERROR
        except (OSError, UnicodeDecodeError) as e:
            print(f"Couldn't read {args.file}: {e}", file=sys.stderr)
            return EXIT_PARSE_ERROR

    options = RunOptions(
        coalesce=not args.no_coalesce,
        eof_value=_EOF_VALUES[args.eof],
        max_steps=args.max_steps,
        max_tape_cells=args.max_tape,
    )

    try:
        program = compile_string(source, options=options)
    except BFParseError as e:
        print(e, file=sys.stderr)
        return EXIT_PARSE_ERROR

    logger.info("parsed %d instructions from %d characters", len(program), len(source))
    if args.show_program:
        print(format_program(program), file=sys.stderr)

    if args.input is not None:
        input_source = args.input
    elif program_from_stdin:
        input_source = None
    else:
        input_source = sys.stdin.buffer

    try:
        result = run_program(program, input=input_source, output=_stdout_sink, options=options)
    except BFInternalError as e:
        logger.error("internal error: %s", e)
        return EXIT_INTERNAL
    finally:
        sys.stdout.buffer.flush()

    logger.info("executed %d steps, %d output bytes", result.steps, len(result.output))
    if args.dump_tape:
        print(format_tape(result.tape, result.cursor), file=sys.stderr)

    if result.halted:
        print(f"Execution halted: {result.stop_reason.value} after {result.steps} steps", file=sys.stderr)
        return EXIT_HALTED
    return EXIT_OK
