from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Type, TypeVar


def _line_and_column(source: str, offset: int) -> Tuple[int, int]:
    offset = max(0, min(offset, len(source)))
    line = source.count('\n', 0, offset) + 1
    line_start = source.rfind('\n', 0, offset) + 1
    return line, offset - line_start + 1


def _build_context(lines: List[str], line_no_1: int, column_1: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            out.append(f"       | {' ' * (column_1 - 1)}^")
    return "\n".join(out)


def _hint_for(message: str) -> Optional[str]:
    msg = message.lower()
    if "unmatched '['" in msg:
        return 'Every "[" needs a "]" later in the program. Check the innermost loop first.'
    if "unmatched ']'" in msg:
        return 'This "]" closes a loop that was never opened. Remove it or add a "[" before it.'
    return None


@dataclass
class BFError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class BFParseError(BFError):
    offset: int
    line: int
    column: int
    context: str


@dataclass
class UnmatchedOpenBracketError(BFParseError):
    pass


@dataclass
class UnmatchedCloseBracketError(BFParseError):
    pass


@dataclass
class BFInternalError(BFError):
    """Raised when a resolved instruction stream breaks the loop pairing invariant.

    This never happens for a program produced by the parser; seeing it means the
    stream was built or modified by hand.
    """

    index: int = -1


E = TypeVar('E', bound=BFParseError)


def make_parse_error(cls: Type[E], *, message: str, source: str, offset: int) -> E:
    line, column = _line_and_column(source, offset)
    lines = source.split('\n')
    ctx = _build_context(lines, line, column)
    hint = _hint_for(message)
    hint_block = f"\nHint: {hint}" if hint else ""
    return cls(
        message=f"ParseError: {message} (line {line}, column {column})\n{ctx}{hint_block}",
        offset=offset,
        line=line,
        column=column,
        context=ctx,
    )
