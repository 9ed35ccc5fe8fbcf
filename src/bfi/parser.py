from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import (
    BFInternalError,
    UnmatchedCloseBracketError,
    UnmatchedOpenBracketError,
    make_parse_error,
)
from .lexer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)


# ---------------- Instructions ----------------
@dataclass(frozen=True)
class Increase:
    repeat: int = 1
    offset: int = 0
    char: ClassVar[str] = '+'


@dataclass(frozen=True)
class Decrease:
    repeat: int = 1
    offset: int = 0
    char: ClassVar[str] = '-'


@dataclass(frozen=True)
class MoveLeft:
    repeat: int = 1
    offset: int = 0
    char: ClassVar[str] = '<'


@dataclass(frozen=True)
class MoveRight:
    repeat: int = 1
    offset: int = 0
    char: ClassVar[str] = '>'


@dataclass(frozen=True)
class Input:
    offset: int = 0
    char: ClassVar[str] = ','


@dataclass(frozen=True)
class Output:
    offset: int = 0
    char: ClassVar[str] = '.'


@dataclass(frozen=True)
class LoopBegin:
    target: int  # index of the matching LoopEnd
    offset: int = 0
    char: ClassVar[str] = '['


@dataclass(frozen=True)
class LoopEnd:
    target: int  # index of the matching LoopBegin
    offset: int = 0
    char: ClassVar[str] = ']'


Instruction = Union[Increase, Decrease, MoveLeft, MoveRight, Input, Output, LoopBegin, LoopEnd]
REPEATABLE = (Increase, Decrease, MoveLeft, MoveRight)

_REPEATABLE_KINDS = {
    TokenKind.INCREASE: Increase,
    TokenKind.DECREASE: Decrease,
    TokenKind.MOVE_LEFT: MoveLeft,
    TokenKind.MOVE_RIGHT: MoveRight,
}


@dataclass(frozen=True)
class Program:
    instructions: Tuple[Instruction, ...]
    source: str = ''

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, idx: int) -> Instruction:
        return self.instructions[idx]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def to_source(self) -> str:
        """Canonical program text: comments stripped, repeats expanded."""
        out: List[str] = []
        for ins in self.instructions:
            out.append(ins.char * getattr(ins, 'repeat', 1))
        return ''.join(out)


# ---------------- Parser: tokens -> Program ----------------
def _group(tokens: Sequence[Token], coalesce: bool) -> List[Tuple[Token, int]]:
    """Drop comments and, if asked, fold runs of identical arithmetic/move tokens."""
    out: List[Tuple[Token, int]] = []
    for tok in tokens:
        if tok.kind is TokenKind.COMMENT:
            continue
        if coalesce and tok.kind in _REPEATABLE_KINDS and out and out[-1][0].kind is tok.kind:
            first, count = out[-1]
            out[-1] = (first, count + 1)
            continue
        out.append((tok, 1))
    return out


def parse(tokens: Sequence[Token], *, coalesce: bool = True, source: Optional[str] = None) -> Program:
    """
    Resolve a token stream into a jump-annotated Program.

    Brackets are paired in one left-to-right pass with a stack of pending
    LoopBegin indices. Targets are indices into the instruction stream, not
    source offsets. Raises UnmatchedCloseBracketError on a ']' with nothing to
    close and UnmatchedOpenBracketError if a '[' is still open at the end; no
    partial program is ever returned.
    """
    if source is None:
        source = ''.join(t.char for t in tokens)

    grouped = _group(tokens, coalesce)

    stack: List[int] = []
    targets: List[Optional[int]] = [None] * len(grouped)
    for idx, (tok, _count) in enumerate(grouped):
        if tok.kind is TokenKind.LOOP_BEGIN:
            stack.append(idx)
        elif tok.kind is TokenKind.LOOP_END:
            if not stack:
                raise make_parse_error(
                    UnmatchedCloseBracketError,
                    message="Unmatched ']'",
                    source=source,
                    offset=tok.offset,
                )
            begin = stack.pop()
            targets[begin] = idx
            targets[idx] = begin

    if stack:
        tok = grouped[stack[-1]][0]
        raise make_parse_error(
            UnmatchedOpenBracketError,
            message="Unmatched '['",
            source=source,
            offset=tok.offset,
        )

    instructions: List[Instruction] = []
    for idx, (tok, count) in enumerate(grouped):
        kind = tok.kind
        if kind in _REPEATABLE_KINDS:
            instructions.append(_REPEATABLE_KINDS[kind](repeat=count, offset=tok.offset))
        elif kind is TokenKind.INPUT:
            instructions.append(Input(offset=tok.offset))
        elif kind is TokenKind.OUTPUT:
            instructions.append(Output(offset=tok.offset))
        elif kind is TokenKind.LOOP_BEGIN:
            instructions.append(LoopBegin(target=targets[idx], offset=tok.offset))
        else:
            instructions.append(LoopEnd(target=targets[idx], offset=tok.offset))

    logger.debug(
        "parsed %d instructions from %d characters (coalesce=%s)",
        len(instructions), len(tokens), coalesce,
    )
    return Program(instructions=tuple(instructions), source=source)


def parse_string(source: str, *, coalesce: bool = True) -> Program:
    return parse(tokenize(source), coalesce=coalesce, source=source)


def check_pairing(instructions: Sequence[Instruction]) -> None:
    """Raise BFInternalError unless every loop instruction points at its nesting partner."""
    stack: List[int] = []
    n = len(instructions)
    for idx, ins in enumerate(instructions):
        if isinstance(ins, REPEATABLE):
            if ins.repeat < 1:
                raise BFInternalError(message=f"Instruction {idx} has repeat {ins.repeat}", index=idx)
        elif isinstance(ins, LoopBegin):
            if not isinstance(ins.target, int) or not idx < ins.target < n:
                raise BFInternalError(message=f"LoopBegin {idx} has unresolved target {ins.target!r}", index=idx)
            stack.append(idx)
        elif isinstance(ins, LoopEnd):
            if not stack:
                raise BFInternalError(message=f"LoopEnd {idx} closes no loop", index=idx)
            begin = stack.pop()
            if ins.target != begin or instructions[begin].target != idx:
                raise BFInternalError(
                    message=f"Loop pair {begin}/{idx} is cross-linked (targets {instructions[begin].target}/{ins.target})",
                    index=idx,
                )
        elif not isinstance(ins, (Input, Output)):
            raise BFInternalError(message=f"Unknown instruction {ins!r} at {idx}", index=idx)
    if stack:
        raise BFInternalError(message=f"LoopBegin {stack[-1]} is never closed", index=stack[-1])
