from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List


class TokenKind(Enum):
    INCREASE = '+'
    DECREASE = '-'
    MOVE_LEFT = '<'
    MOVE_RIGHT = '>'
    INPUT = ','
    OUTPUT = '.'
    LOOP_BEGIN = '['
    LOOP_END = ']'
    COMMENT = ''


_KINDS: Dict[str, TokenKind] = {k.value: k for k in TokenKind if k is not TokenKind.COMMENT}


@dataclass(frozen=True)
class Token:
    offset: int  # character index in the source
    kind: TokenKind
    char: str

    @property
    def is_instruction(self) -> bool:
        return self.kind is not TokenKind.COMMENT


def classify(ch: str) -> TokenKind:
    return _KINDS.get(ch, TokenKind.COMMENT)


def tokenize(source: str) -> List[Token]:
    """One token per character of ``source``, in order. Never fails."""
    return [Token(offset=i, kind=classify(ch), char=ch) for i, ch in enumerate(source)]


def to_source(tokens: Iterable[Token]) -> str:
    """Concatenate the instruction characters of ``tokens``; comments are dropped."""
    return ''.join(t.kind.value for t in tokens)
