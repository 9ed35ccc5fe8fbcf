from .lexer import Token, TokenKind, tokenize
from .parser import Instruction, Program, parse, parse_string
from .tape import Tape
from .engine import ExecutionResult, Interpreter, StopReason, execute
from .errors import (
    BFError,
    BFInternalError,
    BFParseError,
    UnmatchedCloseBracketError,
    UnmatchedOpenBracketError,
)
from .api import RunOptions, RunResult, compile_string, run_file, run_program, run_string

__all__ = [
    'Token',
    'TokenKind',
    'tokenize',
    'Instruction',
    'Program',
    'parse',
    'parse_string',
    'Tape',
    'Interpreter',
    'ExecutionResult',
    'StopReason',
    'execute',
    'BFError',
    'BFParseError',
    'BFInternalError',
    'UnmatchedOpenBracketError',
    'UnmatchedCloseBracketError',
    'RunOptions',
    'RunResult',
    'compile_string',
    'run_program',
    'run_string',
    'run_file',
]
