from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence, Union

from .errors import BFInternalError
from .parser import (
    Decrease,
    Increase,
    Input,
    Instruction,
    LoopBegin,
    LoopEnd,
    MoveLeft,
    MoveRight,
    Output,
    check_pairing,
)
from .tape import Tape, TapeLimitExceeded

logger = logging.getLogger(__name__)

InputSource = Union[bytes, bytearray, str, Iterable[int], Any]
OutputSink = Union[Callable[[int], Any], Any]


class StopReason(Enum):
    FINISHED = 'finished'
    STEP_LIMIT = 'step_limit'
    TAPE_LIMIT = 'tape_limit'


@dataclass(frozen=True)
class ExecutionResult:
    tape: Tape
    output: bytes
    steps: int
    stop_reason: StopReason

    @property
    def cells(self) -> bytes:
        return self.tape.snapshot()

    @property
    def halted(self) -> bool:
        """True when a resource cap stopped the run before the program ended."""
        return self.stop_reason is not StopReason.FINISHED


def _make_reader(source: Optional[InputSource]) -> Callable[[], Optional[int]]:
    """Return a callable producing the next input byte, or None once input is exhausted."""
    if source is None:
        return lambda: None

    if isinstance(source, str):
        source = source.encode('utf-8')

    if hasattr(source, 'read'):
        # text streams hand out characters; queue their encoded bytes
        pending = bytearray()

        def read_stream() -> Optional[int]:
            if not pending:
                chunk = source.read(1)
                if not chunk:
                    return None
                if isinstance(chunk, str):
                    chunk = chunk.encode('utf-8')
                pending.extend(chunk)
            return pending.pop(0)
        return read_stream

    it: Iterator[int] = iter(source)

    def read_iter() -> Optional[int]:
        return next(it, None)
    return read_iter


def _make_writer(sink: Optional[OutputSink]) -> Optional[Callable[[int], Any]]:
    if sink is None:
        return None
    if hasattr(sink, 'write'):
        return lambda b: sink.write(bytes((b,)))
    if callable(sink):
        return sink
    raise TypeError(f"output sink must be callable or have write(), got {type(sink).__name__}")


class Interpreter:
    """
    Fetch-decode-execute loop over a resolved instruction stream.

    State is (tape, cursor, instruction pointer); the cursor lives on the tape.
    Every Output byte is handed to the sink as soon as it is produced and is
    also collected for the result. ``max_steps`` and ``max_tape_cells`` are
    harness caps: breaching one stops the run with a halt reason, it is not an
    error.
    """

    def __init__(
        self,
        program: Sequence[Instruction],
        *,
        tape: Optional[Tape] = None,
        input: Optional[InputSource] = None,
        output: Optional[OutputSink] = None,
        eof_value: Optional[int] = 0,
        max_steps: Optional[int] = None,
        max_tape_cells: Optional[int] = None,
    ):
        check_pairing(program)
        self.program = program
        self.tape = tape if tape is not None else Tape()
        self.max_tape_cells = max_tape_cells
        self.ip = 0
        self.steps = 0
        self.output = bytearray()
        self.eof_value = None if eof_value is None else eof_value & 0xFF
        self.max_steps = max_steps
        self.stop_reason: Optional[StopReason] = None
        self._read = _make_reader(input)
        self._write = _make_writer(output)

    @property
    def finished(self) -> bool:
        return self.ip >= len(self.program)

    def step(self) -> bool:
        """
        Execute one instruction.

        Returns False once the run is over: the program ended or a cap was hit.
        ``stop_reason`` says which. A halted interpreter stays halted.
        """
        if self.stop_reason is not None:
            return False
        if self.ip >= len(self.program):
            self.stop_reason = StopReason.FINISHED
            return False
        if self.max_steps is not None and self.steps >= self.max_steps:
            self.stop_reason = StopReason.STEP_LIMIT
            logger.debug("halted at instruction %d: step limit %d", self.ip, self.max_steps)
            return False

        ins = self.program[self.ip]
        tape = self.tape

        if isinstance(ins, Increase):
            tape.increase(ins.repeat)
        elif isinstance(ins, Decrease):
            tape.decrease(ins.repeat)
        elif isinstance(ins, (MoveRight, MoveLeft)):
            move = tape.move_right if isinstance(ins, MoveRight) else tape.move_left
            try:
                move(ins.repeat, limit=self.max_tape_cells)
            except TapeLimitExceeded as e:
                self.stop_reason = StopReason.TAPE_LIMIT
                logger.debug("halted at instruction %d: %s", self.ip, e)
                return False
        elif isinstance(ins, Output):
            value = tape.get()
            self.output.append(value)
            if self._write is not None:
                self._write(value)
        elif isinstance(ins, Input):
            value = self._read()
            if value is None:
                value = self.eof_value
            if value is not None:
                tape.set(value)
        elif isinstance(ins, LoopBegin):
            if tape.get() == 0:
                self.ip = self._jump(ins.target)
        elif isinstance(ins, LoopEnd):
            if tape.get() != 0:
                self.ip = self._jump(ins.target)
        else:
            raise BFInternalError(message=f"Unknown instruction {ins!r} at {self.ip}", index=self.ip)

        self.ip += 1
        self.steps += 1
        return True

    def _jump(self, target: Optional[int]) -> int:
        if target is None or not 0 <= target < len(self.program):
            raise BFInternalError(message=f"Unresolved jump target {target!r} at {self.ip}", index=self.ip)
        return target

    def run(self) -> ExecutionResult:
        while self.step():
            pass

        reason = self.stop_reason
        logger.debug(
            "run %s: %d steps, %d output bytes, %d tape cells",
            reason.value, self.steps, len(self.output), len(self.tape),
        )
        return ExecutionResult(
            tape=self.tape,
            output=bytes(self.output),
            steps=self.steps,
            stop_reason=reason,
        )


def execute(program: Sequence[Instruction], tape: Optional[Tape] = None, **kwargs) -> ExecutionResult:
    """Run ``program`` against ``tape`` (a fresh one if omitted) and return the final state."""
    return Interpreter(program, tape=tape, **kwargs).run()
