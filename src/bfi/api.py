from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .engine import InputSource, Interpreter, OutputSink, StopReason
from .parser import Program, parse_string


@dataclass(frozen=True)
class RunOptions:
    coalesce: bool = True
    eof_value: Optional[int] = 0  # None leaves the cell unchanged at end of input
    max_steps: Optional[int] = None
    max_tape_cells: Optional[int] = None


@dataclass(frozen=True)
class RunResult:
    output: bytes
    tape: bytes
    cursor: int
    steps: int
    stop_reason: StopReason

    @property
    def text(self) -> str:
        return self.output.decode('latin-1')

    @property
    def halted(self) -> bool:
        return self.stop_reason is not StopReason.FINISHED


def compile_string(source: str, *, options: Optional[RunOptions] = None) -> Program:
    coalesce = True if options is None else options.coalesce
    return parse_string(source, coalesce=coalesce)


def run_program(
    program: Program,
    *,
    input: Optional[InputSource] = None,
    output: Optional[OutputSink] = None,
    options: Optional[RunOptions] = None,
) -> RunResult:
    opts = options or RunOptions()
    interp = Interpreter(
        program,
        input=input,
        output=output,
        eof_value=opts.eof_value,
        max_steps=opts.max_steps,
        max_tape_cells=opts.max_tape_cells,
    )
    res = interp.run()
    return RunResult(
        output=res.output,
        tape=res.cells,
        cursor=res.tape.cursor,
        steps=res.steps,
        stop_reason=res.stop_reason,
    )


def run_string(
    source: str,
    *,
    input: Optional[InputSource] = None,
    output: Optional[OutputSink] = None,
    options: Optional[RunOptions] = None,
) -> RunResult:
    program = compile_string(source, options=options)
    return run_program(program, input=input, output=output, options=options)


def run_file(
    path: str | Path,
    *,
    input: Optional[InputSource] = None,
    output: Optional[OutputSink] = None,
    options: Optional[RunOptions] = None,
    encoding: str = "utf-8",
) -> RunResult:
    p = Path(path)
    return run_string(p.read_text(encoding=encoding), input=input, output=output, options=options)
