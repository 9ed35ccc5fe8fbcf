"""
Parser tests: comment removal, bracket pairing, coalescing and error reporting.
"""

import pytest

from bfi.errors import (
    BFInternalError,
    BFParseError,
    UnmatchedCloseBracketError,
    UnmatchedOpenBracketError,
)
from bfi.lexer import tokenize
from bfi.parser import (
    Decrease,
    Increase,
    Input,
    LoopBegin,
    LoopEnd,
    MoveLeft,
    MoveRight,
    Output,
    check_pairing,
    parse,
    parse_string,
)

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


def assert_well_paired(program):
    for i, ins in enumerate(program):
        if isinstance(ins, LoopBegin):
            j = ins.target
            assert i < j
            assert isinstance(program[j], LoopEnd)
            assert program[j].target == i


class TestPairing:
    def test_simple_loop(self):
        program = parse_string("+[-]", coalesce=False)
        assert list(program) == [
            Increase(offset=0),
            LoopBegin(target=3, offset=1),
            Decrease(offset=2),
            LoopEnd(target=1, offset=3),
        ]

    def test_targets_are_instruction_indices_not_offsets(self):
        program = parse_string("x [ comment ]", coalesce=False)
        assert len(program) == 2
        assert program[0] == LoopBegin(target=1, offset=2)
        assert program[1] == LoopEnd(target=0, offset=12)

    def test_nested_loops(self):
        program = parse_string("[[][[]]]", coalesce=False)
        assert [getattr(i, 'target') for i in program] == [7, 2, 1, 6, 5, 4, 3, 0]
        assert_well_paired(program)

    @pytest.mark.parametrize("coalesce", [True, False])
    def test_hello_world_is_well_paired(self, coalesce):
        program = parse_string(HELLO_WORLD, coalesce=coalesce)
        assert_well_paired(program)
        check_pairing(program)

    def test_comments_only(self):
        program = parse_string("hello")
        assert len(program) == 0
        assert program.to_source() == ""


class TestCoalescing:
    def test_runs_are_folded(self):
        program = parse_string("+++>>--<.")
        assert list(program) == [
            Increase(repeat=3, offset=0),
            MoveRight(repeat=2, offset=3),
            Decrease(repeat=2, offset=5),
            MoveLeft(repeat=1, offset=7),
            Output(offset=8),
        ]

    def test_comments_do_not_break_a_run(self):
        program = parse_string("+ + +")
        assert list(program) == [Increase(repeat=3, offset=0)]

    def test_io_and_loops_are_never_folded(self):
        program = parse_string("..,,[[]]")
        assert [type(i) for i in program] == [
            Output, Output, Input, Input, LoopBegin, LoopBegin, LoopEnd, LoopEnd,
        ]

    def test_disabled(self):
        program = parse_string("+++", coalesce=False)
        assert list(program) == [Increase(offset=0), Increase(offset=1), Increase(offset=2)]

    def test_to_source_expands_repeats(self):
        src = "++ comment >>>[-]<."
        assert parse_string(src).to_source() == "++>>>[-]<."


class TestErrors:
    def test_unmatched_open(self):
        with pytest.raises(UnmatchedOpenBracketError) as exc:
            parse_string("[+")
        err = exc.value
        assert isinstance(err, BFParseError)
        assert err.offset == 0
        assert (err.line, err.column) == (1, 1)
        assert "Unmatched '['" in str(err)

    def test_unmatched_open_reports_innermost(self):
        with pytest.raises(UnmatchedOpenBracketError) as exc:
            parse_string("[[]")
        assert exc.value.offset == 0

        with pytest.raises(UnmatchedOpenBracketError) as exc:
            parse_string("[][")
        assert exc.value.offset == 2

    def test_unmatched_close(self):
        with pytest.raises(UnmatchedCloseBracketError) as exc:
            parse_string("+]")
        assert exc.value.offset == 1
        assert "Unmatched ']'" in str(exc.value)

    def test_close_before_open(self):
        with pytest.raises(UnmatchedCloseBracketError):
            parse_string("][")

    def test_error_location_on_later_line(self):
        src = "+++\n++\n  ]\n"
        with pytest.raises(UnmatchedCloseBracketError) as exc:
            parse_string(src)
        err = exc.value
        assert (err.line, err.column) == (3, 3)
        assert ">    3 |   ]" in err.context
        assert "Hint:" in str(err)

    def test_parse_from_tokens(self):
        program = parse(tokenize("+[]"))
        assert program.source == "+[]"
        assert len(program) == 3


class TestCheckPairing:
    def test_accepts_parser_output(self):
        check_pairing(parse_string("[>[-]<]"))

    def test_rejects_unresolved_target(self):
        with pytest.raises(BFInternalError):
            check_pairing([LoopBegin(target=None), LoopEnd(target=0)])

    def test_rejects_cross_linked_pairs(self):
        bad = [LoopBegin(target=3), LoopBegin(target=2), LoopEnd(target=1), LoopEnd(target=1)]
        with pytest.raises(BFInternalError):
            check_pairing(bad)

    def test_rejects_dangling_end(self):
        with pytest.raises(BFInternalError):
            check_pairing([LoopEnd(target=0)])

    def test_rejects_zero_repeat(self):
        with pytest.raises(BFInternalError):
            check_pairing([Increase(repeat=0)])
