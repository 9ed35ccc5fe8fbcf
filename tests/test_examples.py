"""
Run the programs shipped in examples/ through the library facade.
"""

import os

import pytest

from bfi import run_file

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


@pytest.mark.parametrize(
    "name, input_data, expected",
    [
        ("hello.b", None, b"Hello World!\n"),
        ("cat.b", b"echo me", b"echo me"),
        ("add.b", b"34", b"7"),
        ("left.b", None, b"A"),
    ],
)
def test_example_program(name, input_data, expected):
    res = run_file(os.path.join(EXAMPLES, name), input=input_data)
    assert res.output == expected
    assert not res.halted
