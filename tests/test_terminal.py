import io

import pytest

import synvm.common.ops as ops
import synvm.runtime.cpu as cpu
from synvm.runtime.terminal import Terminal

from unit_utils import R0, R1, R2, R3, R4, make_terminal, run_words, output


def test_line_is_delivered_byte_by_byte():
    terminal = make_terminal(b'ab\n')
    codes = [terminal.read_byte() for _ in range(5)]
    assert codes == [ord('a'), ord('b'), ord('\n'), 0, 0]


def test_lines_are_not_interleaved():
    terminal = make_terminal(b'go north\nlook\n')
    first = bytes(terminal.read_byte() for _ in range(9))
    second = bytes(terminal.read_byte() for _ in range(5))
    assert first == b'go north\n'
    assert second == b'look\n'


def test_end_of_input_can_be_fatal():
    terminal = make_terminal(b'', eof_fatal=True)

    with pytest.raises(EOFError):
        terminal.read_byte()


def test_write_char_uses_low_byte():
    terminal = Terminal(io.BytesIO(), io.StringIO())
    terminal.write_char(0x141)
    assert terminal.stdout.getvalue() == 'A'


def test_in_opcode_reads_then_yields_sentinel():
    proc = run_words([
        ops.IN, R0,
        ops.IN, R1,
        ops.IN, R2,
        ops.IN, R3,
        ops.IN, R4,
        ops.HALT
    ], stdin=b'ab\n')
    assert proc.gp[:5] == [ord('a'), ord('b'), ord('\n'), 0, 0]


def test_in_opcode_with_fatal_end_of_input():
    proc = cpu.CPU(make_terminal(b'', eof_fatal=True))
    proc.load(bytes([ops.IN, 0, 0x00, 0x80]))

    with pytest.raises(cpu.InputExhausted) as info:
        proc.exec_next()

    assert info.value.opcode == ops.IN


def test_echo_program():
    proc = run_words([
        ops.IN, R0,             # 0
        ops.JF, R0, 9,          # 2
        ops.OUT, R0,            # 5
        ops.JMP, 0,             # 7
        ops.HALT,               # 9
    ], stdin=b'hi\n')
    assert output(proc) == 'hi\n'
