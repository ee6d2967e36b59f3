import sys
from typing import BinaryIO, TextIO

from synvm.common.hwconf import CHAR_MASK, EOF_SENTINEL


class Terminal:
    """Character terminal behind the in/out opcodes.

    Input is consumed a line at a time and handed out one byte per call,
    so a line that has started arriving is always delivered whole.
    """

    def __init__(self, stdin: BinaryIO, stdout: TextIO, eof_fatal: bool = False):
        self.stdin = stdin
        self.stdout = stdout
        self.eof_fatal = eof_fatal
        self.pending = b''
        self.exhausted = False

    @classmethod
    def console(cls, eof_fatal: bool = False):
        return cls(sys.stdin.buffer, sys.stdout, eof_fatal)

    def read_byte(self) -> int:
        if not self.pending and not self.exhausted:
            self.pending = self.stdin.readline()
            self.exhausted = not self.pending

        if self.exhausted and not self.pending:
            if self.eof_fatal:
                raise EOFError('End of input')

            return EOF_SENTINEL

        byte = self.pending[0]
        self.pending = self.pending[1:]
        return byte

    def write_char(self, code: int):
        self.stdout.write(chr(code & CHAR_MASK))
        self.stdout.flush()
