import struct
import logging as lg
from typing import Callable

import synvm.common.ops as ops
from synvm.common.hwconf import (
    MEMORY_SIZE, GP_REGS, WORD_SIZE, WORD_FMT, MODULUS, VALUE_MASK, REG_BASE, REG_LIMIT
)
from synvm.runtime.loader import check_image
from synvm.runtime.terminal import Terminal
from synvm.runtime.trace import (
    Tracer, TraceEvent, InstructionEvent, ResolveEvent, WriteEvent, REGISTER, MEMORY
)


class Halt(Exception):
    pass


class VMError(Exception):
    """Fatal fault raised while executing an instruction.

    ``ip`` is the address the faulting instruction was fetched from,
    ``opcode`` its opcode and ``operand`` the offending word, if any.
    """

    def __init__(
        self,
        message: str,
        ip: int | None = None,
        opcode: int | None = None,
        operand: int | None = None
    ):
        super().__init__(message)
        self.message = message
        self.ip = ip
        self.opcode = opcode
        self.operand = operand

    def locate(self, ip: int, opcode: int | None):
        if self.ip is None:
            self.ip = ip

        if self.opcode is None:
            self.opcode = opcode

    def __str__(self):
        context = []

        if self.ip is not None:
            context.append(f'ip={self.ip}')

        if self.opcode is not None:
            mnemonic = ops.OPCODES.get(self.opcode, ('?', 0))[0]
            context.append(f'opcode={self.opcode} ({mnemonic})')

        if self.operand is not None:
            context.append(f'operand={self.operand}')

        if not context:
            return self.message

        return f'{self.message} [{", ".join(context)}]'


class UnknownOpcode(VMError):
    pass


class InvalidRegister(VMError):
    pass


class InvalidAddress(VMError):
    pass


class StackUnderflow(VMError):
    pass


class VMArithmeticError(VMError, ArithmeticError):
    pass


class InputExhausted(VMError):
    pass


class CPU():
    ip: int             # Instruction pointer
    op_ip: int          # Address of the instruction being executed
    gp: list[int]       # General purpose registers
    stack: list[int]    # Shared data and return stack

    def __init__(self, terminal: Terminal, tracer: Tracer | None = None):
        self.memory = bytearray(MEMORY_SIZE * WORD_SIZE)
        self.terminal = terminal
        self.tracer = tracer

        self.ip = 0
        self.op_ip = 0
        self.gp = [0] * GP_REGS
        self.stack = []

    def load(self, image: bytes):
        check_image(image)
        self.memory[0:len(image)] = image

    # - Helpers - #

    def debug_dump(self):
        state = [f'IP:{self.ip}', f'SD:{len(self.stack)}']
        state.extend([f'{i}:{self.gp[i]}' for i in range(len(self.gp))])
        lg.debug(' '.join(state))

    def trace(self, event: TraceEvent):
        if self.tracer is not None:
            self.tracer.emit(event)

    def trace_instruction(self, op: int):
        if self.tracer is None:
            return

        count = ops.operand_count(op)
        last = min(self.ip + count, MEMORY_SIZE)
        operands = [self.peek(addr) for addr in range(self.ip, last)]
        self.trace(InstructionEvent(self.op_ip, op, ops.name(op), operands))

    def peek(self, address: int) -> int:
        if not 0 <= address < MEMORY_SIZE:
            raise InvalidAddress(f'Address {address} is outside memory', operand=address)

        (v,) = struct.unpack_from(WORD_FMT, self.memory, address * WORD_SIZE)
        return v

    def poke(self, address: int, value: int):
        if not 0 <= address < MEMORY_SIZE:
            raise InvalidAddress(f'Address {address} is outside memory', operand=address)

        if self.tracer is not None:
            self.trace(WriteEvent(MEMORY, address, self.peek(address), value))

        struct.pack_into(WORD_FMT, self.memory, address * WORD_SIZE, value)

    def next(self) -> int:
        if self.ip >= MEMORY_SIZE:
            raise InvalidAddress('Instruction pointer ran past the end of memory', operand=self.ip)

        v = self.peek(self.ip)
        self.ip += 1
        return v

    def resolve(self, raw: int) -> int:
        if raw >= REG_LIMIT:
            raise InvalidAddress(f'{raw} is neither a value nor a register', operand=raw)

        if raw < REG_BASE:
            return raw

        register = raw - REG_BASE
        value = self.gp[register]
        self.trace(ResolveEvent(raw, register, value))
        return value

    def next_value(self) -> int:
        return self.resolve(self.next())

    def next_reg(self) -> int:
        raw = self.next()

        if not REG_BASE <= raw < REG_LIMIT:
            raise InvalidRegister(f'{raw} is not a register', operand=raw)

        return raw - REG_BASE

    def set_reg(self, register: int, value: int):
        if self.tracer is not None:
            self.trace(WriteEvent(REGISTER, register, self.gp[register], value))

        self.gp[register] = value

    def arithm_pair(self, op: Callable[[int, int], int]):
        register = self.next_reg()
        b = self.next_value()
        c = self.next_value()
        self.set_reg(register, op(b, c) % MODULUS)

    def do_push(self, val: int):
        self.stack.append(val)

    def do_pop(self) -> int:
        if not self.stack:
            raise StackUnderflow('Pop from an empty stack')

        return self.stack.pop()

    # - Operations - #

    def halt(self):
        raise Halt()

    def set(self):
        register = self.next_reg()
        self.set_reg(register, self.next_value())

    def push(self):
        self.do_push(self.next_value())

    def pop(self):
        register = self.next_reg()
        self.set_reg(register, self.do_pop())

    def eq(self):
        self.arithm_pair(lambda b, c: 1 if b == c else 0)

    def gt(self):
        self.arithm_pair(lambda b, c: 1 if b > c else 0)

    def jmp(self):
        self.ip = self.next_value()

    def jt(self):
        val = self.next_value()
        addr = self.next_value()

        if val != 0:
            self.ip = addr

    def jf(self):
        val = self.next_value()
        addr = self.next_value()

        if val == 0:
            self.ip = addr

    def rmem(self):
        register = self.next_reg()
        self.set_reg(register, self.peek(self.next_value()))

    def wmem(self):
        addr = self.next_value()
        self.poke(addr, self.next_value())

    def call(self):
        addr = self.next_value()
        self.do_push(self.ip)
        self.ip = addr

    def ret(self):
        # Returning with nothing to return to ends the program
        if not self.stack:
            raise Halt()

        self.ip = self.do_pop()

    def out(self):
        self.terminal.write_char(self.next_value())

    def inp(self):
        register = self.next_reg()

        try:
            byte = self.terminal.read_byte()
        except EOFError as e:
            raise InputExhausted(str(e)) from e

        self.set_reg(register, byte)

    def noop(self):
        pass

    # - Arithmetic - #

    def add(self):
        self.arithm_pair(lambda b, c: b + c)

    def mult(self):
        self.arithm_pair(lambda b, c: b * c)

    def mod(self):
        register = self.next_reg()
        b = self.next_value()
        c = self.next_value()

        if c == 0:
            raise VMArithmeticError('Modulo by zero', operand=c)

        self.set_reg(register, b % c)

    def band(self):
        self.arithm_pair(lambda b, c: b & c)

    def bor(self):
        self.arithm_pair(lambda b, c: b | c)

    def inv(self):
        register = self.next_reg()
        self.set_reg(register, ~self.next_value() & VALUE_MASK)

    HANDLERS = {
        ops.HALT: halt,
        ops.SET: set,
        ops.PUSH: push,
        ops.POP: pop,
        ops.EQ: eq,
        ops.GT: gt,
        ops.JMP: jmp,
        ops.JT: jt,
        ops.JF: jf,
        ops.ADD: add,
        ops.MULT: mult,
        ops.MOD: mod,
        ops.AND: band,
        ops.OR: bor,
        ops.NOT: inv,
        ops.RMEM: rmem,
        ops.WMEM: wmem,
        ops.CALL: call,
        ops.RET: ret,
        ops.OUT: out,
        ops.IN: inp,
        ops.NOOP: noop,
    }

    # -- Implementation -- #

    def exec_next(self):
        self.op_ip = self.ip
        op = None

        try:
            op = self.next()
            handler = self.HANDLERS.get(op)

            if handler is None:
                raise UnknownOpcode(f'Unknown opcode {op}', operand=op)

            self.trace_instruction(op)
            handler(self)

        except VMError as e:
            e.locate(self.op_ip, op)
            raise
