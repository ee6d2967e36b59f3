from dataclasses import dataclass
from pathlib import Path
import logging as lg


TRACE_LOGGER = 'synvm.trace'

REGISTER = 'register'
MEMORY = 'memory'


@dataclass
class InstructionEvent:
    ip: int
    opcode: int
    name: str
    operands: list[int]     # raw operand words, before resolution


@dataclass
class ResolveEvent:
    raw: int
    register: int
    value: int


@dataclass
class WriteEvent:
    target: str             # REGISTER or MEMORY
    index: int
    before: int
    after: int


TraceEvent = InstructionEvent | ResolveEvent | WriteEvent


class Tracer:
    def emit(self, event: TraceEvent):
        pass


class CollectingTracer(Tracer):
    def __init__(self):
        self.events: list[TraceEvent] = []

    def emit(self, event: TraceEvent):
        self.events.append(event)

    def of_type(self, kind: type) -> list:
        return [e for e in self.events if isinstance(e, kind)]


class LogTracer(Tracer):
    def __init__(self, logger: lg.Logger | None = None):
        self.logger = logger or lg.getLogger(TRACE_LOGGER)

    def emit(self, event: TraceEvent):
        if isinstance(event, InstructionEvent):
            self.logger.debug('-' * 55)
            self.logger.debug(f'Current address: {event.ip}')
            self.logger.debug(f'OP: {event.name} ({event.opcode})')

            if event.operands:
                self.logger.debug(f'params: {event.operands}')

        elif isinstance(event, ResolveEvent):
            self.logger.debug(
                f'value {event.raw} points to register #{event.register} holding {event.value}'
            )

        elif isinstance(event, WriteEvent):
            self.logger.debug(
                f'{event.target} #{event.index}: {event.before} -> {event.after}'
            )


def open_trace_log(path: Path) -> lg.Handler:
    """Route the trace logger into a file of its own.

    The trace logger stops propagating so per-instruction records never
    reach the console handlers.
    """
    handler = lg.FileHandler(path, mode='w')
    handler.setFormatter(lg.Formatter('%(asctime)s %(message)s'))

    logger = lg.getLogger(TRACE_LOGGER)
    logger.addHandler(handler)
    logger.setLevel(lg.DEBUG)
    logger.propagate = False
    return handler


def close_trace_log(handler: lg.Handler):
    logger = lg.getLogger(TRACE_LOGGER)
    logger.removeHandler(handler)
    logger.propagate = True
    handler.close()
