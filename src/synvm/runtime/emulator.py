import sys
from pathlib import Path
import logging as lg
import traceback

import click

from synvm.common.settings import Settings, ConfigError, load_settings
from synvm.runtime.loader import LoaderError, load_image
from synvm.runtime.terminal import Terminal
from synvm.runtime.trace import Tracer, LogTracer, open_trace_log, close_trace_log
import synvm.runtime.cpu as cpu


EXIT_HALT = 0
EXIT_LOAD_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_KEYBOARD = 3
EXIT_EXEC_ERROR = 100


def boot(image: bytes, terminal: Terminal, tracer: Tracer | None = None) -> cpu.CPU:
    proc = cpu.CPU(terminal, tracer)
    proc.load(image)
    return proc


def run_cpu(proc: cpu.CPU):
    try:
        while True:
            proc.exec_next()
    finally:
        proc.debug_dump()


def execute(image: bytes, terminal: Terminal, tracer: Tracer | None = None):
    run_cpu(boot(image, terminal, tracer))


def configure(config: Path | None, trace: Path | None, eof_fatal: bool | None, verbose: bool) -> Settings:
    settings = load_settings(config) if config is not None else Settings()
    return settings.update(trace_path=trace, eof_fatal=eof_fatal, verbose=verbose or None)


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('-c', '--config', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='TOML file with a [vm] table')
@click.option('-t', '--trace', type=click.Path(dir_okay=False, path_type=Path),
              help='Write a per-instruction trace to this file')
@click.option('--eof-fatal/--eof-zero', default=None,
              help='Treat end of input as a fault instead of reading zero')
@click.argument('image_filename', type=Path)
def run(verbose: bool, config: Path | None, trace: Path | None, eof_fatal: bool | None, image_filename: Path):
    try:
        settings = configure(config, trace, eof_fatal, verbose)
    except ConfigError as e:
        click.echo(f'Configuration error: {e}', err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    lg.basicConfig(level=lg.DEBUG if settings.verbose else lg.INFO)
    lg.info('SYNVM')

    handler = None
    tracer = None

    if settings.trace_path is not None:
        lg.info(f'Tracing to {settings.trace_path}')

        try:
            handler = open_trace_log(settings.trace_path)
        except OSError as e:
            click.echo(f'Configuration error: cannot open trace log {settings.trace_path}: {e}', err=True)
            sys.exit(EXIT_CONFIG_ERROR)

        tracer = LogTracer()

    try:
        image = load_image(image_filename)
        execute(image, Terminal.console(settings.eof_fatal), tracer)

    except cpu.Halt:
        lg.info('Execution halted gracefully')
        sys.exit(EXIT_HALT)

    except LoaderError as e:
        lg.error(f'Cannot load image: {e}')
        sys.exit(EXIT_LOAD_ERROR)

    except cpu.VMError as e:
        lg.error(f'Execution halted on {type(e).__name__}: {e}')
        sys.exit(EXIT_EXEC_ERROR)

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    except Exception as e:
        lg.info(f'Execution halted on general error {e}')
        traceback.print_exc()
        sys.exit(EXIT_EXEC_ERROR)

    finally:
        if handler is not None:
            close_trace_log(handler)


if __name__ == '__main__':
    run()
