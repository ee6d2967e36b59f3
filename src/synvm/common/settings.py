from pathlib import Path
import logging as lg
import tomllib


class ConfigError(Exception):
    pass


class Settings:
    trace_path: Path | None
    eof_fatal: bool
    verbose: bool

    KEYS = ('trace', 'eof_fatal', 'verbose')

    def __init__(self):
        self.trace_path = None
        self.eof_fatal = False
        self.verbose = False

    def update(
        self,
        trace_path: str | Path | None = None,
        eof_fatal: bool | None = None,
        verbose: bool | None = None
    ):
        if trace_path is not None:
            self.trace_path = Path(trace_path)

        if eof_fatal is not None:
            self.eof_fatal = eof_fatal

        if verbose is not None:
            self.verbose = verbose

        return self


def settings_from_dict(config: dict) -> Settings:
    vm = config.get('vm', {})

    if not isinstance(vm, dict):
        raise ConfigError('[vm] must be a table')

    unknown = set(vm) - set(Settings.KEYS)

    if unknown:
        raise ConfigError(f'Unknown configuration keys: {", ".join(sorted(unknown))}')

    for key in ('eof_fatal', 'verbose'):
        if key in vm and not isinstance(vm[key], bool):
            raise ConfigError(f'{key} must be a boolean')

    if 'trace' in vm and not isinstance(vm['trace'], str):
        raise ConfigError('trace must be a path string')

    return Settings().update(
        trace_path=vm.get('trace'),
        eof_fatal=vm.get('eof_fatal'),
        verbose=vm.get('verbose')
    )


def load_settings(path: str | Path) -> Settings:
    if isinstance(path, str):
        path = Path(path)

    lg.debug(f'Reading configuration {path}')

    try:
        config = tomllib.loads(path.read_text())
    except OSError as e:
        raise ConfigError(f'Cannot read configuration {path}: {e}') from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f'Malformed configuration {path}: {e}') from e

    return settings_from_dict(config)
