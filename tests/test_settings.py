from pathlib import Path

import pytest

from synvm.common.settings import Settings, ConfigError, load_settings


def test_defaults():
    settings = Settings()
    assert settings.trace_path is None
    assert settings.eof_fatal is False
    assert settings.verbose is False


def test_update_keeps_unset_values():
    settings = Settings().update(eof_fatal=True)
    settings.update(verbose=True)
    assert settings.eof_fatal is True
    assert settings.verbose is True
    assert settings.trace_path is None


def test_load_settings(tmp_path):
    path = tmp_path / 'synvm.toml'
    path.write_text('[vm]\ntrace = "debug.log"\neof_fatal = true\n')
    settings = load_settings(path)
    assert settings.trace_path == Path('debug.log')
    assert settings.eof_fatal is True
    assert settings.verbose is False


def test_unknown_key(tmp_path):
    path = tmp_path / 'synvm.toml'
    path.write_text('[vm]\nturbo = true\n')

    with pytest.raises(ConfigError):
        load_settings(path)


def test_wrong_type(tmp_path):
    path = tmp_path / 'synvm.toml'
    path.write_text('[vm]\neof_fatal = "yes"\n')

    with pytest.raises(ConfigError):
        load_settings(path)


def test_malformed_file(tmp_path):
    path = tmp_path / 'synvm.toml'
    path.write_text('[vm\n')

    with pytest.raises(ConfigError):
        load_settings(path)
