import pytest
import yaml

from typedstore_lib.config.loader import (
    ENV_CONNECTION,
    config_template,
    load_config,
    parse_config,
    write_template,
)


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv(ENV_CONNECTION, raising=False)


def test_missing_file_yields_defaults(tmp_path):
    cfg = load_config(tmp_path / 'missing.yml')
    assert cfg.backend == 'redis'
    assert cfg.log_level == 'WARNING'
    assert cfg.connection.endpoint == 'localhost:6379'


def test_connection_string(tmp_path):
    p = tmp_path / 'cfg.yml'
    p.write_text('log_level: debug\nbackend: memory\nconnection: "cache:6380,connectRetry=2"\n')
    cfg = load_config(p)
    assert cfg.log_level == 'DEBUG'
    assert cfg.backend == 'memory'
    assert cfg.connection.endpoint == 'cache:6380'
    assert cfg.connection.connect_retry == 2


def test_connection_mapping():
    cfg = parse_config({'connection': {'endpoint': 'cache:1', 'ssl': True}})
    assert cfg.connection.ssl is True
    assert cfg.connection.port == 1


def test_env_override(tmp_path, monkeypatch):
    p = tmp_path / 'cfg.yml'
    p.write_text('connection: "cache:6380"\n')
    monkeypatch.setenv(ENV_CONNECTION, 'other:7000,password=pw')
    cfg = load_config(p)
    assert cfg.connection.endpoint == 'other:7000'
    assert cfg.connection.password == 'pw'


@pytest.mark.parametrize('data', [
    ['not', 'a', 'mapping'],
    {'backend': 'sqlite'},
    {'connection': 42},
    {'connection': {'connect_retry': -1}},
    {'connection': 'h:1,unknown=1'},
])
def test_invalid_config(data):
    with pytest.raises(ValueError):
        parse_config(data)


def test_malformed_yaml(tmp_path):
    p = tmp_path / 'cfg.yml'
    p.write_text('connection: [unclosed\n')
    with pytest.raises(ValueError):
        load_config(p)


def test_template_loads_back(tmp_path):
    data = yaml.safe_load(config_template())
    assert parse_config(data).connection.endpoint == 'localhost:6379'
    path = write_template(tmp_path / 'nested' / 'cfg.yml')
    assert load_config(path).log_level == 'INFO'
