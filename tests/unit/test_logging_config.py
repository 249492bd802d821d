import logging

import pytest

from typedstore_lib.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logging():
    handlers = logging.root.handlers[:]
    level = logging.root.level
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


def test_level_from_config_file(tmp_path):
    cfg = tmp_path / 'cfg.yml'
    cfg.write_text('log_level: debug\n')
    configure_logging(cfg)
    assert logging.root.level == logging.DEBUG
    assert logging.getLogger('redis').level == logging.WARNING


def test_explicit_level_wins(tmp_path):
    cfg = tmp_path / 'cfg.yml'
    cfg.write_text('log_level: debug\n')
    configure_logging(cfg, 'ERROR')
    assert logging.root.level == logging.ERROR


def test_defaults_to_warning(tmp_path):
    configure_logging(tmp_path / 'missing.yml')
    assert logging.root.level == logging.WARNING


def test_unparseable_config_falls_back(tmp_path):
    cfg = tmp_path / 'cfg.yml'
    cfg.write_text('log_level: [oops\n')
    configure_logging(cfg)
    assert logging.root.level == logging.WARNING


def test_unknown_level_name_falls_back(tmp_path):
    configure_logging(tmp_path / 'missing.yml', 'LOUD')
    assert logging.root.level == logging.WARNING
