"""Tests for gatekeeper/config.py and gatekeeper/utils/logger.py."""

import logging

import yaml

from gatekeeper.config import Config
from gatekeeper.utils.logger import setup_logger


def test_yaml_values_are_loaded(config):
    assert config.blocklist.custom_limit == 200
    assert config.blocklist.max_extension_length == 20
    assert config.blocklist.max_input_length == 500
    assert config.security.session_secret == 'test-secret'
    assert config.security.rate_limit_enabled is False
    assert config.logging.file is None


def test_defaults_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv('CUSTOM_EXTENSION_LIMIT', '50')
    monkeypatch.setenv('STATE_FILE', '/tmp/state.json')
    monkeypatch.setenv('SERVER_PORT', '9000')
    monkeypatch.setenv('DEBUG', 'true')
    monkeypatch.setenv('CORS_ORIGINS', 'https://a.example, https://b.example')

    config = Config(str(tmp_path / "missing.yaml"))

    assert config.blocklist.custom_limit == 50
    assert config.blocklist.seed_prefix == 'test'
    assert config.storage.state_file == '/tmp/state.json'
    assert config.server.port == 9000
    assert config.server.debug is True
    assert config.security.cors_origins == ['https://a.example', 'https://b.example']


def test_empty_yaml_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv('STATE_FILE', raising=False)
    monkeypatch.delenv('CUSTOM_EXTENSION_LIMIT', raising=False)
    path = tmp_path / "config.yaml"
    path.write_text("")

    config = Config(str(path))

    assert config.blocklist.custom_limit == 200
    assert config.storage.state_file is None
    assert config.security.mutation_rate_limit


def test_config_file_env_var(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text(yaml.safe_dump({'blocklist': {'custom_limit': 7}}))
    monkeypatch.setenv('CONFIG_FILE', str(path))

    assert Config().blocklist.custom_limit == 7


def test_setup_logger_writes_rotating_file(tmp_path):
    path = tmp_path / "config.yaml"
    log_file = tmp_path / "logs" / "gatekeeper.log"
    path.write_text(yaml.safe_dump({
        'logging': {'level': 'info', 'file': str(log_file), 'console': False}
    }))

    logger = setup_logger(Config(str(path)), name='upload-gatekeeper-file-test')
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert "INFO - hello" in log_file.read_text()

    # Calling again replaces handlers instead of stacking them
    logger = setup_logger(Config(str(path)), name='upload-gatekeeper-file-test')
    assert len(logger.handlers) == 1

    limiter_logger = logging.getLogger('flask-limiter')
    limiter_logger.warning("ratelimit exceeded")
    for handler in limiter_logger.handlers:
        handler.flush()
    assert "flask-limiter - WARNING - ratelimit exceeded" in log_file.read_text()
    assert limiter_logger.propagate is False

    for target in (logger, limiter_logger):
        for handler in list(target.handlers):
            target.removeHandler(handler)
            handler.close()
    limiter_logger.propagate = True
