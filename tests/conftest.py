"""
Pytest configuration and shared fixtures for upload gatekeeper tests.
"""

import logging

import pytest
import yaml

from gatekeeper.api import create_api_app
from gatekeeper.blocklist_store import BlocklistStore
from gatekeeper.config import BlocklistConfig, Config


@pytest.fixture
def logger():
    """Logger without handlers; pytest's caplog still sees its records."""
    test_logger = logging.getLogger('upload-gatekeeper-test')
    test_logger.setLevel(logging.DEBUG)
    return test_logger


@pytest.fixture
def blocklist_config():
    return BlocklistConfig(custom_limit=200, max_extension_length=20, max_input_length=500)


@pytest.fixture
def store(blocklist_config, logger):
    return BlocklistStore(blocklist_config, logger)


@pytest.fixture
def config_file(tmp_path):
    """Write a minimal YAML config and return its path."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        'blocklist': {'custom_limit': 200, 'max_extension_length': 20, 'max_input_length': 500},
        'security': {'session_secret': 'test-secret', 'rate_limit_enabled': False},
        'logging': {'level': 'DEBUG', 'file': None, 'console': False},
    }))
    return str(path)


@pytest.fixture
def config(config_file):
    return Config(config_file)


@pytest.fixture
def app(config, logger, store):
    flask_app = create_api_app(config, logger, store)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
