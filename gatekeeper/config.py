"""
Configuration management for the application
"""

import os
import yaml
from typing import List
from dataclasses import dataclass, field


@dataclass
class BlocklistConfig:
    custom_limit: int
    max_extension_length: int
    max_input_length: int
    seed_prefix: str = 'test'


@dataclass
class StorageConfig:
    state_file: str = None


@dataclass
class ServerConfig:
    host: str
    port: int
    debug: bool


@dataclass
class SecurityConfig:
    session_secret: str
    rate_limit_enabled: bool
    mutation_rate_limit: str
    upload_rate_limit: str
    max_payload_size: int
    cors_origins: List[str] = field(default_factory=lambda: ['*'])


@dataclass
class LoggingConfig:
    level: str
    file: str
    max_bytes: int
    backup_count: int
    console: bool


def _as_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Main configuration class"""

    def __init__(self, config_file=None):
        self.config_file = config_file or os.getenv('CONFIG_FILE', '/config/config.yaml')

        self.blocklist = None
        self.storage = None
        self.server = None
        self.security = None
        self.logging = None

        # Load configuration
        self._load_config()

    def _load_config(self):
        """Load configuration from file or environment variables"""

        if os.path.exists(self.config_file):
            with open(self.config_file, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        else:
            config_data = self._load_from_env()

        blocklist = config_data.get('blocklist') or {}
        storage = config_data.get('storage') or {}
        server = config_data.get('server') or {}
        security = config_data.get('security') or {}
        logging_data = config_data.get('logging') or {}

        self.blocklist = BlocklistConfig(
            custom_limit=int(blocklist.get('custom_limit', os.getenv('CUSTOM_EXTENSION_LIMIT', 200))),
            max_extension_length=int(blocklist.get('max_extension_length',
                                                   os.getenv('MAX_EXTENSION_LENGTH', 20))),
            max_input_length=int(blocklist.get('max_input_length', os.getenv('MAX_INPUT_LENGTH', 500))),
            seed_prefix=blocklist.get('seed_prefix', os.getenv('SEED_PREFIX', 'test'))
        )

        self.storage = StorageConfig(
            state_file=storage.get('state_file', os.getenv('STATE_FILE') or None)
        )

        self.server = ServerConfig(
            host=server.get('host', os.getenv('SERVER_HOST', '0.0.0.0')),
            port=int(server.get('port', os.getenv('SERVER_PORT', 8080))),
            debug=_as_bool(server.get('debug', os.getenv('DEBUG', 'false')))
        )

        # Parse CORS origins from env or config
        cors_env = os.getenv('CORS_ORIGINS', '')
        if cors_env:
            cors_origins = [origin.strip() for origin in cors_env.split(',') if origin.strip()]
        else:
            cors_origins = security.get('cors_origins', ['*'])

        self.security = SecurityConfig(
            session_secret=security.get('session_secret', os.getenv('SESSION_SECRET', os.urandom(32).hex())),
            rate_limit_enabled=_as_bool(security.get('rate_limit_enabled',
                                                     os.getenv('RATE_LIMIT_ENABLED', 'true'))),
            mutation_rate_limit=security.get('mutation_rate_limit',
                                             os.getenv('MUTATION_RATE_LIMIT', '120/minute')),
            upload_rate_limit=security.get('upload_rate_limit',
                                           os.getenv('UPLOAD_RATE_LIMIT', '60/minute')),
            max_payload_size=int(security.get('max_payload_size',
                                              os.getenv('MAX_PAYLOAD_SIZE', 10 * 1024 * 1024))),
            cors_origins=cors_origins
        )

        self.logging = LoggingConfig(
            level=logging_data.get('level', os.getenv('LOG_LEVEL', 'INFO')),
            file=logging_data.get('file', os.getenv('LOG_FILE', 'logs/upload-gatekeeper.log')),
            max_bytes=int(logging_data.get('max_bytes', 10485760)),
            backup_count=int(logging_data.get('backup_count', 5)),
            console=_as_bool(logging_data.get('console', True))
        )

    def _load_from_env(self):
        """Create config structure from environment variables"""
        return {
            'blocklist': {},
            'storage': {},
            'server': {},
            'security': {},
            'logging': {}
        }
