"""
Main Flask application entry point
"""

from gatekeeper.api import create_api_app
from gatekeeper.blocklist_store import BlocklistStore
from gatekeeper.config import Config
from gatekeeper.state_file import StateFile
from gatekeeper.upload_validator import UploadValidator
from gatekeeper.utils.logger import setup_logger

# Load configuration
config = Config()

# Setup logging
logger = setup_logger(config)

# Shared blocklist state for every request handler
state_file = StateFile(config.storage.state_file, logger) if config.storage.state_file else None
store = BlocklistStore(config.blocklist, logger, state_file=state_file)

app = create_api_app(config, logger, store, UploadValidator(logger))


if __name__ == '__main__':
    # Development mode only - use gunicorn in production
    logger.warning("Running in development mode. Use gunicorn for production.")
    app.run(
        host=config.server.host,
        port=config.server.port,
        debug=config.server.debug
    )
