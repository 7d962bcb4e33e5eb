"""
Extension blocklist API routes and handlers
"""

from flask import Flask, Blueprint, request, jsonify
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from gatekeeper.errors import BlocklistError, IntegrityError, StorageError, ValidationError
from gatekeeper.upload_validator import UploadValidator
from gatekeeper.utils.helpers import check_extension_input, parse_count, parse_flag

VERSION = '1.0.0'


def envelope(message, data=None, success=True):
    """Build the JSON body every endpoint returns"""
    return jsonify({'success': success, 'message': message, 'data': data})


def create_api_app(config, logger, store, validator=None):
    """
    Create the blocklist API Flask application

    Args:
        config: Application configuration
        logger: Logger instance
        store: BlocklistStore instance
        validator: UploadValidator instance, created if omitted

    Returns:
        Flask app instance
    """
    app = Flask(__name__)
    app.secret_key = config.security.session_secret
    app.config['MAX_CONTENT_LENGTH'] = config.security.max_payload_size
    app.config['RATELIMIT_ENABLED'] = config.security.rate_limit_enabled

    # Store references
    app.config['APP_CONFIG'] = config
    app.config['APP_LOGGER'] = logger
    app.config['APP_STORE'] = store

    CORS(app, origins=config.security.cors_origins)

    limiter = Limiter(
        app=app,
        key_func=get_remote_address,
        default_limits=[],
        storage_uri="memory://"
    )
    # Route decorators only hold a weak reference to the limiter
    app.config['APP_LIMITER'] = limiter

    validator = validator or UploadValidator(logger)
    api = Blueprint('extensions', __name__, url_prefix='/api/extensions')

    def json_body(required=True):
        data = request.get_json(silent=True)
        if data is None and not required:
            return {}
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    # ----- fixed extensions -----

    @api.route('/fixed', methods=['GET'])
    def get_fixed():
        """List fixed extensions"""
        return envelope("Fixed extensions loaded", [entry.to_dict() for entry in store.list_fixed()])

    @api.route('/fixed', methods=['PATCH'])
    @limiter.limit(config.security.mutation_rate_limit)
    def update_fixed():
        """Toggle one fixed extension"""
        data = json_body()
        name = data.get('extension')
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Field 'extension' is required")
        if 'blocked' not in data:
            raise ValidationError("Field 'blocked' is required")

        entry = store.set_fixed_blocked(name, parse_flag(data['blocked']))
        return envelope("Fixed extension updated", entry.to_dict())

    @api.route('/fixed/bulk', methods=['PATCH'])
    @limiter.limit(config.security.mutation_rate_limit)
    def bulk_update_fixed():
        """Block or unblock every fixed extension"""
        blocked = parse_flag(request.args.get('blocked', ''))
        count = store.bulk_set_fixed(blocked)
        action = "Blocked" if blocked else "Unblocked"
        return envelope(f"{action} all fixed extensions ({count})", count)

    # ----- custom extensions -----

    @api.route('/custom', methods=['GET'])
    def get_custom():
        """List custom extensions, oldest first"""
        entries = store.list_custom()
        return envelope(
            f"{len(entries)}/{config.blocklist.custom_limit} custom extensions",
            [entry.to_dict() for entry in entries]
        )

    @api.route('/custom', methods=['POST'])
    @limiter.limit(config.security.mutation_rate_limit)
    def add_custom():
        """Add comma-delimited custom extensions"""
        raw_input = check_extension_input(json_body().get('extensions'), config.blocklist.max_input_length)
        result = store.add_custom(raw_input)

        message = f"{len(result.added)} extension(s) added"
        if result.rejected:
            message += f", {len(result.rejected)} rejected"
        return envelope(message, result.to_dict())

    @api.route('/custom/<ext_id>', methods=['DELETE'])
    @limiter.limit(config.security.mutation_rate_limit)
    def delete_custom(ext_id):
        """Delete one custom extension"""
        entry = store.delete_custom(ext_id)
        return envelope(f"Deleted '{entry.extension}'", {'id': entry.id})

    @api.route('/custom', methods=['DELETE'])
    @limiter.limit(config.security.mutation_rate_limit)
    def delete_all_custom():
        """Delete every custom extension"""
        count = store.clear_custom()
        return envelope(f"Deleted {count} custom extension(s)", count)

    # ----- reset / test data -----

    @api.route('/reset', methods=['POST'])
    @limiter.limit(config.security.mutation_rate_limit)
    def reset_all():
        """Unblock fixed extensions and clear custom extensions"""
        store.reset()
        return envelope("All settings have been reset")

    @api.route('/test-data', methods=['POST'])
    @limiter.limit(config.security.mutation_rate_limit)
    def generate_test_data():
        """Fill the custom set with generated extensions"""
        data = json_body(required=False)
        prefix = data.get('prefix')
        count = data.get('count')
        if count is not None:
            count = parse_count(count)

        generated = store.seed_test_data(prefix=prefix, count=count)
        return envelope(f"Generated {generated} test extension(s)", generated)

    # ----- uploads -----

    @api.route('/upload', methods=['POST'])
    @limiter.limit(config.security.upload_rate_limit)
    def upload_files():
        """Classify an upload batch against the current blocklist"""
        files = request.files.getlist('files')
        if files:
            # Empty file inputs arrive as parts without a filename
            filenames = [f.filename for f in files if f.filename and f.filename.strip()]
        else:
            data = json_body(required=False)
            filenames = data.get('filenames')
            if not isinstance(filenames, list):
                raise ValidationError("No files to upload")
            filenames = [name if isinstance(name, str) else '' for name in filenames]

        # One snapshot per batch
        snapshot = store.snapshot()
        result = validator.validate(filenames, snapshot)

        if result.rejected_file_names:
            message = (f"{result.accepted_files} file(s) accepted, "
                       f"{len(result.rejected_file_names)} blocked")
        else:
            message = f"{result.accepted_files} file(s) accepted"
        return envelope(message, result.to_dict())

    app.register_blueprint(api)

    @app.route('/health', methods=['GET'])
    def health_check():
        """
        Health check endpoint
        """
        return jsonify({
            "status": "healthy",
            "version": VERSION,
            "service": "upload-gatekeeper",
            "custom_extensions": store.custom_count(),
            "custom_limit": config.blocklist.custom_limit
        }), 200

    # ----- error handling -----

    @app.errorhandler(BlocklistError)
    def handle_blocklist_error(e):
        if isinstance(e, (StorageError, IntegrityError)):
            logger.error(f"Blocklist operation failed: {e.message}", exc_info=True)
        else:
            logger.warning(f"{type(e).__name__}: {e.message}")
        return envelope(e.message, success=False), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return envelope(e.description or e.name, success=False), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return envelope("Internal server error", success=False), 500

    return app
