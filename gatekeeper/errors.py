"""
Error types raised by the blocklist store
"""


class BlocklistError(Exception):
    """Base class for blocklist failures, each mapped to an HTTP status"""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class NotFoundError(BlocklistError):
    """Referenced fixed name or custom id does not exist"""

    status_code = 404


class CapacityError(BlocklistError):
    """Custom set is full and nothing could be added"""

    status_code = 409


class ValidationError(BlocklistError):
    """Malformed extension token or request input"""

    status_code = 400


class StorageError(BlocklistError):
    """State could not be read from or written to the state file"""

    status_code = 500


class IntegrityError(BlocklistError):
    """Stored state violates a store invariant (duplicate ids or extensions)"""

    status_code = 500
