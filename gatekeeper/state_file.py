"""
JSON persistence for blocklist state
"""

import json
import os

from gatekeeper.errors import StorageError


class StateFile:
    """Load and atomically save blocklist state as JSON"""

    def __init__(self, path, logger):
        self.path = path
        self.logger = logger

    def load(self):
        """
        Load state from disk

        Returns:
            dict or None: Stored state, None if the file does not exist yet
        """
        if not os.path.exists(self.path):
            self.logger.info(f"No state file at {self.path}, starting with defaults")
            return None

        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading state from {self.path}: {e}")
            raise StorageError(f"Could not read state file {self.path}") from e

        if not isinstance(data, dict):
            raise StorageError(f"State file {self.path} does not contain a JSON object")

        return data

    def save(self, data):
        """
        Save state to disk

        Args:
            data: JSON-serialisable state dictionary
        """
        try:
            state_dir = os.path.dirname(self.path)
            if state_dir:
                os.makedirs(state_dir, exist_ok=True)

            # Write atomically
            temp_file = f"{self.path}.tmp"
            with open(temp_file, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(temp_file, self.path)

        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Error saving state to {self.path}: {e}")
            raise StorageError(f"Could not write state file {self.path}") from e
