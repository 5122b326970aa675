import json
import logging
import os


class StoreError(Exception):
    """Base class for failures of the local JSON data files."""


class NotFound(StoreError):
    pass


class DataParseError(StoreError):
    pass


class DataFileError(StoreError):
    pass


class JsonFileStore:
    """Loads and saves single JSON values as named files under a data root.

    Writes go straight to the target file, so a crash mid-write can leave a
    truncated file behind.
    """

    def __init__(self, data_dir):
        self.data_dir = data_dir

    def path_for(self, name):
        return os.path.join(self.data_dir, name)

    def load(self, name):
        file_path = self.path_for(name)
        if not os.path.exists(file_path):
            raise NotFound(f"{name} does not exist")
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logging.error(f"Error decoding {file_path}: {e}")
            raise DataParseError(f"{name} is not valid JSON: {e}") from e
        except OSError as e:
            logging.error(f"Error reading {file_path}: {e}")
            raise DataFileError(f"Could not read {name}: {e}") from e

    def save(self, name, value):
        file_path = self.path_for(name)
        try:
            os.makedirs(os.path.dirname(file_path), exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(value, f, indent=2)
            logging.debug(f"Successfully wrote to '{file_path}'.")
        except (OSError, TypeError) as e:
            logging.error(f"ERROR: Could not write to file {file_path}: {e}")
            raise DataFileError(f"Could not write {name}: {e}") from e
