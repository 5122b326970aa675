import logging
import threading

from reaper_setlist.json_store import StoreError
from reaper_setlist.models import Settings, InvalidRecord


class ReadWriteLock:
    """Many concurrent readers or one writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    def acquire_read(self):
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True

    def release_write(self):
        with self._cond:
            self._writing = False
            self._cond.notify_all()


class SettingsCell:
    """Holds the current Settings for every request handler.

    Readers get the frozen record itself, which is as good as a copy. Writers
    persist the new record first and only swap it in once the file is written.
    """

    def __init__(self, files, initial=None):
        self.files = files
        self._settings = initial if initial is not None else Settings()
        self._lock = ReadWriteLock()

    def snapshot(self) -> Settings:
        self._lock.acquire_read()
        try:
            return self._settings
        finally:
            self._lock.release_read()

    def update(self, change):
        """Applies change(current) -> new settings under the write lock and saves it."""
        self._lock.acquire_write()
        try:
            new_settings = change(self._settings)
            self.files.save(Settings.FILENAME, new_settings.to_dict())
            self._settings = new_settings
            logging.info("Settings saved.")
            return new_settings
        finally:
            self._lock.release_write()


def load_settings(files) -> Settings:
    try:
        settings = Settings.from_dict(files.load(Settings.FILENAME))
        logging.info(f"Loaded settings from '{files.path_for(Settings.FILENAME)}'.")
        return settings
    except (StoreError, InvalidRecord) as e:
        logging.warning(f"Failed to load settings: {e}. Using default settings.")
        return Settings()
