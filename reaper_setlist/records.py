import logging

from reaper_setlist.json_store import NotFound, DataParseError
from reaper_setlist.models import InvalidRecord


class RecordStore:
    """Keyed collection of records persisted as one JSON object per entity type.

    Every save or delete re-reads the whole mapping, changes one key and
    rewrites the file. Nothing serializes that cycle, so two writers racing on
    the same entity type can lose an update (last write wins).
    """

    def __init__(self, record_cls, files, cache):
        self.record_cls = record_cls
        self.files = files
        self.cache = cache
        self.filename = record_cls.FILENAME
        self.cache_key = f"records:{self.filename}"

    def _read_raw(self):
        cached = self.cache.get(self.cache_key)
        if cached is not None:
            logging.debug(f"Cache hit for key '{self.cache_key}'.")
            return dict(cached)
        logging.info(f"Cache miss for key '{self.cache_key}'. Reading from '{self.filename}'.")
        try:
            data = self.files.load(self.filename)
        except NotFound:
            logging.info(f"{self.filename} not found, starting with an empty collection.")
            return {}
        if not isinstance(data, dict):
            raise DataParseError(f"{self.filename} must contain a JSON object keyed by id")
        self.cache.set(self.cache_key, data)
        return dict(data)

    def _write_raw(self, data):
        self.files.save(self.filename, data)
        self.cache.delete(self.cache_key)

    def _decode(self, record_id, raw):
        try:
            return self.record_cls.from_dict(raw)
        except InvalidRecord as e:
            raise DataParseError(f"Corrupt record '{record_id}' in {self.filename}: {e}") from e

    def get_all(self):
        return {record_id: self._decode(record_id, raw) for record_id, raw in self._read_raw().items()}

    def get_by_id(self, record_id):
        data = self._read_raw()
        if record_id not in data:
            raise NotFound(f"Item with id {record_id} not found")
        return self._decode(record_id, data[record_id])

    def save(self, record):
        data = self._read_raw()
        data[record.id] = record.to_dict()
        self._write_raw(data)

    def delete(self, record):
        data = self._read_raw()
        data.pop(record.id, None)
        self._write_raw(data)
