from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import ClassVar, List, Optional


class InvalidRecord(ValueError):
    """Raised when a request body does not describe a valid record."""


def _require_str(data, key, allow_empty=False):
    value = data.get(key)
    if not isinstance(value, str):
        raise InvalidRecord(f"'{key}' must be a string")
    if not allow_empty and not value.strip():
        raise InvalidRecord(f"'{key}' cannot be empty")
    return value


def _optional_str(data, key):
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise InvalidRecord(f"'{key}' must be a string")
    value = str(value).strip()
    return value or None


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Song:
    FILENAME: ClassVar[str] = 'songs.json'

    id: str
    name: str
    length: float
    path: str = ''

    @classmethod
    def from_dict(cls, data: dict) -> "Song":
        if not isinstance(data, dict):
            raise InvalidRecord("Song must be a JSON object")
        length = data.get('length', 0)
        if (isinstance(length, bool) or not isinstance(length, (int, float))
                or (isinstance(length, float) and not math.isfinite(length)) or length < 0):
            raise InvalidRecord("'length' must be a non-negative number of seconds")
        path = data.get('path', '')
        if path is None:
            path = ''
        if not isinstance(path, str):
            raise InvalidRecord("'path' must be a string")
        return cls(id=_require_str(data, 'id'), name=_require_str(data, 'name'),
                   length=length, path=path)

    @classmethod
    def from_new(cls, data: dict) -> "Song":
        """Builds a song from a create request, assigning a fresh id."""
        if not isinstance(data, dict):
            raise InvalidRecord("Song must be a JSON object")
        return cls.from_dict({**data, 'id': new_id()})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SetList:
    FILENAME: ClassVar[str] = 'sets.json'

    id: str
    venue: str
    date: str
    songs: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SetList":
        if not isinstance(data, dict):
            raise InvalidRecord("Setlist must be a JSON object")
        date = _require_str(data, 'date')
        try:
            datetime.fromisoformat(date.replace('Z', '+00:00'))
        except ValueError:
            raise InvalidRecord(f"'date' is not an ISO-8601 timestamp: {date}")
        songs = data.get('songs', [])
        if not isinstance(songs, list) or not all(isinstance(s, str) for s in songs):
            raise InvalidRecord("'songs' must be a list of strings")
        return cls(id=_require_str(data, 'id'), venue=_require_str(data, 'venue', allow_empty=True),
                   date=date, songs=list(songs))

    @classmethod
    def from_new(cls, data: dict) -> "SetList":
        if not isinstance(data, dict):
            raise InvalidRecord("Setlist must be a JSON object")
        return cls.from_dict({**data, 'id': data.get('id') or new_id()})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Settings:
    """Reaper connection settings.

    Action ids stay optional here; the operation that needs one reports its
    absence when it is called.
    """
    FILENAME: ClassVar[str] = 'settings.json'

    reaper_url: str = ''
    reaper_username: Optional[str] = None
    reaper_password: Optional[str] = None
    folder_path: str = ''
    set_root_script_action_id: Optional[str] = None
    list_projects_script_action_id: Optional[str] = None
    load_project_script_action_id: Optional[str] = None

    JSON_KEYS: ClassVar[dict] = {
        'reaper_url': 'reaperUrl',
        'reaper_username': 'reaperUsername',
        'reaper_password': 'reaperPassword',
        'folder_path': 'folderPath',
        'set_root_script_action_id': 'setRootScriptActionId',
        'list_projects_script_action_id': 'listProjectsScriptActionId',
        'load_project_script_action_id': 'loadProjectScriptActionId',
    }
    ACTION_ID_FIELDS: ClassVar[tuple] = (
        'set_root_script_action_id',
        'list_projects_script_action_id',
        'load_project_script_action_id',
    )

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        if not isinstance(data, dict):
            raise InvalidRecord("Settings must be a JSON object")
        values = {}
        for attr, key in cls.JSON_KEYS.items():
            if attr in ('reaper_url', 'folder_path'):
                value = data.get(key) or ''
                if not isinstance(value, str):
                    raise InvalidRecord(f"'{key}' must be a string")
                values[attr] = value.strip()
            else:
                values[attr] = _optional_str(data, key)
        return cls(**values)

    def to_dict(self) -> dict:
        return {key: getattr(self, attr) for attr, key in self.JSON_KEYS.items()}
