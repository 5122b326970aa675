"""Accessors for the per-application objects the views share."""
from flask import current_app, request

from reaper_setlist.reaper_client import ReaperClient

EXTENSION_KEY = 'reaper_setlist'


class BadRequestBody(ValueError):
    pass


def _state():
    return current_app.extensions[EXTENSION_KEY]


def songs():
    return _state()['songs']


def setlists():
    return _state()['setlists']


def settings_cell():
    return _state()['settings']


def reaper_client(settings=None):
    """Builds a client for the given settings, or for a snapshot of the current ones."""
    if settings is None:
        settings = settings_cell().snapshot()
    config = current_app.config
    return ReaperClient(
        settings,
        session=_state()['http_session'],
        timeout=config['REAPER_TIMEOUT'],
        list_timeout=config['LIST_PROJECTS_TIMEOUT'],
        poll_interval=config['LIST_PROJECTS_POLL_INTERVAL'],
    )


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequestBody("Invalid request body")
    return data


def optional_json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def body_string(data, camel_key, snake_key=None, required=True):
    """Reads a string field, accepting the snake_case spelling older clients send."""
    value = data.get(camel_key)
    if value is None and snake_key:
        value = data.get(snake_key)
    if value is None:
        if required:
            raise BadRequestBody(f"Missing '{camel_key}'")
        return None
    if not isinstance(value, str):
        raise BadRequestBody(f"'{camel_key}' must be a string")
    return value
