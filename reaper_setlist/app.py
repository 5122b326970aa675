import logging
import os

import requests
from flask import Flask, jsonify, send_from_directory, abort
from flask_caching import Cache

from reaper_setlist.context import EXTENSION_KEY, BadRequestBody
from reaper_setlist.json_store import JsonFileStore, StoreError, NotFound
from reaper_setlist.models import Song, SetList, InvalidRecord
from reaper_setlist.records import RecordStore
from reaper_setlist.reaper_protocol import (
    ReaperError, HttpError, CommandError, ParseError, ConfigError, NonceMismatch,
)
from reaper_setlist.settings_state import SettingsCell, load_settings

DEFAULT_CONFIG = {
    "DATA_DIR": os.path.join(os.getcwd(), 'data'),
    "SPA_DIR": os.path.join(os.getcwd(), 'frontend', 'build'),
    "CACHE_TYPE": "SimpleCache",
    "CACHE_DEFAULT_TIMEOUT": 300,
    "REAPER_TIMEOUT": 5.0,
    "LIST_PROJECTS_TIMEOUT": 2.0,
    "LIST_PROJECTS_POLL_INTERVAL": 0.1,
}

# Most specific class first; Flask picks the handler by the exception's MRO.
ERROR_STATUS = (
    (NotFound, 404),
    (StoreError, 500),
    (InvalidRecord, 400),
    (BadRequestBody, 400),
    (CommandError, 502),
    (HttpError, 500),
    (ParseError, 500),
    (ConfigError, 412),
    (NonceMismatch, 417),
    (ReaperError, 500),
)


def _register_error_handlers(app):
    def make_handler(status):
        def handle(e):
            if status >= 500:
                logging.error(f"{type(e).__name__}: {e}")
            else:
                logging.warning(f"{type(e).__name__}: {e}")
            return jsonify(error=str(e)), status
        return handle

    for exc_class, status in ERROR_STATUS:
        app.register_error_handler(exc_class, make_handler(status))


def _lua_string(value):
    """Quotes a Python string as a Lua string literal."""
    text = str(value or '')
    for raw, escaped in (('\\', '\\\\'), ('"', '\\"'), ('\n', '\\n'), ('\r', '\\r')):
        text = text.replace(raw, escaped)
    return f'"{text}"'


def create_app(config=None, http_session=None):
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env('SETLIST')
    if config:
        app.config.from_mapping(config)

    cache = Cache(app)
    files = JsonFileStore(app.config['DATA_DIR'])
    settings = SettingsCell(files, load_settings(files))
    app.extensions[EXTENSION_KEY] = {
        'files': files,
        'cache': cache,
        'songs': RecordStore(Song, files, cache),
        'setlists': RecordStore(SetList, files, cache),
        'settings': settings,
        'http_session': http_session if http_session is not None else requests.Session(),
    }
    logging.info(f"Data directory: {app.config['DATA_DIR']}")

    from reaper_setlist.views import songs, setlists, settings as settings_views, projects, scripts
    app.register_blueprint(songs.bp, url_prefix='/api/songs')
    app.register_blueprint(setlists.bp, url_prefix='/api/sets')
    app.register_blueprint(settings_views.bp, url_prefix='/api/settings')
    app.register_blueprint(projects.bp, url_prefix='/api/reaper-project')
    app.register_blueprint(scripts.bp, url_prefix='/api/reaper-script')

    _register_error_handlers(app)
    app.add_template_filter(_lua_string, 'lua_string')

    @app.route('/', defaults={'path': ''})
    @app.route('/<path:path>')
    def spa(path):
        if path == 'api' or path.startswith('api/'):
            return jsonify(error=f"No API route for /{path}"), 404
        spa_dir = os.path.abspath(app.config['SPA_DIR'])
        if path and os.path.isfile(os.path.join(spa_dir, path)):
            return send_from_directory(spa_dir, path)
        if not os.path.isfile(os.path.join(spa_dir, 'index.html')):
            logging.warning(f"Frontend build not found in {spa_dir}")
            abort(404)
        return send_from_directory(spa_dir, 'index.html')

    return app
