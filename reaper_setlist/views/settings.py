import logging
from dataclasses import replace

from flask import Blueprint, jsonify

from reaper_setlist import context
from reaper_setlist.context import BadRequestBody
from reaper_setlist.models import Settings
from reaper_setlist.reaper_protocol import HttpError

bp = Blueprint('settings', __name__)


@bp.route('', methods=['GET'])
def get_settings():
    return jsonify(context.settings_cell().snapshot().to_dict())


@bp.route('', methods=['PUT'])
def update_settings():
    data = context.json_body()
    new_settings = Settings.from_dict(data)

    def merge(current):
        # Action ids are managed separately; keep the stored ones unless the body names them.
        kept = {attr: getattr(current, attr) for attr in Settings.ACTION_ID_FIELDS
                if Settings.JSON_KEYS[attr] not in data}
        return replace(new_settings, **kept)

    saved = context.settings_cell().update(merge)
    return jsonify(saved.to_dict())


@bp.route('/action-ids', methods=['PUT'])
def update_action_ids():
    ids = Settings.from_dict(context.json_body())

    def apply_ids(current):
        return replace(current, **{attr: getattr(ids, attr) for attr in Settings.ACTION_ID_FIELDS})

    saved = context.settings_cell().update(apply_ids)
    logging.info("Script action ids updated.")
    return jsonify(saved.to_dict())


@bp.route('/test-connection', methods=['POST'])
def test_connection():
    data = context.json_body()
    url = context.body_string(data, 'reaperUrl', 'reaper_url').strip()
    if not url:
        raise BadRequestBody("'reaperUrl' cannot be empty")
    test_settings = Settings(
        reaper_url=url,
        reaper_username=context.body_string(data, 'reaperUsername', 'reaper_username', required=False) or None,
        reaper_password=context.body_string(data, 'reaperPassword', 'reaper_password', required=False) or None,
    )
    try:
        status = context.reaper_client(test_settings).test_connectivity()
    except HttpError as e:
        logging.warning(f"Reaper connection test failed: {e}")
        return jsonify(success=False, message=str(e)), 503
    if status == 200:
        return jsonify(success=True, message=f"Connected to Reaper at {url}")
    logging.warning(f"Reaper connection test got status {status} from {url}")
    message = f"Reaper answered with status {status}"
    if status == 401:
        message += " (check username and password)"
    return jsonify(success=False, message=message, status=status), 502


def _settings_with_action_id(attr):
    data = context.optional_json_body()
    settings = context.settings_cell().snapshot()
    action_id = data.get('actionId', data.get('action_id'))
    if action_id not in (None, ''):
        settings = replace(settings, **{attr: str(action_id).strip()})
    return settings


@bp.route('/test-load-project', methods=['POST'])
def test_load_project():
    settings = _settings_with_action_id('load_project_script_action_id')
    context.reaper_client(settings).verify_load_project()
    logging.info("LoadProjectFromRelativePath script verified.")
    return '', 204


@bp.route('/test-list-projects', methods=['POST'])
def test_list_projects():
    settings = _settings_with_action_id('list_projects_script_action_id')
    context.reaper_client(settings).verify_list_projects()
    logging.info("ListProjectFiles script verified.")
    return '', 204
