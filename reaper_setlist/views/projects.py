from flask import Blueprint, jsonify

from reaper_setlist import context
from reaper_setlist.context import BadRequestBody

bp = Blueprint('projects', __name__)


@bp.route('/set-root', methods=['POST'])
def set_project_root():
    folder_path = context.body_string(context.json_body(), 'folderPath', 'folder_path')
    context.reaper_client().set_project_root(folder_path)
    return '', 204


@bp.route('/list', methods=['GET'])
def list_projects():
    settings = context.settings_cell().snapshot()
    # The list script searches whatever root Reaper currently holds.
    projects = context.reaper_client(settings).list_projects(root_folder=settings.folder_path)
    return jsonify(projects=projects)


@bp.route('/load', methods=['POST'])
def load_project():
    relative_path = context.body_string(context.json_body(), 'relativePath', 'relative_path')
    if not relative_path.strip():
        raise BadRequestBody("'relativePath' cannot be empty")
    context.reaper_client().load_project_by_path(relative_path)
    return '', 204


@bp.route('/current/get-duration', methods=['POST'])
def get_current_project_duration():
    duration = context.reaper_client().get_duration()
    return jsonify(duration.total_seconds())


@bp.route('/current/go-to-start', methods=['POST'])
def current_project_go_to_start():
    context.reaper_client().go_to_start()
    return '', 204


@bp.route('/current/go-to-end', methods=['POST'])
def current_project_go_to_end():
    context.reaper_client().go_to_end()
    return '', 204


@bp.route('/new-tab', methods=['POST'])
def new_project_tab():
    context.reaper_client().new_tab()
    return '', 204
