from flask import Blueprint, Response, jsonify, render_template

from reaper_setlist import context

bp = Blueprint('scripts', __name__)

SCRIPTS = ('SetProjectRootFolder', 'ListProjectFiles', 'LoadProjectFromRelativePath')


@bp.route('/<name>.lua', methods=['GET'])
def serve_script(name):
    if name not in SCRIPTS:
        return jsonify(error=f"Unknown script {name}.lua"), 404
    settings = context.settings_cell().snapshot()
    source = render_template(f"lua/{name}.lua", root_folder=settings.folder_path)
    return Response(source, mimetype='text/plain')
