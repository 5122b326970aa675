import logging

from flask import Blueprint, jsonify

from reaper_setlist import context
from reaper_setlist.context import BadRequestBody
from reaper_setlist.models import Song
from reaper_setlist.reaper_protocol import ConfigError

bp = Blueprint('songs', __name__)


@bp.route('', methods=['GET'])
def get_all_songs():
    all_songs = context.songs().get_all()
    return jsonify({song_id: song.to_dict() for song_id, song in all_songs.items()})


@bp.route('', methods=['POST'])
def add_song():
    song = Song.from_new(context.json_body())
    context.songs().save(song)
    logging.info(f"Created song '{song.name}' ({song.id})")
    return jsonify(song.to_dict()), 201


@bp.route('/<song_id>', methods=['GET'])
def get_song(song_id):
    return jsonify(context.songs().get_by_id(song_id).to_dict())


@bp.route('/<song_id>', methods=['PUT'])
def edit_song(song_id):
    data = context.json_body()
    song = Song.from_dict({**data, 'id': data.get('id', song_id)})
    if song.id != song_id:
        logging.warning(f"Mismatched id in path and body: path_id={song_id}, body_id={song.id}")
        raise BadRequestBody("Song id in body does not match the URL")
    context.songs().save(song)
    return jsonify(song.to_dict())


@bp.route('/<song_id>', methods=['DELETE'])
def delete_song(song_id):
    store = context.songs()
    store.delete(store.get_by_id(song_id))
    logging.info(f"Deleted song {song_id}")
    return '', 204


@bp.route('/<song_id>/load', methods=['GET'])
def load_song(song_id):
    song = context.songs().get_by_id(song_id)
    if not song.path:
        raise ConfigError(f"Song '{song.name}' has no project path")
    context.reaper_client().load_project_by_path(song.path)
    logging.info(f"Loaded project '{song.path}' for song '{song.name}'")
    return '', 204
