import logging

from flask import Blueprint, jsonify

from reaper_setlist import context
from reaper_setlist.context import BadRequestBody
from reaper_setlist.models import SetList

bp = Blueprint('setlists', __name__)


@bp.route('', methods=['GET'])
def get_all_sets():
    all_sets = context.setlists().get_all()
    return jsonify({set_id: setlist.to_dict() for set_id, setlist in all_sets.items()})


@bp.route('', methods=['POST'])
def create_set():
    setlist = SetList.from_new(context.json_body())
    context.setlists().save(setlist)
    logging.info(f"Created setlist for '{setlist.venue}' ({setlist.id})")
    return jsonify(setlist.to_dict()), 201


@bp.route('/<set_id>', methods=['GET'])
def get_set(set_id):
    return jsonify(context.setlists().get_by_id(set_id).to_dict())


@bp.route('/<set_id>', methods=['PUT'])
def update_set(set_id):
    data = context.json_body()
    setlist = SetList.from_dict({**data, 'id': data.get('id', set_id)})
    if setlist.id != set_id:
        logging.warning(f"Mismatched id in path and body: path_id={set_id}, body_id={setlist.id}")
        raise BadRequestBody("Setlist id in body does not match the URL")
    context.setlists().save(setlist)
    return jsonify(setlist.to_dict())


@bp.route('/<set_id>', methods=['DELETE'])
def delete_set(set_id):
    store = context.setlists()
    store.delete(store.get_by_id(set_id))
    logging.info(f"Deleted setlist {set_id}")
    return '', 204
