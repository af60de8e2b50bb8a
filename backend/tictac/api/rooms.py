from flask import Blueprint, jsonify
from tictac import lobby, sessions
from tictac.services.games.errors import GameNotFound

rooms = Blueprint('rooms', __name__)


@rooms.route('', methods=['GET'])
def list_rooms():
    """
    Returns rooms that are waiting for a second player.
    """
    return jsonify({'rooms': [entry.to_dict() for entry in lobby.get_available_rooms()]})


@rooms.route('/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    """
    Returns a snapshot of the game session for a room.
    """
    session = sessions.get(room_id)
    if session is None:
        err = GameNotFound()
        return jsonify({'error': err.message, 'code': err.code}), 404
    return jsonify(session.to_dict())
