from flask import Blueprint, jsonify
from tictac import lobby, sessions

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the tic-tac-toe game server!'})

@main.route('/health')
def health():
    return jsonify({
        'status': 'ok',
        'sessions': len(sessions),
        'openRooms': len(lobby.get_available_rooms()),
    })
