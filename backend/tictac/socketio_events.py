from flask_socketio import join_room, leave_room, close_room, emit
from flask import current_app, request
from tictac import socketio, sessions, lobby
from tictac.models import Profile, Symbol
from tictac.services.games.errors import GameError
from tictac.services.games.rules import BOARD_INDEXES
from typing import Any, Dict, Optional

NAMESPACE = '/ws'


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws', 'sid': _get_sid()})


def handle_disconnect(reason=None):
    # Any departure ends the match; the lobby keeps a short grace window
    # for a creator whose room is still advertised
    sid = _get_sid()
    result = sessions.leave(sid)
    if result:
        _notify_opponent_left(result.room_id, result.remaining_id)
    removed = lobby.handle_creator_disconnect(sid)
    emptied = lobby.remove_player_from_room(sid)
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason} session={result.room_id if result else None} lobby_removed={removed + emptied}")
    _broadcast_rooms()


def handle_create_game(data):
    room_id = _room_id(data)
    if not room_id:
        return
    sid = _get_sid()
    profile = Profile.from_dict((data or {}).get('profile'), fallback_id=sid)
    try:
        created = sessions.create(room_id, sid, profile)
    except GameError as err:
        _emit_error(err)
        return
    join_room(room_id)
    lobby.add_room(room_id, profile, sid)
    emit('created', {'roomId': room_id, 'symbol': created.symbol.value})
    _broadcast_rooms()


def handle_join_game(data):
    room_id = _room_id(data)
    if not room_id:
        return
    sid = _get_sid()
    profile = Profile.from_dict((data or {}).get('profile'), fallback_id=sid)
    try:
        joined = sessions.join(room_id, sid, profile)
    except GameError as err:
        _emit_error(err)
        return
    join_room(room_id)
    lobby.add_player_to_room(room_id, sid)
    # Each side gets its own symbol and the other side's profile
    for cid in (joined.x_id, joined.o_id):
        emit('game_start', {
            'roomId': room_id,
            'symbol': joined.symbol_for(cid).value,
            'opponentProfile': joined.opponent_profile(cid).to_dict(),
            'turn': Symbol.X.value,
        }, to=cid)
    _broadcast_rooms()


def handle_make_move(data):
    room_id = _room_id(data)
    if not room_id:
        return
    index = (data or {}).get('index')
    symbol = (data or {}).get('symbol')
    if isinstance(index, bool) or not isinstance(index, int) or index not in BOARD_INDEXES:
        _emit_bad_request('index must be an integer between 0 and 8')
        return
    if symbol not in (Symbol.X.value, Symbol.O.value):
        _emit_bad_request('symbol must be X or O')
        return
    try:
        result = sessions.move(room_id, _get_sid(), index, symbol)
    except GameError as err:
        _emit_error(err)
        return
    if result.concluded:
        emit('game_over', {
            'board': result.board,
            'winner': result.winner,
            'winLine': result.win_line,
        }, to=room_id)
    else:
        emit('update_board', {'board': result.board, 'turn': result.next_turn.value}, to=room_id)


def handle_request_rematch(data):
    room_id = _room_id(data)
    if not room_id:
        return
    try:
        result = sessions.vote_rematch(room_id, _get_sid())
    except GameError as err:
        _emit_error(err)
        return
    if not result.restarted:
        if result.opponent_id:
            emit('opponent_wants_rematch', {'roomId': room_id}, to=result.opponent_id)
        return
    for cid, symbol in ((result.new_x_id, Symbol.X), (result.new_o_id, Symbol.O)):
        emit('game_restarted', {
            'roomId': room_id,
            'board': result.board,
            'turn': Symbol.X.value,
            'symbol': symbol.value,
        }, to=cid)


def handle_leave_game(data):
    room_id = _room_id(data)
    if not room_id:
        return
    sid = _get_sid()
    result = sessions.leave(sid)
    # The seat the caller actually held wins over the payload
    if result:
        room_id = result.room_id
    leave_room(room_id)
    emit('left', {'roomId': room_id})
    if result:
        _notify_opponent_left(result.room_id, result.remaining_id)
    lobby.remove_room(room_id, connection_id=sid)
    _broadcast_rooms()


def handle_get_rooms(data=None):
    emit('rooms_updated', _rooms_payload())


def handle_reconnect_creator(data):
    profile_data = (data or {}).get('profile')
    if not profile_data or not profile_data.get('id'):
        _emit_bad_request('profile.id is required')
        return
    sid = _get_sid()
    room_id = lobby.handle_creator_reconnect(str(profile_data['id']), sid)
    if room_id and lobby.get(room_id):
        join_room(room_id)
    current_app.logger.info(f"[reconnect] sid={sid} creator={profile_data['id']} room={room_id}")
    _broadcast_rooms()


# ---- Helpers ----

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _room_id(data: Optional[Dict[str, Any]]) -> Optional[str]:
    room_id = (data or {}).get('roomId')
    if not isinstance(room_id, str) or not room_id:
        _emit_bad_request('roomId is required')
        return None
    return room_id

def _emit_error(err: GameError) -> None:
    current_app.logger.info(f"[rejected] sid={_get_sid()} code={err.code}")
    emit('error', err.to_dict())

def _emit_bad_request(message: str) -> None:
    emit('error', {'code': 'BAD_REQUEST', 'message': message})

def _notify_opponent_left(room_id: str, remaining_id: Optional[str]) -> None:
    if remaining_id:
        socketio.emit('opponent_left', {'roomId': room_id}, to=remaining_id, namespace=NAMESPACE)
    close_room(room_id, namespace=NAMESPACE)

def _rooms_payload() -> Dict[str, Any]:
    return {'rooms': [entry.to_dict() for entry in lobby.get_available_rooms()]}

def _broadcast_rooms() -> None:
    socketio.emit('rooms_updated', _rooms_payload(), namespace=NAMESPACE)


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('create_game', handle_create_game, namespace=NAMESPACE)
    socketio.on_event('join_game', handle_join_game, namespace=NAMESPACE)
    socketio.on_event('make_move', handle_make_move, namespace=NAMESPACE)
    socketio.on_event('request_rematch', handle_request_rematch, namespace=NAMESPACE)
    socketio.on_event('leave_game', handle_leave_game, namespace=NAMESPACE)
    socketio.on_event('get_rooms', handle_get_rooms, namespace=NAMESPACE)
    socketio.on_event('reconnect_creator', handle_reconnect_creator, namespace=NAMESPACE)
