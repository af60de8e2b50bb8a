"""Stable error identifiers for rejected game and lobby operations.

The gateway forwards ``code`` to clients; ``message`` is the default
English text shown when a client has no translation of its own.
"""


class GameError(Exception):
    code = 'GAME_ERROR'
    message = 'Game error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


class RoomOccupied(GameError):
    code = 'ROOM_OCCUPIED'
    message = 'Room is already taken!'


class RoomNotFound(GameError):
    code = 'ROOM_NOT_FOUND'
    message = 'Room not found'


class RoomFull(GameError):
    code = 'ROOM_FULL'
    message = 'Room is full'


class GameNotFound(GameError):
    code = 'GAME_NOT_FOUND'
    message = 'Game not found'


class NotYourTurn(GameError):
    code = 'NOT_YOUR_TURN'
    message = "It's not your turn"


class CellOccupied(GameError):
    code = 'CELL_OCCUPIED'
    message = 'Cell is already taken'


class WrongPlayer(GameError):
    code = 'WRONG_PLAYER'

    def __init__(self, symbol):
        self.symbol = getattr(symbol, 'value', symbol)
        super().__init__(f"You are not playing as {self.symbol}!")
