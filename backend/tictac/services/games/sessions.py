"""Authoritative game sessions, one per room.

``SessionManager`` is the only thing that mutates a ``GameSession``. Every
operation validates first and writes second, under a single lock, so a
rejected request leaves the session untouched and two racing requests for
the same room can never both pass their checks.
"""

import logging
import random
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from tictac.models import DRAW, GameSession, Profile, SessionStatus, Symbol, empty_board
from .errors import (
    CellOccupied,
    GameNotFound,
    NotYourTurn,
    RoomFull,
    RoomNotFound,
    RoomOccupied,
    WrongPlayer,
)
from .rules import BOARD_INDEXES, assign_symbols, find_winner, is_board_full

logger = logging.getLogger(__name__)


@dataclass
class CreateResult:
    room_id: str
    symbol: Symbol = Symbol.X


@dataclass
class JoinResult:
    room_id: str
    x_id: str
    o_id: str
    profiles: Dict[str, Profile]

    def symbol_for(self, connection_id: str) -> Symbol:
        return Symbol.X if connection_id == self.x_id else Symbol.O

    def opponent_profile(self, connection_id: str) -> Profile:
        other = self.o_id if connection_id == self.x_id else self.x_id
        return self.profiles[other]


@dataclass
class MoveResult:
    board: List[Optional[str]]
    next_turn: Optional[Symbol] = None
    winner: Optional[str] = None
    win_line: Optional[List[int]] = None

    @property
    def concluded(self) -> bool:
        return self.winner is not None


@dataclass
class RematchResult:
    restarted: bool
    board: Optional[List[Optional[str]]] = None
    new_x_id: Optional[str] = None
    new_o_id: Optional[str] = None
    opponent_id: Optional[str] = None


@dataclass
class LeaveResult:
    room_id: str
    remaining_id: Optional[str] = None


class SessionManager:
    """Maps room id -> GameSession and applies the game rules."""

    def __init__(self, rng=None):
        self._sessions: Dict[str, GameSession] = {}
        self._lock = threading.RLock()
        self._rng = rng or random.Random()

    def init_app(self, app, rng=None):
        self.reset()
        if rng is not None:
            self._rng = rng
        app.extensions['tictac.sessions'] = self

    def reset(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, room_id: str) -> Optional[GameSession]:
        return self._sessions.get(room_id)

    def _seated_room(self, connection_id: str) -> Optional[str]:
        for room_id, session in self._sessions.items():
            if session.is_bound(connection_id):
                return room_id
        return None

    def create(self, room_id: str, connection_id: str, profile: Profile) -> CreateResult:
        with self._lock:
            if room_id in self._sessions:
                raise RoomOccupied()
            # A connection holds at most one seat across all rooms
            seated = self._seated_room(connection_id)
            if seated is not None:
                raise RoomOccupied(f"You already have a seat in room {seated}")
            self._sessions[room_id] = GameSession(
                room_id=room_id,
                player_x=connection_id,
                profiles={connection_id: profile},
            )
        logger.info(f"[create] room={room_id} cid={connection_id} name={profile.name}")
        return CreateResult(room_id=room_id)

    def join(self, room_id: str, connection_id: str, profile: Profile) -> JoinResult:
        with self._lock:
            session = self._sessions.get(room_id)
            if session is None:
                raise RoomNotFound()
            if len(session.profiles) >= 2 or connection_id in session.profiles:
                raise RoomFull()
            seated = self._seated_room(connection_id)
            if seated is not None:
                raise RoomFull(f"You already have a seat in room {seated}")

            x_id, o_id = assign_symbols(session.player_x, connection_id, self._rng)
            session.profiles[connection_id] = profile
            session.player_x = x_id
            session.player_o = o_id
            # Votes cast while waiting do not carry into the new game
            session.rematch_votes.clear()
            result = JoinResult(room_id=room_id, x_id=x_id, o_id=o_id, profiles=dict(session.profiles))
        logger.info(f"[join] room={room_id} cid={connection_id} x={x_id} o={o_id}")
        return result

    def move(self, room_id: str, connection_id: str, index: int, symbol) -> MoveResult:
        if index not in BOARD_INDEXES:
            raise ValueError(f"cell index out of range: {index!r}")
        symbol = Symbol(symbol)

        with self._lock:
            session = self._sessions.get(room_id)
            if session is None:
                raise GameNotFound()
            # No turn is legal before the opponent arrives or after the game ends
            if session.status is not SessionStatus.IN_PROGRESS:
                raise NotYourTurn()
            if session.turn is not symbol:
                raise NotYourTurn()
            if session.board[index] is not None:
                raise CellOccupied()
            if session.player_for(symbol) != connection_id:
                raise WrongPlayer(symbol)

            session.board[index] = symbol
            board = session.board_view()

            won = find_winner(session.board)
            if won:
                mark, line = won
                result = MoveResult(board=board, winner=mark.value, win_line=line)
            elif is_board_full(session.board):
                result = MoveResult(board=board, winner=DRAW)
            else:
                session.turn = symbol.other
                result = MoveResult(board=board, next_turn=session.turn)

        logger.info(
            f"[move] room={room_id} cid={connection_id} index={index} symbol={symbol.value} "
            f"next={result.next_turn.value if result.next_turn else None} winner={result.winner}"
        )
        return result

    def vote_rematch(self, room_id: str, connection_id: str) -> RematchResult:
        with self._lock:
            session = self._sessions.get(room_id)
            if session is None:
                raise GameNotFound()
            if not session.is_bound(connection_id):
                logger.info(f"[rematch-ignored] room={room_id} cid={connection_id} not seated")
                return RematchResult(restarted=False)

            session.rematch_votes.add(connection_id)
            opponent_id = session.opponent_of(connection_id)
            if session.player_o is None or len(session.rematch_votes) < 2:
                logger.info(f"[rematch-vote] room={room_id} cid={connection_id} votes={len(session.rematch_votes)}")
                return RematchResult(restarted=False, opponent_id=opponent_id)

            session.player_x, session.player_o = session.player_o, session.player_x
            session.board = empty_board()
            session.turn = Symbol.X
            session.rematch_votes.clear()
            result = RematchResult(
                restarted=True,
                board=session.board_view(),
                new_x_id=session.player_x,
                new_o_id=session.player_o,
                opponent_id=opponent_id,
            )
        logger.info(f"[rematch] room={room_id} x={result.new_x_id} o={result.new_o_id}")
        return result

    def leave(self, connection_id: str) -> Optional[LeaveResult]:
        with self._lock:
            for room_id, session in self._sessions.items():
                if session.is_bound(connection_id):
                    del self._sessions[room_id]
                    remaining = session.opponent_of(connection_id)
                    break
            else:
                return None
        logger.info(f"[leave] room={room_id} cid={connection_id} remaining={remaining}")
        return LeaveResult(room_id=room_id, remaining_id=remaining)
