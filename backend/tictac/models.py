from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Set

from tictac.services.games.rules import find_winner, is_board_full

BOARD_SIZE = 9
DRAW = 'Draw'


class Symbol(str, Enum):
    X = 'X'
    O = 'O'

    @property
    def other(self) -> 'Symbol':
        return Symbol.O if self is Symbol.X else Symbol.X


class SessionStatus(str, Enum):
    AWAITING_OPPONENT = 'awaiting_opponent'
    IN_PROGRESS = 'in_progress'
    CONCLUDED = 'concluded'


@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    avatar: Optional[str] = None

    @classmethod
    def from_dict(cls, data, fallback_id: str) -> 'Profile':
        """Build a profile from a client payload.

        The participant id falls back to the connection id when the client
        does not send a stable one.
        """
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=str(data.get('id') or fallback_id),
            name=str(data.get('name') or 'Player'),
            avatar=data.get('avatar') or None,
        )

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'avatar': self.avatar}


def empty_board() -> List[Optional[Symbol]]:
    return [None] * BOARD_SIZE


@dataclass
class GameSession:
    room_id: str
    player_x: str
    profiles: Dict[str, Profile]
    player_o: Optional[str] = None
    board: List[Optional[Symbol]] = field(default_factory=empty_board)
    turn: Symbol = Symbol.X
    rematch_votes: Set[str] = field(default_factory=set)

    @property
    def status(self) -> SessionStatus:
        if self.player_o is None:
            return SessionStatus.AWAITING_OPPONENT
        if find_winner(self.board) or is_board_full(self.board):
            return SessionStatus.CONCLUDED
        return SessionStatus.IN_PROGRESS

    def is_bound(self, connection_id: str) -> bool:
        return connection_id in (self.player_x, self.player_o)

    def player_for(self, symbol: Symbol) -> Optional[str]:
        return self.player_x if symbol is Symbol.X else self.player_o

    def opponent_of(self, connection_id: str) -> Optional[str]:
        if connection_id == self.player_x:
            return self.player_o
        if connection_id == self.player_o:
            return self.player_x
        return None

    def board_view(self) -> List[Optional[str]]:
        return [cell.value if cell else None for cell in self.board]

    def to_dict(self):
        players = {}
        for symbol in Symbol:
            cid = self.player_for(symbol)
            profile = self.profiles.get(cid) if cid else None
            players[symbol.value] = profile.to_dict() if profile else None
        return {
            'roomId': self.room_id,
            'status': self.status.value,
            'board': self.board_view(),
            'turn': self.turn.value,
            'players': players,
            'rematchVotes': len(self.rematch_votes),
        }


@dataclass
class LobbyEntry:
    room_id: str
    creator_profile: Profile
    created_at: float
    players: List[str]
    creator_id: str
    creator_connection: str

    def to_dict(self):
        # Occupants and creator identity stay server-side
        return {
            'id': self.room_id,
            'creatorProfile': self.creator_profile.to_dict(),
            'createdAt': datetime.fromtimestamp(self.created_at, timezone.utc).isoformat(),
        }


@dataclass
class DisconnectRecord:
    creator_id: str
    disconnected_at: float
    room_id: str
