"""Lobby directory of rooms that are still waiting for an opponent.

Expiry is pull-based: nothing is scheduled. Each listing sweeps entries
past the room TTL, and entries whose creator disconnected longer ago than
the grace window.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from tictac.models import DisconnectRecord, LobbyEntry, Profile

logger = logging.getLogger(__name__)

DEFAULT_ROOM_TTL_SEC = 60 * 60
DEFAULT_CREATOR_GRACE_SEC = 30


class LobbyDirectory:

    def __init__(
        self,
        room_ttl: float = DEFAULT_ROOM_TTL_SEC,
        creator_grace: float = DEFAULT_CREATOR_GRACE_SEC,
        clock: Callable[[], float] = time.time,
    ):
        self.room_ttl = room_ttl
        self.creator_grace = creator_grace
        self._clock = clock
        self._rooms: Dict[str, LobbyEntry] = {}
        self._disconnected: Dict[str, DisconnectRecord] = {}  # creator_id -> record
        self._lock = threading.RLock()

    def init_app(self, app, clock: Optional[Callable[[], float]] = None):
        self.reset()
        self.room_ttl = float(app.config.get('LOBBY_ROOM_TTL_SEC', DEFAULT_ROOM_TTL_SEC))
        self.creator_grace = float(app.config.get('CREATOR_GRACE_SEC', DEFAULT_CREATOR_GRACE_SEC))
        if clock is not None:
            self._clock = clock
        app.extensions['tictac.lobby'] = self

    def reset(self) -> None:
        with self._lock:
            self._rooms.clear()
            self._disconnected.clear()

    def get(self, room_id: str) -> Optional[LobbyEntry]:
        return self._rooms.get(room_id)

    def pending_disconnect(self, creator_id: str) -> Optional[DisconnectRecord]:
        return self._disconnected.get(creator_id)

    def add_room(self, room_id: str, creator_profile: Profile, connection_id: str) -> LobbyEntry:
        entry = LobbyEntry(
            room_id=room_id,
            creator_profile=creator_profile,
            created_at=self._clock(),
            players=[connection_id],
            creator_id=creator_profile.id,
            creator_connection=connection_id,
        )
        with self._lock:
            self._rooms[room_id] = entry
        logger.info(f"[lobby-add] room={room_id} creator={creator_profile.id}")
        return entry

    def remove_room(self, room_id: str, connection_id: Optional[str] = None) -> bool:
        """Close a listed room.

        With ``connection_id`` the room is only closed when that connection
        occupies it.
        """
        with self._lock:
            entry = self._rooms.get(room_id)
            if entry is None:
                return False
            if connection_id is not None and connection_id not in entry.players:
                return False
            del self._rooms[room_id]
            self._disconnected.pop(entry.creator_id, None)
        logger.info(f"[lobby-close] room={room_id}")
        return True

    def add_player_to_room(self, room_id: str, connection_id: str) -> None:
        with self._lock:
            entry = self._rooms.get(room_id)
            if entry is None:
                return
            entry.players.append(connection_id)
            if len(entry.players) >= 2:
                # Full rooms are no longer advertised; the session lives on
                del self._rooms[room_id]
                logger.info(f"[lobby-filled] room={room_id}")

    def remove_player_from_room(self, connection_id: str) -> List[str]:
        with self._lock:
            empty = []
            for room_id, entry in self._rooms.items():
                entry.players = [cid for cid in entry.players if cid != connection_id]
                if not entry.players:
                    empty.append(room_id)
            for room_id in empty:
                del self._rooms[room_id]
        if empty:
            logger.info(f"[lobby-empty] cid={connection_id} rooms={empty}")
        return empty

    def handle_creator_disconnect(self, connection_id: str) -> List[str]:
        now = self._clock()
        removed = []
        with self._lock:
            for room_id, entry in list(self._rooms.items()):
                if entry.creator_connection != connection_id:
                    continue
                self._disconnected[entry.creator_id] = DisconnectRecord(
                    creator_id=entry.creator_id,
                    disconnected_at=now,
                    room_id=room_id,
                )
                entry.players = [cid for cid in entry.players if cid != connection_id]
                if not entry.players:
                    # Nothing left to reconnect to
                    del self._rooms[room_id]
                    self._disconnected.pop(entry.creator_id, None)
                    removed.append(room_id)
        if removed:
            logger.info(f"[lobby-creator-gone] cid={connection_id} rooms={removed}")
        return removed

    def handle_creator_reconnect(self, creator_id: str, connection_id: Optional[str] = None) -> Optional[str]:
        """Clear a pending disconnect for ``creator_id``.

        When ``connection_id`` is given and the room is still listed, the
        entry is rebound to the new connection. Returns the room id of the
        cleared record, if there was one.
        """
        with self._lock:
            record = self._disconnected.pop(creator_id, None)
            if record is None:
                return None
            entry = self._rooms.get(record.room_id)
            if entry is not None and connection_id is not None:
                # Swap the creator's seat in place; occupancy never grows here
                old = entry.creator_connection
                entry.players = [connection_id if cid == old else cid for cid in entry.players]
                entry.creator_connection = connection_id
        logger.info(f"[lobby-reconnect] creator={creator_id} room={record.room_id} cid={connection_id}")
        return record.room_id

    def sweep(self) -> List[str]:
        now = self._clock()
        swept = []
        with self._lock:
            for room_id, entry in list(self._rooms.items()):
                if now - entry.created_at > self.room_ttl:
                    del self._rooms[room_id]
                    swept.append(room_id)

            for creator_id, record in list(self._disconnected.items()):
                if now - record.disconnected_at > self.creator_grace:
                    if self._rooms.pop(record.room_id, None) is not None:
                        swept.append(record.room_id)
                    del self._disconnected[creator_id]
        if swept:
            logger.info(f"[lobby-sweep] rooms={swept}")
        return swept

    def get_available_rooms(self) -> List[LobbyEntry]:
        with self._lock:
            self.sweep()
            rooms = [entry for entry in self._rooms.values() if len(entry.players) == 1]
        return sorted(rooms, key=lambda entry: entry.created_at)

    def __len__(self) -> int:
        return len(self._rooms)
