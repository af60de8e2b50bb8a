import pytest

from tictac.models import Profile
from tictac.services.games.lobby import LobbyDirectory

ALICE = Profile(id='p1', name='Alice')
BOB = Profile(id='p2', name='Bob')


@pytest.fixture()
def directory(clock):
    return LobbyDirectory(room_ttl=3600, creator_grace=30, clock=clock)


def _ids(entries):
    return [e.room_id for e in entries]


def test_new_room_is_listed(directory, clock):
    directory.add_room('R1', ALICE, 'c1')
    rooms = directory.get_available_rooms()
    assert _ids(rooms) == ['R1']
    payload = rooms[0].to_dict()
    assert payload['id'] == 'R1'
    assert payload['creatorProfile'] == {'id': 'p1', 'name': 'Alice', 'avatar': None}
    assert payload['createdAt'].startswith('2023-11-14T')
    assert 'players' not in payload
    assert 'creatorId' not in payload


def test_listing_is_oldest_first(directory, clock):
    directory.add_room('B', BOB, 'c2')
    clock.advance(1)
    directory.add_room('A', ALICE, 'c1')
    assert _ids(directory.get_available_rooms()) == ['B', 'A']


def test_filled_room_is_unlisted(directory):
    directory.add_room('R1', ALICE, 'c1')
    directory.add_player_to_room('R1', 'c2')
    assert directory.get_available_rooms() == []
    assert directory.get('R1') is None
    # Unknown rooms are ignored
    directory.add_player_to_room('R9', 'c3')


def test_remove_room(directory):
    directory.add_room('R1', ALICE, 'c1')
    assert not directory.remove_room('R1', connection_id='c9')
    assert directory.remove_room('R1', connection_id='c1')
    assert not directory.remove_room('R1')
    assert directory.get_available_rooms() == []


def test_remove_player_reports_empty_rooms(directory):
    directory.add_room('R1', ALICE, 'c1')
    directory.add_room('R2', BOB, 'c2')
    assert directory.remove_player_from_room('c1') == ['R1']
    assert directory.remove_player_from_room('c1') == []
    assert _ids(directory.get_available_rooms()) == ['R2']


def test_stale_rooms_expire(directory, clock):
    directory.add_room('R1', ALICE, 'c1')
    clock.advance(3600)
    assert _ids(directory.get_available_rooms()) == ['R1']
    clock.advance(1)
    assert directory.get_available_rooms() == []


def test_creator_disconnect_on_lone_room_removes_it(directory):
    directory.add_room('R1', ALICE, 'c1')
    assert directory.handle_creator_disconnect('c1') == ['R1']
    assert directory.get('R1') is None
    # Nothing left to reconnect to
    assert directory.pending_disconnect('p1') is None


def test_non_creator_disconnect_is_ignored(directory):
    directory.add_room('R1', ALICE, 'c1')
    assert directory.handle_creator_disconnect('c2') == []
    assert _ids(directory.get_available_rooms()) == ['R1']


def _room_with_creator_away(directory):
    directory.add_room('R1', ALICE, 'c1')
    # Creator has a second tab open in the room
    directory.get('R1').players.append('c1-tab2')
    assert directory.handle_creator_disconnect('c1') == []
    assert directory.get('R1').players == ['c1-tab2']
    assert directory.pending_disconnect('p1').room_id == 'R1'


def test_grace_window_keeps_room_listed(directory, clock):
    _room_with_creator_away(directory)
    clock.advance(30)
    assert _ids(directory.get_available_rooms()) == ['R1']


def test_grace_window_lapses(directory, clock):
    _room_with_creator_away(directory)
    clock.advance(31)
    assert directory.get_available_rooms() == []
    assert directory.pending_disconnect('p1') is None


def test_reconnect_clears_record_and_rebinds(directory, clock):
    _room_with_creator_away(directory)
    assert directory.handle_creator_reconnect('p1', 'c1-new') == 'R1'
    assert directory.pending_disconnect('p1') is None
    entry = directory.get('R1')
    assert entry.creator_connection == 'c1-new'
    assert entry.players == ['c1-tab2']
    assert _ids(directory.get_available_rooms()) == ['R1']

    clock.advance(60)
    assert directory.sweep() == []
    assert _ids(directory.get_available_rooms()) == ['R1']


def test_reconnected_creator_can_disconnect_again(directory, clock):
    _room_with_creator_away(directory)
    directory.handle_creator_reconnect('p1', 'c1-new')
    assert directory.handle_creator_disconnect('c1-new') == []
    assert directory.pending_disconnect('p1').room_id == 'R1'
    clock.advance(31)
    assert directory.get_available_rooms() == []


def test_reconnect_without_record(directory):
    assert directory.handle_creator_reconnect('nobody') is None


def test_reset_clears_everything(directory):
    directory.add_room('R1', ALICE, 'c1')
    directory.reset()
    assert len(directory) == 0
