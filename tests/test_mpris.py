"""Tests for the pydbus binding, against a fake session bus"""
import pytest

from gi.repository import GLib

from mpris_bridge.errors import BusError
from mpris_bridge.mpris import MprisBus, MprisPlayer


class FakeProxy:
    def __init__(self, status, metadata=None, position=0):
        self.PlaybackStatus = status
        self.Metadata = metadata or {}
        self.Position = position


class FakeDaemon:
    def __init__(self, session):
        self._session = session

    def ListNames(self):
        if self._session.broken:
            raise GLib.Error('bus gone')
        return ['org.freedesktop.DBus', ':1.42', *self._session.proxies]

    def NameHasOwner(self, name):
        return name in self._session.proxies


class FakeSession:
    def __init__(self, proxies):
        self.proxies = proxies
        self.broken = False

    def get(self, name, path=None):
        if name == '.DBus':
            return FakeDaemon(self)
        if name not in self.proxies:
            raise GLib.Error(f'no such name {name}')
        return self.proxies[name]


def make_bus(**proxies):
    return MprisBus(FakeSession({f'org.mpris.MediaPlayer2.{k}': v for k, v in proxies.items()}))


def test_lists_only_mpris_names():
    bus = make_bus(vlc=FakeProxy('Stopped'), spotify=FakeProxy('Playing'))
    assert [p.identity for p in bus.list_players()] == ['vlc', 'spotify']


def test_find_active_prefers_playing_then_paused():
    bus = make_bus(a=FakeProxy('Stopped'), b=FakeProxy('Paused'), c=FakeProxy('Playing'))
    assert bus.find_active().identity == 'c'

    bus = make_bus(a=FakeProxy('Stopped'), b=FakeProxy('Paused'))
    assert bus.find_active().identity == 'b'

    bus = make_bus(a=FakeProxy('Stopped'))
    assert bus.find_active().identity == 'a'


def test_find_active_without_players():
    assert make_bus().find_active() is None


def test_player_reads():
    bus = make_bus(spotify=FakeProxy('Playing', {'xesam:title': 'x'}, 123))
    player = bus.list_players()[0]

    assert player.get_playback_status() == 'Playing'
    assert player.get_metadata() == {'xesam:title': 'x'}
    assert player.get_position() == 123
    assert player.is_running()


def test_vanished_player():
    bus = make_bus()
    player = MprisPlayer(bus, 'org.mpris.MediaPlayer2.gone')

    with pytest.raises(BusError):
        player.get_metadata()
    assert not player.is_running()


def test_list_failure_raises_bus_error():
    bus = make_bus()
    bus.session.broken = True
    with pytest.raises(BusError):
        bus.list_players()


def test_identity_equality():
    bus = make_bus()
    assert MprisPlayer(bus, 'org.mpris.MediaPlayer2.vlc') == MprisPlayer(bus, 'org.mpris.MediaPlayer2.vlc')
    assert MprisPlayer(bus, 'org.mpris.MediaPlayer2.vlc') != MprisPlayer(bus, 'org.mpris.MediaPlayer2.mpv')
