"""Pytest configuration and shared fixtures"""
import pytest

from mpris_bridge.cache import StatusCache
from mpris_bridge.errors import BusError
from mpris_bridge.models import ArtworkRef, PlaybackState, StatusMetadata, StatusSnapshot

MPRIS_PREFIX = 'org.mpris.MediaPlayer2.'


class FakePlayer:
    """Stands in for mpris.MprisPlayer."""

    def __init__(self, identity, status='Playing', metadata=None, position=0, running=True):
        self.identity = identity
        self.bus_name = MPRIS_PREFIX + identity
        self.status = status
        self.metadata = metadata if metadata is not None else {'xesam:title': identity}
        self.position = position
        self.running = running
        self.broken = False
        self.position_broken = False

    def get_playback_status(self):
        if self.broken:
            raise BusError('status unavailable')
        return self.status

    def get_metadata(self):
        if self.broken:
            raise BusError('metadata unavailable')
        return dict(self.metadata)

    def get_position(self):
        if self.broken or self.position_broken:
            raise BusError('position unavailable')
        return self.position

    def is_running(self):
        return self.running


class FakeBus:
    """Stands in for mpris.MprisBus."""

    def __init__(self, players=()):
        self.players = list(players)
        self.broken = False

    def list_players(self):
        if self.broken:
            raise BusError('bus gone')
        return list(self.players)

    def find_active(self):
        players = self.list_players()
        for wanted in ('Playing', 'Paused'):
            for player in players:
                if player.status == wanted:
                    return player
        return players[0] if players else None


def make_snapshot(title='Song', artwork=(), state=PlaybackState.PLAYING, position=0):
    return StatusSnapshot(
        metadata=StatusMetadata(
            title=title,
            artist='Artist',
            album='Album',
            artwork=tuple(ArtworkRef(src) for src in artwork),
            length=180_000_000,
        ),
        playback_state=state,
        position=position,
    )


@pytest.fixture
def cache():
    return StatusCache()
