"""
Session bus binding for MPRIS2 players (pydbus).

Every call that talks to the bus converts GLib errors into BusError so the
layers above never see a GLib type.
"""

import logging

from gi.repository import GLib
from pydbus import SessionBus

from .errors import BusError, BusUnavailableError

logger = logging.getLogger(__name__)

MPRIS_PREFIX = 'org.mpris.MediaPlayer2.'
MPRIS_PATH = '/org/mpris/MediaPlayer2'


class MprisPlayer:
    """Handle on one MPRIS player, identified by its bus name."""

    def __init__(self, bus: 'MprisBus', bus_name: str):
        self._bus = bus
        self.bus_name = bus_name
        self._proxy = None

    @property
    def identity(self) -> str:
        """Player part of the bus name, e.g. 'spotify' or 'firefox.instance_1_42'."""
        return self.bus_name[len(MPRIS_PREFIX):]

    def __eq__(self, other):
        if not isinstance(other, MprisPlayer):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self):
        return hash(self.identity)

    def __repr__(self):
        return f'MprisPlayer({self.bus_name!r})'

    def _player(self):
        if self._proxy is None:
            try:
                self._proxy = self._bus.session.get(self.bus_name, MPRIS_PATH)
            except GLib.Error as e:
                raise BusError(f'could not reach {self.bus_name}: {e}') from e
        return self._proxy

    def _read(self, prop: str):
        try:
            return getattr(self._player(), prop)
        except (GLib.Error, AttributeError) as e:
            raise BusError(f'could not read {prop} from {self.bus_name}: {e}') from e

    def get_playback_status(self) -> str:
        return self._read('PlaybackStatus')

    def get_metadata(self) -> dict:
        return dict(self._read('Metadata'))

    def get_position(self) -> int:
        return int(self._read('Position'))

    def is_running(self) -> bool:
        try:
            return self._bus.has_owner(self.bus_name)
        except BusError:
            return False


class MprisBus:
    """Connection to the session bus; owned by the poller thread."""

    def __init__(self, session=None):
        if session is None:
            try:
                session = SessionBus()
            except GLib.Error as e:
                raise BusUnavailableError(f'could not connect to the session bus: {e}') from e
        self.session = session
        self._dbus = None

    def _daemon(self):
        if self._dbus is None:
            try:
                self._dbus = self.session.get('.DBus')
            except GLib.Error as e:
                raise BusError(f'could not reach org.freedesktop.DBus: {e}') from e
        return self._dbus

    def list_players(self) -> list:
        """Returns every MPRIS player currently on the bus, in bus order."""
        try:
            names = self._daemon().ListNames()
        except GLib.Error as e:
            raise BusError(f'could not list bus names: {e}') from e
        return [MprisPlayer(self, name) for name in names if name.startswith(MPRIS_PREFIX)]

    def find_active(self):
        """Playing player first, then paused, then whichever was listed first."""
        players = self.list_players()
        if not players:
            return None

        statuses = {}
        for player in players:
            try:
                statuses[player] = player.get_playback_status()
            except BusError as e:
                logger.debug(f"Skipping {player.bus_name}: {e}")

        for wanted in ('Playing', 'Paused'):
            for player in players:
                if statuses.get(player) == wanted:
                    return player
        return players[0]

    def has_owner(self, bus_name: str) -> bool:
        try:
            return bool(self._daemon().NameHasOwner(bus_name))
        except GLib.Error as e:
            raise BusError(f'could not query owner of {bus_name}: {e}') from e
