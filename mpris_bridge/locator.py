"""Finds the media player the bridge should follow."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .errors import BusError

if TYPE_CHECKING:
    from .mpris import MprisPlayer

logger = logging.getLogger(__name__)


class Outcome(Enum):
    FOUND = 'found'
    UNCHANGED = 'unchanged'
    NOT_FOUND = 'not_found'


@dataclass(frozen=True)
class LocateResult:
    outcome: Outcome
    player: 'MprisPlayer | None' = None


NOT_FOUND = LocateResult(Outcome.NOT_FOUND)
UNCHANGED = LocateResult(Outcome.UNCHANGED)


class PlayerLocator:
    """
    Resolves one player on the bus.

    Without patterns the bus' active player is used. With patterns, they are
    tried in the configured order and the first player (in bus order) matched
    by a pattern wins.
    """

    def __init__(self, bus, patterns=()):
        self._bus = bus
        self.patterns = list(patterns)

    def _resolve(self):
        if not self.patterns:
            return self._bus.find_active()

        players = self._bus.list_players()
        for pattern in self.patterns:
            for player in players:
                if pattern.search(player.identity):
                    return player
        return None

    def locate(self, current=None) -> LocateResult:
        try:
            player = self._resolve()
        except BusError as e:
            logger.debug(f"Player lookup failed: {e}")
            return NOT_FOUND

        if player is None:
            return NOT_FOUND
        if current is not None and player.identity == current.identity:
            return UNCHANGED
        return LocateResult(Outcome.FOUND, player)
