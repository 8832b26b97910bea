"""Reads one StatusSnapshot from a player."""

import logging

from .errors import BusError
from .models import ArtworkRef, PlaybackState, StatusMetadata, StatusSnapshot

logger = logging.getLogger(__name__)


def _unsigned(value) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def parse_metadata(metadata: dict) -> StatusMetadata:
    """Builds StatusMetadata from an MPRIS Metadata dict, defaulting missing keys."""
    artists = metadata.get('xesam:artist', [])
    artist = ', '.join(map(str, artists)) if isinstance(artists, (list, tuple)) else str(artists)

    art_url = metadata.get('mpris:artUrl', '')
    artwork = (ArtworkRef(str(art_url)),) if art_url else ()

    return StatusMetadata(
        title=str(metadata.get('xesam:title', '')),
        artist=artist,
        album=str(metadata.get('xesam:album', '')),
        artwork=artwork,
        length=_unsigned(metadata.get('mpris:length', 0)),
    )


def sample(player):
    """
    Returns a StatusSnapshot, or None when the playback status or the
    metadata could not be read. A failed position read counts as 0.
    """
    try:
        status = player.get_playback_status()
        metadata = player.get_metadata()
    except BusError as e:
        logger.debug(f"Could not read status of {player.identity}: {e}")
        return None

    try:
        position = _unsigned(player.get_position())
    except BusError:
        position = 0

    return StatusSnapshot(
        metadata=parse_metadata(metadata),
        playback_state=PlaybackState.from_mpris(status),
        position=position,
    )
