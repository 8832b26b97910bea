"""
Status data shared between the poller and the WebSocket clients.
All types are immutable: a new snapshot replaces the old one, it is never patched.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import unquote, urlparse


class PlaybackState(Enum):
    PLAYING = 'playing'
    PAUSED = 'paused'
    NONE = 'none'

    @classmethod
    def from_mpris(cls, status: str) -> 'PlaybackState':
        """Maps an MPRIS PlaybackStatus ('Playing', 'Paused', 'Stopped')."""
        state_map = {'Playing': cls.PLAYING, 'Paused': cls.PAUSED}
        return state_map.get(status, cls.NONE)


@dataclass(frozen=True)
class ArtworkRef:
    src: str

    @property
    def is_local(self) -> bool:
        return self.src.startswith('file://')

    @property
    def local_path(self) -> str:
        """Filesystem path of a file:// artwork, percent-decoded."""
        return unquote(urlparse(self.src).path)

    def to_dict(self) -> dict:
        return {'src': self.src}


@dataclass(frozen=True)
class StatusMetadata:
    title: str = ''
    artist: str = ''
    album: str = ''
    artwork: 'tuple[ArtworkRef, ...]' = field(default_factory=tuple)
    length: int = 0

    def to_dict(self) -> dict:
        return {
            'title': self.title,
            'artist': self.artist,
            'album': self.album,
            'artwork': [art.to_dict() for art in self.artwork],
            'length': self.length,
        }


@dataclass(frozen=True)
class StatusSnapshot:
    metadata: StatusMetadata
    playback_state: PlaybackState = PlaybackState.NONE
    position: int = 0

    def artwork_at(self, index: int):
        """Returns the artwork at *index*, or None when out of range."""
        if 0 <= index < len(self.metadata.artwork):
            return self.metadata.artwork[index]
        return None

    def to_dict(self) -> dict:
        return {
            'metadata': self.metadata.to_dict(),
            'playbackState': self.playback_state.value,
            'position': self.position,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))
