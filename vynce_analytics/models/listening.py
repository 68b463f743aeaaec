"""Domain records for normalized listening history"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

@dataclass
class Artist:
    """Top-artist entry with genre tags and popularity signals"""
    artist_id: str
    name: str
    genres: List[str] = field(default_factory=list)
    popularity: Optional[int] = None
    followers: Optional[int] = None

@dataclass
class PlayedTrack:
    """One play event from the recently-played history"""
    track_id: str
    name: str
    duration_ms: int
    played_at: Optional[datetime]
    artist_ids: List[str] = field(default_factory=list)
    artist_names: List[str] = field(default_factory=list)
    album_name: Optional[str] = None
    album_image: Optional[str] = None
    popularity: Optional[int] = None
    genres: List[str] = field(default_factory=list)
    release_year: Optional[int] = None
    explicit: bool = False

    @property
    def primary_artist_name(self) -> Optional[str]:
        return self.artist_names[0] if self.artist_names else None

    @property
    def artist_key(self) -> str:
        """All credited artists, joined, so features count as their own act"""
        return ','.join(self.artist_ids or self.artist_names)

@dataclass
class ListeningInput:
    """Normalized input for a single analytics recomputation"""
    recent_tracks: List[PlayedTrack] = field(default_factory=list)
    top_artists: List[Artist] = field(default_factory=list)
