"""Normalization of provider records into the internal listening records.

Provider payloads are loosely shaped dicts whose fields drift between
endpoints (recently-played items wrap the track, top-track lists do not,
followers may be an int or ``{"total": n}``). Everything is mapped here so the
analytics modules only ever see ``PlayedTrack`` and ``Artist``. Malformed
fields fall back to empty values; nothing in this module raises on bad input.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from vynce_analytics.models.listening import Artist, ListeningInput, PlayedTrack
from vynce_analytics.utils.dates import as_utc

logger = logging.getLogger(__name__)

MIN_RELEASE_YEAR = 1900


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def _get_image_url(images_list: Any) -> Optional[str]:
    """Safely extracts the first image URL from a provider image list."""
    for img in _as_list(images_list):
        if isinstance(img, dict) and img.get('url'):
            return img.get('url')
    return None


def _release_year(value: Any) -> Optional[int]:
    """Year from a release date of any precision ('1971', '1971-11', '1971-11-08')"""
    if isinstance(value, int) and not isinstance(value, bool):
        year = value
    elif isinstance(value, str) and len(value) >= 4 and value[:4].isdigit():
        year = int(value[:4])
    else:
        return None
    return year if year > MIN_RELEASE_YEAR else None


def _clean_genres(value: Any) -> List[str]:
    return [g.strip() for g in _as_list(value) if isinstance(g, str) and g.strip()]


def parse_played_at(value: Any) -> Optional[datetime]:
    """Parse a provider timestamp to a timezone-aware datetime"""
    if not value:
        return None
    try:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, str):
            # Handle both 'Z' and '+00:00' suffixes as well as naive timestamps
            dt = datetime.fromisoformat(value.replace('Z', '+00:00') if value.endswith('Z') else value)
        elif isinstance(value, (int, float)):
            # Epoch milliseconds
            dt = datetime.fromtimestamp(value / 1000, timezone.utc)
        else:
            logger.warning(f"Unexpected type for played_at: {type(value)}")
            return None
        return as_utc(dt)
    except (ValueError, TypeError, OverflowError, OSError) as e:
        logger.warning(f"Could not parse played_at value: {value}. Error: {e}")
        return None


def normalize_artist(raw: Any) -> Optional[Artist]:
    """Map a provider artist object to an Artist, or None if it has no identity"""
    if isinstance(raw, Artist):
        return raw
    if not isinstance(raw, dict):
        return None
    artist_id = raw.get('id')
    name = raw.get('name')
    if not artist_id and not name:
        return None

    followers = raw.get('followers')
    if isinstance(followers, dict):
        followers = followers.get('total')

    return Artist(
        artist_id=str(artist_id or name),
        name=str(name or artist_id),
        genres=_clean_genres(raw.get('genres')),
        popularity=_as_int(raw.get('popularity')),
        followers=_as_int(followers),
    )


def normalize_played_track(entry: Any) -> Optional[PlayedTrack]:
    """
    Map a play event to a PlayedTrack.

    Accepts the recently-played shape ``{"track": {...}, "played_at": ...}``
    as well as a flat track dict carrying its own ``played_at``.
    """
    if isinstance(entry, PlayedTrack):
        return entry
    if not isinstance(entry, dict):
        return None

    track = entry.get('track') if isinstance(entry.get('track'), dict) else entry
    track_id = track.get('id') or track.get('uri')
    if not track_id:
        logger.debug(f"Skipping play event without a track id: {entry}")
        return None

    artists = [a for a in _as_list(track.get('artists')) if isinstance(a, dict)]
    artist_ids = [str(a['id']) for a in artists if a.get('id')]
    artist_names = [str(a['name']) for a in artists if a.get('name')]
    if not artist_names and isinstance(track.get('artist'), str):
        artist_names = [track['artist']]

    album = track.get('album')
    release_date = track.get('release_date')
    if isinstance(album, dict):
        album_name = album.get('name')
        album_image = _get_image_url(album.get('images'))
        release_date = release_date or album.get('release_date')
    else:
        album_name = album if isinstance(album, str) else None
        album_image = None
    album_image = track.get('image_url') or album_image

    duration = _as_int(track.get('duration_ms'))

    return PlayedTrack(
        track_id=str(track_id),
        name=str(track.get('name') or ''),
        duration_ms=max(0, duration) if duration is not None else 0,
        played_at=parse_played_at(entry.get('played_at') or track.get('played_at')),
        artist_ids=artist_ids,
        artist_names=artist_names,
        album_name=album_name,
        album_image=album_image,
        popularity=_as_int(track.get('popularity')),
        genres=_clean_genres(track.get('genres')),
        release_year=_release_year(release_date),
        explicit=track.get('explicit') is True,
    )


def normalize_tracks(entries: Optional[Iterable[Any]]) -> List[PlayedTrack]:
    tracks = []
    skipped = 0
    for entry in entries or []:
        track = normalize_played_track(entry)
        if track is None:
            skipped += 1
            continue
        tracks.append(track)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed play events")
    return tracks


def normalize_artists(entries: Optional[Iterable[Any]]) -> List[Artist]:
    return [a for a in (normalize_artist(e) for e in entries or []) if a is not None]


def normalize_listening_input(recent_tracks: Optional[Iterable[Any]] = None,
                              top_artists: Optional[Iterable[Any]] = None) -> ListeningInput:
    """Build a ListeningInput from raw provider lists; None becomes empty"""
    if isinstance(recent_tracks, ListeningInput):
        return recent_tracks
    return ListeningInput(
        recent_tracks=normalize_tracks(recent_tracks),
        top_artists=normalize_artists(top_artists),
    )


def index_artists(artists: Iterable[Artist]) -> Dict[str, Artist]:
    """Lookup table by artist id and by name"""
    index: Dict[str, Artist] = {}
    for artist in artists:
        index.setdefault(artist.artist_id, artist)
        index.setdefault(artist.name, artist)
    return index


def resolve_track_genres(track: PlayedTrack, artists_by_key: Dict[str, Artist]) -> List[str]:
    """Genres tagged on the track itself, else those of its first matching artist"""
    if track.genres:
        return track.genres
    for key in list(track.artist_ids) + list(track.artist_names):
        artist = artists_by_key.get(key)
        if artist and artist.genres:
            return artist.genres
    return []
