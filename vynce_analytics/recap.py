"""Four-week listening recap: this period against the previous one"""
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from vynce_analytics.config import RECAP_WINDOW_DAYS, NO_BASELINE
from vynce_analytics.models.listening import Artist, PlayedTrack
from vynce_analytics.models.recap import FourWeekStats, TopAlbum
from vynce_analytics.normalization import index_artists, normalize_artists, normalize_tracks, resolve_track_genres
from vynce_analytics.utils.dates import as_utc
from vynce_analytics.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60000


def format_minutes(minutes: float) -> str:
    """Human-readable minutes, rounded half up: 45.7 -> '46 minutes', 1 -> '1 minute'"""
    rounded = round_half_up(minutes or 0)
    if rounded == 1:
        return '1 minute'
    return f"{rounded} minutes"


def percentage_change(minutes_this: float, minutes_prev: float) -> str:
    """Signed whole-percent change, or NO_BASELINE when there is nothing to compare to"""
    if not minutes_prev or minutes_prev <= 0:
        return NO_BASELINE
    delta = round_half_up((minutes_this - minutes_prev) / minutes_prev * 100)
    sign = '+' if delta > 0 else ''
    return f"{sign}{delta}%"


def _top_genre(tracks: List[PlayedTrack], artists_by_key: Dict[str, Artist]) -> Optional[str]:
    counts = Counter(genre for track in tracks for genre in resolve_track_genres(track, artists_by_key))
    if not counts:
        return None
    # most_common keeps first-encountered order among equal counts
    return counts.most_common(1)[0][0]


def _top_album(tracks: List[PlayedTrack]) -> Optional[TopAlbum]:
    albums: Dict[Tuple[str, str], TopAlbum] = {}
    for track in tracks:
        if not track.album_name:
            continue
        artist = track.primary_artist_name or 'Unknown Artist'
        key = (track.album_name, artist)
        if key in albums:
            albums[key].count += 1
        else:
            albums[key] = TopAlbum(name=track.album_name, artist=artist, image=track.album_image, count=1)
    if not albums:
        return None
    return sorted(albums.values(), key=lambda album: album.count, reverse=True)[0]


def _minutes(tracks: List[PlayedTrack]) -> float:
    return sum(track.duration_ms for track in tracks) / MS_PER_MINUTE


def split_periods(tracks: Iterable[PlayedTrack], now: datetime,
                  window_days: int = RECAP_WINDOW_DAYS) -> Tuple[List[PlayedTrack], List[PlayedTrack]]:
    """
    Partition plays into (last `window_days`, the `window_days` before that).
    Plays without a timestamp, from the future, or older than two windows are dropped.
    """
    now = as_utc(now)
    window = timedelta(days=window_days)
    this_period, prev_period = [], []
    for track in tracks:
        if track.played_at is None:
            continue
        age = now - track.played_at
        if age < timedelta(0):
            continue
        if age <= window:
            this_period.append(track)
        elif age <= window * 2:
            prev_period.append(track)
    return this_period, prev_period


def calculate_last_4_weeks_stats(play_events: Optional[Iterable[Any]], artists: Optional[Iterable[Any]] = None,
                                 now: Optional[datetime] = None) -> FourWeekStats:
    """
    Minutes listened, top genre and top album for the last four weeks and the
    four weeks before, plus the percentage change in minutes. Genres come
    from the track tags, else from the matching entry in `artists`.

    Empty or missing input yields the zeroed result with the no-baseline marker.
    """
    tracks = normalize_tracks(play_events)
    if not tracks:
        return FourWeekStats()

    now = as_utc(now) if now else datetime.now(timezone.utc)
    this_period, prev_period = split_periods(tracks, now)
    artists_by_key = index_artists(normalize_artists(artists))

    minutes_this = _minutes(this_period)
    minutes_prev = _minutes(prev_period)

    stats = FourWeekStats(
        minutes_this=minutes_this,
        minutes_prev=minutes_prev,
        percentage_change=percentage_change(minutes_this, minutes_prev),
        top_genre=_top_genre(this_period, artists_by_key),
        top_album=_top_album(this_period),
        previous_top_genre=_top_genre(prev_period, artists_by_key),
        previous_top_album=_top_album(prev_period),
        plays_this=len(this_period),
        plays_prev=len(prev_period),
    )
    logger.info(
        f"4-week recap: {format_minutes(minutes_this)} vs {format_minutes(minutes_prev)} "
        f"({stats.percentage_change})"
    )
    return stats
