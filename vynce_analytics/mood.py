"""Daily mood aggregation over the last week of plays"""
import logging
import math
import statistics
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from vynce_analytics.config import MOOD_WINDOW_DAYS, MOOD_MIN_SCORE, MOOD_MAX_SCORE
from vynce_analytics.genres import genre_valence
from vynce_analytics.models.listening import Artist, PlayedTrack
from vynce_analytics.models.mood import DailyMoodData, MoodInsights, MoodReport
from vynce_analytics.normalization import index_artists, normalize_artists, normalize_tracks
from vynce_analytics.utils.dates import as_utc
from vynce_analytics.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

DAY_NAMES = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')
NEUTRAL_VALENCE = 0.5
DEFAULT_POPULARITY = 50


def _track_genres(track: PlayedTrack, artists_by_key: Dict[str, Artist]) -> List[str]:
    """Every genre credited to the play (track tags, else all artists matched by id or name)"""
    if track.genres:
        return list(track.genres)
    genres = []
    matched = set()
    for key in list(track.artist_ids) + list(track.artist_names):
        artist = artists_by_key.get(key)
        if artist and artist.artist_id not in matched:
            matched.add(artist.artist_id)
            genres.extend(artist.genres)
    return genres


def daily_dimension_scores(day_tracks: List[PlayedTrack], artists_by_key: Dict[str, Artist]) -> Dict[str, float]:
    """Per-day versions of the five dimensions, each on a 0-100 scale"""
    if not day_tracks:
        return dict.fromkeys(
            ('musical_diversity', 'exploration_rate', 'temporal_consistency',
             'mainstream_affinity', 'emotional_volatility'), 0.0
        )

    genre_counts: Counter = Counter()
    valences: List[float] = []
    for track in day_tracks:
        genres = _track_genres(track, artists_by_key)
        if not genres:
            genre_counts['unknown'] += 1
            valences.append(NEUTRAL_VALENCE)
            continue
        genre_counts.update(genres)
        for genre in genres:
            value = genre_valence(genre)
            valences.append(NEUTRAL_VALENCE if value is None else value)

    # Entropy against a 4-bit ceiling (16 evenly played genres)
    total = sum(genre_counts.values())
    entropy = -sum((c / total) * math.log2(c / total) for c in genre_counts.values())
    musical_diversity = min(100.0, entropy / 4 * 100)

    exploration_rate = len({t.track_id for t in day_tracks}) / len(day_tracks) * 100

    hours = [t.played_at.hour for t in day_tracks if t.played_at is not None]
    hour_variance = statistics.pvariance(hours) if hours else 0.0
    temporal_consistency = max(0.0, min(100.0, 100 - hour_variance))

    mainstream_affinity = statistics.fmean(
        t.popularity if t.popularity is not None else DEFAULT_POPULARITY for t in day_tracks
    )

    emotional_volatility = 0.0
    if len(valences) > 1:
        emotional_volatility = min(100.0, math.sqrt(statistics.pvariance(valences)) * 100)

    return {
        'musical_diversity': musical_diversity,
        'exploration_rate': exploration_rate,
        'temporal_consistency': temporal_consistency,
        'mainstream_affinity': mainstream_affinity,
        'emotional_volatility': emotional_volatility,
    }


def mood_score(dimensions: Dict[str, float]) -> int:
    """Weighted blend of the day's dimensions, clamped to 30-95"""
    raw = (
        0.2 * dimensions['musical_diversity']
        + 0.15 * dimensions['exploration_rate']
        + 0.2 * dimensions['temporal_consistency']
        + 0.15 * (100 - dimensions['emotional_volatility'])
        + 0.1 * dimensions['mainstream_affinity']
        + 20
    )
    return round_half_up(max(MOOD_MIN_SCORE, min(MOOD_MAX_SCORE, raw)))


def mood_insight(dimensions: Dict[str, float], day_name: str) -> str:
    diversity = dimensions['musical_diversity']
    exploration = dimensions['exploration_rate']
    consistency = dimensions['temporal_consistency']
    volatility = dimensions['emotional_volatility']

    if diversity > 70 and exploration > 60:
        return f"{day_name}: High diversity and exploration suggest an adventurous, positive mood."
    elif consistency > 70 and volatility < 40:
        return f"{day_name}: Stable patterns and low volatility indicate a calm, consistent mood."
    elif volatility > 60:
        return f"{day_name}: High emotional volatility suggests varied mood throughout the day."
    elif exploration < 30 and consistency > 60:
        return f"{day_name}: Repetitive listening with consistent timing suggests comfort-seeking behavior."
    return f"{day_name}: Balanced listening patterns indicate a stable mood."


def _top_genres(day_tracks: List[PlayedTrack], artists_by_key: Dict[str, Artist], limit: int = 3) -> List[str]:
    counts: Counter = Counter()
    for track in day_tracks:
        counts.update(g.title() for g in _track_genres(track, artists_by_key))
    return [genre for genre, _ in counts.most_common(limit)]


def build_mood_report(play_events: Optional[Iterable[Any]], artists: Optional[Iterable[Any]] = None,
                      now: Optional[datetime] = None, days: int = MOOD_WINDOW_DAYS) -> MoodReport:
    """
    One DailyMoodData per calendar day for the last `days` days (oldest first).
    Days without plays carry moodScore 0 and are left out of the insights.
    """
    now = as_utc(now) if now else datetime.now(timezone.utc)
    today: date = now.date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    artists_by_key = index_artists(normalize_artists(artists))
    by_day: Dict[date, List[PlayedTrack]] = defaultdict(list)
    for track in normalize_tracks(play_events):
        if track.played_at is None:
            continue
        played_on = track.played_at.astimezone(now.tzinfo).date()
        if window[0] <= played_on <= today:
            by_day[played_on].append(track)

    mood_data: List[DailyMoodData] = []
    for day in window:
        day_name = DAY_NAMES[day.weekday()]
        day_tracks = by_day.get(day, [])
        if not day_tracks:
            mood_data.append(DailyMoodData(
                date=day.isoformat(), day_name=day_name, mood_score=0, track_count=0,
                insight=f"{day_name}: No listening data.",
            ))
            continue

        dimensions = daily_dimension_scores(day_tracks, artists_by_key)
        mood_data.append(DailyMoodData(
            date=day.isoformat(),
            day_name=day_name,
            mood_score=mood_score(dimensions),
            track_count=len(day_tracks),
            musical_diversity=round_half_up(dimensions['musical_diversity']),
            exploration_rate=round_half_up(dimensions['exploration_rate']),
            temporal_consistency=round_half_up(dimensions['temporal_consistency']),
            mainstream_affinity=round_half_up(dimensions['mainstream_affinity']),
            emotional_volatility=round_half_up(dimensions['emotional_volatility']),
            insight=mood_insight(dimensions, day_name),
            top_genres=_top_genres(day_tracks, artists_by_key),
        ))

    return MoodReport(mood_data=mood_data, insights=summarize_mood(mood_data))


def summarize_mood(mood_data: List[DailyMoodData]) -> Optional[MoodInsights]:
    """Average, best and worst day across the days that have data"""
    days_with_data = [day for day in mood_data if day.mood_score > 0]
    if not days_with_data:
        return None
    highest = days_with_data[0]
    lowest = days_with_data[0]
    for day in days_with_data[1:]:
        if day.mood_score > highest.mood_score:
            highest = day
        if day.mood_score < lowest.mood_score:
            lowest = day
    return MoodInsights(
        average_mood=round_half_up(statistics.fmean(d.mood_score for d in days_with_data)),
        highest_mood_day=highest,
        lowest_mood_day=lowest,
        total_days=len(days_with_data),
    )
