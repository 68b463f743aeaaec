"""
Listening insights computed from recent plays and top artists.

* Musical age: recency-weighted median release year of the plays, with the
  era it falls in, the spread of years and a per-decade breakdown.
* Genre passport: how many distinct genres the top artists cover.
* Night owl: plays per hour of day and the share played late at night.
* Radar: five 0-100 axes (positivity, energy, exploration, nostalgia,
  night owl). Valence, energy and tempo come from the genre proxy tables.

Every function accepts raw provider records or normalized ones and returns
an empty-state payload rather than raising on missing data.
"""
import logging
import math
import statistics
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from vynce_analytics.config import (
    GENRE_PASSPORT_TARGET,
    GENRE_PASSPORT_TOP_N,
    LATEST_ERA,
    MIN_INSIGHT_DURATION_MS,
    MUSIC_ERAS,
    NEW_DISCOVERY_SHARE,
    NOSTALGIA_FULL_AGE_YEARS,
    RECENCY_DECAY_DAYS,
    TEMPO_RANGE_BPM,
)
from vynce_analytics.genres import genre_features
from vynce_analytics.models.insights import (
    DecadeBucket,
    GenrePassportPayload,
    ListeningInsights,
    MusicalAgePayload,
    NightOwlPayload,
    RadarPayload,
    RadarStats,
    TrackBrief,
)
from vynce_analytics.models.listening import PlayedTrack
from vynce_analytics.normalization import index_artists, normalize_artists, normalize_tracks, resolve_track_genres
from vynce_analytics.utils.dates import as_utc
from vynce_analytics.utils.numbers import round_half_up
from vynce_analytics.utils.stats import WeightedYear, weighted_median_release_year, weighted_standard_deviation

logger = logging.getLogger(__name__)

# 10 PM to 4:59 AM for the night-owl card, 10 PM to 3:59 AM for the radar axis
NIGHT_OWL_HOURS = frozenset((22, 23, 0, 1, 2, 3, 4))
RADAR_NIGHT_HOURS = frozenset((22, 23, 0, 1, 2, 3))
POPULAR_TRACK_MIN = 70
POPULARITY_VALENCE_BONUS = 0.05
EXPLICIT_VALENCE_PENALTY = 0.05


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _now_utc(now: Optional[datetime]) -> datetime:
    return as_utc(now) if now else datetime.now(timezone.utc)


def recency_weight(played_at: Optional[datetime], now: datetime, decay_days: float = RECENCY_DECAY_DAYS) -> float:
    """exp(-days_ago / decay_days); undated and future plays count as just played"""
    if played_at is None:
        return 1.0
    days_ago = max(0.0, (now - played_at).total_seconds() / 86400)
    return math.exp(-days_ago / decay_days)


def music_era(year: int) -> str:
    for upper_bound, era in MUSIC_ERAS:
        if year < upper_bound:
            return era
    return LATEST_ERA


def normalize_tempo(tempo: float) -> float:
    low, high = TEMPO_RANGE_BPM
    return _clamp((tempo - low) / (high - low))


def _brief(track: PlayedTrack, default_title: str = '', default_artist: str = 'Unknown Artist') -> TrackBrief:
    return TrackBrief(
        title=track.name or default_title,
        artist=track.primary_artist_name or default_artist,
        year=track.release_year or 0,
    )


def get_musical_age_payload(play_events: Optional[Iterable[Any]], now: Optional[datetime] = None) -> MusicalAgePayload:
    """
    Musical age from the release years of plays lasting at least 30 seconds.

    Each year is weighted by how recently it was played; the age is the
    current year minus the weighted median year.
    """
    now = _now_utc(now)
    current_year = now.year
    tracks = [t for t in normalize_tracks(play_events) if t.duration_ms >= MIN_INSIGHT_DURATION_MS]
    dated = [t for t in tracks if t.release_year is not None and t.release_year <= current_year]

    if not dated:
        return MusicalAgePayload(
            average_year=current_year,
            median_year=current_year,
            description='No tracks available' if not tracks else 'No valid release dates',
            era=music_era(current_year),
            track_count=len(tracks),
        )

    weighted = [WeightedYear(t.release_year, recency_weight(t.played_at, now)) for t in dated]
    median_year = weighted_median_release_year(weighted, default_year=current_year)
    total_weight = sum(item.weight for item in weighted)
    mean_year = (
        sum(item.year * item.weight for item in weighted) / total_weight if total_weight > 0 else float(median_year)
    )

    decades: Dict[int, float] = defaultdict(float)
    for item in weighted:
        decades[item.year // 10 * 10] += item.weight

    oldest = min(dated, key=lambda t: t.release_year)
    newest = max(dated, key=lambda t: t.release_year)
    age = max(0, current_year - median_year)

    return MusicalAgePayload(
        age=age,
        average_year=round_half_up(mean_year),
        median_year=median_year,
        description=f"Your music taste spans {age} years of musical history",
        era=music_era(median_year),
        std_dev=round(weighted_standard_deviation(weighted, mean_year), 2),
        oldest=_brief(oldest),
        newest=_brief(newest),
        decade_buckets=[DecadeBucket(decade=d, weight=round(w, 4)) for d, w in sorted(decades.items())],
        track_count=len(tracks),
    )


def get_genre_passport_payload(top_artists: Optional[Iterable[Any]]) -> GenrePassportPayload:
    counts: Counter = Counter(genre for artist in normalize_artists(top_artists) for genre in artist.genres)
    if not counts:
        return GenrePassportPayload()
    distinct = len(counts)
    return GenrePassportPayload(
        total_genres=distinct,
        top_genres=[genre for genre, _ in counts.most_common(GENRE_PASSPORT_TOP_N)],
        exploration_score=min(100, round_half_up(distinct / GENRE_PASSPORT_TARGET * 100)),
        distinct_count=distinct,
        new_discoveries=math.floor(distinct * NEW_DISCOVERY_SHARE),
    )


def get_night_owl_payload(play_events: Optional[Iterable[Any]]) -> NightOwlPayload:
    """Hour-of-day histogram (UTC) of dated plays"""
    histogram = [0] * 24
    for track in normalize_tracks(play_events):
        if track.played_at is not None:
            histogram[track.played_at.astimezone(timezone.utc).hour] += 1

    total = sum(histogram)
    if not total:
        return NightOwlPayload(histogram=histogram)

    peak_hour = histogram.index(max(histogram))
    night = sum(histogram[hour] for hour in NIGHT_OWL_HOURS)
    return NightOwlPayload(
        histogram=histogram,
        peak_hour=peak_hour,
        is_night_owl=peak_hour in NIGHT_OWL_HOURS,
        score=round_half_up(night / total * 100),
    )


def _genre_exploration(genre_mentions: Counter) -> Dict[str, float]:
    total = sum(genre_mentions.values())
    if not total:
        return {'genre_count': 0, 'entropy': 0.0, 'normalized_entropy': 0.0}
    entropy = -sum((count / total) * math.log2(count / total) for count in genre_mentions.values())
    max_entropy = math.log2(len(genre_mentions)) if len(genre_mentions) > 1 else 1.0
    return {
        'genre_count': len(genre_mentions),
        'entropy': entropy,
        'normalized_entropy': _clamp(entropy / max_entropy * 100, 0.0, 100.0),
    }


def get_radar_payload(play_events: Optional[Iterable[Any]], top_artists: Optional[Iterable[Any]] = None,
                      now: Optional[datetime] = None) -> RadarPayload:
    """Five radar axes; the default payload is returned unless both plays and top artists are present"""
    now = _now_utc(now)
    tracks = normalize_tracks(play_events)
    artists = normalize_artists(top_artists)
    if not tracks or not artists:
        return RadarPayload()

    artists_by_key = index_artists(artists)
    valence_sum = energy_sum = tempo_sum = total_weight = 0.0
    for track in tracks:
        genres = resolve_track_genres(track, artists_by_key)
        valence, energy, tempo = genre_features(genres[0] if genres else 'pop')
        if (track.popularity or 0) > POPULAR_TRACK_MIN:
            valence += POPULARITY_VALENCE_BONUS
        if track.explicit:
            valence -= EXPLICIT_VALENCE_PENALTY
        tempo_norm = normalize_tempo(tempo)

        weight = recency_weight(track.played_at, now)
        valence_sum += _clamp(valence) * weight
        energy_sum += _clamp(0.7 * energy + 0.3 * tempo_norm) * weight
        tempo_sum += tempo_norm * weight
        total_weight += weight

    mean_valence = valence_sum / total_weight if total_weight else 0.0
    mean_energy = energy_sum / total_weight if total_weight else 0.0
    mean_tempo = tempo_sum / total_weight if total_weight else 0.0

    genre_mentions: Counter = Counter(genre for artist in artists for genre in artist.genres)
    exploration = _genre_exploration(genre_mentions)

    ages = [now.year - t.release_year for t in tracks if t.release_year is not None]
    median_age = float(statistics.median(ages)) if ages else 0.0

    night_plays = sum(
        1 for t in tracks if t.played_at is not None and t.played_at.astimezone(timezone.utc).hour in RADAR_NIGHT_HOURS
    )
    night_percentage = night_plays / len(tracks) * 100

    sample = next((t for t in tracks if not t.explicit and t.name and t.primary_artist_name), tracks[0])

    return RadarPayload(
        scores={
            'Positivity': _clamp(mean_valence * 100, 0.0, 100.0),
            'Energy': _clamp((mean_energy + mean_tempo) / 2 * 100, 0.0, 100.0),
            'Exploration': exploration['normalized_entropy'],
            'Nostalgia': _clamp(median_age / NOSTALGIA_FULL_AGE_YEARS * 100, 0.0, 100.0),
            'Night-Owl': _clamp(night_percentage, 0.0, 100.0),
        },
        stats=RadarStats(
            weighted_mean_valence=mean_valence,
            weighted_mean_energy=mean_energy,
            weighted_mean_tempo=mean_tempo,
            genre_count=exploration['genre_count'],
            entropy=exploration['entropy'],
            normalized_entropy=exploration['normalized_entropy'],
            median_track_age=median_age,
            night_play_count=night_plays,
            total_play_count=len(tracks),
            night_percentage=night_percentage,
        ),
        track_count=len(tracks),
        is_default=False,
        top_genre=genre_mentions.most_common(1)[0][0] if genre_mentions else 'Pop',
        sample_track=_brief(sample, default_title='Unknown Track'),
    )


def build_listening_insights(play_events: Optional[Iterable[Any]], top_artists: Optional[Iterable[Any]] = None,
                             now: Optional[datetime] = None) -> ListeningInsights:
    """All insight payloads from one set of plays and top artists"""
    tracks: List[PlayedTrack] = normalize_tracks(play_events)
    artists = normalize_artists(top_artists)
    insights = ListeningInsights(
        musical_age=get_musical_age_payload(tracks, now=now),
        genre_passport=get_genre_passport_payload(artists),
        night_owl=get_night_owl_payload(tracks),
        radar=get_radar_payload(tracks, artists, now=now),
    )
    logger.info(
        f"Insights: musical age {insights.musical_age.age} ({insights.musical_age.era}), "
        f"{insights.genre_passport.distinct_count} genres, night owl score {insights.night_owl.score}"
    )
    return insights
