"""Listening metric computation: five normalized scores with confidence tiers"""
import logging
import math
import statistics
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from vynce_analytics.config import (
    CONFIDENCE_HIGH_MIN_SAMPLES,
    CONFIDENCE_MEDIUM_MIN_SAMPLES,
    CONFIDENCE_LOW_MIN_SAMPLES,
    TEMPORAL_VARIANCE_SCALE,
    FOLLOWER_LOG_SCALE,
    MAX_REASONABLE_VOLATILITY,
)
from vynce_analytics.genres import genre_valence_proxy
from vynce_analytics.models.analysis import (
    AnalysisMetadata,
    AnalysisPayload,
    ConfidenceLevel,
    Metric,
    MetricSet,
)
from vynce_analytics.models.listening import Artist, ListeningInput, PlayedTrack
from vynce_analytics.normalization import index_artists, normalize_listening_input, resolve_track_genres

logger = logging.getLogger(__name__)

ValenceFn = Callable[[PlayedTrack, Dict[str, Artist]], Optional[float]]

DIVERSITY_FORMULA = "Shannon entropy of genres / log2(unique genres)"
EXPLORATION_FORMULA = "(unique artists + unique tracks) / (2 * total tracks)"
TEMPORAL_FORMULA = "1 / (1 + variance of listening hours / 100)"
MAINSTREAM_FORMULA = "(mean track popularity + log-scaled artist followers) / 2"
VOLATILITY_FORMULA = "sqrt(sum((valence - mean)^2) / N) / 0.4, clamped to 0-1"


def confidence_for_sample(sample_size: int) -> ConfidenceLevel:
    """
    Confidence tier for a usable sample size

    - 40+ samples = high
    - 20-39 samples = medium
    - 10-19 samples = low
    - fewer than 10 = insufficient
    """
    if sample_size >= CONFIDENCE_HIGH_MIN_SAMPLES:
        return 'high'
    elif sample_size >= CONFIDENCE_MEDIUM_MIN_SAMPLES:
        return 'medium'
    elif sample_size >= CONFIDENCE_LOW_MIN_SAMPLES:
        return 'low'
    return 'insufficient'


def shannon_entropy(items: Iterable[str]) -> float:
    """Shannon entropy (bits) of the item frequency distribution"""
    counts = Counter(items)
    total = sum(counts.values())
    if total == 0:
        return 0.0
    entropy = 0.0
    for count in counts.values():
        p = count / total
        entropy -= p * math.log2(p)
    return entropy


def normalized_shannon_entropy(items: Iterable[str]) -> float:
    """Entropy divided by log2(unique items); 0 for zero or one unique item"""
    items = list(items)
    unique = len(set(items))
    if unique <= 1:
        return 0.0
    return shannon_entropy(items) / math.log2(unique)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    if math.isnan(value):
        return low
    return max(low, min(high, value))


class MetricCalculator:
    """Computes the five listening metrics from normalized records"""

    def __init__(self, valence_fn: Optional[ValenceFn] = None):
        self.valence_fn: ValenceFn = valence_fn or genre_valence_proxy

    def _metric(self, score: float, sample_size: int, formula: str) -> Metric:
        confidence = confidence_for_sample(sample_size)
        if confidence == 'insufficient':
            # Best-effort score; the counters let the UI explain why it is not authoritative
            return Metric(
                score=clamp(score),
                confidence=confidence,
                formula=formula,
                mapped_track_count=sample_size,
                min_required=CONFIDENCE_LOW_MIN_SAMPLES
            )
        return Metric(score=clamp(score), confidence=confidence, formula=formula)

    def calculate_musical_diversity(self, tracks: List[PlayedTrack], artists: List[Artist]) -> Metric:
        """
        Normalized Shannon entropy of the genre distribution.

        Genres come from the played tracks (their own tags, else their
        artist's). When no track resolves a genre the top-artist genre tags
        are used instead. The sample size is the number of tracks (or
        artists, on fallback) contributing genres.
        """
        artists_by_key = index_artists(artists)
        genre_tokens: List[str] = []
        sample_size = 0
        for track in tracks:
            genres = resolve_track_genres(track, artists_by_key)
            if genres:
                genre_tokens.extend(genres)
                sample_size += 1

        if not genre_tokens:
            for artist in artists:
                if artist.genres:
                    genre_tokens.extend(artist.genres)
                    sample_size += 1

        score = normalized_shannon_entropy(genre_tokens)
        return self._metric(score, sample_size, DIVERSITY_FORMULA)

    def calculate_exploration_rate(self, tracks: List[PlayedTrack]) -> Metric:
        """Share of distinct artists and distinct tracks in the play history"""
        total = len(tracks)
        if total == 0:
            return self._metric(0.0, 0, EXPLORATION_FORMULA)
        unique_artists = len({t.artist_key for t in tracks})
        unique_tracks = len({t.track_id for t in tracks})
        score = (unique_artists + unique_tracks) / (2 * total)
        return self._metric(score, total, EXPLORATION_FORMULA)

    def calculate_temporal_consistency(self, tracks: List[PlayedTrack]) -> Metric:
        """Regularity of the hour of day plays happen at"""
        hours = [t.played_at.hour for t in tracks if t.played_at is not None]
        if not hours:
            return self._metric(0.0, 0, TEMPORAL_FORMULA)
        variance = statistics.pvariance(hours)
        score = 1 / (1 + variance / TEMPORAL_VARIANCE_SCALE)
        return self._metric(score, len(hours), TEMPORAL_FORMULA)

    def calculate_mainstream_affinity(self, tracks: List[PlayedTrack], artists: List[Artist]) -> Metric:
        """
        Average of mean track popularity (0-100 scaled to 0-1) and mean
        log-scaled artist follower count. If only one signal is available it
        is used alone.
        """
        popularities = [t.popularity for t in tracks if t.popularity is not None]
        followers = [a.followers for a in artists if a.followers is not None]

        components = []
        if popularities:
            components.append(clamp(statistics.fmean(popularities) / 100))
        if followers:
            components.append(statistics.fmean(
                clamp(math.log10(max(0, f) + 1) / FOLLOWER_LOG_SCALE) for f in followers
            ))

        score = statistics.fmean(components) if components else 0.0
        return self._metric(score, len(popularities) + len(followers), MAINSTREAM_FORMULA)

    def calculate_emotional_volatility(self, tracks: List[PlayedTrack], artists: List[Artist]) -> Metric:
        """Root-mean-square deviation of per-track valence, scaled to 0-1"""
        artists_by_key = index_artists(artists)
        valences = []
        for track in tracks:
            try:
                value = self.valence_fn(track, artists_by_key)
            except (TypeError, ValueError, KeyError, AttributeError) as e:
                logger.warning(f"Valence lookup failed for track {track.track_id}: {e}")
                continue
            if value is None or isinstance(value, bool):
                continue
            try:
                value = float(value)
            except (TypeError, ValueError):
                continue
            if not math.isnan(value):
                valences.append(value)

        if len(valences) < 2:
            return self._metric(0.0, len(valences), VOLATILITY_FORMULA)

        volatility = math.sqrt(statistics.pvariance(valences))
        score = volatility / MAX_REASONABLE_VOLATILITY
        return self._metric(score, len(valences), VOLATILITY_FORMULA)

    def calculate_metrics(self, listening: ListeningInput) -> MetricSet:
        tracks = listening.recent_tracks
        artists = listening.top_artists
        return MetricSet(
            musical_diversity=self.calculate_musical_diversity(tracks, artists),
            exploration_rate=self.calculate_exploration_rate(tracks),
            temporal_consistency=self.calculate_temporal_consistency(tracks),
            mainstream_affinity=self.calculate_mainstream_affinity(tracks, artists),
            emotional_volatility=self.calculate_emotional_volatility(tracks, artists),
        )

    def build_payload(self, recent_tracks: Any = None, top_artists: Any = None,
                      now: Optional[datetime] = None) -> AnalysisPayload:
        """
        Compute a fresh AnalysisPayload from raw or normalized records.

        `recent_tracks` may also be a ListeningInput, in which case
        `top_artists` is ignored.
        """
        listening = normalize_listening_input(recent_tracks, top_artists)
        scores = self.calculate_metrics(listening)

        genres_found = {g for a in listening.top_artists for g in a.genres}
        genres_found.update(g for t in listening.recent_tracks for g in t.genres)
        payload = AnalysisPayload(
            scores=scores,
            metadata=AnalysisMetadata(
                tracks_analyzed=len(listening.recent_tracks),
                artists_analyzed=len(listening.top_artists),
                genres_found=len(genres_found),
                generated_at=now or datetime.now(timezone.utc),
            )
        )
        logger.info(
            "Computed analysis payload: " + ", ".join(
                f"{name}={metric.score:.2f} ({metric.confidence})" for name, metric in scores.present().items()
            )
        )
        return payload


def get_analysis_payload(recent_tracks: Any = None, top_artists: Any = None,
                         valence_fn: Optional[ValenceFn] = None) -> AnalysisPayload:
    """Convenience wrapper around MetricCalculator.build_payload"""
    return MetricCalculator(valence_fn=valence_fn).build_payload(recent_tracks, top_artists)
