"""Orchestration: fetch listening data, compute the payload and update gamification"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import requests

from vynce_analytics.config import Settings, settings as default_settings
from vynce_analytics.gamification import GamificationTracker
from vynce_analytics.insights import build_listening_insights
from vynce_analytics.metric_copy import CONFIDENCE_DESCRIPTIONS, get_metric_copy, get_trait_seeds
from vynce_analytics.metrics import MetricCalculator
from vynce_analytics.models.analysis import AnalysisPayload
from vynce_analytics.models.insights import ListeningInsights
from vynce_analytics.models.listening import ListeningInput
from vynce_analytics.models.snapshot import AnalyticsSnapshot, MetricSummary
from vynce_analytics.mood import build_mood_report
from vynce_analytics.personality import classify_personality
from vynce_analytics.recap import calculate_last_4_weeks_stats
from vynce_analytics.services.wellness import build_wellness_request
from vynce_analytics.utils.throttle import CooldownGate, FreshnessCache

logger = logging.getLogger(__name__)

RECAP_ERROR = "Failed to load 4-week stats"
ANALYSIS_ERROR = "Failed to compute psycho-analysis"
MOOD_ERROR = "Failed to load mood data"

# Insights are reused for as long as the provider data they were built from
INSIGHTS_CACHE_KEY = 'insights'


class ListeningProvider(Protocol):
    """The narrow fetch interface the engine needs from a music service"""

    def get_recently_played(self) -> List[Dict]: ...

    def get_top_artists(self, time_range: str = 'medium_term') -> List[Dict]: ...


def summarize_metrics(payload: Optional[AnalysisPayload]) -> Dict[str, MetricSummary]:
    """Attach display copy to every populated metric"""
    if payload is None:
        return {}
    summaries = {}
    for name, metric in payload.scores.present().items():
        copy = get_metric_copy(name, metric.score)
        summaries[name] = MetricSummary(
            score=metric.score,
            confidence=metric.confidence,
            headline=copy.headline,
            subtitle=copy.subtitle,
            traits=get_trait_seeds(name, metric.score),
            confidence_title=CONFIDENCE_DESCRIPTIONS[metric.confidence]['title'],
        )
    return summaries


class AnalyticsEngine:
    """
    Runs one recomputation per admitted trigger.

    Provider responses are reused for the cache freshness window. Triggers
    arriving inside the cooldown window are dropped and the previous
    snapshot is returned instead.
    """

    def __init__(self, tracker: GamificationTracker, provider: Optional[ListeningProvider] = None,
                 calculator: Optional[MetricCalculator] = None, config: Optional[Settings] = None,
                 clock: Callable[[], float] = time.monotonic,
                 now_fn: Optional[Callable[[], datetime]] = None):
        self.config = config or default_settings
        self.tracker = tracker
        self.provider = provider
        self.calculator = calculator or MetricCalculator()
        self._now = now_fn or (lambda: datetime.now(timezone.utc))
        self._gate = CooldownGate(self.config.RECOMPUTE_COOLDOWN_SECONDS, clock=clock)
        self._cache: FreshnessCache[Any] = FreshnessCache(self.config.PAYLOAD_CACHE_SECONDS, clock=clock)
        self._snapshot: Optional[AnalyticsSnapshot] = None
        self._recent_tracks: List[Any] = []
        self._top_artists: List[Any] = []

    @property
    def snapshot(self) -> Optional[AnalyticsSnapshot]:
        return self._snapshot

    def _admit(self, force: bool) -> bool:
        if force:
            self._gate.reset()
        if self._gate.try_acquire() or self._snapshot is None:
            return True
        logger.info("Recompute requested inside cooldown window, returning previous snapshot")
        return False

    def _fetcher(self, load: Callable[[], List[Dict]]) -> Callable[[], List[Dict]]:
        """Wrap a provider call so fresh data also drops the insights built from the old data"""
        def fetch() -> List[Dict]:
            self._cache.invalidate(INSIGHTS_CACHE_KEY)
            return load()
        return fetch

    def _fetch(self) -> Tuple[List[Dict], List[Dict]]:
        if self.provider is None:
            raise RuntimeError("No listening provider configured")
        time_range = self.config.TIME_RANGE
        recent = self._cache.get_or_load('recent-tracks', self._fetcher(self.provider.get_recently_played))
        artists = self._cache.get_or_load(
            f'top-artists-{time_range}',
            self._fetcher(lambda: self.provider.get_top_artists(time_range=time_range)),
        )
        return recent, artists

    def refresh(self, force: bool = False) -> AnalyticsSnapshot:
        """
        Fetch from the provider (or the cache) and recompute.

        Provider failures never propagate; the snapshot carries the
        user-facing messages and the tracker state is left untouched.
        """
        if not self._admit(force):
            return self._snapshot
        if force:
            self._cache.clear()

        try:
            recent, artists = self._fetch()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to fetch listening data: {e}")
            self._snapshot = self._failed_snapshot([RECAP_ERROR, ANALYSIS_ERROR, MOOD_ERROR])
            return self._snapshot
        return self._compute(recent, artists, cache_insights=True)

    def analyze(self, recent_tracks: Any = None, top_artists: Any = None, force: bool = False) -> AnalyticsSnapshot:
        """
        Recompute from data the caller already has, e.g. an export file.

        `recent_tracks` may also be a ListeningInput, in which case
        `top_artists` is ignored.
        """
        if not self._admit(force):
            return self._snapshot
        if isinstance(recent_tracks, ListeningInput):
            return self._compute(list(recent_tracks.recent_tracks), list(recent_tracks.top_artists))
        return self._compute(list(recent_tracks or []), list(top_artists or []))

    def _compute(self, recent_tracks: List[Any], top_artists: List[Any],
                 cache_insights: bool = False) -> AnalyticsSnapshot:
        now = self._now()
        self._recent_tracks = recent_tracks
        self._top_artists = top_artists

        payload = self.calculator.build_payload(recent_tracks, top_artists, now=now)
        new_achievements = self.tracker.recompute(payload)
        state = self.tracker.state

        def load_insights() -> ListeningInsights:
            return build_listening_insights(recent_tracks, top_artists, now=now)

        insights = self._cache.get_or_load(INSIGHTS_CACHE_KEY, load_insights) if cache_insights else load_insights()

        self._snapshot = AnalyticsSnapshot(
            computed_at=now,
            payload=payload,
            metric_summaries=summarize_metrics(payload),
            personality=classify_personality(payload),
            progress=state.progress,
            badges=state.badges,
            achievements=state.recent_achievements,
            new_achievements=new_achievements,
            total_score=state.total_score,
            level=state.level,
            recap=calculate_last_4_weeks_stats(recent_tracks, top_artists, now=now),
            mood=build_mood_report(recent_tracks, top_artists, now=now),
            insights=insights,
        )
        return self._snapshot

    def _failed_snapshot(self, errors: List[str]) -> AnalyticsSnapshot:
        state = self.tracker.state
        previous = self._snapshot
        return AnalyticsSnapshot(
            computed_at=self._now(),
            payload=previous.payload if previous else None,
            metric_summaries=previous.metric_summaries if previous else {},
            personality=previous.personality if previous else classify_personality(None),
            progress=state.progress,
            badges=state.badges,
            achievements=state.recent_achievements,
            total_score=state.total_score,
            level=state.level,
            insights=previous.insights if previous else None,
            errors=errors,
        )

    def wellness_request(self) -> Optional[Dict[str, Any]]:
        """Recommendation request body for the latest snapshot, or None before the first computation"""
        snapshot = self._snapshot
        if snapshot is None or snapshot.payload is None:
            return None
        mood_days = snapshot.mood.mood_data if snapshot.mood else []
        return build_wellness_request(
            mood_days,
            snapshot.personality.dominant_type,
            top_artists=self._top_artists,
            recent_tracks=self._recent_tracks,
        )
