"""Gamification progress tracking with persisted badge and achievement state"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

from pydantic import ValidationError

from vynce_analytics.badges import BADGE_CATALOG, create_achievement, evaluate_badges
from vynce_analytics.config import (
    settings,
    METRIC_NAMES,
    PROGRESS_TARGETS,
    PROGRESS_WEIGHTS,
    POINTS_PER_BADGE,
    BADGES_PER_LEVEL,
)
from vynce_analytics.models.analysis import AnalysisPayload
from vynce_analytics.models.gamification import (
    Achievement,
    AnalysisProgress,
    Badge,
    GamificationState,
    ProgressMetric,
)
from vynce_analytics.normalization import parse_played_at
from vynce_analytics.utils.dates import as_utc

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Persistence backend for the serialized state object"""

    def load_state(self, key: str) -> Optional[Dict[str, Any]]: ...

    def save_state(self, key: str, state: Dict[str, Any]) -> None: ...


def _progress_metric(current: int, key: str, label: str) -> ProgressMetric:
    target = PROGRESS_TARGETS[key]
    return ProgressMetric(
        current=current,
        target=target,
        label=label,
        percentage=min(current / target * 100, 100.0) if target else 0.0,
    )


def calculate_progress(payload: Optional[AnalysisPayload]) -> AnalysisProgress:
    """
    Weighted completion towards the analysis targets:
    tracks 40%, artists 20%, genres 20%, high-confidence metrics 20%.
    """
    if payload is None:
        tracks = artists = genres = high_confidence = 0
    else:
        metadata = payload.metadata
        tracks = metadata.tracks_analyzed
        artists = metadata.artists_analyzed
        genres = metadata.genres_found
        high_confidence = sum(
            1 for name in METRIC_NAMES
            if (metric := payload.scores.get(name)) is not None and metric.confidence == 'high'
        )

    progress = {
        'tracks': _progress_metric(tracks, 'tracks', 'Tracks'),
        'artists': _progress_metric(artists, 'artists', 'Artists'),
        'genres': _progress_metric(genres, 'genres', 'Genres'),
        'confidence': _progress_metric(high_confidence, 'confidence', 'High Confidence'),
    }
    overall = sum(progress[key].percentage * weight for key, weight in PROGRESS_WEIGHTS.items())
    return AnalysisProgress(**progress, overall=overall)


def initial_badges() -> List[Badge]:
    """Fresh copy of the catalog with everything locked"""
    return [badge.model_copy(update={'unlocked': False, 'unlocked_at': None}) for badge in BADGE_CATALOG.values()]


class GamificationTracker:
    """
    Owns the badge unlock state, the achievement queue and analysis progress.

    State is loaded from the store on construction and written back in full
    after every mutation. Store failures are logged; the in-memory state stays
    authoritative for the rest of the session.
    """

    def __init__(self, store: Optional[StateStore] = None, storage_key: Optional[str] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 achievement_ttl: Optional[timedelta] = None):
        self.store = store
        self.storage_key = storage_key or settings.STORAGE_KEY
        self._clock_fn = clock or (lambda: datetime.now(timezone.utc))
        self.achievement_ttl = achievement_ttl or timedelta(hours=settings.ACHIEVEMENT_TTL_HOURS)
        self._state = self._load()
        try:
            pruned = self.prune_achievements()
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to prune stored achievements, clearing the queue: {e}")
            self._state = self._state.model_copy(update={'recent_achievements': []})
            pruned = True
        if pruned:
            self._persist()

    def _clock(self) -> datetime:
        return as_utc(self._clock_fn())

    # --- Read-only views -------------------------------------------------

    @property
    def state(self) -> GamificationState:
        return self._state.model_copy(deep=True)

    @property
    def badges(self) -> List[Badge]:
        return [badge.model_copy() for badge in self._state.badges]

    @property
    def recent_achievements(self) -> List[Achievement]:
        return [achievement.model_copy() for achievement in self._state.recent_achievements]

    @property
    def progress(self) -> AnalysisProgress:
        return self._state.progress.model_copy(deep=True)

    @property
    def total_score(self) -> int:
        return self._state.total_score

    @property
    def level(self) -> int:
        return self._state.level

    @property
    def unlocked_badge_ids(self) -> List[str]:
        return [badge.id for badge in self._state.badges if badge.unlocked]

    @property
    def unlocked_badge_count(self) -> int:
        return len(self.unlocked_badge_ids)

    @property
    def has_unseen_achievements(self) -> bool:
        return any(not achievement.seen for achievement in self._state.recent_achievements)

    # --- State transitions -----------------------------------------------

    def recompute(self, payload: Optional[AnalysisPayload]) -> List[Achievement]:
        """
        Apply a new payload: unlock newly satisfied badges, queue their
        achievements and refresh progress. Returns the new achievements.
        """
        satisfied = evaluate_badges(payload)
        already_unlocked = set(self.unlocked_badge_ids)
        newly_unlocked = [badge_id for badge_id in satisfied if badge_id not in already_unlocked]

        now = self._clock()
        new_achievements = []
        if newly_unlocked:
            badges = []
            for badge in self._state.badges:
                if badge.id in newly_unlocked:
                    # First unlock time is kept for good
                    badge = badge.model_copy(update={'unlocked': True, 'unlocked_at': badge.unlocked_at or now})
                badges.append(badge)
            new_achievements = [create_achievement(badge_id, now=now) for badge_id in newly_unlocked]
            self._state = self._state.model_copy(update={
                'badges': badges,
                'recent_achievements': self._state.recent_achievements + new_achievements,
            })
            logger.info(f"Unlocked badges: {', '.join(newly_unlocked)}")

        self._state = self._with_totals(self._state.model_copy(update={'progress': calculate_progress(payload)}))
        self._persist()
        return new_achievements

    def dismiss_achievement(self, badge_id: str, timestamp: Union[datetime, str]) -> bool:
        """Mark one achievement as seen; it stays in the queue until pruned"""
        target = parse_played_at(timestamp)
        if target is None:
            logger.warning(f"Cannot dismiss achievement {badge_id}: invalid timestamp {timestamp}")
            return False

        found = False
        achievements = []
        for achievement in self._state.recent_achievements:
            if not found and achievement.badge_id == badge_id and achievement.timestamp == target:
                achievement = achievement.model_copy(update={'seen': True})
                found = True
            achievements.append(achievement)

        if not found:
            logger.debug(f"No achievement {badge_id} at {timestamp} to dismiss")
            return False

        self._state = self._state.model_copy(update={'recent_achievements': achievements})
        self._persist()
        return True

    def dismiss_by_key(self, achievement_key: str) -> bool:
        """Dismiss using the `{badgeId}-{timestamp}` key exposed on Achievement"""
        for achievement in self._state.recent_achievements:
            if achievement.key == achievement_key:
                return self.dismiss_achievement(achievement.badge_id, achievement.timestamp)
        return False

    def prune_achievements(self) -> bool:
        """
        Drop achievements older than the TTL from the notification queue.
        Badge unlock status is never pruned. Returns True if anything was removed.
        """
        cutoff = self._clock() - self.achievement_ttl
        kept = [a for a in self._state.recent_achievements if a.timestamp > cutoff]
        removed = len(self._state.recent_achievements) - len(kept)
        if removed:
            self._state = self._state.model_copy(update={'recent_achievements': kept})
            logger.info(f"Pruned {removed} expired achievements")
        return bool(removed)

    # --- Persistence -----------------------------------------------------

    def _with_totals(self, state: GamificationState) -> GamificationState:
        unlocked = sum(1 for badge in state.badges if badge.unlocked)
        return state.model_copy(update={
            'total_score': unlocked * POINTS_PER_BADGE,
            'level': unlocked // BADGES_PER_LEVEL + 1,
        })

    def _initial_state(self) -> GamificationState:
        return GamificationState(badges=initial_badges(), progress=calculate_progress(None))

    def _load(self) -> GamificationState:
        if self.store is None:
            return self._initial_state()
        try:
            stored = self.store.load_state(self.storage_key)
        except Exception as e:
            logger.error(f"Failed to load gamification state: {e}")
            return self._initial_state()
        if not stored:
            logger.info("No stored gamification state, starting fresh")
            return self._initial_state()

        try:
            state = GamificationState.model_validate(stored)
        except ValidationError as e:
            logger.warning(f"Discarding malformed gamification state: {e}")
            return self._initial_state()

        # Overlay stored unlock flags onto the current catalog
        stored_badges = {badge.id: badge for badge in state.badges}
        badges = []
        for badge in initial_badges():
            previous = stored_badges.get(badge.id)
            if previous and previous.unlocked:
                badge = badge.model_copy(update={'unlocked': True, 'unlocked_at': previous.unlocked_at})
            badges.append(badge)
        achievements = [a for a in state.recent_achievements if a.badge_id in BADGE_CATALOG]

        return self._with_totals(state.model_copy(update={'badges': badges, 'recent_achievements': achievements}))

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save_state(self.storage_key, self._state.model_dump(mode='json', by_alias=True))
        except Exception as e:
            logger.error(f"Failed to save gamification state: {e}")
