"""Badge catalog, unlock rules and achievement creation"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from vynce_analytics.config import (
    BADGE_HIGH_THRESHOLD,
    BADGE_LOW_THRESHOLD,
    COMBO_HIGH_THRESHOLD,
    COMBO_LOW_THRESHOLD,
    VOLUME_BADGE_TRACKS,
    METRIC_NAMES,
)
from vynce_analytics.models.analysis import AnalysisPayload
from vynce_analytics.models.gamification import Achievement, Badge


@dataclass(frozen=True)
class BadgeRule:
    badge_id: str
    check: Callable[[AnalysisPayload], bool]


# Catalog order is also the evaluation and display order
BADGE_CATALOG: Dict[str, Badge] = {badge.id: badge for badge in (
    Badge(id='genre_explorer', name='Genre Explorer',
          description='Musical diversity extraordinaire! Your taste knows no boundaries.',
          emoji='🌍', rarity='rare', requirement='Musical diversity > 80%'),
    Badge(id='loyal_listener', name='Loyal Listener',
          description='You know what you love and you love what you know.',
          emoji='💎', rarity='common', requirement='Musical diversity < 20%'),
    Badge(id='treasure_hunter', name='Treasure Hunter',
          description='Always on the hunt for the next musical gem.',
          emoji='🔍', rarity='rare', requirement='Exploration rate > 80%'),
    Badge(id='comfort_curator', name='Comfort Curator',
          description='Your favorites playlist is perfectly curated.',
          emoji='🏠', rarity='common', requirement='Exploration rate < 20%'),
    Badge(id='clockwork_listener', name='Clockwork Listener',
          description='Your music schedule runs like Swiss clockwork.',
          emoji='⏰', rarity='epic', requirement='Temporal consistency > 80%'),
    Badge(id='spontaneous_soul', name='Spontaneous Soul',
          description='Music flows through you like a free spirit.',
          emoji='🌪️', rarity='common', requirement='Temporal consistency < 20%'),
    Badge(id='mainstream_maven', name='Mainstream Maven',
          description='You have your finger on the pulse of popular music.',
          emoji='📈', rarity='common', requirement='Mainstream affinity > 80%'),
    Badge(id='underground_authority', name='Underground Authority',
          description='The hidden gems of music bow to your expertise.',
          emoji='🕳️', rarity='epic', requirement='Mainstream affinity < 20%'),
    Badge(id='mood_master', name='Mood Master',
          description='Your emotions paint symphonies across genres.',
          emoji='🎭', rarity='rare', requirement='Emotional volatility > 80%'),
    Badge(id='zen_listener', name='Zen Listener',
          description='Your musical temperament flows like a calm river.',
          emoji='🧘', rarity='rare', requirement='Emotional volatility < 20%'),
    Badge(id='data_collector', name='Data Collector',
          description='Your listening habits provide rich, reliable insights.',
          emoji='📊', rarity='epic', requirement='High confidence across all metrics'),
    Badge(id='completionist', name='Completionist',
          description='Your music library tells a comprehensive story.',
          emoji='💯', rarity='legendary', requirement=f'{VOLUME_BADGE_TRACKS}+ tracks analyzed'),
    Badge(id='genre_chameleon', name='Genre Chameleon',
          description='You adapt and explore across all musical landscapes.',
          emoji='🦎', rarity='legendary', requirement='High diversity + high exploration'),
    Badge(id='consistency_king', name='Consistency King',
          description='Your steady rhythms create perfect harmony.',
          emoji='👑', rarity='legendary', requirement='High temporal consistency + low volatility'),
    Badge(id='trend_rebel', name='Trend Rebel',
          description='You carve your own path through unexplored territories.',
          emoji='⚡', rarity='legendary', requirement='Low mainstream + high exploration'),
)}


def _score(payload: AnalysisPayload, name: str) -> Optional[float]:
    scores = getattr(payload, 'scores', None)
    metric = scores.get(name) if scores is not None else None
    return metric.score if metric is not None else None


def _above(name: str, threshold: float) -> Callable[[AnalysisPayload], bool]:
    def check(payload: AnalysisPayload) -> bool:
        score = _score(payload, name)
        return score is not None and score > threshold
    return check


def _below(name: str, threshold: float) -> Callable[[AnalysisPayload], bool]:
    def check(payload: AnalysisPayload) -> bool:
        score = _score(payload, name)
        return score is not None and score < threshold
    return check


def _both(*checks: Callable[[AnalysisPayload], bool]) -> Callable[[AnalysisPayload], bool]:
    return lambda payload: all(check(payload) for check in checks)


def _all_high_confidence(payload: AnalysisPayload) -> bool:
    scores = getattr(payload, 'scores', None)
    if scores is None:
        return False
    metrics = [scores.get(name) for name in METRIC_NAMES]
    return all(metric is not None and metric.confidence == 'high' for metric in metrics)


def _volume(payload: AnalysisPayload) -> bool:
    metadata = getattr(payload, 'metadata', None)
    return metadata is not None and metadata.tracks_analyzed >= VOLUME_BADGE_TRACKS


BADGE_RULES: List[BadgeRule] = [
    BadgeRule('genre_explorer', _above('musical_diversity', BADGE_HIGH_THRESHOLD)),
    BadgeRule('loyal_listener', _below('musical_diversity', BADGE_LOW_THRESHOLD)),
    BadgeRule('treasure_hunter', _above('exploration_rate', BADGE_HIGH_THRESHOLD)),
    BadgeRule('comfort_curator', _below('exploration_rate', BADGE_LOW_THRESHOLD)),
    BadgeRule('clockwork_listener', _above('temporal_consistency', BADGE_HIGH_THRESHOLD)),
    BadgeRule('spontaneous_soul', _below('temporal_consistency', BADGE_LOW_THRESHOLD)),
    BadgeRule('mainstream_maven', _above('mainstream_affinity', BADGE_HIGH_THRESHOLD)),
    BadgeRule('underground_authority', _below('mainstream_affinity', BADGE_LOW_THRESHOLD)),
    BadgeRule('mood_master', _above('emotional_volatility', BADGE_HIGH_THRESHOLD)),
    BadgeRule('zen_listener', _below('emotional_volatility', BADGE_LOW_THRESHOLD)),
    BadgeRule('data_collector', _all_high_confidence),
    BadgeRule('completionist', _volume),
    BadgeRule('genre_chameleon', _both(
        _above('musical_diversity', COMBO_HIGH_THRESHOLD),
        _above('exploration_rate', COMBO_HIGH_THRESHOLD),
    )),
    BadgeRule('consistency_king', _both(
        _above('temporal_consistency', COMBO_HIGH_THRESHOLD),
        _below('emotional_volatility', COMBO_LOW_THRESHOLD),
    )),
    BadgeRule('trend_rebel', _both(
        _below('mainstream_affinity', COMBO_LOW_THRESHOLD),
        _above('exploration_rate', COMBO_HIGH_THRESHOLD),
    )),
]


def evaluate_badges(payload: Optional[AnalysisPayload]) -> List[str]:
    """Ids of every badge the payload currently satisfies, in catalog order"""
    if payload is None:
        return []
    return [rule.badge_id for rule in BADGE_RULES if rule.check(payload)]


def create_achievement(badge_id: str, now: Optional[datetime] = None) -> Achievement:
    """Notification record for a badge that just unlocked"""
    badge = BADGE_CATALOG[badge_id]
    return Achievement(
        badge_id=badge_id,
        title=f"Badge Unlocked: {badge.name}!",
        message=badge.description,
        timestamp=now or datetime.now(timezone.utc),
        seen=False,
    )
