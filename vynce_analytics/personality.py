"""Personality classification from metric scores"""
import logging
from typing import List, Optional, Tuple

from vynce_analytics.config import (
    PERSONALITY_TRIGGER_PCT,
    PERSONALITY_STABLE_PCT,
    PERSONALITY_DEFAULT_SCORE,
    METRIC_NAMES,
)
from vynce_analytics.models.analysis import AnalysisPayload, ConfidenceLevel, PersonalityProfile
from vynce_analytics.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

BALANCED_LISTENER = 'Balanced Listener'

# Declaration order doubles as the tie-break order for the dominant type
TRAIT_LABELS = (
    ('musical_diversity', 'Open-minded'),
    ('exploration_rate', 'Explorer'),
    ('temporal_consistency', 'Consistent Listener'),
    ('mainstream_affinity', 'Mainstream Listener'),
)
VOLATILE_LABEL = 'Emotionally Volatile'
STABLE_LABEL = 'Emotionally Stable'

PERSONALITY_DESCRIPTIONS = {
    'Open-minded': 'Loves diverse, complex, and varied music experiences.',
    'Explorer': 'Actively seeks new artists and tracks regularly.',
    'Consistent Listener': 'Maintains regular listening routines and habits.',
    'Mainstream Listener': 'Prefers popular, widely-appreciated music.',
    VOLATILE_LABEL: 'Often selects music with varied emotional intensity.',
    STABLE_LABEL: 'Prefers consistent, balanced emotional experiences.',
    BALANCED_LISTENER: 'Shows balanced traits across various listening styles.',
}


def _percent(payload: AnalysisPayload, name: str) -> Optional[float]:
    metric = payload.scores.get(name) if payload.scores else None
    if metric is None:
        return None
    return metric.score * 100


def aggregate_confidence(payload: AnalysisPayload) -> ConfidenceLevel:
    """
    Overall confidence from the per-metric tiers:
    3+ high = high; 2+ high or 3+ medium = medium; anything else = low.
    """
    confidences = [
        metric.confidence for metric in (payload.scores.get(n) for n in METRIC_NAMES) if metric is not None
    ]
    high = confidences.count('high')
    medium = confidences.count('medium')
    if high >= 3:
        return 'high'
    elif high >= 2 or medium >= 3:
        return 'medium'
    return 'low'


def classify_personality(payload: Optional[AnalysisPayload]) -> PersonalityProfile:
    """Label the listener from their metric scores; never raises"""
    if payload is None:
        return PersonalityProfile(
            types=[BALANCED_LISTENER],
            dominant_type=BALANCED_LISTENER,
            confidence='insufficient',
            type_scores={BALANCED_LISTENER: PERSONALITY_DEFAULT_SCORE},
            overall_score=int(PERSONALITY_DEFAULT_SCORE),
            description=PERSONALITY_DESCRIPTIONS[BALANCED_LISTENER],
        )

    qualifying: List[Tuple[str, float]] = []
    for metric_name, label in TRAIT_LABELS:
        pct = _percent(payload, metric_name)
        if pct is not None and pct >= PERSONALITY_TRIGGER_PCT:
            qualifying.append((label, pct))

    volatility = _percent(payload, 'emotional_volatility')
    if volatility is not None:
        if volatility >= PERSONALITY_TRIGGER_PCT:
            qualifying.append((VOLATILE_LABEL, volatility))
        elif volatility <= PERSONALITY_STABLE_PCT:
            qualifying.append((STABLE_LABEL, 100 - volatility))

    if not qualifying:
        qualifying.append((BALANCED_LISTENER, PERSONALITY_DEFAULT_SCORE))

    # sorted() is stable, so equal scores keep declaration order
    dominant_type = sorted(qualifying, key=lambda item: item[1], reverse=True)[0][0]
    overall = round_half_up(sum(score for _, score in qualifying) / len(qualifying))

    profile = PersonalityProfile(
        types=[label for label, _ in qualifying],
        dominant_type=dominant_type,
        confidence=aggregate_confidence(payload),
        type_scores=dict(qualifying),
        overall_score=overall,
        description=PERSONALITY_DESCRIPTIONS[dominant_type],
    )
    logger.debug(f"Personality: {profile.dominant_type} from {profile.types}")
    return profile
