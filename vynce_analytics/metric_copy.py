"""Display copy for metric scores.

Score tiers: low (<= 0.34), medium (<= 0.67), high (above 0.67).
"""
from dataclasses import dataclass
from typing import Dict, List

from vynce_analytics.config import COPY_LOW_MAX, COPY_MEDIUM_MAX


@dataclass(frozen=True)
class MetricCopy:
    headline: str
    subtitle: str


GENERIC_COPY = MetricCopy(headline="Musical metric", subtitle="Analyzing your listening patterns")

METRIC_COPY: Dict[str, Dict[str, MetricCopy]] = {
    'musical_diversity': {
        'low': MetricCopy("Genre comfort zone", "You've got your favorites locked down"),
        'medium': MetricCopy("Genre explorer", "Mixing it up with different sounds"),
        'high': MetricCopy("Genre globe-trotter!", "Your playlist spans musical worlds"),
    },
    'exploration_rate': {
        'low': MetricCopy("Comfort repeat mode", "Sticking with the classics you love"),
        'medium': MetricCopy("Balanced discoverer", "Finding new gems while keeping favorites"),
        'high': MetricCopy("Music treasure hunter!", "Always chasing the next great track"),
    },
    'temporal_consistency': {
        'low': MetricCopy("Musical mood swinger", "Your listening schedule is beautifully chaotic"),
        'medium': MetricCopy("Rhythm in routine", "Some patterns emerging in your music time"),
        'high': MetricCopy("Clock-work curator!", "Your music schedule is surprisingly steady"),
    },
    'mainstream_affinity': {
        'low': MetricCopy("Underground connoisseur", "You're digging deep for hidden gems"),
        'medium': MetricCopy("Chart-curious", "Mixing hits with personal discoveries"),
        'high': MetricCopy("Pop culture pulse!", "You're riding the wave of what's trending"),
    },
    'emotional_volatility': {
        'low': MetricCopy("Steady mood soundtrack", "Your music keeps an even emotional keel"),
        'medium': MetricCopy("Emotional range rider", "Your playlists paint different feelings"),
        'high': MetricCopy("Mood swing maestro!", "Your music takes wild emotional journeys"),
    },
}

TRAIT_SEEDS: Dict[str, Dict[str, List[str]]] = {
    'musical_diversity': {
        'low': ["focused", "loyal", "devoted", "consistent", "steadfast", "committed"],
        'medium': ["balanced", "curious", "selective", "adventurous", "flexible", "open-minded"],
        'high': ["eclectic", "omnivorous", "boundless", "genre-fluid", "kaleidoscopic", "expansive"],
    },
    'exploration_rate': {
        'low': ["comfortable", "nostalgic", "rooted", "grounded", "anchored", "familiar"],
        'medium': ["discovering", "curious", "measured", "thoughtful", "strategic", "selective"],
        'high': ["restless", "adventurous", "pioneering", "insatiable", "fearless", "trailblazing"],
    },
    'temporal_consistency': {
        'low': ["spontaneous", "impulsive", "free-spirited", "unpredictable", "whimsical", "fluid"],
        'medium': ["rhythmic", "structured", "habitual", "organized", "patterned", "methodical"],
        'high': ["clockwork", "disciplined", "ritualistic", "precise", "systematic", "steady"],
    },
    'mainstream_affinity': {
        'low': ["underground", "indie", "rebellious", "counter-cultural", "alternative", "niche"],
        'medium': ["trend-aware", "selective", "chart-conscious", "culturally-fluent", "balanced", "discerning"],
        'high': ["zeitgeist", "pulse-reading", "trend-riding", "culturally-current", "chart-chasing", "crowd-pleasing"],
    },
    'emotional_volatility': {
        'low': ["steady", "even-keeled", "stable", "centered", "harmonious", "tranquil"],
        'medium': ["expressive", "mood-responsive", "emotionally-aware", "heart-led", "reactive", "passionate"],
        'high': ["intense", "dramatic", "explosive", "turbulent", "emotionally-dynamic", "cathartic"],
    },
}

CONFIDENCE_DESCRIPTIONS: Dict[str, Dict[str, str]] = {
    'high': {
        'title': "High Confidence",
        'description': "Plenty of data for reliable analysis (40+ tracks)",
    },
    'medium': {
        'title': "Medium Confidence",
        'description': "Good data sample for solid insights (20-39 tracks)",
    },
    'low': {
        'title': "Low Confidence",
        'description': "Limited data - insights may vary (10-19 tracks)",
    },
    'insufficient': {
        'title': "Insufficient Data",
        'description': "Not enough data yet for meaningful analysis (<10 tracks)",
    },
}


def score_tier(score: float) -> str:
    if score <= COPY_LOW_MAX:
        return 'low'
    elif score <= COPY_MEDIUM_MAX:
        return 'medium'
    return 'high'


def get_metric_copy(metric_name: str, score: float) -> MetricCopy:
    """Headline and subtitle for a metric at a given score; unknown metrics get generic copy"""
    config = METRIC_COPY.get(metric_name)
    if config is None:
        return GENERIC_COPY
    return config[score_tier(score)]


def get_trait_seeds(metric_name: str, score: float) -> List[str]:
    seeds = TRAIT_SEEDS.get(metric_name)
    if seeds is None:
        return []
    return list(seeds[score_tier(score)])
