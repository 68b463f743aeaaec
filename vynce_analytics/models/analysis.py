"""Analysis payload models exposed to the presentation layer"""
from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

ConfidenceLevel = Literal['high', 'medium', 'low', 'insufficient']

class Metric(BaseModel):
    """One scored listening dimension"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    score: float = Field(0.0, ge=0.0, le=1.0, description="Normalized score in [0, 1]")
    confidence: ConfidenceLevel = Field('insufficient', description="Tier derived from the metric's own sample size")
    formula: str = Field('', description="Description of the computation used")
    mapped_track_count: Optional[int] = Field(None, alias='mappedTrackCount')
    min_required: Optional[int] = Field(None, alias='minRequired')

class MetricSet(BaseModel):
    """
    The five named metrics.

    Every key is present in a set produced by the metric calculator, but
    payloads built elsewhere may leave some out; consumers must null-check.
    """
    model_config = ConfigDict(frozen=True)

    musical_diversity: Optional[Metric] = None
    exploration_rate: Optional[Metric] = None
    temporal_consistency: Optional[Metric] = None
    mainstream_affinity: Optional[Metric] = None
    emotional_volatility: Optional[Metric] = None

    def get(self, name: str) -> Optional[Metric]:
        return getattr(self, name, None)

    def present(self) -> Dict[str, Metric]:
        """Metrics that are actually populated, in declaration order"""
        return {name: metric for name, metric in self if metric is not None}

class AnalysisMetadata(BaseModel):
    """Sample sizes behind a payload"""
    model_config = ConfigDict(frozen=True)

    tracks_analyzed: int = 0
    artists_analyzed: int = 0
    genres_found: int = 0
    generated_at: datetime

class AnalysisPayload(BaseModel):
    """Result of one analytics recomputation; replaced, never mutated"""
    model_config = ConfigDict(frozen=True)

    scores: MetricSet = Field(default_factory=MetricSet)
    metadata: AnalysisMetadata

class PersonalityProfile(BaseModel):
    """Threshold-derived personality labels"""
    model_config = ConfigDict(frozen=True)

    types: List[str]
    dominant_type: str
    confidence: ConfidenceLevel
    type_scores: Dict[str, float] = Field(default_factory=dict)
    overall_score: int = 50
    description: str = ''
