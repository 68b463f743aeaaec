"""Read-only result bundle handed to the presentation layer"""
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from vynce_analytics.models.analysis import AnalysisPayload, ConfidenceLevel, PersonalityProfile
from vynce_analytics.models.gamification import Achievement, AnalysisProgress, Badge
from vynce_analytics.models.insights import ListeningInsights
from vynce_analytics.models.mood import MoodReport
from vynce_analytics.models.recap import FourWeekStats

class MetricSummary(BaseModel):
    """A metric score with its display copy"""
    score: float
    confidence: ConfidenceLevel
    headline: str
    subtitle: str
    traits: List[str] = Field(default_factory=list)
    confidence_title: str

class AnalyticsSnapshot(BaseModel):
    """Everything one recomputation produced"""
    model_config = ConfigDict(frozen=True)

    computed_at: datetime
    payload: Optional[AnalysisPayload] = None
    metric_summaries: Dict[str, MetricSummary] = Field(default_factory=dict)
    personality: PersonalityProfile
    progress: AnalysisProgress
    badges: List[Badge] = Field(default_factory=list)
    achievements: List[Achievement] = Field(default_factory=list)
    new_achievements: List[Achievement] = Field(default_factory=list)
    total_score: int = 0
    level: int = 1
    recap: Optional[FourWeekStats] = None
    mood: Optional[MoodReport] = None
    insights: Optional[ListeningInsights] = None
    errors: List[str] = Field(default_factory=list, description="User-facing messages for failed stages")
