"""Badge, achievement and progress models for the gamification layer"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from vynce_analytics.utils.dates import as_utc

Rarity = Literal['common', 'rare', 'epic', 'legendary']

class Badge(BaseModel):
    """Catalog entry, optionally overlaid with the user's unlock status"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str
    emoji: str
    rarity: Rarity
    requirement: str = Field(description="Human-readable unlock rule")
    unlocked: bool = False
    unlocked_at: Optional[datetime] = Field(None, alias='unlockedAt')

    @field_validator('unlocked_at')
    @classmethod
    def _unlocked_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

class Achievement(BaseModel):
    """Unlock event shown in the notification queue"""
    model_config = ConfigDict(populate_by_name=True)

    badge_id: str = Field(alias='badgeId')
    title: str
    message: str
    timestamp: datetime
    seen: bool = False

    @field_validator('timestamp')
    @classmethod
    def _timestamp_utc(cls, value: datetime) -> datetime:
        # Older stored states may carry timestamps without an offset
        return as_utc(value)

    @property
    def key(self) -> str:
        return f"{self.badge_id}-{self.timestamp.isoformat()}"

class ProgressMetric(BaseModel):
    """Progress towards one analysis-volume target"""
    current: int = 0
    target: int
    label: str
    percentage: float = 0.0

class AnalysisProgress(BaseModel):
    """Weighted completion across tracks, artists, genres and confidence"""
    tracks: ProgressMetric
    artists: ProgressMetric
    genres: ProgressMetric
    confidence: ProgressMetric
    overall: float = Field(0.0, description="Weighted composite, 0-100")

class GamificationState(BaseModel):
    """Persisted gamification state, stored wholesale under one key"""
    model_config = ConfigDict(populate_by_name=True)

    badges: List[Badge] = Field(default_factory=list)
    recent_achievements: List[Achievement] = Field(default_factory=list, alias='recentAchievements')
    progress: AnalysisProgress
    total_score: int = Field(0, alias='totalScore')
    level: int = 1
