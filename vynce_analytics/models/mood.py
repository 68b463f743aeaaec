"""Daily mood aggregation models"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class DailyMoodData(BaseModel):
    """One calendar day of listening; a moodScore of 0 means no plays that day"""
    model_config = ConfigDict(populate_by_name=True)

    date: str
    day_name: str = Field(alias='dayName')
    mood_score: int = Field(0, ge=0, le=100, alias='moodScore')
    track_count: int = Field(0, alias='trackCount')
    musical_diversity: int = Field(0, alias='musicalDiversity')
    exploration_rate: int = Field(0, alias='explorationRate')
    temporal_consistency: int = Field(0, alias='temporalConsistency')
    mainstream_affinity: int = Field(0, alias='mainstreamAffinity')
    emotional_volatility: int = Field(0, alias='emotionalVolatility')
    insight: str = ''
    top_genres: Optional[List[str]] = Field(None, alias='topGenres')

class MoodInsights(BaseModel):
    """Aggregate over the days that have data"""
    model_config = ConfigDict(populate_by_name=True)

    average_mood: int = Field(alias='averageMood')
    highest_mood_day: DailyMoodData = Field(alias='highestMoodDay')
    lowest_mood_day: DailyMoodData = Field(alias='lowestMoodDay')
    total_days: int = Field(alias='totalDays')

class MoodReport(BaseModel):
    """Mood days plus insights (None when no day has data)"""
    mood_data: List[DailyMoodData] = Field(default_factory=list, alias='moodData')
    insights: Optional[MoodInsights] = None

    model_config = ConfigDict(populate_by_name=True)
