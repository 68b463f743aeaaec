"""Four-week recap models"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from vynce_analytics.config import NO_BASELINE

class TopAlbum(BaseModel):
    """Most-played album in a period"""
    name: str
    artist: str
    image: Optional[str] = None
    count: int = 0

class FourWeekStats(BaseModel):
    """Last 28 days compared against the 28 days before"""
    model_config = ConfigDict(frozen=True)

    minutes_this: float = 0.0
    minutes_prev: float = 0.0
    percentage_change: str = Field(NO_BASELINE, description="Signed percentage, or the no-baseline marker")
    top_genre: Optional[str] = None
    top_album: Optional[TopAlbum] = None
    previous_top_genre: Optional[str] = None
    previous_top_album: Optional[TopAlbum] = None
    plays_this: int = 0
    plays_prev: int = 0

    @property
    def has_baseline(self) -> bool:
        return self.percentage_change != NO_BASELINE
