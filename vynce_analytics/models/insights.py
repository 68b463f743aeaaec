"""Listening insight models: musical age, genre passport, night owl and radar"""
from typing import Dict, List, Literal
from pydantic import BaseModel, ConfigDict, Field

RadarAxis = Literal['Positivity', 'Energy', 'Exploration', 'Nostalgia', 'Night-Owl']
RADAR_AXES = ('Positivity', 'Energy', 'Exploration', 'Nostalgia', 'Night-Owl')

class TrackBrief(BaseModel):
    """Title, artist and release year of one track"""
    title: str = ''
    artist: str = ''
    year: int = 0

class DecadeBucket(BaseModel):
    decade: int
    weight: float

class MusicalAgePayload(BaseModel):
    """How old the music sounds, from recency-weighted release years"""
    model_config = ConfigDict(populate_by_name=True)

    age: int = 0
    average_year: int = Field(alias='averageYear')
    median_year: int = Field(alias='medianYear')
    description: str
    era: str
    std_dev: float = Field(0.0, alias='stdDev')
    oldest: TrackBrief = Field(default_factory=TrackBrief)
    newest: TrackBrief = Field(default_factory=TrackBrief)
    decade_buckets: List[DecadeBucket] = Field(default_factory=list, alias='decadeBuckets')
    track_count: int = Field(0, alias='trackCount')

class GenrePassportPayload(BaseModel):
    """Breadth of the genres across the top artists"""
    model_config = ConfigDict(populate_by_name=True)

    total_genres: int = Field(0, alias='totalGenres')
    top_genres: List[str] = Field(default_factory=list, alias='topGenres')
    exploration_score: int = Field(0, ge=0, le=100, alias='explorationScore')
    distinct_count: int = Field(0, alias='distinctCount')
    new_discoveries: int = Field(0, alias='newDiscoveries')

class NightOwlPayload(BaseModel):
    """Plays per hour of day and the share played late at night"""
    model_config = ConfigDict(populate_by_name=True)

    histogram: List[int] = Field(default_factory=lambda: [0] * 24)
    peak_hour: int = Field(0, ge=0, le=23, alias='peakHour')
    is_night_owl: bool = Field(False, alias='isNightOwl')
    score: int = Field(0, ge=0, le=100)

class RadarStats(BaseModel):
    """Raw values behind the radar scores"""
    model_config = ConfigDict(populate_by_name=True)

    weighted_mean_valence: float = Field(0.0, alias='weightedMeanValence')
    weighted_mean_energy: float = Field(0.0, alias='weightedMeanEnergy')
    weighted_mean_tempo: float = Field(0.0, alias='weightedMeanTempo')
    genre_count: int = Field(0, alias='genreCount')
    entropy: float = 0.0
    normalized_entropy: float = Field(0.0, alias='normalizedEntropy')
    median_track_age: float = Field(0.0, alias='medianTrackAge')
    night_play_count: int = Field(0, alias='nightPlayCount')
    total_play_count: int = Field(0, alias='totalPlayCount')
    night_percentage: float = Field(0.0, alias='nightPercentage')

class RadarPayload(BaseModel):
    """Five 0-100 radar axes over the recent plays and top artists"""
    model_config = ConfigDict(populate_by_name=True)

    scores: Dict[str, float] = Field(default_factory=lambda: dict.fromkeys(RADAR_AXES, 0.0))
    stats: RadarStats = Field(default_factory=RadarStats)
    track_count: int = Field(0, alias='trackCount')
    is_default: bool = Field(True, alias='isDefault')
    top_genre: str = Field('Pop', alias='topGenre')
    sample_track: TrackBrief = Field(
        default_factory=lambda: TrackBrief(title='Unknown Track', artist='Unknown Artist'), alias='sampleTrack'
    )
    weeks: int = 4

class ListeningInsights(BaseModel):
    """All insight payloads computed from one set of plays and top artists"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    musical_age: MusicalAgePayload = Field(alias='musicalAge')
    genre_passport: GenrePassportPayload = Field(alias='genrePassport')
    night_owl: NightOwlPayload = Field(alias='nightOwl')
    radar: RadarPayload
