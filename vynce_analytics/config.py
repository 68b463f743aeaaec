"""Application configuration, environment settings and rule thresholds"""
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TimeRange = Literal["short_term", "medium_term", "long_term"]

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Music-service provider
    SPOTIFY_TOKEN: Optional[str] = Field(None, description="Spotify API access token")
    SPOTIFY_API_URL: str = Field("https://api.spotify.com/v1", description="Spotify Web API base URL")
    TIME_RANGE: TimeRange = Field(
        "medium_term", description="Range token used for top-artist fetches"
    )

    # Downstream recommendation service
    WELLNESS_API_URL: Optional[str] = Field(None, description="Wellness recommendation endpoint")

    # Persistence
    DATABASE_URL: str = Field("sqlite:///vynce_analytics.db", description="SQLAlchemy database URL")
    STORAGE_KEY: str = Field("vynce_gamification", description="Key the gamification state is stored under")

    # Recomputation pacing
    RECOMPUTE_COOLDOWN_SECONDS: float = Field(3.0, description="Window in which repeat recomputes are dropped")
    PAYLOAD_CACHE_SECONDS: float = Field(300.0, description="Freshness window for fetched provider data")
    ACHIEVEMENT_TTL_HOURS: float = Field(24.0, description="Age after which achievements leave the notification queue")

    # Input/Output directories with defaults
    INPUT_DIR: str = Field("/input", description="Directory containing exported listening data")
    OUTPUT_DIR: str = Field("/output", description="Directory for output files")

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

settings = Settings()

# Constants

# Confidence tiers by usable sample size (inclusive lower bounds)
CONFIDENCE_HIGH_MIN_SAMPLES = 40
CONFIDENCE_MEDIUM_MIN_SAMPLES = 20
CONFIDENCE_LOW_MIN_SAMPLES = 10

METRIC_NAMES = (
    'musical_diversity',
    'exploration_rate',
    'temporal_consistency',
    'mainstream_affinity',
    'emotional_volatility',
)

# Metric formulas
TEMPORAL_VARIANCE_SCALE = 100.0
FOLLOWER_LOG_SCALE = 7.0  # log10(followers + 1) / 7 ~ 1.0 at 10M followers
MAX_REASONABLE_VOLATILITY = 0.4

# Badge rules
BADGE_HIGH_THRESHOLD = 0.8
BADGE_LOW_THRESHOLD = 0.2
COMBO_HIGH_THRESHOLD = 0.7
COMBO_LOW_THRESHOLD = 0.3
VOLUME_BADGE_TRACKS = 100

# Personality rules (percentages)
PERSONALITY_TRIGGER_PCT = 60.0
PERSONALITY_STABLE_PCT = 40.0
PERSONALITY_DEFAULT_SCORE = 50.0

# Copy tiers
COPY_LOW_MAX = 0.34
COPY_MEDIUM_MAX = 0.67

# Progress targets and weights
PROGRESS_TARGETS = {'tracks': 100, 'artists': 50, 'genres': 20, 'confidence': 5}
PROGRESS_WEIGHTS = {'tracks': 0.4, 'artists': 0.2, 'genres': 0.2, 'confidence': 0.2}

# Gamification scoring
POINTS_PER_BADGE = 100
BADGES_PER_LEVEL = 3

# Four-week recap
RECAP_WINDOW_DAYS = 28
NO_BASELINE = '–'

# Daily mood
MOOD_WINDOW_DAYS = 7
MOOD_MIN_SCORE = 30
MOOD_MAX_SCORE = 95

# Listening insights
MIN_INSIGHT_DURATION_MS = 30000
RECENCY_DECAY_DAYS = 10.0
GENRE_PASSPORT_TARGET = 20
GENRE_PASSPORT_TOP_N = 8
NEW_DISCOVERY_SHARE = 0.2
NOSTALGIA_FULL_AGE_YEARS = 40
TEMPO_RANGE_BPM = (50.0, 220.0)
# Eras by weighted median release year (exclusive upper bounds)
MUSIC_ERAS = (
    (1970, 'Vinyl'),
    (1990, 'Analog'),
    (2010, 'Digital'),
)
LATEST_ERA = 'Streaming'
