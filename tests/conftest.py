"""Shared test fixtures for the listening analytics test suite."""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from vynce_analytics.db import Database
from vynce_analytics.models.analysis import AnalysisMetadata, AnalysisPayload, Metric, MetricSet
from vynce_analytics.services.storage import StorageService


# ── Time Freezing ───────────────────────────────────────────────────────

@pytest.fixture
def frozen_now():
    """Fixed 'now' for deterministic windows: 2026-02-15T12:00:00Z (noon UTC on a Sunday)."""
    return datetime(2026, 2, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock usable as both a monotonic and a datetime source."""

    def __init__(self, start: datetime):
        self.now = start

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)

    def monotonic(self) -> float:
        return self.now.timestamp()

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock(frozen_now):
    return FakeClock(frozen_now)


# ── Provider Record Factories ───────────────────────────────────────────

@pytest.fixture
def make_track(frozen_now):
    """Factory for recently-played events in the provider's `{track, played_at}` shape.

    Usage:
        event = make_track(duration_ms=300000, days_ago=7, genres=["rock"])
    """
    counter = itertools.count(1)

    def _factory(**overrides):
        n = next(counter)
        played_at = overrides.pop("played_at", None)
        days_ago = overrides.pop("days_ago", 0)
        hours_ago = overrides.pop("hours_ago", 0)
        if played_at is None:
            played_at = frozen_now - timedelta(days=days_ago, hours=hours_ago)
        if isinstance(played_at, datetime):
            played_at = played_at.isoformat().replace("+00:00", "Z")

        track = {
            "id": overrides.pop("track_id", f"track-{n}"),
            "name": overrides.pop("name", f"Track {n}"),
            "duration_ms": overrides.pop("duration_ms", 180000),
            "artists": [{
                "id": overrides.pop("artist_id", f"artist-{n}"),
                "name": overrides.pop("artist_name", f"Artist {n}"),
            }],
            "album": {
                "name": overrides.pop("album", f"Album {n}"),
                "images": [{"url": f"https://images.example/{n}.jpg"}],
            },
        }
        release_date = overrides.pop("release_date", None)
        if release_date is not None:
            track["album"]["release_date"] = release_date
        track.update(overrides)
        return {"track": track, "played_at": played_at}

    return _factory


@pytest.fixture
def make_artist():
    """Factory for top-artist objects as returned by the provider."""
    counter = itertools.count(1)

    def _factory(**overrides):
        n = next(counter)
        artist = {
            "id": overrides.pop("artist_id", f"top-artist-{n}"),
            "name": overrides.pop("name", f"Top Artist {n}"),
            "genres": overrides.pop("genres", []),
            "popularity": overrides.pop("popularity", 50),
            "followers": {"total": overrides.pop("followers", 1000)},
        }
        artist.update(overrides)
        return artist

    return _factory


# ── Payload Factory ─────────────────────────────────────────────────────

@pytest.fixture
def make_payload(frozen_now):
    """Factory for AnalysisPayload objects with chosen scores.

    Scores are given per metric name; a tuple sets (score, confidence).
    Metrics that are not given are left out of the payload.

    Usage:
        payload = make_payload(musical_diversity=0.85, exploration_rate=(0.4, "low"))
    """

    def _factory(tracks_analyzed=50, artists_analyzed=20, genres_found=10, confidence="high", **scores):
        metrics = {}
        for name, value in scores.items():
            score, level = value if isinstance(value, tuple) else (value, confidence)
            metrics[name] = Metric(score=score, confidence=level, formula="test")
        return AnalysisPayload(
            scores=MetricSet(**metrics),
            metadata=AnalysisMetadata(
                tracks_analyzed=tracks_analyzed,
                artists_analyzed=artists_analyzed,
                genres_found=genres_found,
                generated_at=frozen_now,
            ),
        )

    return _factory


@pytest.fixture
def all_metrics():
    """Helper producing a score for every metric."""

    def _all(score=0.5):
        return {
            "musical_diversity": score,
            "exploration_rate": score,
            "temporal_consistency": score,
            "mainstream_affinity": score,
            "emotional_volatility": score,
        }

    return _all


# ── Persistence ─────────────────────────────────────────────────────────

@pytest.fixture
def database():
    """Isolated in-memory SQLite database per test."""
    database = Database()
    database.init("sqlite://")
    yield database
    database.dispose()


@pytest.fixture
def storage(database):
    session = database.get_session()
    yield StorageService(session)
    session.close()


class MemoryStore:
    """Dict-backed state store recording every save."""

    def __init__(self, initial=None):
        self.data = dict(initial or {})
        self.saves = 0

    def load_state(self, key):
        return self.data.get(key)

    def save_state(self, key, state):
        self.saves += 1
        self.data[key] = state


class BrokenStore:
    """State store whose every operation fails."""

    def load_state(self, key):
        raise RuntimeError("storage unavailable")

    def save_state(self, key, state):
        raise RuntimeError("storage unavailable")


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def broken_store():
    return BrokenStore()
