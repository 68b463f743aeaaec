"""Tests for the analytics engine with a stubbed listening provider."""

import pytest
import requests

from vynce_analytics.engine import ANALYSIS_ERROR, RECAP_ERROR, AnalyticsEngine
from vynce_analytics.gamification import GamificationTracker
from vynce_analytics.normalization import normalize_listening_input


class StubProvider:
    def __init__(self, recent, artists, fail=False):
        self.recent = recent
        self.artists = artists
        self.fail = fail
        self.calls = {"recent": 0, "artists": 0}
        self.time_ranges = []

    def get_recently_played(self):
        self.calls["recent"] += 1
        if self.fail:
            raise requests.exceptions.ConnectionError("provider unreachable")
        return self.recent

    def get_top_artists(self, time_range="medium_term"):
        self.calls["artists"] += 1
        self.time_ranges.append(time_range)
        return self.artists


@pytest.fixture
def listening(make_track, make_artist):
    artists = [make_artist(artist_id=f"a{i}", genres=[g]) for i, g in enumerate(["rock", "jazz", "pop", "folk"])]
    recent = [make_track(artist_id=f"a{i % 4}", popularity=40, days_ago=i % 5) for i in range(45)]
    return recent, artists


@pytest.fixture
def provider(listening):
    return StubProvider(*listening)


@pytest.fixture
def engine(memory_store, clock, provider):
    tracker = GamificationTracker(memory_store, clock=clock)
    return AnalyticsEngine(tracker, provider=provider, clock=clock.monotonic, now_fn=clock)


class TestRefresh:
    def test_refresh_builds_full_snapshot(self, engine, provider, clock):
        snapshot = engine.refresh()
        assert snapshot.errors == []
        assert snapshot.computed_at == clock.now
        assert snapshot.payload.metadata.tracks_analyzed == 45
        assert snapshot.payload.metadata.artists_analyzed == 4
        assert set(snapshot.metric_summaries) == set(snapshot.payload.scores.present())
        assert snapshot.recap.plays_this == 45
        assert len(snapshot.mood.mood_data) == 7
        assert len(snapshot.badges) == 15
        assert provider.time_ranges == ["medium_term"]

    def test_new_achievements_are_reported(self, engine):
        snapshot = engine.refresh()
        assert {a.badge_id for a in snapshot.new_achievements} == set(engine.tracker.unlocked_badge_ids)
        assert snapshot.total_score == 100 * len(snapshot.new_achievements)

    def test_repeat_inside_cooldown_returns_previous_snapshot(self, engine, provider, clock):
        first = engine.refresh()
        clock.advance(seconds=1)
        assert engine.refresh() is first
        assert provider.calls["recent"] == 1

    def test_after_cooldown_cached_data_is_reused(self, engine, provider, clock):
        first = engine.refresh()
        clock.advance(seconds=5)
        second = engine.refresh()
        assert second is not first
        assert provider.calls == {"recent": 1, "artists": 1}

    def test_cache_expires(self, engine, provider, clock):
        engine.refresh()
        clock.advance(seconds=301)
        engine.refresh()
        assert provider.calls == {"recent": 2, "artists": 2}

    def test_force_bypasses_cooldown_and_cache(self, engine, provider):
        engine.refresh()
        engine.refresh(force=True)
        assert provider.calls["recent"] == 2

    def test_provider_failure_is_surfaced_not_raised(self, memory_store, clock, listening):
        tracker = GamificationTracker(memory_store, clock=clock)
        engine = AnalyticsEngine(tracker, provider=StubProvider(*listening, fail=True),
                                 clock=clock.monotonic, now_fn=clock)
        snapshot = engine.refresh()
        assert RECAP_ERROR in snapshot.errors
        assert ANALYSIS_ERROR in snapshot.errors
        assert snapshot.payload is None
        assert snapshot.recap is None
        assert snapshot.personality.confidence == "insufficient"
        assert tracker.unlocked_badge_count == 0

    def test_missing_provider(self, memory_store, clock):
        engine = AnalyticsEngine(GamificationTracker(memory_store, clock=clock), clock=clock.monotonic)
        with pytest.raises(RuntimeError):
            engine.refresh()


class TestAnalyze:
    def test_analyze_exported_data(self, memory_store, clock, listening):
        engine = AnalyticsEngine(GamificationTracker(memory_store, clock=clock), clock=clock.monotonic, now_fn=clock)
        snapshot = engine.analyze(*listening)
        assert snapshot.payload.metadata.tracks_analyzed == 45
        assert snapshot.personality.dominant_type

    def test_analyze_empty_input(self, memory_store, clock):
        engine = AnalyticsEngine(GamificationTracker(memory_store, clock=clock), clock=clock.monotonic, now_fn=clock)
        snapshot = engine.analyze(None, None)
        assert snapshot.payload.metadata.tracks_analyzed == 0
        assert snapshot.recap.minutes_this == 0
        assert snapshot.mood.insights is None

    def test_analyze_listening_input(self, memory_store, clock, listening):
        engine = AnalyticsEngine(GamificationTracker(memory_store, clock=clock), clock=clock.monotonic, now_fn=clock)
        snapshot = engine.analyze(normalize_listening_input(*listening))
        assert snapshot.payload.metadata.tracks_analyzed == 45
        assert snapshot.payload.metadata.artists_analyzed == 4
        assert snapshot.recap.plays_this == 45


class TestInsights:
    def test_snapshot_carries_insights(self, engine):
        insights = engine.refresh().insights
        assert insights.genre_passport.distinct_count == 4
        assert sum(insights.night_owl.histogram) == 45
        assert insights.radar.is_default is False
        assert insights.radar.track_count == 45

    def test_insights_reused_while_provider_data_is_fresh(self, engine, clock):
        first = engine.refresh()
        clock.advance(seconds=5)
        second = engine.refresh()
        assert second is not first
        assert second.insights is first.insights

    def test_insights_rebuilt_when_provider_data_expires(self, engine, clock):
        first = engine.refresh()
        clock.advance(seconds=301)
        assert engine.refresh().insights is not first.insights

    def test_force_rebuilds_insights(self, engine):
        first = engine.refresh()
        assert engine.refresh(force=True).insights is not first.insights

    def test_failed_refresh_keeps_previous_insights(self, engine, provider):
        first = engine.refresh()
        provider.fail = True
        failed = engine.refresh(force=True)
        assert failed.errors
        assert failed.insights is first.insights

    def test_analyze_includes_insights(self, memory_store, clock, listening):
        engine = AnalyticsEngine(GamificationTracker(memory_store, clock=clock), clock=clock.monotonic, now_fn=clock)
        assert engine.analyze(*listening).insights.genre_passport.distinct_count == 4
        assert engine.analyze(None, None, force=True).insights.radar.is_default is True


class TestWellnessRequest:
    def test_none_before_first_computation(self, engine):
        assert engine.wellness_request() is None

    def test_body_from_latest_snapshot(self, engine):
        snapshot = engine.refresh()
        body = engine.wellness_request()
        assert body["personalityType"] == snapshot.personality.dominant_type
        assert len(body["moodData"]) == 7
        assert body["topGenres"] == ["rock", "jazz", "pop"]
        assert [a["id"] for a in body["topArtists"]] == ["a0", "a1", "a2"]
        assert len(body["recentTracks"]) == 2
