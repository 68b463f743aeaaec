"""Tests for the wellness request body and the pass-through client."""

import json

import pytest
import requests

from vynce_analytics.models.mood import DailyMoodData
from vynce_analytics.services.wellness import WellnessClient, build_wellness_request


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload or {}
        self.text = json.dumps(self._payload)

    def json(self):
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.posts = []

    def post(self, url, data=None, headers=None, timeout=None):
        self.posts.append({"url": url, "data": data, "headers": headers})
        return self.response


class TestBuildWellnessRequest:
    def test_body_shape_and_limits(self, make_artist, make_track):
        artists = [
            make_artist(artist_id="a1", name="One", genres=["indie", "rock"]),
            make_artist(artist_id="a2", name="Two", genres=["rock", "folk"]),
            make_artist(artist_id="a3", name="Three", genres=["jazz"]),
            make_artist(artist_id="a4", name="Four"),
        ]
        tracks = [make_track(track_id=f"t{i}", name=f"Song {i}") for i in range(5)]
        mood = [DailyMoodData(date="2026-02-15", day_name="Sun", mood_score=71)]

        body = build_wellness_request(mood, "Explorer", artists, tracks)

        assert body == {
            "moodData": [{"date": "2026-02-15", "moodScore": 71}],
            "personalityType": "Explorer",
            "topGenres": ["indie", "rock", "folk"],
            "topArtists": [{"id": "a1", "name": "One"}, {"id": "a2", "name": "Two"}, {"id": "a3", "name": "Three"}],
            "recentTracks": [{"id": "t0", "name": "Song 0"}, {"id": "t1", "name": "Song 1"}],
        }

    def test_missing_data(self):
        body = build_wellness_request(None, "Balanced Listener")
        assert body["moodData"] == []
        assert body["topGenres"] == []
        assert body["topArtists"] == []
        assert body["recentTracks"] == []


class TestWellnessClient:
    def test_response_is_passed_through(self):
        session = FakeSession(FakeResponse(payload={"playlists": [{"id": "p1"}]}))
        client = WellnessClient("https://wellness.example/api", session=session)

        result = client.fetch_recommendations({"personalityType": "Explorer", "topGenres": ["émo"]})

        assert result == {"playlists": [{"id": "p1"}]}
        sent = session.posts[0]
        assert sent["headers"]["Content-Type"] == "application/json"
        assert json.loads(sent["data"].decode("utf-8"))["topGenres"] == ["émo"]

    def test_error_status_raises(self):
        client = WellnessClient("https://wellness.example/api", session=FakeSession(FakeResponse(502)))
        with pytest.raises(requests.exceptions.HTTPError):
            client.fetch_recommendations({})

    def test_requires_url(self, monkeypatch):
        from vynce_analytics.config import settings
        monkeypatch.setattr(settings, "WELLNESS_API_URL", None)
        with pytest.raises(ValueError):
            WellnessClient()
