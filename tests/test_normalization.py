"""Tests for provider record normalization and genre mapping."""

from datetime import datetime, timezone

import pytest

from vynce_analytics.genres import genre_valence, genre_valence_proxy, normalize_genre
from vynce_analytics.normalization import (
    index_artists,
    normalize_artist,
    normalize_played_track,
    normalize_tracks,
    parse_played_at,
    resolve_track_genres,
)


class TestParsePlayedAt:
    def test_zulu_suffix(self):
        assert parse_played_at("2026-02-15T12:00:00.123Z") == datetime(2026, 2, 15, 12, 0, 0, 123000, tzinfo=timezone.utc)

    def test_naive_is_utc(self):
        assert parse_played_at("2026-02-15T12:00:00").tzinfo is not None

    def test_epoch_milliseconds(self):
        assert parse_played_at(0) is None
        assert parse_played_at(1_000) == datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday", [], object()])
    def test_unparseable(self, value):
        assert parse_played_at(value) is None


class TestNormalizeArtist:
    def test_follower_object(self, make_artist):
        artist = normalize_artist(make_artist(followers=1234, genres=["rock", " ", 7]))
        assert artist.followers == 1234
        assert artist.genres == ["rock"]

    def test_plain_follower_count(self):
        assert normalize_artist({"id": "x", "name": "X", "followers": "42"}).followers == 42

    def test_name_only(self):
        artist = normalize_artist({"name": "Solo"})
        assert artist.artist_id == "Solo"

    @pytest.mark.parametrize("value", [None, 3, "artist", {}, {"genres": ["rock"]}])
    def test_rejected(self, value):
        assert normalize_artist(value) is None


class TestNormalizePlayedTrack:
    def test_recently_played_shape(self, make_track, frozen_now):
        track = normalize_played_track(make_track(track_id="t1", artist_id="a1", artist_name="Band", album="Blue"))
        assert track.track_id == "t1"
        assert track.artist_ids == ["a1"]
        assert track.primary_artist_name == "Band"
        assert track.album_name == "Blue"
        assert track.album_image.startswith("https://")
        assert track.played_at == frozen_now

    def test_flat_track_shape(self):
        track = normalize_played_track({
            "id": "t2",
            "name": "Song",
            "artist": "Somebody",
            "album": "Record",
            "duration_ms": "200000",
            "played_at": "2026-02-15T10:00:00Z",
        })
        assert track.artist_names == ["Somebody"]
        assert track.album_name == "Record"
        assert track.duration_ms == 200000

    def test_bad_duration_defaults_to_zero(self, make_track):
        assert normalize_played_track(make_track(duration_ms="long")).duration_ms == 0
        assert normalize_played_track(make_track(duration_ms=-5)).duration_ms == 0

    def test_artist_key_joins_all_credits(self):
        track = normalize_played_track({"id": "t", "artists": [{"id": "a"}, {"id": "b"}]})
        assert track.artist_key == "a,b"

    def test_normalize_tracks_skips_malformed(self, make_track):
        assert len(normalize_tracks([make_track(), None, {"track": "x"}, make_track()])) == 2

    @pytest.mark.parametrize("release_date,year", [
        ("1971-11-08", 1971),
        ("1984-06", 1984),
        ("2003", 2003),
        (1999, 1999),
        ("1900-01-01", None),
        ("unknown", None),
    ])
    def test_release_year_from_album(self, make_track, release_date, year):
        assert normalize_played_track(make_track(release_date=release_date)).release_year == year

    def test_missing_release_date(self, make_track):
        assert normalize_played_track(make_track()).release_year is None

    def test_explicit_flag(self, make_track):
        assert normalize_played_track(make_track(explicit=True)).explicit is True
        assert normalize_played_track(make_track(explicit="yes")).explicit is False
        assert normalize_played_track(make_track()).explicit is False


class TestGenres:
    def test_resolution_prefers_track_tags(self, make_track, make_artist):
        artists = index_artists([normalize_artist(make_artist(artist_id="a", genres=["jazz"]))])
        tagged = normalize_played_track(make_track(artist_id="a", genres=["rock"]))
        untagged = normalize_played_track(make_track(artist_id="a"))
        assert resolve_track_genres(tagged, artists) == ["rock"]
        assert resolve_track_genres(untagged, artists) == ["jazz"]

    @pytest.mark.parametrize("genre,family", [
        ("dance pop", "dance_pop"),
        ("deep house", "electronic_dance"),
        ("uk drill", "hip_hop_rap"),
        ("pop rock", "rock_metal"),
        ("k-pop", "pop"),
        ("midwest emo", "emo"),
        ("screamo", "screamo"),
        ("neo soul", "jazz_blues"),
        ("gregorian chant", None),
    ])
    def test_genre_families(self, genre, family):
        assert normalize_genre(genre) == family

    def test_valence_proxy(self, make_track):
        assert genre_valence("disco") == 0.8
        assert genre_valence("polka-adjacent noise") is None
        assert genre_valence_proxy(normalize_played_track(make_track(genres=["emo"])), {}) == 0.25
        assert genre_valence_proxy(normalize_played_track(make_track()), {}) is None
