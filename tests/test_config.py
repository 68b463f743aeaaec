"""Tests for environment settings validation."""

import pytest
from pydantic import ValidationError

from vynce_analytics.config import Settings


class TestTimeRange:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("TIME_RANGE", raising=False)
        assert Settings().TIME_RANGE == "medium_term"

    @pytest.mark.parametrize("value", ["short_term", "medium_term", "long_term"])
    def test_accepts_provider_ranges(self, value):
        assert Settings(TIME_RANGE=value).TIME_RANGE == value

    def test_rejects_unknown_range(self):
        with pytest.raises(ValidationError):
            Settings(TIME_RANGE="all_time")

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("TIME_RANGE", "long_term")
        assert Settings().TIME_RANGE == "long_term"

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv("TIME_RANGE", "forever")
        with pytest.raises(ValidationError):
            Settings()
