"""Request body construction for the downstream wellness recommendation service"""
import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from vynce_analytics.config import settings
from vynce_analytics.models.mood import DailyMoodData
from vynce_analytics.normalization import normalize_artists, normalize_tracks
from vynce_analytics.utils.json_encoder import json_dumps

logger = logging.getLogger(__name__)

MAX_TOP_GENRES = 3
MAX_TOP_ARTISTS = 3
MAX_RECENT_TRACKS = 2
REQUEST_TIMEOUT_SECONDS = 30


def build_wellness_request(mood_days: Optional[Iterable[DailyMoodData]], personality_type: str,
                           top_artists: Optional[Iterable[Any]] = None,
                           recent_tracks: Optional[Iterable[Any]] = None) -> Dict[str, Any]:
    """
    Assemble the recommendation request body from already computed data.

    Args:
        mood_days: daily mood entries, reduced to date and score
        personality_type: dominant personality label
        top_artists: raw or normalized top artists; genres are collected from all of them
        recent_tracks: raw or normalized recent plays

    Returns:
        Dict with moodData, personalityType, topGenres, topArtists and recentTracks
    """
    artists = normalize_artists(top_artists)
    tracks = normalize_tracks(recent_tracks)

    genres: List[str] = []
    for artist in artists:
        for genre in artist.genres:
            if genre not in genres:
                genres.append(genre)

    return {
        'moodData': [{'date': day.date, 'moodScore': day.mood_score} for day in (mood_days or [])],
        'personalityType': personality_type,
        'topGenres': genres[:MAX_TOP_GENRES],
        'topArtists': [{'id': a.artist_id, 'name': a.name} for a in artists[:MAX_TOP_ARTISTS]],
        'recentTracks': [{'id': t.track_id, 'name': t.name} for t in tracks[:MAX_RECENT_TRACKS]],
    }


class WellnessClient:
    """Posts request bodies to the recommendation service and returns its JSON untouched"""

    def __init__(self, url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.url = url or settings.WELLNESS_API_URL
        if not self.url:
            raise ValueError("Wellness API URL is not configured")
        self.session = session or requests.Session()

    def fetch_recommendations(self, body: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Requesting wellness recommendations for personality {body.get('personalityType')}")
        response = self.session.post(
            self.url,
            data=json_dumps(body).encode('utf-8'),
            headers={'Content-Type': 'application/json'},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        if not response.ok:
            logger.error(f"Wellness service returned {response.status_code}: {response.text[:200]}")
            response.raise_for_status()
        return response.json()
