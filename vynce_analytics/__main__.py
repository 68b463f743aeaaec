"""Entry point for listening analytics generation"""
import json
import logging
import os
import sys
import traceback
from typing import Any, Dict, List, Optional, Tuple

import requests

from vynce_analytics.config import settings
from vynce_analytics.db import db
from vynce_analytics.engine import AnalyticsEngine
from vynce_analytics.gamification import GamificationTracker
from vynce_analytics.services.spotify import SpotifyAPI
from vynce_analytics.services.storage import StorageService
from vynce_analytics.services.wellness import WellnessClient
from vynce_analytics.utils.json_encoder import json_dumps

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def load_export(input_dir: str) -> Optional[Tuple[List[Any], List[Any]]]:
    """
    Read the first JSON export in `input_dir`.

    The export holds `recent_tracks` (or `recentTracks`) and `top_artists`
    (or `topArtists`); either may be missing.
    """
    if not os.path.isdir(input_dir):
        return None
    for name in sorted(os.listdir(input_dir)):
        if not name.endswith('.json'):
            continue
        path = os.path.join(input_dir, name)
        with open(path, 'r', encoding='utf-8') as f:
            data: Dict[str, Any] = json.load(f)
        logger.info(f"Loaded listening export from {path}")
        recent = data.get('recent_tracks', data.get('recentTracks')) or []
        artists = data.get('top_artists', data.get('topArtists')) or []
        return recent, artists
    return None


def run() -> None:
    """Compute analytics for the exported or fetched listening history."""
    try:
        db.init()

        logger.info("Using configuration:")
        safe_config = settings.model_dump(exclude={'SPOTIFY_TOKEN', 'DATABASE_URL'})
        logger.info(json.dumps(safe_config, indent=2))

        with db.session() as session:
            tracker = GamificationTracker(StorageService(session))

            exported = load_export(settings.INPUT_DIR)
            if exported is not None:
                engine = AnalyticsEngine(tracker)
                snapshot = engine.analyze(*exported)
            elif settings.SPOTIFY_TOKEN:
                engine = AnalyticsEngine(tracker, provider=SpotifyAPI(settings.SPOTIFY_TOKEN))
                snapshot = engine.refresh()
            else:
                raise FileNotFoundError(f"No input files found in {settings.INPUT_DIR} and no SPOTIFY_TOKEN set")

            result: Dict[str, Any] = snapshot.model_dump(mode='json', by_alias=True)

            body = engine.wellness_request()
            if body is not None and settings.WELLNESS_API_URL:
                try:
                    result['wellness'] = WellnessClient().fetch_recommendations(body)
                except requests.exceptions.RequestException as e:
                    logger.error(f"Failed to fetch wellness recommendations: {e}")
                    result['errors'].append("Failed to load wellness playlists")

        os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
        output_path = os.path.join(settings.OUTPUT_DIR, "results.json")
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(json_dumps(result, indent=2))

        logger.info(
            f"Analytics complete: {tracker.unlocked_badge_count} badges unlocked, level {snapshot.level}, "
            f"personality {snapshot.personality.dominant_type}"
        )

    except Exception as e:
        logger.error(f"Error during analytics generation: {e}")
        traceback.print_exc()
        sys.exit(1)
    finally:
        db.dispose()

if __name__ == "__main__":
    run()
