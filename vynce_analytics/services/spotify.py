"""Spotify API integration service"""
import logging
import time
from typing import Any, Dict, List, Optional, get_args

import requests

from vynce_analytics.config import TimeRange, settings

logger = logging.getLogger(__name__)

# --- Constants for Fetching Control ---
# Spotify caps every list endpoint used here at 50 items
MAX_PAGE_SIZE = 50
# Base delay in seconds for retries on rate limit
RATE_LIMIT_RETRY_BASE_DELAY = 2
# Ceiling for a server-supplied Retry-After
MAX_RETRY_AFTER_SECONDS = 60
REQUEST_TIMEOUT_SECONDS = 15

TIME_RANGES = get_args(TimeRange)


class SpotifyAPI:
    """Narrow fetch interface over the Spotify Web API"""

    def __init__(self, token: str, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        """
        Initialize with Spotify access token
        """
        if not token:
            raise ValueError("Spotify token cannot be empty")
        self.base_url = (base_url or settings.SPOTIFY_API_URL).rstrip('/')
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {token}',
            'Accept': 'application/json'
        })

    @staticmethod
    def _validate_time_range(time_range: str) -> str:
        if time_range not in TIME_RANGES:
            raise ValueError(f"Unsupported time range {time_range!r}, expected one of {', '.join(TIME_RANGES)}")
        return time_range

    def _items(self, response_data: Any, what: str) -> List[Dict]:
        if isinstance(response_data, dict) and isinstance(response_data.get('items'), list):
            return response_data['items']
        logger.warning(f"Unexpected response format for {what}: {response_data}")
        return []

    def get_recently_played(self, limit: int = MAX_PAGE_SIZE, before: Optional[int] = None) -> List[Dict]:
        """
        Get recently played `{track, played_at}` events

        Args:
            limit: Number of events to fetch (max 50)
            before: Unix timestamp in milliseconds for pagination
        """
        params: Dict[str, Any] = {'limit': min(limit, MAX_PAGE_SIZE)}
        if before is not None:
            params['before'] = before
        items = self._items(self._make_request('me/player/recently-played', params), 'recently played')
        logger.info(f"Fetched {len(items)} recently played tracks")
        return items

    def get_top_artists(self, time_range: str = 'medium_term', limit: int = MAX_PAGE_SIZE) -> List[Dict]:
        """Get user's top artists

        Args:
            time_range: short_term (4 weeks), medium_term (6 months), or long_term (years)
            limit: Number of artists to fetch (max 50)
        """
        self._validate_time_range(time_range)
        actual_limit = min(limit, MAX_PAGE_SIZE)
        logger.info(f"Fetching top artists (range: {time_range}, limit: {actual_limit})...")
        response_data = self._make_request('me/top/artists', {'time_range': time_range, 'limit': actual_limit})
        return self._items(response_data, f"top artists ({time_range})")

    def _make_request(self, endpoint: str, params: Optional[Dict[str, Any]] = None, retries: int = 3) -> Dict:
        """Make authenticated request to Spotify API with retries"""
        url = f'{self.base_url}/{endpoint}'
        attempt = 0
        last_exception: Optional[Exception] = None

        while attempt < retries:
            attempt += 1
            try:
                logger.debug(f"Attempt {attempt}/{retries}: Making request to {url}")
                response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
                response.raise_for_status()
                try:
                    json_response = response.json()
                except ValueError:
                    logger.error(f"Failed to decode JSON response from {url}. Status: {response.status_code}")
                    return {}
                return json_response if isinstance(json_response, dict) else {}
            except requests.exceptions.HTTPError as e:
                last_exception = e
                status = e.response.status_code if e.response is not None else None
                logger.warning(f"HTTP Error on attempt {attempt} for {url}: {e}")
                if status == 401:
                    logger.error(f"Spotify token is invalid or expired (401) for {url}. Cannot proceed.")
                    raise
                elif status == 403:
                    logger.error(f"Forbidden access (403) to Spotify endpoint {url}. Check scopes/permissions.")
                    raise
                elif status == 429:
                    default_delay = RATE_LIMIT_RETRY_BASE_DELAY * (2 ** (attempt - 1))
                    try:
                        retry_after = int(e.response.headers.get('Retry-After', default_delay))
                    except (TypeError, ValueError):
                        retry_after = default_delay
                    retry_after = max(1, min(retry_after, MAX_RETRY_AFTER_SECONDS))
                    if attempt >= retries:
                        break
                    logger.warning(f"Rate limit hit (429) for {url}. Retrying after {retry_after} seconds...")
                    time.sleep(retry_after)
                    continue
                elif status is not None and status >= 500:
                    logger.warning(f"Spotify server error ({status}) for {url}. Retrying...")
                else:
                    logger.error(f"Client error ({status}) for {url}. Aborting request.")
                    raise
            except requests.exceptions.RequestException as e:
                last_exception = e
                logger.warning(f"Request Error on attempt {attempt} for {url}: {e}. Retrying...")

            if attempt < retries:
                sleep_time = RATE_LIMIT_RETRY_BASE_DELAY * (1.5 ** (attempt - 1)) + (0.5 * attempt)
                logger.info(f"Waiting {sleep_time:.2f}s before next retry for {url}...")
                time.sleep(sleep_time)

        logger.error(f"Request failed after {retries} attempts for {url}.")
        raise last_exception or requests.exceptions.RetryError(f"Request failed after {retries} attempts for {url}")
