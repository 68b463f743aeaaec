"""Genre normalization and the genre-based valence proxy"""
from typing import Dict, List, Optional, Tuple

from vynce_analytics.models.listening import Artist, PlayedTrack
from vynce_analytics.normalization import resolve_track_genres

# Approximate valence (musical positiveness, 0-1) per genre family
GENRE_VALENCE: Dict[str, float] = {
    'electronic_dance': 0.7,
    'hip_hop_rap': 0.5,
    'rock_metal': 0.4,
    'pop': 0.7,
    'dance_pop': 0.75,
    'indie_pop': 0.65,
    'electropop': 0.7,
    'disco': 0.8,
    'ambient_chill': 0.5,
    'jazz_blues': 0.4,
    'classical': 0.55,
    'country_folk': 0.5,
    'reggae_world': 0.65,
    'emo': 0.25,
    'screamo': 0.2,
}

# Energy (0-1) and tempo (BPM) are only known for the broad families
GENRE_ENERGY: Dict[str, float] = {
    'electronic_dance': 0.8,
    'hip_hop_rap': 0.6,
    'rock_metal': 0.8,
    'pop': 0.6,
    'ambient_chill': 0.2,
    'jazz_blues': 0.4,
}

GENRE_TEMPO: Dict[str, float] = {
    'electronic_dance': 125,
    'hip_hop_rap': 90,
    'rock_metal': 130,
    'pop': 120,
    'ambient_chill': 80,
    'jazz_blues': 110,
}

DEFAULT_VALENCE = 0.6
DEFAULT_ENERGY = 0.6
DEFAULT_TEMPO = 120.0

# Keyword families, checked in order; the first family with a matching keyword wins
_FAMILY_KEYWORDS = (
    ('screamo', ('screamo',)),
    ('emo', ('emo',)),
    ('dance_pop', ('dance pop', 'dance-pop')),
    ('indie_pop', ('indie pop', 'indie-pop')),
    ('electropop', ('electropop', 'electro pop', 'electro-pop')),
    ('electronic_dance', ('electronic', 'edm', 'house', 'techno', 'trance', 'dubstep',
                          'drum and bass', 'breakbeat', 'dance')),
    ('hip_hop_rap', ('hip hop', 'hip-hop', 'rap', 'trap', 'drill', 'grime')),
    ('rock_metal', ('rock', 'metal', 'punk', 'grunge', 'alternative', 'shoegaze', 'hardcore')),
    ('pop', ('pop',)),
    ('disco', ('disco', 'funk')),
    ('ambient_chill', ('ambient', 'chill', 'lo-fi', 'lofi', 'downtempo', 'drone')),
    ('jazz_blues', ('jazz', 'blues', 'soul', 'r&b', 'rnb')),
    ('classical', ('classical', 'orchestral', 'chamber', 'baroque', 'opera')),
    ('country_folk', ('country', 'folk', 'acoustic', 'americana', 'bluegrass')),
    ('reggae_world', ('reggae', 'world', 'latin', 'salsa', 'bossa', 'afrobeat', 'reggaeton')),
)


def normalize_genre(genre: str) -> Optional[str]:
    """
    Map a free-form genre tag onto a genre family.

    Returns None when no family matches so callers can tell an unmapped tag
    apart from a genuinely neutral one.
    """
    if not isinstance(genre, str):
        return None
    text = genre.strip().lower()
    if not text:
        return None
    if text.startswith('emo') or ' emo' in text:
        return 'emo'
    for family, keywords in _FAMILY_KEYWORDS:
        if family == 'emo':
            continue
        if any(keyword in text for keyword in keywords):
            return family
    return None


def genre_valence(genre: str) -> Optional[float]:
    family = normalize_genre(genre)
    return GENRE_VALENCE.get(family) if family else None


def genre_features(genre: Optional[str]) -> Tuple[float, float, float]:
    """(valence, energy, tempo) for a genre tag, with neutral-pop defaults for anything unmapped"""
    family = normalize_genre(genre) if genre else None
    if family is None:
        return DEFAULT_VALENCE, DEFAULT_ENERGY, DEFAULT_TEMPO
    return (
        GENRE_VALENCE.get(family, DEFAULT_VALENCE),
        GENRE_ENERGY.get(family, DEFAULT_ENERGY),
        GENRE_TEMPO.get(family, DEFAULT_TEMPO),
    )


def genre_valence_proxy(track: PlayedTrack, artists_by_key: Dict[str, Artist]) -> Optional[float]:
    """
    Default per-track affect signal: the valence of the track's primary genre.

    Any callable with this signature can be handed to the metric calculator
    instead, e.g. one backed by audio features.
    """
    genres: List[str] = resolve_track_genres(track, artists_by_key)
    if not genres:
        return None
    return genre_valence(genres[0])
