from __future__ import annotations

import logging
from typing import Dict, List, NamedTuple, Optional

from models import Movie
from tmdb_service import TMDBService

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
LOADED = "loaded"
EMPTY = "empty"


class MoodDetails(NamedTuple):
    emoji: str
    description: str
    tagline: str


MOOD_GENRES: Dict[str, int] = {
    "Happy": 35,
    "Sad": 18,
    "Excited": 28,
    "Romantic": 10749,
}

MOOD_DETAILS: Dict[str, MoodDetails] = {
    "Happy": MoodDetails("😊", "Feel-good comedies & uplifting stories", "Comedy • Family • Feel-Good"),
    "Sad": MoodDetails("😢", "Emotional dramas & tearjerkers", "Drama • Emotional • Tearjerker"),
    "Excited": MoodDetails("🤩", "Action-packed thrillers & blockbusters", "Action • Thriller • Adventure"),
    "Romantic": MoodDetails("💕", "Romance & heartwarming love stories", "Romance • Love Stories • Date Night"),
}

DEFAULT_MOOD = "Happy"


def genre_for_mood(mood: str) -> int:
    try:
        return MOOD_GENRES[mood]
    except KeyError:
        raise KeyError(f"Unknown mood: {mood!r}") from None


def parse_release_year(text: str) -> Optional[int]:
    text = (text or "").strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


class _Feed:
    """Result list that only accepts the answer to its most recent request.

    Every request bumps ``generation``; a completion carrying an older
    generation is dropped, so a slow early response cannot overwrite a
    faster later one.
    """

    def __init__(self, service: TMDBService) -> None:
        self.service = service
        self.movies: List[Movie] = []
        self.state = IDLE
        self.generation = 0

    @property
    def featured(self) -> Optional[Movie]:
        return self.movies[0] if self.movies else None

    @property
    def is_loading(self) -> bool:
        return self.state == LOADING

    def _begin(self) -> int:
        self.generation += 1
        self.state = LOADING
        self.movies = []
        return self.generation

    def _apply(self, generation: int, movies: List[Movie]) -> None:
        if generation != self.generation:
            logger.debug("Dropping stale results (generation %d, current %d)", generation, self.generation)
            return
        self.movies = list(movies)
        self.state = LOADED if self.movies else EMPTY


class MoodFeed(_Feed):
    def __init__(self, service: TMDBService, mood: Optional[str] = None) -> None:
        super().__init__(service)
        self.mood = mood or DEFAULT_MOOD

    def select(self, mood: str) -> None:
        genre_id = genre_for_mood(mood)
        self.mood = mood
        generation = self._begin()
        self.service.discover_by_genre(genre_id, on_complete=lambda movies: self._apply(generation, movies))

    def refresh(self) -> None:
        self.select(self.mood)


class SearchFeed(_Feed):
    def __init__(self, service: TMDBService) -> None:
        super().__init__(service)
        self.query = ""

    def submit(self, query: str, release_year_text: str = "", min_rating: float = 0.0) -> bool:
        """Start a search. Blank queries are refused and return False."""
        if not query.strip():
            return False
        self.query = query
        generation = self._begin()
        self.service.search(
            query,
            release_year=parse_release_year(release_year_text),
            min_rating=min_rating,
            on_complete=lambda movies: self._apply(generation, movies),
        )
        return True

    def clear(self) -> None:
        self.generation += 1
        self.query = ""
        self.movies = []
        self.state = IDLE
