from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"


def _optional_text(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be text")
    return value


@dataclass(frozen=True)
class Movie:
    """A single catalog item. Two movies with the same id compare equal."""

    id: int
    title: str = field(compare=False)
    overview: str = field(default="", compare=False)
    poster_path: Optional[str] = field(default=None, compare=False)
    vote_average: Optional[float] = field(default=None, compare=False)
    release_date: Optional[str] = field(default=None, compare=False)
    original_language: Optional[str] = field(default=None, compare=False)

    @property
    def poster_url(self) -> Optional[str]:
        if self.poster_path is None:
            return None
        return f"{POSTER_BASE_URL}{self.poster_path}"

    @property
    def has_rating(self) -> bool:
        return self.vote_average is not None and self.vote_average > 0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Movie":
        if not isinstance(payload, dict):
            raise ValueError("Movie record must be a mapping")

        movie_id = payload.get("id")
        if isinstance(movie_id, bool) or not isinstance(movie_id, int):
            raise ValueError("Movie id is required")

        title = payload.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("Movie title is required")

        overview = payload.get("overview")
        if not isinstance(overview, str):
            raise ValueError("Movie overview is required")

        vote_raw = payload.get("vote_average")
        vote_average = None
        if vote_raw is not None:
            if isinstance(vote_raw, bool) or not isinstance(vote_raw, (int, float)):
                raise ValueError("vote_average must be numeric")
            vote_average = float(vote_raw)

        return cls(
            id=movie_id,
            title=title,
            overview=overview,
            poster_path=_optional_text(payload, "poster_path"),
            vote_average=vote_average,
            release_date=_optional_text(payload, "release_date"),
            original_language=_optional_text(payload, "original_language"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "overview": self.overview,
            "poster_path": self.poster_path,
            "vote_average": self.vote_average,
            "release_date": self.release_date,
            "original_language": self.original_language,
        }


def decode_page(payload: Any) -> List[Movie]:
    """Decode a ``{"results": [...]}`` envelope.

    A malformed envelope raises ``ValueError``. Records are decoded one by
    one and a bad record is skipped, so it never takes the page down with it.
    """
    if not isinstance(payload, dict):
        raise ValueError("Unexpected API response format")
    results = payload.get("results")
    if not isinstance(results, list):
        raise ValueError("Response has no results list")

    movies: List[Movie] = []
    for index, item in enumerate(results):
        try:
            movies.append(Movie.from_dict(item))
        except ValueError as exc:
            logger.warning("Skipping malformed movie record #%d: %s", index, exc)
    return movies
