from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Iterator, List, Optional, Protocol, Tuple

from models import Movie

logger = logging.getLogger(__name__)

WATCHLIST_KEY = "Watchlist"
EMPTY_WATCHLIST_MESSAGE = "My movie watchlist is currently empty. Time to add some great movies! 🎬"
SHARE_SIGN_OFF = "Shared from my movie app! 🍿"


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


def _format_rating(rating: float) -> str:
    return f"{rating:.1f}"


def _format_release_date(raw: str) -> str:
    try:
        parsed = datetime.strptime(raw, "%Y-%m-%d")
    except ValueError:
        return raw
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def encode_movies(movies: List[Movie]) -> str:
    return json.dumps([movie.to_dict() for movie in movies], ensure_ascii=False)


def decode_movies(blob: str) -> List[Movie]:
    """Strict decode of a stored watchlist: any bad record fails the whole blob."""
    try:
        payload = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Stored watchlist is not JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise ValueError("Stored watchlist must be a JSON array")

    movies: List[Movie] = []
    seen = set()
    for item in payload:
        movie = Movie.from_dict(item)
        if movie.id in seen:
            continue
        seen.add(movie.id)
        movies.append(movie)
    return movies


class WatchlistStore:
    """Ordered, de-duplicated list of saved movies, written back on every change.

    Not thread-safe; call it from the UI thread only.
    """

    def __init__(self, backend: BlobStore, key: str = WATCHLIST_KEY) -> None:
        self.backend = backend
        self.key = key
        self._movies: List[Movie] = self._load()

    def _load(self) -> List[Movie]:
        blob = self.backend.get(self.key)
        if blob is None:
            return []
        try:
            return decode_movies(blob)
        except ValueError as exc:
            logger.warning("Discarding unreadable watchlist under %r: %s", self.key, exc)
            return []

    def _save(self) -> None:
        try:
            self.backend.set(self.key, encode_movies(self._movies))
        except OSError:
            logger.exception("Failed to persist watchlist")
            raise
        logger.debug("Persisted %d watchlist entries", len(self._movies))

    @property
    def movies(self) -> Tuple[Movie, ...]:
        return tuple(self._movies)

    def __len__(self) -> int:
        return len(self._movies)

    def __iter__(self) -> Iterator[Movie]:
        return iter(tuple(self._movies))

    def __contains__(self, movie: object) -> bool:
        return isinstance(movie, Movie) and self.contains(movie)

    def contains(self, movie: Movie) -> bool:
        return any(entry.id == movie.id for entry in self._movies)

    def add(self, movie: Movie) -> None:
        if not self.contains(movie):
            self._movies.append(movie)
        self._save()

    def remove(self, movie: Movie) -> None:
        self._movies = [entry for entry in self._movies if entry.id != movie.id]
        self._save()

    def toggle(self, movie: Movie) -> bool:
        if self.contains(movie):
            self.remove(movie)
            return False
        self.add(movie)
        return True

    def summary_text(self) -> str:
        if not self._movies:
            return EMPTY_WATCHLIST_MESSAGE

        count = len(self._movies)
        lines = [f"🎬 My Movie Watchlist ({count} {'movie' if count == 1 else 'movies'}):", ""]
        for index, movie in enumerate(self._movies, start=1):
            line = f"{index}. {movie.title}"
            if movie.has_rating:
                line += f" ⭐ {_format_rating(movie.vote_average)}"
            lines.append(line)
        lines.extend(["", SHARE_SIGN_OFF])
        return "\n".join(lines)

    def top_rated_summary_text(self, limit: int = 5) -> str:
        rated = [movie for movie in self._movies if movie.has_rating]
        top = sorted(rated, key=lambda m: m.vote_average, reverse=True)[: max(0, limit)]
        if not top:
            return f"Check out my movie watchlist! I have {len(self._movies)} movies ready to watch. 🎬🍿"

        text = "🏆 Top movies from my watchlist:\n\n"
        for index, movie in enumerate(top, start=1):
            text += f"{index}. {movie.title} ⭐ {_format_rating(movie.vote_average)}\n"
        if len(self._movies) > limit:
            text += f"\n...and {len(self._movies) - limit} more movies! 🎬"
        # sign-off always follows a blank line; two when no "more" note precedes it
        return text + f"\n\n{SHARE_SIGN_OFF}"

    def share_text(self, movie: Movie) -> str:
        text = f"🎬 {movie.title}\n\n"
        if movie.overview:
            text += f"{movie.overview}\n\n"
        if movie.release_date:
            text += f"Release Date: {_format_release_date(movie.release_date)}\n"
        if movie.has_rating:
            text += f"Rating: ⭐ {_format_rating(movie.vote_average)}/10\n"
        return text + "\nAdded to my movie watchlist! 🍿"
