from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from models import Movie, decode_page
from settings import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, CatalogSettings

logger = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], None]], None]
MoviesCallback = Callable[[List[Movie]], None]


def _call_inline(fn: Callable[[], None]) -> None:
    fn()


class TMDBService:
    """Genre discovery and title search against the TMDB v3 API.

    Both queries run on the executor and return a future that always resolves
    to a list: transport and decode failures come back as ``[]``. The optional
    ``on_complete`` callback is handed to ``dispatch`` so a UI can bounce it
    onto its own thread (``lambda fn: root.after(0, fn)`` for Tk).
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        executor: Optional[Executor] = None,
        dispatch: Optional[Dispatch] = None,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
        max_workers: int = 8,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            }
        )
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=max_workers)
        self.dispatch = dispatch or _call_inline
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: CatalogSettings, **kwargs: Any) -> "TMDBService":
        return cls(
            access_token=settings.access_token,
            base_url=settings.base_url,
            timeout=settings.timeout,
            max_workers=settings.max_workers,
            **kwargs,
        )

    def _request_json(self, path: str, **params: Any) -> Dict[str, Any]:
        response = self.session.get(f"{self.base_url}/{path.lstrip('/')}", params=params, timeout=self._timeout)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Unexpected API response format")
        return payload

    def _fetch_movies(self, path: str, params: Dict[str, Any], on_complete: Optional[MoviesCallback]) -> List[Movie]:
        try:
            movies = decode_page(self._request_json(path, **params))
        except (requests.RequestException, ValueError) as exc:
            logger.warning("TMDB request %s failed: %s", path, exc)
            movies = []
        except Exception:
            logger.exception("Unexpected error while querying %s", path)
            movies = []
        self._deliver(on_complete, movies)
        return movies

    def _deliver(self, on_complete: Optional[MoviesCallback], movies: List[Movie]) -> None:
        if on_complete is None:
            return
        try:
            self.dispatch(lambda: on_complete(movies))
        except Exception:
            logger.exception("Could not dispatch completion callback")

    def _submit(self, path: str, params: Dict[str, Any], on_complete: Optional[MoviesCallback]) -> "Future[List[Movie]]":
        return self.executor.submit(self._fetch_movies, path, params, on_complete)

    def discover_by_genre(self, genre_id: int, on_complete: Optional[MoviesCallback] = None) -> "Future[List[Movie]]":
        params = {"with_genres": str(int(genre_id)), "sort_by": "popularity.desc"}
        return self._submit("discover/movie", params, on_complete)

    def search(
        self,
        query: str,
        release_year: Optional[int] = None,
        min_rating: float = 0.0,
        on_complete: Optional[MoviesCallback] = None,
    ) -> "Future[List[Movie]]":
        """Search titles. A blank query is answered with ``[]`` without a request."""
        query = query.strip()
        if not query:
            done: "Future[List[Movie]]" = Future()
            self._deliver(on_complete, [])
            done.set_result([])
            return done

        min_rating = max(0.0, min(10.0, float(min_rating)))
        params: Dict[str, Any] = {
            "query": query,
            "vote_average.gte": str(min_rating),
            "include_adult": "false",
            "sort_by": "popularity.desc",
        }
        if release_year is not None:
            params["primary_release_year"] = str(int(release_year))
        return self._submit("search/movie", params, on_complete)

    @lru_cache(maxsize=1024)
    def fetch_poster_bytes(self, poster_url: str) -> bytes:
        if not poster_url:
            return b""
        response = self.session.get(poster_url, timeout=self._timeout)
        response.raise_for_status()
        return response.content

    def close(self) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)
        self.session.close()
