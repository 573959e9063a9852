from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from concurrent.futures import Executor, Future
from io import BytesIO
from typing import Callable, Optional, Tuple

from PIL import Image

from models import Movie
from tmdb_service import Dispatch, TMDBService

logger = logging.getLogger(__name__)

PosterKey = Tuple[str, Tuple[int, int]]


class PosterCache:
    """LRU of thumbnails, shared between the UI thread and loader workers."""

    def __init__(self, max_items: int = 256) -> None:
        self._items: "OrderedDict[PosterKey, Image.Image]" = OrderedDict()
        self._max_items = max_items
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get(self, key: PosterKey) -> Optional[Image.Image]:
        with self._lock:
            image = self._items.get(key)
            if image is not None:
                self._items.move_to_end(key)
            return image

    def put(self, key: PosterKey, image: Image.Image) -> None:
        with self._lock:
            self._items[key] = image
            self._items.move_to_end(key)
            while len(self._items) > self._max_items:
                self._items.popitem(last=False)


class PosterLoader:
    """Fetches poster art off the UI thread and hands back RGB thumbnails."""

    def __init__(
        self,
        service: TMDBService,
        executor: Optional[Executor] = None,
        dispatch: Optional[Dispatch] = None,
        size: Tuple[int, int] = (140, 200),
        cache: Optional[PosterCache] = None,
    ) -> None:
        self.service = service
        self.executor = executor or service.executor
        self.dispatch = dispatch or service.dispatch
        self.size = size
        self.cache = cache if cache is not None else PosterCache()

    def _deliver(self, on_ready: Optional[Callable[[Optional[Image.Image]], None]], image: Optional[Image.Image]) -> None:
        if on_ready is not None:
            self.dispatch(lambda: on_ready(image))

    def _resolved(self, image: Optional[Image.Image], on_ready) -> "Future[Optional[Image.Image]]":
        future: "Future[Optional[Image.Image]]" = Future()
        self._deliver(on_ready, image)
        future.set_result(image)
        return future

    def load(self, movie: Movie, on_ready: Optional[Callable[[Optional[Image.Image]], None]] = None) -> "Future[Optional[Image.Image]]":
        if not movie.poster_path:
            return self._resolved(None, on_ready)

        key = (movie.poster_path, self.size)
        cached = self.cache.get(key)
        if cached is not None:
            return self._resolved(cached, on_ready)

        def task() -> Optional[Image.Image]:
            try:
                raw = self.service.fetch_poster_bytes(movie.poster_url)
                image = Image.open(BytesIO(raw)).convert("RGB")
                image.thumbnail(self.size, Image.Resampling.LANCZOS)
                self.cache.put(key, image)
            except Exception as exc:
                logger.warning("Poster for movie %s unavailable: %s", movie.id, exc)
                image = None
            self._deliver(on_ready, image)
            return image

        return self.executor.submit(task)
