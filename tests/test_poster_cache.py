from __future__ import annotations

import threading
from io import BytesIO
from unittest.mock import Mock

import pytest
from PIL import Image

from conftest import make_movie
from poster_cache import PosterCache, PosterLoader


def _png_bytes(size=(500, 750), color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", size, color + (255,)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def service(executor) -> Mock:
    fake = Mock()
    fake.executor = executor
    fake.dispatch = lambda fn: fn()
    return fake


def test_cache_evicts_least_recently_used() -> None:
    cache = PosterCache(max_items=2)
    first, second, third = (Image.new("RGB", (1, 1)) for _ in range(3))

    cache.put(("/a.jpg", (1, 1)), first)
    cache.put(("/b.jpg", (1, 1)), second)
    assert cache.get(("/a.jpg", (1, 1))) is first
    cache.put(("/c.jpg", (1, 1)), third)

    assert len(cache) == 2
    assert cache.get(("/b.jpg", (1, 1))) is None
    assert cache.get(("/a.jpg", (1, 1))) is first


def test_movie_without_poster_resolves_to_none(service) -> None:
    received = []
    loader = PosterLoader(service)

    future = loader.load(make_movie(1), on_ready=received.append)

    assert future.result(timeout=5) is None
    assert received == [None]
    service.fetch_poster_bytes.assert_not_called()


def test_load_fetches_thumbnails_and_caches(service) -> None:
    service.fetch_poster_bytes.return_value = _png_bytes()
    loader = PosterLoader(service, size=(140, 200))
    movie = make_movie(1, poster_path="/p.jpg")

    image = loader.load(movie).result(timeout=5)

    service.fetch_poster_bytes.assert_called_once_with("https://image.tmdb.org/t/p/w500/p.jpg")
    assert image.mode == "RGB"
    assert image.width <= 140 and image.height <= 200

    again = loader.load(movie).result(timeout=5)
    assert again is image
    assert service.fetch_poster_bytes.call_count == 1


def test_broken_image_resolves_to_none(service) -> None:
    service.fetch_poster_bytes.return_value = b"definitely not an image"
    received = []
    loader = PosterLoader(service)

    image = loader.load(make_movie(2, poster_path="/x.jpg"), on_ready=received.append).result(timeout=5)

    assert image is None
    assert received == [None]
    assert len(loader.cache) == 0


def test_cache_survives_concurrent_put_and_get() -> None:
    cache = PosterCache(max_items=1)
    image = Image.new("RGB", (1, 1))
    errors = []

    def worker(worker_id: int) -> None:
        for step in range(500):
            key = (f"/{worker_id}-{step}.jpg", (1, 1))
            try:
                cache.put(key, image)
                cache.get(key)
            except Exception as exc:
                errors.append(exc)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert errors == []
    assert len(cache) == 1


def test_cache_write_failure_still_calls_back(service) -> None:
    service.fetch_poster_bytes.return_value = _png_bytes()
    cache = Mock()
    cache.get.return_value = None
    cache.put.side_effect = KeyError("evicted")
    received = []
    loader = PosterLoader(service, cache=cache)

    image = loader.load(make_movie(3, poster_path="/k.jpg"), on_ready=received.append).result(timeout=5)

    assert image is None
    assert received == [None]
