from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
import requests

from models import Movie


def make_movie(movie_id: int, title: str = "", rating: float | None = None, **extra) -> Movie:
    return Movie(
        id=movie_id,
        title=title or f"Movie {movie_id}",
        overview=extra.pop("overview", ""),
        vote_average=rating,
        **extra,
    )


def json_response(payload, status: int = 200) -> Mock:
    response = Mock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def fake_session() -> Mock:
    session = Mock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)
