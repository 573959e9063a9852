from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_TIMEOUT: Tuple[float, float] = (4, 10)
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class CatalogSettings:
    access_token: str
    base_url: str = DEFAULT_BASE_URL
    timeout: Tuple[float, float] = DEFAULT_TIMEOUT
    data_file: str = "watchlist_data.json"
    max_workers: int = 8

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "CatalogSettings":
        """Build settings from the process environment, after loading ``env_file``."""
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        token = os.getenv("TMDB_ACCESS_TOKEN", "").strip()
        if not token:
            raise EnvironmentError("Missing TMDB_ACCESS_TOKEN in .env")

        return cls(
            access_token=token,
            base_url=os.getenv("TMDB_BASE_URL") or DEFAULT_BASE_URL,
            data_file=os.getenv("FLIXFINDER_DATA_FILE") or "watchlist_data.json",
        )


def configure_logging(level: Union[int, str, None] = None) -> None:
    if level is None:
        level = os.getenv("FLIXFINDER_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
