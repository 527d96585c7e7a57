# backend/movie_matcher/movie_service.py
import logging
import os
import random

import requests

logger = logging.getLogger(__name__)

TMDB_API_KEY = os.getenv("TMDB_API_KEY")
TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
TMDB_TIMEOUT = float(os.getenv("TMDB_TIMEOUT", "10"))
TMDB_TRENDING_WINDOW = os.getenv("TMDB_TRENDING_WINDOW", "week")  # "day" or "week"

YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{key}"


class MovieServiceError(Exception):
    pass


class TrendingMovieClient:
    """Fetches trending movies, with an embeddable trailer link, from The Movie Database."""

    def __init__(self, api_key=None, base_url=None, timeout=None, window=None):
        self.api_key = api_key or TMDB_API_KEY
        self.base_url = (base_url or TMDB_BASE_URL).rstrip("/")
        self.timeout = timeout or TMDB_TIMEOUT
        self.window = window or TMDB_TRENDING_WINDOW

    def _get(self, path: str) -> dict:
        if not self.api_key:
            raise MovieServiceError("Missing TMDB_API_KEY")
        try:
            response = requests.get(
                f"{self.base_url}{path}",
                params={"api_key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            raise MovieServiceError(f"TMDB request to {path} failed: {exc}") from exc

    def get_trailer_url(self, movie_id):
        """First YouTube trailer for the movie, or None."""
        try:
            videos = self._get(f"/movie/{movie_id}/videos").get("results") or []
        except MovieServiceError as exc:
            logger.warning("No trailer for movie %s: %s", movie_id, exc)
            return None
        for video in videos:
            if video.get("site") == "YouTube" and video.get("type") == "Trailer" and video.get("key"):
                return YOUTUBE_EMBED_URL.format(key=video["key"])
        return None

    def get_trending_movie(self) -> dict:
        results = self._get(f"/trending/movie/{self.window}").get("results") or []
        if not results:
            raise MovieServiceError("TMDB returned no trending movies")
        movie = random.choice(results)
        return {
            "id": movie.get("id"),
            "title": movie.get("title"),
            "original_title": movie.get("original_title"),
            "overview": movie.get("overview"),
            "release_date": movie.get("release_date"),
            "trailerUrl": self.get_trailer_url(movie.get("id")),
        }
