# backend/movie_matcher/errors.py
"""
Error kinds raised by the core components.

Each carries an advisory HTTP status; the API layer turns them into
``{"error": message}`` responses.
"""

from typing import Optional


class MatcherError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInput(MatcherError):
    status_code = 400


class Unauthenticated(MatcherError):
    status_code = 401


class Conflict(MatcherError):
    status_code = 400


class UpstreamError(MatcherError):
    status_code = 500
