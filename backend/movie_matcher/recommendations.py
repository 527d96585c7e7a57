# backend/movie_matcher/recommendations.py
"""
Movies to rate and mutual recommendations.

A recommendation is a movie that the caller and their partner rated
positively (1 or 2) at least twice between them. Negative ratings are left
out of the average entirely. Movies with equal averages keep whatever order
the database returns them in.
"""

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, pairing
from .errors import UpstreamError
from .movie_service import MovieServiceError
from .ratings import POSITIVE_RATINGS

logger = logging.getLogger(__name__)

RECOMMENDATION_LIMIT = 100


def movie_to_dict(movie) -> dict:
    return {
        "id": movie.id,
        "apiId": movie.api_id,
        "title": movie.title,
        "overview": movie.overview,
        "releaseDate": movie.release_date,
        "trailerUrl": movie.trailer_url,
    }


def get_movie(db: Session, provider) -> dict:
    """
    Fetch one trending movie and store it as a new row.
    The same external movie may be stored more than once.
    """
    try:
        descriptor = provider.get_trending_movie()
        movie = models.Movie(
            api_id=descriptor["id"],
            title=descriptor.get("title") or descriptor.get("original_title"),
            overview=descriptor.get("overview"),
            release_date=descriptor.get("release_date"),
            trailer_url=descriptor.get("trailerUrl"),
        )
        db.add(movie)
        db.commit()
        db.refresh(movie)
    except (MovieServiceError, KeyError):
        logger.exception("Trending movie lookup failed")
        raise UpstreamError("Error getting movie")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed storing trending movie")
        raise UpstreamError("Error getting movie")
    logger.info("Stored movie %s (api id %s)", movie.id, movie.api_id)
    return movie_to_dict(movie)


def get_recommendations(db: Session, user_id: int) -> list:
    try:
        # Unpaired users only match their own repeated positive ratings.
        member_ids = [user_id]
        other = pairing.partner_id(db, user_id)
        if other is not None:
            member_ids.append(other)

        avg_rating = func.avg(models.Preference.rating).label("avg_rating")
        rows = (
            db.query(models.Movie, avg_rating)
            .join(models.Preference, models.Preference.movie_id == models.Movie.id)
            .filter(
                models.Preference.user_id.in_(member_ids),
                models.Preference.rating.in_(POSITIVE_RATINGS),
            )
            .group_by(models.Movie.id)
            .having(func.count(models.Preference.id) > 1)
            .order_by(avg_rating.desc())
            .limit(RECOMMENDATION_LIMIT)
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Recommendation query failed for user %s", user_id)
        raise UpstreamError("Error getting recommendations")

    return [dict(movie_to_dict(movie), rating=float(average)) for movie, average in rows]
