# backend/movie_matcher/ratings.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import InvalidInput, UpstreamError

logger = logging.getLogger(__name__)

VALID_RATINGS = (-1, 1, 2)
POSITIVE_RATINGS = (1, 2)


def rate_movie(db: Session, user_id: int, movie_id, rating) -> dict:
    """
    Append one preference row. Re-rating a movie adds another row; nothing is
    updated or deleted. A rating of 0 counts as missing and is rejected.
    """
    if not movie_id or not rating or isinstance(rating, bool) or rating not in VALID_RATINGS:
        raise InvalidInput("Missing information")

    try:
        db.add(models.Preference(user_id=user_id, movie_id=movie_id, rating=int(rating)))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed saving preference of user %s for movie %s", user_id, movie_id)
        raise UpstreamError("Error saving preference")
    return {"status": "ok"}
