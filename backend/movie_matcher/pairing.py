# backend/movie_matcher/pairing.py
"""
Exclusive one-to-one pairing between users.

A pair is undirected: the requester is stored as ``user_a`` and the partner
as ``user_b``, but lookups match either side. Each paired user also owns a
``pair_members`` row keyed by user id, so the store itself rejects a second
pairing for the same user, including one that races past the checks below.
"""

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import Conflict, InvalidInput, UpstreamError

logger = logging.getLogger(__name__)


def _public_profile(user) -> dict:
    return {"id": user.id, "username": user.username, "full_name": user.full_name}


def find_pair(db: Session, user_id: int):
    return (
        db.query(models.Pair)
        .filter(or_(models.Pair.user_a == user_id, models.Pair.user_b == user_id))
        .first()
    )


def partner_id(db: Session, user_id: int) -> Optional[int]:
    pair = find_pair(db, user_id)
    if pair is None or not pair.user_a or not pair.user_b:
        return None
    return pair.user_b if pair.user_a == user_id else pair.user_a


def get_pair(db: Session, user_id: int) -> dict:
    """Public profile of the caller's partner, or an empty dict when unpaired."""
    other = partner_id(db, user_id)
    if other is None:
        return {}
    partner = db.get(models.User, other)
    if partner is None:
        return {}
    return _public_profile(partner)


def _record_pair(db: Session, user_id: int, other_id: int):
    pair = models.Pair(user_a=user_id, user_b=other_id)
    try:
        db.add(pair)
        db.flush()
        db.add_all(
            [
                models.PairMember(user_id=user_id, pair_id=pair.id),
                models.PairMember(user_id=other_id, pair_id=pair.id),
            ]
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent pairing rejected for users %s and %s", user_id, other_id)
        raise Conflict("One of you already has a partner")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed creating pair for users %s and %s", user_id, other_id)
        raise UpstreamError("Failed creating pair")
    return pair


def create_pair(db: Session, user_id: int, partner_username: Optional[str]) -> dict:
    """
    Pair the caller with the user named ``partner_username``.
    Checks run in a fixed order so a given bad input always yields the same error:
    missing name, unknown name, self, caller already paired, partner already paired.
    """
    if not partner_username:
        raise InvalidInput("Missing partner username")

    partner = db.query(models.User).filter(models.User.username == partner_username).first()
    if partner is None:
        raise InvalidInput("Not a valid username")

    if partner.id == user_id:
        raise InvalidInput("You cannot pair with yourself")

    if get_pair(db, user_id).get("username"):
        logger.warning("User %s tried to pair while already paired", user_id)
        raise Conflict("You already have a partner")

    if find_pair(db, partner.id) is not None:
        logger.warning("User %s tried to pair with already paired user %s", user_id, partner.id)
        raise Conflict("This user already has a partner")

    _record_pair(db, user_id, partner.id)
    logger.info("Paired users %s and %s", user_id, partner.id)
    return get_pair(db, user_id)
