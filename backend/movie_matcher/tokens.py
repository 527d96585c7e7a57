# backend/movie_matcher/tokens.py
"""
Session tokens.

Tokens are opaque random strings stored in ``auth_tokens`` with a validity
flag. There is no expiry: a token stays valid until its owner logs out, at
which point every token that user ever received is invalidated.
"""

import logging
import os
import secrets
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import Unauthenticated, UpstreamError

logger = logging.getLogger(__name__)

TOKEN_BYTES = int(os.getenv("TOKEN_BYTES", "32"))


def _redact(token: str) -> str:
    return f"{token[:4]}..." if token else "<empty>"


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def issue_token(db: Session, user_id: int) -> str:
    token = generate_token()
    try:
        db.add(models.AuthToken(token=token, user_id=user_id, valid=True))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed creating token for user %s", user_id)
        raise UpstreamError("Failed creating token")
    return token


def validate_token(db: Session, token: Optional[str]) -> int:
    """Return the id of the user owning a currently valid token."""
    if not token:
        raise Unauthenticated("Missing token")
    row = (
        db.query(models.AuthToken.user_id)
        .filter(models.AuthToken.token == token, models.AuthToken.valid.is_(True))
        .first()
    )
    if row is None:
        logger.warning("Rejected token %s", _redact(token))
        raise Unauthenticated("Could not authenticate")
    return row.user_id


def find_token(db: Session, token: Optional[str]):
    """
    Return the (user_id, valid) row for a token whether or not it is still valid.
    Only logout uses this, so that logging out twice with the same token succeeds.
    """
    if not token:
        raise Unauthenticated("Missing token")
    row = (
        db.query(models.AuthToken.user_id, models.AuthToken.valid)
        .filter(models.AuthToken.token == token)
        .first()
    )
    if row is None:
        logger.warning("Rejected token %s", _redact(token))
        raise Unauthenticated("Could not authenticate")
    return row


def revoke_all_tokens(db: Session, user_id: int) -> None:
    try:
        db.query(models.AuthToken).filter(models.AuthToken.user_id == user_id).update(
            {models.AuthToken.valid: False}, synchronize_session=False
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed revoking tokens for user %s", user_id)
        raise UpstreamError("Logout failed")
