# backend/movie_matcher/auth.py
"""
Credential store and session helpers for the movie matcher.

Provides:
 - get_password_hash(password) -> str
 - verify_password(plain_password, hashed_password) -> bool
 - authenticate_user(db, username, password) -> user model or None
 - register_user(db, username, password, full_name) -> user model
 - login(db, username, password) -> {id, full_name, token}
 - create_user(db, username, password, full_name) -> {id, full_name, token}
 - logout(db, token) -> {status: "ok"}

This uses a SHA-256 hex pre-hash to avoid bcrypt 72-byte limit, then uses passlib CryptContext
(bcrypt_sha256 preferred) to store and verify salted hashes. Login fetches the user row first and
verifies the hash afterwards.
"""

import hashlib
import logging
import os

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, tokens
from .errors import Conflict, InvalidInput, Unauthenticated, UpstreamError

logger = logging.getLogger(__name__)

PASSWORD_HASH_ROUNDS = int(os.getenv("PASSWORD_HASH_ROUNDS", "12"))

# CryptContext: prefer bcrypt_sha256 (pre-hashes with SHA256 internally),
# but include bcrypt for compatibility.
pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    default="bcrypt_sha256",
    bcrypt_sha256__rounds=PASSWORD_HASH_ROUNDS,
    bcrypt__rounds=PASSWORD_HASH_ROUNDS,
)


def _sha256_hex(s: str) -> str:
    """Return SHA-256 hex digest of the given string (deterministic, 64 hex chars)."""
    if isinstance(s, bytes):
        b = s
    else:
        b = s.encode("utf-8", errors="surrogatepass")
    return hashlib.sha256(b).hexdigest()


def get_password_hash(password: str) -> str:
    """
    Hash a password for storage.
    We first compute the SHA-256 hex digest then call passlib to hash that digest.
    """
    digest = _sha256_hex(password)
    return pwd_context.hash(digest)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    digest = _sha256_hex(plain_password)
    try:
        return pwd_context.verify(digest, hashed_password)
    except (ValueError, TypeError):
        # malformed stored hash
        return False


def authenticate_user(db: Session, username: str, password: str):
    """
    Find user by username and verify password.
    Returns the user model object on success, or None on failure. Unknown users and wrong
    passwords are indistinguishable to the caller.
    """
    user = db.query(models.User).filter(models.User.username == username).first()
    if not user:
        # same bcrypt cost as a wrong password
        pwd_context.dummy_verify()
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def register_user(db: Session, username: str, password: str, full_name: str):
    if not username or not password or not full_name:
        raise InvalidInput("Missing data")
    user = models.User(
        username=username,
        hashed_password=get_password_hash(password),
        full_name=full_name,
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Registration rejected for %r: %s", username, exc.orig)
        raise Conflict(str(exc.orig))
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed registering %r", username)
        raise UpstreamError("Failed creating user")
    db.refresh(user)
    logger.info("Registered user %s (%r)", user.id, username)
    return user


def login(db: Session, username: str, password: str) -> dict:
    if not username or not password:
        raise InvalidInput("Missing data")
    user = authenticate_user(db, username, password)
    if not user:
        logger.warning("Failed login for %r", username)
        raise Unauthenticated("Unable to authenticate")
    token = tokens.issue_token(db, user.id)
    logger.info("User %s logged in", user.id)
    return {"id": user.id, "full_name": user.full_name, "token": token}


def create_user(db: Session, username: str, password: str, full_name: str) -> dict:
    """Register a new user and log them straight in."""
    register_user(db, username, password, full_name)
    return login(db, username, password)


def logout(db: Session, token: str) -> dict:
    row = tokens.find_token(db, token)
    # A revoked token must not end sessions opened after it was revoked.
    if not row.valid:
        return {"status": "ok"}
    tokens.revoke_all_tokens(db, row.user_id)
    logger.info("User %s logged out", row.user_id)
    return {"status": "ok"}
