# backend/movie_matcher/models.py
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=False)


class AuthToken(Base):
    __tablename__ = "auth_tokens"
    id = Column(Integer, primary_key=True, index=True)
    token = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    valid = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Pair(Base):
    __tablename__ = "pairs"
    id = Column(Integer, primary_key=True, index=True)
    user_a = Column(Integer, ForeignKey("users.id"), nullable=False)
    user_b = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (CheckConstraint("user_a <> user_b", name="pair_distinct_users"),)


class PairMember(Base):
    # One row per paired user; the primary key keeps every user in at most one pair.
    __tablename__ = "pair_members"
    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    pair_id = Column(Integer, ForeignKey("pairs.id"), nullable=False, index=True)


class Movie(Base):
    __tablename__ = "movies"
    id = Column(Integer, primary_key=True, index=True)
    api_id = Column(Integer, index=True, nullable=True)
    title = Column(String, nullable=True)
    overview = Column(Text, nullable=True)
    release_date = Column(String, nullable=True)
    trailer_url = Column(String, nullable=True)


class Preference(Base):
    __tablename__ = "preferences"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.id"), index=True, nullable=False)
    rating = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (CheckConstraint("rating IN (-1, 1, 2)", name="preference_rating_values"),)
