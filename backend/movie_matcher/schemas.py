# backend/movie_matcher/schemas.py
from pydantic import BaseModel, StrictInt
from typing import Optional

# Request fields are optional so missing values reach the core checks and
# come back as the usual {"error": ...} responses.


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class CreateUserRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    fullName: Optional[str] = None


class PairRequest(BaseModel):
    partnerUsername: Optional[str] = None


class RatingRequest(BaseModel):
    movieId: Optional[StrictInt] = None
    rating: Optional[StrictInt] = None


class LoginOut(BaseModel):
    id: int
    full_name: str
    token: str


class StatusOut(BaseModel):
    status: str


class PartnerOut(BaseModel):
    id: int
    username: str
    full_name: str


class MovieOut(BaseModel):
    id: int
    apiId: Optional[int] = None
    title: Optional[str] = None
    overview: Optional[str] = None
    releaseDate: Optional[str] = None
    trailerUrl: Optional[str] = None


class RecommendationOut(MovieOut):
    rating: float
