# backend/movie_matcher/main.py
import logging
import os
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from . import auth, models, pairing, ratings, recommendations, schemas, tokens
from .database import SessionLocal, engine
from .errors import MatcherError
from .movie_service import TrendingMovieClient
from .utils import bearer_token, parse_origins, setup_logging

logger = logging.getLogger(__name__)

setup_logging(os.getenv("LOG_LEVEL", "INFO"))

models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="Movie Matcher")

app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_origins(os.getenv("CORS_ORIGINS")),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

token_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_movie_provider():
    return TrendingMovieClient()


def get_token(authorization: Optional[str] = Depends(token_header)) -> Optional[str]:
    return bearer_token(authorization)


def get_current_user_id(token: Optional[str] = Depends(get_token), db: Session = Depends(get_db)) -> int:
    return tokens.validate_token(db, token)


@app.exception_handler(MatcherError)
async def matcher_error_handler(request: Request, exc: MatcherError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Invalid request body for %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.get("/health", response_model=schemas.StatusOut)
def health():
    return {"status": "ok"}


@app.post("/login", response_model=schemas.LoginOut)
def login(body: schemas.LoginRequest, db: Session = Depends(get_db)):
    return auth.login(db, body.username, body.password)


@app.post("/logout", response_model=schemas.StatusOut)
def logout(token: Optional[str] = Depends(get_token), db: Session = Depends(get_db)):
    return auth.logout(db, token)


@app.post("/user", response_model=schemas.LoginOut)
def create_user(body: schemas.CreateUserRequest, db: Session = Depends(get_db)):
    return auth.create_user(db, body.username, body.password, body.fullName)


@app.post("/pair", response_model=schemas.PartnerOut)
def create_pair(
    body: schemas.PairRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return pairing.create_pair(db, user_id, body.partnerUsername)


@app.get("/pair")
def get_pair(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)) -> dict:
    """Partner profile, or {} when the caller has no partner yet."""
    return pairing.get_pair(db, user_id)


@app.get("/movie", response_model=schemas.MovieOut)
def get_movie(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    provider=Depends(get_movie_provider),
):
    return recommendations.get_movie(db, provider)


@app.post("/rating", response_model=schemas.StatusOut)
def rate_movie(
    body: schemas.RatingRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return ratings.rate_movie(db, user_id, body.movieId, body.rating)


@app.get("/recommendation", response_model=List[schemas.RecommendationOut])
def get_recommendation(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return recommendations.get_recommendations(db, user_id)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3001")))
