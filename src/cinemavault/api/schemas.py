"""Pydantic request/response schemas for the CinemaVault API.

These are separate from the domain model (anti-corruption pattern). Range
and length rules are left to the domain, so a bad rating or an over-long
title is reported the same way whichever entry point it came through.
"""

from __future__ import annotations

import json
from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Review requests
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    movie_id: str
    rating: int
    title: str | None = None
    review: str | None = None
    spoiler_warning: bool = False


class EditReviewRequest(BaseModel):
    rating: int | None = None
    title: str | None = None
    review: str | None = None
    spoiler_warning: bool | None = None


class ReportReviewRequest(BaseModel):
    reason: str | None = None


class SetReviewStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Review responses
# ---------------------------------------------------------------------------
class ReviewResponse(BaseModel):
    id: str
    movie_id: str
    user_id: str
    rating: int
    title: str
    review: str
    spoiler_warning: bool
    status: str
    helpful_count: int
    report_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_review(cls, review) -> ReviewResponse:
        return cls(
            id=str(review.id),
            movie_id=str(review.movie_id),
            user_id=str(review.user_id),
            rating=review.score,
            title=review.title or "",
            review=review.body or "",
            spoiler_warning=bool(review.spoiler_warning),
            status=review.status,
            helpful_count=review.helpful_count or 0,
            report_count=review.report_count or 0,
            created_at=review.created_at,
            updated_at=review.updated_at,
        )


class ReviewEnvelope(BaseModel):
    message: str
    review: ReviewResponse


class PaginationSchema(BaseModel):
    current: int
    pages: int
    total: int


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    pagination: PaginationSchema

    @classmethod
    def from_page(cls, page) -> ReviewListResponse:
        return cls(
            reviews=[ReviewResponse.from_review(r) for r in page.reviews],
            pagination=PaginationSchema(**page.pagination),
        )


class HelpfulResponse(BaseModel):
    message: str
    is_helpful: bool
    helpful_count: int


class ReportResponse(BaseModel):
    message: str
    status: str


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Movie requests
# ---------------------------------------------------------------------------
class CastMemberSchema(BaseModel):
    name: str
    role: str | None = None


class CrewSchema(BaseModel):
    producer: str | None = None
    music: str | None = None
    cinematography: str | None = None
    writer: str | None = None


class AddMovieRequest(BaseModel):
    title: str
    genre: list[str]
    director: str
    year: int
    synopsis: str | None = None
    cast: list[CastMemberSchema] | None = None
    crew: CrewSchema | None = None
    poster: str | None = None
    duration: int | None = None
    language: str | None = None
    country: str | None = None
    budget: str | None = None


class UpdateMovieRequest(BaseModel):
    title: str | None = None
    genre: list[str] | None = None
    director: str | None = None
    year: int | None = None
    synopsis: str | None = None
    cast: list[CastMemberSchema] | None = None
    crew: CrewSchema | None = None
    poster: str | None = None
    duration: int | None = None
    language: str | None = None
    country: str | None = None
    budget: str | None = None
    status: str | None = None


# ---------------------------------------------------------------------------
# Movie responses
# ---------------------------------------------------------------------------
class MovieIdResponse(BaseModel):
    movie_id: str


class RatingsResponse(BaseModel):
    movie_id: str
    average: float
    count: int
    distribution: dict[str, int]


class MovieResponse(BaseModel):
    id: str
    title: str
    genre: list[str]
    director: str
    year: int
    synopsis: str = ""
    cast: list[CastMemberSchema] = []
    crew: CrewSchema | None = None
    poster: str = ""
    duration: int = 0
    language: str = ""
    country: str = ""
    budget: str = ""
    status: str
    average_rating: float = 0.0
    total_reviews: int = 0

    @classmethod
    def from_movie(cls, movie) -> MovieResponse:
        ratings = movie.ratings
        return cls(
            id=str(movie.id),
            title=movie.title,
            genre=movie.genres,
            director=movie.director,
            year=movie.year,
            synopsis=movie.synopsis or "",
            cast=json.loads(movie.cast) if movie.cast else [],
            crew=json.loads(movie.crew) if movie.crew else None,
            poster=movie.poster or "",
            duration=movie.duration or 0,
            language=movie.language or "",
            country=movie.country or "",
            budget=movie.budget or "",
            status=movie.status,
            average_rating=ratings.average if ratings else 0.0,
            total_reviews=ratings.count if ratings else 0,
        )
