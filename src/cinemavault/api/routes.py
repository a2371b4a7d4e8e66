"""FastAPI routes for reviews and the movie catalogue.

Review writes go straight to the lifecycle facade, which takes the per-movie
and per-review locks itself and persists each paired write before returning.
Catalogue writes are Protean commands processed synchronously.
"""

import json

from fastapi import APIRouter, Depends, Response
from protean.utils.globals import current_domain

from cinemavault.api.dependencies import Actor, current_actor, get_lifecycle, get_queries
from cinemavault.api.schemas import (
    AddMovieRequest,
    EditReviewRequest,
    HelpfulResponse,
    MovieIdResponse,
    MovieResponse,
    RatingsResponse,
    ReportResponse,
    ReportReviewRequest,
    ReviewEnvelope,
    ReviewListResponse,
    ReviewResponse,
    SetReviewStatusRequest,
    StatusResponse,
    SubmitReviewRequest,
    UpdateMovieRequest,
)
from cinemavault.lifecycle import ReviewLifecycle
from cinemavault.movie.management import AddMovie, DeactivateMovie, UpdateMovieDetails
from cinemavault.queries import ADMIN_PAGE_SIZE, DEFAULT_SORT, MOVIE_PAGE_SIZE, USER_PAGE_SIZE, ReviewQueries
from cinemavault.review.review import UNSET

# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.post("", status_code=201, response_model=ReviewEnvelope)
async def submit_review(
    body: SubmitReviewRequest,
    response: Response,
    actor: Actor = Depends(current_actor),
    lifecycle: ReviewLifecycle = Depends(get_lifecycle),
) -> ReviewEnvelope:
    """Create the caller's review of a movie, or update it if they already reviewed it."""
    review = lifecycle.submit_review(
        actor.id,
        body.movie_id,
        body.rating,
        title=body.title,
        body=body.review,
        spoiler=body.spoiler_warning,
    )
    if review.created_at == review.updated_at:
        message = "Review created successfully"
    else:
        response.status_code = 200
        message = "Review updated successfully"
    return ReviewEnvelope(message=message, review=ReviewResponse.from_review(review))


# Fixed paths are declared before /{review_id} so they are not captured by it
@review_router.get("/user", response_model=ReviewListResponse)
async def my_reviews(
    page: int = 1,
    limit: int = USER_PAGE_SIZE,
    actor: Actor = Depends(current_actor),
    queries: ReviewQueries = Depends(get_queries),
) -> ReviewListResponse:
    return ReviewListResponse.from_page(queries.reviews_by_user(actor.id, page=page, limit=limit))


@review_router.get("/admin/all", response_model=ReviewListResponse)
async def all_reviews(
    status: str | None = None,
    page: int = 1,
    limit: int = ADMIN_PAGE_SIZE,
    actor: Actor = Depends(current_actor),
    queries: ReviewQueries = Depends(get_queries),
) -> ReviewListResponse:
    return ReviewListResponse.from_page(queries.all_reviews(actor.role, status=status, page=page, limit=limit))


@review_router.get("/movie/{movie_id}", response_model=ReviewListResponse)
async def movie_reviews(
    movie_id: str,
    page: int = 1,
    limit: int = MOVIE_PAGE_SIZE,
    sort_by: str = DEFAULT_SORT,
    sort_order: str = "desc",
    queries: ReviewQueries = Depends(get_queries),
) -> ReviewListResponse:
    """Active reviews of a movie, ordered by created_at, helpful_count or rating."""
    reviews = queries.reviews_for_movie(movie_id, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    return ReviewListResponse.from_page(reviews)


@review_router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(review_id: str, queries: ReviewQueries = Depends(get_queries)) -> ReviewResponse:
    return ReviewResponse.from_review(queries.get_review(review_id))


@review_router.put("/{review_id}", response_model=ReviewEnvelope)
async def edit_review(
    review_id: str,
    body: EditReviewRequest,
    actor: Actor = Depends(current_actor),
    lifecycle: ReviewLifecycle = Depends(get_lifecycle),
) -> ReviewEnvelope:
    """Edit the caller's own review. Omitted fields keep their current values."""
    provided = body.model_dump(exclude_unset=True)
    review = lifecycle.edit_review(
        actor.id,
        review_id,
        rating=provided.get("rating", UNSET),
        title=provided.get("title", UNSET),
        body=provided.get("review", UNSET),
        spoiler=provided.get("spoiler_warning", UNSET),
    )
    return ReviewEnvelope(message="Review updated successfully", review=ReviewResponse.from_review(review))


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(
    review_id: str,
    actor: Actor = Depends(current_actor),
    lifecycle: ReviewLifecycle = Depends(get_lifecycle),
) -> StatusResponse:
    lifecycle.delete_review(actor.id, review_id)
    return StatusResponse()


@review_router.post("/{review_id}/helpful", response_model=HelpfulResponse)
async def toggle_helpful(
    review_id: str,
    actor: Actor = Depends(current_actor),
    lifecycle: ReviewLifecycle = Depends(get_lifecycle),
) -> HelpfulResponse:
    result = lifecycle.toggle_helpful(actor.id, review_id)
    return HelpfulResponse(
        message="Review marked as helpful" if result.is_now_helpful else "Review unmarked as helpful",
        is_helpful=result.is_now_helpful,
        helpful_count=result.count,
    )


@review_router.post("/{review_id}/report", response_model=ReportResponse)
async def report_review(
    review_id: str,
    body: ReportReviewRequest | None = None,
    actor: Actor = Depends(current_actor),
    lifecycle: ReviewLifecycle = Depends(get_lifecycle),
) -> ReportResponse:
    status = lifecycle.report_review(actor.id, review_id, reason=body.reason if body else None)
    return ReportResponse(message="Review reported successfully", status=status)


@review_router.put("/{review_id}/status", response_model=ReviewEnvelope)
async def set_review_status(
    review_id: str,
    body: SetReviewStatusRequest,
    actor: Actor = Depends(current_actor),
    lifecycle: ReviewLifecycle = Depends(get_lifecycle),
) -> ReviewEnvelope:
    review = lifecycle.set_review_status(actor.role, review_id, body.status)
    return ReviewEnvelope(message=f"Review status set to {review.status}", review=ReviewResponse.from_review(review))


# ---------------------------------------------------------------------------
# Movie Router
# ---------------------------------------------------------------------------
movie_router = APIRouter(prefix="/movies", tags=["movies"])


def _json_or_none(value):
    if value is None:
        return None
    if isinstance(value, list):
        return json.dumps([item.model_dump() for item in value])
    return json.dumps(value.model_dump())


@movie_router.post("", status_code=201, response_model=MovieIdResponse)
async def add_movie(body: AddMovieRequest, actor: Actor = Depends(current_actor)) -> MovieIdResponse:
    """Add a movie to the catalogue (administrators only)."""
    command = AddMovie(
        actor_id=actor.id,
        actor_role=actor.role,
        title=body.title,
        genre=json.dumps(body.genre),
        director=body.director,
        year=body.year,
        synopsis=body.synopsis,
        cast=_json_or_none(body.cast),
        crew=_json_or_none(body.crew),
        poster=body.poster,
        duration=body.duration,
        language=body.language,
        country=body.country,
        budget=body.budget,
    )
    movie_id = current_domain.process(command, asynchronous=False)
    return MovieIdResponse(movie_id=movie_id)


@movie_router.put("/{movie_id}", response_model=StatusResponse)
async def update_movie(
    movie_id: str, body: UpdateMovieRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdateMovieDetails(
        movie_id=movie_id,
        actor_role=actor.role,
        title=body.title,
        genre=json.dumps(body.genre) if body.genre is not None else None,
        director=body.director,
        year=body.year,
        synopsis=body.synopsis,
        cast=_json_or_none(body.cast),
        crew=_json_or_none(body.crew),
        poster=body.poster,
        duration=body.duration,
        language=body.language,
        country=body.country,
        budget=body.budget,
        status=body.status,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@movie_router.delete("/{movie_id}", response_model=StatusResponse)
async def deactivate_movie(movie_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    """Soft delete: the movie is marked inactive and keeps its reviews and ratings."""
    current_domain.process(DeactivateMovie(movie_id=movie_id, actor_role=actor.role), asynchronous=False)
    return StatusResponse()


@movie_router.get("/{movie_id}", response_model=MovieResponse)
async def get_movie(movie_id: str, queries: ReviewQueries = Depends(get_queries)) -> MovieResponse:
    """A single active movie with its rating summary."""
    return MovieResponse.from_movie(queries.get_movie(movie_id))


@movie_router.get("/{movie_id}/ratings", response_model=RatingsResponse)
async def movie_ratings(movie_id: str, queries: ReviewQueries = Depends(get_queries)) -> RatingsResponse:
    ratings = queries.movie_ratings(movie_id)
    return RatingsResponse(
        movie_id=movie_id,
        average=ratings.average,
        count=ratings.count,
        distribution=ratings.buckets(),
    )
