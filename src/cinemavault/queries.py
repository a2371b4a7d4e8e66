"""Read paths over movies and reviews.

Listings are newest first unless a movie listing asks for another order, and
are paginated as ``{current, pages, total}``.
"""

import math
from dataclasses import dataclass, field

from protean.exceptions import ValidationError

from cinemavault.access import require_admin
from cinemavault.exceptions import NotFound
from cinemavault.movie.distribution import RatingDistribution
from cinemavault.movie.movie import Movie, MovieStatus
from cinemavault.review.moderation import ACTIVE, HIDDEN
from cinemavault.review.review import Review

MOVIE_PAGE_SIZE = 10
USER_PAGE_SIZE = 10
ADMIN_PAGE_SIZE = 20

DEFAULT_SORT = "created_at"
SORT_ORDERS = ("asc", "desc")
SORT_KEYS = {
    "created_at": lambda review: review.created_at,
    "helpful_count": lambda review: review.helpful_count or 0,
    "rating": lambda review: review.score,
}


@dataclass
class ReviewPage:
    reviews: list[Review] = field(default_factory=list)
    current: int = 1
    pages: int = 0
    total: int = 0

    @property
    def pagination(self) -> dict:
        return {"current": self.current, "pages": self.pages, "total": self.total}


def _ordered(reviews, sort_by: str, sort_order: str) -> list[Review]:
    if sort_by not in SORT_KEYS:
        raise ValidationError({"sort_by": [f"Cannot sort reviews by {sort_by}; use one of {', '.join(SORT_KEYS)}"]})
    if sort_order not in SORT_ORDERS:
        raise ValidationError({"sort_order": [f"Sort order must be one of {', '.join(SORT_ORDERS)}"]})

    # Newest first among equal keys
    ordered = sorted(reviews, key=SORT_KEYS[DEFAULT_SORT], reverse=True)
    if sort_by != DEFAULT_SORT or sort_order != "desc":
        ordered = sorted(ordered, key=SORT_KEYS[sort_by], reverse=sort_order == "desc")
    return ordered


def _paginate(reviews, page: int, limit: int, sort_by=DEFAULT_SORT, sort_order="desc") -> ReviewPage:
    page = max(1, int(page))
    limit = max(1, int(limit))
    ordered = _ordered(reviews, sort_by, sort_order)
    start = (page - 1) * limit
    return ReviewPage(
        reviews=ordered[start : start + limit],
        current=page,
        pages=math.ceil(len(ordered) / limit),
        total=len(ordered),
    )


class ReviewQueries:
    def __init__(self, store):
        self.store = store

    def get_movie(self, movie_id) -> Movie:
        """A single catalogue entry; inactive movies are reported as missing."""
        movie = self.store.load_movie(movie_id)
        if movie.status != MovieStatus.ACTIVE.value:
            raise NotFound("Movie not found", movie_id=str(movie_id))
        return movie

    def get_review(self, review_id) -> Review:
        """A single review; hidden and pending reviews are reported as missing."""
        review = self.store.load_review(review_id)
        if review.status != ACTIVE:
            raise NotFound("Review not found", review_id=str(review_id))
        return review

    def reviews_for_movie(
        self, movie_id, page=1, limit=MOVIE_PAGE_SIZE, sort_by=DEFAULT_SORT, sort_order="desc"
    ) -> ReviewPage:
        self.store.load_movie(movie_id)
        active = self.store.reviews.for_movie(movie_id, status=ACTIVE)
        return _paginate(active, page, limit, sort_by=sort_by, sort_order=sort_order)

    def reviews_by_user(self, user_id, page=1, limit=USER_PAGE_SIZE) -> ReviewPage:
        visible = [r for r in self.store.reviews.by_user(user_id) if r.status != HIDDEN]
        return _paginate(visible, page, limit)

    def all_reviews(self, actor_role, status=None, page=1, limit=ADMIN_PAGE_SIZE) -> ReviewPage:
        require_admin(actor_role, "list all reviews")
        return _paginate(self.store.reviews.with_status(status), page, limit)

    def movie_ratings(self, movie_id) -> RatingDistribution:
        """The movie's current distribution, count and average."""
        return self.store.load_movie(movie_id).ratings or RatingDistribution.empty()
