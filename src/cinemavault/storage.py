"""Load/save primitives the lifecycle facade and rating aggregator work with.

``RepositoryStore`` is backed by the domain's Protean repositories, so it
works with whichever database provider the domain is configured for (the
in-memory provider by default). Callers must be inside the domain context.
"""

from protean.exceptions import ObjectNotFoundError

from cinemavault.exceptions import Conflict, NotFound
from cinemavault.movie.movie import Movie
from cinemavault.review.review import Review


class RepositoryStore:
    def __init__(self, domain):
        self.domain = domain

    @property
    def movies(self):
        return self.domain.repository_for(Movie)

    @property
    def reviews(self):
        return self.domain.repository_for(Review)

    # Movies
    def load_movie(self, movie_id) -> Movie:
        try:
            return self.movies.get(str(movie_id))
        except ObjectNotFoundError as exc:
            raise NotFound("Movie not found", movie_id=str(movie_id)) from exc

    def save_movie(self, movie: Movie) -> Movie:
        return self.movies.add(movie)

    # Reviews
    def load_review(self, review_id) -> Review:
        try:
            return self.reviews.get(str(review_id))
        except ObjectNotFoundError as exc:
            raise NotFound("Review not found", review_id=str(review_id)) from exc

    def find_review(self, user_id, movie_id) -> Review | None:
        """The review ``user_id`` wrote for ``movie_id``, or ``None``."""
        found = self.reviews.find_for_author(user_id, movie_id)
        if len(found) > 1:
            raise Conflict(
                "More than one review exists for this user and movie",
                user_id=str(user_id),
                movie_id=str(movie_id),
            )
        return found[0] if found else None

    def save_review(self, review: Review) -> Review:
        return self.reviews.add(review)

    def delete_review(self, review_id) -> None:
        self.reviews.remove(self.load_review(review_id))
