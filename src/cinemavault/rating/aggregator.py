"""RatingAggregator: the only writer of a movie's rating distribution.

Each review lifecycle transition turns into one ``record_review`` call:

    create   record_review(movie_id, None, rating)
    edit     record_review(movie_id, previous, rating)
    delete   record_review(movie_id, rating, None)

The movie is loaded, updated and saved under its lock, and the paired review
write (``persist``) runs before the lock is released. When that write fails
the movie's previous distribution is written back and ``ConsistencyFailure``
is raised. Nothing is retried.
"""

import structlog

from cinemavault.exceptions import ConsistencyFailure
from cinemavault.movie.distribution import RatingDistribution
from cinemavault.rating.locks import KeyedLocks

logger = structlog.get_logger(__name__)


def movie_lock_key(movie_id) -> str:
    return f"movie:{movie_id}"


def review_lock_key(review_id) -> str:
    return f"review:{review_id}"


class RatingAggregator:
    def __init__(self, store, locks=None):
        self.store = store
        self.locks = locks if locks is not None else KeyedLocks()

    def record_review(self, movie_id, old_rating=None, new_rating=None, persist=None) -> RatingDistribution:
        """Apply one rating delta to ``movie_id`` and run the paired review write.

        Returns the distribution that was saved.
        """
        with self.locks.hold(movie_lock_key(movie_id)):
            movie = self.store.load_movie(movie_id)
            previous = movie.ratings or RatingDistribution.empty()

            updated = movie.apply_rating_delta(old_rating, new_rating)
            self.store.save_movie(movie)

            logger.debug(
                "rating_recorded",
                movie_id=str(movie_id),
                old_rating=old_rating,
                new_rating=new_rating,
                count=updated.count,
                average=updated.average,
            )

            if persist is not None:
                try:
                    persist()
                except Exception as exc:
                    self._compensate(movie_id, previous, exc)

            return updated

    def _compensate(self, movie_id, previous: RatingDistribution, cause: Exception):
        """Write ``previous`` back to the movie and raise ``ConsistencyFailure``."""
        try:
            movie = self.store.load_movie(movie_id)
            movie.restore_ratings(previous)
            self.store.save_movie(movie)
        except Exception as compensation_error:
            logger.error(
                "consistency_failure",
                movie_id=str(movie_id),
                error=str(cause),
                compensation_error=str(compensation_error),
            )
            raise ConsistencyFailure(
                "Review could not be saved and the movie's ratings could not be restored",
                movie_id=str(movie_id),
            ) from cause

        logger.warning(
            "rating_compensated",
            movie_id=str(movie_id),
            count=previous.count,
            average=previous.average,
        )
        logger.error("consistency_failure", movie_id=str(movie_id), error=str(cause), compensated=True)
        raise ConsistencyFailure("Review could not be saved; movie ratings were restored", movie_id=str(movie_id)) from cause
