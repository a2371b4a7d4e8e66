"""Repository for the Review aggregate."""

from cinemavault.domain import cinemavault
from cinemavault.review.review import Review


@cinemavault.repository(part_of=Review)
class ReviewRepository:
    """Review lookups beyond fetch-by-id.

    Results are returned as plain lists; ordering and paging are applied by
    the callers. Every query lifts the aggregate's default result limit so
    listings and totals cover all matching records.
    """

    def _matching(self, **criteria) -> list[Review]:
        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        return query.limit(None).all().items

    def find_for_author(self, user_id, movie_id) -> list[Review]:
        """All reviews ``user_id`` has written for ``movie_id`` (normally zero or one)."""
        return self._matching(user_id=str(user_id), movie_id=str(movie_id))

    def for_movie(self, movie_id, status=None) -> list[Review]:
        criteria = {"movie_id": str(movie_id)}
        if status is not None:
            criteria["status"] = status
        return self._matching(**criteria)

    def by_user(self, user_id) -> list[Review]:
        return self._matching(user_id=str(user_id))

    def with_status(self, status=None) -> list[Review]:
        if status is None:
            return self._matching()
        return self._matching(status=status)

    def remove(self, review: Review) -> None:
        self._dao.delete(review)
