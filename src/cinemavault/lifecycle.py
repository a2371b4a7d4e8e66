"""ReviewLifecycle: the entry points route handlers call for review writes.

Every operation checks input, authorship and role before anything is
written. Operations that change a review's rating pair the review write with
exactly one rating aggregator call; helpful votes, reports and administrator
status changes leave the movie's distribution alone. A hidden review still
counts towards its movie's ratings until it is deleted.

Locking follows one order: the movie lock first, then the review lock.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError

from cinemavault.access import require_admin
from cinemavault.exceptions import Forbidden
from cinemavault.movie.distribution import RatingDistribution
from cinemavault.rating.aggregator import RatingAggregator, movie_lock_key, review_lock_key
from cinemavault.review.moderation import HIDDEN, report_hide_threshold
from cinemavault.review.review import UNSET, Review

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HelpfulToggle:
    is_now_helpful: bool
    count: int


def _check_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError({"rating": ["Rating must be between 1 and 5"]})
    return rating


class ReviewLifecycle:
    def __init__(self, store, aggregator=None, threshold=None):
        self.store = store
        self.aggregator = aggregator if aggregator is not None else RatingAggregator(store)
        self.locks = self.aggregator.locks
        self.threshold = threshold if threshold is not None else report_hide_threshold()

    # -------------------------------------------------------------------
    # Rating-bearing transitions
    # -------------------------------------------------------------------
    def submit_review(self, actor_id, movie_id, rating, title=None, body=None, spoiler=False) -> Review:
        """Create the actor's review of ``movie_id``, or update it in place if one exists.

        A resubmission keeps the review's status, so a hidden review stays
        hidden.
        """
        _check_rating(rating)

        with self.locks.hold(movie_lock_key(movie_id)):
            self.store.load_movie(movie_id)
            existing = self.store.find_review(actor_id, movie_id)

            if existing is None:
                review = Review.submit(
                    movie_id=str(movie_id),
                    user_id=str(actor_id),
                    rating=rating,
                    title=title,
                    body=body,
                    spoiler_warning=spoiler,
                )
                self.aggregator.record_review(
                    movie_id, None, rating, persist=lambda: self.store.save_review(review)
                )
                logger.info("review_submitted", review_id=str(review.id), movie_id=str(movie_id), rating=rating)
                return review

            with self.locks.hold(review_lock_key(existing.id)):
                # Re-read under the review lock: a vote or report may have landed since the lookup
                review = self.store.load_review(existing.id)
                previous = review.revise(rating=rating, title=title, body=body, spoiler_warning=spoiler)
                self._save_revision(review, previous, rating)

            logger.info(
                "review_updated",
                review_id=str(review.id),
                movie_id=str(movie_id),
                previous_rating=previous,
                rating=rating,
            )
            return review

    def edit_review(self, actor_id, review_id, rating=UNSET, title=UNSET, body=UNSET, spoiler=UNSET) -> Review:
        """Author-only partial update. Fields left as ``UNSET`` are not touched."""
        if rating is not UNSET:
            _check_rating(rating)

        movie_id = self.store.load_review(review_id).movie_id
        with self.locks.hold(movie_lock_key(movie_id)), self.locks.hold(review_lock_key(review_id)):
            review = self._load_own_review(actor_id, review_id, "edit")
            previous = review.revise(rating=rating, title=title, body=body, spoiler_warning=spoiler)
            self._save_revision(review, previous, review.score)

        logger.info("review_updated", review_id=str(review_id), previous_rating=previous, rating=review.score)
        return review

    def delete_review(self, actor_id, review_id) -> None:
        """Author-only removal; the review's rating is taken out of its movie's distribution."""
        movie_id = self.store.load_review(review_id).movie_id
        with self.locks.hold(movie_lock_key(movie_id)), self.locks.hold(review_lock_key(review_id)):
            review = self._load_own_review(actor_id, review_id, "delete")
            self.aggregator.record_review(
                review.movie_id, review.score, None, persist=lambda: self.store.delete_review(review_id)
            )

        logger.info("review_deleted", review_id=str(review_id), movie_id=str(movie_id))

    def record_review(self, movie_id, old_rating=None, new_rating=None) -> RatingDistribution:
        return self.aggregator.record_review(movie_id, old_rating, new_rating)

    # -------------------------------------------------------------------
    # Votes, reports and moderation
    # -------------------------------------------------------------------
    def toggle_helpful(self, actor_id, review_id) -> HelpfulToggle:
        with self.locks.hold(review_lock_key(review_id)):
            review = self.store.load_review(review_id)
            is_helpful = review.toggle_helpful(actor_id)
            self.store.save_review(review)

        logger.info(
            "helpful_toggled",
            review_id=str(review_id),
            voter_id=str(actor_id),
            is_helpful=is_helpful,
            helpful_count=review.helpful_count,
        )
        return HelpfulToggle(is_now_helpful=is_helpful, count=review.helpful_count)

    def report_review(self, actor_id, review_id, reason=None) -> str:
        """Record a report; returns the review's status afterwards."""
        with self.locks.hold(review_lock_key(review_id)):
            review = self.store.load_review(review_id)
            was = review.status
            status = review.report(actor_id, reason, threshold=self.threshold)
            self.store.save_review(review)

        logger.info("review_reported", review_id=str(review_id), report_count=review.report_count)
        if status == HIDDEN and was != HIDDEN:
            logger.warning("review_auto_hidden", review_id=str(review_id), report_count=review.report_count)
        return status

    def set_review_status(self, actor_role, review_id, status) -> Review:
        """Administrator hides or restores a review. Ratings are unaffected."""
        require_admin(actor_role, "change review status")

        with self.locks.hold(review_lock_key(review_id)):
            review = self.store.load_review(review_id)
            review.set_status(status)
            self.store.save_review(review)

        logger.info("review_status_set", review_id=str(review_id), status=review.status)
        return review

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _load_own_review(self, actor_id, review_id, action: str) -> Review:
        review = self.store.load_review(review_id)
        if not review.is_authored_by(actor_id):
            raise Forbidden(f"You can only {action} your own reviews", review_id=str(review_id))
        return review

    def _save_revision(self, review: Review, previous: int, rating: int) -> None:
        if rating == previous:
            self.store.save_review(review)
        else:
            self.aggregator.record_review(
                review.movie_id, previous, rating, persist=lambda: self.store.save_review(review)
            )
