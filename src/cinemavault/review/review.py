"""Review aggregate: one user's rating and opinion of one movie.

Besides the rating and text, a review carries two identity sets: the users
who found it helpful and the users who reported it. Both are stored as JSON
arrays and handled as sets, and their counts are kept equal to the sets'
sizes by invariant.

State Machine:
    PENDING → ACTIVE | HIDDEN
    ACTIVE  → HIDDEN   (report threshold, or administrator)
    HIDDEN  → ACTIVE   (administrator only)

Every fresh submission is validated up front and starts ACTIVE. Deletion is
not a status: the record is removed by the lifecycle facade once its rating
has been taken out of the movie's distribution.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text, ValueObject

from cinemavault.domain import cinemavault
from cinemavault.exceptions import Conflict, Forbidden
from cinemavault.review.events import (
    HelpfulVoteToggled,
    ReviewEdited,
    ReviewHidden,
    ReviewReported,
    ReviewRestored,
    ReviewSubmitted,
)
from cinemavault.review.moderation import REPORT_HIDE_THRESHOLD, status_after_report

# Sentinel for distinguishing "not provided" from None in partial updates
UNSET = object()

MAX_TITLE_LENGTH = 100
MAX_BODY_LENGTH = 1000


class ReviewStatus(Enum):
    ACTIVE = "active"
    HIDDEN = "hidden"
    PENDING = "pending"


_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: {ReviewStatus.ACTIVE, ReviewStatus.HIDDEN},
    ReviewStatus.ACTIVE: {ReviewStatus.HIDDEN},
    ReviewStatus.HIDDEN: {ReviewStatus.ACTIVE},
}


def _id_set(raw) -> set[str]:
    return set(json.loads(raw)) if raw else set()


def _dump_ids(ids) -> str:
    return json.dumps(sorted(ids))


def _clean(text) -> str:
    return text.strip() if text else ""


@cinemavault.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})


@cinemavault.aggregate
class Review:
    """A user's review of a movie."""

    movie_id = Identifier(required=True)
    user_id = Identifier(required=True)

    # Content
    rating = ValueObject(Rating, required=True)
    title = String(max_length=MAX_TITLE_LENGTH, default="")
    body = Text(default="")
    spoiler_warning = Boolean(default=False)

    status = String(choices=ReviewStatus, default=ReviewStatus.ACTIVE.value)

    # Helpful votes
    helpful_voters = Text()  # JSON array of user ids, set semantics
    helpful_count = Integer(default=0)

    # Reports
    reporters = Text()  # JSON array of user ids, set semantics
    report_count = Integer(default=0)
    report_reasons = Text()  # JSON array of free-text reasons

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def helpful_count_matches_voters(self):
        if (self.helpful_count or 0) != len(_id_set(self.helpful_voters)):
            raise ValidationError({"helpful_count": ["Helpful count must equal the number of voters"]})

    @invariant.post
    def report_count_matches_reporters(self):
        if (self.report_count or 0) != len(_id_set(self.reporters)):
            raise ValidationError({"report_count": ["Report count must equal the number of reporters"]})

    @invariant.post
    def body_maximum_length(self):
        if self.body and len(self.body) > MAX_BODY_LENGTH:
            raise ValidationError({"body": [f"Review cannot be longer than {MAX_BODY_LENGTH} characters"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(cls, movie_id, user_id, rating, title=None, body=None, spoiler_warning=False):
        """Create a new, active review."""
        now = datetime.now(UTC)

        review = cls(
            movie_id=movie_id,
            user_id=user_id,
            rating=Rating(score=rating),
            title=_clean(title),
            body=_clean(body),
            spoiler_warning=bool(spoiler_warning),
            status=ReviewStatus.ACTIVE.value,
            helpful_voters=_dump_ids(()),
            helpful_count=0,
            reporters=_dump_ids(()),
            report_count=0,
            report_reasons=json.dumps([]),
            created_at=now,
            updated_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                movie_id=str(movie_id),
                user_id=str(user_id),
                rating=rating,
                title=review.title,
                spoiler_warning=review.spoiler_warning,
                submitted_at=now,
            )
        )
        return review

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def score(self) -> int:
        return self.rating.score

    @property
    def helpful_voter_ids(self) -> frozenset[str]:
        return frozenset(_id_set(self.helpful_voters))

    @property
    def reporter_ids(self) -> frozenset[str]:
        return frozenset(_id_set(self.reporters))

    @property
    def reasons(self) -> list[str]:
        return json.loads(self.report_reasons) if self.report_reasons else []

    def is_authored_by(self, user_id) -> bool:
        return str(user_id) == str(self.user_id)

    def is_helpful_by(self, user_id) -> bool:
        return str(user_id) in self.helpful_voter_ids

    # -------------------------------------------------------------------
    # Revision (edit, or resubmission by the same user)
    # -------------------------------------------------------------------
    def revise(self, rating=UNSET, title=UNSET, body=UNSET, spoiler_warning=UNSET) -> int:
        """Update rating and text in place. Status is left as it is.

        Returns the rating the review had before the revision.
        """
        previous = self.rating.score
        new_rating = Rating(score=rating) if rating is not UNSET else None
        now = datetime.now(UTC)

        with atomic_change(self):
            if new_rating is not None:
                self.rating = new_rating
            if title is not UNSET:
                self.title = _clean(title)
            if body is not UNSET:
                self.body = _clean(body)
            if spoiler_warning is not UNSET:
                self.spoiler_warning = bool(spoiler_warning)
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                movie_id=str(self.movie_id),
                previous_rating=previous,
                rating=self.rating.score,
                edited_at=now,
            )
        )
        return previous

    # -------------------------------------------------------------------
    # Helpful votes
    # -------------------------------------------------------------------
    def toggle_helpful(self, voter_id) -> bool:
        """Flip ``voter_id``'s helpful mark. Returns whether the review is now marked helpful by them."""
        if self.is_authored_by(voter_id):
            raise Forbidden("You cannot mark your own review as helpful", review_id=str(self.id))

        voters = _id_set(self.helpful_voters)
        voter = str(voter_id)
        is_helpful = voter not in voters
        if is_helpful:
            voters.add(voter)
        else:
            voters.discard(voter)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.helpful_voters = _dump_ids(voters)
            self.helpful_count = len(voters)
            self.updated_at = now

        self.raise_(
            HelpfulVoteToggled(
                review_id=str(self.id),
                voter_id=voter,
                is_helpful=is_helpful,
                helpful_count=self.helpful_count,
                toggled_at=now,
            )
        )
        return is_helpful

    # -------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------
    def report(self, reporter_id, reason=None, threshold=REPORT_HIDE_THRESHOLD) -> str:
        """Record a report and apply the moderation policy. Returns the resulting status."""
        if self.is_authored_by(reporter_id):
            raise Forbidden("You cannot report your own review", review_id=str(self.id))

        reporters = _id_set(self.reporters)
        reporter = str(reporter_id)
        if reporter in reporters:
            raise Conflict("You have already reported this review", review_id=str(self.id))

        reporters.add(reporter)
        reasons = self.reasons
        if reason and reason.strip():
            reasons.append(reason.strip())

        now = datetime.now(UTC)
        new_status = status_after_report(self.status, len(reporters), threshold)

        with atomic_change(self):
            self.reporters = _dump_ids(reporters)
            self.report_count = len(reporters)
            self.report_reasons = json.dumps(reasons)
            self.updated_at = now

        self.raise_(
            ReviewReported(
                review_id=str(self.id),
                reporter_id=reporter,
                reason=reason,
                report_count=self.report_count,
                reported_at=now,
            )
        )

        if new_status != self.status:
            self._transition_to(ReviewStatus(new_status), hidden_by="System")

        return self.status

    # -------------------------------------------------------------------
    # Administrator status changes
    # -------------------------------------------------------------------
    def set_status(self, status) -> None:
        """Forced transition by an administrator (``hidden`` or ``active``)."""
        try:
            target = ReviewStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown review status: {status}"]}) from None

        if target == ReviewStatus.PENDING:
            raise ValidationError({"status": ["Reviews cannot be moved back to pending"]})
        if target.value == self.status:
            return

        self._transition_to(target, hidden_by="Admin")

    def _transition_to(self, target: ReviewStatus, hidden_by: str) -> None:
        current = ReviewStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        if target == ReviewStatus.HIDDEN:
            self.raise_(
                ReviewHidden(
                    review_id=str(self.id),
                    movie_id=str(self.movie_id),
                    hidden_by=hidden_by,
                    report_count=self.report_count,
                    hidden_at=now,
                )
            )
        else:
            self.raise_(
                ReviewRestored(
                    review_id=str(self.id),
                    movie_id=str(self.movie_id),
                    restored_at=now,
                )
            )
