"""Domain events for the Review aggregate.

Events are immutable facts about a review's state changes. The movie's
rating distribution is not maintained from these events; it is updated
explicitly by the rating aggregator in the same operation.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from cinemavault.domain import cinemavault


@cinemavault.event(part_of="Review")
class ReviewSubmitted:
    """A user reviewed a movie for the first time."""

    __version__ = 1

    review_id = Identifier(required=True)
    movie_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String()
    spoiler_warning = Boolean(default=False)
    submitted_at = DateTime(required=True)


@cinemavault.event(part_of="Review")
class ReviewEdited:
    """A user changed the rating or text of their review."""

    __version__ = 1

    review_id = Identifier(required=True)
    movie_id = Identifier(required=True)
    previous_rating = Integer(required=True)
    rating = Integer(required=True)
    edited_at = DateTime(required=True)


@cinemavault.event(part_of="Review")
class HelpfulVoteToggled:
    """A user marked or unmarked a review as helpful."""

    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    is_helpful = Boolean(required=True)
    helpful_count = Integer(required=True)
    toggled_at = DateTime(required=True)


@cinemavault.event(part_of="Review")
class ReviewReported:
    """A user reported a review for moderation."""

    __version__ = 1

    review_id = Identifier(required=True)
    reporter_id = Identifier(required=True)
    reason = String()
    report_count = Integer(required=True)
    reported_at = DateTime(required=True)


@cinemavault.event(part_of="Review")
class ReviewHidden:
    """A review was hidden, automatically by reports or by an administrator."""

    __version__ = 1

    review_id = Identifier(required=True)
    movie_id = Identifier(required=True)
    hidden_by = String(required=True)  # "System" or "Admin"
    report_count = Integer(required=True)
    hidden_at = DateTime(required=True)


@cinemavault.event(part_of="Review")
class ReviewRestored:
    """An administrator made a hidden review visible again."""

    __version__ = 1

    review_id = Identifier(required=True)
    movie_id = Identifier(required=True)
    restored_at = DateTime(required=True)
