"""Movie aggregate: a catalogue entry and the rating distribution it owns.

Administrators edit the descriptive fields. The ``ratings`` value object is
only ever replaced through ``apply_rating_delta`` (and ``restore_ratings`` when
a paired review write has to be undone), both driven by the rating
aggregator.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text, ValueObject

from cinemavault.domain import cinemavault
from cinemavault.movie.distribution import RatingDistribution
from cinemavault.movie.events import (
    MovieAdded,
    MovieDeactivated,
    MovieDetailsUpdated,
    MovieRatingChanged,
    MovieRatingRestored,
)

EARLIEST_YEAR = 1900
YEARS_AHEAD = 5

# Fields an administrator may change through update_details
EDITABLE_FIELDS = (
    "title",
    "genre",
    "director",
    "year",
    "synopsis",
    "cast",
    "crew",
    "poster",
    "duration",
    "language",
    "country",
    "budget",
    "status",
)

_JSON_FIELDS = {"genre", "cast", "crew"}


class MovieStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@cinemavault.aggregate
class Movie:
    """A movie in the catalogue."""

    # Descriptive fields
    title = String(required=True, max_length=200)
    genre = Text(required=True)  # JSON array of strings
    director = String(required=True, max_length=200)
    year = Integer(required=True)
    poster = String(max_length=500, default="")
    synopsis = Text(default="")
    cast = Text()  # JSON: [{name, role}]
    crew = Text()  # JSON: {producer, music, cinematography, writer}
    budget = String(max_length=100, default="")
    duration = Integer(default=0, min_value=0)  # minutes
    language = String(max_length=50, default="English")
    country = String(max_length=50, default="USA")

    status = String(choices=MovieStatus, default=MovieStatus.ACTIVE.value)
    added_by = Identifier()

    # Derived rating statistics
    ratings = ValueObject(RatingDistribution)

    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def year_must_be_plausible(self):
        latest = datetime.now(UTC).year + YEARS_AHEAD
        if self.year is not None and not EARLIEST_YEAR <= self.year <= latest:
            raise ValidationError({"year": [f"Year must be between {EARLIEST_YEAR} and {latest}"]})

    @invariant.post
    def genre_must_not_be_empty(self):
        if self.genre is not None and not json.loads(self.genre):
            raise ValidationError({"genre": ["At least one genre is required"]})

    @invariant.post
    def title_must_not_be_blank(self):
        if self.title is not None and not self.title.strip():
            raise ValidationError({"title": ["Movie title cannot be empty"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def add(
        cls,
        title,
        genre,
        director,
        year,
        added_by=None,
        synopsis=None,
        cast=None,
        crew=None,
        poster=None,
        duration=None,
        language=None,
        country=None,
        budget=None,
    ):
        """Add a new, active movie with an empty rating distribution."""
        now = datetime.now(UTC)
        genres = genre if isinstance(genre, list) else [genre]

        movie = cls(
            title=title.strip(),
            genre=json.dumps(genres),
            director=director.strip(),
            year=year,
            synopsis=(synopsis or "").strip(),
            cast=json.dumps(cast or []),
            crew=json.dumps(crew or {}),
            poster=poster or "",
            duration=duration or 0,
            language=language or "English",
            country=country or "USA",
            budget=budget or "",
            status=MovieStatus.ACTIVE.value,
            added_by=added_by,
            ratings=RatingDistribution.empty(),
            created_at=now,
            updated_at=now,
        )

        movie.raise_(
            MovieAdded(
                movie_id=str(movie.id),
                title=movie.title,
                year=year,
                added_by=str(added_by) if added_by else None,
                added_at=now,
            )
        )
        return movie

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply a partial update of descriptive fields. ``ratings`` is not editable."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError({"fields": [f"Cannot update {', '.join(sorted(unknown))}"]})

        statuses = {status.value for status in MovieStatus}
        if changes.get("status") is not None and changes["status"] not in statuses:
            raise ValidationError({"status": [f"Status must be one of {', '.join(sorted(statuses))}"]})

        changed = [name for name in EDITABLE_FIELDS if changes.get(name) is not None]
        if not changed:
            return

        now = datetime.now(UTC)
        with atomic_change(self):
            for field_name in changed:
                value = changes[field_name]
                if field_name == "genre" and not isinstance(value, list):
                    value = [value]
                if field_name in _JSON_FIELDS:
                    value = json.dumps(value)
                setattr(self, field_name, value)
            self.updated_at = now

        self.raise_(
            MovieDetailsUpdated(
                movie_id=str(self.id),
                changed_fields=",".join(changed),
                updated_at=now,
            )
        )

    def deactivate(self):
        """Soft delete: the movie stays in storage with status ``inactive``."""
        now = datetime.now(UTC)
        self.status = MovieStatus.INACTIVE.value
        self.updated_at = now
        self.raise_(MovieDeactivated(movie_id=str(self.id), deactivated_at=now))

    @property
    def genres(self) -> list[str]:
        return json.loads(self.genre) if self.genre else []

    # -------------------------------------------------------------------
    # Rating statistics (driven by the rating aggregator only)
    # -------------------------------------------------------------------
    def apply_rating_delta(self, old_rating=None, new_rating=None) -> RatingDistribution:
        current = self.ratings or RatingDistribution.empty()
        updated = current.apply_delta(old_rating, new_rating)

        now = datetime.now(UTC)
        self.ratings = updated
        self.updated_at = now

        self.raise_(
            MovieRatingChanged(
                movie_id=str(self.id),
                old_rating=old_rating or None,
                new_rating=new_rating or None,
                count=updated.count,
                average=updated.average,
                changed_at=now,
            )
        )
        return updated

    def restore_ratings(self, distribution: RatingDistribution) -> None:
        now = datetime.now(UTC)
        self.ratings = distribution
        self.updated_at = now

        self.raise_(
            MovieRatingRestored(
                movie_id=str(self.id),
                count=distribution.count,
                average=distribution.average,
                restored_at=now,
            )
        )
