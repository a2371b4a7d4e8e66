"""Domain events for the Movie aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from cinemavault.domain import cinemavault


@cinemavault.event(part_of="Movie")
class MovieAdded:
    """An administrator added a movie to the catalogue."""

    __version__ = 1

    movie_id = Identifier(required=True)
    title = String(required=True)
    year = Integer(required=True)
    added_by = Identifier()
    added_at = DateTime(required=True)


@cinemavault.event(part_of="Movie")
class MovieDetailsUpdated:
    """Descriptive fields of a movie changed. Ratings are never part of this."""

    __version__ = 1

    movie_id = Identifier(required=True)
    changed_fields = String(required=True)  # comma-separated field names
    updated_at = DateTime(required=True)


@cinemavault.event(part_of="Movie")
class MovieDeactivated:
    """A movie was soft-deleted from the catalogue."""

    __version__ = 1

    movie_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@cinemavault.event(part_of="Movie")
class MovieRatingChanged:
    """A review lifecycle transition changed the movie's rating distribution."""

    __version__ = 1

    movie_id = Identifier(required=True)
    old_rating = Integer()
    new_rating = Integer()
    count = Integer(required=True)
    average = Float(required=True)
    changed_at = DateTime(required=True)


@cinemavault.event(part_of="Movie")
class MovieRatingRestored:
    """A rating change was rolled back because its paired review write failed."""

    __version__ = 1

    movie_id = Identifier(required=True)
    count = Integer(required=True)
    average = Float(required=True)
    restored_at = DateTime(required=True)
