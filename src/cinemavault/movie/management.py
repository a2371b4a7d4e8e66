"""Movie catalogue management: administrator commands and handler.

These are ordinary writes: none of them touches a movie's rating
distribution, so they run through Protean's command processing like any other
catalogue change.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from cinemavault.access import require_admin
from cinemavault.domain import cinemavault
from cinemavault.exceptions import Conflict, NotFound
from cinemavault.movie.movie import Movie

logger = structlog.get_logger(__name__)


@cinemavault.command(part_of="Movie")
class AddMovie:
    actor_id = Identifier()
    actor_role = String(required=True)
    title = String(required=True, max_length=200)
    genre = Text(required=True)  # JSON array of strings
    director = String(required=True, max_length=200)
    year = Integer(required=True)
    synopsis = Text()
    cast = Text()  # JSON: [{name, role}]
    crew = Text()  # JSON object
    poster = String(max_length=500)
    duration = Integer()
    language = String(max_length=50)
    country = String(max_length=50)
    budget = String(max_length=100)


@cinemavault.command(part_of="Movie")
class UpdateMovieDetails:
    movie_id = Identifier(required=True)
    actor_role = String(required=True)
    title = String(max_length=200)
    genre = Text()  # JSON array of strings
    director = String(max_length=200)
    year = Integer()
    synopsis = Text()
    cast = Text()
    crew = Text()
    poster = String(max_length=500)
    duration = Integer()
    language = String(max_length=50)
    country = String(max_length=50)
    budget = String(max_length=100)
    status = String(max_length=20)


@cinemavault.command(part_of="Movie")
class DeactivateMovie:
    movie_id = Identifier(required=True)
    actor_role = String(required=True)


def _load_movie(movie_id) -> Movie:
    try:
        return current_domain.repository_for(Movie).get(movie_id)
    except ObjectNotFoundError as exc:
        raise NotFound("Movie not found", movie_id=str(movie_id)) from exc


def _decode(value):
    return json.loads(value) if value else None


@cinemavault.command_handler(part_of=Movie)
class ManageMovieHandler:
    @handle(AddMovie)
    def add_movie(self, command):
        require_admin(command.actor_role, "add movies")

        repo = current_domain.repository_for(Movie)
        same_year = repo._dao.query.filter(year=command.year).limit(None).all().items
        if any(m.title.casefold() == command.title.strip().casefold() for m in same_year):
            raise Conflict("Movie with this title and year already exists", title=command.title, year=command.year)

        movie = Movie.add(
            title=command.title,
            genre=_decode(command.genre),
            director=command.director,
            year=command.year,
            added_by=command.actor_id,
            synopsis=command.synopsis,
            cast=_decode(command.cast),
            crew=_decode(command.crew),
            poster=command.poster,
            duration=command.duration,
            language=command.language,
            country=command.country,
            budget=command.budget,
        )
        repo.add(movie)

        logger.info("movie_added", movie_id=str(movie.id), title=movie.title, year=movie.year)
        return str(movie.id)

    @handle(UpdateMovieDetails)
    def update_movie_details(self, command):
        require_admin(command.actor_role, "update movies")

        movie = _load_movie(command.movie_id)
        movie.update_details(
            title=command.title,
            genre=_decode(command.genre),
            director=command.director,
            year=command.year,
            synopsis=command.synopsis,
            cast=_decode(command.cast),
            crew=_decode(command.crew),
            poster=command.poster,
            duration=command.duration,
            language=command.language,
            country=command.country,
            budget=command.budget,
            status=command.status,
        )
        current_domain.repository_for(Movie).add(movie)

    @handle(DeactivateMovie)
    def deactivate_movie(self, command):
        require_admin(command.actor_role, "delete movies")

        movie = _load_movie(command.movie_id)
        movie.deactivate()
        current_domain.repository_for(Movie).add(movie)

        logger.info("movie_deactivated", movie_id=str(movie.id))
