"""Application tests for the movie catalogue command handler."""

import json

import pytest
from cinemavault.exceptions import Conflict, Forbidden, NotFound
from cinemavault.movie.management import AddMovie, DeactivateMovie, UpdateMovieDetails
from cinemavault.movie.movie import Movie
from protean import current_domain
from protean.exceptions import ValidationError


def _add_movie(**overrides):
    defaults = {
        "actor_id": "admin-1",
        "actor_role": "admin",
        "title": "Seven Samurai",
        "genre": json.dumps(["Action", "Drama"]),
        "director": "Akira Kurosawa",
        "year": 1954,
    }
    defaults.update(overrides)
    return current_domain.process(AddMovie(**defaults), asynchronous=False)


class TestAddMovie:
    def test_persists_with_empty_distribution(self):
        movie_id = _add_movie(
            cast=json.dumps([{"name": "Toshiro Mifune", "role": "Kikuchiyo"}]),
            crew=json.dumps({"music": "Fumio Hayasaka"}),
            duration=207,
            language="Japanese",
            country="Japan",
        )

        movie = current_domain.repository_for(Movie).get(movie_id)
        assert movie.title == "Seven Samurai"
        assert movie.genres == ["Action", "Drama"]
        assert json.loads(movie.cast)[0]["name"] == "Toshiro Mifune"
        assert movie.language == "Japanese"
        assert movie.added_by == "admin-1"
        assert movie.ratings.count == 0

    def test_non_admin_forbidden(self):
        with pytest.raises(Forbidden):
            _add_movie(actor_role="user")

    def test_duplicate_title_and_year_conflicts_case_insensitively(self):
        _add_movie()
        with pytest.raises(Conflict):
            _add_movie(title="seven samurai")

    def test_duplicate_detected_among_more_than_a_hundred_same_year_movies(self):
        repo = current_domain.repository_for(Movie)
        for n in range(105):
            repo.add(Movie.add(title=f"Film {n}", genre=["Drama"], director="Various", year=1954))

        with pytest.raises(Conflict):
            _add_movie(title="film 104")

    def test_same_title_different_year_allowed(self):
        _add_movie()
        assert _add_movie(year=1960)

    def test_invalid_year_rejected(self):
        with pytest.raises(ValidationError):
            _add_movie(year=1850)


class TestUpdateMovieDetails:
    def test_partial_update(self):
        movie_id = _add_movie()
        current_domain.process(
            UpdateMovieDetails(movie_id=movie_id, actor_role="admin", synopsis="Farmers hire seven ronin."),
            asynchronous=False,
        )
        movie = current_domain.repository_for(Movie).get(movie_id)
        assert movie.synopsis == "Farmers hire seven ronin."
        assert movie.director == "Akira Kurosawa"

    def test_does_not_touch_ratings(self, lifecycle, store):
        movie_id = _add_movie()
        lifecycle.submit_review("user-1", movie_id, 5)

        current_domain.process(
            UpdateMovieDetails(movie_id=movie_id, actor_role="admin", title="Shichinin no Samurai"),
            asynchronous=False,
        )
        assert store.load_movie(movie_id).ratings.five == 1

    def test_unknown_movie(self):
        with pytest.raises(NotFound):
            current_domain.process(
                UpdateMovieDetails(movie_id="missing", actor_role="admin", title="X"),
                asynchronous=False,
            )

    def test_non_admin_forbidden(self):
        movie_id = _add_movie()
        with pytest.raises(Forbidden):
            current_domain.process(
                UpdateMovieDetails(movie_id=movie_id, actor_role="user", title="X"),
                asynchronous=False,
            )


class TestDeactivateMovie:
    def test_soft_delete(self):
        movie_id = _add_movie()
        current_domain.process(DeactivateMovie(movie_id=movie_id, actor_role="admin"), asynchronous=False)
        assert current_domain.repository_for(Movie).get(movie_id).status == "inactive"

    def test_non_admin_forbidden(self):
        movie_id = _add_movie()
        with pytest.raises(Forbidden):
            current_domain.process(DeactivateMovie(movie_id=movie_id, actor_role="user"), asynchronous=False)
