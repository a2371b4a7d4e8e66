"""Shared BDD fixtures and step definitions for review scenarios."""

import pytest
from cinemavault.exceptions import CinemaVaultError, Conflict, Forbidden
from pytest_bdd import given, parsers, then


@pytest.fixture()
def outcome():
    """Container for the error a When step ran into."""
    return {"exc": None}


@pytest.fixture()
def reviews():
    """Review ids keyed by author."""
    return {}


@pytest.fixture()
def attempt(outcome):
    """Run a lifecycle call, recording a CinemaVault error instead of raising it."""

    def _attempt(fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except CinemaVaultError as exc:
            outcome["exc"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a movie in the catalogue", target_fixture="movie_id")
def movie_in_catalogue(make_movie):
    return make_movie(title="Rashomon", year=1950)


@given(parsers.cfparse('user "{user}" has rated the movie {rating:d}'))
def user_has_rated(lifecycle, movie_id, reviews, user, rating):
    reviews[user] = str(lifecycle.submit_review(user, movie_id, rating).id)


@given(parsers.cfparse('user "{reporter}" has reported the review by "{author}"'))
def user_has_reported(lifecycle, reviews, reporter, author):
    lifecycle.report_review(reporter, reviews[author])


@given(parsers.cfparse('{count:d} different users have reported the review by "{author}"'))
def many_have_reported(lifecycle, reviews, count, author):
    for n in range(count):
        lifecycle.report_review(f"reporter-{n}", reviews[author])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the movie has {count:d} ratings averaging {average:f}"))
def movie_ratings(store, movie_id, count, average):
    ratings = store.load_movie(movie_id).ratings
    assert ratings.count == count
    assert ratings.average == pytest.approx(average)


@then("the action is forbidden")
def action_forbidden(outcome):
    assert isinstance(outcome["exc"], Forbidden), f"Expected Forbidden, got {outcome['exc']!r}"


@then("the action conflicts")
def action_conflicts(outcome):
    assert isinstance(outcome["exc"], Conflict), f"Expected Conflict, got {outcome['exc']!r}"


@then(parsers.cfparse('the review by "{author}" is "{status}"'))
def review_status(store, reviews, author, status):
    assert store.load_review(reviews[author]).status == status


@then(parsers.cfparse('the review by "{author}" has {count:d} helpful votes'))
def review_helpful_votes(store, reviews, author, count):
    assert store.load_review(reviews[author]).helpful_count == count


@then(parsers.cfparse('the review by "{author}" has {count:d} reports'))
def review_reports(store, reviews, author, count):
    assert store.load_review(reviews[author]).report_count == count
