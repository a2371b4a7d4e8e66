"""Application tests for movie and review read paths and the repository store."""

import pytest
from cinemavault.exceptions import Conflict, Forbidden, NotFound
from cinemavault.queries import ReviewQueries
from cinemavault.review.review import Review
from protean.exceptions import ValidationError


@pytest.fixture()
def queries(store):
    return ReviewQueries(store)


class TestGetMovie:
    def test_active_movie(self, queries, make_movie):
        assert queries.get_movie(make_movie()).title == "The Third Man"

    def test_inactive_movie_is_not_found(self, store, queries, make_movie):
        movie = store.load_movie(make_movie())
        movie.deactivate()
        store.save_movie(movie)
        with pytest.raises(NotFound):
            queries.get_movie(movie.id)


class TestGetReview:
    def test_active_review(self, lifecycle, queries, make_movie):
        review = lifecycle.submit_review("user-1", make_movie(), 4)
        assert queries.get_review(review.id).score == 4

    def test_hidden_review_is_not_found(self, lifecycle, queries, make_movie):
        review = lifecycle.submit_review("user-1", make_movie(), 4)
        lifecycle.set_review_status("admin", review.id, "hidden")
        with pytest.raises(NotFound):
            queries.get_review(review.id)


class TestReviewsForMovie:
    def test_only_active_reviews_newest_first(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        first = lifecycle.submit_review("user-1", movie_id, 4)
        hidden = lifecycle.submit_review("user-2", movie_id, 2)
        last = lifecycle.submit_review("user-3", movie_id, 5)
        lifecycle.set_review_status("admin", hidden.id, "hidden")

        page = queries.reviews_for_movie(movie_id)

        assert [str(r.id) for r in page.reviews] == [str(last.id), str(first.id)]
        assert page.pagination == {"current": 1, "pages": 1, "total": 2}

    def test_pagination(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        for n in range(12):
            lifecycle.submit_review(f"user-{n}", movie_id, 3)

        second = queries.reviews_for_movie(movie_id, page=2)

        assert len(second.reviews) == 2
        assert second.pagination == {"current": 2, "pages": 2, "total": 12}

    def test_unknown_movie(self, queries):
        with pytest.raises(NotFound):
            queries.reviews_for_movie("missing")

    def test_listing_covers_more_than_a_hundred_reviews(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        submitted = {str(lifecycle.submit_review(f"user-{n}", movie_id, 1 + n % 5).id) for n in range(120)}

        first = queries.reviews_for_movie(movie_id, limit=50)
        listed = {str(r.id) for p in (1, 2, 3) for r in queries.reviews_for_movie(movie_id, page=p, limit=50).reviews}

        assert first.pagination == {"current": 1, "pages": 3, "total": 120}
        assert listed == submitted


class TestMovieReviewOrdering:
    def test_most_helpful_first(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        quiet = lifecycle.submit_review("user-1", movie_id, 4)
        popular = lifecycle.submit_review("user-2", movie_id, 4)
        liked = lifecycle.submit_review("user-3", movie_id, 4)
        for voter in ("voter-1", "voter-2", "voter-3"):
            lifecycle.toggle_helpful(voter, popular.id)
        lifecycle.toggle_helpful("voter-1", liked.id)

        page = queries.reviews_for_movie(movie_id, sort_by="helpful_count")

        assert [str(r.id) for r in page.reviews] == [str(popular.id), str(liked.id), str(quiet.id)]

    def test_lowest_rating_first(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        lifecycle.submit_review("user-1", movie_id, 3)
        lifecycle.submit_review("user-2", movie_id, 5)
        lifecycle.submit_review("user-3", movie_id, 1)

        page = queries.reviews_for_movie(movie_id, sort_by="rating", sort_order="asc")

        assert [r.score for r in page.reviews] == [1, 3, 5]

    def test_highest_rating_first(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        for n, rating in enumerate((2, 5, 4)):
            lifecycle.submit_review(f"user-{n}", movie_id, rating)

        page = queries.reviews_for_movie(movie_id, sort_by="rating")

        assert [r.score for r in page.reviews] == [5, 4, 2]

    def test_unknown_sort_field_rejected(self, queries, make_movie):
        with pytest.raises(ValidationError) as exc_info:
            queries.reviews_for_movie(make_movie(), sort_by="user_id")
        assert "sort_by" in exc_info.value.messages

    def test_unknown_sort_order_rejected(self, queries, make_movie):
        with pytest.raises(ValidationError):
            queries.reviews_for_movie(make_movie(), sort_order="sideways")


class TestReviewsByUser:
    def test_excludes_hidden(self, lifecycle, queries, make_movie):
        kept = lifecycle.submit_review("user-1", make_movie(title="Ikiru", year=1952), 5)
        hidden = lifecycle.submit_review("user-1", make_movie(title="Ran", year=1985), 4)
        lifecycle.set_review_status("admin", hidden.id, "hidden")

        page = queries.reviews_by_user("user-1")

        assert [str(r.id) for r in page.reviews] == [str(kept.id)]


class TestAllReviews:
    def test_admin_filters_by_status(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        lifecycle.submit_review("user-1", movie_id, 5)
        hidden = lifecycle.submit_review("user-2", movie_id, 1)
        lifecycle.set_review_status("admin", hidden.id, "hidden")

        assert queries.all_reviews("admin").total == 2
        assert [str(r.id) for r in queries.all_reviews("admin", status="hidden").reviews] == [str(hidden.id)]

    def test_non_admin_forbidden(self, queries):
        with pytest.raises(Forbidden):
            queries.all_reviews("user")

    def test_totals_cover_more_than_a_hundred_reviews(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        for n in range(110):
            lifecycle.submit_review(f"user-{n}", movie_id, 4)

        assert queries.all_reviews("admin").total == 110
        assert queries.all_reviews("admin", status="active").pages == 6


class TestMovieRatings:
    def test_current_distribution(self, lifecycle, queries, make_movie):
        movie_id = make_movie()
        lifecycle.submit_review("user-1", movie_id, 3)
        lifecycle.submit_review("user-2", movie_id, 5)
        ratings = queries.movie_ratings(movie_id)
        assert ratings.count == 2
        assert ratings.average == 4.0


class TestRepositoryStore:
    def test_find_review_returns_none_when_absent(self, store, make_movie):
        assert store.find_review("user-1", make_movie()) is None

    def test_two_reviews_for_one_pair_conflict(self, store, make_movie):
        movie_id = make_movie()
        store.save_review(Review.submit(movie_id=movie_id, user_id="user-1", rating=3))
        store.save_review(Review.submit(movie_id=movie_id, user_id="user-1", rating=4))
        with pytest.raises(Conflict):
            store.find_review("user-1", movie_id)

    def test_load_missing_review(self, store):
        with pytest.raises(NotFound):
            store.load_review("missing")

    def test_delete_review(self, store, make_movie):
        review = Review.submit(movie_id=make_movie(), user_id="user-1", rating=3)
        store.save_review(review)
        store.delete_review(review.id)
        with pytest.raises(NotFound):
            store.load_review(review.id)
