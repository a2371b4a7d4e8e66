import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def cinemavault_bed():
    from cinemavault.domain import cinemavault

    bed = DomainFixture(cinemavault)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(cinemavault_bed):
    """Run every test inside the domain context and wipe stored data afterwards."""
    with cinemavault_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _fresh_services():
    from cinemavault.api.dependencies import reset_services

    reset_services()
    yield
    reset_services()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def store():
    from cinemavault.domain import cinemavault
    from cinemavault.storage import RepositoryStore

    return RepositoryStore(cinemavault)


@pytest.fixture()
def lifecycle(store):
    from cinemavault.lifecycle import ReviewLifecycle

    return ReviewLifecycle(store, threshold=5)


@pytest.fixture()
def make_movie(store):
    """Factory that persists a movie with an empty distribution and returns its id."""
    from cinemavault.movie.movie import Movie

    def _make(title="The Third Man", year=1949, **overrides):
        defaults = {
            "genre": ["Film-Noir", "Thriller"],
            "director": "Carol Reed",
            "added_by": "admin-1",
        }
        defaults.update(overrides)
        movie = Movie.add(title=title, year=year, **defaults)
        store.save_movie(movie)
        return str(movie.id)

    return _make
