"""FastAPI dependencies: the review services and the calling actor.

Identity is resolved upstream and forwarded in the ``X-Actor-Id`` and
``X-Actor-Role`` headers; this layer only reads them.
"""

from dataclasses import dataclass

from fastapi import Header, HTTPException

from cinemavault.access import USER_ROLE
from cinemavault.domain import cinemavault
from cinemavault.lifecycle import ReviewLifecycle
from cinemavault.queries import ReviewQueries
from cinemavault.storage import RepositoryStore

_lifecycle_instance = None
_queries_instance = None


@dataclass(frozen=True)
class Actor:
    id: str
    role: str


def get_lifecycle() -> ReviewLifecycle:
    """Return the process-wide lifecycle facade (singleton).

    One instance means one lock table, which is what serializes concurrent
    requests for the same movie or review. The review routes are ``async``
    and never await while a lock is held, so on one event loop they already
    run one at a time; the locks matter when callers arrive on separate
    threads, such as one event loop per worker thread.
    """
    global _lifecycle_instance
    if _lifecycle_instance is None:
        _lifecycle_instance = ReviewLifecycle(RepositoryStore(cinemavault))
    return _lifecycle_instance


def get_queries() -> ReviewQueries:
    global _queries_instance
    if _queries_instance is None:
        _queries_instance = ReviewQueries(RepositoryStore(cinemavault))
    return _queries_instance


def reset_services() -> None:
    """Drop the singletons (useful for testing)."""
    global _lifecycle_instance, _queries_instance
    _lifecycle_instance = None
    _queries_instance = None


def current_actor(
    x_actor_id: str = Header(default=""),
    x_actor_role: str = Header(default=USER_ROLE),
) -> Actor:
    if not x_actor_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return Actor(id=x_actor_id, role=x_actor_role or USER_ROLE)
