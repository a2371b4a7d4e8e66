"""Reviews & Ratings bounded context for CinemaVault.

Owns the Movie aggregate (catalogue entry plus its rating distribution) and
the Review aggregate (one user's opinion of one movie, with helpful votes and
reports). Rating statistics are maintained by an explicit coordinator rather
than by persistence hooks.
"""

import structlog
from protean.domain import Domain

cinemavault = Domain(name="cinemavault")

logger = structlog.get_logger(__name__)
