"""Error taxonomy for review lifecycle and catalogue operations.

Field-level input problems are reported with Protean's ``ValidationError``,
like every other invariant in the domain model. The classes below cover the
outcomes that are not about malformed input.
"""


class CinemaVaultError(Exception):
    """Base exception for all CinemaVault service errors."""

    status_code = 500

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class NotFound(CinemaVaultError):
    """Movie or review does not exist."""

    status_code = 404


class Forbidden(CinemaVaultError):
    """Actor may not perform this action (self-vote, self-report, non-author, non-admin)."""

    status_code = 403


class Conflict(CinemaVaultError):
    """Action collides with existing state (duplicate report, duplicate review or movie)."""

    status_code = 409


class ConsistencyFailure(CinemaVaultError):
    """The paired review + movie aggregate write could not be completed as one unit."""

    status_code = 500
