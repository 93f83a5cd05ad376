"""
Error taxonomy for tournament operations.

Each error carries the HTTP status the route layer responds with. Messages are
safe to show to clients.
"""

from __future__ import annotations


# Shared by every token failure so callers cannot probe which tokens are valid.
INVALID_TOKEN_MESSAGE = "A valid admin token is required."


class TournamentError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgument(TournamentError):
    status_code = 400
    default_message = "Invalid tournament ID. It must be a valid UUID."


class Unauthenticated(TournamentError):
    status_code = 401
    default_message = INVALID_TOKEN_MESSAGE


class Unauthorized(TournamentError):
    status_code = 401
    default_message = INVALID_TOKEN_MESSAGE


class NotFound(TournamentError):
    status_code = 404
    default_message = "Tournament not found."


class Internal(TournamentError):
    status_code = 500


class StoreError(Exception):
    """Raised by store adapters when the backing store fails."""
