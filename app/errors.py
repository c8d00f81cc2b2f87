"""Error taxonomy shared by the service layer.

Services raise these; ``app.main`` maps each one to an HTTP status code.
"""


class HealthWalletError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HealthWalletError):
    """Missing or malformed input, including rejected uploads."""

    status_code = 400


class Unauthorized(HealthWalletError):
    """Missing or invalid credentials or bearer token."""

    status_code = 401


class NotFound(HealthWalletError):
    """Resource is absent or the caller may not see it.

    The two cases are reported identically so callers cannot test for
    other users' resources.
    """

    status_code = 404


class Conflict(HealthWalletError):
    """Duplicate user email or duplicate share grant."""

    status_code = 409
