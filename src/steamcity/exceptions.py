"""
SteamCity exceptions module.

Contains exception classes shared by the navigation core, the API client
and the terminal UI.
"""


class InvalidRouteError(ValueError):
    """Exception raised when a fragment does not name one of the known views."""

    def __init__(self, fragment: str) -> None:
        self.fragment = fragment
        super().__init__(f"Invalid route: {fragment!r}")


class ApiError(Exception):
    """Exception raised when an API request fails.

    ``status_code`` is None for transport failures (connection refused,
    timeout, undecodable body).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SurfaceNotFoundError(LookupError):
    """Exception raised when a surface has no widget in the host."""

    pass
