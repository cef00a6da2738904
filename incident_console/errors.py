"""Exception hierarchy shared by the service clients and the API layer."""


class ConsoleError(Exception):
    """Base class for all incident console errors."""


class ConfigurationError(ConsoleError):
    """A required setting (URL, token, repository name...) is missing."""


class UpstreamError(ConsoleError):
    """A third-party API answered with a non-OK status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
