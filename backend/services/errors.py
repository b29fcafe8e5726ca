class ResolutionError(Exception):
    """Terminal failure of an audio resolution, mapped to one HTTP status."""

    status_code = 404
    message = "Could not resolve audio"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.message)


class InputError(ResolutionError):
    status_code = 400
    message = "Missing id or title"


class NotFoundError(ResolutionError):
    message = "Could not resolve YouTube ID"


class ExtractionError(ResolutionError):
    message = "No playable audio found"


class SearchServiceError(Exception):
    """YouTube search was unreachable or answered with something unusable."""


class PersistenceError(Exception):
    """A catalog read or write failed."""
