"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Uniqueness violation.

    The response envelope has no conflict code, so when one is surfaced to a
    client it is reported as a bad request.
    """

    def __init__(self, message: str = "Conflict"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class UpstreamException(AppException):
    """Identity provider or tenant API failure.

    The status depends on the stage that failed: a rejected access token is a
    401, anything else a 500.
    """

    def __init__(self, message: str = "Upstream request failed", status_code: int = 500):
        """Initialize with the stage-specific status code."""
        super().__init__(message, status_code=status_code)
