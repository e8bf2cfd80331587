class CertTrackerError(Exception):
    """Base class for errors raised by the certificate tracker."""


class BoardClientError(CertTrackerError):
    """A board fetch could not be completed."""


class TransportError(BoardClientError):
    """The board API could not be reached or answered with a non-2xx status."""


class UpstreamError(BoardClientError):
    """The board API answered, but reported errors in its payload."""


class ConfigurationError(BoardClientError):
    pass


class RequestValidationFailed(CertTrackerError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
