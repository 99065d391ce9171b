import aiohttp


class SpinnakerResourceError(ValueError):
    """Base class for all errors raised by the Spinnaker resource client."""

    pass


class ConfigurationError(SpinnakerResourceError):
    """Raised when the resource configuration is missing or invalid."""

    pass


class AuthError(SpinnakerResourceError):
    """Raised when an authentication provider cannot build a client."""

    pass


class NotFoundError(SpinnakerResourceError):
    """Raised when an application, pipeline or execution does not exist."""

    pass


class RemoteAPIError(SpinnakerResourceError):
    """Raised when the Spinnaker API responds with an error status."""

    def __init__(self, status: int, body: str):
        super().__init__(
            f"spinnaker api responded with status code: {status}, body: {body}"
        )
        self.status = status
        self.body = body


class DecodeError(SpinnakerResourceError):
    """Raised when a response body does not have the expected shape."""

    pass


# Network level failures are passed through from aiohttp unchanged
TransportError = aiohttp.ClientError
