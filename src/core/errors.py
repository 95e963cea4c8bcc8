from http import HTTPStatus


def reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP {status_code}"


class GatewayError(Exception):
    """
    Base error surfaced to the caller as {"error": true, "reason": ...}
    """

    status_code: int = 500

    def __init__(self, reason: str, status_code: int | None = None):
        super().__init__(reason)
        self.reason = reason
        if status_code is not None:
            self.status_code = status_code


class Unauthorized(GatewayError):
    status_code = 401


class BadRequest(GatewayError):
    status_code = 400


class NotFound(GatewayError):
    status_code = 404


class ManifestParseError(GatewayError):
    status_code = 422


class UpstreamError(GatewayError):
    """
    Non-2xx answer (or unusable payload) from GitHub.
    Status and reason are relayed as received.
    """

    status_code = 502

    @classmethod
    def from_status(cls, status_code: int, reason: str | None = None) -> "UpstreamError":
        return cls(reason or reason_phrase(status_code), status_code=status_code)


class UpstreamTimeout(UpstreamError):
    status_code = 504
