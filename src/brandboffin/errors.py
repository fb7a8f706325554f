from typing import Any, Optional


class HttpError(Exception):
    """Failure carrying the status code and message the client should see.

    Raised once where the failure is detected and translated to a response
    by the request adapter only.
    """

    def __init__(self, message: str, status_code: int, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def to_body(self) -> dict:
        body = {"message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


def bad_request(message: str, details: Optional[Any] = None) -> HttpError:
    return HttpError(message, 400, details)


def upstream_error(message: str, details: Optional[Any] = None) -> HttpError:
    return HttpError(message, 500, details)
