"""
Error taxonomy for recommendation requests.

Per-item failures are not exceptions: they travel as data in
``BatchResult.failures``. Everything here aborts the whole request.
"""
from typing import Optional


class RecommendationServiceError(Exception):
    """Base class for errors crossing the recommendation boundary."""

    status_code = 500
    error_code = "recommendation_error"

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def to_dict(self) -> dict:
        return {"error": self.error_code, "message": self.message}


class AuthenticationError(RecommendationServiceError):
    """No valid session, or the scoring service refused our credentials."""

    status_code = 401
    error_code = "authentication_required"


class TransportError(RecommendationServiceError):
    """No usable response was received from the scoring service."""

    status_code = 502
    error_code = "scoring_service_unavailable"


class RequestRejectedError(RecommendationServiceError):
    """The scoring service answered but rejected the request."""

    status_code = 422
    error_code = "request_rejected"


class ValidationError(RecommendationServiceError):
    """Malformed request, e.g. an empty id set."""

    status_code = 400
    error_code = "invalid_request"
