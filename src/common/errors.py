"""
Error taxonomy shared by every signal-network service.

Services raise these; the API layer renders them as ``{"error", "hint"}``
bodies with the matching HTTP status code.
"""


class SignalNetworkError(Exception):
    """Base exception for domain errors."""

    status_code: int = 500
    error_type: str = "internal"

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_dict(self) -> dict[str, str]:
        body = {"error": self.message}
        if self.hint:
            body["hint"] = self.hint
        return body


class InvalidArgument(SignalNetworkError):
    """Malformed or missing fields."""

    status_code = 400
    error_type = "invalid_argument"


class Unauthenticated(SignalNetworkError):
    """Missing or malformed signature proof."""

    status_code = 401
    error_type = "unauthenticated"


class PaymentRequired(SignalNetworkError):
    """Payment missing or rejected by the settlement relay."""

    status_code = 402
    error_type = "payment_required"

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        requirements: dict | None = None,
    ):
        super().__init__(message, hint)
        self.requirements = requirements


class Forbidden(SignalNetworkError):
    """Authenticated but not entitled (wrong claimant, wrong author)."""

    status_code = 403
    error_type = "forbidden"


class NotFound(SignalNetworkError):
    """Unknown id, slug or date."""

    status_code = 404
    error_type = "not_found"


class Conflict(SignalNetworkError):
    """Duplicate claim, duplicate inscription or reused transaction."""

    status_code = 409
    error_type = "conflict"


class RateLimited(SignalNetworkError):
    """Caller exceeded a rate limit; carries the exact retry-after."""

    status_code = 429
    error_type = "rate_limited"

    def __init__(self, message: str, retry_after_seconds: int, hint: str | None = None):
        super().__init__(message, hint)
        self.retry_after_seconds = retry_after_seconds


class UpstreamFailure(SignalNetworkError):
    """An external collaborator (payment relay) failed; retryable."""

    status_code = 502
    error_type = "upstream_failure"
