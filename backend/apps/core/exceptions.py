"""
Exception taxonomy shared by the membership service.

Service code raises these; API layers translate them into HTTP responses
with generic messages. Internal detail belongs in the log, not the response.
"""


class MembershipServiceError(Exception):
    """Base exception for membership service operations."""

    pass


class ValidationError(MembershipServiceError):
    """Input failed validation (bad email, bad row, missing field)."""

    pass


class AuthenticationError(MembershipServiceError):
    """Credential missing, unknown, inactive or expired."""

    pass


class RateLimitExceeded(MembershipServiceError):
    """Raised when a rate limit is exceeded."""

    def __init__(self, message: str, retry_after: int, result: object | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after
        self.result = result


class NotFoundError(MembershipServiceError):
    """Requested entity does not exist."""

    pass


class PersistenceError(MembershipServiceError):
    """Storage unavailable or an integrity invariant was violated."""

    pass


class CryptoError(MembershipServiceError):
    """Encryption or decryption failed (tampering, wrong key, malformed input)."""

    pass
