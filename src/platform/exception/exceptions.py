from enum import StrEnum


class ErrorKind(StrEnum):
    """Stable machine-readable error kinds returned to API clients."""

    DOMAIN_ERROR = 'domain_error'
    PAYMENT_VERIFICATION = 'payment_verification'
    AUTHENTICATION = 'authentication'
    AUTHORIZATION = 'authorization'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    CAPACITY_EXCEEDED = 'capacity_exceeded'
    ALREADY_HOLDS_TICKET = 'already_holds_ticket'
    ALREADY_USED = 'already_used'
    WRONG_EVENT = 'wrong_event'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'
    DUPLICATE_REQUEST = 'duplicate_request'
    RATE_LIMITED = 'rate_limited'
    TRANSIENT_STORE = 'transient_store'
    TRANSIENT_GATEWAY = 'transient_gateway'
    PERSISTENCE = 'persistence'
    COMPENSATION_FAILURE = 'compensation_failure'
    INTERNAL = 'internal'


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    kind = ErrorKind.DOMAIN_ERROR

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class PaymentVerificationError(CustomBaseError):
    kind = ErrorKind.PAYMENT_VERIFICATION

    def __init__(self, message: str) -> None:
        super().__init__(message, 402)


class AuthenticationError(CustomBaseError):
    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class AuthorizationError(CustomBaseError):
    kind = ErrorKind.AUTHORIZATION

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    kind = ErrorKind.CONFLICT

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class CapacityExceededError(ConflictError):
    kind = ErrorKind.CAPACITY_EXCEEDED


class AlreadyHoldsTicketError(ConflictError):
    kind = ErrorKind.ALREADY_HOLDS_TICKET


class AlreadyUsedError(ConflictError):
    kind = ErrorKind.ALREADY_USED


class WrongEventError(ConflictError):
    kind = ErrorKind.WRONG_EVENT


class TicketCancelledError(ConflictError):
    kind = ErrorKind.CANCELLED


class TicketRefundedError(ConflictError):
    kind = ErrorKind.REFUNDED


class DuplicateRequestError(CustomBaseError):
    """Replay of an already-completed request; callers resolve it to the original result."""

    kind = ErrorKind.DUPLICATE_REQUEST

    def __init__(self, message: str, *, payment_reference: str) -> None:
        super().__init__(message, 200)
        self.payment_reference = payment_reference


class RateLimitedError(CustomBaseError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, *, retry_after_seconds: int = 60) -> None:
        super().__init__(message, 429)
        self.retry_after_seconds = retry_after_seconds


class TransientStoreError(CustomBaseError):
    kind = ErrorKind.TRANSIENT_STORE

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class TransientGatewayError(CustomBaseError):
    kind = ErrorKind.TRANSIENT_GATEWAY

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class PersistenceError(CustomBaseError):
    """The store rejected a write for a reason a retry will not fix."""

    kind = ErrorKind.PERSISTENCE

    def __init__(self, message: str) -> None:
        super().__init__(message, 500)


class CompensationFailure(CustomBaseError):
    """A refund attempt failed; an operational signal for reconciliation, never user-facing."""

    kind = ErrorKind.COMPENSATION_FAILURE

    def __init__(self, message: str, *, payment_reference: str, reason: str) -> None:
        super().__init__(message, 500)
        self.payment_reference = payment_reference
        self.reason = reason
