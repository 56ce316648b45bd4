"""Error taxonomy shared by the ordering and subscriptions domains.

Domain-rule outcomes (``InvalidTransition``, ``Ineligible``) subclass Protean's
``ValidationError`` so they travel through command processing the same way as
any other aggregate validation failure. Infrastructure and access failures
(``UpstreamFailure``, ``AuthorizationFailure``, ``NotVisible``) are separate
exception classes so callers can never confuse them with a rule violation.

Every class carries a machine-readable ``kind`` used by the HTTP layer.
"""

from enum import Enum

from protean.exceptions import ValidationError


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    INELIGIBLE = "ineligible"
    UPSTREAM_FAILURE = "upstream_failure"
    UNAUTHORIZED = "unauthorized"


class InvalidTransition(ValidationError):
    """The requested state change is not reachable from the current state."""

    kind = ErrorKind.INVALID_TRANSITION

    def __init__(self, current_status: str, message: str, field: str = "status") -> None:
        super().__init__({field: [message]})
        self.current_status = current_status
        self.message = message

    def __str__(self) -> str:
        return self.message


class Ineligible(ValidationError):
    """A domain rule blocks the action although the state would allow it."""

    kind = ErrorKind.INELIGIBLE

    def __init__(self, reason: str, field: str = "eligibility") -> None:
        super().__init__({field: [reason]})
        self.reason = reason

    def __str__(self) -> str:
        return self.reason


class UpstreamFailure(Exception):
    """A collaborator (payment, carrier, billing, identity) errored or timed out.

    State is left unchanged; the caller may retry.
    """

    kind = ErrorKind.UPSTREAM_FAILURE
    retryable = True

    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator
        self.message = message


class AuthorizationFailure(Exception):
    """The caller does not hold the role required for the action."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotVisible(Exception):
    """The entity exists but the caller has no visibility into it.

    Reported exactly like a missing entity so existence is not leaked.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, identifier: str) -> None:
        self.message = f"{entity} {identifier} not found"
        super().__init__(self.message)
        self.entity = entity
        self.identifier = identifier
