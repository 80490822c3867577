"""Domain exceptions for notifyhub.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any

from notifyhub.domain.enums import RedemptionFailure


class NotifyHubException(Exception):
    """Base exception for all notifyhub application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(NotifyHubException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(NotifyHubException):
    """Raised when a credential is missing, malformed, unknown, expired or over quota.

    Callers must not learn which of those applied; keep the message generic.
    """

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(NotifyHubException):
    """Raised when an authenticated caller lacks a scope or resource permission."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'topic', 'system_token').
            action: Optional action or scope that was required (e.g. 'admin', 'relay:notify').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class MissingScopeException(AuthorizationException):
    """Raised when a system access token lacks a required scope."""

    def __init__(self, scope: str) -> None:
        super().__init__(
            message=f"System access token missing required scope: {scope}",
        )
        self.details = {"scope": scope}


class ResourceNotFoundException(NotifyHubException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'topic', 'system_token').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidStateTransitionException(NotifyHubException):
    """Raised when a lifecycle transition is attempted from a terminal state."""

    def __init__(self, entity: str, entity_id: str, current_status: str) -> None:
        super().__init__(
            f"{entity} {entity_id} is already {current_status}",
            "INVALID_STATE_TRANSITION",
            {"entity": entity, "entity_id": entity_id, "status": current_status},
        )


class QuotaResetInProgressException(NotifyHubException):
    """Raised when a manual quota reset is requested while a run is in progress."""

    def __init__(self) -> None:
        super().__init__(
            "A quota reset run is already in progress",
            "QUOTA_RESET_IN_PROGRESS",
        )


_REDEMPTION_MESSAGES: dict[RedemptionFailure, str] = {
    RedemptionFailure.INVALID_CODE: "Invalid invite code",
    RedemptionFailure.EXPIRED: "Invite code has expired",
    RedemptionFailure.EXHAUSTED: "Invite code has reached maximum uses",
    RedemptionFailure.ALREADY_SATISFIED: "You already have this access to the resource",
}


class InviteRedemptionException(NotifyHubException):
    """Raised at the HTTP boundary when an invite redemption fails.

    error_code is INVITE_<REASON> so callers get a precise, stable error.
    """

    def __init__(self, reason: RedemptionFailure) -> None:
        self.reason = reason
        super().__init__(
            _REDEMPTION_MESSAGES[reason],
            f"INVITE_{reason.name}",
            {"reason": reason.value},
        )


class SqlNotConfiguredException(NotifyHubException):
    """Raised when an operation requires the database but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
