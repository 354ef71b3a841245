"""Unified error codes and custom exceptions.

Every error carries a numeric code, a display message, an HTTP status, a
machine-readable ``kind`` and a ``context`` dict naming the offending
field or id. The API layer turns these into the standard envelope.

Error code ranges:
  1xxx: Auth/User
  2xxx: Account / points
  3xxx: Event
  4xxx: Bet
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    kind: str = "AppError"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.context = context or {}
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    kind = "UsernameExists"

    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    kind = "EmailExists"

    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    kind = "InvalidCredentials"

    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    kind = "AccountDisabled"

    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    kind = "InvalidRefreshToken"

    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class AdminRequiredError(AppError):
    kind = "AdminRequired"

    def __init__(self) -> None:
        super().__init__(1006, "Admin privileges required", 403)


class UserNotFoundError(AppError):
    kind = "UserNotFound"

    def __init__(self, user_id: str) -> None:
        super().__init__(1007, f"User not found: {user_id}", 404, {"user_id": user_id})


# --- 2xxx: Account ---

class InsufficientFundsError(AppError):
    kind = "InsufficientFunds"

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient points: required {required}, available {available}",
            422,
            {"required": required, "available": available},
        )


class AccountNotFoundError(AppError):
    kind = "AccountNotFound"

    def __init__(self, user_id: str) -> None:
        super().__init__(
            2002, f"Account not found for user {user_id}", 404, {"user_id": user_id}
        )


class InvalidAmountError(AppError):
    kind = "InvalidAmount"

    def __init__(self, amount: int) -> None:
        super().__init__(
            2003, f"Amount must be a positive integer, got {amount}", 422, {"amount": amount}
        )


# --- 3xxx: Event ---

class EventNotFoundError(AppError):
    kind = "EventNotFound"

    def __init__(self, event_id: str) -> None:
        super().__init__(3001, f"Event not found: {event_id}", 404, {"event_id": event_id})


class EventNotActiveError(AppError):
    kind = "EventNotActive"

    def __init__(self, event_id: str, status: str) -> None:
        super().__init__(
            3002,
            f"Event {event_id} is not active (status={status})",
            422,
            {"event_id": event_id, "status": status},
        )


class EventEndedError(AppError):
    kind = "EventEnded"

    def __init__(self, event_id: str) -> None:
        super().__init__(3003, f"Event has already ended: {event_id}", 422, {"event_id": event_id})


class OptionNotFoundError(AppError):
    kind = "OptionNotFound"

    def __init__(self, event_id: str, option_id: str) -> None:
        super().__init__(
            3004,
            f"Option {option_id} does not belong to event {event_id}",
            404,
            {"event_id": event_id, "option_id": option_id},
        )


class AlreadyResolvedError(AppError):
    kind = "AlreadyResolved"

    def __init__(self, event_id: str) -> None:
        super().__init__(3005, f"Event already resolved: {event_id}", 409, {"event_id": event_id})


class HasBetsError(AppError):
    kind = "HasBets"

    def __init__(self, event_id: str, bet_count: int) -> None:
        super().__init__(
            3006,
            f"Event {event_id} cannot be deleted: {bet_count} bet(s) placed",
            409,
            {"event_id": event_id, "bet_count": bet_count},
        )


class InvalidTransitionError(AppError):
    kind = "InvalidTransition"

    def __init__(self, detail: str, **context: Any) -> None:
        super().__init__(3007, f"Invalid transition: {detail}", 409, context)


# --- 4xxx: Bet ---

class DuplicateBetError(AppError):
    kind = "DuplicateBet"

    def __init__(self, user_id: str, event_id: str) -> None:
        super().__init__(
            4001,
            f"User {user_id} already has an active bet on event {event_id}",
            409,
            {"user_id": user_id, "event_id": event_id},
        )


# --- 9xxx: System ---

class StorageError(AppError):
    kind = "StorageError"

    def __init__(self, detail: str = "Storage operation failed") -> None:
        super().__init__(9002, detail, 500)


class InvalidInputError(AppError):
    """Malformed or missing input. Surfaces with kind ``ValidationError``."""

    kind = "ValidationError"

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(9003, f"Invalid {field}: {detail}", 422, {"field": field})
