"""Errors raised by the mobile order client and the order lifecycle."""

from __future__ import annotations

from typing import Optional


class MobileOrderError(RuntimeError):
    pass


class CredentialsMissingError(MobileOrderError):
    def __init__(self, message: str = "Cannot login: No credentials provided") -> None:
        super().__init__(message)


class NotAuthenticatedError(MobileOrderError):
    def __init__(self, message: str = "Client is not logged in; call login() first") -> None:
        super().__init__(message)


class HandshakeError(MobileOrderError):
    """A login handshake step failed; ``step`` names the state it was leaving."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"Login failed at step '{step}': {message}")
        self.step = step


class CsrfExtractionError(HandshakeError):
    pass


class SamlExtractionError(HandshakeError):
    pass


class TempTokenMissingError(HandshakeError):
    pass


class RegistrationError(HandshakeError):
    pass


class LoginWithTokenError(HandshakeError):
    pass


class UpstreamRequestError(MobileOrderError):
    def __init__(self, endpoint: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{endpoint} failed: {message}")
        self.endpoint = endpoint
        self.status_code = status_code


class OrderError(MobileOrderError):
    def __init__(self, message: str, order_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.order_id = order_id


class OrderIdMissingError(OrderError):
    def __init__(self) -> None:
        super().__init__("Failed to process order: no order id in response")


class OrderCancelledError(OrderError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order {order_id} was cancelled", order_id)


class OrderTimedOut(OrderError):
    def __init__(self, order_id: str, attempts: int) -> None:
        super().__init__(
            f"Order {order_id} polling timed out after {attempts} attempts", order_id
        )
        self.attempts = attempts


class TooManyPollingErrors(OrderError):
    def __init__(self, order_id: str, errors: int) -> None:
        super().__init__(f"Too many polling errors for order {order_id}", order_id)
        self.errors = errors


class UserInactiveError(MobileOrderError):
    def __init__(self, user_id: str) -> None:
        super().__init__("User not found or inactive")
        self.user_id = user_id
