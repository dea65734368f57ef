"""Error taxonomy for the Canada Post PWS client."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "CanadaPostError",
    "CarrierError",
    "CarrierMessage",
    "CarrierValidationError",
    "ConfigurationError",
    "InvalidCustomerError",
    "InvalidTransitionError",
    "MalformedResponse",
    "NoCredentialsFound",
    "NoTrackingInfoFound",
    "TransportFailure",
]


class CanadaPostError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(CanadaPostError):
    """A required setting is missing or invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class NoCredentialsFound(ConfigurationError):
    """API key or secret is not configured."""

    def __init__(
        self, message: str = "No Canada Post credentials found"
    ) -> None:
        super().__init__(message)


@dataclass(frozen=True)
class CarrierMessage:
    """One ``<message>`` entry of a carrier error body."""

    code: str
    description: str


class CarrierError(CanadaPostError):
    """The carrier explicitly rejected the request.

    ``message`` is the carrier's description, kept verbatim. Branch on
    ``code`` where possible.
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        status_code: int | None = None,
        messages: list[CarrierMessage] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.messages = messages or [CarrierMessage(code, message)]
        super().__init__(message)


class NoTrackingInfoFound(CarrierError):
    """The carrier holds no tracking record for the pin."""


class InvalidCustomerError(CarrierError):
    """Customer number or contract id was refused."""


class CarrierValidationError(CarrierError):
    """The request failed carrier-side validation."""


class InvalidTransitionError(CarrierError):
    """The carrier-reported shipment state forbids the requested move.

    Raised before any request is sent, so ``message`` is generated here
    rather than by the carrier; branch on ``code`` (``invalid_transition``).
    Voiding a void shipment raises ``CarrierError`` whether the client or
    the carrier detects it.
    """

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(
            "invalid_transition",
            f"Cannot move shipment from {current!r} to {target!r}",
        )


class MalformedResponse(CanadaPostError):
    """The response body did not match the expected schema."""

    def __init__(self, reason: str, body: bytes | None = None) -> None:
        self.reason = reason
        self.body = body
        super().__init__(reason)


class TransportFailure(CanadaPostError):
    """Network or HTTP-layer failure. Safe for the caller to retry."""

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)
