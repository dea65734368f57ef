"""Response classification.

Decides, from the HTTP status and the body, whether an exchange
succeeded, was rejected by the carrier, or cannot be interpreted. Carrier
errors are recognised by a ``<messages>`` body, whatever the status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from xml.parsers.expat import ExpatError

import xmltodict

from canadapost_pws.exceptions import (
    CarrierError,
    CarrierMessage,
    CarrierValidationError,
    InvalidCustomerError,
    MalformedResponse,
    NoTrackingInfoFound,
    TransportFailure,
)

logger = logging.getLogger(__name__)

# Elements that may repeat; always parsed as lists.
REPEATED_ELEMENTS = (
    "message",
    "price-quote",
    "link",
    "occurrence",
    "adjustment",
    "option",
    "item",
    "group-id",
)

NO_TRACKING_MARKER = "no tracking"
# Phrases meaning the account itself was refused. Messages that merely
# name a customer or contract field (e.g. "Contract Number is a required
# field") are validation failures.
_CUSTOMER_MARKERS = (
    "invalid customer",
    "invalid contract",
    "unknown customer",
    "not authorized",
    "unauthorized",
)


@dataclass(frozen=True)
class Success:
    """A successful exchange. ``document`` is ``None`` for empty bodies."""

    status_code: int
    document: dict[str, Any] | None
    body: bytes = b""

    @property
    def root(self) -> str | None:
        if not self.document:
            return None
        return next(iter(self.document))


Classification = Success | CarrierError | MalformedResponse | TransportFailure


def parse_xml(body: bytes) -> dict[str, Any]:
    """Parse an XML body, forcing repeated elements into lists."""
    return xmltodict.parse(body, force_list=REPEATED_ELEMENTS)


def _is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        return str(value.get("#text", ""))
    return str(value)


def _carrier_error(
    status_code: int, messages: list[CarrierMessage]
) -> CarrierError:
    first = messages[0] if messages else CarrierMessage(str(status_code), "")
    kwargs = {"status_code": status_code, "messages": messages}
    descriptions = " ".join(m.description for m in messages).lower()

    if NO_TRACKING_MARKER in descriptions:
        error_cls: type[CarrierError] = NoTrackingInfoFound
    elif status_code in (401, 403) or any(
        marker in descriptions for marker in _CUSTOMER_MARKERS
    ):
        error_cls = InvalidCustomerError
    elif status_code in (400, 422):
        error_cls = CarrierValidationError
    else:
        error_cls = CarrierError
    return error_cls(first.code, first.description, **kwargs)


def _messages(document: dict[str, Any]) -> list[CarrierMessage]:
    container = document.get("messages") or {}
    if not isinstance(container, dict):
        return []
    return [
        CarrierMessage(
            code=_text(entry.get("code")),
            description=_text(entry.get("description")),
        )
        for entry in container.get("message") or []
        if isinstance(entry, dict)
    ]


def classify(
    status_code: int, body: bytes, *, expect_xml: bool = True
) -> Classification:
    """Classify one exchange.

    Returns a :class:`Success` or an *unraised* error instance; pass the
    result to :func:`unwrap` to raise. With ``expect_xml=False`` a
    successful non-XML body (a PDF label) is returned untouched.
    """
    if not body or not body.strip():
        if _is_success_status(status_code):
            return Success(status_code=status_code, document=None)
        return TransportFailure(
            f"HTTP {status_code} with empty body", status_code=status_code
        )

    if not expect_xml and not body.lstrip().startswith(b"<"):
        if _is_success_status(status_code):
            return Success(status_code=status_code, document=None, body=body)
        return TransportFailure(
            f"HTTP {status_code} with non-XML body", status_code=status_code
        )

    try:
        document = parse_xml(body)
    except ExpatError as exc:
        if status_code >= 500:
            return TransportFailure(
                f"HTTP {status_code} with non-XML body",
                status_code=status_code,
            )
        return MalformedResponse(f"Unparseable XML body: {exc}", body=body)

    if not isinstance(document, dict) or not document:
        return MalformedResponse("Empty XML document", body=body)

    if "messages" in document:
        return _carrier_error(status_code, _messages(document))

    if not _is_success_status(status_code):
        return CarrierError(
            str(status_code),
            f"HTTP {status_code}",
            status_code=status_code,
        )

    return Success(status_code=status_code, document=document, body=body)


def unwrap(
    classification: Classification, log: logging.Logger = logger
) -> Success:
    """Return the success or raise the classified error."""
    if isinstance(classification, CarrierError):
        log.warning(
            "Carrier rejected request: %s %s",
            classification.code,
            classification.message,
        )
        raise classification
    if isinstance(classification, MalformedResponse):
        log.error("Malformed carrier response: %s", classification.reason)
        raise classification
    if isinstance(classification, TransportFailure):
        log.warning("Transport failure: %s", classification.reason)
        raise classification
    return classification
