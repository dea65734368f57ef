"""Decoders from classified XML documents to typed responses.

Optional elements may be absent. Missing required identifiers raise
:class:`MalformedResponse`; nothing is filled in from the caller's input.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from canadapost_pws.builders import BuildContext
from canadapost_pws.classifier import Success
from canadapost_pws.exceptions import MalformedResponse
from canadapost_pws.schemas import (
    ContractShipmentGroupsResponse,
    ContractShippingResponse,
    GetManifestResponse,
    RateEstimate,
    RateResponse,
    ShipmentEvent,
    ShipmentGroup,
    ShippingResponse,
    TrackingResponse,
    TransmitShipmentsResponse,
    group_id_from_url,
)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


def _root(success: Success, name: str) -> dict[str, Any]:
    document = success.document
    if not document or name not in document:
        found = success.root or "empty body"
        raise MalformedResponse(
            f"Expected <{name}> root element, got {found}", body=success.body
        )
    return _child(document, name, success)


def _child(
    node: dict[str, Any], key: str, success: Success
) -> dict[str, Any]:
    """Element ``key`` as a dict; empty when absent or empty."""
    value = node.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedResponse(
            f"Expected child elements in <{key}>", body=success.body
        )
    return value


def _children(
    node: dict[str, Any], key: str, success: Success
) -> list[dict[str, Any]]:
    """Repeated element ``key``; every entry must have child elements."""
    entries = node.get(key) or []
    if not all(isinstance(entry, dict) for entry in entries):
        raise MalformedResponse(
            f"Expected child elements in every <{key}>", body=success.body
        )
    return entries


def _text(node: dict[str, Any], key: str) -> str | None:
    value = node.get(key)
    if isinstance(value, dict):
        value = value.get("#text")
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _required(node: dict[str, Any], key: str, success: Success) -> str:
    value = _text(node, key)
    if value is None:
        raise MalformedResponse(f"Missing required <{key}>", body=success.body)
    return value


def _decimal(value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


def _date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _links(node: dict[str, Any]) -> list[dict[str, Any]]:
    container = node.get("links")
    if isinstance(container, dict):
        links = container.get("link") or []
    else:
        links = node.get("link") or []
    # Text-only <link> entries carry no rel/href.
    return [link for link in links if isinstance(link, dict)]


def _link(node: dict[str, Any], rel: str) -> str | None:
    for link in _links(node):
        if link.get("@rel") == rel and link.get("@href"):
            return link["@href"]
    return None


def _build(
    model: Callable[..., ResponseT], success: Success, **fields: Any
) -> ResponseT:
    try:
        return model(status_code=success.status_code, **fields)
    except ValidationError as exc:
        raise MalformedResponse(
            f"Response does not match schema: {exc}", body=success.body
        ) from exc


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------


def _rate_estimate(quote: dict[str, Any], success: Success) -> RateEstimate:
    details = _child(quote, "price-details", success)
    standard = _child(quote, "service-standard", success)
    taxes = _child(details, "taxes", success)
    total_taxes = sum(
        (_decimal(_text(taxes, key)) or Decimal("0"))
        for key in ("gst", "pst", "hst")
    )
    due = _decimal(_text(details, "due"))
    if due is None:
        raise MalformedResponse(
            "Price quote without <due> amount", body=success.body
        )
    return RateEstimate(
        service_name=_text(quote, "service-name") or "",
        service_code=_required(quote, "service-code", success),
        total_price=due,
        base_price=_decimal(_text(details, "base")),
        taxes=total_taxes,
        delivery_date=_date(_text(standard, "expected-delivery-date")),
        transit_days=_int(_text(standard, "expected-transit-time")),
        guaranteed=_text(standard, "guaranteed-delivery") == "true",
    )


def decode_rates(success: Success) -> RateResponse:
    root = _root(success, "price-quotes")
    rates = [
        _rate_estimate(quote, success)
        for quote in _children(root, "price-quote", success)
    ]
    return _build(RateResponse, success, rates=rates)


# ---------------------------------------------------------------------------
# Shipments
# ---------------------------------------------------------------------------


def _shipment_url(
    ctx: BuildContext, shipping_id: str, suffix: str = ""
) -> str:
    customer = ctx.require_customer_number()
    return ctx.url(f"rs/{customer}/{ctx.mobo}/shipment/{shipping_id}{suffix}")


def decode_shipment(success: Success) -> ShippingResponse:
    root = _root(success, "non-contract-shipment-info")
    return _build(
        ShippingResponse,
        success,
        shipping_id=_required(root, "shipment-id", success),
        tracking_number=_text(root, "tracking-pin"),
        label_url=_link(root, "label"),
        self_url=_link(root, "self"),
        details_url=_link(root, "details"),
        receipt_url=_link(root, "receipt"),
    )


def decode_contract_shipment(
    success: Success, ctx: BuildContext
) -> ContractShippingResponse:
    """Decode ``<shipment-info>``.

    Carrier links are kept verbatim. When self/details/price links are
    absent they are rebuilt from the carrier-issued shipment id.
    """
    root = _root(success, "shipment-info")
    shipping_id = _required(root, "shipment-id", success)
    return _build(
        ContractShippingResponse,
        success,
        shipping_id=shipping_id,
        tracking_number=_text(root, "tracking-pin"),
        label_url=_link(root, "label"),
        shipment_status=_required(root, "shipment-status", success),
        self_url=_link(root, "self") or _shipment_url(ctx, shipping_id),
        details_url=(
            _link(root, "details")
            or _shipment_url(ctx, shipping_id, "/details")
        ),
        price=(
            _link(root, "price") or _shipment_url(ctx, shipping_id, "/price")
        ),
        group=_link(root, "group"),
        receipt_url=_link(root, "receipt"),
    )


def decode_shipment_groups(
    success: Success,
) -> ContractShipmentGroupsResponse:
    root = _root(success, "groups")
    groups = []
    for link in _links(root):
        if link.get("@rel") != "group":
            continue
        group_id = group_id_from_url(link.get("@href"))
        if group_id is None:
            raise MalformedResponse(
                "Group link without group id", body=success.body
            )
        groups.append(
            ShipmentGroup(
                group_id=group_id,
                url=link["@href"],
                media_type=link.get("@media-type"),
            )
        )
    return _build(
        ContractShipmentGroupsResponse, success, shipment_groups=groups
    )


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------


def decode_transmit(success: Success) -> TransmitShipmentsResponse:
    root = _root(success, "manifests")
    urls = [
        link["@href"]
        for link in _links(root)
        if link.get("@rel") == "manifest" and link.get("@href")
    ]
    if not urls:
        raise MalformedResponse(
            "Transmit response without manifest link", body=success.body
        )
    return _build(TransmitShipmentsResponse, success, manifest_urls=urls)


def decode_manifest(
    success: Success, manifest_url: str
) -> GetManifestResponse:
    root = _root(success, "manifest")
    return _build(
        GetManifestResponse,
        success,
        manifest_url=_link(root, "self") or manifest_url,
        po_number=_text(root, "po-number"),
        details_url=_link(root, "details"),
        manifest_shipments_url=_link(root, "manifestShipments"),
        artifact_url=_link(root, "artifact"),
    )


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------


def _event_time(occurrence: dict[str, Any]) -> datetime | None:
    day = _text(occurrence, "event-date")
    if day is None:
        return None
    clock = _text(occurrence, "event-time") or "00:00:00"
    try:
        return datetime.fromisoformat(f"{day}T{clock}")
    except ValueError:
        return None


def _event(occurrence: dict[str, Any]) -> ShipmentEvent:
    site = _text(occurrence, "event-site")
    province = _text(occurrence, "event-province")
    return ShipmentEvent(
        identifier=_text(occurrence, "event-identifier") or "",
        description=_text(occurrence, "event-description") or "",
        time=_event_time(occurrence),
        time_zone=_text(occurrence, "event-time-zone"),
        location=", ".join(part for part in (site, province) if part),
        signatory=_text(occurrence, "signatory-name"),
    )


def decode_tracking(success: Success) -> TrackingResponse:
    root = _root(success, "tracking-detail")
    events = _child(root, "significant-events", success)
    expected = _text(root, "changed-expected-date") or _text(
        root, "expected-delivery-date"
    )
    return _build(
        TrackingResponse,
        success,
        tracking_number=_required(root, "pin", success),
        service_name=_text(root, "service-name"),
        expected_date=_date(expected),
        customer_number=_text(root, "mailed-by-customer-number"),
        destination_postal_code=_text(root, "destination-postal-id"),
        shipment_events=[
            _event(occurrence)
            for occurrence in _children(events, "occurrence", success)
        ],
    )
