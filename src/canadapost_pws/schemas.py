"""Typed response variants.

One model per operation, discriminated by ``kind``. The variants share
``status_code`` and ``message`` only; see
:class:`canadapost_pws.protocols.CarrierResponse`.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from canadapost_pws.workflow import ContractShipmentState, state_from_carrier

SHIPPING_ID_PATTERN = r"^\d{17}$"


def group_id_from_url(url: str | None) -> str | None:
    """Group identifier encoded in a carrier group link.

    Shipment links carry it as ``?groupId=...``; group resources end
    in ``/group/{id}``.
    """
    if not url:
        return None
    parts = urlsplit(url)
    values = parse_qs(parts.query).get("groupId")
    if values:
        return values[0]
    segments = [s for s in parts.path.split("/") if s]
    if len(segments) >= 2 and segments[-2] == "group":
        return segments[-1]
    return None


class RateEstimate(BaseModel):
    """One priced service from a quote."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    service_code: str
    total_price: Decimal
    currency: str = "CAD"
    base_price: Decimal | None = None
    taxes: Decimal = Decimal("0")
    delivery_date: date | None = None
    transit_days: int | None = None
    guaranteed: bool = False


class RateResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rate"] = "rate"
    status_code: int = 200
    message: str = ""
    rates: list[RateEstimate] = Field(default_factory=list)


class ShippingResponse(BaseModel):
    """Non-contract shipment."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["shipping"] = "shipping"
    status_code: int = 200
    message: str = ""
    shipping_id: str = Field(pattern=SHIPPING_ID_PATTERN)
    tracking_number: str | None = None
    label_url: str | None = None
    self_url: str | None = None
    details_url: str | None = None
    receipt_url: str | None = None


class ContractShippingResponse(BaseModel):
    """Contract shipment as last reported by the carrier.

    ``price`` is the URL of the carrier's price resource, not an amount.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["contract_shipping"] = "contract_shipping"
    status_code: int = 200
    message: str = ""
    shipping_id: str = Field(pattern=SHIPPING_ID_PATTERN)
    tracking_number: str | None = None
    label_url: str | None = None
    shipment_status: str
    self_url: str
    details_url: str
    price: str
    group: str | None = None
    receipt_url: str | None = None

    @property
    def state(self) -> ContractShipmentState | None:
        return state_from_carrier(self.shipment_status)

    @property
    def group_id(self) -> str | None:
        return group_id_from_url(self.group)


class ShipmentGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    group_id: str
    url: str
    media_type: str | None = None


class ContractShipmentGroupsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["shipment_groups"] = "shipment_groups"
    status_code: int = 200
    message: str = ""
    shipment_groups: list[ShipmentGroup] = Field(default_factory=list)


class TransmitShipmentsResponse(BaseModel):
    """Links to the manifests the carrier will generate."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["transmit"] = "transmit"
    status_code: int = 200
    message: str = ""
    manifest_urls: list[str] = Field(min_length=1)

    @property
    def manifest_url(self) -> str:
        return self.manifest_urls[0]


class GetManifestResponse(BaseModel):
    """Manifest state. ``artifact_url`` is unset until generation ends."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["manifest"] = "manifest"
    status_code: int = 200
    message: str = ""
    manifest_url: str
    po_number: str | None = None
    details_url: str | None = None
    manifest_shipments_url: str | None = None
    artifact_url: str | None = None

    @property
    def ready(self) -> bool:
        return bool(self.artifact_url)


class ShipmentEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str = ""
    description: str
    time: datetime | None = None
    time_zone: str | None = None
    location: str = ""
    signatory: str | None = None


class TrackingResponse(BaseModel):
    """Tracking detail. ``shipment_events`` keep the carrier's order."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["tracking"] = "tracking"
    status_code: int = 200
    message: str = ""
    tracking_number: str
    service_name: str | None = None
    expected_date: date | None = None
    customer_number: str | None = None
    destination_postal_code: str | None = None
    shipment_events: list[ShipmentEvent] = Field(default_factory=list)

    @property
    def latest_event(self) -> ShipmentEvent | None:
        # Canada Post lists the most recent occurrence first.
        return self.shipment_events[0] if self.shipment_events else None


AnyCarrierResponse = Annotated[
    RateResponse
    | ShippingResponse
    | ContractShippingResponse
    | ContractShipmentGroupsResponse
    | TransmitShipmentsResponse
    | GetManifestResponse
    | TrackingResponse,
    Field(discriminator="kind"),
]
