"""Request builders.

Pure functions turning value objects and options into the exact
request (method, URL, XML body, headers) each PWS operation expects.
Elements whose value is unset are left out of the document.
"""

from __future__ import annotations

import base64
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any
from urllib.parse import quote

import xmltodict

from canadapost_pws.exceptions import ConfigurationError
from canadapost_pws.models import LineItem, Location, Package, ShipmentRequest
from canadapost_pws.options import (
    ContractShipmentOptions,
    RateOptions,
    ServiceOptions,
    ShipmentOptions,
    TransmitOptions,
)

RATE_MEDIA_TYPE = "application/vnd.cpc.ship.rate-v4+xml"
RATE_NAMESPACE = "http://www.canadapost.ca/ws/ship/rate-v4"
NCSHIPMENT_MEDIA_TYPE = "application/vnd.cpc.ncshipment-v4+xml"
NCSHIPMENT_NAMESPACE = "http://www.canadapost.ca/ws/ncshipment-v4"
SHIPMENT_MEDIA_TYPE = "application/vnd.cpc.shipment-v8+xml"
SHIPMENT_NAMESPACE = "http://www.canadapost.ca/ws/shipment-v8"
MANIFEST_MEDIA_TYPE = "application/vnd.cpc.manifest-v8+xml"
MANIFEST_NAMESPACE = "http://www.canadapost.ca/ws/manifest-v8"
TRACK_MEDIA_TYPE = "application/vnd.cpc.track-v2+xml"
PDF_MEDIA_TYPE = "application/pdf"

MAX_GROUP_ID_LENGTH = 32
MAX_CUSTOMS_DESCRIPTION_LENGTH = 45


@dataclass(frozen=True)
class BuildContext:
    """Endpoint, credentials and account numbers for one call."""

    endpoint: str
    api_key: str
    secret: str
    customer_number: str | None = None
    mailed_on_behalf_of: str | None = None
    contract_id: str | None = None
    language: str = "en-CA"
    platform_id: str | None = None

    @property
    def mobo(self) -> str | None:
        return self.mailed_on_behalf_of or self.customer_number

    def require_customer_number(self) -> str:
        if not self.customer_number:
            raise ConfigurationError("customer_number is required")
        return self.customer_number

    def require_contract_id(self) -> str:
        if not self.contract_id:
            raise ConfigurationError("contract_id is required")
        return self.contract_id

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.endpoint}{path.lstrip('/')}"

    def headers(self, media_type: str, *, has_body: bool) -> dict[str, str]:
        token = base64.b64encode(
            f"{self.api_key}:{self.secret}".encode()
        ).decode()
        headers = {
            "Authorization": f"Basic {token}",
            "Accept": media_type,
            "Accept-language": self.language,
        }
        if has_body:
            headers["Content-Type"] = media_type
        if self.platform_id:
            headers["Platform-id"] = self.platform_id
        return headers


@dataclass(frozen=True)
class BuiltRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _compact(value: Any) -> Any:
    """Drop unset values (``None`` or ``""``) and the containers they empty."""
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            item = _compact(item)
            if _is_unset(item):
                continue
            result[key] = item
        return result
    if isinstance(value, list):
        return [
            item for item in (_compact(v) for v in value)
            if not _is_unset(item)
        ]
    return value


def _is_unset(value: Any) -> bool:
    return value is None or value in ("", {}, [])


def _require(value: str | None, element: str) -> str:
    if not value:
        raise ValueError(f"<{element}> is required")
    return value


def _document(root: str, namespace: str, children: dict[str, Any]) -> bytes:
    body = {root: {"@xmlns": namespace, **_compact(children)}}
    return xmltodict.unparse(body, encoding="utf-8").encode("utf-8")


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _flag(value: bool) -> str | None:
    """``"true"`` for a set flag, omitted otherwise."""
    return "true" if value else None


def _money(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return f"{Decimal(value):.2f}"


def _kg(value: float) -> str:
    # PWS accepts three decimals and rejects zero.
    return f"{max(value, 0.001):.3f}"


def _cm(value: float) -> str:
    return f"{value:.1f}"


def _date(value: date | None) -> str | None:
    return value.isoformat() if value else None


def normalize_postal_code(value: str) -> str:
    return re.sub(r"\s+", "", value).upper()


def normalize_phone(value: str) -> str:
    """Format North American numbers as ``NNN-NNN-NNNN``."""
    digits = re.sub(r"\D", "", value)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return value
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"


def default_group_id(prefix: str, on: date | None = None) -> str:
    """Group id made of ``prefix`` and the date, e.g. ``acme20240115``."""
    day = on or date.today()
    cleaned = re.sub(r"[^A-Za-z0-9]", "", prefix)
    suffix = day.strftime("%Y%m%d")
    return f"{cleaned[: MAX_GROUP_ID_LENGTH - len(suffix)]}{suffix}"


# ---------------------------------------------------------------------------
# Shared fragments
# ---------------------------------------------------------------------------


def _parcel_characteristics(package: Package) -> dict[str, Any]:
    dimensions = None
    if package.has_dimensions:
        height, width, length = package.cm
        dimensions = {
            "length": _cm(length),
            "width": _cm(width),
            "height": _cm(height),
        }
    return {
        "weight": _kg(package.billable_weight_kg),
        "dimensions": dimensions,
        "mailing-tube": _flag(package.cylinder),
    }


def _combined_parcel_characteristics(
    packages: Sequence[Package],
) -> dict[str, Any]:
    if len(packages) == 1:
        return _parcel_characteristics(packages[0])
    return {"weight": _kg(sum(p.billable_weight_kg for p in packages))}


def _options(options: ServiceOptions) -> dict[str, Any] | None:
    entries = []
    for code, value in options.option_entries():
        if code == "D2PO":
            entries.append({"option-code": code, "option-qualifier-2": value})
        else:
            entries.append(
                {"option-code": code, "option-amount": _money(value)}
            )
    return {"option": entries} if entries else None


def _shipping_point(origin: Location) -> str:
    return _require(
        normalize_postal_code(origin.postal_code), "origin postal code"
    )


def _rate_destination(origin: Location, destination: Location) -> dict:
    if origin.is_domestic_to(destination):
        return {
            "domestic": {
                "postal-code": _require(
                    normalize_postal_code(destination.postal_code),
                    "postal-code",
                )
            }
        }
    if destination.country == "US":
        return {
            "united-states": {
                "zip-code": _require(destination.postal_code, "zip-code")
            }
        }
    return {"international": {"country-code": destination.country}}


def _address_details(
    location: Location, *, domestic: bool, with_country: bool = True
) -> dict[str, Any]:
    lines = location.address_lines
    province = location.province or None
    postal = location.postal_code or None
    if domestic:
        postal = normalize_postal_code(location.postal_code)
    elif location.country != "US":
        # International addresses carry no province/state.
        province = None
    return {
        "address-line-1": lines[0] if lines else None,
        "address-line-2": lines[1] if len(lines) > 1 else None,
        "city": location.city or None,
        "prov-state": province,
        "country-code": location.country if with_country else None,
        "postal-zip-code": postal,
    }


def _sender(origin: Location, *, with_country: bool) -> dict[str, Any]:
    return {
        "name": origin.name or None,
        "company": _require(origin.company or origin.name, "company"),
        "contact-phone": (
            normalize_phone(origin.phone) if origin.phone else None
        ),
        "address-details": _address_details(
            origin, domestic=True, with_country=with_country
        ),
    }


def _destination(origin: Location, destination: Location) -> dict[str, Any]:
    domestic = origin.is_domestic_to(destination)
    phone = destination.phone or None
    if phone and domestic:
        phone = normalize_phone(phone)
    return {
        "name": destination.name or None,
        "company": destination.company or None,
        "client-voice-number": phone,
        "address-details": _address_details(destination, domestic=domestic),
    }


def _customs_item(item: LineItem, origin: Location) -> dict[str, Any]:
    province = item.province_of_origin
    if province is None and item.country_of_origin == "CA":
        province = origin.province or None
    return {
        "customs-number-of-units": str(item.quantity),
        "customs-description": item.description[
            :MAX_CUSTOMS_DESCRIPTION_LENGTH
        ],
        "sku": item.sku,
        "hs-tariff-code": item.hs_code,
        "unit-weight": _kg(item.unit_weight_kg),
        "customs-value-per-unit": _money(item.unit_value),
        "country-of-origin": item.country_of_origin,
        "province-of-origin": province,
    }


def _customs(request: ShipmentRequest) -> dict[str, Any] | None:
    if request.is_domestic:
        return None
    if not request.line_items:
        raise ValueError("line items are required for customs declarations")
    options = request.options
    return {
        "currency": "CAD",
        "reason-for-export": options.reason_for_export,
        "other-reason": options.other_reason,
        "sku-list": {
            "item": [
                _customs_item(item, request.origin)
                for item in request.line_items
            ]
        },
    }


def _delivery_spec(
    request: ShipmentRequest, *, contract: bool
) -> dict[str, Any]:
    options: ShipmentOptions = request.options
    notification = None
    if options.notification_email:
        notification = {
            "email": options.notification_email,
            "on-shipment": _bool(options.notify_on_shipment),
            "on-exception": _bool(options.notify_on_exception),
            "on-delivery": _bool(options.notify_on_delivery),
        }
    return {
        "service-code": options.service,
        "sender": _sender(request.origin, with_country=contract),
        "destination": _destination(request.origin, request.destination),
        "options": _options(options),
        "parcel-characteristics": _parcel_characteristics(request.package),
        "notification": notification,
        "preferences": {
            "show-packing-instructions": _bool(
                options.show_packing_instructions
            ),
            "show-postage-rate": _bool(options.show_postage_rate),
            "show-insured-value": _bool(options.show_insured_value),
        },
        "references": {
            "cost-centre": options.cost_centre,
            "customer-ref-1": options.customer_ref_1,
            "customer-ref-2": options.customer_ref_2,
        },
        "customs": _customs(request),
    }


def _single_package(request: ShipmentRequest) -> None:
    if len(request.packages) != 1:
        raise ValueError("a shipment carries exactly one package")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def build_rate_request(
    ctx: BuildContext,
    origin: Location,
    destination: Location,
    packages: Sequence[Package],
    options: RateOptions,
) -> BuiltRequest:
    if not packages:
        raise ValueError("at least one package is required")
    children = {
        "customer-number": ctx.customer_number,
        "contract-id": ctx.contract_id,
        "quote-type": "commercial" if ctx.customer_number else "counter",
        "expected-mailing-date": _date(options.expected_mailing_date),
        "options": _options(options),
        "parcel-characteristics": _combined_parcel_characteristics(packages),
        "services": {"service-code": list(options.services)},
        "origin-postal-code": _shipping_point(origin),
        "destination": _rate_destination(origin, destination),
    }
    return BuiltRequest(
        method="POST",
        url=ctx.url("rs/ship/price"),
        headers=ctx.headers(RATE_MEDIA_TYPE, has_body=True),
        body=_document("mailing-scenario", RATE_NAMESPACE, children),
    )


def build_shipment_request(
    ctx: BuildContext, request: ShipmentRequest
) -> BuiltRequest:
    """Non-contract shipment (``rs/{customer}/ncshipment``)."""
    _single_package(request)
    customer = ctx.require_customer_number()
    children = {
        "requested-shipping-point": _shipping_point(request.origin),
        "delivery-spec": _delivery_spec(request, contract=False),
    }
    return BuiltRequest(
        method="POST",
        url=ctx.url(f"rs/{customer}/ncshipment"),
        headers=ctx.headers(NCSHIPMENT_MEDIA_TYPE, has_body=True),
        body=_document(
            "non-contract-shipment", NCSHIPMENT_NAMESPACE, children
        ),
    )


def build_contract_shipment_request(
    ctx: BuildContext, request: ShipmentRequest
) -> BuiltRequest:
    """Contract shipment (``rs/{customer}/{mobo}/shipment``)."""
    _single_package(request)
    options = request.options
    if not isinstance(options, ContractShipmentOptions):
        raise TypeError("contract shipments need ContractShipmentOptions")
    customer = ctx.require_customer_number()
    contract_id = ctx.require_contract_id()

    group_id = None
    if not options.transmit_shipment:
        group_id = options.group_id or default_group_id(
            request.origin.company or request.origin.name,
            options.expected_mailing_date,
        )
    delivery_spec = _delivery_spec(request, contract=True)
    delivery_spec["settlement-info"] = {
        "paid-by-customer": (
            ctx.mobo if ctx.mobo != customer else None
        ),
        "contract-id": contract_id,
        "intended-method-of-payment": options.method_of_payment,
    }
    children = {
        "group-id": group_id,
        "transmit-shipment": _flag(options.transmit_shipment),
        "cpc-pickup-indicator": _flag(options.cpc_pickup),
        "requested-shipping-point": (
            None
            if options.cpc_pickup
            else _shipping_point(request.origin)
        ),
        "expected-mailing-date": _date(options.expected_mailing_date),
        "delivery-spec": delivery_spec,
    }
    return BuiltRequest(
        method="POST",
        url=ctx.url(f"rs/{customer}/{ctx.mobo}/shipment"),
        headers=ctx.headers(SHIPMENT_MEDIA_TYPE, has_body=True),
        body=_document("shipment", SHIPMENT_NAMESPACE, children),
    )


def build_get_contract_shipment_request(
    ctx: BuildContext, self_url: str
) -> BuiltRequest:
    return BuiltRequest(
        method="GET",
        url=ctx.url(self_url),
        headers=ctx.headers(SHIPMENT_MEDIA_TYPE, has_body=False),
    )


def build_void_request(ctx: BuildContext, self_url: str) -> BuiltRequest:
    return BuiltRequest(
        method="DELETE",
        url=ctx.url(self_url),
        headers=ctx.headers(SHIPMENT_MEDIA_TYPE, has_body=False),
    )


def build_transmit_request(
    ctx: BuildContext,
    origin: Location,
    group_ids: Sequence[str],
    options: TransmitOptions,
) -> BuiltRequest:
    if not group_ids:
        raise ValueError("at least one group id is required")
    customer = ctx.require_customer_number()
    children = {
        "group-ids": {"group-id": list(group_ids)},
        "cpc-pickup-indicator": _flag(options.cpc_pickup),
        "requested-shipping-point": (
            None
            if options.cpc_pickup
            else _shipping_point(origin)
        ),
        "detailed-manifests": _bool(options.detailed_manifests),
        "method-of-payment": options.method_of_payment,
        "manifest-address": {
            "manifest-company": _require(
                origin.company or origin.name, "manifest-company"
            ),
            "manifest-name": origin.name or None,
            "phone-number": (
                normalize_phone(origin.phone) if origin.phone else None
            ),
            "address-details": _address_details(origin, domestic=True),
        },
        "excluded-shipments": {
            "shipment-id": list(options.excluded_shipments)
        },
    }
    return BuiltRequest(
        method="POST",
        url=ctx.url(f"rs/{customer}/{ctx.mobo}/manifest"),
        headers=ctx.headers(MANIFEST_MEDIA_TYPE, has_body=True),
        body=_document("transmit-set", MANIFEST_NAMESPACE, children),
    )


def build_manifest_request(
    ctx: BuildContext, manifest_url: str
) -> BuiltRequest:
    return BuiltRequest(
        method="GET",
        url=ctx.url(manifest_url),
        headers=ctx.headers(MANIFEST_MEDIA_TYPE, has_body=False),
    )


def build_tracking_request(ctx: BuildContext, pin: str) -> BuiltRequest:
    pin = pin.strip()
    if not pin:
        raise ValueError("tracking pin must not be empty")
    return BuiltRequest(
        method="GET",
        url=ctx.url(f"vis/track/pin/{quote(pin, safe='')}/detail"),
        headers=ctx.headers(TRACK_MEDIA_TYPE, has_body=False),
    )


def build_shipment_groups_request(ctx: BuildContext) -> BuiltRequest:
    customer = ctx.require_customer_number()
    return BuiltRequest(
        method="GET",
        url=ctx.url(f"rs/{customer}/{ctx.mobo}/group"),
        headers=ctx.headers(SHIPMENT_MEDIA_TYPE, has_body=False),
    )


def build_label_request(ctx: BuildContext, label_url: str) -> BuiltRequest:
    return BuiltRequest(
        method="GET",
        url=ctx.url(label_url),
        headers=ctx.headers(PDF_MEDIA_TYPE, has_body=False),
    )
