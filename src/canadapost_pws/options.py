"""Per-operation option structures.

Every option the builders understand is a declared field; unknown keys
are rejected.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    "ContractShipmentOptions",
    "RateOptions",
    "RequestOptions",
    "ServiceOptions",
    "ShipmentOptions",
    "TransmitOptions",
]


class RequestOptions(BaseModel):
    """Account identifiers shared by every operation.

    Unset values fall back to the client configuration.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    customer_number: str | None = None
    mailed_on_behalf_of: str | None = None
    contract_id: str | None = None


class ServiceOptions(BaseModel):
    """Carrier option codes (``<option-code>``) and their amounts."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    dc: bool = False
    cov: bool = False
    cov_amount: Decimal | None = None
    cod: bool = False
    cod_amount: Decimal | None = None
    so: bool = False
    pa18: bool = False
    pa19: bool = False
    hfp: bool = False
    dns: bool = False
    lad: bool = False
    d2po: bool = False
    d2po_office_id: str | None = None
    rase: bool = False
    rts: bool = False
    aban: bool = False

    @model_validator(mode="after")
    def _check_amounts(self) -> ServiceOptions:
        if self.cov and self.cov_amount is None:
            raise ValueError("cov requires cov_amount")
        if self.cod and self.cod_amount is None:
            raise ValueError("cod requires cod_amount")
        if self.d2po and not self.d2po_office_id:
            raise ValueError("d2po requires d2po_office_id")
        if sum((self.rase, self.rts, self.aban)) > 1:
            raise ValueError("rase, rts and aban are mutually exclusive")
        return self

    def option_entries(self) -> list[tuple[str, Decimal | str | None]]:
        """Return ``(code, amount_or_qualifier)`` pairs for enabled flags."""
        entries: list[tuple[str, Decimal | str | None]] = []
        if self.cov:
            entries.append(("COV", self.cov_amount))
        if self.cod:
            entries.append(("COD", self.cod_amount))
        for code in ("so", "pa18", "pa19", "hfp", "dns", "lad", "dc"):
            if getattr(self, code):
                entries.append((code.upper(), None))
        if self.d2po:
            entries.append(("D2PO", self.d2po_office_id))
        for code in ("rase", "rts", "aban"):
            if getattr(self, code):
                entries.append((code.upper(), None))
        return entries


class RateOptions(RequestOptions, ServiceOptions):
    """Options for a price quote."""

    services: list[str] = Field(default_factory=list)
    expected_mailing_date: date | None = None


class ShipmentOptions(RequestOptions, ServiceOptions):
    """Options for a non-contract shipment."""

    service: str
    notification_email: str | None = None
    notify_on_shipment: bool = False
    notify_on_exception: bool = False
    notify_on_delivery: bool = True
    customer_ref_1: str | None = None
    customer_ref_2: str | None = None
    cost_centre: str | None = None
    show_packing_instructions: bool = True
    show_postage_rate: bool = False
    show_insured_value: bool = False
    reason_for_export: str = "SOG"
    other_reason: str | None = None
    expected_mailing_date: date | None = None

    @model_validator(mode="after")
    def _other_reason_required(self) -> ShipmentOptions:
        if self.reason_for_export == "OTH" and not self.other_reason:
            raise ValueError("reason_for_export OTH requires other_reason")
        return self


class ContractShipmentOptions(ShipmentOptions):
    """Options for a contract shipment.

    ``group_id`` defaults to the sender's company name followed by the
    mailing date (``companyname20240115``).
    """

    group_id: str | None = None
    transmit_shipment: bool = False
    method_of_payment: str = "Account"
    cpc_pickup: bool = False

    @model_validator(mode="after")
    def _group_or_transmit(self) -> ContractShipmentOptions:
        if self.transmit_shipment and self.group_id:
            raise ValueError("group_id and transmit_shipment are exclusive")
        return self


class TransmitOptions(RequestOptions):
    """Options for transmitting shipment groups."""

    method_of_payment: str = "Account"
    detailed_manifests: bool = True
    cpc_pickup: bool = False
    excluded_shipments: list[str] = Field(default_factory=list)
