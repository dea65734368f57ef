# src/canadapost_pws/__init__.py
"""Async client for the Canada Post shipping web services."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

__all__ = [
    "CanadaPostClient",
    "CanadaPostConfig",
    "CanadaPostError",
    "CarrierError",
    "ConfigurationError",
    "ContractShipmentOptions",
    "ContractShipmentState",
    "ContractShippingResponse",
    "GetManifestResponse",
    "HttpxTransport",
    "InvalidTransitionError",
    "LineItem",
    "Location",
    "MalformedResponse",
    "NoCredentialsFound",
    "NoTrackingInfoFound",
    "Package",
    "RateOptions",
    "RateResponse",
    "ShipmentOptions",
    "ShippingResponse",
    "TrackingResponse",
    "TransmitOptions",
    "TransmitShipmentsResponse",
    "Transport",
    "TransportFailure",
    "__version__",
    "poll_manifest",
]

if TYPE_CHECKING:
    from canadapost_pws.client import CanadaPostClient
    from canadapost_pws.config import CanadaPostConfig
    from canadapost_pws.exceptions import (
        CanadaPostError,
        CarrierError,
        ConfigurationError,
        InvalidTransitionError,
        MalformedResponse,
        NoCredentialsFound,
        NoTrackingInfoFound,
        TransportFailure,
    )
    from canadapost_pws.models import LineItem, Location, Package
    from canadapost_pws.options import (
        ContractShipmentOptions,
        RateOptions,
        ShipmentOptions,
        TransmitOptions,
    )
    from canadapost_pws.polling import poll_manifest
    from canadapost_pws.protocols import Transport
    from canadapost_pws.schemas import (
        ContractShippingResponse,
        GetManifestResponse,
        RateResponse,
        ShippingResponse,
        TrackingResponse,
        TransmitShipmentsResponse,
    )
    from canadapost_pws.transport import HttpxTransport
    from canadapost_pws.workflow import ContractShipmentState


def __getattr__(name: str):
    # Lazy imports to avoid loading all submodules on package import.
    if name == "CanadaPostClient":
        from canadapost_pws.client import CanadaPostClient

        return CanadaPostClient
    if name == "CanadaPostConfig":
        from canadapost_pws.config import CanadaPostConfig

        return CanadaPostConfig
    if name == "HttpxTransport":
        from canadapost_pws.transport import HttpxTransport

        return HttpxTransport
    if name == "poll_manifest":
        from canadapost_pws.polling import poll_manifest

        return poll_manifest
    if name == "ContractShipmentState":
        from canadapost_pws.workflow import ContractShipmentState

        return ContractShipmentState
    if name == "Transport":
        from canadapost_pws import protocols

        return getattr(protocols, name)
    if name in (
        "CanadaPostError",
        "CarrierError",
        "ConfigurationError",
        "InvalidTransitionError",
        "MalformedResponse",
        "NoCredentialsFound",
        "NoTrackingInfoFound",
        "TransportFailure",
    ):
        from canadapost_pws import exceptions

        return getattr(exceptions, name)
    if name in ("LineItem", "Location", "Package"):
        from canadapost_pws import models

        return getattr(models, name)
    if name in (
        "ContractShipmentOptions",
        "RateOptions",
        "ShipmentOptions",
        "TransmitOptions",
    ):
        from canadapost_pws import options

        return getattr(options, name)
    if name in (
        "ContractShippingResponse",
        "GetManifestResponse",
        "RateResponse",
        "ShippingResponse",
        "TrackingResponse",
        "TransmitShipmentsResponse",
    ):
        from canadapost_pws import schemas

        return getattr(schemas, name)
    raise AttributeError(f"module 'canadapost_pws' has no attribute {name!r}")
