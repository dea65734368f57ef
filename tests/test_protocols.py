"""Tests for protocol definitions."""

from canadapost_pws.protocols import CarrierResponse, Transport
from canadapost_pws.schemas import (
    ContractShipmentGroupsResponse,
    GetManifestResponse,
    RateResponse,
    TrackingResponse,
    TransmitShipmentsResponse,
)
from conftest import FakeTransport


def test_transport_conforming_is_instance():
    """A class with send() satisfies Transport."""
    assert isinstance(FakeTransport(), Transport)


def test_transport_nonconforming_is_not_instance():
    """Objects without send are not transports."""
    class NotATransport:
        async def request(self, method, url):
            return 200, b""

    assert not isinstance(NotATransport(), Transport)


def test_every_response_variant_is_a_carrier_response():
    """Each variant carries kind, status_code and message."""
    variants = [
        RateResponse(),
        ContractShipmentGroupsResponse(),
        TransmitShipmentsResponse(manifest_urls=["https://x.test/m/1"]),
        GetManifestResponse(manifest_url="https://x.test/m/1"),
        TrackingResponse(tracking_number="123"),
    ]
    for variant in variants:
        assert isinstance(variant, CarrierResponse), variant.kind
        assert variant.status_code == 200
        assert variant.message == ""


def test_kinds_are_distinct():
    """Every response variant has its own kind."""
    kinds = {
        RateResponse().kind,
        ContractShipmentGroupsResponse().kind,
        TrackingResponse(tracking_number="1").kind,
    }
    assert len(kinds) == 3
