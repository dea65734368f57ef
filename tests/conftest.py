"""Shared fixtures for canadapost-pws tests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from canadapost_pws.client import CanadaPostClient
from canadapost_pws.config import DEVELOPMENT_ENDPOINT, CanadaPostConfig
from canadapost_pws.models import LineItem, Location, Package
from canadapost_pws.options import ContractShipmentOptions, ShipmentOptions

FIXTURES = Path(__file__).parent / "fixtures"

CUSTOMER_NUMBER = "0001234567"
CONTRACT_ID = "0040662521"
SHIPMENT_ID = "34053130918652174"


def load_fixture(name: str) -> bytes:
    return (FIXTURES / name).read_bytes()


@dataclass
class RecordedCall:
    method: str
    url: str
    headers: dict[str, str]
    content: bytes | None = None


@dataclass
class FakeTransport:
    """In-memory Transport serving queued ``(status, body)`` pairs."""

    responses: list[tuple[int, bytes]] = field(default_factory=list)
    calls: list[RecordedCall] = field(default_factory=list)

    def queue(self, status_code: int, body: bytes | str = b"") -> None:
        if isinstance(body, str):
            body = load_fixture(body)
        self.responses.append((status_code, body))

    async def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str],
    ) -> tuple[int, bytes]:
        self.calls.append(
            RecordedCall(
                method=method,
                url=url,
                headers=dict(headers),
                content=content,
            )
        )
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        return self.responses.pop(0)

    @property
    def last_call(self) -> RecordedCall:
        return self.calls[-1]


@pytest.fixture()
def config() -> CanadaPostConfig:
    return CanadaPostConfig(
        api_key="key",
        secret="secret",
        endpoint=DEVELOPMENT_ENDPOINT,
        customer_number=CUSTOMER_NUMBER,
        contract_id=CONTRACT_ID,
    )


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def client(
    config: CanadaPostConfig, transport: FakeTransport
) -> CanadaPostClient:
    return CanadaPostClient(config, transport=transport)


@pytest.fixture()
def origin() -> Location:
    return Location(
        name="Jane Sender",
        company="Acme Widgets",
        phone="1 (613) 555-0100",
        address1="2701 Riverside Drive",
        city="Ottawa",
        province="ON",
        country="CA",
        postal_code="k1a 0b1",
    )


@pytest.fixture()
def destination() -> Location:
    return Location(
        name="John Receiver",
        phone="604 555 0199",
        address1="1 Main St",
        city="Vancouver",
        province="BC",
        country="CA",
        postal_code="V6B 1A1",
    )


@pytest.fixture()
def us_destination() -> Location:
    return Location(
        name="Joe Buyer",
        phone="+1 212 555 0147",
        address1="350 Fifth Avenue",
        city="New York",
        state="NY",
        country="us",
        zip="10118",
    )


@pytest.fixture()
def package() -> Package:
    return Package(weight=1000, dimensions=[93, 10, 10], cylinder=True)


@pytest.fixture()
def box() -> Package:
    return Package(weight=1000, dimensions=[93, 10, 10])


@pytest.fixture()
def line_items() -> list[LineItem]:
    return [
        LineItem(
            description="Wool scarf",
            quantity=2,
            value="40.00",
            weight=400,
            sku="SCARF-1",
            hs_code="6117.10",
        )
    ]


@pytest.fixture()
def shipment_options() -> ShipmentOptions:
    return ShipmentOptions(service="DOM.EP")


@pytest.fixture()
def contract_options() -> ContractShipmentOptions:
    return ContractShipmentOptions(service="DOM.EP", group_id="acme20240115")
