"""Canada Post PWS client facade."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from canadapost_pws import builders, decoders
from canadapost_pws.classifier import Success, classify, unwrap
from canadapost_pws.config import CanadaPostConfig
from canadapost_pws.models import LineItem, Location, Package, ShipmentRequest
from canadapost_pws.options import (
    ContractShipmentOptions,
    RateOptions,
    RequestOptions,
    ShipmentOptions,
    TransmitOptions,
)
from canadapost_pws.protocols import Transport
from canadapost_pws.schemas import (
    ContractShipmentGroupsResponse,
    ContractShippingResponse,
    GetManifestResponse,
    RateResponse,
    ShipmentGroup,
    ShippingResponse,
    TrackingResponse,
    TransmitShipmentsResponse,
)
from canadapost_pws.transport import HttpxTransport
from canadapost_pws.workflow import ContractShipmentState, transition

logger = logging.getLogger(__name__)

LocationInput = Location | Mapping[str, Any]


def _location(value: LocationInput) -> Location:
    if isinstance(value, Location):
        return value
    return Location.model_validate(value)


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (Package, LineItem, ShipmentGroup, str)):
        return [value]
    return list(value)


class CanadaPostClient:
    """Protocol adapter for the Canada Post web services.

    Every method performs exactly one request/response exchange and
    returns a fresh value; no shipment state is kept between calls.

    Args:
        config: Endpoint, credentials and account defaults. Read from
            ``CANADAPOST_*`` environment variables when omitted.
        transport: Anything implementing the Transport protocol.
            Defaults to an :class:`HttpxTransport` owned by the client.
        logger: Logger for request tracing.

    Raises:
        NoCredentialsFound: API key or secret is missing.
    """

    def __init__(
        self,
        config: CanadaPostConfig | None = None,
        *,
        transport: Transport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or CanadaPostConfig()
        self._api_key, self._secret = self.config.require_credentials()
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(
            timeout=self.config.timeout_seconds
        )
        self.logger = logger or logging.getLogger(__name__)

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(
            self._transport, HttpxTransport
        ):
            await self._transport.aclose()

    async def __aenter__(self) -> CanadaPostClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _context(
        self, options: RequestOptions | None = None
    ) -> builders.BuildContext:
        options = options or RequestOptions()
        return builders.BuildContext(
            endpoint=self.config.endpoint,
            api_key=self._api_key,
            secret=self._secret,
            customer_number=(
                options.customer_number or self.config.customer_number
            ),
            mailed_on_behalf_of=options.mailed_on_behalf_of,
            contract_id=options.contract_id or self.config.contract_id,
            language=self.config.language,
            platform_id=self.config.platform_id,
        )

    async def _exchange(
        self, request: builders.BuiltRequest, *, expect_xml: bool = True
    ) -> Success:
        self.logger.debug("%s %s", request.method, request.url)
        status_code, body = await self._transport.send(
            request.method,
            request.url,
            content=request.body,
            headers=request.headers,
        )
        self.logger.debug(
            "%s %s -> HTTP %s (%d bytes)",
            request.method,
            request.url,
            status_code,
            len(body),
        )
        return unwrap(
            classify(status_code, body, expect_xml=expect_xml), self.logger
        )

    # -- stateless operations ------------------------------------------------

    async def find_rates(
        self,
        origin: LocationInput,
        destination: LocationInput,
        packages: Package | Sequence[Package],
        options: RateOptions | None = None,
    ) -> RateResponse:
        """Quote every service available between two addresses."""
        options = options or RateOptions()
        request = builders.build_rate_request(
            self._context(options),
            _location(origin),
            _location(destination),
            _as_list(packages),
            options,
        )
        return decoders.decode_rates(await self._exchange(request))

    async def find_tracking_info(
        self, pin: str, options: RequestOptions | None = None
    ) -> TrackingResponse:
        """Fetch tracking detail for a pin.

        Raises:
            NoTrackingInfoFound: The carrier has no record of ``pin``.
        """
        request = builders.build_tracking_request(self._context(options), pin)
        return decoders.decode_tracking(await self._exchange(request))

    # -- shipments -----------------------------------------------------------

    async def create_shipment(
        self,
        origin: LocationInput,
        destination: LocationInput,
        package: Package,
        line_items: LineItem | Sequence[LineItem] | None,
        options: ShipmentOptions,
    ) -> ShippingResponse:
        """Create a non-contract (counter rate) shipment."""
        shipment = ShipmentRequest(
            origin=_location(origin),
            destination=_location(destination),
            packages=_as_list(package),
            line_items=_as_list(line_items),
            options=options,
        )
        request = builders.build_shipment_request(
            self._context(options), shipment
        )
        response = decoders.decode_shipment(await self._exchange(request))
        self.logger.info("Created shipment %s", response.shipping_id)
        return response

    async def create_contract_shipment(
        self,
        origin: LocationInput,
        destination: LocationInput,
        package: Package,
        line_items: LineItem | Sequence[LineItem] | None,
        options: ContractShipmentOptions,
    ) -> ContractShippingResponse:
        """Create a contract shipment in the ``created`` state."""
        shipment = ShipmentRequest(
            origin=_location(origin),
            destination=_location(destination),
            packages=_as_list(package),
            line_items=_as_list(line_items),
            options=options,
        )
        ctx = self._context(options)
        request = builders.build_contract_shipment_request(ctx, shipment)
        response = decoders.decode_contract_shipment(
            await self._exchange(request), ctx
        )
        self.logger.info(
            "Created contract shipment %s (group %s)",
            response.shipping_id,
            response.group_id,
        )
        return response

    async def get_contract_shipment(
        self,
        shipment: ContractShippingResponse,
        options: RequestOptions | None = None,
    ) -> ContractShippingResponse:
        """Re-read a contract shipment from the carrier."""
        ctx = self._context(options)
        request = builders.build_get_contract_shipment_request(
            ctx, shipment.self_url
        )
        return decoders.decode_contract_shipment(
            await self._exchange(request), ctx
        )

    async def void_contract_shipment(
        self,
        shipment: ContractShippingResponse,
        options: RequestOptions | None = None,
    ) -> bool:
        """Void a contract shipment that has not been transmitted.

        Raises:
            InvalidTransitionError: The carrier-reported state of
                ``shipment`` cannot be voided.
            CarrierError: The carrier refused, e.g. it is already void.
        """
        if shipment.state is not None:
            transition(shipment.state, ContractShipmentState.VOID)
        request = builders.build_void_request(
            self._context(options), shipment.self_url
        )
        await self._exchange(request)
        self.logger.info("Voided contract shipment %s", shipment.shipping_id)
        return True

    async def get_contract_shipment_groups(
        self, options: RequestOptions | None = None
    ) -> ContractShipmentGroupsResponse:
        """List the groups holding untransmitted contract shipments."""
        request = builders.build_shipment_groups_request(
            self._context(options)
        )
        return decoders.decode_shipment_groups(await self._exchange(request))

    async def retrieve_shipping_label(
        self,
        shipment: ShippingResponse | ContractShippingResponse,
        options: RequestOptions | None = None,
    ) -> bytes:
        """Download the label artifact.

        Returns an empty byte string while the carrier is still rendering
        the label.
        """
        if not shipment.label_url:
            raise ValueError(
                f"Shipment {shipment.shipping_id} has no label link"
            )
        request = builders.build_label_request(
            self._context(options), shipment.label_url
        )
        success = await self._exchange(request, expect_xml=False)
        return success.body

    async def retrieve_contract_shipping_label(
        self,
        shipment: ContractShippingResponse,
        options: RequestOptions | None = None,
    ) -> bytes:
        return await self.retrieve_shipping_label(shipment, options)

    # -- manifests -----------------------------------------------------------

    async def transmit_shipments(
        self,
        origin: LocationInput,
        group_ids: str | ShipmentGroup | Sequence[str | ShipmentGroup],
        options: TransmitOptions | None = None,
    ) -> TransmitShipmentsResponse:
        """Close the given groups and request their manifests."""
        options = options or TransmitOptions()
        ids = [
            group.group_id if isinstance(group, ShipmentGroup) else group
            for group in _as_list(group_ids)
        ]
        request = builders.build_transmit_request(
            self._context(options), _location(origin), ids, options
        )
        response = decoders.decode_transmit(await self._exchange(request))
        self.logger.info(
            "Transmitted groups %s, %d manifest(s)",
            ", ".join(ids),
            len(response.manifest_urls),
        )
        return response

    async def get_manifest(
        self,
        transmitted: TransmitShipmentsResponse,
        options: RequestOptions | None = None,
    ) -> GetManifestResponse:
        """Fetch the first manifest of a transmit once.

        The carrier builds manifests asynchronously; poll until
        ``ready`` (see :func:`canadapost_pws.polling.poll_manifest`).
        """
        if not isinstance(transmitted, TransmitShipmentsResponse):
            raise TypeError("get_manifest needs a TransmitShipmentsResponse")
        request = builders.build_manifest_request(
            self._context(options), transmitted.manifest_url
        )
        return decoders.decode_manifest(
            await self._exchange(request), transmitted.manifest_url
        )
