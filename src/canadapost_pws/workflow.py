"""Contract shipment lifecycle.

Created -> Transmitted -> Manifested, or Created -> Void. The state is
always the one reported by the carrier; nothing here is persisted.
"""

from __future__ import annotations

from enum import StrEnum

from canadapost_pws.exceptions import InvalidTransitionError


class ContractShipmentState(StrEnum):
    CREATED = "created"
    TRANSMITTED = "transmitted"
    MANIFESTED = "manifested"
    VOID = "void"


_NEXT_STATES: dict[ContractShipmentState, frozenset[ContractShipmentState]] = {
    ContractShipmentState.CREATED: frozenset(
        {ContractShipmentState.TRANSMITTED, ContractShipmentState.VOID}
    ),
    ContractShipmentState.TRANSMITTED: frozenset(
        {ContractShipmentState.MANIFESTED}
    ),
    ContractShipmentState.MANIFESTED: frozenset(),
    ContractShipmentState.VOID: frozenset(),
}

# Carrier spellings of shipment-status.
_CARRIER_STATUSES: dict[str, ContractShipmentState] = {
    "created": ContractShipmentState.CREATED,
    "transmitted": ContractShipmentState.TRANSMITTED,
    "manifested": ContractShipmentState.MANIFESTED,
    "void": ContractShipmentState.VOID,
    "voided": ContractShipmentState.VOID,
    "cancelled": ContractShipmentState.VOID,
}


def get_next_states(
    current: ContractShipmentState,
) -> frozenset[ContractShipmentState]:
    """Get the states reachable from ``current``."""
    return _NEXT_STATES[current]


def can_transition(
    current: ContractShipmentState, target: ContractShipmentState
) -> bool:
    return target in _NEXT_STATES[current]


def transition(
    current: ContractShipmentState, target: ContractShipmentState
) -> ContractShipmentState:
    """Return ``target`` if reachable from ``current``.

    Raises:
        InvalidTransitionError: ``target`` is not reachable.
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(str(current), str(target))
    return target


def state_from_carrier(status: str | None) -> ContractShipmentState | None:
    """Map a carrier ``shipment-status`` to a state, ``None`` if unknown."""
    if not status:
        return None
    return _CARRIER_STATUSES.get(status.strip().lower())
