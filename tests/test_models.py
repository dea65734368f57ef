"""Tests for shipment value objects."""

from __future__ import annotations

import math
from decimal import Decimal

import pytest
from pydantic import ValidationError

from canadapost_pws.models import (
    VOLUMETRIC_DIVISOR,
    LineItem,
    Location,
    Package,
    ShipmentRequest,
)
from canadapost_pws.options import ShipmentOptions


class TestLocation:
    def test_aliases(self) -> None:
        """state and zip are accepted."""
        location = Location(country="us", state="NY", zip="10118")
        assert location.country == "US"
        assert location.province == "NY"
        assert location.postal_code == "10118"

    def test_field_names_still_work(self) -> None:
        """Field names work alongside aliases."""
        location = Location(country="CA", province="ON", postal_code="K1A")
        assert location.province == "ON"

    def test_address_lines_skip_blanks(self) -> None:
        """Blank address lines are skipped."""
        location = Location(country="CA", address1="1 Main", address3="Rear")
        assert location.address_lines == ["1 Main", "Rear"]

    def test_is_frozen(self) -> None:
        """Locations are immutable."""
        location = Location(country="CA")
        with pytest.raises(ValidationError):
            location.city = "Ottawa"


class TestPackage:
    def test_rectangular_volume(self) -> None:
        """Box volume is l*w*h."""
        package = Package(weight=1000, dimensions=[93, 10, 10])
        assert package.volume_cm3 == 9300
        assert package.volumetric_weight_kg == 9300 / VOLUMETRIC_DIVISOR
        assert package.billable_weight_kg == pytest.approx(1.55)

    def test_cylinder_volume(self) -> None:
        """Cylinder volume uses the elliptic cross-section."""
        package = Package(weight=1000, dimensions=[10, 93, 10], cylinder=True)
        assert package.cm == [10, 10, 93]
        assert package.volume_cm3 == pytest.approx(math.pi * 25 * 93)
        assert package.billable_weight_kg == pytest.approx(1.2174, abs=1e-4)

    def test_shape_changes_billable_weight(self) -> None:
        """Shape changes the billable weight."""
        box = Package(weight=1000, dimensions=[93, 10, 10])
        tube = Package(weight=1000, dimensions=[93, 10, 10], cylinder=True)
        assert tube.billable_weight_kg < box.billable_weight_kg

    def test_actual_weight_wins_when_heavier(self) -> None:
        """Dense parcels bill on actual weight."""
        package = Package(weight=5000, dimensions=[10, 10, 10])
        assert package.billable_weight_kg == 5.0

    def test_without_dimensions(self) -> None:
        """No dimensions, no volumetric weight."""
        package = Package(weight=250)
        assert package.has_dimensions is False
        assert package.volume_cm3 == 0.0
        assert package.kilograms == 0.25

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"weight": 0},
            {"weight": 100, "dimensions": [1, 2, 3, 4]},
            {"weight": 100, "dimensions": [1, -2, 3]},
        ],
    )
    def test_invalid_packages(self, kwargs) -> None:
        """Non-positive weights and dimensions are rejected."""
        with pytest.raises(ValidationError):
            Package(**kwargs)


class TestLineItem:
    def test_unit_values(self) -> None:
        """Line items carry per-unit values."""
        item = LineItem(
            description="Mugs", quantity=3, value=Decimal("10"), weight=900
        )
        assert item.unit_value == Decimal("3.33")
        assert item.unit_weight_kg == pytest.approx(0.3)

    def test_quantity_must_be_positive(self) -> None:
        """Zero quantity is rejected."""
        with pytest.raises(ValidationError):
            LineItem(description="x", quantity=0, value=1, weight=1)


class TestShipmentRequest:
    def test_origin_must_be_canadian(self, us_destination, box) -> None:
        """Shipments originate in Canada."""
        with pytest.raises(ValidationError, match="originate in CA"):
            ShipmentRequest(
                origin=us_destination,
                destination=us_destination,
                packages=[box],
                options=ShipmentOptions(service="DOM.EP"),
            )

    def test_needs_a_package(self, origin, destination) -> None:
        """Shipments need a package."""
        with pytest.raises(ValidationError):
            ShipmentRequest(
                origin=origin,
                destination=destination,
                packages=[],
                options=ShipmentOptions(service="DOM.EP"),
            )

    def test_destination_flags(self, origin, us_destination, box) -> None:
        """Domestic and US flags follow the destination."""
        request = ShipmentRequest(
            origin=origin,
            destination=us_destination,
            packages=[box],
            options=ShipmentOptions(service="USA.EP"),
        )
        assert request.is_domestic is False
        assert request.is_us_bound is True
        assert request.package is box
