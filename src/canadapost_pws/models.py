"""Shipment value objects consumed by the request builders."""

from __future__ import annotations

import math
from decimal import Decimal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from canadapost_pws.options import ShipmentOptions

# Canada Post volumetric divisor, cm^3 per kg.
VOLUMETRIC_DIVISOR = 6000


class Location(BaseModel):
    """Postal address of a sender or receiver.

    ``state`` and ``zip`` are accepted as aliases of ``province`` and
    ``postal_code`` for US addresses.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    company: str = ""
    phone: str = ""
    email: str | None = None
    address1: str = ""
    address2: str = ""
    address3: str = ""
    city: str = ""
    province: str = Field(
        default="", validation_alias=AliasChoices("province", "state")
    )
    country: str
    postal_code: str = Field(
        default="", validation_alias=AliasChoices("postal_code", "zip")
    )

    @field_validator("country")
    @classmethod
    def _upper_country(cls, value: str) -> str:
        return value.strip().upper()

    def is_domestic_to(self, other: Location) -> bool:
        return self.country == other.country

    @property
    def address_lines(self) -> list[str]:
        return [
            line for line in (self.address1, self.address2, self.address3)
            if line
        ]


class Package(BaseModel):
    """A single parcel.

    Weight is in grams and dimensions in centimetres. A cylinder is
    described by its length and diameter, e.g. ``[93, 10, 10]``.
    """

    model_config = ConfigDict(frozen=True)

    weight: float = Field(gt=0)
    dimensions: list[float] = Field(default_factory=list, max_length=3)
    value: Decimal | None = None
    currency: str = "CAD"
    cylinder: bool = False

    @field_validator("dimensions")
    @classmethod
    def _non_negative(cls, value: list[float]) -> list[float]:
        if any(d < 0 for d in value):
            raise ValueError("dimensions must not be negative")
        return value

    @property
    def kilograms(self) -> float:
        return self.weight / 1000

    @property
    def cm(self) -> list[float]:
        """Dimensions sorted ascending."""
        return sorted(self.dimensions)

    @property
    def has_dimensions(self) -> bool:
        return len(self.dimensions) == 3 and all(self.dimensions)

    @property
    def volume_cm3(self) -> float:
        """Enclosed volume, shape dependent.

        Rectangular boxes use ``l * w * h``. Cylinders use an elliptical
        cross-section over the two shorter sides, which reduces to
        ``pi * r^2 * l`` for a round tube.
        """
        if not self.has_dimensions:
            return 0.0
        height, width, length = self.cm
        if self.cylinder:
            return math.pi * (width / 2) * (height / 2) * length
        return length * width * height

    @property
    def volumetric_weight_kg(self) -> float:
        return self.volume_cm3 / VOLUMETRIC_DIVISOR

    @property
    def billable_weight_kg(self) -> float:
        return max(self.kilograms, self.volumetric_weight_kg)


class LineItem(BaseModel):
    """Customs line. ``value`` and ``weight`` (grams) cover the whole line."""

    model_config = ConfigDict(frozen=True)

    description: str
    quantity: int = Field(default=1, ge=1)
    value: Decimal
    weight: float = Field(ge=0)
    country_of_origin: str = "CA"
    province_of_origin: str | None = None
    sku: str | None = None
    hs_code: str | None = None

    @property
    def unit_value(self) -> Decimal:
        return (self.value / self.quantity).quantize(Decimal("0.01"))

    @property
    def unit_weight_kg(self) -> float:
        return self.weight / 1000 / self.quantity


class ShipmentRequest(BaseModel):
    """Everything needed to build one outbound request."""

    model_config = ConfigDict(frozen=True)

    origin: Location
    destination: Location
    packages: list[Package] = Field(min_length=1)
    line_items: list[LineItem] = Field(default_factory=list)
    options: ShipmentOptions

    @model_validator(mode="after")
    def _origin_is_canadian(self) -> ShipmentRequest:
        if self.origin.country != "CA":
            raise ValueError("Canada Post shipments must originate in CA")
        return self

    @property
    def package(self) -> Package:
        return self.packages[0]

    @property
    def is_domestic(self) -> bool:
        return self.origin.is_domestic_to(self.destination)

    @property
    def is_us_bound(self) -> bool:
        return self.destination.country == "US"
