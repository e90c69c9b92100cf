"""
Unit Registry and Measures for Coordinate Operations.

This module provides the unit system used by CRS definitions and unit
conversion operations. Scale factors are never hard-coded: each unit is
declared by its `pint` definition and its factor to the SI base unit of its
kind is computed by the global registry.

Conventions
-----------
Operations work internally in radians for angles and metres for lengths.
A :class:`Unit` only carries what a unit conversion needs: its kind and its
scale to that internal convention.

Example Usage
-------------
>>> from common.units import DEGREE, GRAD, Measure
>>> round(Measure(180.0, DEGREE).to_si(), 6)
3.141593
>>> round(Measure(1.0, GRAD).convert_to(DEGREE).value, 6)
0.9
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

import pint
from pint import UnitRegistry as PintUnitRegistry

from common.exceptions import MalformedDefinitionError

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity

try:
    ureg.define("us_survey_foot = 1200 / 3937 * meter = ussft")
except pint.errors.RedefinitionError:
    # Already defined by this pint version
    pass


class Quantity(Enum):
    """Kind of physical quantity measured by a unit.

    Each member carries the pint name of the SI base unit of its kind.
    """

    LENGTH = ("length", "meter")
    ANGLE = ("angle", "radian")
    NODIM = ("dimensionless", "dimensionless")
    TIME = ("time", "second")

    def __init__(self, label: str, base_unit: str):
        self.label = label
        self.base_unit = base_unit


@dataclass(frozen=True, eq=False)
class Unit:
    """A unit of measure.

    Attributes
    ----------
    name : str
        Display name.
    quantity : Quantity
        Kind of quantity measured.
    scale : float
        Factor converting a value in this unit to the SI base unit of its kind.
    """
    name: str
    quantity: Quantity
    scale: float

    @classmethod
    def from_pint(cls, name: str, quantity: Quantity, pint_unit: str) -> 'Unit':
        """Build a unit whose scale is computed by the pint registry."""
        scale = Q_(1.0, pint_unit).to(quantity.base_unit).magnitude
        return cls(name, quantity, float(scale))

    def convert(self, value: float, target: 'Unit') -> float:
        """Convert a value from this unit to ``target``.

        Raises
        ------
        MalformedDefinitionError
            If the two units do not measure the same quantity.
        """
        if target.quantity is not self.quantity:
            raise MalformedDefinitionError(
                f"Cannot convert {self.quantity.label} ({self.name}) "
                f"to {target.quantity.label} ({target.name})"
            )
        return value * self.scale / target.scale

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Unit):
            return NotImplemented
        return (
            self.quantity is other.quantity
            and abs(self.scale - other.scale) <= 1e-15 * max(abs(self.scale), 1.0)
        )

    def __hash__(self) -> int:
        return hash((self.quantity, round(self.scale, 12)))

    def __repr__(self) -> str:
        return f"Unit({self.name!r}, {self.quantity.name}, scale={self.scale!r})"


@dataclass(frozen=True)
class Measure:
    """A value tagged with its unit."""
    value: float
    unit: Unit

    def to_si(self) -> float:
        """Value expressed in the SI base unit of its kind."""
        return self.value * self.unit.scale

    def convert_to(self, target: Unit) -> 'Measure':
        return Measure(self.unit.convert(self.value, target), target)

    def to_quantity(self) -> pint.Quantity:
        """The measure as a pint quantity in SI base units."""
        return Q_(self.to_si(), self.unit.quantity.base_unit)


# Well-known units
METER = Unit.from_pint("metre", Quantity.LENGTH, "meter")
KILOMETER = Unit.from_pint("kilometre", Quantity.LENGTH, "kilometer")
FOOT = Unit.from_pint("foot", Quantity.LENGTH, "foot")
US_SURVEY_FOOT = Unit.from_pint("US survey foot", Quantity.LENGTH, "us_survey_foot")
RADIAN = Unit.from_pint("radian", Quantity.ANGLE, "radian")
DEGREE = Unit.from_pint("degree", Quantity.ANGLE, "degree")
GRAD = Unit.from_pint("grad", Quantity.ANGLE, "grad")
ARC_SECOND = Unit.from_pint("arc-second", Quantity.ANGLE, "arcsecond")
UNIT = Unit.from_pint("unity", Quantity.NODIM, "dimensionless")
PPM = Unit.from_pint("parts per million", Quantity.NODIM, "ppm")
SECOND = Unit.from_pint("second", Quantity.TIME, "second")

_UNITS_BY_NAME: Dict[str, Unit] = {
    "m": METER, "meter": METER, "metre": METER,
    "km": KILOMETER, "kilometer": KILOMETER, "kilometre": KILOMETER,
    "ft": FOOT, "foot": FOOT, "international foot": FOOT,
    "us survey foot": US_SURVEY_FOOT, "us-ft": US_SURVEY_FOOT, "foot_us": US_SURVEY_FOOT,
    "rad": RADIAN, "radian": RADIAN,
    "deg": DEGREE, "degree": DEGREE, "decimal degree": DEGREE,
    "grad": GRAD, "grade": GRAD, "gon": GRAD,
    "arc-second": ARC_SECOND, "arcsec": ARC_SECOND, "arc second": ARC_SECOND,
    "unity": UNIT, "unit": UNIT,
    "ppm": PPM, "parts per million": PPM,
    "s": SECOND, "second": SECOND,
}


def unit_from_name(name: str) -> Unit:
    """Resolve a unit by name or alias.

    Names of the well-known units (case-insensitive) are tried first. Any
    other length or time unit that pint understands is accepted as well.

    Raises
    ------
    MalformedDefinitionError
        If the name does not denote a usable unit.
    """
    key = name.strip().lower()
    if key in _UNITS_BY_NAME:
        return _UNITS_BY_NAME[key]
    try:
        parsed = ureg.Unit(name.strip())
    except (pint.errors.UndefinedUnitError, ValueError, AttributeError) as e:
        raise MalformedDefinitionError(f"Unknown unit: {name!r}") from e
    for quantity in (Quantity.LENGTH, Quantity.TIME):
        if parsed.dimensionality == ureg.Unit(quantity.base_unit).dimensionality:
            return Unit.from_pint(name, quantity, name.strip())
    raise MalformedDefinitionError(f"Unit {name!r} is neither a length nor a time unit")
