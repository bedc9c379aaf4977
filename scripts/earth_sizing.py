#!/usr/bin/env python3
"""
Earth Conductor Sizing Module
Minimum protective earth conductor size and its impedance.

The earth size follows the active conductor size through a fixed step
table (simplified from AS/NZS 3000 Table 5.1). Sizes not in the table use
DEFAULT_EARTH_SIZE.

Standards: AS/NZS 3000:2018 Table 5.1
"""

import math
from dataclasses import dataclass
from typing import Optional

from cable_impedance import get_reactance, get_resistance
from design_state import DesignState
from reference_data import ReferenceDataset, resolve_dataset
from table_matching import ESTIMATED

# Active conductor size (mm²) -> minimum earth conductor size (mm²)
EARTH_SIZE_TABLE = {
    1: 1,
    1.5: 1.5,
    2.5: 2.5,
    4: 2.5,
    6: 2.5,
    10: 4,
    16: 6,
    25: 6,
    35: 10,
    50: 10,
    70: 16,
    95: 16,
    120: 16,
}
DEFAULT_EARTH_SIZE = 6

# Earth return path resistance relative to the tabulated conductor resistance
EARTH_RESISTANCE_MULTIPLIER = 1.5


@dataclass(frozen=True)
class EarthImpedance:
    size: float
    resistance: float   # Ω/km, includes EARTH_RESISTANCE_MULTIPLIER
    reactance: float    # Ω/km
    resistance_ref: str
    reactance_ref: str

    @property
    def impedance(self) -> float:
        return math.hypot(self.resistance, self.reactance)

    @property
    def estimated(self) -> bool:
        return ESTIMATED in self.resistance_ref or ESTIMATED in self.reactance_ref


def calc_earth_size(active_size: float) -> float:
    """
    Minimum earth conductor size for an active conductor size.

    Example:
        >>> calc_earth_size(16)
        6
    """
    return EARTH_SIZE_TABLE.get(active_size, DEFAULT_EARTH_SIZE)


def resolve_earth_size(design: DesignState, active_size: float) -> float:
    """Requested earth size, or the size derived from the active conductor."""
    if design.earth_size is not None:
        return design.earth_size
    return calc_earth_size(active_size)


def earth_impedance(
    earth_size: float,
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> EarthImpedance:
    """
    Earth conductor impedance per km.

    R_earth = EARTH_RESISTANCE_MULTIPLIER × R(earth_size), X_earth = X(earth_size),
    Z_earth = sqrt(R_earth² + X_earth²).
    """
    dataset = resolve_dataset(dataset)
    resistance = get_resistance(earth_size, design, dataset)
    reactance = get_reactance(earth_size, design, dataset)
    return EarthImpedance(
        size=earth_size,
        resistance=resistance.value * EARTH_RESISTANCE_MULTIPLIER,
        reactance=reactance.value,
        resistance_ref=resistance.reference,
        reactance_ref=reactance.reference,
    )


if __name__ == "__main__":
    print("Testing earth_sizing module...")
    print("=" * 60)

    for size in (2.5, 6, 16, 35, 95, 150):
        print(f"   Active {size} mm² -> earth {calc_earth_size(size)} mm²")

    print("\n" + "=" * 60)
    print("All tests completed!")
