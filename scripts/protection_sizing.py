#!/usr/bin/env python3
"""
Protection Device Sizing Module
Circuit breaker rating and curve trip current for a cable run.

Selection:
1. Smallest standard MCB rating at or above the load current
2. Loads above the ladder are capped at the largest rating
3. Minimum magnetic trip current = rating × curve trip multiple

Curve B is used for every circuit. Coordination with the cable's adjusted
current rating is not checked here.

Author: Cable Size Calculator
Standards: AS/NZS 60898.1, AS/NZS 3000:2018 Section 2.5
"""

from dataclasses import dataclass
from typing import Literal

from design_state import DesignState


# Standard MCB ratings (A)
MCB_RATINGS = [6, 10, 16, 20, 25, 32, 40, 50, 63, 80, 100, 125]

# Instantaneous trip multiple of rated current per curve
TRIP_MULTIPLES = {
    "B": 4,
    "C": 7.5,
    "D": 12.5,
}
DEFAULT_TRIP_MULTIPLE = 4

DEFAULT_DEVICE_TYPE = "MCB"
DEFAULT_CURVE = "B"


@dataclass(frozen=True)
class ProtectionDevice:
    device_type: str
    rating_a: float
    curve: str
    trip_multiple: float

    @property
    def min_trip_current_a(self) -> float:
        return self.rating_a * self.trip_multiple


def select_mcb_rating(load_current: float) -> float:
    """
    Smallest standard MCB rating ≥ load current.

    Example:
        >>> select_mcb_rating(47)
        50
        >>> select_mcb_rating(300)
        125
    """
    return next((r for r in MCB_RATINGS if r >= load_current), MCB_RATINGS[-1])


def get_trip_multiple(curve: str) -> float:
    """Trip multiple for a curve letter; unknown curves use the B multiple."""
    return TRIP_MULTIPLES.get(curve.upper(), DEFAULT_TRIP_MULTIPLE)


def size_protection_device(
    design: DesignState,
    curve: Literal["B", "C", "D"] = DEFAULT_CURVE,
) -> ProtectionDevice:
    """
    Select the protection device for a design.

    Args:
        design: Design state (uses load current)
        curve: Trip curve

    Returns:
        ProtectionDevice
    """
    return ProtectionDevice(
        device_type=DEFAULT_DEVICE_TYPE,
        rating_a=select_mcb_rating(design.load_current),
        curve=curve,
        trip_multiple=get_trip_multiple(curve),
    )


if __name__ == "__main__":
    print("Testing protection_sizing module...")
    print("=" * 60)

    for load in (5, 16, 17, 47, 63, 126):
        rating = select_mcb_rating(load)
        print(f"   Load {load} A -> MCB {rating} A, B-curve trip {rating * get_trip_multiple('B'):.0f} A")

    print("\n" + "=" * 60)
    print("All tests completed!")
