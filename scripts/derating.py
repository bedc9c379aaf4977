#!/usr/bin/env python3
"""
Derating Module
Combined current-rating correction factor per AS/NZS 3008.

Implements derating for:
- Ambient temperature (C_a)
- Grouping / bunching (C_g)
- Soil thermal resistivity, buried and underground-duct installations (C_s)
- Installation method (C_i)

C_total = C_a × C_g × C_s × C_i is applied to every size of the matched
column: derating depends on the configuration, not on the conductor size.

Grouping, soil and installation factors are fixed placeholders; the full
AS/NZS 3008 tables for them are not part of the reference data.

Standards: AS/NZS 3008.1.1:2017 Section 3
"""

import logging
import math
from dataclasses import dataclass

from design_state import DesignState

logger = logging.getLogger(__name__)

# Assumed ambient air temperature (°C)
AMBIENT_TEMPERATURE_C = 40

# Ambient temperature the tabulated ratings are based on (°C)
REFERENCE_AMBIENT_C = 40

GROUPING_FACTOR = 0.95
SOIL_THERMAL_FACTOR = 0.9
INSTALLATION_FACTOR = 1.0


@dataclass(frozen=True)
class DeratingFactors:
    ambient: float
    grouping: float
    soil: float
    installation: float

    @property
    def combined(self) -> float:
        return self.ambient * self.grouping * self.soil * self.installation


@dataclass(frozen=True)
class CandidateRow:
    """One conductor size of the search space."""
    size: float
    base_rating: float
    adjusted_rating: float
    meets_load: bool


def get_ambient_factor(
    rated_temp_c: float,
    ambient_temp_c: float = AMBIENT_TEMPERATURE_C,
    reference_temp_c: float = REFERENCE_AMBIENT_C,
) -> float:
    """
    Ambient temperature correction factor.

    C_a = sqrt((T_max - T_amb) / (T_max - T_ref)) above the reference
    ambient; 1.0 at or below it.

    Args:
        rated_temp_c: Maximum conductor operating temperature (°C)
        ambient_temp_c: Ambient temperature (°C)
        reference_temp_c: Ambient temperature of the tabulated ratings (°C)

    Returns:
        Correction factor in [0, 1]
    """
    if ambient_temp_c <= reference_temp_c:
        return 1.0
    if rated_temp_c <= reference_temp_c:
        # Formula undefined here; no correction applied
        return 1.0
    if ambient_temp_c >= rated_temp_c:
        logger.warning(
            "Ambient %s°C at or above rated conductor temperature %s°C; cable has no capacity",
            ambient_temp_c, rated_temp_c,
        )
        return 0.0
    return math.sqrt((rated_temp_c - ambient_temp_c) / (rated_temp_c - reference_temp_c))


def get_grouping_factor(design: DesignState) -> float:
    return GROUPING_FACTOR


def get_soil_thermal_factor(design: DesignState) -> float:
    """Soil factor; only buried and underground-duct installations are derated."""
    return SOIL_THERMAL_FACTOR if design.installation.is_underground else 1.0


def get_installation_factor(design: DesignState) -> float:
    return INSTALLATION_FACTOR


def compute_derating(
    design: DesignState,
    ambient_temp_c: float = AMBIENT_TEMPERATURE_C,
) -> DeratingFactors:
    """
    Compute the derating factors for a design.

    Args:
        design: Design state
        ambient_temp_c: Ambient temperature (°C)

    Returns:
        DeratingFactors (use .combined for C_total)
    """
    return DeratingFactors(
        ambient=get_ambient_factor(design.insulation.rated_temperature_c, ambient_temp_c),
        grouping=get_grouping_factor(design),
        soil=get_soil_thermal_factor(design),
        installation=get_installation_factor(design),
    )


def apply_derating(
    rows: list[tuple[float, float]],
    factors: DeratingFactors,
    load_current: float,
) -> list[CandidateRow]:
    """
    Apply C_total to each (size, base rating) row and mark sizes that carry the load.

    Args:
        rows: (size mm², base current rating A) pairs
        factors: Derating factors for the configuration
        load_current: Design load current I_b (A)

    Returns:
        CandidateRow list, ascending by size
    """
    c_total = factors.combined
    candidates = []
    for size, base in sorted(rows):
        adjusted = base * c_total
        candidates.append(CandidateRow(
            size=size,
            base_rating=base,
            adjusted_rating=adjusted,
            meets_load=adjusted >= load_current,
        ))
    return candidates


def operating_temperature(
    design: DesignState,
    combined_factor: float,
    ambient_temp_c: float = AMBIENT_TEMPERATURE_C,
) -> float:
    """Estimated conductor operating temperature: T_amb + (T_max - T_amb)(1 - C_total)."""
    rated = design.insulation.rated_temperature_c
    return ambient_temp_c + (rated - ambient_temp_c) * (1 - combined_factor)


if __name__ == "__main__":
    print("Testing derating module...")
    print("=" * 60)

    for rated in (75, 90, 110):
        for ambient in (30, 40, 45, 50):
            factor = get_ambient_factor(rated, ambient)
            print(f"   T_max {rated}°C, ambient {ambient}°C: C_a = {factor:.3f}")

    print("\n" + "=" * 60)
    print("All tests completed!")
