#!/usr/bin/env python3
"""
Fault Current Module
Short-circuit thermal withstand check for the active conductor.

Adiabatic check: the conductor withstands the fault when

    I² × t ≤ K² × S²

with K from the insulation family and S the conductor size (mm²).

The fault current and clearing time are ASSUMED constants, not derived
from a fault level study or the protective device curve. The result is
flagged accordingly.

Standards: AS/NZS 3008.1.1:2017 Section 5
"""

from dataclasses import dataclass

from design_state import InsulationFamily, Insulation

# Assumed prospective fault current (A) and clearing time (s)
ASSUMED_FAULT_CURRENT_A = 1000
ASSUMED_FAULT_TIME_S = 0.1

# K constant for copper conductors by insulation family
K_FACTORS = {
    InsulationFamily.THERMOPLASTIC: 115,
    InsulationFamily.XLPE: 143,
    InsulationFamily.ELASTOMERIC: 143,
}
DEFAULT_K_FACTOR = 115

ASSUMED_FAULT_WARNING = (
    "PRELIMINARY - fault current and clearing time are assumed values, "
    "verify against the fault level and protective device"
)


@dataclass(frozen=True)
class ShortCircuitCheck:
    passes: bool
    i2t: float
    k2s2: float
    k: float
    size: float
    fault_current_a: float
    fault_time_s: float
    warning: str = ASSUMED_FAULT_WARNING


def get_k_factor(insulation: Insulation) -> float:
    """K constant for the insulation's family (115 when not listed)."""
    return K_FACTORS.get(insulation.family, DEFAULT_K_FACTOR)


def check_short_circuit(
    size: float,
    insulation: Insulation,
    fault_current_a: float = ASSUMED_FAULT_CURRENT_A,
    fault_time_s: float = ASSUMED_FAULT_TIME_S,
) -> ShortCircuitCheck:
    """
    Check I²t ≤ K²S² for a conductor.

    Args:
        size: Conductor size S (mm²)
        insulation: Insulation code (selects K)
        fault_current_a: Prospective fault current (A)
        fault_time_s: Fault clearing time (s)

    Returns:
        ShortCircuitCheck

    Example:
        >>> check_short_circuit(16, Insulation.PVC_V90).passes
        True
    """
    k = get_k_factor(insulation)
    i2t = fault_current_a ** 2 * fault_time_s
    k2s2 = k ** 2 * size ** 2
    return ShortCircuitCheck(
        passes=i2t <= k2s2,
        i2t=i2t,
        k2s2=k2s2,
        k=k,
        size=size,
        fault_current_a=fault_current_a,
        fault_time_s=fault_time_s,
    )


def min_withstand_size(
    insulation: Insulation,
    fault_current_a: float = ASSUMED_FAULT_CURRENT_A,
    fault_time_s: float = ASSUMED_FAULT_TIME_S,
) -> float:
    """Smallest conductor size (mm²) that passes: S = I√t / K."""
    return fault_current_a * fault_time_s ** 0.5 / get_k_factor(insulation)


if __name__ == "__main__":
    print("Testing fault_current module...")
    print("=" * 60)

    for size in (1, 1.5, 2.5, 4):
        result = check_short_circuit(size, Insulation.PVC_V75)
        status = "PASS" if result.passes else "FAIL"
        print(f"   {size} mm² PVC: I²t = {result.i2t:.0f}, K²S² = {result.k2s2:.0f} -> {status}")

    print(f"\n   Minimum size (PVC): {min_withstand_size(Insulation.PVC_V75):.2f} mm²")
    print(f"   Minimum size (XLPE): {min_withstand_size(Insulation.XLPE_90):.2f} mm²")

    print("\n" + "=" * 60)
    print("All tests completed!")
