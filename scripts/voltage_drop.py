#!/usr/bin/env python3
"""
Voltage Drop Calculation Module
Voltage drop, maximum run length and loop impedance for a cable run.

Formulas (Z in Ω/km, I in A, L in m):
- 3-phase AC:      ΔV = I × L × √3 × Z / 1000
- all other systems (1-phase AC, DC, 2-phase): ΔV = I × L × 2 × Z / 1000
- Vd% = ΔV / V × 100
- L_max = (Vd_max% / 100 × V × 1000) / (I × k × Z)

DC and both 2-phase systems use the single-phase multiplier. DC still uses
the AC impedance (reactance included).

Standards: AS/NZS 3008.1.1:2017 Section 4
"""

import math
from dataclasses import dataclass
from typing import Optional

from cable_impedance import CableImpedance
from design_state import DesignState, PhaseConfig
from earth_sizing import EarthImpedance


@dataclass(frozen=True)
class VoltageDrop:
    voltage_drop_v: float
    voltage_drop_pct: float
    voltage_at_load_v: float
    max_distance_m: Optional[float]  # None when current or impedance is zero


@dataclass(frozen=True)
class LoopImpedance:
    phase_impedance: float
    earth_impedance: float

    @property
    def total_impedance(self) -> float:
        return self.phase_impedance + self.earth_impedance


def phase_multiplier(phase: PhaseConfig) -> float:
    """√3 for 3-phase AC, 2 for every other system."""
    return math.sqrt(3) if phase is PhaseConfig.THREE_PHASE_AC else 2.0


def calc_voltage_drop_v(
    current_a: float,
    length_m: float,
    impedance_ohm_per_km: float,
    phase: PhaseConfig,
) -> float:
    """Voltage drop in volts for a run."""
    return current_a * length_m * phase_multiplier(phase) * impedance_ohm_per_km / 1000


def calc_voltage_drop_pct(
    current_a: float,
    length_m: float,
    impedance_ohm_per_km: float,
    voltage: float,
    phase: PhaseConfig,
) -> float:
    """
    Voltage drop as a percentage of the nominal voltage.

    Example:
        >>> round(calc_voltage_drop_pct(63, 40, 0.18, 400, PhaseConfig.THREE_PHASE_AC), 3)
        0.196
    """
    return calc_voltage_drop_v(current_a, length_m, impedance_ohm_per_km, phase) / voltage * 100


def calc_max_distance(
    current_a: float,
    impedance_ohm_per_km: float,
    voltage: float,
    max_voltage_drop_pct: float,
    phase: PhaseConfig,
) -> Optional[float]:
    """
    Longest run (m) that keeps the drop within max_voltage_drop_pct.

    Returns:
        Distance in m, or None when current or impedance is zero
    """
    denominator = current_a * phase_multiplier(phase) * impedance_ohm_per_km
    if denominator <= 0:
        return None
    max_drop_v = voltage * max_voltage_drop_pct / 100
    return max_drop_v * 1000 / denominator


def calculate_voltage_drop(design: DesignState, impedance: CableImpedance) -> VoltageDrop:
    """
    Voltage drop for a design at the impedance of one conductor size.

    Args:
        design: Design state (load current, distance, voltage, phase, limit)
        impedance: Cable impedance for the size being checked

    Returns:
        VoltageDrop
    """
    z = impedance.impedance
    drop_v = calc_voltage_drop_v(design.load_current, design.distance, z, design.phase)
    return VoltageDrop(
        voltage_drop_v=drop_v,
        voltage_drop_pct=drop_v / design.voltage * 100,
        voltage_at_load_v=design.voltage - drop_v,
        max_distance_m=calc_max_distance(
            design.load_current, z, design.voltage, design.max_voltage_drop, design.phase
        ),
    )


def calc_loop_impedance(phase: CableImpedance, earth: EarthImpedance) -> LoopImpedance:
    """Loop impedance per km: phase conductor plus earth conductor."""
    return LoopImpedance(phase_impedance=phase.impedance, earth_impedance=earth.impedance)


if __name__ == "__main__":
    print("Testing voltage_drop module...")
    print("=" * 60)

    print("\n1. 3-phase, 63 A, 40 m, Z = 0.18 Ω/km @ 400 V")
    vd = calc_voltage_drop_v(63, 40, 0.18, PhaseConfig.THREE_PHASE_AC)
    pct = calc_voltage_drop_pct(63, 40, 0.18, 400, PhaseConfig.THREE_PHASE_AC)
    print(f"   Voltage drop: {vd:.3f} V ({pct:.3f}%)")

    print("\n2. 1-phase, 20 A, 30 m, Z = 7.41 Ω/km @ 230 V")
    pct = calc_voltage_drop_pct(20, 30, 7.41, 230, PhaseConfig.SINGLE_PHASE_AC)
    dist = calc_max_distance(20, 7.41, 230, 5, PhaseConfig.SINGLE_PHASE_AC)
    print(f"   Voltage drop: {pct:.2f}%")
    print(f"   Max distance for 5%: {dist:.0f} m")

    print("\n" + "=" * 60)
    print("All tests completed!")
