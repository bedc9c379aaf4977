#!/usr/bin/env python3
"""
Cable Calculator Module
Complete cable calculation for one design: size, rating, drop, earth and protection.

Pipeline:
1. Active size: the requested size, or the auto-size search result
2. Current rating of the matched column at that size, with derating
3. Impedance, voltage drop and maximum run length at that size
4. Earth conductor size and impedance, loop impedance
5. Short-circuit withstand and protection device
6. Selection table over every tabulated size

Every quantity is computed at the selected size. Degraded matches,
estimated impedances and unmet constraints are collected in
CalculationResult.warnings; none of them stop the calculation.

Usage:
    from reference_data import load_reference_dataset
    from cable_calculator import calculate

    load_reference_dataset()
    result = calculate(design)
    print(result.size, result.voltage_drop.voltage_drop_pct)

Author: Cable Size Calculator
Standards: AS/NZS 3008.1.1:2017, AS/NZS 3000:2018
"""

import logging
from dataclasses import dataclass
from typing import Optional

from cable_impedance import CableImpedance, cable_impedance
from cable_sizing import REASON_CURRENT, REASON_OK, REASON_VOLTAGE_DROP, build_candidates, search_cable_size
from derating import CandidateRow, DeratingFactors, operating_temperature
from design_state import DesignState
from earth_sizing import EarthImpedance, calc_earth_size, earth_impedance, resolve_earth_size
from fault_current import ShortCircuitCheck, check_short_circuit
from protection_sizing import MCB_RATINGS, ProtectionDevice, size_protection_device
from reference_data import ReferenceDataset, resolve_dataset
from table_matching import Match
from voltage_drop import LoopImpedance, VoltageDrop, calc_loop_impedance, calculate_voltage_drop

logger = logging.getLogger(__name__)

REASON_SIZE_NOT_TABULATED = "requested size is not in the matched column"


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class CurrentRating:
    """Current rating of the selected size in the matched column."""
    size: float
    base_rating: Optional[float]      # None when the size is not tabulated
    adjusted_rating: Optional[float]
    table_id: str
    column: str
    provenance: str
    degraded: bool


@dataclass(frozen=True)
class SelectionRow:
    """One line of the cable selection table."""
    size: float
    earth_size: float
    adjusted_rating: float
    voltage_drop_pct: float
    meets_load: bool
    meets_voltage_drop: bool


@dataclass(frozen=True)
class CalculationResult:
    design: DesignState
    size: float
    auto_sized: bool
    satisfied: bool
    reason: str
    current_rating: CurrentRating
    derating: DeratingFactors
    candidates: tuple
    operating_temperature_c: float
    impedance: CableImpedance
    voltage_drop: VoltageDrop
    earth: EarthImpedance
    loop_impedance: LoopImpedance
    short_circuit: ShortCircuitCheck
    protection: ProtectionDevice
    selection_table: tuple
    warnings: tuple = ()


# =============================================================================
# PIPELINE
# =============================================================================

def current_rating_at(size: float, match: Match, candidates: list[CandidateRow]) -> CurrentRating:
    row = next((r for r in candidates if r.size == size), None)
    return CurrentRating(
        size=size,
        base_rating=row.base_rating if row else None,
        adjusted_rating=row.adjusted_rating if row else None,
        table_id=match.table.table_id,
        column=match.column,
        provenance=match.provenance,
        degraded=match.degraded,
    )


def build_selection_table(
    design: DesignState,
    candidates: list[CandidateRow],
    dataset: ReferenceDataset,
) -> list[SelectionRow]:
    """Earth size, adjusted rating and voltage drop for every tabulated size."""
    rows = []
    for candidate in candidates:
        drop = calculate_voltage_drop(design, cable_impedance(candidate.size, design, dataset))
        rows.append(SelectionRow(
            size=candidate.size,
            earth_size=calc_earth_size(candidate.size),
            adjusted_rating=candidate.adjusted_rating,
            voltage_drop_pct=drop.voltage_drop_pct,
            meets_load=candidate.meets_load,
            meets_voltage_drop=drop.voltage_drop_pct <= design.max_voltage_drop,
        ))
    return rows


def _requested_size_outcome(
    design: DesignState,
    rating: CurrentRating,
    drop: VoltageDrop,
) -> tuple[bool, str]:
    if rating.adjusted_rating is None:
        return False, REASON_SIZE_NOT_TABULATED
    if rating.adjusted_rating < design.load_current:
        return False, REASON_CURRENT
    if drop.voltage_drop_pct > design.max_voltage_drop:
        return False, REASON_VOLTAGE_DROP
    return True, REASON_OK


def _collect_warnings(
    design: DesignState,
    rating: CurrentRating,
    satisfied: bool,
    reason: str,
    impedance: CableImpedance,
    earth: EarthImpedance,
    short_circuit: ShortCircuitCheck,
    protection: ProtectionDevice,
    derating: DeratingFactors,
) -> list[str]:
    warnings = []
    if rating.degraded:
        warnings.append(f"Current rating taken from fallback match: {rating.provenance}")
    if not satisfied:
        warnings.append(f"Size {rating.size:g} mm² does not satisfy the design: {reason}")
    if derating.ambient == 0:
        warnings.append("Ambient temperature at or above the insulation rating; cable has no capacity")
    if impedance.estimated:
        warnings.append(
            f"Estimated impedance at {impedance.size:g} mm² "
            f"(R: {impedance.resistance_ref}; X: {impedance.reactance_ref})"
        )
    if earth.estimated:
        warnings.append(f"Estimated earth impedance at {earth.size:g} mm²")
    if not short_circuit.passes:
        warnings.append(
            f"Short-circuit withstand fails at {short_circuit.size:g} mm²: "
            f"I²t {short_circuit.i2t:.0f} > K²S² {short_circuit.k2s2:.0f}"
        )
    if design.load_current > MCB_RATINGS[-1]:
        warnings.append(
            f"Load current {design.load_current:g} A exceeds the largest MCB rating "
            f"{MCB_RATINGS[-1]} A"
        )
    if rating.adjusted_rating is not None and protection.rating_a > rating.adjusted_rating:
        warnings.append(
            f"MCB {protection.rating_a:g} A exceeds the cable adjusted rating "
            f"{rating.adjusted_rating:.1f} A"
        )
    return warnings


def calculate(
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> CalculationResult:
    """
    Run the full cable calculation for a design.

    Args:
        design: Design state; active_size None means auto-size
        dataset: Reference dataset (None = process-wide dataset)

    Returns:
        CalculationResult

    Raises:
        DatasetNotReady: if no dataset is given and none is loaded
        NoMatchingTable: if the dataset has no current-rating tables
    """
    dataset = resolve_dataset(dataset)

    if design.is_auto_size:
        search = search_cable_size(design, dataset)
        size = search.size
        match, factors, candidates = search.match, search.factors, list(search.candidates)
    else:
        size = design.active_size
        match, factors, candidates = build_candidates(design, dataset)

    rating = current_rating_at(size, match, candidates)
    impedance = cable_impedance(size, design, dataset)
    drop = calculate_voltage_drop(design, impedance)

    if design.is_auto_size:
        satisfied, reason = search.satisfied, search.reason
    else:
        satisfied, reason = _requested_size_outcome(design, rating, drop)

    earth = earth_impedance(resolve_earth_size(design, size), design, dataset)
    short_circuit = check_short_circuit(size, design.insulation)
    protection = size_protection_device(design)

    warnings = _collect_warnings(
        design, rating, satisfied, reason, impedance, earth, short_circuit, protection, factors,
    )
    for message in warnings:
        logger.warning(message)

    logger.info(
        "Cable calculation: %g mm² (%s), %.2f%% drop, earth %g mm², MCB %g A",
        size, "auto" if design.is_auto_size else "requested",
        drop.voltage_drop_pct, earth.size, protection.rating_a,
    )

    return CalculationResult(
        design=design,
        size=size,
        auto_sized=design.is_auto_size,
        satisfied=satisfied,
        reason=reason,
        current_rating=rating,
        derating=factors,
        candidates=tuple(candidates),
        operating_temperature_c=operating_temperature(design, factors.combined),
        impedance=impedance,
        voltage_drop=drop,
        earth=earth,
        loop_impedance=calc_loop_impedance(impedance, earth),
        short_circuit=short_circuit,
        protection=protection,
        selection_table=tuple(build_selection_table(design, candidates, dataset)),
        warnings=tuple(warnings),
    )


if __name__ == "__main__":
    from design_state import Arrangement, CableType, ConductorMaterial, Insulation, PhaseConfig
    from reference_data import load_reference_dataset

    print("Testing cable_calculator module...")
    print("=" * 60)

    load_reference_dataset()
    design = DesignState(
        cable_type=CableType.MULTICORE,
        insulation=Insulation.PVC_V75,
        installation=Arrangement.ENCLOSED_IN_AIR,
        conductor=ConductorMaterial.COPPER,
        phase=PhaseConfig.THREE_PHASE_AC,
        voltage=400,
        load_current=47,
        distance=60,
        max_voltage_drop=5,
    )
    result = calculate(design)
    print(f"   Selected size:   {result.size:g} mm² ({'OK' if result.satisfied else result.reason})")
    print(f"   Current rating:  {result.current_rating.adjusted_rating:.1f} A [{result.current_rating.provenance}]")
    print(f"   Voltage drop:    {result.voltage_drop.voltage_drop_v:.2f} V ({result.voltage_drop.voltage_drop_pct:.2f}%)")
    print(f"   Earth conductor: {result.earth.size:g} mm²")
    print(f"   Protection:      {result.protection.device_type} {result.protection.rating_a:g} A {result.protection.curve}")
    for warning in result.warnings:
        print(f"   WARNING: {warning}")

    print("\n" + "=" * 60)
    print("All tests completed!")
