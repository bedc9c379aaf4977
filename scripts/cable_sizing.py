#!/usr/bin/env python3
"""
Cable Sizing Module
Automatic active conductor size selection per AS/NZS 3008.

Search:
1. Match the current-rating table and column for the design
2. Derate every size of the column by C_total
3. Keep the sizes whose adjusted rating carries the load current
4. Walk the kept sizes in ascending order; the first size whose voltage
   drop is within the design limit is selected
5. No size meets both limits: the largest tabulated size is returned and
   the result is flagged as not satisfying the constraints
6. Empty column: DEFAULT_AUTO_SIZE is returned, flagged the same way

Author: Cable Size Calculator
Standards: AS/NZS 3008.1.1:2017 Sections 3 and 4
"""

import logging
from dataclasses import dataclass
from typing import Optional

from cable_impedance import cable_impedance
from derating import CandidateRow, DeratingFactors, apply_derating, compute_derating
from design_state import DesignState
from reference_data import ReferenceDataset, resolve_dataset
from table_matching import Match, match_current_rating_table, rating_rows
from voltage_drop import calculate_voltage_drop

logger = logging.getLogger(__name__)

# Returned when the matched column has no rows (mm²)
DEFAULT_AUTO_SIZE = 120

REASON_OK = "ok"
REASON_CURRENT = "no size carries the load current"
REASON_VOLTAGE_DROP = "no size meets the voltage drop limit"
REASON_NO_ROWS = "matched column has no ratings"


@dataclass(frozen=True)
class SizeSearch:
    """Outcome of the auto-size search."""
    size: float
    satisfied: bool
    reason: str
    match: Match
    factors: DeratingFactors
    candidates: tuple  # CandidateRow, ascending by size

    @property
    def suitable_sizes(self) -> list[float]:
        return [row.size for row in self.candidates if row.meets_load]


def build_candidates(
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> tuple[Match, DeratingFactors, list[CandidateRow]]:
    """
    Derated candidate rows for the matched current-rating column.

    Args:
        design: Design state
        dataset: Reference dataset (None = process-wide dataset)

    Returns:
        (match, derating factors, candidate rows ascending by size)
    """
    match = match_current_rating_table(dataset, design)
    factors = compute_derating(design)
    candidates = apply_derating(rating_rows(match), factors, design.load_current)
    return match, factors, candidates


def voltage_drop_pct_at(
    size: float,
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> float:
    """Voltage drop (%) of the design run at a conductor size."""
    impedance = cable_impedance(size, design, dataset)
    return calculate_voltage_drop(design, impedance).voltage_drop_pct


def meets_voltage_drop(
    size: float,
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> bool:
    return voltage_drop_pct_at(size, design, dataset) <= design.max_voltage_drop


def search_cable_size(
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> SizeSearch:
    """
    Smallest tabulated size meeting both the current rating and voltage drop limits.

    Args:
        design: Design state (active size is ignored)
        dataset: Reference dataset (None = process-wide dataset)

    Returns:
        SizeSearch; satisfied is False when a fallback size was returned

    Raises:
        DatasetNotReady: if no dataset is given and none is loaded
        NoMatchingTable: if the dataset has no current-rating tables
    """
    dataset = resolve_dataset(dataset)
    match, factors, candidates = build_candidates(design, dataset)

    def result(size, satisfied, reason):
        return SizeSearch(
            size=size,
            satisfied=satisfied,
            reason=reason,
            match=match,
            factors=factors,
            candidates=tuple(candidates),
        )

    if not candidates:
        logger.warning(
            "Table %s column %s has no ratings; using default size %s mm²",
            match.table.table_id, match.column, DEFAULT_AUTO_SIZE,
        )
        return result(DEFAULT_AUTO_SIZE, False, REASON_NO_ROWS)

    suitable = [row for row in candidates if row.meets_load]
    for row in suitable:
        if meets_voltage_drop(row.size, design, dataset):
            return result(row.size, True, REASON_OK)

    largest = candidates[-1].size
    reason = REASON_VOLTAGE_DROP if suitable else REASON_CURRENT
    logger.warning(
        "%s (%.1f A, %.0f m, limit %.1f%%); using largest size %g mm²",
        reason.capitalize(), design.load_current, design.distance,
        design.max_voltage_drop, largest,
    )
    return result(largest, False, reason)


def auto_select_size(
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> float:
    """Auto-selected active conductor size (mm²)."""
    return search_cable_size(design, dataset).size


if __name__ == "__main__":
    from design_state import Arrangement, CableType, ConductorMaterial, Insulation, PhaseConfig
    from reference_data import load_reference_dataset

    print("Testing cable_sizing module...")
    print("=" * 60)

    load_reference_dataset()
    for current, distance in ((20, 30), (63, 40), (63, 250), (150, 50)):
        design = DesignState(
            cable_type=CableType.MULTICORE,
            insulation=Insulation.XLPE_90,
            installation=Arrangement.UNENCLOSED_SPACED,
            conductor=ConductorMaterial.COPPER,
            phase=PhaseConfig.THREE_PHASE_AC,
            voltage=400,
            load_current=current,
            distance=distance,
            max_voltage_drop=5,
        )
        search = search_cable_size(design)
        status = "OK" if search.satisfied else f"FALLBACK ({search.reason})"
        print(f"   {current} A, {distance} m -> {search.size:g} mm² [{status}]")

    print("\n" + "=" * 60)
    print("All tests completed!")
