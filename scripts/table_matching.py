#!/usr/bin/env python3
"""
Table Matching Module
Select the reference table and column that apply to a design.

Implements:
- Current-rating table selection by cable type, insulation family and
  rated temperature, then column selection by conductor material and
  installation arrangement
- Resistance / reactance table and column selection
- A single best-effort selection helper: when nothing matches, the first
  candidate is used and the match is flagged as degraded

Degraded matches are not errors. They are logged, flagged on the Match
and marked "(estimated)" in the provenance string.

Standards: AS/NZS 3008.1.1:2017
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from design_state import CABLE_TYPE_LABELS, DesignState, InsulationFamily
from reference_data import (
    NoMatchingColumn,
    NoMatchingTable,
    ReferenceDataset,
    ReferenceTable,
    resolve_dataset,
)

logger = logging.getLogger(__name__)

ESTIMATED = "(estimated)"

# Default impedance tables when no table is specific to the cable type
DEFAULT_IMPEDANCE_TABLES = {
    "resistance": "T35",  # Multicore cables with circular conductors
    "reactance": "T30",   # All cables except flexible, MIMS and aerial
}

# Resistance column may be rated up to this much below the insulation rating
RESISTANCE_TEMPERATURE_WINDOW_C = 15

# Insulation family -> reactance table insulation label
REACTANCE_INSULATION = {
    InsulationFamily.THERMOPLASTIC: "PVC",
    InsulationFamily.XLPE: "XLPE",
    InsulationFamily.ELASTOMERIC: "Elastomer",
}


@dataclass(frozen=True)
class Match:
    """Selected table and column with provenance."""
    table: ReferenceTable
    column: str
    degraded: bool = False

    @property
    def provenance(self) -> str:
        reference = f"Table {self.table.number}, {self.column}"
        return f"{reference} {ESTIMATED}" if self.degraded else reference


def best_effort_select(candidates: Sequence, *predicates: Callable) -> tuple:
    """
    Pick the first candidate satisfying the strictest predicate that matches.

    Predicates are tried in order; the first predicate with any match wins
    and its first match (declaration order) is returned. If no predicate
    matches, the first candidate is returned and flagged as degraded.

    Args:
        candidates: Ordered candidates (must not be empty)
        *predicates: Callables returning True for acceptable candidates

    Returns:
        (candidate, degraded)
    """
    for predicate in predicates:
        for candidate in candidates:
            if predicate(candidate):
                return candidate, False
    return candidates[0], True


# =============================================================================
# CURRENT-RATING TABLES
# =============================================================================

def cable_type_matches(table: ReferenceTable, design: DesignState) -> bool:
    """Case-insensitive containment, in either direction, against the accepted labels."""
    table_type = table.cable_type.lower()
    if not table_type:
        return False
    return any(
        table_type in label.lower() or label.lower() in table_type
        for label in CABLE_TYPE_LABELS[design.cable_type]
    )


def insulation_matches(table: ReferenceTable, design: DesignState) -> bool:
    """Insulation label contained in a table insulation name and exact temperature match."""
    expected = design.insulation.table_label.lower()
    label_match = any(expected in name.lower() for name in table.insulation_types)
    return label_match and table.max_temp_c == design.insulation.table_temperature_c


def match_current_rating_table(
    dataset: Optional[ReferenceDataset],
    design: DesignState,
) -> Match:
    """
    Select the current-rating table and column for a design.

    Args:
        dataset: Reference dataset (None = process-wide dataset)
        design: Design state

    Returns:
        Match with table, column id and degraded flag

    Raises:
        DatasetNotReady: if no dataset is given and none is loaded
        NoMatchingTable: if the dataset has no current-rating tables
        NoMatchingColumn: if the selected table declares no columns
    """
    dataset = resolve_dataset(dataset)
    tables = dataset.current_rating_tables
    if not tables:
        raise NoMatchingTable("Reference data has no current-rating tables")

    table, table_degraded = best_effort_select(
        tables,
        lambda t: cable_type_matches(t, design) and insulation_matches(t, design),
    )
    if table_degraded:
        logger.warning(
            "No current-rating table for %s / %s; using fallback table %s",
            design.cable_type.value, design.insulation.value, table.table_id,
        )

    column, column_degraded = match_current_rating_column(table, design)
    return Match(table=table, column=column, degraded=table_degraded or column_degraded)


def match_current_rating_column(table: ReferenceTable, design: DesignState) -> tuple:
    """Column with the design's conductor material and arrangement; returns (column, degraded)."""
    if not table.columns:
        raise NoMatchingColumn(f"Table {table.table_id} declares no columns")

    arrangement = design.installation.value
    column, degraded = best_effort_select(
        list(table.columns),
        lambda c: (
            table.columns[c].material is design.conductor
            and table.columns[c].arrangement == arrangement
        ),
    )
    if degraded:
        logger.warning(
            "Table %s has no %s column for %s; using fallback column %s",
            table.table_id, design.conductor.label, arrangement, column,
        )
    return column, degraded


# =============================================================================
# IMPEDANCE TABLES
# =============================================================================

def match_impedance_table(
    dataset: Optional[ReferenceDataset],
    kind: str,
    design: DesignState,
) -> Optional[Match]:
    """
    Select the resistance or reactance table and column for a design.

    A table specific to the design's cable type wins over the default
    table for the kind (T35 resistance, T30 reactance).

    Args:
        dataset: Reference dataset (None = process-wide dataset)
        kind: "resistance" or "reactance"
        design: Design state

    Returns:
        Match, or None when the dataset has no tables of this kind
        (callers then fall back to estimated constants)

    Raises:
        DatasetNotReady: if no dataset is given and none is loaded
        NoMatchingColumn: if the selected table declares no columns
    """
    if kind not in DEFAULT_IMPEDANCE_TABLES:
        raise ValueError(f"Not an impedance table kind: {kind!r}")

    dataset = resolve_dataset(dataset)
    tables = dataset.tables(kind)
    if not tables:
        return None

    default_id = DEFAULT_IMPEDANCE_TABLES[kind]
    table, table_degraded = best_effort_select(
        tables,
        lambda t: cable_type_matches(t, design),
        lambda t: t.table_id == default_id,
    )
    if table_degraded:
        logger.warning("No %s table %s in reference data; using %s", kind, default_id, table.table_id)

    if not table.columns:
        raise NoMatchingColumn(f"Table {table.table_id} declares no columns")

    if kind == "resistance":
        column, column_degraded = match_resistance_column(table, design)
    else:
        column, column_degraded = match_reactance_column(table, design)

    return Match(table=table, column=column, degraded=table_degraded or column_degraded)


def match_resistance_column(table: ReferenceTable, design: DesignState) -> tuple:
    """
    Column by conductor material, then temperature.

    Preference: exact rated temperature, then the closest temperature within
    RESISTANCE_TEMPERATURE_WINDOW_C below it, then the closest temperature
    of the right material. No column of the right material is degraded.
    """
    rated = design.insulation.rated_temperature_c
    same_material = [
        col_id for col_id, spec in table.columns.items()
        if spec.material is design.conductor
    ]
    if not same_material:
        column = next(iter(table.columns))
        logger.warning(
            "Table %s has no %s column; using fallback column %s",
            table.table_id, design.conductor.label, column,
        )
        return column, True

    def temperature(col_id):
        return table.columns[col_id].temperature_c

    within_window = [
        c for c in same_material
        if temperature(c) is not None and rated - RESISTANCE_TEMPERATURE_WINDOW_C <= temperature(c) <= rated
    ]
    # Stable sort keeps declaration order for ties
    by_closeness = sorted(
        same_material,
        key=lambda c: abs(temperature(c) - rated) if temperature(c) is not None else float("inf"),
    )
    column, _ = best_effort_select(
        by_closeness,
        lambda c: temperature(c) == rated,
        lambda c: c in within_window,
    )
    return column, False


def match_reactance_column(table: ReferenceTable, design: DesignState) -> tuple:
    """Column by core arrangement (single-core / multicore) and insulation family."""
    arrangement = "Single-core" if design.cable_type.is_single_core else "Multicore"
    insulation = REACTANCE_INSULATION.get(design.insulation.family, "PVC")

    def arrangement_ok(col_id):
        spec = table.columns[col_id]
        return bool(spec.arrangement) and arrangement.lower() in spec.arrangement.lower()

    column, degraded = best_effort_select(
        list(table.columns),
        lambda c: arrangement_ok(c) and table.columns[c].insulation == insulation,
        arrangement_ok,
    )
    if degraded:
        logger.warning(
            "Table %s has no %s column; using fallback column %s",
            table.table_id, arrangement, column,
        )
    return column, degraded


def rating_rows(match: Match) -> list[tuple[float, float]]:
    """All (size, base current rating) pairs of the matched column, ascending by size."""
    return sorted(match.table.column_values(match.column))
