#!/usr/bin/env python3
"""
Cable Impedance Module
Per-core resistance, reactance and impedance (Ω/km) for a conductor size.

Values come from the matched resistance and reactance tables. When the
reference data has no table of a kind, or the matched column has no value
for the size, a typical value is used and the reference is marked
"(estimated)".

Standards: AS/NZS 3008.1.1:2017 Tables 30-35
"""

import math
from dataclasses import dataclass
from typing import Optional

from design_state import DesignState
from reference_data import ReferenceDataset, resolve_dataset
from table_matching import DEFAULT_IMPEDANCE_TABLES, ESTIMATED, match_impedance_table

# Typical copper multicore AC resistance at 75°C (Ω/km)
FALLBACK_RESISTANCE = {
    1: 18.1, 1.5: 12.1, 2.5: 7.41, 4: 4.61, 6: 3.08,
    10: 1.83, 16: 1.15, 25: 0.727, 35: 0.524, 50: 0.387,
    70: 0.268, 95: 0.193, 120: 0.153,
}
DEFAULT_RESISTANCE = 1.15

# Typical multicore reactance at 50 Hz (Ω/km)
FALLBACK_REACTANCE = {
    1: 0.114, 1.5: 0.111, 2.5: 0.102, 4: 0.102, 6: 0.0967,
    10: 0.0906, 16: 0.0861, 25: 0.0805, 35: 0.0742, 50: 0.0681,
    70: 0.0620, 95: 0.0559, 120: 0.0498,
}
DEFAULT_REACTANCE = 0.0861

_FALLBACKS = {
    "resistance": (FALLBACK_RESISTANCE, DEFAULT_RESISTANCE),
    "reactance": (FALLBACK_REACTANCE, DEFAULT_REACTANCE),
}


@dataclass(frozen=True)
class TableValue:
    value: float
    reference: str

    @property
    def estimated(self) -> bool:
        return ESTIMATED in self.reference


@dataclass(frozen=True)
class CableImpedance:
    size: float
    resistance: float
    reactance: float
    resistance_ref: str
    reactance_ref: str

    @property
    def impedance(self) -> float:
        return math.hypot(self.resistance, self.reactance)

    @property
    def estimated(self) -> bool:
        return ESTIMATED in self.resistance_ref or ESTIMATED in self.reactance_ref


def lookup_impedance_value(
    kind: str,
    size: float,
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> TableValue:
    """
    Look up resistance or reactance (Ω/km) for a conductor size.

    Args:
        kind: "resistance" or "reactance"
        size: Conductor size (mm²)
        design: Design state (material, insulation, cable type)
        dataset: Reference dataset (None = process-wide dataset)

    Returns:
        TableValue with value and reference string
    """
    fallback_map, default = _FALLBACKS[kind]
    estimate = fallback_map.get(size, default)

    match = match_impedance_table(resolve_dataset(dataset), kind, design)
    if match is None:
        table_number = DEFAULT_IMPEDANCE_TABLES[kind][1:]
        return TableValue(estimate, f"Table {table_number} {ESTIMATED}")

    value = match.table.value(match.column, size)
    if value is None:
        return TableValue(estimate, f"Table {match.table.number}, {match.column} {ESTIMATED}")

    return TableValue(value, match.provenance)


def get_resistance(size: float, design: DesignState, dataset: Optional[ReferenceDataset] = None) -> TableValue:
    return lookup_impedance_value("resistance", size, design, dataset)


def get_reactance(size: float, design: DesignState, dataset: Optional[ReferenceDataset] = None) -> TableValue:
    return lookup_impedance_value("reactance", size, design, dataset)


def cable_impedance(
    size: float,
    design: DesignState,
    dataset: Optional[ReferenceDataset] = None,
) -> CableImpedance:
    """
    Per-core impedance for a conductor size: Z = sqrt(R² + X²).

    Args:
        size: Conductor size (mm²)
        design: Design state
        dataset: Reference dataset (None = process-wide dataset)

    Returns:
        CableImpedance (Ω/km) with table references
    """
    dataset = resolve_dataset(dataset)
    resistance = get_resistance(size, design, dataset)
    reactance = get_reactance(size, design, dataset)
    return CableImpedance(
        size=size,
        resistance=resistance.value,
        reactance=reactance.value,
        resistance_ref=resistance.reference,
        reactance_ref=reactance.reference,
    )
