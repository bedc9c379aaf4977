"""Tests for current-rating and impedance table/column matching."""

import logging

import pytest

from design_state import Arrangement, CableType, ConductorMaterial, Insulation
from reference_data import NoMatchingColumn, NoMatchingTable, ReferenceDataset
from table_matching import (
    best_effort_select,
    match_current_rating_table,
    match_impedance_table,
    match_resistance_column,
    rating_rows,
)


def test_best_effort_select_uses_strictest_matching_predicate():
    items = [1, 2, 3, 4]
    assert best_effort_select(items, lambda x: x > 10, lambda x: x % 2 == 0) == (2, False)
    assert best_effort_select(items, lambda x: x == 3) == (3, False)


def test_best_effort_select_falls_back_to_first():
    assert best_effort_select(["a", "b"], lambda x: x == "z") == ("a", True)


def test_exact_current_rating_match(minimal_dataset, design):
    match = match_current_rating_table(minimal_dataset, design)
    assert match.table.table_id == "T13"
    assert match.column == "C1"
    assert not match.degraded
    assert match.provenance == "Table 13, C1"


def test_material_and_arrangement_select_column(minimal_dataset, make_design):
    aluminium = make_design(conductor=ConductorMaterial.ALUMINIUM)
    assert match_current_rating_table(minimal_dataset, aluminium).column == "C2"

    buried = make_design(installation=Arrangement.BURIED_DIRECT)
    assert match_current_rating_table(minimal_dataset, buried).column == "C3"


def test_insulation_temperature_selects_table(minimal_dataset, make_design):
    xlpe = make_design(insulation=Insulation.XLPE_90, installation=Arrangement.UNENCLOSED_SPACED)
    match = match_current_rating_table(minimal_dataset, xlpe)
    assert match.table.table_id == "T14"
    assert not match.degraded


def test_no_matching_table_degrades_to_first(minimal_dataset, make_design, caplog):
    design = make_design(insulation=Insulation.R_S_150)
    with caplog.at_level(logging.WARNING):
        match = match_current_rating_table(minimal_dataset, design)
    assert match.table.table_id == "T13"
    assert match.degraded
    assert match.provenance.endswith("(estimated)")
    assert "fallback table" in caplog.text


def test_unmatched_cable_type_degrades(minimal_dataset, make_design):
    match = match_current_rating_table(minimal_dataset, make_design(cable_type=CableType.FLEXIBLE_CORD))
    assert match.table.table_id == "T13"
    assert match.degraded


def test_no_matching_column_degrades_to_first(minimal_dataset, make_design):
    design = make_design(installation=Arrangement.UNENCLOSED_TOUCHING)
    match = match_current_rating_table(minimal_dataset, design)
    assert match.table.table_id == "T13"
    assert match.column == "C1"
    assert match.degraded
    assert match.provenance == "Table 13, C1 (estimated)"


def test_empty_current_rating_collection_raises(design):
    with pytest.raises(NoMatchingTable):
        match_current_rating_table(ReferenceDataset(), design)


def test_table_without_columns_raises(design):
    dataset = ReferenceDataset.from_dict({
        "current_rating_tables": [{
            "table_id": "T13",
            "cable_type": "Multicore",
            "insulation_type": "Thermoplastic",
            "max_temp_C": 75,
            "columns": {},
            "rows": [],
        }]
    })
    with pytest.raises(NoMatchingColumn):
        match_current_rating_table(dataset, design)


def test_rating_rows_are_ascending(minimal_dataset, make_design):
    match = match_current_rating_table(minimal_dataset, make_design(conductor=ConductorMaterial.ALUMINIUM))
    assert rating_rows(match) == [(16, 44.0), (25, 57.0)]


# =============================================================================
# IMPEDANCE TABLES
# =============================================================================

def test_resistance_column_by_rated_temperature(minimal_dataset, make_design):
    assert match_impedance_table(minimal_dataset, "resistance", make_design()).column == "C1"
    xlpe = make_design(insulation=Insulation.XLPE_90)
    assert match_impedance_table(minimal_dataset, "resistance", xlpe).column == "C2"
    pvc_v90 = make_design(insulation=Insulation.PVC_V90)
    assert match_impedance_table(minimal_dataset, "resistance", pvc_v90).column == "C2"
    aluminium = make_design(conductor=ConductorMaterial.ALUMINIUM)
    assert match_impedance_table(minimal_dataset, "resistance", aluminium).column == "C3"


def test_resistance_column_prefers_temperature_window(make_design):
    dataset = ReferenceDataset.from_dict({
        "resistance_tables": [{
            "table_id": "T35",
            "columns": {
                "HOT": {"material": "CU", "temperature_C": 95},
                "WARM": {"material": "CU", "temperature_C": 78},
            },
            "rows": [],
        }]
    })
    table = dataset.resistance_tables[0]
    column, degraded = match_resistance_column(table, make_design(insulation=Insulation.XLPE_90))
    assert column == "WARM"
    assert not degraded

    column, degraded = match_resistance_column(table, make_design(insulation=Insulation.R_S_150))
    assert column == "HOT"
    assert not degraded


def test_resistance_column_without_material_is_degraded(minimal_dataset, make_design):
    dataset = ReferenceDataset.from_dict({
        "resistance_tables": [{
            "table_id": "T35",
            "columns": {"C1": {"material": "AL", "temperature_C": 75}},
            "rows": [],
        }]
    })
    match = match_impedance_table(dataset, "resistance", make_design())
    assert match.column == "C1"
    assert match.degraded


def test_cable_type_specific_impedance_table_wins(make_design):
    dataset = ReferenceDataset.from_dict({
        "resistance_tables": [
            {"table_id": "T35", "cable_type": "Multicore", "columns": {"C1": {"material": "CU", "temperature_C": 75}}},
            {"table_id": "T34", "cable_type": "Single-core", "columns": {"C1": {"material": "CU", "temperature_C": 75}}},
        ]
    })
    single = make_design(cable_type=CableType.THREE_SINGLE_CORE)
    assert match_impedance_table(dataset, "resistance", single).table.table_id == "T34"
    sheathed = make_design(cable_type=CableType.TWO_CORE_SHEATHED)
    assert match_impedance_table(dataset, "resistance", sheathed).table.table_id == "T35"


def test_missing_default_impedance_table_degrades(make_design):
    dataset = ReferenceDataset.from_dict({
        "reactance_tables": [
            {"table_id": "T29", "columns": {"C1": {"arrangement": "Multicore", "insulation": "PVC"}}},
        ]
    })
    match = match_impedance_table(dataset, "reactance", make_design())
    assert match.table.table_id == "T29"
    assert match.degraded


def test_reactance_column_by_arrangement_and_insulation(minimal_dataset, make_design):
    assert match_impedance_table(minimal_dataset, "reactance", make_design()).column == "C1"

    xlpe = make_design(insulation=Insulation.XLPE_90)
    assert match_impedance_table(minimal_dataset, "reactance", xlpe).column == "C2"

    single = make_design(cable_type=CableType.THREE_SINGLE_CORE)
    assert match_impedance_table(minimal_dataset, "reactance", single).column == "C3"


def test_reactance_column_falls_back_to_arrangement(minimal_dataset, make_design):
    elastomer = make_design(insulation=Insulation.R_EP_90)
    match = match_impedance_table(minimal_dataset, "reactance", elastomer)
    assert match.column == "C1"
    assert not match.degraded

    single_xlpe = make_design(cable_type=CableType.THREE_SINGLE_CORE, insulation=Insulation.XLPE_90)
    match = match_impedance_table(minimal_dataset, "reactance", single_xlpe)
    assert match.column == "C3"
    assert not match.degraded


def test_no_impedance_tables_returns_none(design):
    assert match_impedance_table(ReferenceDataset(), "resistance", design) is None


def test_unknown_impedance_kind(minimal_dataset, design):
    with pytest.raises(ValueError):
        match_impedance_table(minimal_dataset, "current_rating", design)
