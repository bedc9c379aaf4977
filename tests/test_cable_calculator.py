"""Tests for the complete calculation pipeline."""

import dataclasses
import math

import pytest

from cable_calculator import REASON_SIZE_NOT_TABULATED, calculate
from cable_sizing import REASON_CURRENT, REASON_OK
from design_state import Insulation
from reference_data import DatasetNotReady, load_reference_dataset


def test_auto_sized_result(minimal_dataset, design):
    result = calculate(design, minimal_dataset)

    assert result.size == 4
    assert result.auto_sized
    assert result.satisfied
    assert result.reason == REASON_OK

    rating = result.current_rating
    assert rating.base_rating == 24
    assert rating.adjusted_rating == pytest.approx(22.8)
    assert rating.table_id == "T13"
    assert rating.column == "C1"
    assert rating.provenance == "Table 13, C1"
    assert not rating.degraded

    assert result.derating.combined == pytest.approx(0.95)
    assert result.operating_temperature_c == pytest.approx(41.75)
    assert result.impedance.size == 4
    assert result.impedance.resistance == 5.52
    assert result.warnings == ()


def test_quantities_follow_selected_size(minimal_dataset, design):
    result = calculate(design, minimal_dataset)

    expected_drop = 20 * 30 * math.sqrt(3) * math.hypot(5.52, 0.102) / 1000
    assert result.voltage_drop.voltage_drop_v == pytest.approx(expected_drop)
    assert result.voltage_drop.voltage_at_load_v == pytest.approx(400 - expected_drop)

    assert result.earth.size == 2.5
    assert result.earth.resistance == pytest.approx(8.87 * 1.5)
    assert result.loop_impedance.total_impedance == pytest.approx(
        result.impedance.impedance + result.earth.impedance
    )

    assert result.short_circuit.size == 4
    assert result.short_circuit.passes

    assert result.protection.rating_a == 20
    assert result.protection.min_trip_current_a == 80


def test_selection_table(minimal_dataset, design):
    result = calculate(design, minimal_dataset)
    table = result.selection_table
    assert [row.size for row in table] == [2.5, 4, 6, 10, 16, 25]
    assert [row.earth_size for row in table] == [2.5, 2.5, 2.5, 4, 6, 6]
    assert [row.meets_load for row in table] == [False, True, True, True, True, True]
    assert all(row.meets_voltage_drop for row in table)
    drops = [row.voltage_drop_pct for row in table]
    assert drops == sorted(drops, reverse=True)


def test_requested_size_is_used(minimal_dataset, make_design):
    result = calculate(make_design(active_size=16), minimal_dataset)
    assert result.size == 16
    assert not result.auto_sized
    assert result.satisfied
    assert result.current_rating.adjusted_rating == pytest.approx(53.2)
    assert result.earth.size == 6


def test_requested_size_too_small_is_reported(minimal_dataset, make_design):
    result = calculate(make_design(active_size=2.5), minimal_dataset)
    assert result.size == 2.5
    assert not result.satisfied
    assert result.reason == REASON_CURRENT
    assert any("does not satisfy" in w for w in result.warnings)


def test_requested_size_not_tabulated(minimal_dataset, make_design):
    result = calculate(make_design(active_size=35), minimal_dataset)
    assert result.current_rating.base_rating is None
    assert result.reason == REASON_SIZE_NOT_TABULATED
    assert result.impedance.estimated
    assert any("Estimated impedance" in w for w in result.warnings)


def test_requested_earth_size(minimal_dataset, make_design):
    result = calculate(make_design(earth_size=10), minimal_dataset)
    assert result.earth.size == 10


def test_degraded_match_is_warned(minimal_dataset, make_design):
    result = calculate(make_design(insulation=Insulation.R_S_150), minimal_dataset)
    assert result.current_rating.degraded
    assert result.current_rating.provenance.endswith("(estimated)")
    assert any("fallback match" in w for w in result.warnings)


def test_failed_short_circuit_is_warned(minimal_dataset, make_design):
    result = calculate(make_design(load_current=10, active_size=2.5), minimal_dataset)
    assert not result.short_circuit.passes
    assert any("Short-circuit" in w for w in result.warnings)


def test_load_above_mcb_ladder_is_warned(minimal_dataset, make_design):
    result = calculate(make_design(load_current=150), minimal_dataset)
    assert result.protection.rating_a == 125
    assert any("largest MCB" in w for w in result.warnings)


def test_result_is_immutable(minimal_dataset, design):
    result = calculate(design, minimal_dataset)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.size = 99


def test_calculate_requires_dataset(design):
    with pytest.raises(DatasetNotReady):
        calculate(design)


def test_calculate_with_loaded_catalog(make_design):
    load_reference_dataset()
    result = calculate(make_design(load_current=47, distance=60))
    assert result.size == 16
    assert result.current_rating.provenance == "Table 13, C3"
    assert result.earth.size == 6
    assert result.protection.rating_a == 50
    assert result.voltage_drop.voltage_drop_pct < 5
    assert result.warnings == ()


@pytest.mark.parametrize("overrides", [
    dict(),
    dict(distance=0),
    dict(load_current=0),
    dict(load_current=1e6, distance=5000),
    dict(voltage=1),
])
def test_result_numbers_are_finite(minimal_dataset, make_design, overrides):
    result = calculate(make_design(**overrides), minimal_dataset)
    drop = result.voltage_drop
    values = [
        result.size,
        result.operating_temperature_c,
        result.impedance.impedance,
        drop.voltage_drop_v,
        drop.voltage_drop_pct,
        drop.voltage_at_load_v,
        result.loop_impedance.total_impedance,
    ]
    if drop.max_distance_m is not None:
        values.append(drop.max_distance_m)
    assert all(math.isfinite(v) for v in values)


def test_non_finite_design_cannot_reach_calculate(design):
    with pytest.raises(ValueError, match="load_current"):
        dataclasses.replace(design, load_current=float("inf"))
