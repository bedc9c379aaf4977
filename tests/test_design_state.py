"""Tests for design vocabulary and DesignState construction."""

import dataclasses

import pytest

from design_state import (
    Arrangement,
    CableType,
    ConductorMaterial,
    Insulation,
    InsulationFamily,
    PhaseConfig,
    check_mappings,
    design_state_from_dict,
)


DESIGN_FILE = {
    "cable_type": "MULTICORE",
    "insulation": "PVC_V75",
    "installation": "Wiring enclosure in air",
    "conductor": "Copper",
    "phase": "3P_AC",
    "voltage": 400,
    "load_current": 47,
    "distance": 60,
    "max_voltage_drop": 5,
    "active_size": "AUTO",
}


def test_mappings_are_complete():
    check_mappings()


def test_insulation_codes_encode_family_and_temperature():
    assert Insulation.PVC_V75.family is InsulationFamily.THERMOPLASTIC
    assert Insulation.PVC_V75.rated_temperature_c == 75
    assert Insulation.XLPE_90.family is InsulationFamily.XLPE
    assert Insulation.R_EP_90.family is InsulationFamily.ELASTOMERIC
    assert Insulation.CROSS_LINKED_POLYETHYLENE.rated_temperature_c == 90


def test_pvc_v90_uses_75c_tables_but_rates_at_90c():
    assert Insulation.PVC_V90.table_temperature_c == 75
    assert Insulation.PVC_V90.rated_temperature_c == 90


def test_underground_arrangements():
    underground = {a for a in Arrangement if a.is_underground}
    assert underground == {
        Arrangement.BURIED_DIRECT,
        Arrangement.UNDERGROUND_DUCT_SAME,
        Arrangement.UNDERGROUND_DUCT_SEPARATE,
    }


def test_arrangement_from_description_round_trips():
    for arrangement in Arrangement:
        assert Arrangement.from_description(arrangement.description) is arrangement


def test_arrangement_from_unknown_description():
    with pytest.raises(ValueError, match="Unknown installation"):
        Arrangement.from_description("Hanging from a balloon")


@pytest.mark.parametrize("text,expected", [
    ("CU", ConductorMaterial.COPPER),
    ("Cu", ConductorMaterial.COPPER),
    ("copper", ConductorMaterial.COPPER),
    ("AL", ConductorMaterial.ALUMINIUM),
    ("Aluminum", ConductorMaterial.ALUMINIUM),
])
def test_conductor_material_parse(text, expected):
    assert ConductorMaterial.parse(text) is expected


def test_single_core_cable_types():
    assert CableType.THREE_SINGLE_CORE.is_single_core
    assert CableType.BARE_SINGLE_CORE_MIMS.is_single_core
    assert not CableType.MULTICORE.is_single_core


def test_design_state_from_dict():
    design = design_state_from_dict(DESIGN_FILE)
    assert design.cable_type is CableType.MULTICORE
    assert design.insulation is Insulation.PVC_V75
    assert design.installation is Arrangement.ENCLOSED_IN_AIR
    assert design.conductor is ConductorMaterial.COPPER
    assert design.phase is PhaseConfig.THREE_PHASE_AC
    assert design.load_current == 47
    assert design.is_auto_size
    assert design.earth_size is None
    assert design.is_three_phase


def test_design_state_from_dict_accepts_values_and_sizes():
    data = dict(DESIGN_FILE, insulation="X-90", installation="BURIED_DIRECT", active_size=16, earth_size="6")
    design = design_state_from_dict(data)
    assert design.insulation is Insulation.X_90
    assert design.installation is Arrangement.BURIED_DIRECT
    assert design.active_size == 16
    assert design.earth_size == 6
    assert not design.is_auto_size


def test_design_state_from_dict_rejects_unknown_value():
    with pytest.raises(ValueError, match="insulation"):
        design_state_from_dict(dict(DESIGN_FILE, insulation="PAPER_50"))


def test_design_state_from_dict_reports_missing_fields():
    data = {k: v for k, v in DESIGN_FILE.items() if k not in ("voltage", "phase")}
    with pytest.raises(ValueError, match="phase, voltage"):
        design_state_from_dict(data)


def test_design_state_is_immutable(design):
    with pytest.raises(dataclasses.FrozenInstanceError):
        design.load_current = 99


def test_with_active_size_returns_new_state(design):
    sized = design.with_active_size(16)
    assert sized.active_size == 16
    assert design.active_size is None


@pytest.mark.parametrize("field", [
    "voltage", "load_current", "distance", "max_voltage_drop", "active_size", "earth_size",
])
@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_design_state_rejects_non_finite_numbers(make_design, field, value):
    with pytest.raises(ValueError, match=f"{field} must be a finite number"):
        make_design(**{field: value})


def test_design_state_from_dict_rejects_nan_voltage():
    with pytest.raises(ValueError, match="voltage"):
        design_state_from_dict({**DESIGN_FILE, "voltage": "nan"})


def test_with_active_size_rejects_infinite_size(design):
    with pytest.raises(ValueError, match="active_size"):
        design.with_active_size(float("inf"))


def test_design_state_rejects_zero_voltage(make_design):
    with pytest.raises(ValueError, match="voltage must be positive"):
        make_design(voltage=0)
