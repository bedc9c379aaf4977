"""Shared fixtures: a small in-memory reference dataset, the bundled catalog and designs."""

import pytest

from design_state import (
    Arrangement,
    CableType,
    ConductorMaterial,
    DesignState,
    Insulation,
    PhaseConfig,
)
from reference_data import ReferenceDataset, get_store, read_reference_dataset


MINIMAL_DOCUMENT = {
    "current_rating_tables": [
        {
            "table_id": "T13",
            "cable_type": "Multicore",
            "insulation_type": "Thermoplastic",
            "max_temp_C": 75,
            "columns": {
                "C1": {"material": "CU", "arrangement": "ENCLOSED_IN_AIR"},
                "C2": {"material": "AL", "arrangement": "ENCLOSED_IN_AIR"},
                "C3": {"material": "CU", "arrangement": "BURIED_DIRECT"},
            },
            "rows": [
                {"size": 2.5, "values": {"C1": 18, "C3": 29}},
                {"size": 4, "values": {"C1": 24, "C3": 38}},
                {"size": 6, "values": {"C1": 31, "C3": 47}},
                {"size": 10, "values": {"C1": 42, "C3": 63}},
                {"size": 16, "values": {"C1": 56, "C2": 44, "C3": 81}},
                {"size": 25, "values": {"C1": 73, "C2": 57, "C3": 104}},
            ],
        },
        {
            "table_id": "T14",
            "cable_type": "Multicore",
            "insulation_type": ["XLPE", "X-90"],
            "max_temp_C": 90,
            "columns": {
                "C1": {"material": "CU", "arrangement": "UNENCLOSED_SPACED"},
            },
            "rows": [
                {"size": 2.5, "values": {"C1": 27}},
                {"size": 4, "values": {"C1": 36}},
                {"size": 6, "values": {"C1": 46}},
                {"size": 10, "values": {"C1": 63}},
                {"size": 16, "values": {"C1": 85}},
            ],
        },
    ],
    "resistance_tables": [
        {
            "table_id": "T35",
            "cable_type": "Multicore",
            "columns": {
                "C1": {"material": "Copper", "temperature_C": 75},
                "C2": {"material": "Copper", "temperature_C": 90},
                "C3": {"material": "Aluminium", "temperature_C": 75},
            },
            "rows": [
                {"size": 2.5, "values": {"C1": 8.87, "C2": 9.3}},
                {"size": 4, "values": {"C1": 5.52, "C2": 5.79}},
                {"size": 6, "values": {"C1": 3.69, "C2": 3.87}},
                {"size": 10, "values": {"C1": 2.19, "C2": 2.30}},
                {"size": 16, "values": {"C1": 1.38, "C2": 1.45, "C3": 2.27}},
                {"size": 25, "values": {"C1": 0.87, "C2": 0.912, "C3": 1.43}},
            ],
        },
    ],
    "reactance_tables": [
        {
            "table_id": "T30",
            "columns": {
                "C1": {"arrangement": "Multicore Circular conductors", "insulation": "PVC"},
                "C2": {"arrangement": "Multicore Circular conductors", "insulation": "XLPE"},
                "C3": {"arrangement": "Single-core Trefoil", "insulation": "PVC"},
            },
            "rows": [
                {"size": 2.5, "values": {"C1": 0.102, "C2": 0.0988, "C3": 0.143}},
                {"size": 4, "values": {"C1": 0.102, "C2": 0.093, "C3": 0.137}},
                {"size": 6, "values": {"C1": 0.0967, "C2": 0.0887, "C3": 0.128}},
                {"size": 10, "values": {"C1": 0.0906, "C2": 0.084, "C3": 0.118}},
                {"size": 16, "values": {"C1": 0.0861, "C2": 0.0805, "C3": 0.111}},
                {"size": 25, "values": {"C1": 0.0853, "C2": 0.0808, "C3": 0.106}},
            ],
        },
    ],
}


@pytest.fixture(autouse=True)
def reset_reference_store():
    """Every test starts with no process-wide dataset loaded."""
    get_store().reset()
    yield
    get_store().reset()


@pytest.fixture
def minimal_document():
    return MINIMAL_DOCUMENT


@pytest.fixture
def minimal_dataset():
    return ReferenceDataset.from_dict(MINIMAL_DOCUMENT, source="minimal")


@pytest.fixture(scope="session")
def catalog_dataset():
    return read_reference_dataset()


@pytest.fixture
def make_design():
    """Factory for designs; defaults to a 20 A, 30 m, 3-phase PVC multicore run."""

    def _make(**overrides):
        params = dict(
            cable_type=CableType.MULTICORE,
            insulation=Insulation.PVC_V75,
            installation=Arrangement.ENCLOSED_IN_AIR,
            conductor=ConductorMaterial.COPPER,
            phase=PhaseConfig.THREE_PHASE_AC,
            voltage=400,
            load_current=20,
            distance=30,
            max_voltage_drop=5,
        )
        params.update(overrides)
        return DesignState(**params)

    return _make


@pytest.fixture
def design(make_design):
    return make_design()
