#!/usr/bin/env python3
"""
Design State Module
Enumerations and the immutable input snapshot for a cable calculation.

Defines:
- Cable type, insulation, installation arrangement, conductor material
  and phase configuration enumerations
- Fixed mapping tables from each enumeration to the labels used by the
  reference tables (checked for completeness on import)
- DesignState, the validated parameter set handed to the engine

Standards: AS/NZS 3008.1.1:2017
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


AUTO = "AUTO"


class CableType(Enum):
    """Cable construction as selected by the designer."""
    TWO_CORE_SHEATHED = "TWO_CORE_SHEATHED"
    TWO_SINGLE_CORE = "TWO_SINGLE_CORE"
    THREE_SINGLE_CORE = "THREE_SINGLE_CORE"
    MULTICORE = "MULTICORE"
    THREE_CORE_AND_FOUR_CORE_SHEATHED = "THREE_CORE_AND_FOUR_CORE_SHEATHED"
    THREE_CORE_AND_FOUR_CORE = "THREE_CORE_AND_FOUR_CORE"
    FLEXIBLE_CORD = "FLEXIBLE_CORD"
    CABLE_AND_FLEXIBLE_CORDS = "CABLE_AND_FLEXIBLE_CORDS"
    BARE_SINGLE_CORE_MIMS = "BARE_SINGLE_CORE_MIMS_CABLES_WITH_COPPER_CONDUCTORS"

    @property
    def is_single_core(self) -> bool:
        return "SINGLE_CORE" in self.name


class InsulationFamily(Enum):
    """Insulation material families (drive K factor and reactance column)."""
    THERMOPLASTIC = "Thermoplastic"
    XLPE = "XLPE"
    ELASTOMERIC = "Elastomeric"
    MINERAL = "Mineral"
    FIBROUS = "Fibrous"
    FLUOROPOLYMER = "Fluoropolymer"


class Insulation(Enum):
    """Insulation codes. Each encodes a material family and a rated temperature."""
    PVC_V60 = "PVC_V60"
    PVC_V75 = "PVC_V75"
    PVC_V90 = "PVC_V90"
    XLPE_90 = "XLPE_90"
    XLPE_110 = "XLPE_110"
    ELASTOMERIC_90 = "ELASTOMERIC_90"
    ELASTOMERIC_110 = "ELASTOMERIC_110"
    MIMS_250 = "MIMS_250"
    X_90 = "X-90"
    X_H_90 = "X-H-90"
    X_HF_90 = "X-HF-90"
    X_HF_110 = "X-HF-110"
    R_E_110 = "R-E-110"
    R_EP_90 = "R-EP-90"
    R_CPE_90 = "R-CPE-90"
    R_HF_90 = "R-HF-90"
    R_HF_110 = "R-HF-110"
    R_CSP_90 = "R-CSP-90"
    R_S_150 = "R-S-150"
    CROSS_LINKED_POLYETHYLENE = "Cross-linked Polyethylene"
    TYPE_150_FIBROUS = "Type 150 fibrous"
    FLUOROPOLYMER_150 = "150°C Rated Fluoropolymer"

    @property
    def family(self) -> InsulationFamily:
        return INSULATION_SPECS[self][0]

    @property
    def table_label(self) -> str:
        return INSULATION_SPECS[self][1]

    @property
    def table_temperature_c(self) -> int:
        return INSULATION_SPECS[self][2]

    @property
    def rated_temperature_c(self) -> int:
        return INSULATION_SPECS[self][3]


class Arrangement(Enum):
    """Canonical installation arrangement codes used by table columns."""
    UNENCLOSED_SPACED = "UNENCLOSED_SPACED"
    UNENCLOSED_TOUCHING = "UNENCLOSED_TOUCHING"
    UNENCLOSED_EXPOSED_TO_SUN = "UNENCLOSED_EXPOSED_TO_SUN"
    ENCLOSED_IN_AIR = "ENCLOSED_IN_AIR"
    THERMAL_INSULATION_PARTIAL_ENCLOSED = "THERMAL_INSULATION_PARTIAL_ENCLOSED"
    THERMAL_INSULATION_PARTIAL_UNENCLOSED = "THERMAL_INSULATION_PARTIAL_UNENCLOSED"
    THERMAL_INSULATION_COMPLETE_ENCLOSED = "THERMAL_INSULATION_COMPLETE_ENCLOSED"
    THERMAL_INSULATION_COMPLETE_UNENCLOSED = "THERMAL_INSULATION_COMPLETE_UNENCLOSED"
    BURIED_DIRECT = "BURIED_DIRECT"
    UNDERGROUND_DUCT_SAME = "UNDERGROUND_DUCT_SAME"
    UNDERGROUND_DUCT_SEPARATE = "UNDERGROUND_DUCT_SEPARATE"

    @property
    def description(self) -> str:
        return ARRANGEMENT_DESCRIPTIONS[self]

    @property
    def is_underground(self) -> bool:
        return self in UNDERGROUND_ARRANGEMENTS

    @classmethod
    def from_description(cls, description: str) -> "Arrangement":
        """Map a human-readable installation description to its code."""
        try:
            return _DESCRIPTION_TO_ARRANGEMENT[description]
        except KeyError:
            raise ValueError(f"Unknown installation description: {description!r}") from None


class ConductorMaterial(Enum):
    COPPER = "CU"
    ALUMINIUM = "AL"

    @property
    def label(self) -> str:
        return "Copper" if self is ConductorMaterial.COPPER else "Aluminium"

    @classmethod
    def parse(cls, value) -> "ConductorMaterial":
        """Accept CU/Cu/Copper and AL/Al/Aluminium/Aluminum."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in ("cu", "copper"):
            return cls.COPPER
        if key in ("al", "aluminium", "aluminum"):
            return cls.ALUMINIUM
        raise ValueError(f"Unknown conductor material: {value!r}")


class PhaseConfig(Enum):
    SINGLE_PHASE_AC = "1P_AC"
    THREE_PHASE_AC = "3P_AC"
    DC = "DC"
    TWO_PHASE_120 = "2P_120deg"
    TWO_PHASE_180 = "2P_180deg"

    @property
    def label(self) -> str:
        return PHASE_LABELS[self]


# =============================================================================
# MAPPING TABLES
# =============================================================================

# Design cable type -> cable_type labels accepted in current-rating tables
CABLE_TYPE_LABELS = {
    CableType.TWO_CORE_SHEATHED: ("Two-core sheathed",),
    CableType.TWO_SINGLE_CORE: ("Two single-core",),
    CableType.THREE_SINGLE_CORE: ("Three single-core",),
    CableType.MULTICORE: ("Multicore",),
    CableType.THREE_CORE_AND_FOUR_CORE_SHEATHED: ("Three-core and four-core sheathed",),
    CableType.THREE_CORE_AND_FOUR_CORE: ("Three-core and four-core",),
    CableType.FLEXIBLE_CORD: ("Flexible cords",),
    CableType.CABLE_AND_FLEXIBLE_CORDS: ("Cables and flexible cords",),
    CableType.BARE_SINGLE_CORE_MIMS: ("Bare single-core MIMS cables with copper conductors",),
}

# Insulation -> (family, table insulation label, table max_temp_C, rated temperature °C)
# PVC_V90 is tabulated with the 75°C thermoplastic tables but rated at 90°C.
INSULATION_SPECS = {
    Insulation.PVC_V60: (InsulationFamily.THERMOPLASTIC, "Thermoplastic", 60, 60),
    Insulation.PVC_V75: (InsulationFamily.THERMOPLASTIC, "Thermoplastic", 75, 75),
    Insulation.PVC_V90: (InsulationFamily.THERMOPLASTIC, "Thermoplastic", 75, 90),
    Insulation.XLPE_90: (InsulationFamily.XLPE, "XLPE", 90, 90),
    Insulation.XLPE_110: (InsulationFamily.XLPE, "XLPE", 110, 110),
    Insulation.ELASTOMERIC_90: (InsulationFamily.ELASTOMERIC, "R-EP-90", 90, 90),
    Insulation.ELASTOMERIC_110: (InsulationFamily.ELASTOMERIC, "R-E-110", 110, 110),
    Insulation.MIMS_250: (InsulationFamily.MINERAL, "Mineral", 250, 250),
    Insulation.X_90: (InsulationFamily.XLPE, "X-90", 90, 90),
    Insulation.X_H_90: (InsulationFamily.XLPE, "X-90", 90, 90),
    Insulation.X_HF_90: (InsulationFamily.XLPE, "X-HF-90", 90, 90),
    Insulation.X_HF_110: (InsulationFamily.XLPE, "X-HF-110", 110, 110),
    Insulation.R_E_110: (InsulationFamily.ELASTOMERIC, "R-E-110", 110, 110),
    Insulation.R_EP_90: (InsulationFamily.ELASTOMERIC, "R-EP-90", 90, 90),
    Insulation.R_CPE_90: (InsulationFamily.ELASTOMERIC, "R-CPE-90", 90, 90),
    Insulation.R_HF_90: (InsulationFamily.ELASTOMERIC, "R-HF-90", 90, 90),
    Insulation.R_HF_110: (InsulationFamily.ELASTOMERIC, "R-HF-110", 110, 110),
    Insulation.R_CSP_90: (InsulationFamily.ELASTOMERIC, "R-CSP-90", 90, 90),
    Insulation.R_S_150: (InsulationFamily.ELASTOMERIC, "R-S-150", 150, 150),
    Insulation.CROSS_LINKED_POLYETHYLENE: (InsulationFamily.XLPE, "Cross-linked", 60, 90),
    Insulation.TYPE_150_FIBROUS: (InsulationFamily.FIBROUS, "Type 150 fibrous", 150, 150),
    Insulation.FLUOROPOLYMER_150: (InsulationFamily.FLUOROPOLYMER, "150°C Rated Fluoropolymer", 150, 150),
}

ARRANGEMENT_DESCRIPTIONS = {
    Arrangement.UNENCLOSED_SPACED: "Spaced from surface",
    Arrangement.UNENCLOSED_TOUCHING: "Touching surface",
    Arrangement.UNENCLOSED_EXPOSED_TO_SUN: "Exposed to sun",
    Arrangement.ENCLOSED_IN_AIR: "Wiring enclosure in air",
    Arrangement.THERMAL_INSULATION_PARTIAL_ENCLOSED:
        "Partially surrounded by thermal insulation, in wiring enclosure",
    Arrangement.THERMAL_INSULATION_PARTIAL_UNENCLOSED:
        "Partially surrounded by thermal insulation, unenclosed",
    Arrangement.THERMAL_INSULATION_COMPLETE_ENCLOSED:
        "Completely surrounded by thermal insulation, in wiring enclosure",
    Arrangement.THERMAL_INSULATION_COMPLETE_UNENCLOSED:
        "Completely surrounded by thermal insulation, unenclosed",
    Arrangement.BURIED_DIRECT: "Buried direct",
    Arrangement.UNDERGROUND_DUCT_SAME: "Underground duct same",
    Arrangement.UNDERGROUND_DUCT_SEPARATE: "Underground duct separate",
}

UNDERGROUND_ARRANGEMENTS = frozenset({
    Arrangement.BURIED_DIRECT,
    Arrangement.UNDERGROUND_DUCT_SAME,
    Arrangement.UNDERGROUND_DUCT_SEPARATE,
})

PHASE_LABELS = {
    PhaseConfig.SINGLE_PHASE_AC: "1 Phase AC",
    PhaseConfig.THREE_PHASE_AC: "3 Phase AC",
    PhaseConfig.DC: "DC",
    PhaseConfig.TWO_PHASE_120: "2 Phase 120°",
    PhaseConfig.TWO_PHASE_180: "2 Phase 180°",
}

_DESCRIPTION_TO_ARRANGEMENT = {desc: code for code, desc in ARRANGEMENT_DESCRIPTIONS.items()}


def check_mappings() -> None:
    """
    Verify every enumeration member has an entry in its mapping table
    and that the description mapping is one-to-one.

    Raises:
        RuntimeError: listing the members without a mapping
    """
    missing = []
    for enum_cls, mapping in (
        (CableType, CABLE_TYPE_LABELS),
        (Insulation, INSULATION_SPECS),
        (Arrangement, ARRANGEMENT_DESCRIPTIONS),
        (PhaseConfig, PHASE_LABELS),
    ):
        missing.extend(f"{enum_cls.__name__}.{m.name}" for m in enum_cls if m not in mapping)

    if len(_DESCRIPTION_TO_ARRANGEMENT) != len(ARRANGEMENT_DESCRIPTIONS):
        missing.append("Arrangement descriptions are not unique")

    if missing:
        raise RuntimeError("Incomplete design mappings: " + ", ".join(missing))


check_mappings()


# =============================================================================
# DESIGN STATE
# =============================================================================

@dataclass(frozen=True)
class DesignState:
    """Validated input snapshot for one calculation request."""
    cable_type: CableType
    insulation: Insulation
    installation: Arrangement
    conductor: ConductorMaterial
    phase: PhaseConfig
    voltage: float
    load_current: float
    distance: float
    max_voltage_drop: float
    active_size: Optional[float] = None  # None = auto-size
    earth_size: Optional[float] = None   # None = derive from active size

    def __post_init__(self):
        for name in ("voltage", "load_current", "distance", "max_voltage_drop", "active_size", "earth_size"):
            value = getattr(self, name)
            if value is not None and not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")
        if self.voltage <= 0:
            raise ValueError(f"voltage must be positive, got {self.voltage!r}")

    @property
    def is_auto_size(self) -> bool:
        return self.active_size is None

    @property
    def is_three_phase(self) -> bool:
        return self.phase is PhaseConfig.THREE_PHASE_AC

    def with_active_size(self, size: float) -> "DesignState":
        return replace(self, active_size=float(size))


def _parse_enum(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    if text in enum_cls.__members__:
        return enum_cls[text]
    for member in enum_cls:
        if member.value == text:
            return member
    raise ValueError(f"Unknown {field}: {value!r}")


def _parse_size(value) -> Optional[float]:
    if value is None or str(value).strip().upper() == AUTO:
        return None
    return float(value)


def design_state_from_dict(data: dict) -> DesignState:
    """
    Build a DesignState from a plain mapping (e.g. a YAML design file).

    Enumerated fields accept the member name or value. The installation may
    also be given as its human-readable description. Sizes accept a number
    or "AUTO".

    Args:
        data: dict with keys cable_type, insulation, installation, conductor,
              phase, voltage, load_current, distance, max_voltage_drop and
              optionally active_size, earth_size

    Returns:
        DesignState

    Raises:
        ValueError: for a missing key, an unknown enumerated value or a
                    non-finite number
    """
    required = [
        "cable_type", "insulation", "installation", "conductor", "phase",
        "voltage", "load_current", "distance", "max_voltage_drop",
    ]
    missing = [key for key in required if key not in data]
    if missing:
        raise ValueError(f"Design is missing required fields: {', '.join(missing)}")

    installation = data["installation"]
    if isinstance(installation, str) and installation in _DESCRIPTION_TO_ARRANGEMENT:
        arrangement = Arrangement.from_description(installation)
    else:
        arrangement = _parse_enum(Arrangement, installation, "installation")

    return DesignState(
        cable_type=_parse_enum(CableType, data["cable_type"], "cable type"),
        insulation=_parse_enum(Insulation, data["insulation"], "insulation"),
        installation=arrangement,
        conductor=ConductorMaterial.parse(data["conductor"]),
        phase=_parse_enum(PhaseConfig, data["phase"], "phase"),
        voltage=float(data["voltage"]),
        load_current=float(data["load_current"]),
        distance=float(data["distance"]),
        max_voltage_drop=float(data["max_voltage_drop"]),
        active_size=_parse_size(data.get("active_size")),
        earth_size=_parse_size(data.get("earth_size")),
    )
