#!/usr/bin/env python3
"""
Result Export Module
Writes a finished cable calculation to YAML and to a formatted Excel sheet.

Outputs:
- YAML document (result_to_dict layout)
- Excel workbook:
  - Calculation sheet (inputs, selected size and derived quantities)
  - Selection Table sheet (earth size, adjusted rating and drop per size)
  - Candidates sheet (base and derated ratings of the matched column)
  - Notes sheet (warnings and disclaimers)

The result is always passed in explicitly; this module keeps no state.

Usage:
    write_result_yaml(result, Path("out/cable.yaml"))
    write_result_xlsx(result, Path("out/cable.xlsx"))

Author: Cable Size Calculator
"""

from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, NamedStyle, PatternFill, Side
from openpyxl.utils import get_column_letter

from cable_calculator import CalculationResult


DISCLAIMERS = [
    "Grouping, soil and installation derating use fixed placeholder factors.",
    "Ambient temperature is assumed at 40°C.",
    "Short-circuit withstand uses an assumed 1000 A fault cleared in 0.1 s.",
    "Values marked (estimated) are typical values, not tabulated data.",
    "Results are for conceptual sizing and must be verified before construction.",
]


# =============================================================================
# COLUMN DEFINITIONS
# =============================================================================

SELECTION_TABLE_COLUMNS = [
    ("size", "Size (mm²)", 11),
    ("earth_size", "Earth (mm²)", 12),
    ("adjusted_rating", "Rating (A)", 11),
    ("voltage_drop_pct", "VD (%)", 9),
    ("meets_load", "Carries Load", 13),
    ("meets_voltage_drop", "VD OK", 8),
]

CANDIDATE_COLUMNS = [
    ("size", "Size (mm²)", 11),
    ("base_rating", "Base (A)", 10),
    ("adjusted_rating", "Derated (A)", 12),
    ("meets_load", "Carries Load", 13),
]

FLAG_KEYS = {"meets_load", "meets_voltage_drop", "satisfied", "passes"}


# =============================================================================
# DOCUMENT LAYOUT
# =============================================================================

def _plain(value):
    """Convert enums, tuples and floats into YAML-friendly values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float):
        return round(value, 4)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def result_to_dict(result: CalculationResult) -> dict:
    """
    Flatten a CalculationResult into plain nested dicts.

    Args:
        result: Finished calculation

    Returns:
        dict with design, selection, current_rating, derating, impedance,
        voltage_drop, earth, loop_impedance, short_circuit, protection,
        selection_table, candidates and warnings
    """
    design = result.design
    rating = result.current_rating
    impedance = result.impedance
    drop = result.voltage_drop
    earth = result.earth
    loop = result.loop_impedance
    sc = result.short_circuit
    protection = result.protection

    return _plain({
        "design": {
            "cable_type": design.cable_type,
            "insulation": design.insulation,
            "installation": design.installation,
            "installation_description": design.installation.description,
            "conductor": design.conductor,
            "phase": design.phase,
            "voltage_v": design.voltage,
            "load_current_a": design.load_current,
            "distance_m": design.distance,
            "max_voltage_drop_pct": design.max_voltage_drop,
            "active_size_mm2": design.active_size,
            "earth_size_mm2": design.earth_size,
        },
        "selection": {
            "size_mm2": result.size,
            "auto_sized": result.auto_sized,
            "satisfied": result.satisfied,
            "reason": result.reason,
            "operating_temperature_c": result.operating_temperature_c,
        },
        "current_rating": {
            "base_rating_a": rating.base_rating,
            "adjusted_rating_a": rating.adjusted_rating,
            "table_id": rating.table_id,
            "column": rating.column,
            "reference": rating.provenance,
            "degraded": rating.degraded,
        },
        "derating": {
            "ambient": result.derating.ambient,
            "grouping": result.derating.grouping,
            "soil": result.derating.soil,
            "installation": result.derating.installation,
            "combined": result.derating.combined,
        },
        "impedance": {
            "resistance_ohm_per_km": impedance.resistance,
            "reactance_ohm_per_km": impedance.reactance,
            "impedance_ohm_per_km": impedance.impedance,
            "resistance_reference": impedance.resistance_ref,
            "reactance_reference": impedance.reactance_ref,
        },
        "voltage_drop": {
            "voltage_drop_v": drop.voltage_drop_v,
            "voltage_drop_pct": drop.voltage_drop_pct,
            "voltage_at_load_v": drop.voltage_at_load_v,
            "max_distance_m": drop.max_distance_m,
        },
        "earth": {
            "size_mm2": earth.size,
            "resistance_ohm_per_km": earth.resistance,
            "reactance_ohm_per_km": earth.reactance,
            "impedance_ohm_per_km": earth.impedance,
            "resistance_reference": earth.resistance_ref,
            "reactance_reference": earth.reactance_ref,
        },
        "loop_impedance": {
            "phase_ohm_per_km": loop.phase_impedance,
            "earth_ohm_per_km": loop.earth_impedance,
            "total_ohm_per_km": loop.total_impedance,
        },
        "short_circuit": {
            "passes": sc.passes,
            "i2t": sc.i2t,
            "k2s2": sc.k2s2,
            "k_factor": sc.k,
            "fault_current_a": sc.fault_current_a,
            "fault_time_s": sc.fault_time_s,
            "warning": sc.warning,
        },
        "protection": {
            "device_type": protection.device_type,
            "rating_a": protection.rating_a,
            "curve": protection.curve,
            "trip_multiple": protection.trip_multiple,
            "min_trip_current_a": protection.min_trip_current_a,
        },
        "selection_table": [
            {key: getattr(row, key) for key, _, _ in SELECTION_TABLE_COLUMNS}
            for row in result.selection_table
        ],
        "candidates": [
            {key: getattr(row, key) for key, _, _ in CANDIDATE_COLUMNS}
            for row in result.candidates
        ],
        "warnings": list(result.warnings),
    })


def write_result_yaml(result: CalculationResult, output_path: Path) -> Path:
    """Write the result document as YAML; returns the output path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(result_to_dict(result), f, sort_keys=False, allow_unicode=True)
    return output_path


# =============================================================================
# STYLES
# =============================================================================

THIN_BOTTOM = Border(bottom=Side(style="thin", color="000000"))

# name: (font, fill colour, alignment, number format)
CELL_STYLES = {
    # Column headings and note headings
    "header": (Font(bold=True, color="FFFFFF", size=10), "4472C4",
               Alignment(horizontal="center", vertical="center", wrap_text=True), None),
    "data": (Font(size=9), None, Alignment(vertical="center"), None),
    # Ratings, impedances and drops
    "number": (Font(size=9), None, Alignment(horizontal="right", vertical="center"), "#,##0.000"),
    "title": (Font(bold=True, size=14), None, Alignment(horizontal="left", vertical="center"), None),
    # Calculation sheet section rows
    "section": (Font(bold=True, size=9), "E2EFDA", Alignment(vertical="center"), None),
    # Failed checks
    "warning": (Font(size=9, color="C00000"), "FFCCCC",
                Alignment(horizontal="right", vertical="center"), None),
    # Estimated values
    "assumed": (Font(size=9, italic=True), "FFF2CC", Alignment(vertical="center"), None),
}


def create_styles(wb: Workbook) -> list[str]:
    """Register the named cell styles on a workbook; returns their names."""
    for name, (font, fill, alignment, number_format) in CELL_STYLES.items():
        style = NamedStyle(name=name, font=font, alignment=alignment)
        if fill:
            style.fill = PatternFill(start_color=fill, end_color=fill, fill_type="solid")
        if number_format:
            style.number_format = number_format
        if name == "header":
            style.border = THIN_BOTTOM
        wb.add_named_style(style)
    return list(CELL_STYLES)


# =============================================================================
# SHEET WRITERS
# =============================================================================

def _write_value(ws, row: int, column: int, key: str, value):
    if isinstance(value, bool):
        cell = ws.cell(row=row, column=column, value="Yes" if value else "No")
        cell.style = "warning" if key in FLAG_KEYS and not value else "data"
    elif isinstance(value, (int, float)):
        cell = ws.cell(row=row, column=column, value=value)
        cell.style = "number"
    elif value is None:
        cell = ws.cell(row=row, column=column, value="-")
        cell.style = "data"
    else:
        cell = ws.cell(row=row, column=column, value=str(value))
        cell.style = "assumed" if "(estimated)" in str(value) else "data"
    return cell


def write_generic_sheet(ws, data: list[dict], columns: list, title: Optional[str] = None):
    """Generic sheet writer with column definitions."""
    ws.title = title[:31] if title else "Data"  # Excel max 31 chars

    for col_idx, (key, header, width) in enumerate(columns, 1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.style = "header"
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    for row_idx, item in enumerate(data, 2):
        for col_idx, (key, _, _) in enumerate(columns, 1):
            _write_value(ws, row_idx, col_idx, key, item.get(key))

    if data:
        ws.auto_filter.ref = f"A1:{get_column_letter(len(columns))}{len(data) + 1}"

    ws.freeze_panes = "A2"


def write_calculation_sheet(ws, document: dict):
    """Write the Calculation sheet: one section per result group, key/value rows."""
    ws.title = "Calculation"
    ws.cell(row=1, column=1, value="CABLE SIZE CALCULATION").style = "title"
    ws.merge_cells("A1:C1")

    row = 3
    for section in (
        "design", "selection", "current_rating", "derating", "impedance",
        "voltage_drop", "earth", "loop_impedance", "short_circuit", "protection",
    ):
        ws.cell(row=row, column=1, value=section.replace("_", " ").title()).style = "section"
        ws.cell(row=row, column=2).style = "section"
        row += 1
        for key, value in document[section].items():
            ws.cell(row=row, column=1, value=key).style = "data"
            _write_value(ws, row, 2, key, value)
            row += 1
        row += 1

    ws.column_dimensions["A"].width = 28
    ws.column_dimensions["B"].width = 60


def write_notes_sheet(ws, warnings: list[str]):
    """Write warnings and disclaimers."""
    ws.title = "Notes"

    ws.cell(row=1, column=1, value="CALCULATION NOTES AND DISCLAIMERS").style = "title"

    row = 3
    ws.cell(row=row, column=1, value="WARNINGS").style = "header"
    for row, warning in enumerate(warnings or ["None"], row + 1):
        ws.cell(row=row, column=1, value=f"• {warning}").style = "data"

    row += 2
    ws.cell(row=row, column=1, value="DISCLAIMERS").style = "header"
    for row, disclaimer in enumerate(DISCLAIMERS, row + 1):
        ws.cell(row=row, column=1, value=f"• {disclaimer}").style = "data"

    ws.column_dimensions["A"].width = 100


def write_result_xlsx(result: CalculationResult, output_path: Path) -> Path:
    """
    Write the result as an Excel workbook.

    Args:
        result: Finished calculation
        output_path: Path for the .xlsx file

    Returns:
        The output path
    """
    output_path = Path(output_path)
    document = result_to_dict(result)

    wb = Workbook()
    create_styles(wb)

    write_calculation_sheet(wb.active, document)
    write_generic_sheet(
        wb.create_sheet(), document["selection_table"], SELECTION_TABLE_COLUMNS,
        title="Selection Table",
    )
    write_generic_sheet(
        wb.create_sheet(), document["candidates"], CANDIDATE_COLUMNS,
        title="Candidates",
    )
    write_notes_sheet(wb.create_sheet(), document["warnings"])

    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(output_path)
    return output_path
