#!/usr/bin/env python3
"""
Size Cable
Command-line cable size calculation from a YAML design file.

Workflow:
1. Load the reference catalog (bundled, or --dataset)
2. Read the design parameters from YAML
3. Run the calculation (auto-size unless active_size is given)
4. Print a summary; optionally write the result as YAML and Excel

Design file (either flat or under a top-level "design" key):

    cable_type: MULTICORE
    insulation: PVC_V75
    installation: Wiring enclosure in air
    conductor: CU
    phase: 3P_AC
    voltage: 400
    load_current: 47
    distance: 60
    max_voltage_drop: 5
    active_size: AUTO

Usage:
    python size_cable.py \
        --design designs/pump-feeder.yaml \
        --output results/pump-feeder.yaml \
        --xlsx results/pump-feeder.xlsx
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from cable_calculator import CalculationResult, calculate
from design_state import design_state_from_dict
from reference_data import ReferenceDataError, get_store
from result_export import write_result_xlsx, write_result_yaml


def read_design(path: Path) -> dict:
    """Read the design mapping from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Design file must contain a mapping: {path}")
    return data.get("design", data)


def print_summary(result: CalculationResult):
    design = result.design
    rating = result.current_rating
    drop = result.voltage_drop

    print(f"\nCable: {design.cable_type.value}, {design.insulation.value}, "
          f"{design.conductor.label}, {design.installation.description}")
    print(f"  Supply: {design.phase.label} {design.voltage:g} V, "
          f"{design.load_current:g} A over {design.distance:g} m")
    mode = "auto" if result.auto_sized else "requested"
    status = "OK" if result.satisfied else f"NOT SATISFIED ({result.reason})"
    print(f"  Active size: {result.size:g} mm² ({mode}) - {status}")
    if rating.adjusted_rating is not None:
        print(f"  Current rating: {rating.base_rating:g} A base, "
              f"{rating.adjusted_rating:.1f} A derated [{rating.provenance}]")
    print(f"  Derating: C_total = {result.derating.combined:.3f}, "
          f"operating temperature ~{result.operating_temperature_c:.0f}°C")
    print(f"  Voltage drop: {drop.voltage_drop_v:.2f} V ({drop.voltage_drop_pct:.2f}%), "
          f"{drop.voltage_at_load_v:.1f} V at load")
    if drop.max_distance_m is not None:
        print(f"  Max distance: {drop.max_distance_m:.0f} m at {design.max_voltage_drop:g}%")
    print(f"  Earth: {result.earth.size:g} mm², loop impedance "
          f"{result.loop_impedance.total_impedance:.3f} Ω/km")
    print(f"  Short circuit: {'PASS' if result.short_circuit.passes else 'FAIL'} "
          f"(K = {result.short_circuit.k:g})")
    print(f"  Protection: {result.protection.device_type} {result.protection.rating_a:g} A "
          f"curve {result.protection.curve}, trips at {result.protection.min_trip_current_a:g} A")

    for warning in result.warnings:
        print(f"  WARNING: {warning}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Calculate cable size, voltage drop, earth and protection per AS/NZS 3008"
    )
    parser.add_argument(
        "--design", "-d",
        type=Path,
        required=True,
        help="Path to design parameters (YAML)"
    )
    parser.add_argument(
        "--dataset",
        type=Path,
        help="Reference catalog (default: bundled AS/NZS 3008 catalog)"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output path for result YAML"
    )
    parser.add_argument(
        "--xlsx",
        type=Path,
        help="Output path for Excel calculation sheet"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show info-level log messages"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.design.exists():
        print(f"Error: Design file not found: {args.design}")
        sys.exit(1)

    try:
        get_store().load(args.dataset)
    except (FileNotFoundError, ReferenceDataError, yaml.YAMLError) as e:
        print(f"Error: Could not load reference data: {e}")
        sys.exit(1)

    try:
        design = design_state_from_dict(read_design(args.design))
    except (ValueError, TypeError) as e:
        print(f"Error: Invalid design: {e}")
        sys.exit(1)

    print(f"Sizing cable from {args.design}...")
    try:
        result = calculate(design)
    except ReferenceDataError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print_summary(result)

    if args.output:
        write_result_yaml(result, args.output)
        print(f"\nWrote result: {args.output}")
    if args.xlsx:
        write_result_xlsx(result, args.xlsx)
        print(f"Wrote calculation sheet: {args.xlsx}")


if __name__ == "__main__":
    main()
