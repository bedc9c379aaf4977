#!/usr/bin/env python3
"""
Reference Data Module
Current-rating, resistance and reactance tables for cable calculations.

Provides:
- ReferenceTable / ColumnSpec / ReferenceDataset (immutable once built)
- Loading of the reference catalog (YAML or JSON document)
- ReferenceDataStore: loaded-once holder that refuses access until ready

The document holds three ordered collections, `current_rating_tables`,
`resistance_tables` and `reactance_tables`. Each table looks like:

    table_id: T13
    cable_type: Multicore
    insulation_type: Thermoplastic        # or a list of equivalent names
    max_temp_C: 75
    columns:
      C1: {material: CU, arrangement: UNENCLOSED_SPACED}
    rows:
      - size: 2.5
        values: {C1: 27}

Standards: AS/NZS 3008.1.1:2017
"""

import logging
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Optional, Union

import yaml

from design_state import ConductorMaterial

logger = logging.getLogger(__name__)

TABLE_KINDS = ("current_rating", "resistance", "reactance")

DEFAULT_CATALOG = "as_nzs_3008_reference.yaml"


# =============================================================================
# ERRORS
# =============================================================================

class ReferenceDataError(Exception):
    """Base class for reference dataset problems."""


class DatasetNotReady(ReferenceDataError):
    """Raised when a calculation is requested before the dataset is loaded."""


class NoMatchingTable(ReferenceDataError):
    """Raised when a table collection is empty or absent."""


class NoMatchingColumn(ReferenceDataError):
    """Raised when a selected table declares no columns."""


class InvalidReferenceData(ReferenceDataError, ValueError):
    """Raised when the reference document is not a mapping."""


# =============================================================================
# DATA MODEL
# =============================================================================

@dataclass(frozen=True)
class ColumnSpec:
    """Metadata describing one table column."""
    material: Optional[ConductorMaterial] = None
    arrangement: Optional[str] = None
    temperature_c: Optional[float] = None
    insulation: Optional[str] = None


@dataclass(frozen=True)
class ReferenceTable:
    """One current-rating, resistance or reactance table."""
    kind: str
    table_id: str
    cable_type: str = ""
    insulation_types: tuple = ()
    max_temp_c: Optional[float] = None
    description: str = ""
    columns: dict = field(default_factory=dict)  # column id -> ColumnSpec, declaration order
    rows: tuple = ()                             # ((size_mm2, {column id: value}), ...)

    @property
    def number(self) -> str:
        """Table number used in references ("T35" -> "35")."""
        return self.table_id[1:] if self.table_id.startswith("T") else self.table_id

    @property
    def sizes(self) -> list[float]:
        return [size for size, _ in self.rows]

    def value(self, column: str, size: float) -> Optional[float]:
        """Value at (size, column), or None when the row or cell is absent."""
        for row_size, values in self.rows:
            if row_size == size:
                value = values.get(column)
                return float(value) if value is not None else None
        return None

    def column_values(self, column: str) -> list[tuple[float, float]]:
        """All (size, value) pairs with a value in the given column."""
        return [
            (size, float(values[column]))
            for size, values in self.rows
            if values.get(column) is not None
        ]


@dataclass(frozen=True)
class ReferenceDataset:
    """Immutable collection of reference tables, loaded once."""
    current_rating_tables: tuple = ()
    resistance_tables: tuple = ()
    reactance_tables: tuple = ()
    source: str = ""

    def tables(self, kind: str) -> tuple:
        if kind not in TABLE_KINDS:
            raise ValueError(f"Unknown table kind: {kind!r}")
        return getattr(self, f"{kind}_tables")

    @property
    def is_empty(self) -> bool:
        return not (self.current_rating_tables or self.resistance_tables or self.reactance_tables)

    @classmethod
    def from_dict(cls, document: dict, source: str = "") -> "ReferenceDataset":
        """Build a dataset from the parsed reference document."""
        if not isinstance(document, dict):
            raise InvalidReferenceData(
                f"Reference document must be a mapping, got {type(document).__name__}"
            )
        return cls(
            current_rating_tables=_parse_tables(document, "current_rating"),
            resistance_tables=_parse_tables(document, "resistance"),
            reactance_tables=_parse_tables(document, "reactance"),
            source=source,
        )


# =============================================================================
# PARSING
# =============================================================================

_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")


def _parse_size(row: dict) -> Optional[float]:
    """Conductor size from a row; accepts size, conductor_size_mm2 or conductor_size_or_stranding."""
    for key in ("size", "conductor_size_mm2"):
        if row.get(key) is not None:
            try:
                return float(row[key])
            except (TypeError, ValueError):
                return None
    stranding = row.get("conductor_size_or_stranding")
    if stranding is not None:
        match = _LEADING_NUMBER.match(str(stranding))
        if match:
            return float(match.group(1))
    return None


def _parse_column(data) -> ColumnSpec:
    data = data or {}
    material = data.get("material")
    temperature = data.get("temperature_C", data.get("temp_C"))
    try:
        material = ConductorMaterial.parse(material) if material is not None else None
    except ValueError:
        logger.warning("Unrecognised column material %r; column will not match on material", material)
        material = None
    return ColumnSpec(
        material=material,
        arrangement=data.get("arrangement"),
        temperature_c=float(temperature) if temperature is not None else None,
        insulation=data.get("insulation"),
    )


def _parse_table(kind: str, data: dict, index: int) -> ReferenceTable:
    table_id = str(data.get("table_id") or f"{kind}_{index}")

    insulation = data.get("insulation_type") or ()
    if isinstance(insulation, str):
        insulation = (insulation,)

    columns = {str(col_id): _parse_column(col) for col_id, col in (data.get("columns") or {}).items()}

    rows = []
    seen = set()
    for row in data.get("rows") or []:
        if not isinstance(row, dict):
            continue
        size = _parse_size(row)
        if size is None:
            continue
        if size in seen:
            logger.warning("Table %s: duplicate row for %g mm² ignored", table_id, size)
            continue
        seen.add(size)
        values = {str(k): v for k, v in (row.get("values") or {}).items()}
        rows.append((size, MappingProxyType(values)))

    max_temp = data.get("max_temp_C")
    return ReferenceTable(
        kind=kind,
        table_id=table_id,
        cable_type=str(data.get("cable_type") or ""),
        insulation_types=tuple(str(i) for i in insulation),
        max_temp_c=float(max_temp) if max_temp is not None else None,
        description=str(data.get("description") or ""),
        columns=MappingProxyType(columns),
        rows=tuple(rows),
    )


def _parse_tables(document: dict, kind: str) -> tuple:
    raw = document.get(f"{kind}_tables") or []
    return tuple(
        _parse_table(kind, table, index)
        for index, table in enumerate(raw)
        if isinstance(table, dict)
    )


def default_catalog_path() -> Path:
    """Path of the bundled reference catalog."""
    return Path(__file__).parent.parent / "catalogs" / DEFAULT_CATALOG


def read_reference_dataset(path: Optional[Union[str, Path]] = None) -> ReferenceDataset:
    """
    Read and parse a reference document.

    Args:
        path: YAML or JSON file; defaults to the bundled catalog

    Returns:
        ReferenceDataset

    Raises:
        FileNotFoundError: if the file does not exist
        InvalidReferenceData: if the document is not a mapping
    """
    path = Path(path) if path else default_catalog_path()
    if not path.exists():
        raise FileNotFoundError(f"Reference catalog not found: {path}")
    with open(path, encoding="utf-8") as f:
        document = yaml.safe_load(f)

    dataset = ReferenceDataset.from_dict(document, source=str(path))
    logger.info(
        "Loaded reference data from %s: %d current-rating, %d resistance, %d reactance tables",
        path,
        len(dataset.current_rating_tables),
        len(dataset.resistance_tables),
        len(dataset.reactance_tables),
    )
    return dataset


# =============================================================================
# LOADED-ONCE STORE
# =============================================================================

class ReferenceDataStore:
    """
    Holds the process-wide reference dataset.

    The dataset is published once loading completes; until then `get()`
    raises DatasetNotReady. If loading failed, `get()` raises a
    DatasetNotReady chained to the load error.
    """

    def __init__(self):
        self._dataset: Optional[ReferenceDataset] = None
        self._error: Optional[BaseException] = None
        self._ready = threading.Event()
        self._lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self._dataset is not None

    def load(self, path: Optional[Union[str, Path]] = None) -> ReferenceDataset:
        """Load synchronously and publish the dataset."""
        try:
            dataset = read_reference_dataset(path)
        except Exception as exc:
            with self._lock:
                self._error = exc
                self._ready.set()
            raise
        return self.publish(dataset)

    def load_in_background(self, path: Optional[Union[str, Path]] = None) -> threading.Thread:
        """Start loading on a daemon thread; use wait() or is_ready to follow it."""

        def _run():
            try:
                self.load(path)
            except Exception:
                logger.exception("Reference data load failed")

        thread = threading.Thread(target=_run, name="reference-data-load", daemon=True)
        thread.start()
        return thread

    def publish(self, dataset: ReferenceDataset) -> ReferenceDataset:
        """Publish an already-built dataset (used by loaders and tests)."""
        if dataset.is_empty:
            logger.warning("Reference dataset %s has no tables", dataset.source or "<in-memory>")
        with self._lock:
            self._dataset = dataset
            self._error = None
            self._ready.set()
        return dataset

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until loading finished (successfully or not)."""
        return self._ready.wait(timeout)

    def get(self) -> ReferenceDataset:
        dataset = self._dataset
        if dataset is not None:
            return dataset
        if self._error is not None:
            raise DatasetNotReady(f"Reference data failed to load: {self._error}") from self._error
        raise DatasetNotReady("Reference data not loaded yet")

    def reset(self) -> None:
        with self._lock:
            self._dataset = None
            self._error = None
            self._ready.clear()


_STORE = ReferenceDataStore()


def get_store() -> ReferenceDataStore:
    return _STORE


def load_reference_dataset(path: Optional[Union[str, Path]] = None) -> ReferenceDataset:
    """Load the process-wide dataset (once per process in normal use)."""
    return _STORE.load(path)


def get_reference_dataset() -> ReferenceDataset:
    """Get the process-wide dataset; raises DatasetNotReady before loading."""
    return _STORE.get()


def resolve_dataset(dataset: Optional[ReferenceDataset] = None) -> ReferenceDataset:
    """Use the given dataset, else the process-wide one."""
    return dataset if dataset is not None else get_reference_dataset()
