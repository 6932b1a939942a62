"""Reactor-type variants and their column naming.

Each supported facility writes its logs with its own column names. The
variant is a closed enum; everything variant-specific is looked up in
REACTOR_COLUMNS / REACTOR_GEOMETRY, so adding a facility means adding one
enum member and one row in each table.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from pbropt.contracts.failure import MissingRequiredColumn

__all__ = [
    'ReactorType',
    'ReactorColumns',
    'ReactorGeometry',
    'REACTOR_COLUMNS',
    'REACTOR_GEOMETRY',
    'columns_for',
    'geometry_for',
    'column_index',
    'find_column',
]


class ReactorType(str, Enum):
    """Supported photobioreactor facilities."""
    AGROSCOPE = "agroscope"
    ZHAW = "zhaw"


@dataclass(frozen=True)
class ReactorColumns:
    """Column names for one reactor variant.

    ``irradiance`` holds one or more sensor columns; their arithmetic mean is
    the irradiance of a row. ``nutrient`` and ``flow`` may be absent from a
    given table without failing reconciliation.
    """
    timestamp: str
    irradiance: Tuple[str, ...]
    temperature: str
    flow: Optional[str]
    lab_timestamp: str
    biomass: str
    nutrient: Optional[str]


@dataclass(frozen=True)
class ReactorGeometry:
    """Physical reactor dimensions used for productivity figures."""
    productive_area_m2: float
    volume_l: float


# Confirmed export headers: timestring, PAR.1, PAR.2, TEMPERATURE, FLOW.OF.ALGAE
# and Trockenmasse. The agroscope irradiance and lab names and both nutrient
# columns are assumed until real exports are available.
REACTOR_COLUMNS: Dict[ReactorType, ReactorColumns] = {
    ReactorType.AGROSCOPE: ReactorColumns(
        timestamp="timestring",
        irradiance=("PAR",),
        temperature="TEMPERATURE",
        flow="FLOW.OF.ALGAE",
        lab_timestamp="timestring",
        biomass="Trockensubstanz",
        nutrient="N.Dosierung",
    ),
    ReactorType.ZHAW: ReactorColumns(
        timestamp="timestring",
        irradiance=("PAR.1", "PAR.2"),
        temperature="TEMPERATURE",
        flow="FLOW.OF.ALGAE",
        lab_timestamp="timestring",
        biomass="Trockenmasse",
        nutrient="Naehrstoffzugabe",
    ),
}

REACTOR_GEOMETRY: Dict[ReactorType, ReactorGeometry] = {
    ReactorType.AGROSCOPE: ReactorGeometry(productive_area_m2=2.84, volume_l=235.0),
    ReactorType.ZHAW: ReactorGeometry(productive_area_m2=18.0, volume_l=200.0),
}


def columns_for(reactor_type) -> ReactorColumns:
    """Column table for a variant; accepts the enum or its string value."""
    return REACTOR_COLUMNS[ReactorType(reactor_type)]


def geometry_for(reactor_type) -> ReactorGeometry:
    return REACTOR_GEOMETRY[ReactorType(reactor_type)]


def column_index(header: Sequence, name: str, table: str, reactor_type) -> int:
    """Position of a required column in a header row.

    Header cells are compared after stripping surrounding whitespace.

    Raises
    ------
    MissingRequiredColumn
        If ``name`` is not present in ``header``.
    """
    index = find_column(header, name)
    if index is None:
        raise MissingRequiredColumn(name, table, ReactorType(reactor_type).value)
    return index


def find_column(header: Sequence, name: Optional[str]) -> Optional[int]:
    """Position of an optional column, or None."""
    if name is None:
        return None
    for i, cell in enumerate(header):
        if isinstance(cell, str) and cell.strip() == name:
            return i
    return None
