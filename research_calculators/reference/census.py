"""
Census Reference Data

Adult population structure per country from national statistics offices.
Raw age and gender shares are crossed into demographic cells keyed
"<gender>:<age range>" (e.g. "female:25-34") and normalised so the cells of
each country sum to 1.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union
import math

from ..results import NotFound

PROPORTION_TOLERANCE = 1e-6


@dataclass(frozen=True)
class CensusEntry:
    """Immutable census snapshot for one country."""
    country: str
    source: str
    last_updated: str
    cells: Mapping[str, float]
    age_ranges: tuple
    genders: tuple


def cell_key(gender: str, age_range: str) -> str:
    """Build the cell key for a gender and an age range."""
    return f"{gender.strip().lower()}:{age_range.strip()}"


def parse_age_range(age_range: str) -> tuple[int, int]:
    """Parse "25-34" or "65+" into inclusive bounds."""
    text = age_range.strip()
    if text.endswith("+"):
        return int(text[:-1]), 100
    if "-" in text:
        low, high = text.split("-", 1)
        return int(low), int(high)
    return 0, 100


# Percent of adult population by age and gender; ages need not sum to 100
# because under-18s are excluded, they are normalised below.
_RAW_CENSUS = {
    "turkey": {
        "country": "Turkey",
        "source": "TÜİK 2024",
        "last_updated": "2024-01",
        "age": {"18-24": 12, "25-34": 18, "35-44": 17, "45-54": 14, "55-64": 11, "65+": 10},
        "gender": {"male": 49, "female": 51},
    },
    "uk": {
        "country": "United Kingdom",
        "source": "ONS 2023",
        "last_updated": "2023-06",
        "age": {"18-24": 10, "25-34": 17, "35-44": 16, "45-54": 16, "55-64": 15, "65+": 18},
        "gender": {"male": 49, "female": 51},
    },
    "usa": {
        "country": "United States",
        "source": "US Census 2023",
        "last_updated": "2023-07",
        "age": {"18-24": 11, "25-34": 17, "35-44": 16, "45-54": 15, "55-64": 15, "65+": 17},
        "gender": {"male": 49, "female": 51},
    },
    "germany": {
        "country": "Germany",
        "source": "Destatis 2023",
        "last_updated": "2023-12",
        "age": {"18-24": 9, "25-34": 15, "35-44": 15, "45-54": 17, "55-64": 16, "65+": 21},
        "gender": {"male": 49, "female": 51},
    },
    "france": {
        "country": "France",
        "source": "INSEE 2023",
        "last_updated": "2023-01",
        "age": {"18-24": 10, "25-34": 15, "35-44": 15, "45-54": 16, "55-64": 15, "65+": 20},
        "gender": {"male": 48, "female": 52},
    },
    "spain": {
        "country": "Spain",
        "source": "INE 2023",
        "last_updated": "2023-07",
        "age": {"18-24": 9, "25-34": 14, "35-44": 18, "45-54": 18, "55-64": 14, "65+": 19},
        "gender": {"male": 49, "female": 51},
    },
    "italy": {
        "country": "Italy",
        "source": "ISTAT 2023",
        "last_updated": "2023-01",
        "age": {"18-24": 8, "25-34": 13, "35-44": 16, "45-54": 18, "55-64": 16, "65+": 23},
        "gender": {"male": 49, "female": 51},
    },
    "netherlands": {
        "country": "Netherlands",
        "source": "CBS 2023",
        "last_updated": "2023-01",
        "age": {"18-24": 11, "25-34": 16, "35-44": 15, "45-54": 17, "55-64": 15, "65+": 19},
        "gender": {"male": 50, "female": 50},
    },
    "poland": {
        "country": "Poland",
        "source": "GUS 2023",
        "last_updated": "2023-06",
        "age": {"18-24": 10, "25-34": 17, "35-44": 18, "45-54": 15, "55-64": 15, "65+": 18},
        "gender": {"male": 48, "female": 52},
    },
}

_ALIASES = {
    "united kingdom": "uk",
    "great britain": "uk",
    "united states": "usa",
    "us": "usa",
    "türkiye": "turkey",
    "turkiye": "turkey",
}


def _build_entry(raw: dict) -> CensusEntry:
    age_total = sum(raw["age"].values())
    gender_total = sum(raw["gender"].values())

    cells = {}
    for gender, g_pct in raw["gender"].items():
        for age_range, a_pct in raw["age"].items():
            cells[cell_key(gender, age_range)] = (g_pct / gender_total) * (a_pct / age_total)

    total = math.fsum(cells.values())
    if abs(total - 1.0) > PROPORTION_TOLERANCE:
        raise ValueError(f"Census cells for {raw['country']} sum to {total}, not 1")

    return CensusEntry(
        country=raw["country"],
        source=raw["source"],
        last_updated=raw["last_updated"],
        cells=MappingProxyType(cells),
        age_ranges=tuple(raw["age"]),
        genders=tuple(raw["gender"]),
    )


CENSUS_DATA = MappingProxyType({
    key: _build_entry(raw) for key, raw in _RAW_CENSUS.items()
})


def _country_key(country: str) -> str:
    key = country.strip().lower()
    return _ALIASES.get(key, key)


def get_census(country: str) -> Union[CensusEntry, NotFound]:
    """Census entry for a country name or code, or NotFound."""
    entry = CENSUS_DATA.get(_country_key(country))
    if entry is None:
        return NotFound(country)
    return entry


def lookup_census(country: str, cell: str) -> Union[float, NotFound]:
    """Population proportion of one cell, or NotFound for an unknown country or cell."""
    entry = get_census(country)
    if isinstance(entry, NotFound):
        return entry

    key = cell.strip().lower()
    if key not in entry.cells:
        return NotFound(f"{country}/{cell}")
    return entry.cells[key]


def census_marginals(entry: CensusEntry, dimension: str) -> dict[str, float]:
    """Collapse cells onto one dimension ("age" or "gender")."""
    if dimension not in ("age", "gender"):
        raise ValueError(f"Unknown census dimension: {dimension}")

    marginals: dict[str, float] = {}
    for key, proportion in entry.cells.items():
        gender, age_range = key.split(":", 1)
        bucket = age_range if dimension == "age" else gender
        marginals[bucket] = marginals.get(bucket, 0.0) + proportion
    return marginals


def available_countries() -> list[str]:
    """Display names of all countries with census data."""
    return [entry.country for entry in CENSUS_DATA.values()]
