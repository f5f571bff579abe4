"""
Band tables

An ordered, contiguous set of half-open ranges [lower, upper) each carrying
a label, a description and an optional numeric payload (a multiplier, a
score). Lookups clamp to the edge bands so extreme inputs still get a label.
"""

from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class Band:
    """A single range of a benchmark table."""
    lower: float
    upper: float
    label: str
    description: str = ""
    value: Optional[float] = None

    def contains(self, x: float) -> bool:
        return self.lower <= x < self.upper


class BandTable:
    """
    Immutable, validated sequence of bands.

    Construction fails if the bands are empty, unsorted, overlapping or
    leave a gap, so every value in [first.lower, last.upper) has exactly
    one band.
    """

    def __init__(self, name: str, bands: list):
        if not bands:
            raise ValueError(f"Band table '{name}' is empty")

        for band in bands:
            if band.upper <= band.lower:
                raise ValueError(
                    f"Band '{band.label}' in '{name}' has upper <= lower"
                )
        for prev, nxt in zip(bands, bands[1:]):
            if prev.upper != nxt.lower:
                raise ValueError(
                    f"Bands '{prev.label}' and '{nxt.label}' in '{name}' are not contiguous"
                )

        self._name = name
        self._bands = tuple(bands)

    @property
    def name(self) -> str:
        return self._name

    @property
    def bands(self) -> tuple:
        return self._bands

    @property
    def labels(self) -> list[str]:
        return [b.label for b in self._bands]

    def __iter__(self) -> Iterator[Band]:
        return iter(self._bands)

    def __len__(self) -> int:
        return len(self._bands)

    def __getitem__(self, index: int) -> Band:
        return self._bands[index]

    def by_label(self, label: str) -> Optional[Band]:
        for band in self._bands:
            if band.label == label:
                return band
        return None

    def __repr__(self) -> str:
        return f"BandTable({self._name!r}, {list(self.labels)})"


def lookup_band(table: BandTable, value: float) -> Band:
    """Return the band containing value, clamped to the nearest edge band."""
    if value < table[0].lower:
        return table[0]
    for band in table:
        if band.contains(value):
            return band
    return table[len(table) - 1]
