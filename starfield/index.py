"""Secondary indices over the catalog: sort key -> ordinal index.

The catalog itself is only addressable by ordinal. A SortedIndex is built by
one scan and answers range queries (declination bands, magnitude cut-offs)
with the ordinals to hand back to CatalogStore.get_star().
"""
import logging

import numpy as np
from numpy.typing import NDArray

from starfield.catalog import CatalogStore

logger = logging.getLogger(__name__)

INDEX_KEYS = ("dec", "mag")


class SortedIndex:
    """Ordinals of the catalog sorted by one numeric field."""

    def __init__(self, key: str, values: NDArray[np.float64], ordinals: NDArray[np.int64]):
        self.key = key
        self.values = values
        self.ordinals = ordinals

    @classmethod
    def build(cls, store: CatalogStore, key: str) -> "SortedIndex":
        """Scan the store once and sort by `key` ("dec" or "mag").

        Unreadable records are left out.
        """
        if key not in INDEX_KEYS:
            raise ValueError(f"Cannot index on {key!r}; expected one of {INDEX_KEYS}")
        values = []
        ordinals = []
        for index, star in store.iter_stars():
            if star is None:
                continue
            values.append(star[key])
            ordinals.append(index)

        values_arr = np.asarray(values, dtype=np.float64)
        ordinals_arr = np.asarray(ordinals, dtype=np.int64)
        order = np.argsort(values_arr, kind="stable")
        logger.debug("Built %s index over %d stars", key, len(order))
        return cls(key, values_arr[order], ordinals_arr[order])

    def __len__(self) -> int:
        return len(self.ordinals)

    def between(self, lo: float, hi: float) -> NDArray[np.int64]:
        """Ordinals whose key lies in [lo, hi], in key order."""
        start = np.searchsorted(self.values, lo, side="left")
        stop = np.searchsorted(self.values, hi, side="right")
        return self.ordinals[start:stop]

    def brighter_than(self, limit: float) -> NDArray[np.int64]:
        """Ordinals with magnitude <= limit, brightest first (mag index only)."""
        if self.key != "mag":
            raise ValueError(f"brighter_than() needs a 'mag' index, this one is {self.key!r}")
        stop = np.searchsorted(self.values, limit, side="right")
        return self.ordinals[:stop]
