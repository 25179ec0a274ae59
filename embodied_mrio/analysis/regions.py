"""
Region-major block layout of the flat sector index.

Every N-length axis of the MRIO system lists the sectors of the first region,
then the sectors of the second region, and so on. ``RegionBlocks`` records
this layout explicitly as a ``region -> [start, end)`` map so that aggregation
and self-trade removal never depend on a fixed sector count per region.
"""

from collections import OrderedDict
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from embodied_mrio.exceptions import MissingDataError


class RegionBlocks:
    """
    Ordered mapping from region name to its contiguous sector index range.

    Parameters
    ----------
    blocks : dict of str -> (int, int)
        Half-open ``[start, end)`` sector ranges, in region order. Ranges must
        be non-empty, start at 0 and tile the sector axis without gaps.

    Examples
    --------
    >>> blocks = RegionBlocks.uniform(2, 3, ["north", "south"])
    >>> blocks.span("south")
    (3, 6)
    >>> blocks.n_sectors_total
    6
    """

    def __init__(self, blocks: Dict[str, Tuple[int, int]]):
        if not blocks:
            raise MissingDataError("Region layout must contain at least one region")

        self._blocks = OrderedDict()
        expected_start = 0
        for name, (start, end) in blocks.items():
            start, end = int(start), int(end)
            if start != expected_start:
                raise MissingDataError(
                    f"Region '{name}' starts at {start}, expected {expected_start} "
                    "(ranges must be contiguous and region-major)"
                )
            if end <= start:
                raise MissingDataError(f"Region '{name}' has empty range [{start}, {end})")
            self._blocks[name] = (start, end)
            expected_start = end

        self._names = list(self._blocks)
        self._n_total = expected_start

    @classmethod
    def uniform(
        cls,
        n_regions: int,
        n_sectors: int,
        region_names: Optional[Sequence[str]] = None
    ) -> "RegionBlocks":
        """
        Build the layout for ``n_regions`` regions of ``n_sectors`` sectors each.

        Parameters
        ----------
        n_regions : int
            Number of regions R.
        n_sectors : int
            Number of sectors S per region.
        region_names : sequence of str, optional
            Region labels; defaults to ``region_1 ... region_R``.
        """
        if n_regions < 1 or n_sectors < 1:
            raise MissingDataError(
                f"Layout needs at least one region and one sector, got "
                f"{n_regions} x {n_sectors}"
            )
        if region_names is None:
            region_names = [f"region_{r + 1}" for r in range(n_regions)]
        if len(region_names) != n_regions:
            raise MissingDataError(
                f"Got {len(region_names)} region names for {n_regions} regions"
            )
        return cls.from_sizes(OrderedDict((name, n_sectors) for name in region_names))

    @classmethod
    def from_sizes(cls, sizes: Dict[str, int]) -> "RegionBlocks":
        """Build the layout from the number of sectors in each region, in order."""
        blocks = OrderedDict()
        start = 0
        for name, size in sizes.items():
            blocks[name] = (start, start + int(size))
            start += int(size)
        return cls(blocks)

    @property
    def names(self) -> List[str]:
        return list(self._names)

    @property
    def n_regions(self) -> int:
        return len(self._names)

    @property
    def n_sectors_total(self) -> int:
        """Length N of the flat sector axis."""
        return self._n_total

    def span(self, region: str) -> Tuple[int, int]:
        """Return the ``(start, end)`` range of ``region``."""
        try:
            return self._blocks[region]
        except KeyError:
            raise KeyError(f"Unknown region: {region}") from None

    def slice(self, region: str) -> slice:
        start, end = self.span(region)
        return slice(start, end)

    def index_of(self, region: str) -> int:
        """Position of ``region`` on the R-length region axis."""
        self.span(region)
        return self._names.index(region)

    def sector_labels(self, sector_names: Optional[Sequence[str]] = None) -> List[str]:
        """
        Labels for the flat sector axis, formatted ``'<region>_<sector>'``.

        When ``sector_names`` is omitted, or a region's block size differs
        from its length, sectors are numbered from 1 within each region.
        """
        labels = []
        for name, start, end in self:
            size = end - start
            if sector_names is not None and len(sector_names) == size:
                labels.extend(f"{name}_{sector}" for sector in sector_names)
            else:
                labels.extend(f"{name}_{k + 1}" for k in range(size))
        return labels

    def __iter__(self) -> Iterator[Tuple[str, int, int]]:
        for name, (start, end) in self._blocks.items():
            yield name, start, end

    def __len__(self) -> int:
        return self.n_regions

    def __eq__(self, other) -> bool:
        if not isinstance(other, RegionBlocks):
            return NotImplemented
        return list(self._blocks.items()) == list(other._blocks.items())

    def __repr__(self) -> str:
        return f"RegionBlocks(n_regions={self.n_regions}, n_sectors_total={self.n_sectors_total})"
