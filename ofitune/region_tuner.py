"""Region-based tuner: picks the algorithm/protocol whose region holds the call."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .common import ALGO_PROTO_IGNORE, Algorithm, CollType, Platform, Protocol
from .geometry import Point, Region, is_inside_region
from .region_tables import RegionTable, platform_regions

_log = logging.getLogger(__name__)

Choice = Tuple[Algorithm, Protocol]


def is_region_supported(platform: Platform, n_ranks: int, n_nodes: int) -> bool:
    """Return True if region tables exist for ``platform``."""
    return platform in (Platform.P5_P5E, Platform.P5EN)


class RegionTuner:
    """Chooses the first region containing (message size, rank count)."""

    def __init__(self, platform: Platform, n_ranks: int, n_nodes: int) -> None:
        platform = Platform(platform)
        if not is_region_supported(platform, n_ranks, n_nodes):
            raise ValueError(f"Region tuner is not supported for platform {platform.name}")
        self.platform = platform
        self.num_ranks = n_ranks
        self.num_nodes = n_nodes
        self.regions: RegionTable = platform_regions(platform, n_ranks, n_nodes)
        _log.info(
            "Region Tuner init (platform %d): comm with %d ranks and %d nodes.",
            platform,
            n_ranks,
            n_nodes,
        )

    def _regions_for(self, coll_type: int) -> Optional[Tuple[Region, ...]]:
        try:
            key = CollType(coll_type)
        except ValueError:
            return None
        regions = self.regions.get(key)
        if regions is None:
            _log.info("Region context is not ready. Fall back to default tuner.")
            return None
        # Two nodes or fewer: regions are not well defined there.
        if self.num_nodes <= 2:
            return None
        return regions

    def _point(self, n_bytes: int) -> Point:
        return Point(float(n_bytes), float(self.num_ranks))

    def get_coll_info_v2(
        self,
        coll_type: int,
        n_bytes: int,
        coll_net_support: bool,
        nvls_support: bool,
        num_pipe_ops: int,
    ) -> Optional[Choice]:
        """Return the chosen (algorithm, protocol), or None to fall back."""
        regions = self._regions_for(coll_type)
        if regions is None:
            return None
        point = self._point(n_bytes)
        for region in regions:
            if region.algorithm is Algorithm.PAT:
                continue
            if region.algorithm is Algorithm.NVLS_TREE and not nvls_support:
                continue
            if is_inside_region(point, region) >= 0:
                _log.info(
                    "Region Tuner choosing algo %d proto %d for coll %d size %d.",
                    region.algorithm,
                    region.protocol,
                    coll_type,
                    n_bytes,
                )
                return region.algorithm, region.protocol
        _log.info("Falling back to default tuner for coll %d size %d.", coll_type, n_bytes)
        return None

    def get_coll_info_v3(
        self,
        coll_type: int,
        n_bytes: int,
        num_pipe_ops: int,
        cost_table: Sequence[List[float]],
    ) -> Optional[Choice]:
        """Mark the chosen pair with cost 0 in ``cost_table``; None means fall back.

        Pairs outside the table, or whose entry is ``ALGO_PROTO_IGNORE``,
        are not considered.
        """
        regions = self._regions_for(coll_type)
        if regions is None:
            return None
        point = self._point(n_bytes)
        num_algo = len(cost_table)
        for region in regions:
            algo, proto = region.algorithm, region.protocol
            if algo >= num_algo or proto >= len(cost_table[algo]):
                continue
            if cost_table[algo][proto] == ALGO_PROTO_IGNORE:
                continue
            if is_inside_region(point, region) >= 0:
                cost_table[algo][proto] = 0.0
                _log.info(
                    "Region Tuner choosing algo %d proto %d for coll %d size %d.",
                    algo,
                    proto,
                    coll_type,
                    n_bytes,
                )
                return algo, proto
        _log.info("Falling back to default tuner for coll %d size %d.", coll_type, n_bytes)
        return None