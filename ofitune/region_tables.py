"""Per-platform region tables for the region tuner.

Each table maps a collective to an ordered tuple of regions.  Where
regions overlap, the first region that contains a point wins.  A
collective missing from a table falls back to the library's own choice.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .common import Algorithm, CollType, Platform, Protocol
from .geometry import TUNER_MAX_RANKS, TUNER_MAX_SIZE, Region, extend_region

RegionTable = Dict[CollType, Tuple[Region, ...]]

_CORNER = (TUNER_MAX_SIZE, TUNER_MAX_RANKS)

_TREE = Algorithm.TREE
_RING = Algorithm.RING
_NVLS_TREE = Algorithm.NVLS_TREE
_PAT = Algorithm.PAT
_LL = Protocol.LL
_LL128 = Protocol.LL128
_SIMPLE = Protocol.SIMPLE


def _extend(a, b):
    return extend_region(a, b, _CORNER)


def _p5en_8_per_node() -> RegionTable:
    tree_ll = _extend((262144, 192), (262144, 1024))
    tree_ll128 = _extend((150994944, 128), (251658240, 1024))
    nvlstree_simple = _extend((6442450944, 256), (17179869184, 768))
    all_reduce = (
        Region(_TREE, _LL, [(0, 16), (262144, 16), (262144, 1024), tree_ll]),
        Region(
            _TREE,
            _LL128,
            [
                tree_ll,
                (262144, 1024),
                (262144, 16),
                (14680064, 16),
                (150994944, 128),
                (251658240, 1024),
                tree_ll128,
            ],
        ),
        Region(
            _RING,
            _LL128,
            [
                (150994944, 128),
                (14680064, 16),
                (33554432, 16),
                (536870912, 32),
                (536870912, 128),
            ],
        ),
        Region(
            _NVLS_TREE,
            _SIMPLE,
            [
                tree_ll128,
                (251658240, 1024),
                (150994944, 128),
                (536870912, 128),
                (536870912, 32),
                (6442450944, 256),
                (17179869184, 768),
                nvlstree_simple,
            ],
        ),
        Region(
            _RING,
            _SIMPLE,
            [
                nvlstree_simple,
                (17179869184, 768),
                (6442450944, 256),
                (536870912, 32),
                (33554432, 16),
                (1073741824, 16),
                (TUNER_MAX_SIZE, 16),
            ],
        ),
    )

    ring_ll = _extend((8388608, 256), (33554432, 1024))
    ring_ll128 = _extend((8589934592, 512), (17179869184, 1024))
    gather_scatter = (
        Region(
            _RING,
            _LL,
            [
                (0, 16),
                (131072, 16),
                (262144, 32),
                (8388608, 256),
                (33554432, 1024),
                ring_ll,
                (0, TUNER_MAX_RANKS),
            ],
        ),
        Region(
            _RING,
            _LL128,
            [
                ring_ll,
                (33554432, 1024),
                (8388608, 256),
                (262144, 32),
                (131072, 16),
                (268435456, 16),
                (2147483648, 128),
                (8589934592, 512),
                (17179869184, 1024),
                ring_ll128,
            ],
        ),
        Region(
            _RING,
            _SIMPLE,
            [
                ring_ll128,
                (17179869184, 1024),
                (8589934592, 512),
                (268435456, 16),
                (17179869184, 16),
                (TUNER_MAX_SIZE, 16),
            ],
        ),
    )
    return {
        CollType.ALL_REDUCE: all_reduce,
        CollType.ALL_GATHER: gather_scatter,
        CollType.REDUCE_SCATTER: gather_scatter,
    }


def _p5en_1_per_node() -> RegionTable:
    tree_ll128 = _extend((524288, 8), (1048576, 96))
    tree_simple = _extend((8388608, 32), (33554432, 128))
    ring_ll128 = _extend((50331648, 16), (301989888, 128))
    all_reduce = (
        Region(_TREE, _LL, [(0, 2), (65536, 2), (65536, 64), (65536, TUNER_MAX_RANKS)]),
        Region(
            _TREE,
            _LL128,
            [
                (65536, TUNER_MAX_RANKS),
                (65536, 64),
                (65536, 2),
                (262144, 2),
                (524288, 8),
                (1048576, 96),
                tree_ll128,
            ],
        ),
        Region(
            _TREE,
            _SIMPLE,
            [
                tree_ll128,
                (1048576, 768),
                (524288, 8),
                (262144, 2),
                (8388608, 32),
                (33554432, 128),
                tree_simple,
            ],
        ),
        Region(
            _RING,
            _LL128,
            [
                tree_simple,
                (33554432, 128),
                (8388608, 32),
                (262144, 2),
                (6291456, 2),
                (50331648, 16),
                (301989888, 128),
                ring_ll128,
            ],
        ),
        Region(
            _RING,
            _SIMPLE,
            [
                ring_ll128,
                (301989888, 128),
                (50331648, 16),
                (6291456, 2),
                (TUNER_MAX_SIZE, 2),
            ],
        ),
    )

    pat_simple = _extend((50331648, 64), (117440512, 128))
    gather_ring_ll128 = _extend((50331648, 16), (301989888, 128))
    gather_scatter = (
        Region(
            _PAT,
            _SIMPLE,
            [
                (0, 2),
                (65536, 2),
                (1048576, 2),
                (16777216, 32),
                (50331648, 64),
                (117440512, 128),
                pat_simple,
                (TUNER_MAX_SIZE, TUNER_MAX_RANKS),
                (65536, TUNER_MAX_RANKS),
                (0, TUNER_MAX_RANKS),
            ],
        ),
        Region(
            _RING,
            _LL128,
            [
                pat_simple,
                (117440512, 128),
                (50331648, 64),
                (16777216, 32),
                (1048576, 2),
                (4194304, 2),
                (50331648, 16),
                (301989888, 128),
                gather_ring_ll128,
            ],
        ),
        Region(
            _RING,
            _SIMPLE,
            [
                gather_ring_ll128,
                (301989888, 128),
                (50331648, 16),
                (4194304, 2),
                (TUNER_MAX_SIZE, 2),
            ],
        ),
    )
    return {
        CollType.ALL_REDUCE: all_reduce,
        CollType.ALL_GATHER: gather_scatter,
        CollType.REDUCE_SCATTER: gather_scatter,
    }


def p5en_regions(n_ranks: int, n_nodes: int) -> RegionTable:
    """Region table for the P5en platform; empty when the shape is not covered."""
    if n_ranks == 8 * n_nodes:
        return _p5en_8_per_node()
    if n_ranks == n_nodes:
        return _p5en_1_per_node()
    return {}


def _p5_8_per_node() -> RegionTable:
    tree_ll128 = _extend((402653184, 2048), (402653184, 4096))
    nvlstree_simple_1 = _extend((8053063680, 160), (9663676416, 192))
    nvlstree_simple_2 = _extend((402653184, 2048), (402653184, 4096))
    ring_simple = _extend((8053063680, 160), (9663676416, 192))
    all_reduce = (
        Region(
            _TREE,
            _LL128,
            [
                (0, 16),
                (31457280, 16),
                (37748736, 32),
                (117440512, 64),
                (301989888, 128),
                (301989888, 256),
                (335544320, 512),
                (536870912, 1024),
                (402653184, 2048),
                (402653184, 4096),
                tree_ll128,
                (0, tree_ll128.y),
            ],
        ),
        Region(_NVLS_TREE, _SIMPLE, [(31457281, 16), (TUNER_MAX_SIZE, 16), (31457281, 16)]),
        Region(
            _RING,
            _LL128,
            [
                (31457280, 17),
                (1073741824, 17),
                (2147483648, 64),
                (2147483648, 128),
                (1342177280, 160),
                (2147483648, 256),
                (1074790400, 256),
                (444596224, 160),
                (301989888, 128),
                (117440512, 64),
                (37748736, 32),
            ],
        ),
        Region(
            _NVLS_TREE,
            _SIMPLE,
            [
                (2147483648, 128),
                (6442450944, 128),
                (8053063680, 160),
                (9663676416, 192),
                nvlstree_simple_1,
                nvlstree_simple_2,
                (402653184, 4096),
                (402653184, 2048),
                (536870912, 1024),
                (335544320, 512),
                (301989888, 256),
                (310378496, 160),
                (444596224, 160),
                (1074790400, 256),
                (2684354560, 256),
                (2147483648, 224),
                (1342177280, 160),
            ],
        ),
        Region(
            _RING,
            _SIMPLE,
            [
                (1073741824, 17),
                (ring_simple.x, 17),
                ring_simple,
                (9663676416, 192),
                (8053063680, 160),
                (2684354560, 64),
                (1610612736, 32),
            ],
        ),
    )
    return {CollType.ALL_REDUCE: all_reduce}


def _p5_2_per_node() -> RegionTable:
    tree_ll128 = _extend((88160256, 128), (178163712, 256))
    tree_simple_1 = _extend((787480576, 128), (1073741824, 256))
    tree_simple_2 = _extend((257114112, 128), (269484032, 256))
    nvlstree_simple = _extend((787480576, 128), (1073741824, 256))
    all_reduce = (
        Region(
            _TREE,
            _LL128,
            [
                (0, 4),
                (1314816, 4),
                (1051648, 8),
                (1051648, 12),
                (2367488, 16),
                (5525504, 32),
                (9473024, 64),
                (88160256, 128),
                (178163712, 256),
                tree_ll128,
                (0, tree_ll128.y),
            ],
        ),
        Region(
            _RING,
            _LL128,
            [
                (1314816, 4),
                (19736576, 4),
                (41842688, 8),
                (296747008, 64),
                (257114112, 128),
                (269484032, 256),
                (178163712, 256),
                (88160256, 128),
                (9473024, 64),
                (5525504, 32),
                (2367488, 16),
                (1051648, 12),
                (1051648, 8),
                (1314816, 4),
            ],
        ),
        Region(
            _NVLS_TREE,
            _SIMPLE,
            [
                (19736576, 4),
                (81844224, 4),
                (275775488, 8),
                (275775488, 48),
                (296747008, 64),
                (41842688, 8),
            ],
        ),
        Region(_TREE, _LL128, [(81844224, 4), (269484032, 4), (81844224, 4)]),
        Region(_TREE, _SIMPLE, [(269484032, 4), (TUNER_MAX_SIZE, 4), (269484032, 4)]),
        Region(
            _RING,
            _SIMPLE,
            [
                (81844224, 5),
                (TUNER_MAX_SIZE, 5),
                (TUNER_MAX_SIZE, 32),
                (1073741824, 40),
                (1073741824, 128),
                (787480576, 128),
                (296747008, 64),
                (275775488, 48),
                (275775488, 8),
                (81844224, 5),
            ],
        ),
        Region(
            _TREE,
            _SIMPLE,
            [
                (296747008, 64),
                (787480576, 128),
                (1073741824, 256),
                tree_simple_1,
                tree_simple_2,
                (269484032, 256),
                (257114112, 128),
            ],
        ),
        Region(
            _NVLS_TREE,
            _SIMPLE,
            [
                nvlstree_simple,
                (1073741824, 256),
                (787480576, 128),
                (1073741824, 128),
                (1073741824, 40),
                (TUNER_MAX_SIZE, 32),
            ],
        ),
    )
    return {CollType.ALL_REDUCE: all_reduce}


def _p5_1_per_node() -> RegionTable:
    tree_ll128 = _extend((9999360, 64), (119477248, 128))
    ring_ll128 = _extend((4736000, 2), (269484032, 128))
    all_reduce = (
        Region(
            _TREE,
            _LL128,
            [(0, 16), (2367488, 16), (9999360, 64), (119477248, 128), tree_ll128],
        ),
        Region(
            _RING,
            _LL128,
            [
                (0, 2),
                (4736000, 2),
                (269484032, 128),
                ring_ll128,
                tree_ll128,
                (119477248, 128),
                (9999360, 64),
                (2367488, 16),
                (0, 16),
            ],
        ),
        Region(
            _RING,
            _SIMPLE,
            [(4736000, 2), (TUNER_MAX_SIZE, 2), ring_ll128, (269484032, 128)],
        ),
    )

    gather_simple = _extend((4194304, 2), (8589934592, 2048))
    all_gather = (
        Region(
            _RING,
            _SIMPLE,
            [(4194304, 2), (TUNER_MAX_SIZE, 2), gather_simple, (8589934592, 2048)],
        ),
    )

    scatter_simple = _extend((8388608, 2), (4294967296, 1024))
    reduce_scatter = (
        Region(
            _RING,
            _SIMPLE,
            [(8388608, 2), (TUNER_MAX_SIZE, 2), scatter_simple, (4294967296, 1024)],
        ),
    )
    return {
        CollType.ALL_REDUCE: all_reduce,
        CollType.ALL_GATHER: all_gather,
        CollType.REDUCE_SCATTER: reduce_scatter,
    }


def p5_p5e_regions(n_ranks: int, n_nodes: int) -> RegionTable:
    """Region table for the P5 and P5e platforms; empty when the shape is not covered."""
    if n_ranks == 8 * n_nodes:
        return _p5_8_per_node()
    if n_ranks == 2 * n_nodes:
        return _p5_2_per_node()
    if n_ranks == n_nodes:
        return _p5_1_per_node()
    return {}


def platform_regions(platform: Platform, n_ranks: int, n_nodes: int) -> RegionTable:
    """Region table for ``platform``; ValueError for a platform without regions."""
    platform = Platform(platform)
    if platform is Platform.P5_P5E:
        return p5_p5e_regions(n_ranks, n_nodes)
    if platform is Platform.P5EN:
        return p5en_regions(n_ranks, n_nodes)
    raise ValueError(f"no region tables for platform {platform.name}")