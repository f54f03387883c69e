import pytest

from ofitune.common import Algorithm, CollType, Platform, Protocol
from ofitune.geometry import TUNER_MAX_RANKS, TUNER_MAX_SIZE, Point, Region
from ofitune.region_tables import p5_p5e_regions, p5en_regions, platform_regions

SHAPES = [(128, 16), (32, 16), (16, 16), (48, 16), (64, 4)]


def _all_tables():
    for ranks, nodes in SHAPES:
        yield p5_p5e_regions(ranks, nodes)
        yield p5en_regions(ranks, nodes)


def test_every_region_has_at_least_two_vertices():
    regions = [r for table in _all_tables() for rs in table.values() for r in rs]
    assert regions
    assert all(isinstance(r, Region) and r.num_vertices >= 2 for r in regions)


def test_vertices_stay_inside_the_tuning_plane():
    for table in _all_tables():
        for regions in table.values():
            for region in regions:
                for v in region.vertices:
                    assert 0 <= v.x <= TUNER_MAX_SIZE
                    assert 0 <= v.y <= TUNER_MAX_RANKS


def test_p5en_eight_per_node_all_reduce_layout():
    table = p5en_regions(128, 16)
    assert set(table) == {CollType.ALL_REDUCE, CollType.ALL_GATHER, CollType.REDUCE_SCATTER}
    all_reduce = table[CollType.ALL_REDUCE]
    assert [(r.algorithm, r.protocol) for r in all_reduce] == [
        (Algorithm.TREE, Protocol.LL),
        (Algorithm.TREE, Protocol.LL128),
        (Algorithm.RING, Protocol.LL128),
        (Algorithm.NVLS_TREE, Protocol.SIMPLE),
        (Algorithm.RING, Protocol.SIMPLE),
    ]
    # Vertical line through x=262144 extends straight up to the rank limit.
    assert all_reduce[0].vertices[3] == Point(262144, TUNER_MAX_RANKS)


def test_p5en_extended_vertices_are_shared_between_neighbours():
    all_reduce = p5en_regions(128, 16)[CollType.ALL_REDUCE]
    assert all_reduce[0].vertices[3] == all_reduce[1].vertices[0]
    assert all_reduce[1].vertices[-1] == all_reduce[3].vertices[0]
    assert all_reduce[3].vertices[-1] == all_reduce[4].vertices[0]


def test_extended_vertices_touch_the_plane_boundary():
    all_reduce = p5en_regions(128, 16)[CollType.ALL_REDUCE]
    ext = all_reduce[4].vertices[0]
    assert ext.x == TUNER_MAX_SIZE or ext.y == TUNER_MAX_RANKS


def test_p5en_gather_and_scatter_share_tables():
    table = p5en_regions(16, 16)
    assert table[CollType.ALL_GATHER] == table[CollType.REDUCE_SCATTER]
    assert table[CollType.ALL_GATHER][0].algorithm is Algorithm.PAT
    assert table[CollType.ALL_GATHER][0].num_vertices == 10


def test_p5en_two_per_node_has_no_regions():
    assert p5en_regions(32, 16) == {}


def test_p5_two_per_node_only_all_reduce():
    table = p5_p5e_regions(32, 16)
    assert list(table) == [CollType.ALL_REDUCE]
    assert len(table[CollType.ALL_REDUCE]) == 8


def test_p5_eight_per_node_region_sizes():
    all_reduce = p5_p5e_regions(128, 16)[CollType.ALL_REDUCE]
    assert [r.num_vertices for r in all_reduce] == [12, 3, 11, 17, 7]
    first = all_reduce[0]
    assert first.vertices[-1] == Point(0, first.vertices[-2].y)


def test_p5_one_per_node_tables():
    table = p5_p5e_regions(16, 16)
    assert len(table[CollType.ALL_REDUCE]) == 3
    assert table[CollType.ALL_GATHER][0].vertices[0] == Point(4194304, 2)
    assert table[CollType.REDUCE_SCATTER][0].vertices[-1] == Point(4294967296, 1024)


def test_p5_unmatched_shape_is_empty():
    assert p5_p5e_regions(48, 16) == {}


@pytest.mark.parametrize("ranks,nodes", SHAPES)
def test_platform_regions_dispatch(ranks, nodes):
    assert platform_regions(Platform.P5_P5E, ranks, nodes) == p5_p5e_regions(ranks, nodes)
    assert platform_regions(Platform.P5EN, ranks, nodes) == p5en_regions(ranks, nodes)


def test_platform_regions_accepts_int_platform():
    assert platform_regions(1, 128, 16) == p5en_regions(128, 16)


def test_unknown_platform_raises():
    with pytest.raises(ValueError):
        platform_regions(Platform.UNKNOWN, 128, 16)