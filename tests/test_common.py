import math

import pytest

from ofitune.common import (
    NUM_ALGORITHMS,
    NUM_PROTOCOLS,
    Algorithm,
    Protocol,
    TunerType,
    new_cost_table,
)


def test_default_table_shape():
    table = new_cost_table(NUM_ALGORITHMS, NUM_PROTOCOLS)
    assert len(table) == NUM_ALGORITHMS
    assert all(len(row) == NUM_PROTOCOLS for row in table)


def test_table_starts_infinite():
    table = new_cost_table(2, 3)
    assert table == [[math.inf, math.inf, math.inf], [math.inf, math.inf, math.inf]]


def test_table_rows_independent():
    table = new_cost_table(3, 2)
    table[0][1] = 0.0
    assert table[0][1] == 0.0
    assert math.isinf(table[1][1])
    assert math.isinf(table[2][1])


def test_every_defined_pair_indexes_table():
    table = new_cost_table(NUM_ALGORITHMS, NUM_PROTOCOLS)
    algos = [a for a in Algorithm if a is not Algorithm.UNDEF]
    protos = [p for p in Protocol if p is not Protocol.UNDEF]
    assert len(algos) == NUM_ALGORITHMS
    assert len(protos) == NUM_PROTOCOLS
    table[Algorithm.PAT][Protocol.SIMPLE] = 0.0
    zeros = [(a, p) for a in algos for p in protos if table[a][p] == 0.0]
    assert zeros == [(Algorithm.PAT, Protocol.SIMPLE)]


@pytest.mark.parametrize("dims", [(0, 3), (7, 0), (-1, 2)])
def test_bad_dimensions_raise(dims):
    with pytest.raises(ValueError):
        new_cost_table(*dims)


def test_tuner_type_from_forced_name():
    assert TunerType("Model") is TunerType.MODEL
    assert TunerType("Region") is TunerType.REGION
    with pytest.raises(ValueError):
        TunerType("model")