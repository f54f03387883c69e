"""Shared enumerations and constants used by the tuners."""

from __future__ import annotations

import enum
import math

# Defaults mirrored from the collective library, used to size ring latency costs.
NCCL_STEPS = 8
SIZEOF_LL_FIFOLINE = 16
WARP_SIZE = 32
MAX_CHANNELS = 32
MAX_NTHREADS = 640
SIMPLE_MAX_NTHREADS = 512
LL_MAX_NTHREADS = 512
LL_LINES_PER_THREAD = 8
LL128_MAX_NTHREADS = 640
LL128_ELEMS_PER_THREAD = 120
EXPECTED_DTYPE_SIZE = 4
BUFFSIZE = 1 << 22

# Cost-table entry marking an algorithm/protocol pair as not applicable.
ALGO_PROTO_IGNORE = -1.0


class Algorithm(enum.IntEnum):
    """Collective algorithms; values index the cost table rows."""

    UNDEF = -1
    TREE = 0
    RING = 1
    COLLNET_DIRECT = 2
    COLLNET_CHAIN = 3
    NVLS = 4
    NVLS_TREE = 5
    PAT = 6


class Protocol(enum.IntEnum):
    """Wire protocols; values index the cost table columns."""

    UNDEF = -1
    LL = 0
    LL128 = 1
    SIMPLE = 2


NUM_ALGORITHMS = 7
NUM_PROTOCOLS = 3


class CollType(enum.IntEnum):
    """Collective operation kinds."""

    BROADCAST = 0
    REDUCE = 1
    ALL_GATHER = 2
    REDUCE_SCATTER = 3
    ALL_REDUCE = 4
    SEND_RECV = 5
    SEND = 6
    RECV = 7


NUM_FUNCTIONS = 5


class Platform(enum.IntEnum):
    """Instance platforms the tuners know about."""

    P5_P5E = 0
    P5EN = 1
    UNKNOWN = 2


class TunerType(enum.Enum):
    """Which tuning strategy is in use."""

    INTERNAL = "Internal"
    REGION = "Region"
    MODEL = "Model"


def new_cost_table(num_algo: int = NUM_ALGORITHMS, num_proto: int = NUM_PROTOCOLS) -> list[list[float]]:
    """Return a fresh ``num_algo`` x ``num_proto`` table with every cost infinite."""
    if num_algo <= 0 or num_proto <= 0:
        raise ValueError("cost table dimensions must be positive")
    return [[math.inf] * num_proto for _ in range(num_algo)]