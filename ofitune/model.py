"""Analytical cost-model tuner choosing an algorithm and protocol per call."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .common import NUM_ALGORITHMS, NUM_PROTOCOLS, Algorithm, CollType, Platform, Protocol
from .params import tuner_net_comp_overhead, tuner_num_channels

_log = logging.getLogger(__name__)

FLT_MAX = 3.4028234663852886e38

_GIB = 1024 * 1024 * 1024

_NVLINK_LAT = (
    (0.6, 1.25, 28.0),  # Tree (LL, LL128, Simple)
    (0.6, 1.9, 3.4),  # Ring
    (0.0, 0.0, 3.7),  # Collnet Direct (unused)
    (0.0, 0.0, 2.8),  # Collnet Chain (unused)
    (0.0, 0.0, 23.0),  # NVLS (Simple only)
    (0.0, 0.0, 23.0),  # NVLS Tree (Simple only)
    (0.0, 0.0, 0.0),  # PAT
)


@dataclass(frozen=True)
class ModelParams:
    """Per-platform network characteristics."""

    net_lat: float
    internode_bw: float
    intranode_bw: float
    num_rails: int
    nccl_nvlink_lat: Tuple[Tuple[float, float, float], ...] = _NVLINK_LAT


@dataclass(frozen=True)
class ModelDims:
    """Communicator size."""

    num_ranks: int
    num_nodes: int


PLATFORM_PARAMS = {
    Platform.P5_P5E: ModelParams(
        net_lat=20.0,
        internode_bw=12.5 * _GIB * 1e-6,
        intranode_bw=20.0 * _GIB * 1e-6,
        num_rails=4,
    ),
    Platform.P5EN: ModelParams(
        net_lat=18.0,
        internode_bw=25.0 * _GIB * 1e-6,
        intranode_bw=20.0 * _GIB * 1e-6,
        num_rails=2,
    ),
}


def compute_cost(
    params: ModelParams,
    dims: ModelDims,
    func: int,
    algo: int,
    proto: int,
    pipe_ops: int,
    size: int,
) -> float:
    """Estimate the time in microseconds for one collective; -1 if unmodelled."""
    if func != CollType.ALL_REDUCE:
        _log.debug("Unsupported collective %d, fallback to default selection.", func)
        return -1.0

    num_channels = tuner_num_channels.value()
    net_lat = params.net_lat
    if proto == Protocol.SIMPLE:
        net_lat += tuner_net_comp_overhead.value()

    if algo == Algorithm.RING:
        p2p_lat = params.nccl_nvlink_lat[algo][proto]
        num_steps = 2 * (dims.num_ranks - 1)
        num_internode_steps = 2 * dims.num_nodes
        latency = num_internode_steps * net_lat + (num_steps - num_internode_steps) * p2p_lat
        bw = params.internode_bw * params.num_rails * num_channels
    elif algo == Algorithm.NVLS_TREE:
        p2p_lat = params.nccl_nvlink_lat[algo][proto]
        latency = 2 * (p2p_lat + math.log2(dims.num_nodes) * net_lat)
        bw = min(params.intranode_bw, (params.internode_bw * params.num_rails) / 2) * num_channels
    elif algo == Algorithm.TREE:
        p2p_lat = params.nccl_nvlink_lat[algo][proto]
        latency = (2 * ((dims.num_ranks // dims.num_nodes) - 1) * p2p_lat) + (
            2 * math.log2(dims.num_nodes) * net_lat
        )
        bw = (params.internode_bw * params.num_rails * num_channels) / 2
    else:
        _log.debug("Algorithm %d for collective %d without a model.", algo, func)
        return -1.0

    if proto == Protocol.LL:
        bw *= 0.5
    elif proto == Protocol.LL128:
        bw *= 0.9375

    transfer = size / bw if bw != 0 else math.inf
    return latency * pipe_ops + transfer


def is_model_supported(platform: Platform, n_ranks: int, n_nodes: int) -> bool:
    """Return True if the model tuner has parameters for ``platform``."""
    return platform in (Platform.P5_P5E, Platform.P5EN)


def _candidates(nvls_support: bool):
    for algo in range(NUM_ALGORITHMS):
        if algo in (Algorithm.COLLNET_DIRECT, Algorithm.COLLNET_CHAIN, Algorithm.NVLS):
            continue
        if algo == Algorithm.NVLS_TREE and not nvls_support:
            continue
        for proto in range(NUM_PROTOCOLS):
            if algo == Algorithm.NVLS_TREE and proto != Protocol.SIMPLE:
                continue
            yield algo, proto


class ModelTuner:
    """Picks the cheapest algorithm/protocol pair according to the cost model."""

    def __init__(self, platform: Platform, n_ranks: int, n_nodes: int) -> None:
        platform = Platform(platform)
        if platform not in PLATFORM_PARAMS:
            raise ValueError(f"Model is not supported for platform {platform.name}")
        self.platform = platform
        self.dims = ModelDims(n_ranks, n_nodes)
        self.params = PLATFORM_PARAMS[platform]
        _log.info(
            "Model Tuner init (platform %d): comm with %d ranks and %d nodes.",
            platform,
            n_ranks,
            n_nodes,
        )

    def _quirk_applies(self, coll_type: int, n_bytes: int) -> bool:
        return (
            self.platform is Platform.P5_P5E
            and coll_type == CollType.ALL_REDUCE
            and self.dims.num_nodes == 16
            and self.dims.num_ranks == 128
            and 3 * _GIB < n_bytes <= 5 * _GIB
        )

    def _cheapest(
        self, coll_type: int, n_bytes: int, num_pipe_ops: int, nvls_support: bool
    ) -> Tuple[Optional[Tuple[Algorithm, Protocol]], float]:
        lowest = FLT_MAX
        chosen = None
        for algo, proto in _candidates(nvls_support):
            cost = compute_cost(
                self.params, self.dims, coll_type, algo, proto, num_pipe_ops, n_bytes
            )
            if cost < 0:
                continue
            _log.debug(
                "Model Tuner computed cost for algo %d proto %d pipe %d: cost %.8f usecs.",
                algo,
                proto,
                num_pipe_ops,
                cost,
            )
            if cost < lowest:
                chosen = (Algorithm(algo), Protocol(proto))
                lowest = cost
        return chosen, lowest

    def get_coll_info_v3(
        self,
        coll_type: int,
        n_bytes: int,
        num_pipe_ops: int,
        cost_table: Sequence[List[float]],
    ) -> Optional[Tuple[Algorithm, Protocol]]:
        """Mark the chosen pair with cost 0 in ``cost_table``; None means fall back."""
        if self.dims.num_nodes <= 2:
            return None
        if self._quirk_applies(coll_type, n_bytes):
            chosen: Optional[Tuple[Algorithm, Protocol]] = (Algorithm.NVLS_TREE, Protocol.SIMPLE)
        else:
            chosen, _ = self._cheapest(coll_type, n_bytes, num_pipe_ops, True)
        if chosen is None:
            return None
        algo, proto = chosen
        cost_table[algo][proto] = 0.0
        _log.info(
            "Model Tuner choosing algo %d proto %d for coll %d size %d.",
            algo,
            proto,
            coll_type,
            n_bytes,
        )
        return chosen

    def get_coll_info_v2(
        self,
        coll_type: int,
        n_bytes: int,
        coll_net_support: bool,
        nvls_support: bool,
        num_pipe_ops: int,
    ) -> Optional[Tuple[Algorithm, Protocol]]:
        """Return the chosen (algorithm, protocol), or None to fall back."""
        if self.dims.num_nodes <= 2:
            return None
        if nvls_support and self._quirk_applies(coll_type, n_bytes):
            chosen: Optional[Tuple[Algorithm, Protocol]] = (Algorithm.NVLS_TREE, Protocol.SIMPLE)
            lowest = 0.0
        else:
            chosen, lowest = self._cheapest(coll_type, n_bytes, num_pipe_ops, bool(nvls_support))
        if chosen is not None:
            _log.info(
                "Model Tuner choosing algo %d proto %d with cost %.8f usecs for coll %d size %d.",
                chosen[0],
                chosen[1],
                lowest,
                coll_type,
                n_bytes,
            )
        return chosen