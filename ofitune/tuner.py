"""Tuner selection and the process-wide tuner used by the context-free API."""

from __future__ import annotations

import logging
import os
import threading
from typing import Mapping, Optional, Tuple, Union

from . import params
from .common import Algorithm, Platform, Protocol, TunerType
from .model import ModelTuner, is_model_supported
from .region_tuner import RegionTuner, is_region_supported

_log = logging.getLogger(__name__)

Tuner = Union[RegionTuner, ModelTuner]

_PLATFORM_NAMES = {
    "p5.48xlarge": Platform.P5_P5E,
    "p5e.48xlarge": Platform.P5_P5E,
    "p5en.48xlarge": Platform.P5EN,
}

_lock = threading.Lock()


class TunerError(Exception):
    """Raised when a tuner cannot be set up."""


def platform_from_name(name: str) -> Platform:
    """Map an instance product name to a tuner platform."""
    return _PLATFORM_NAMES.get(name, Platform.UNKNOWN)


def _create(
    n_ranks: int, n_nodes: int, platform_name: Optional[str], force_type: Optional[str]
) -> Optional[Tuner]:
    if platform_name is None:
        _log.warning("Tuner is not available because platform type is unavailable.")
        return None

    if force_type == TunerType.INTERNAL.value:
        _log.info(
            "Tuner type is Internal, fall back to default tuner for platform: %s",
            platform_name,
        )
        return None
    force_model = force_type == TunerType.MODEL.value

    platform = platform_from_name(platform_name)
    region_support = is_region_supported(platform, n_ranks, n_nodes)
    model_support = is_model_supported(platform, n_ranks, n_nodes)
    if not region_support and not model_support:
        _log.info(
            "Tuner is not available for platform: %s, fall back to default tuner",
            platform_name,
        )
        return None

    try:
        if region_support and not (model_support and force_model):
            _log.info("Region base tuner is chosen for platform: %s", platform_name)
            tuner: Tuner = RegionTuner(platform, n_ranks, n_nodes)
        else:
            _log.info("Model base tuner is chosen for platform: %s", platform_name)
            tuner = ModelTuner(platform, n_ranks, n_nodes)
    except ValueError as exc:
        raise TunerError(str(exc)) from exc

    _log.info("Tuner init: comm with %d ranks and %d nodes.", n_ranks, n_nodes)
    return tuner


def create_tuner(
    n_ranks: int,
    n_nodes: int,
    platform_name: Optional[str],
    force_type: Optional[str] = None,
) -> Optional[Tuner]:
    """Create the tuner suited to the platform, or None to use the default one.

    The region tuner is preferred; ``force_type`` "Model" selects the model
    tuner where it is supported and "Internal" disables tuning.
    """
    with _lock:
        return _create(n_ranks, n_nodes, platform_name, force_type)


class GlobalTuner:
    """A single shared tuner for callers that cannot pass a context around."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tuner: Optional[Tuner] = None

    @property
    def tuner(self) -> Optional[Tuner]:
        """The tuner currently in use, if any."""
        return self._tuner

    def init(
        self,
        n_ranks: int,
        n_nodes: int,
        platform_name: Optional[str],
        environ: Optional[Mapping[str, str]] = None,
    ) -> Optional[Tuner]:
        """(Re)initialise the shared tuner; returns it, or None if not used.

        Raises TunerError when the user has chosen an algorithm or protocol
        explicitly through NCCL_ALGO or NCCL_PROTO.
        """
        if self._tuner is not None:
            self.destroy()

        if environ is None:
            environ = os.environ
            force_type = params.tuner_force_type.value()
        else:
            force_type = environ.get(params.tuner_force_type.env_var)

        if environ.get("NCCL_ALGO") or environ.get("NCCL_PROTO"):
            raise TunerError(
                "The tuner can not be loaded when explicitly choosing an algorithm "
                "or protocol with NCCL_ALGO/NCCL_PROTO"
            )

        tuner = create_tuner(n_ranks, n_nodes, platform_name, force_type)
        with self._lock:
            self._tuner = tuner
        return tuner

    def get_coll_info(
        self,
        coll_type: int,
        n_bytes: int,
        coll_net_support: bool,
        nvls_support: bool,
        num_pipe_ops: int,
    ) -> Optional[Tuple[Algorithm, Protocol]]:
        """Return the chosen (algorithm, protocol), or None to fall back."""
        tuner = self._tuner
        if tuner is None:
            return None
        return tuner.get_coll_info_v2(
            coll_type, n_bytes, coll_net_support, nvls_support, num_pipe_ops
        )

    def destroy(self) -> None:
        """Drop the shared tuner."""
        with self._lock:
            self._tuner = None