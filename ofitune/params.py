"""Runtime parameters read once from ``OFI_NCCL_*`` environment variables."""

from __future__ import annotations

import enum
import logging
import os
import threading
import weakref
from typing import Optional, Union

_log = logging.getLogger(__name__)

ENV_PREFIX = "OFI_NCCL_"

_C_SPACE = " \t\n\v\f\r"
_UINT64_MAX = (1 << 64) - 1
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_DIGITS = {
    8: frozenset("01234567"),
    10: frozenset("0123456789"),
    16: frozenset("0123456789abcdefABCDEF"),
}

ParamValue = Union[int, str, None]


class ParamKind(enum.Enum):
    """How a parameter's environment string is interpreted."""

    UINT = "uint"
    INT = "int"
    STR = "str"


def _parse_integer(text: str, kind: ParamKind) -> int:
    """Parse ``text`` with C base-0 integer rules; the whole string must be used."""
    rest = text.lstrip(_C_SPACE)
    negative = False
    if rest and rest[0] in "+-":
        negative = rest[0] == "-"
        rest = rest[1:]

    if rest[:2].lower() == "0x" and len(rest) > 2 and rest[2] in _DIGITS[16]:
        base, digits = 16, rest[2:]
    elif rest.startswith("0"):
        base, digits = 8, rest
    else:
        base, digits = 10, rest

    if not digits or not all(ch in _DIGITS[base] for ch in digits):
        raise ValueError(f"not a valid integer: {text!r}")

    magnitude = int(digits, base)
    if kind is ParamKind.UINT:
        if magnitude > _UINT64_MAX:
            raise ValueError(f"value out of range: {text!r}")
        return (-magnitude) & _UINT64_MAX if negative else magnitude

    value = -magnitude if negative else magnitude
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


_registry: "weakref.WeakSet[Param]" = weakref.WeakSet()


class Param:
    """A named parameter whose value is looked up once and then cached.

    The environment variable consulted is ``OFI_NCCL_<env>``.  Integer
    parameters fall back to their default when the variable is empty or
    does not parse; string parameters take any value that is set.
    """

    def __init__(self, name: str, env: str, kind: ParamKind, default: ParamValue) -> None:
        if kind is ParamKind.STR:
            if default is not None and not isinstance(default, str):
                raise TypeError("string parameter default must be a str or None")
        else:
            if not isinstance(default, int) or isinstance(default, bool):
                raise TypeError("integer parameter default must be an int")
            if kind is ParamKind.UINT and not 0 <= default <= _UINT64_MAX:
                raise ValueError("unsigned parameter default out of range")
            if kind is ParamKind.INT and not _INT64_MIN <= default <= _INT64_MAX:
                raise ValueError("signed parameter default out of range")
        self.name = name
        self.env = env
        self.kind = kind
        self.default = default
        self._lock = threading.Lock()
        self._loaded = False
        self._value: ParamValue = default
        _registry.add(self)

    @property
    def env_var(self) -> str:
        """Full name of the environment variable."""
        return ENV_PREFIX + self.env

    def value(self) -> ParamValue:
        """Return the parameter value, reading the environment on first use."""
        if self._loaded:
            return self._value
        with self._lock:
            if not self._loaded:
                self._value = self._load()
                self._loaded = True
            return self._value

    def _load(self) -> ParamValue:
        raw = os.environ.get(self.env_var)
        if self.kind is ParamKind.STR:
            if raw is None:
                return self.default
            _log.info("Setting %s environment variable to %s", self.env_var, raw)
            return raw
        if not raw:
            return self.default
        try:
            parsed = _parse_integer(raw, self.kind)
        except ValueError:
            _log.info(
                "Invalid value %s provided for %s environment variable, using default %s",
                raw,
                self.env_var,
                self.default,
            )
            return self.default
        _log.info("Setting %s environment variable to %s", self.env_var, parsed)
        return parsed

    def reset(self) -> None:
        """Forget the cached value so the next ``value()`` reads the environment."""
        with self._lock:
            self._loaded = False
            self._value = self.default

    def __repr__(self) -> str:
        return f"Param({self.name!r}, {self.env_var!r}, {self.kind.value}, default={self.default!r})"


def reset_all() -> None:
    """Reset every parameter that exists, including the built-in ones."""
    for param in list(_registry):
        param.reset()


_INT = ParamKind.INT
_UINT = ParamKind.UINT
_STR = ParamKind.STR

use_ipv6_tcp = Param("use_ipv6_tcp", "USE_IPV6_TCP", _INT, 0)
exclude_tcp_if = Param("exclude_tcp_if", "EXCLUDE_TCP_IF", _STR, "lo,docker0")
gdr_flush_disable = Param("gdr_flush_disable", "GDR_FLUSH_DISABLE", _INT, 0)
nic_dup_conns = Param("nic_dup_conns", "NIC_DUP_CONNS", _INT, 0)
cuda_flush_enable = Param("cuda_flush_enable", "CUDA_FLUSH_ENABLE", _INT, 0)
mr_key_size = Param("mr_key_size", "MR_KEY_SIZE", _UINT, 2)
mr_cache_disable = Param("mr_cache_disable", "MR_CACHE_DISABLE", _INT, 0)
cq_read_count = Param("cq_read_count", "CQ_READ_COUNT", _INT, 4)
protocol: Param = Param("protocol", "PROTOCOL", _STR, None)
domain_per_thread = Param("domain_per_thread", "DOMAIN_PER_THREAD", _INT, -1)
disable_native_rdma_check = Param(
    "disable_native_rdma_check", "DISABLE_NATIVE_RDMA_CHECK", _INT, 0
)
disable_gdr_required_check = Param(
    "disable_gdr_required_check", "DISABLE_GDR_REQUIRED_CHECK", _INT, 0
)
disable_dmabuf = Param("disable_dmabuf", "DISABLE_DMABUF", _INT, 1)
min_stripe_size = Param("min_stripe_size", "MIN_STRIPE_SIZE", _UINT, 128 * 1024)
rdma_min_posted_bounce_buffers = Param(
    "rdma_min_posted_bounce_buffers", "RDMA_MIN_POSTED_BOUNCE_BUFFERS", _INT, 64
)
rdma_max_posted_bounce_buffers = Param(
    "rdma_max_posted_bounce_buffers", "RDMA_MAX_POSTED_BOUNCE_BUFFERS", _INT, 128
)
rdma_rr_ctrl_msg = Param("rdma_rr_ctrl_msg", "RR_CTRL_MSG", _INT, 0)
net_latency = Param("net_latency", "NET_LATENCY", _INT, -1)
eager_max_size = Param("eager_max_size", "EAGER_MAX_SIZE", _UINT, 8192)
errorcheck_mutex = Param("errorcheck_mutex", "ERRORCHECK_MUTEX", _INT, 1 if __debug__ else 0)
endpoint_per_communicator = Param("endpoint_per_communicator", "ENDPOINT_PER_COMM", _INT, 0)
abort_on_error = Param("abort_on_error", "ABORT_ON_ERROR", _INT, 0)
tuner_force_type: Param = Param("tuner_force_type", "TUNER_TYPE", _STR, None)
tuner_num_channels = Param("tuner_num_channels", "TUNER_NUM_CHANNELS", _INT, 8)
tuner_net_latency = Param("tuner_net_latency", "TUNER_NET_LATENCY", _INT, 20)
tuner_net_comp_overhead = Param("tuner_net_comp_overhead", "TUNER_NET_COMP_OVERHEAD", _INT, 3)
use_low_lat_tc = Param("use_low_lat_tc", "USE_LOW_LATENCY_TC", _INT, 1)
force_num_rails = Param("force_num_rails", "FORCE_NUM_RAILS", _INT, 0)


_BUILTINS = {
    p.name: p
    for p in (
        use_ipv6_tcp, exclude_tcp_if, gdr_flush_disable, nic_dup_conns,
        cuda_flush_enable, mr_key_size, mr_cache_disable, cq_read_count,
        protocol, domain_per_thread, disable_native_rdma_check,
        disable_gdr_required_check, disable_dmabuf, min_stripe_size,
        rdma_min_posted_bounce_buffers, rdma_max_posted_bounce_buffers,
        rdma_rr_ctrl_msg, net_latency, eager_max_size, errorcheck_mutex,
        endpoint_per_communicator, abort_on_error, tuner_force_type,
        tuner_num_channels, tuner_net_latency, tuner_net_comp_overhead,
        use_low_lat_tc, force_num_rails,
    )
}


def lookup(name: str) -> Optional[Param]:
    """Return the built-in parameter called ``name``, or None."""
    return _BUILTINS.get(name)