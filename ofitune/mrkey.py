"""Memory-registration cache keys and page rounding."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from .mathutil import round_down, round_up

CACHE_PAGE_SIZE = 4096

_log = logging.getLogger(__name__)


class CacheKeyType(enum.IntEnum):
    """Kind of memory a cache key describes."""

    INVALID = 0
    IOVEC = 1
    DMABUF = 2


@dataclass(frozen=True)
class CacheKey:
    """Identifies a registered memory region."""

    type: CacheKeyType
    addr: int
    size: int
    fd: int = -1
    offset: int = 0

    def type_name(self) -> str:
        """Return "iovec" or "dmabuf"."""
        if self.type is CacheKeyType.IOVEC:
            return "iovec"
        if self.type is CacheKeyType.DMABUF:
            return "dmabuf"
        raise ValueError("invalid cache key")

    def base_address(self) -> int:
        """Return the start address of the region."""
        if self.type is CacheKeyType.IOVEC:
            return self.addr
        if self.type is CacheKeyType.DMABUF:
            return self.addr + self.offset
        raise ValueError("invalid cache key")

    def length(self) -> int:
        """Return the length of the region in bytes."""
        if self.type in (CacheKeyType.IOVEC, CacheKeyType.DMABUF):
            return self.size
        raise ValueError("invalid cache key")


def round_region(base_addr: int, length: int, alignment: int) -> tuple[int, int]:
    """Widen a region to whole ``alignment`` pages; return (base, length)."""
    page_base = round_down(base_addr, alignment)
    aligned_size = round_up(base_addr + length, alignment) - page_base
    if page_base != base_addr or aligned_size != length:
        _log.debug(
            "Going to register mr %#x size %d as %#x size %d",
            base_addr,
            length,
            page_base,
            aligned_size,
        )
    return page_base, aligned_size


def make_iovec_key(base_addr: int, length: int, alignment: int = CACHE_PAGE_SIZE) -> CacheKey:
    """Build a page-rounded key for host or device virtual memory."""
    page_base, aligned_size = round_region(base_addr, length, alignment)
    return CacheKey(CacheKeyType.IOVEC, page_base, aligned_size)


def make_dmabuf_key(fd: int, offset: int, length: int, base_addr: int) -> CacheKey:
    """Build a key for a dma-buf region; no rounding is applied."""
    return CacheKey(CacheKeyType.DMABUF, base_addr, length, fd=fd, offset=offset)