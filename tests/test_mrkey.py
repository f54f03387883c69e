import pytest

from ofitune.mathutil import is_aligned
from ofitune.mrkey import (
    CacheKey,
    CacheKeyType,
    make_dmabuf_key,
    make_iovec_key,
    round_region,
)


@pytest.mark.parametrize("base,length", [(0, 1), (1, 1), (4095, 2), (5000, 10000), (12288, 4096)])
def test_round_region_covers_original(base, length):
    page, size = round_region(base, length, 4096)
    assert page <= base
    assert page + size >= base + length
    assert is_aligned(page, 4096)
    assert is_aligned(size, 4096)


def test_round_region_aligned_unchanged():
    assert round_region(8192, 4096, 4096) == (8192, 4096)


def test_round_region_bad_alignment():
    with pytest.raises(ValueError):
        round_region(100, 10, 1000)


def test_iovec_key_fields():
    key = make_iovec_key(8192, 4096, 4096)
    assert key.type is CacheKeyType.IOVEC
    assert key.type_name() == "iovec"
    assert key.base_address() == 8192
    assert key.length() == 4096


def test_iovec_keys_in_same_page_are_equal():
    a = make_iovec_key(4100, 1, 4096)
    b = make_iovec_key(4096, 4096, 4096)
    assert a == b
    assert hash(a) == hash(b)


def test_iovec_key_default_alignment_is_page():
    key = make_iovec_key(4097, 3)
    assert is_aligned(key.base_address(), 4096)
    assert key.base_address() + key.length() >= 4100


def test_dmabuf_key_not_rounded():
    key = make_dmabuf_key(fd=7, offset=123, length=45, base_addr=0)
    assert key.type_name() == "dmabuf"
    assert key.base_address() == 123
    assert key.length() == 45
    assert key.fd == 7


def test_dmabuf_base_includes_offset():
    key = make_dmabuf_key(3, 64, 10, 4096)
    plain = make_dmabuf_key(3, 0, 10, 4096)
    assert key.base_address() - plain.base_address() == 64


def test_invalid_key_raises():
    key = CacheKey(CacheKeyType.INVALID, 0, 0)
    with pytest.raises(ValueError):
        key.type_name()
    with pytest.raises(ValueError):
        key.base_address()
    with pytest.raises(ValueError):
        key.length()