import pytest

from ofitune import params
from ofitune.params import Param, ParamKind, reset_all

ENV = "OFI_NCCL_TESTPARAM_X"


@pytest.fixture
def int_param(monkeypatch):
    monkeypatch.delenv(ENV, raising=False)
    return Param("testparam_x", "TESTPARAM_X", ParamKind.INT, 5)


@pytest.fixture
def uint_param(monkeypatch):
    monkeypatch.delenv(ENV, raising=False)
    return Param("testparam_x", "TESTPARAM_X", ParamKind.UINT, 7)


@pytest.fixture
def str_param(monkeypatch):
    monkeypatch.delenv(ENV, raising=False)
    return Param("testparam_x", "TESTPARAM_X", ParamKind.STR, "lo,docker0")


def test_env_var_name(int_param):
    assert int_param.env_var == ENV


def test_unset_gives_default(int_param):
    assert int_param.value() == 5


def test_decimal_value(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "42")
    assert int_param.value() == 42


def test_hex_value(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "0x1f")
    assert int_param.value() == 0x1F


def test_octal_value(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "017")
    assert int_param.value() == 0o17


def test_negative_int(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "-3")
    assert int_param.value() == -3


@pytest.mark.parametrize("raw", ["abc", "12abc", "7 ", "08", "0x", "0x1g", "-", ""])
def test_invalid_falls_back_to_default(monkeypatch, int_param, raw):
    monkeypatch.setenv(ENV, raw)
    assert int_param.value() == 5


def test_leading_whitespace_is_skipped(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "  \t9")
    assert int_param.value() == 9


def test_int_overflow_falls_back(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "9223372036854775808")
    assert int_param.value() == 5


def test_int_minimum_accepted(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "-9223372036854775808")
    assert int_param.value() == -(2**63)


def test_uint_negative_wraps(monkeypatch, uint_param):
    monkeypatch.setenv(ENV, "-1")
    assert uint_param.value() == 2**64 - 1


def test_uint_overflow_falls_back(monkeypatch, uint_param):
    monkeypatch.setenv(ENV, "18446744073709551616")
    assert uint_param.value() == 7


def test_uint_max_accepted(monkeypatch, uint_param):
    monkeypatch.setenv(ENV, "18446744073709551615")
    assert uint_param.value() == 18446744073709551615


def test_value_is_cached(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "11")
    assert int_param.value() == 11
    monkeypatch.setenv(ENV, "12")
    assert int_param.value() == 11


def test_reset_rereads(monkeypatch, int_param):
    monkeypatch.setenv(ENV, "11")
    assert int_param.value() == 11
    monkeypatch.setenv(ENV, "12")
    int_param.reset()
    assert int_param.value() == 12


def test_reset_all_rereads(monkeypatch, int_param, str_param):
    monkeypatch.setenv(ENV, "21")
    assert int_param.value() == 21
    assert str_param.value() == "21"
    monkeypatch.delenv(ENV)
    reset_all()
    assert int_param.value() == 5
    assert str_param.value() == "lo,docker0"


def test_str_unset_default(str_param):
    assert str_param.value() == "lo,docker0"


def test_str_set(monkeypatch, str_param):
    monkeypatch.setenv(ENV, "eth0")
    assert str_param.value() == "eth0"


def test_str_empty_is_taken(monkeypatch, str_param):
    monkeypatch.setenv(ENV, "")
    assert str_param.value() == ""


def test_str_none_default(monkeypatch):
    monkeypatch.delenv(ENV, raising=False)
    p = Param("testparam_x", "TESTPARAM_X", ParamKind.STR, None)
    assert p.value() is None


def test_bad_defaults_rejected():
    with pytest.raises(ValueError):
        Param("x", "X", ParamKind.UINT, -1)
    with pytest.raises(TypeError):
        Param("x", "X", ParamKind.INT, "1")
    with pytest.raises(TypeError):
        Param("x", "X", ParamKind.STR, 3)


def test_builtin_defaults(monkeypatch):
    for var in (
        "OFI_NCCL_TUNER_NUM_CHANNELS",
        "OFI_NCCL_EXCLUDE_TCP_IF",
        "OFI_NCCL_TUNER_TYPE",
        "OFI_NCCL_EAGER_MAX_SIZE",
        "OFI_NCCL_MIN_STRIPE_SIZE",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_all()
    assert params.tuner_num_channels.value() == 8
    assert params.exclude_tcp_if.value() == "lo,docker0"
    assert params.tuner_force_type.value() is None
    assert params.eager_max_size.value() == 8192
    assert params.min_stripe_size.value() == 128 * 1024


def test_builtin_reads_environment(monkeypatch):
    monkeypatch.setenv("OFI_NCCL_TUNER_TYPE", "Model")
    params.tuner_force_type.reset()
    try:
        assert params.tuner_force_type.value() == "Model"
    finally:
        monkeypatch.delenv("OFI_NCCL_TUNER_TYPE")
        params.tuner_force_type.reset()
    assert params.tuner_force_type.value() is None


def test_lookup():
    assert params.lookup("tuner_net_latency") is params.tuner_net_latency
    assert params.lookup("no_such_param") is None