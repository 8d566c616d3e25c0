import pytest

from promptdb_backend import config
from promptdb_backend.utils import env_bool, parse_bool


def test_defaults_are_sane():
    assert config.SCAN_WINDOW_BYTES >= 1024
    assert 1 <= config.MAX_LINK_DEPTH <= 100
    assert config.EXTRACT_CONCURRENCY >= 1


def test_env_int_reads_first_set_name(monkeypatch):
    monkeypatch.delenv("PROMPTDB_TEST_A", raising=False)
    monkeypatch.setenv("PROMPTDB_TEST_B", " 42 ")
    assert config._env_int(7, "PROMPTDB_TEST_A", "PROMPTDB_TEST_B") == 42


def test_env_int_unset_or_blank_uses_default(monkeypatch):
    monkeypatch.delenv("PROMPTDB_TEST_A", raising=False)
    assert config._env_int(7, "PROMPTDB_TEST_A") == 7
    monkeypatch.setenv("PROMPTDB_TEST_A", "   ")
    assert config._env_int(7, "PROMPTDB_TEST_A") == 7


def test_env_int_invalid_uses_default(monkeypatch):
    monkeypatch.setenv("PROMPTDB_TEST_A", "ten")
    assert config._env_int(7, "PROMPTDB_TEST_A") == 7


@pytest.mark.parametrize("raw, expected", [("0", 1), ("-5", 1), ("500", 100), ("12", 12)])
def test_env_int_clamps(monkeypatch, raw, expected):
    monkeypatch.setenv("PROMPTDB_TEST_A", raw)
    assert config._env_int(10, "PROMPTDB_TEST_A", min_value=1, max_value=100) == expected


def test_env_bool(monkeypatch):
    monkeypatch.delenv("PROMPTDB_TEST_FLAG", raising=False)
    assert config._env_bool(True, "PROMPTDB_TEST_FLAG") is True
    monkeypatch.setenv("PROMPTDB_TEST_FLAG", "off")
    assert config._env_bool(True, "PROMPTDB_TEST_FLAG") is False
    monkeypatch.setenv("PROMPTDB_TEST_FLAG", "yes")
    assert config._env_bool(False, "PROMPTDB_TEST_FLAG") is True


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, True),
        (0, False),
        (2.5, True),
        ("Enabled", True),
        (" no ", False),
        ("1", True),
        ("0.0", False),
        ("maybe", False),
        (None, False),
    ],
)
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


def test_parse_bool_default_for_unrecognized():
    assert parse_bool("maybe", default=True) is True


def test_env_bool_helper(monkeypatch):
    monkeypatch.delenv("PROMPTDB_TEST_FLAG", raising=False)
    assert env_bool("PROMPTDB_TEST_FLAG", True) is True
    assert env_bool("", False) is False
    monkeypatch.setenv("PROMPTDB_TEST_FLAG", "true")
    assert env_bool("PROMPTDB_TEST_FLAG", False) is True
