"""Tests for hcs.core.result."""

from __future__ import annotations

import pytest

from hcs.core.result import Err, Ok, Result, is_err, is_ok


def _parse_port(text: str) -> Result[int, str]:
    if not text.isdigit():
        return Err(f"not a number: {text}")
    return Ok(int(text))


class TestOk:
    def test_unwrap_returns_value(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_unwrap_or_ignores_default(self) -> None:
        assert Ok(1).unwrap_or(2) == 1

    def test_map_transforms_value(self) -> None:
        assert Ok(2).map(lambda x: x * 10) == Ok(20)

    def test_flags(self) -> None:
        assert Ok(None).is_ok()
        assert not Ok(None).is_err()


class TestErr:
    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()

    def test_unwrap_or_returns_default(self) -> None:
        assert Err("x").unwrap_or(7) == 7

    def test_map_is_noop(self) -> None:
        err: Err[str] = Err("x")
        assert err.map(lambda v: v) is err

    def test_is_frozen(self) -> None:
        err = Err("x")
        with pytest.raises(AttributeError):
            err.error = "y"  # type: ignore[misc]


def test_type_guards() -> None:
    assert is_ok(_parse_port("8080"))
    assert is_err(_parse_port("http"))


def test_match_statement() -> None:
    match _parse_port("abc"):
        case Ok(value):
            pytest.fail(f"unexpected Ok({value})")
        case Err(error):
            assert error == "not a number: abc"
