"""Unit tests for the Result type."""

import pytest

from fieldscope.core.result import Err, Ok, map_ok


class TestOk:
    def test_unwrap(self):
        result = Ok(3)
        assert not result.is_err()
        assert result.unwrap() == 3

    def test_unwrap_err_raises(self):
        with pytest.raises(ValueError):
            Ok(3).unwrap_err()


class TestErr:
    def test_unwrap_err(self):
        error = RuntimeError("boom")
        result = Err(error)
        assert result.is_err()
        assert result.unwrap_err() is error

    def test_unwrap_raises(self):
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()


class TestMapOk:
    def test_maps_ok(self):
        assert map_ok(Ok(2), lambda v: v * 10) == Ok(20)

    def test_passes_err_through(self):
        err = Err("nope")
        assert map_ok(err, lambda v: v * 10) is err
