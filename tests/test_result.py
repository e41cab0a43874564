"""Tests for the Result helpers."""

from shift.domain.shared import Err, Ok, flat_map


def half(value: int):
    if value % 2:
        return Err(f"{value} is odd")
    return Ok(value // 2)


def test_flat_map_chains_ok():
    assert flat_map(Ok(8), half) == Ok(4)
    assert flat_map(flat_map(Ok(8), half), half) == Ok(2)


def test_flat_map_short_circuits_err():
    assert flat_map(Ok(3), half) == Err("3 is odd")
    assert flat_map(Err("earlier"), half) == Err("earlier")
