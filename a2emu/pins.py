"""Conversions between a byte and the eight data pins that carry it."""

from __future__ import annotations

from collections.abc import Sequence


def byte_to_pins(value: int) -> tuple[bool, ...]:
    """Return the eight pin states of ``value``, least significant bit first."""
    return tuple(bool((value >> bit) & 1) for bit in range(8))


def pins_to_byte(pins: Sequence[bool]) -> int:
    """Return the byte carried by eight pins given least significant bit first."""
    if len(pins) != 8:
        raise ValueError(f"expected 8 pins, got {len(pins)}")
    return sum(1 << bit for bit, pin in enumerate(pins) if pin)


def reverse_pins(data: int) -> int:
    """Return ``data`` with the order of its eight bits reversed."""
    return pins_to_byte(tuple(reversed(byte_to_pins(data))))