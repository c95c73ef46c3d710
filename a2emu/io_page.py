"""The $C000-$C0FF soft switch page."""

from __future__ import annotations

from collections.abc import Callable
from enum import IntEnum
from typing import Any, Optional

SS_ON = 0x80
SS_OFF = 0x00

SoftSwitchR = Callable[[], int]
SoftSwitchW = Callable[[int], None]


class IoFlag(IntEnum):
    """Indexes of the soft switch states kept in the I/O page."""

    COL80 = 0x0C
    NEW_VIDEO = 0x29
    TEXT = 0x50
    MIXED = 0x52
    SECOND_PAGE = 0x54
    HIRES = 0x56
    ANNUNCIATOR0 = 0x58
    ANNUNCIATOR1 = 0x5A
    ANNUNCIATOR2 = 0x5C
    ANNUNCIATOR3 = 0x5E


def ss_from_bool(value: bool) -> int:
    """Return the soft switch byte for an on/off state."""
    return SS_ON if value else SS_OFF


class IoC0Page:
    """Dispatches reads and writes on the I/O page to registered soft switches.

    The trace and panic masks hold one bit for each block of 16 switches;
    blocks $C090 to $C0FF belong to slots 1 to 7.
    """

    def __init__(self) -> None:
        self.soft_switches_r: list[Optional[SoftSwitchR]] = [None] * 256
        self.soft_switches_w: list[Optional[SoftSwitchW]] = [None] * 256
        self.soft_switches_r_name: list[str] = [""] * 256
        self.soft_switches_w_name: list[str] = [""] * 256
        self.soft_switches_data = bytearray(128)
        self.keyboard: Any = None
        self.speaker: Any = None
        self.joysticks: Any = None
        self.mouse: Any = None
        self.paddles_strobe_cycle = 0
        self.trace_mask = 0
        self.panic_mask = 0
        self.trace_registrations = False

    def set_trace(self, trace: bool) -> None:
        self.trace_mask = 0xFFFF if trace else 0x0000

    def trace_slot(self, slot: int) -> None:
        self.trace_mask |= 1 << (8 + slot)

    def panic_not_implemented_slot(self, slot: int) -> None:
        self.panic_mask |= 1 << (8 + slot)

    def set_panic_not_implemented(self, value: bool) -> None:
        self.panic_mask = 0xFFFF if value else 0x0000

    def add_soft_switch_rw(self, address: int, switch: SoftSwitchR, name: str) -> None:
        """Register ``switch`` for reads, and for writes ignoring the value."""
        self.add_soft_switch_r(address, switch, name)
        self.add_soft_switch_w(address, lambda _value: switch(), name)

    def add_soft_switch_r(self, address: int, switch: SoftSwitchR, name: str) -> None:
        address &= 0xFF
        if self.trace_registrations:
            print(f"Softswitch registered in $c0{address:02x} for reads as {name}")
        self.soft_switches_r[address] = switch
        self.soft_switches_r_name[address] = name

    def add_soft_switch_w(self, address: int, switch: SoftSwitchW, name: str) -> None:
        address &= 0xFF
        if self.trace_registrations:
            print(f"Softswitch registered in $c0{address:02x} for writes as {name}")
        self.soft_switches_w[address] = switch
        self.soft_switches_w_name[address] = name

    def is_soft_switch_active(self, flag: int) -> bool:
        return (self.soft_switches_data[flag] & SS_ON) == SS_ON

    def is_traced(self, address: int) -> bool:
        block = (address & 0xFF) >> 4
        # The keyboard switch is polled constantly; never trace it.
        return address != 0xC000 and bool(self.trace_mask & (1 << block))

    def is_panic_not_implemented(self, address: int) -> bool:
        block = (address & 0xFF) >> 4
        return bool(self.panic_mask & (1 << block))

    def peek(self, address: int) -> int:
        """Read a soft switch; unknown switches read as zero."""
        page_address = address & 0xFF
        switch = self.soft_switches_r[page_address]
        if switch is None:
            if self.is_traced(address):
                print(f"Unknown softswitch on read to ${address:04x}")
            if self.is_panic_not_implemented(address):
                raise LookupError(f"Unknown softswitch on read to ${address:04x}")
            return 0
        value = switch()
        if self.is_traced(address):
            name = self.soft_switches_r_name[page_address]
            print(f"Softswitch peek on ${address:04x} {name}: ${value:02x}")
        return value

    def poke(self, address: int, value: int) -> None:
        """Write a soft switch; writes to unknown switches are dropped."""
        page_address = address & 0xFF
        switch = self.soft_switches_w[page_address]
        if switch is None:
            if self.is_traced(address):
                print(f"Unknown softswitch on write ${value:02x} to ${address:04x}")
            if self.is_panic_not_implemented(address):
                raise LookupError(f"Unknown softswitch on write to ${address:04x}")
            return
        if self.is_traced(address):
            name = self.soft_switches_w_name[page_address]
            print(f"Softswitch poke on ${address:04x} {name} with ${value:02x}")
        switch(value)