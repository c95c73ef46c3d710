"""DS1216 phantom clock ("No-Slot Clock") hidden under a ROM."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

_PATTERN_BYTES = (0xC5, 0x3A, 0xA3, 0x5C) * 2
NSC_BIT_PATTERN = tuple(
    bool((byte >> bit) & 1) for byte in _PATTERN_BYTES for bit in range(8)
)

_MASK64 = (1 << 64) - 1


class _State(Enum):
    DISABLED = 0
    PATTERN = 1
    ENABLED = 2


def _bcd(value: int) -> int:
    return ((value // 10) << 4) | (value % 10)


def encode_time(now: datetime) -> int:
    """Return the 64 bit clock register for ``now``.

    From the top: year, month, day, weekday (1 is Sunday), hour, minute,
    second and hundredths, one BCD byte each.
    """
    weekday = now.isoweekday() % 7 + 1
    fields = (
        now.year % 100,
        now.month,
        now.day,
        weekday,
        now.hour,
        now.minute,
        now.second,
        now.microsecond // 10000,
    )
    register = 0
    for field in fields:
        register = (register << 8) | _bcd(field)
    return register


class NoSlotClockDS1216:
    """Sits in front of a memory handler and waits for the unlock pattern.

    Address bit A2 selects read (high) or write (low) and A0 carries the
    written bit.
    """

    def __init__(self, memory: Any, clock: Callable[[], datetime] = datetime.now) -> None:
        self.memory = memory
        self.clock = clock
        self.state = _State.DISABLED
        self.index = 0
        self.time_capture = 0

    def peek(self, address: int) -> int:
        read = bool(address & 0x04)
        value = bool(address & 0x01)

        if self.state is _State.DISABLED:
            if read:
                # A read before the pattern resets the comparison pointer.
                self.state = _State.PATTERN
                self.index = 0
            return self.memory.peek(address)

        if self.state is _State.PATTERN:
            if read:
                self.index = 0
            elif value == NSC_BIT_PATTERN[self.index]:
                self.index += 1
                if self.index == len(NSC_BIT_PATTERN):
                    self.state = _State.ENABLED
                    self.index = 0
                    self.load_time()
            else:
                self.state = _State.DISABLED
            return self.memory.peek(address)

        if read:
            data = (self.time_capture >> self.index) & 1
        else:
            if value:
                self.time_capture |= 1 << self.index
            else:
                self.time_capture &= ~(1 << self.index) & _MASK64
            data = 0
        self.index += 1
        if self.index == 64:
            self.state = _State.DISABLED
            self.index = 0
        return data

    def poke(self, address: int, value: int) -> None:
        self.memory.poke(address, value)

    def load_time(self) -> None:
        """Capture the current time into the clock register."""
        self.time_capture = encode_time(self.clock())


def setup_no_slot_clock(mmu: Any, arg: str) -> None:
    """Install a clock under the main ROM (``"main"``) or a slot 1-7 ROM."""
    if arg == "main":
        mmu.physical_rom = NoSlotClockDS1216(mmu.physical_rom)
        return
    if not (arg.isascii() and arg.isdigit()) or not 1 <= int(arg) <= 7:
        raise ValueError(
            "invalid slot for the no slot clock, use 'none', 'main' "
            "or a slot number from 1 to 7"
        )
    slot = int(arg)
    card_rom = mmu.cards_rom[slot]
    if card_rom is None:
        raise ValueError(f"no ROM available on slot {slot} to add a no slot clock")
    mmu.cards_rom[slot] = NoSlotClockDS1216(card_rom)