"""Memory side of the Microsoft Z80 SoftCard."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


def z80_address_translation(addr: int) -> int:
    """Map a Z80 address to the Apple II address seen through the card."""
    if addr < 0xB000:
        return addr + 0x1000
    if addr < 0xE000:
        return addr + 0x2000
    if addr < 0xF000:
        return addr - 0x2000
    return addr - 0xF000


class RomWriteTrap:
    """A slot ROM that reads as zero and calls back on writes to $C000-$C7FF.

    The SoftCard toggles DMA each time its slot area is written.
    """

    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback

    def peek(self, address: int) -> int:
        return 0

    def poke(self, address: int, value: int) -> None:
        if 0xC000 <= address < 0xC800:
            self.callback()


class Z80Memory:
    """The Z80 view of memory, translated onto the Apple II memory manager."""

    def __init__(self, mmu: Any) -> None:
        self.mmu = mmu

    def get(self, addr: int) -> int:
        return self.mmu.peek(z80_address_translation(addr))

    def set(self, addr: int, value: int) -> None:
        self.mmu.poke(z80_address_translation(addr), value)