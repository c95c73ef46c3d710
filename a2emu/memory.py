"""Plain memory blocks: RAM, paged ROM, the Basis 108 RAM and a tracer."""

from __future__ import annotations

from typing import Any

TEXT_PAGE1_ADDRESS = 0x0400
TEXT_PAGE2_ADDRESS = 0x0800
TEXT_PAGE_SIZE = 0x0400


class MemoryRange:
    """A block of RAM mapped from ``base``."""

    def __init__(self, base: int, data: bytearray, name: str) -> None:
        self.base = base
        self.data = data
        self.name = name

    def peek(self, address: int) -> int:
        return self.data[address - self.base]

    def poke(self, address: int, value: int) -> None:
        self.data[address - self.base] = value & 0xFF

    def sub_range(self, start: int, end: int) -> memoryview:
        """Return a live view of the bytes from ``start`` up to ``end``."""
        return memoryview(self.data)[start - self.base : end - self.base]


class MemoryRangeROM(MemoryRange):
    """A read only block, optionally split into switchable pages."""

    def __init__(self, base: int, data: bytes, name: str, pages: int = 1) -> None:
        super().__init__(base, bytearray(data), name)
        self.pages = pages
        self.page_offset = 0

    @property
    def _page_size(self) -> int:
        return len(self.data) // self.pages

    def set_page(self, page: int) -> None:
        self.page_offset = ((page % self.pages) * self._page_size) & 0xFFFF

    @property
    def page(self) -> int:
        return (self.page_offset // self._page_size) & 0xFF

    def peek(self, address: int) -> int:
        position = (address - self.base + self.page_offset) & 0xFFFF
        if position >= len(self.data):
            return address & 0xFF  # Non existent memory
        return self.data[position]

    def poke(self, address: int, value: int) -> None:
        """Writes to ROM are ignored."""


class Basis108Memory:
    """The Basis 108 RAM: 48 KB main, 48 KB aux and static RAM at $0400."""

    name = "Basis 108 RAM"

    def __init__(self) -> None:
        self.data_main = bytearray(48 * 1024)
        self.data_aux = bytearray(48 * 1024)
        self.data_static = bytearray([ord(" ") + 0x80]) * (0xC000 - 0x0400)
        self.static_ram = False
        self.aux_ram = False

    def _in_static(self, address: int) -> bool:
        return self.static_ram and 0x0400 <= address < 0x0C00

    def _bank(self) -> bytearray:
        return self.data_aux if self.aux_ram else self.data_main

    def peek(self, address: int) -> int:
        if self._in_static(address):
            return self.data_static[address - 0x0400]
        return self._bank()[address]

    def poke(self, address: int, value: int) -> None:
        if self._in_static(address):
            self.data_static[address - 0x0400] = value & 0xFF
        else:
            self._bank()[address] = value & 0xFF

    def sub_range(self, start: int, end: int) -> memoryview:
        if self.static_ram and start >= 0x0400 and end < 0x0C00:
            return memoryview(self.data_static)[start - 0x0400 : end - 0x0400]
        return memoryview(self._bank())[start:end]

    def text_memory(self, second_page: bool, ext: bool) -> memoryview:
        """Return the text page, from static RAM when ``ext`` is set."""
        start = TEXT_PAGE2_ADDRESS if second_page else TEXT_PAGE1_ADDRESS
        if ext:
            offset = start - 0x0400
            return memoryview(self.data_static)[offset : offset + TEXT_PAGE_SIZE]
        return memoryview(self.data_main)[start : start + TEXT_PAGE_SIZE]


class MemoryTracer:
    """Wraps a memory handler and prints every access."""

    def __init__(self, memory: Any, name: str) -> None:
        self.memory = memory
        self.name = name

    def peek(self, address: int) -> int:
        value = self.memory.peek(address)
        print(f"Memory {self.name}: peek(${address:04X}) = ${value:02X}")
        return value

    def poke(self, address: int, value: int) -> None:
        print(f"Memory {self.name}: poke(${address:04X}, ${value:02X})")
        self.memory.poke(address, value)


def trace_memory(memory: Any, name: str, trace: bool) -> Any:
    """Return ``memory`` wrapped in a tracer when ``trace`` is set."""
    if not trace or memory is None:
        return memory
    return MemoryTracer(memory, name)


def identify_memory(memory: Any) -> str:
    """Describe a memory handler for debugging."""
    if isinstance(memory, MemoryRangeROM):
        return f"ROM 0x{memory.base:04x} {memory.name}"
    if isinstance(memory, MemoryRange):
        return f"RAM 0x{memory.base:04x} {memory.name}"
    return "Unknown memory"