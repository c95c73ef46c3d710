"""Motorola MC6845 CRT controller."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum


class CursorMode(IntEnum):
    """Cursor display modes, as encoded in bits 6 and 5 of R10."""

    FIXED = 0
    NONE = 1
    FAST = 2
    SLOW = 3


@dataclass(frozen=True)
class RasterCell:
    """One character cell row produced while scanning the screen."""

    address: int
    char_line: int
    cursor_mode: CursorMode
    display_enable: bool
    column: int
    y: int


@dataclass(frozen=True)
class ImageData:
    """Screen geometry decoded from the controller registers."""

    first_char: int = 0
    char_lines: int = 0
    columns: int = 0
    lines: int = 0
    adjust_lines: int = 0
    cursor_pos: int = 0
    cursor_start: int = 0
    cursor_end: int = 0
    cursor_mode: CursorMode = CursorMode.FIXED
    interlace_mode: int = 0

    def displayed_width_height(self, char_width: int) -> tuple[int, int]:
        """Return the displayed size in pixels for characters ``char_width`` wide."""
        width = self.columns * char_width
        height = self.lines * self.char_lines + self.adjust_lines
        return width, height

    def iterate_screen(self) -> Iterator[RasterCell]:
        """Yield every cell row in raster order, then the blank adjust lines."""
        line_address = self.first_char
        address = 0
        y = 0
        for _ in range(self.lines):
            for char_line in range(self.char_lines):
                address = line_address
                for column in range(self.columns):
                    is_cursor = (
                        address == self.cursor_pos
                        and self.cursor_start <= char_line <= self.cursor_end
                    )
                    mode = self.cursor_mode if is_cursor else CursorMode.NONE
                    yield RasterCell(address, char_line, mode, True, column, y)
                    address = (address + 1) & 0x3FFF
                y += 1
            line_address = address
        for _ in range(self.adjust_lines + 1):
            for column in range(self.columns):
                yield RasterCell(0, 0, CursorMode.NONE, False, column, y)
            y += 1


class MC6845:
    """The register file of the CRT controller."""

    REGISTER_COUNT = 18

    def __init__(self) -> None:
        self.reg = [0] * self.REGISTER_COUNT
        self.sel = 0

    def read(self, rs: bool) -> int:
        """Read the selected register; only R14 to R17 are readable."""
        if not rs:
            return 0x00
        if 14 <= self.sel <= 17:
            return self.reg[self.sel]
        return 0x00

    def write(self, rs: bool, value: int) -> None:
        """Select a register (``rs`` low) or write to the selected one."""
        value &= 0xFF
        if not rs:
            self.sel = value & 0x1F
        elif self.sel <= 15:
            if self.sel == 1 and value == 144:
                # Mode 6 programs 144 columns but displays 160.
                self.reg[self.sel] = 160
            else:
                self.reg[self.sel] = value

    def image_data(self) -> ImageData:
        """Decode the registers into the screen geometry."""
        reg = self.reg
        return ImageData(
            first_char=((reg[12] & 0x3F) << 8) + reg[13],
            char_lines=(reg[9] + 1) & 0x1F,
            columns=reg[1],
            lines=reg[6] & 0x7F,
            adjust_lines=reg[5] & 0x1F,
            cursor_pos=((reg[14] & 0x3F) << 8) + reg[15],
            cursor_start=reg[10] & 0x1F,
            cursor_end=reg[11] & 0x1F,
            cursor_mode=CursorMode((reg[10] >> 5) & 0x03),
            interlace_mode=reg[8] & 0x03,
        )