"""Videx Videoterm 80 column card for the Apple II+."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Any, Optional

from PIL import Image

from a2emu.io_page import IoC0Page, IoFlag
from a2emu.mc6845 import MC6845, CursorMode

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)

CHAR_WIDTH = 8
ROM_LIMIT = 0xCC00
SRAM_LIMIT = 0xCE00
SRAM_MASK = 0x01FF
SRAM_PAGE_SIZE = 0x200
MIN_CHARMAP_SIZE = 0x800


def _rgba(color: Sequence[int]) -> tuple[int, int, int, int]:
    if len(color) == 3:
        return (color[0], color[1], color[2], 255)
    if len(color) == 4:
        return (color[0], color[1], color[2], color[3])
    raise ValueError(f"expected an RGB or RGBA color, got {color!r}")


def _cursor_inverts(mode: CursorMode, ms: int) -> bool:
    """Whether the cursor is shown now, given the host milliseconds."""
    if mode == CursorMode.FIXED:
        return True
    if mode == CursorMode.SLOW:
        return ms // 2 > 1000 // 4  # two blinks per second
    if mode == CursorMode.FAST:
        return ms // 4 > 1000 // 8  # four blinks per second
    return False


def _host_millis(clock: Callable[[], float]) -> int:
    return int(clock() * 1000) % 1000


class _Canvas:
    """An RGBA pixel buffer that ignores writes outside its bounds."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.pixels = bytearray(width * height * 4)

    def set(self, x: int, y: int, color: tuple[int, int, int, int]) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            offset = (y * self.width + x) * 4
            self.pixels[offset : offset + 4] = bytes(color)

    def image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), bytes(self.pixels))


def _placeholder_image() -> Image.Image:
    canvas = _Canvas(3, 3)
    canvas.set(1, 1, WHITE)
    return canvas.image()


class VidexVideoterm:
    """The card: a CRT controller, 2 KB of video RAM and a character ROM.

    ``rom`` answers reads below $CC00 in the $C800 area. The soft switch
    index selects the controller register pin (bit 0) and the RAM page
    mapped at $CC00 (bits 2 and 3).
    """

    def __init__(
        self,
        rom: Any,
        char_gen: bytes,
        always_show: bool = False,
        io: Optional[IoC0Page] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if len(char_gen) < MIN_CHARMAP_SIZE:
            raise ValueError("character ROM size not supported for Videx")
        self.rom = rom
        self.char_gen = bytes(char_gen)
        self.always_show = always_show
        self.io = io
        self.clock = clock
        self.mc6845 = MC6845()
        self.sram_page = 0
        self.sram = bytearray(0x800)

    def read_switch(self, index: int) -> int:
        """Read the soft switch ``index`` (0 to 15) of the card."""
        self.sram_page = (index & 0x0F) >> 2
        return self.mc6845.read(bool(index & 1))

    def write_switch(self, index: int, value: int) -> None:
        """Write ``value`` to the soft switch ``index`` (0 to 15) of the card."""
        self.sram_page = (index & 0x0F) >> 2
        self.mc6845.write(bool(index & 1), value)

    def _sram_index(self, address: int) -> int:
        return (address & SRAM_MASK) + self.sram_page * SRAM_PAGE_SIZE

    def peek(self, address: int) -> int:
        if address < ROM_LIMIT:
            return self.rom.peek(address)
        if address < SRAM_LIMIT:
            return self.sram[self._sram_index(address)]
        return 0

    def poke(self, address: int, value: int) -> None:
        if ROM_LIMIT <= address < SRAM_LIMIT:
            self.sram[self._sram_index(address)] = value & 0xFF

    def is_soft_switch_active(self) -> bool:
        """Whether the 80 column output should be shown (TEXT and AN0 set)."""
        if self.always_show:
            return True
        if self.io is None:
            return False
        return self.io.is_soft_switch_active(IoFlag.TEXT) and self.io.is_soft_switch_active(
            IoFlag.ANNUNCIATOR0
        )

    def build_image(self, light: Sequence[int]) -> Image.Image:
        """Render the screen, lit pixels in ``light`` over black."""
        params = self.mc6845.image_data()
        width, height = params.displayed_width_height(CHAR_WIDTH)
        if width == 0 or height == 0:
            return _placeholder_image()

        on = _rgba(light)
        ms = _host_millis(self.clock)
        canvas = _Canvas(width, height)

        for cell in params.iterate_screen():
            bits = 0
            if cell.display_enable:
                char = self.sram[cell.address & 0x7FF]
                bits = self.char_gen[((char & 0x7F) << 4) + cell.char_line]
                if _cursor_inverts(cell.cursor_mode, ms):
                    bits ^= 0xFF
                if char >= 0x80:
                    bits ^= 0xFF  # inverse video
            x = cell.column * CHAR_WIDTH
            for bit in range(CHAR_WIDTH):
                lit = bits & (0x80 >> bit)
                canvas.set(x + bit, cell.y, on if lit else BLACK)

        return canvas.image()

    def get_text(self) -> str:
        """Return the screen as text, one line each, trailing spaces removed."""
        params = self.mc6845.image_data()
        text = ""
        address = params.first_char
        for _ in range(params.lines):
            for _ in range(params.columns):
                text += chr(self.sram[address & 0x7FF])
                address = (address + 1) & 0xFFFF
            text = text.rstrip(" ") + "\n"
        return text