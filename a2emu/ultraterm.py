"""Videx UltraTerm 80 column card for the Apple II+."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Any

from PIL import Image

from a2emu.mc6845 import MC6845
from a2emu.videoterm import (
    BLACK,
    _Canvas,
    _cursor_inverts,
    _host_millis,
    _placeholder_image,
    _rgba,
)

# Mode control port bits
MCP_FIRMWARE_PAGE_SELECT = 0x80
MCP_VIDEO_SIGNAL_SELECT = 0x40
MCP_CLOCK_FREQUENCY = 0x20
MCP_SRAM_ADDRESS_FORMAT = 0x10
MCP_SRAM_PAGE_MASK = 0x0F

# Video attribute bits, low nibble for normal chars, high nibble for bit 7 set
ATTRIBUTE_HIGHLIGHT = 0x01
ATTRIBUTE_INVERSE = 0x02
ATTRIBUTE_ALTERNATE_CHAR = 0x04

DEFAULT_VIDEO_ATTRIBUTE = ATTRIBUTE_INVERSE << 4

SRAM_START = 0xCC00
SRAM_LEGACY_MASK = 0x01FF
SRAM_MASK = 0x0FF
SRAM_512_MASK = 0x7FF
SRAM_256_MASK = 0xFFF

CHAR_WIDTH = 9
MIN_CHARMAP_SIZE = 0x1000
_NORMAL_CHARSET_OFFSET = 2048


def _dim(channel: int, alpha: int) -> int:
    value16 = channel * 0x101
    dimmed = (value16 >> 1) + (value16 >> 2)
    return ((dimmed * alpha * 0x101) // 0xFFFF) >> 8


class VidexUltraterm:
    """The card: a CRT controller, 4 KB of video RAM and two character sets.

    ``rom`` is the full $C800 firmware; its upper bank overlays the video
    RAM at $CC00 when bit 7 of the mode control port is set. Each group of
    four soft switches selects a 512 byte RAM page on reads and holds the
    controller address, controller data, mode control and video attribute
    ports.
    """

    def __init__(
        self,
        rom: Any,
        char_gen: bytes,
        always_show: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if len(char_gen) < MIN_CHARMAP_SIZE:
            raise ValueError("character ROM size not supported for Videx")
        self.rom = rom
        self.char_gen = bytes(char_gen)
        self.always_show = always_show
        self.clock = clock
        self.mc6845 = MC6845()
        self.mode_control = 0
        self.video_attribute = DEFAULT_VIDEO_ATTRIBUTE
        self.sram_page_512 = 0
        self.sram = bytearray(0x1000)

    def read_switch(self, index: int) -> int:
        """Read the soft switch ``index`` (0 to 15) of the card."""
        index &= 0x0F
        self.sram_page_512 = index >> 2
        port = index & 0x03
        if port == 0:
            return self.mc6845.read(False)
        if port == 1:
            return self.mc6845.read(True)
        if port == 2:
            return self.mode_control
        return self.video_attribute

    def write_switch(self, index: int, value: int) -> None:
        """Write ``value`` to the soft switch ``index`` (0 to 15) of the card."""
        value &= 0xFF
        port = index & 0x03
        if port == 0:
            self.mc6845.write(False, value)
        elif port == 1:
            self.mc6845.write(True, value)
        elif port == 2:
            self.mode_control = value
        else:
            self.video_attribute = value

    def _is_512_mode(self) -> bool:
        return self.mode_control & MCP_SRAM_ADDRESS_FORMAT == 0

    def _display_mask(self) -> int:
        return SRAM_512_MASK if self._is_512_mode() else SRAM_256_MASK

    def sram_address(self, address: int) -> int:
        """Translate a CPU address at $CC00 into a video RAM offset."""
        if self._is_512_mode():
            return (address & SRAM_LEGACY_MASK) + self.sram_page_512 * 512
        page = self.mode_control & MCP_SRAM_PAGE_MASK
        return (address & SRAM_MASK) + page * 256

    def peek(self, address: int) -> int:
        firmware_page = self.mode_control & MCP_FIRMWARE_PAGE_SELECT != 0
        if address < SRAM_START or firmware_page:
            return self.rom.peek(address)
        return self.sram[self.sram_address(address)]

    def poke(self, address: int, value: int) -> None:
        if address >= SRAM_START:
            self.sram[self.sram_address(address)] = value & 0xFF

    def is_soft_switch_active(self) -> bool:
        """Whether the UltraTerm video signal is selected."""
        if self.always_show:
            return True
        return self.mode_control & MCP_VIDEO_SIGNAL_SELECT != 0

    def colors_per_attributes(
        self, top_bit: bool, light: Sequence[int]
    ) -> tuple[tuple[int, int, int, int], tuple[int, int, int, int]]:
        """Return the (background, foreground) colors for one attribute nibble."""
        attributes = self.video_attribute >> 4 if top_bit else self.video_attribute
        inverse = attributes & ATTRIBUTE_INVERSE != 0
        highlight = attributes & ATTRIBUTE_HIGHLIGHT != 0

        clear = BLACK
        lit = _rgba(light)
        if not highlight:
            r, g, b, a = lit
            lit = (_dim(r, a), _dim(g, a), _dim(b, a), a)
        if inverse:
            clear, lit = lit, clear
        return clear, lit

    def build_image(self, light: Sequence[int]) -> Image.Image:
        """Render the screen with 9 pixel wide characters."""
        params = self.mc6845.image_data()
        width, height = params.displayed_width_height(CHAR_WIDTH)
        if width == 0 or height == 0:
            return _placeholder_image()

        ms = _host_millis(self.clock)
        canvas = _Canvas(width, height)
        upper_clear, upper_set = self.colors_per_attributes(True, light)
        lower_clear, lower_set = self.colors_per_attributes(False, light)
        alt_char = self.video_attribute & ATTRIBUTE_ALTERNATE_CHAR != 0
        mask = self._display_mask()

        for cell in params.iterate_screen():
            if not cell.display_enable:
                continue
            char = self.sram[cell.address & mask]
            if char & 0x80:
                color_on, color_off = upper_set, upper_clear
            else:
                color_on, color_off = lower_set, lower_clear

            rom_index = ((char & 0x7F) << 4) + cell.char_line
            if not alt_char:
                rom_index += _NORMAL_CHARSET_OFFSET
            bits = self.char_gen[rom_index]
            if _cursor_inverts(cell.cursor_mode, ms):
                bits ^= 0xFF

            x = cell.column * CHAR_WIDTH
            color = color_off
            for bit in range(CHAR_WIDTH - 1):
                color = color_on if bits & (0x80 >> bit) else color_off
                canvas.set(x + bit, cell.y, color)
            # The ninth column repeats the last pixel for graphic characters.
            ninth = color if char & 0x7F < 0x20 else color_off
            canvas.set(x + CHAR_WIDTH - 1, cell.y, ninth)

        return canvas.image()

    def get_text(self) -> str:
        """Return the screen as text, one line each, trailing spaces removed."""
        params = self.mc6845.image_data()
        mask = self._display_mask()
        text = ""
        address = params.first_char
        for _ in range(params.lines):
            for _ in range(params.columns):
                text += chr(self.sram[address & mask])
                address = (address + 1) & 0xFFFF
            text = text.rstrip(" ") + "\n"
        return text