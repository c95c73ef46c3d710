"""Address decoding of the 64 KB space: RAM, ROM, slots and bank switching."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from a2emu.io_page import SS_OFF, IoC0Page, IoFlag
from a2emu.memory import MemoryRange

IO_C8_OFF = 0xCFFF
ADDRESS_LIMIT_ZERO = 0x01FF
ADDRESS_START_TEXT = 0x0400
ADDRESS_LIMIT_TEXT = 0x07FF
ADDRESS_START_HGR = 0x2000
ADDRESS_LIMIT_HGR = 0x3FFF
ADDRESS_LIMIT_MAIN_RAM = 0xBFFF
ADDRESS_LIMIT_IO = 0xC0FF
ADDRESS_LIMIT_SLOTS = 0xC7FF
ADDRESS_LIMIT_SLOTS_EXTRA = 0xCFFF
ADDRESS_LIMIT_D_AREA = 0xDFFF

INVALID_ADDRESS_PAGE = 0x0001

_UNMAPPED_CODE = 0xF4


class MemoryManager:
    """Routes every CPU access to the memory handler that answers it.

    Handlers are objects with ``peek(address)`` and ``poke(address, value)``.
    """

    def __init__(self, io: Optional[IoC0Page] = None, is_apple2e: bool = False) -> None:
        self.io = io
        self.is_apple2e = is_apple2e

        self.physical_main_ram: Any = None
        self.cards_rom: list[Any] = [None] * 8
        self.cards_rom_extra: list[Any] = [None] * 8
        self.physical_rom: Any = None

        self.physical_lang_ram: list[Any] = []
        self.physical_lang_alt_ram: list[Any] = []
        self.physical_ext_ram: list[Any] = []
        self.physical_ext_alt_ram: list[Any] = []

        # Language card switches
        self.lc_selected_block = 0
        self.lc_active_read = False
        self.lc_active_write = False
        self.lc_alt_bank = False

        # Apple IIe switches
        self.alt_zero_page = False
        self.alt_main_ram_active_read = False
        self.alt_main_ram_active_write = False
        self.store80_active = False
        self.slot_c3_rom_active = True  # The II+ behaviour
        self.int_cx_rom_active = False
        self.int_c8_rom_active = False
        self.active_slot = 0
        self.extended_ram_block = 0
        self.main_rom_inhibited: Any = None

        # Cache of the handler of the last code page read
        self.last_address_page = INVALID_ADDRESS_PAGE
        self.last_address_handler: Any = None

    def _flag(self, flag: IoFlag) -> bool:
        return self.io is not None and self.io.is_soft_switch_active(flag)

    def access_c_area(self, address: int) -> Any:
        """Resolve an access to $C100-$CFFF, tracking the active slot."""
        slot = (address >> 8) & 0x0F

        if address <= ADDRESS_LIMIT_SLOTS and not self.slot_c3_rom_active and slot == 3:
            self.int_c8_rom_active = True
            return self.physical_rom

        if self.int_cx_rom_active:
            return self.physical_rom

        if slot <= 7:
            self.active_slot = slot
            self.int_c8_rom_active = False
            return self.cards_rom[slot]

        if address == IO_C8_OFF:
            # The owner of $C800 is kept: cards differ in how they release it.
            self.int_c8_rom_active = False

        if self.int_c8_rom_active:
            return self.physical_rom
        return self.cards_rom_extra[self.active_slot]

    def access_upper_ram_area(self, address: int) -> Any:
        """Resolve $D000-$FFFF to language card or extended RAM."""
        if self.alt_zero_page and self.has_extended_ram():
            block = self.extended_ram_block
            if self.lc_alt_bank and address <= ADDRESS_LIMIT_D_AREA:
                return self.physical_ext_alt_ram[block]
            return self.physical_ext_ram[block]

        block = self.lc_selected_block
        if self.lc_alt_bank and address <= ADDRESS_LIMIT_D_AREA:
            return self.physical_lang_alt_ram[block]
        return self.physical_lang_ram[block]

    def get_physical_main_ram(self, ext: bool) -> Any:
        if ext and self.has_extended_ram():
            return self.physical_ext_ram[self.extended_ram_block]
        return self.physical_main_ram

    def get_video_ram(self, ext: bool) -> Any:
        """Return the RAM used for video; aux video is always in block 0."""
        if ext and self.has_extended_ram():
            return self.physical_ext_ram[0]
        return self.physical_main_ram

    def inhibit_rom(self, replacement: Any) -> None:
        """Let a card replace the ROM and language card area (INH line)."""
        self.main_rom_inhibited = replacement
        self.last_address_page = INVALID_ADDRESS_PAGE

    def _store80_handler(self, address: int) -> Any:
        alt_page = self._flag(IoFlag.SECOND_PAGE)
        if ADDRESS_START_TEXT <= address <= ADDRESS_LIMIT_TEXT:
            return self.get_physical_main_ram(alt_page), True
        if self._flag(IoFlag.HIRES) and ADDRESS_START_HGR <= address <= ADDRESS_LIMIT_HGR:
            return self.get_physical_main_ram(alt_page), True
        return None, False

    def _access(self, address: int, alt_main: bool, lc_active: bool) -> Any:
        if address <= ADDRESS_LIMIT_ZERO:
            return self.get_physical_main_ram(self.alt_zero_page)
        if self.store80_active and address <= ADDRESS_LIMIT_HGR:
            handler, found = self._store80_handler(address)
            if found:
                return handler
        if address <= ADDRESS_LIMIT_MAIN_RAM:
            return self.get_physical_main_ram(alt_main)
        if address <= ADDRESS_LIMIT_IO:
            self.last_address_page = INVALID_ADDRESS_PAGE
            return self.io
        if address <= ADDRESS_LIMIT_SLOTS_EXTRA:
            return self.access_c_area(address)
        if self.main_rom_inhibited is not None:
            return self.main_rom_inhibited
        if lc_active:
            return self.access_upper_ram_area(address)
        return self.physical_rom

    def access_read(self, address: int) -> Any:
        return self._access(address, self.alt_main_ram_active_read, self.lc_active_read)

    def access_write(self, address: int) -> Any:
        return self._access(address, self.alt_main_ram_active_write, self.lc_active_write)

    def peek_word(self, address: int) -> int:
        """Read a little endian 16 bit word."""
        return self.peek(address) + (self.peek((address + 1) & 0xFFFF) << 8)

    def peek(self, address: int) -> int:
        handler = self.access_read(address)
        if handler is None:
            return address & 0xFF
        return handler.peek(address)

    def peek_code(self, address: int) -> int:
        """Read, caching the handler of the page for instruction fetches."""
        page = address & 0xFF00
        if page == self.last_address_page:
            handler = self.last_address_handler
        else:
            handler = self.access_read(address)
            if address & 0xF000 != 0xC000:
                # The $C000 area may reconfigure the MMU; never cache it.
                self.last_address_page = page
                self.last_address_handler = handler
        if handler is None:
            return _UNMAPPED_CODE
        return handler.peek(address)

    def poke_range(self, address: int, data: Iterable[int]) -> None:
        for offset, value in enumerate(data):
            self.poke((address + offset) & 0xFFFF, value)

    def poke(self, address: int, value: int) -> None:
        handler = self.access_write(address)
        if handler is not None:
            handler.poke(address, value)

    def set_card_rom(self, slot: int, handler: Any) -> None:
        self.cards_rom[slot] = handler

    def set_card_rom_extra(self, slot: int, handler: Any) -> None:
        self.cards_rom_extra[slot] = handler

    def init_language_ram(self, groups: int) -> None:
        """Create the language card RAM: one group, or up to 8 for a Saturn."""
        self.physical_lang_ram = [
            MemoryRange(0xD000, bytearray(0x3000), f"LC RAM block {i}") for i in range(groups)
        ]
        self.physical_lang_alt_ram = [
            MemoryRange(0xD000, bytearray(0x1000), f"LC RAM Alt block {i}") for i in range(groups)
        ]

    def init_main_ram(self) -> None:
        self.physical_main_ram = MemoryRange(0, bytearray(0xC000), "Main RAM")

    def init_custom_ram(self, custom_ram: Any) -> None:
        self.physical_main_ram = custom_ram

    def init_extended_ram(self, groups: int) -> None:
        """Create auxiliary RAM: one bank for a IIe card, up to 256 for RAMWorks."""
        self.physical_ext_ram = [
            MemoryRange(0, bytearray(0x10000), f"Extra RAM block {i}") for i in range(groups)
        ]
        self.physical_ext_alt_ram = [
            MemoryRange(0xD000, bytearray(0x1000), f"Extra RAM Alt block {i}")
            for i in range(groups)
        ]

    def set_language_ram(self, read_active: bool, write_active: bool, alt_bank: bool) -> None:
        self.lc_active_read = read_active
        self.lc_active_write = write_active
        self.lc_alt_bank = alt_bank

    def set_language_ram_active_block(self, block: int) -> None:
        self.lc_selected_block = block % len(self.physical_lang_ram)

    def set_extended_ram_active_block(self, block: int) -> None:
        if block >= len(self.physical_ext_ram):
            block = 0
        self.extended_ram_block = block

    def has_extended_ram(self) -> bool:
        return len(self.physical_ext_ram) > 0

    def reset(self) -> None:
        """Apply the RESET line to the IIe MMU and IOU switches."""
        if not self.is_apple2e:
            return
        self.alt_zero_page = False
        self.alt_main_ram_active_read = False
        self.alt_main_ram_active_write = False
        self.store80_active = False
        self.slot_c3_rom_active = False
        self.int_cx_rom_active = False
        self.int_c8_rom_active = False

        # All switches except KEYSTROKE, TEXT and MIXED are reset.
        if self.io is not None:
            for flag in (IoFlag.SECOND_PAGE, IoFlag.HIRES, IoFlag.COL80, IoFlag.NEW_VIDEO):
                self.io.soft_switches_data[flag] = SS_OFF