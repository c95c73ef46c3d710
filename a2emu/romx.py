"""RomX: switches the character ROM bank through magic address sequences."""

from __future__ import annotations

from typing import Any, Optional

from a2emu.character_generator import CharacterGenerator

ROMX_ACTIVATION_SEQUENCE = (0xCACA, 0xCACA, 0xCAFE)
ROMXCE_ACTIVATION_SEQUENCE = (0xFACA, 0xFACA, 0xFAFE)

SETUP_BANK = 0

ROMXCE_SELECT_TEMP_BANK = 0xF850
ROMXCE_SELECT_MAIN_BANK = 0xF851
ROMXCE_SET_TEMP_BANK = 0xF830
ROMXCE_SET_MAIN_BANK = 0xF800
ROMXCE_PRESET_TEXT_BANK = 0xF810
ROMXCE_MCP7940_SDC = 0xF860
ROMXCE_LOWER_UPPER_BANKS = 0xF820

GET_DEFAULT_SYSTEM_BANK = 0xD034
GET_DEFAULT_TEXT_BANK = 0xD02E
GET_CURRENT_BOOT_DELAY = 0xDECA

BOOT_DELAY = 5


class RomX:
    """Sits between the CPU and memory, watching accesses from $C080 up.

    Only the text bank (font) switch has an effect; the other commands
    are tracked or logged.
    """

    def __init__(
        self,
        memory: Any,
        character_generator: CharacterGenerator,
        text_rom: Optional[bytes] = None,
        debug: bool = True,
    ) -> None:
        self.memory = memory
        self.cg = character_generator
        self.debug = debug
        self.activation_step = 0
        self.system_bank = 1
        self.main_bank = 1
        self.temp_bank = 1
        self.text_bank = 0
        if text_rom is not None:
            self.cg.load(text_rom)

    def _log(self, message: str) -> None:
        if self.debug:
            print(f"[romX]{message}")

    def peek(self, address: int) -> int:
        value = self.intercept_access(address)
        if value is not None:
            return value
        return self.memory.peek(address)

    def peek_code(self, address: int) -> int:
        value = self.intercept_access(address)
        if value is not None:
            return value
        return self.memory.peek_code(address)

    def poke(self, address: int, value: int) -> None:
        self.intercept_access(address)
        self.memory.poke(address, value)

    def intercept_access(self, address: int) -> Optional[int]:
        """Process an access; return a value when RomX answers it itself."""
        if address < 0xC080:
            return None

        if self.system_bank == SETUP_BANK:
            return self._setup_access(address)

        if address == ROMXCE_ACTIVATION_SEQUENCE[self.activation_step]:
            self.activation_step += 1
            self._log(f"Activation step {self.activation_step}")
            if self.activation_step == len(ROMX_ACTIVATION_SEQUENCE):
                self.system_bank = SETUP_BANK
                self.activation_step = 0
                self._log(f"System bank set to 0, {self.system_bank}")
        else:
            self.activation_step = 0
        return None

    def _setup_access(self, address: int) -> Optional[int]:
        nibble = address & 0xF
        command = address & 0xFFF0
        if command == ROMXCE_SET_MAIN_BANK:
            self.main_bank = nibble
            self._log(f"Main bank set to ${nibble:x}")
        elif command == ROMXCE_PRESET_TEXT_BANK:
            self.cg.set_page(nibble)
            self._log(f"Text bank set to ${nibble:x}")
        elif command == ROMXCE_LOWER_UPPER_BANKS:
            self._log(f"Configure lower upper banks ${address:x}")
        elif command == ROMXCE_SET_TEMP_BANK:
            self.temp_bank = nibble
            self._log(f"Temp bank set to ${nibble:x}")
        elif command == ROMXCE_MCP7940_SDC:
            self._log(f"Configure MCP7940 ${address:x}")

        if address == ROMXCE_SELECT_TEMP_BANK:
            self.system_bank = self.temp_bank
            self._log(f"System bank set to temp bank ${self.system_bank:x}")
        elif address == ROMXCE_SELECT_MAIN_BANK:
            self.system_bank = self.main_bank
            self._log(f"System bank set to main bank ${self.system_bank:x}")

        if address == GET_DEFAULT_SYSTEM_BANK:
            self._log(f"Peek in ${address:04x}, current system bank {self.system_bank}")
            return self.system_bank
        if address == GET_DEFAULT_TEXT_BANK:
            page = self.cg.page & 0xF
            self._log(f"Peek in ${address:04x}, current text bank {page}")
            return 0x10 + page
        if address == GET_CURRENT_BOOT_DELAY:
            self._log(f"Peek in ${address:04x}, current boot delay {BOOT_DELAY}")
            return BOOT_DELAY
        return None