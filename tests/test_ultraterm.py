import pytest

from a2emu.memory import MemoryRange
from a2emu.ultraterm import DEFAULT_VIDEO_ATTRIBUTE, VidexUltraterm
from a2emu.videoterm import BLACK, WHITE

LIGHT = (255, 255, 255, 255)


def program(card, **regs):
    for name, value in regs.items():
        card.write_switch(0, int(name[1:]))
        card.write_switch(1, value)


def make_card(char_gen=None, **kwargs):
    rom = MemoryRange(0xC800, bytearray((i * 3) & 0xFF for i in range(0x800)), "rom")
    if char_gen is None:
        char_gen = bytearray(0x1000)
    return VidexUltraterm(rom, bytes(char_gen), **kwargs)


def test_short_character_map_is_rejected():
    rom = MemoryRange(0xC800, bytearray(0x800), "rom")
    with pytest.raises(ValueError):
        VidexUltraterm(rom, bytes(0xFFF))


def test_default_attribute():
    card = make_card()
    assert card.video_attribute == DEFAULT_VIDEO_ATTRIBUTE
    assert card.read_switch(3) == DEFAULT_VIDEO_ATTRIBUTE


def test_sram_address_512_mode_uses_page_from_read():
    card = make_card()
    card.read_switch(4)
    assert card.sram_page_512 == 1
    assert card.sram_address(0xCC05) == 0x005 + 512


def test_sram_address_256_mode_uses_mode_control_page():
    card = make_card()
    card.write_switch(2, 0x10 | 3)
    assert card.sram_address(0xCC05) == 0x05 + 3 * 256


def test_poke_peek_round_trip_and_firmware_overlay():
    card = make_card()
    card.poke(0xCC20, 0x77)
    assert card.peek(0xCC20) == 0x77
    card.write_switch(2, 0x80)
    assert card.peek(0xCC20) == card.rom.peek(0xCC20)


def test_rom_below_sram_and_writes_ignored():
    card = make_card()
    card.poke(0xC900, 0x11)
    assert card.peek(0xC900) == card.rom.peek(0xC900)
    assert not any(card.sram)


def test_mode_control_round_trip_and_video_signal():
    card = make_card()
    assert card.is_soft_switch_active() is False
    card.write_switch(6, 0x40)
    assert card.read_switch(2) == 0x40
    assert card.is_soft_switch_active() is True
    assert make_card(always_show=True).is_soft_switch_active() is True


def test_colors_default_attributes_are_inverse_of_each_other():
    card = make_card()
    lower_clear, lower_set = card.colors_per_attributes(False, LIGHT)
    upper_clear, upper_set = card.colors_per_attributes(True, LIGHT)
    assert lower_clear == BLACK
    assert (upper_clear, upper_set) == (lower_set, lower_clear)
    assert all(c < 255 for c in lower_set[:3])


def test_colors_highlight_uses_full_light():
    card = make_card()
    card.write_switch(3, 0x01)
    assert card.colors_per_attributes(False, LIGHT) == (BLACK, LIGHT)


def test_get_text():
    card = make_card()
    program(card, r1=3, r6=2)
    for offset, byte in enumerate(b"HI OK "):
        card.poke(0xCC00 + offset, byte)
    assert card.get_text() == "HI\nOK\n"


def test_empty_geometry_gives_placeholder():
    img = make_card().build_image(LIGHT)
    assert img.size == (3, 3)
    assert img.getpixel((1, 1)) == WHITE


def test_build_image_ninth_column():
    cg = bytearray(0x1000)
    cg[2048 + (0x01 << 4)] = 0x01
    cg[2048 + (0x41 << 4)] = 0x01
    card = make_card(cg)
    card.write_switch(3, 0x11)
    program(card, r1=2, r6=1, r9=7, r10=0x20, r5=1)
    card.poke(0xCC00, 0x01)
    card.poke(0xCC01, 0x41)
    img = card.build_image(LIGHT)
    assert img.size == (18, 9)
    assert img.getpixel((0, 0)) == BLACK
    assert img.getpixel((7, 0)) == LIGHT
    assert img.getpixel((8, 0)) == LIGHT
    assert img.getpixel((16, 0)) == LIGHT
    assert img.getpixel((17, 0)) == BLACK
    assert img.getpixel((0, 8)) == (0, 0, 0, 0)


def test_alternate_character_set():
    cg = bytearray(0x1000)
    cg[0x01 << 4] = 0x80
    card = make_card(cg)
    card.write_switch(3, 0x15)
    program(card, r1=1, r6=1, r9=7, r10=0x20)
    card.poke(0xCC00, 0x01)
    img = card.build_image(LIGHT)
    assert img.getpixel((0, 0)) == LIGHT
    assert img.getpixel((1, 0)) == BLACK


def test_fixed_cursor_inverts():
    card = make_card()
    card.write_switch(3, 0x11)
    program(card, r1=1, r6=1, r9=7, r10=0x00, r11=0x00)
    img = card.build_image(LIGHT)
    assert img.getpixel((0, 0)) == LIGHT
    assert img.getpixel((0, 1)) == BLACK