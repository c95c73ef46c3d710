import pytest

from a2emu.io_page import SS_ON, IoC0Page, IoFlag
from a2emu.memory import MemoryRange
from a2emu.videoterm import BLACK, WHITE, VidexVideoterm

LIGHT = (0, 255, 0, 255)


def program(card, **regs):
    for name, value in regs.items():
        card.write_switch(0, int(name[1:]))
        card.write_switch(1, value)


def make_card(char_gen=None, **kwargs):
    rom = MemoryRange(0xC800, bytearray(i & 0xFF for i in range(0x400)), "rom")
    if char_gen is None:
        char_gen = bytearray(0x800)
    return VidexVideoterm(rom, bytes(char_gen), **kwargs)


def test_short_character_map_is_rejected():
    rom = MemoryRange(0xC800, bytearray(0x400), "rom")
    with pytest.raises(ValueError):
        VidexVideoterm(rom, bytes(0x7FF))


def test_peek_below_sram_reads_rom():
    card = make_card()
    assert card.peek(0xC810) == 0x10
    assert card.peek(0xCBFF) == 0xFF


def test_sram_pages_are_selected_by_switch_index():
    card = make_card()
    card.read_switch(4)
    card.poke(0xCC10, 0x5A)
    assert card.peek(0xCC10) == 0x5A
    assert card.sram[0x210] == 0x5A
    card.read_switch(0)
    assert card.peek(0xCC10) == 0


def test_above_sram_reads_zero_and_ignores_writes():
    card = make_card()
    card.poke(0xCE00, 0x12)
    assert card.peek(0xCE00) == 0
    assert not any(card.sram)


def test_controller_registers_through_switches():
    card = make_card()
    card.write_switch(0, 14)
    card.write_switch(1, 0x12)
    assert card.read_switch(1) == 0x12
    assert card.read_switch(0) == 0


def test_soft_switch_active_follows_text_and_annunciator():
    io = IoC0Page()
    card = make_card(io=io)
    assert card.is_soft_switch_active() is False
    io.soft_switches_data[IoFlag.TEXT] = SS_ON
    assert card.is_soft_switch_active() is False
    io.soft_switches_data[IoFlag.ANNUNCIATOR0] = SS_ON
    assert card.is_soft_switch_active() is True


def test_always_show():
    assert make_card(always_show=True).is_soft_switch_active() is True


def test_get_text_trims_trailing_spaces():
    card = make_card()
    program(card, r1=4, r6=2)
    for offset, byte in enumerate(b"AB  CD E"):
        card.poke(0xCC00 + offset, byte)
    assert card.get_text() == "AB\nCD E\n"


def test_empty_geometry_gives_placeholder():
    img = make_card().build_image(LIGHT)
    assert img.size == (3, 3)
    assert img.getpixel((1, 1)) == WHITE


def _glyph_card(**kwargs):
    cg = bytearray(0x800)
    cg[0x41 << 4] = 0x80
    card = make_card(cg, **kwargs)
    card.poke(0xCC00, 0x41)
    card.poke(0xCC01, 0xC1)
    return card


def test_build_image_draws_glyphs_and_inverse():
    card = _glyph_card()
    program(card, r1=2, r6=1, r9=7, r10=0x20, r5=1)
    img = card.build_image(LIGHT)
    assert img.size == (16, 9)
    assert img.getpixel((0, 0)) == LIGHT
    assert img.getpixel((1, 0)) == BLACK
    assert img.getpixel((8, 0)) == BLACK
    assert img.getpixel((9, 0)) == LIGHT
    assert img.getpixel((0, 1)) == BLACK
    assert img.getpixel((8, 1)) == LIGHT
    assert img.getpixel((0, 8)) == BLACK


def test_fixed_cursor_inverts():
    card = _glyph_card()
    program(card, r1=2, r6=1, r9=7, r10=0x00, r11=0x00)
    img = card.build_image(LIGHT)
    assert img.getpixel((0, 0)) == BLACK
    assert img.getpixel((1, 0)) == LIGHT
    assert img.getpixel((0, 1)) == BLACK


@pytest.mark.parametrize("seconds, inverted", [(0.9, True), (0.1, False)])
def test_slow_cursor_blinks_with_clock(seconds, inverted):
    card = _glyph_card(clock=lambda: seconds)
    program(card, r1=2, r6=1, r9=7, r10=0x60, r11=0x00)
    img = card.build_image(LIGHT)
    assert img.getpixel((1, 0)) == (LIGHT if inverted else BLACK)