from datetime import datetime

from a2emu.upd1990 import (
    COMMAND_REG_HOLD,
    COMMAND_REG_SHIFT,
    COMMAND_TIME_READ,
    MicroPD1990ac,
)


def select_command(chip, command):
    chip.clock_in(False, False, command, False)
    chip.clock_in(False, True, command, False)


def shift_out(chip, count=40):
    select_command(chip, COMMAND_REG_SHIFT)
    bits = []
    for _ in range(count):
        bits.append(chip.out())
        chip.clock_in(True, True, COMMAND_REG_SHIFT, False)
        chip.clock_in(False, True, COMMAND_REG_SHIFT, False)
    return sum(1 << i for i, bit in enumerate(bits) if bit)


def test_load_time_layout():
    chip = MicroPD1990ac()
    # 17 May 2023 was a Wednesday.
    chip.load_time(datetime(2023, 5, 17, 12, 34, 56))
    assert shift_out(chip) == 0x5317123456


def test_sunday_is_zero():
    chip = MicroPD1990ac()
    chip.load_time(datetime(2023, 5, 21, 0, 0, 0))
    assert (shift_out(chip) >> 32) & 0xF == 0


def test_forty_shifts_rotate_back():
    chip = MicroPD1990ac()
    chip.load_time(datetime(2024, 12, 31, 23, 59, 58))
    before = chip.register
    shift_out(chip)
    assert chip.register == before


def test_no_shift_without_shift_command():
    chip = MicroPD1990ac()
    chip.load_time(datetime(2024, 1, 2, 3, 4, 5))
    before = chip.register
    select_command(chip, COMMAND_REG_HOLD)
    chip.clock_in(True, True, COMMAND_REG_HOLD, False)
    assert chip.register == before


def test_shift_only_on_clock_rise():
    chip = MicroPD1990ac()
    chip.register = 0b10
    select_command(chip, COMMAND_REG_SHIFT)
    chip.clock_in(True, True, COMMAND_REG_SHIFT, False)
    chip.clock_in(True, True, COMMAND_REG_SHIFT, False)
    assert chip.register == 0b1
    assert chip.out() is True


def test_time_read_command_loads_bcd_time():
    chip = MicroPD1990ac()
    select_command(chip, COMMAND_TIME_READ)
    value = shift_out(chip)
    month = value >> 36
    assert 1 <= month <= 12
    digits = [(value >> shift) & 0xF for shift in range(0, 32, 4)]
    assert all(digit < 10 for digit in digits)