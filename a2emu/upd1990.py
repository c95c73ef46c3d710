"""NEC uPD1990AC serial calendar clock, as used by the ThunderClock+ card."""

from __future__ import annotations

from datetime import datetime

COMMAND_REG_HOLD = 0
COMMAND_REG_SHIFT = 1
COMMAND_TIME_SET = 2
COMMAND_TIME_READ = 3

_REGISTER_BITS = 40


def _bcd(value: int) -> int:
    return ((value // 10) << 4) | (value % 10)


class MicroPD1990ac:
    """The 40 bit shift register of the clock chip and its control lines.

    The register holds, from the top: month (binary), day of week,
    day of month, hour, minute and second, each day/time field in BCD.
    """

    def __init__(self) -> None:
        self.clock = False
        self.strobe = False
        self.command = COMMAND_REG_HOLD
        self.register = 0

    def clock_in(self, clock: bool, strobe: bool, command: int, data_in: bool) -> None:
        """Update the input lines, acting on rising edges of STB and CLK."""
        clock_raise = clock and not self.clock
        strobe_raise = strobe and not self.strobe
        self.clock = clock
        self.strobe = strobe

        if strobe_raise:
            self.command = command
            if command == COMMAND_TIME_READ:
                self.load_time()
            # Other commands, such as setting the time, are ignored.

        if clock_raise and self.command == COMMAND_REG_SHIFT:
            lsb = self.register & 1
            self.register = (self.register >> 1) | (lsb << (_REGISTER_BITS - 1))

    def out(self) -> bool:
        """Return the data output line: the lowest bit of the register."""
        return bool(self.register & 1)

    def load_time(self, now: datetime | None = None) -> None:
        """Load ``now`` (the host time by default) into the shift register."""
        if now is None:
            now = datetime.now()
        weekday = now.isoweekday() % 7  # Sunday is 0
        register = now.month
        for nibble_pair in (now.day, now.hour, now.minute, now.second):
            pass
        register = (register << 4) | weekday
        for field in (now.day, now.hour, now.minute, now.second):
            register = (register << 8) | _bcd(field)
        self.register = register