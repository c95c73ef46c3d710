"""Apple II emulator components: memory map, soft switches, clocks, 80 column cards, FujiNet JSON and configuration."""

__version__ = "0.1.0"