"""The character generator ROM holding the text mode glyph bitmaps."""

from __future__ import annotations

from collections.abc import Callable

ColumnMap = Callable[[int], int]

PAGE_SIZE_2PLUS = 2048
PAGE_SIZE_2E = 2048 * 2
PAGE_SIZE_BASIS108 = 1024


def _check_column(column: int) -> None:
    if column < 0:
        raise ValueError(f"column {column} must not be negative")


def columns_map_2plus(column: int) -> int:
    """Bit of the ROM byte for a screen column on the II+ (reversed)."""
    _check_column(column)
    return 6 - column


def columns_map_2e(column: int) -> int:
    """Bit of the ROM byte for a screen column on the IIe (same order)."""
    _check_column(column)
    return column


class CharacterGenerator:
    """Glyph rows of eight bytes per character, split into switchable pages."""

    def __init__(self, data: bytes, column_map: ColumnMap, page_size: int) -> None:
        self.column_map = column_map
        self.page_size = page_size
        self.page = 0
        self.data = b""
        self.load(data)

    def load(self, data: bytes) -> None:
        """Replace the ROM contents; it must hold at least one page."""
        if len(data) < self.page_size:
            raise ValueError("character ROM size not supported")
        self.data = bytes(data)

    @property
    def pages(self) -> int:
        return len(self.data) // self.page_size

    def set_page(self, page: int) -> None:
        """Select a code page, wrapping around the available ones."""
        self.page = page % self.pages

    def next_page(self) -> None:
        self.set_page(self.page + 1)

    def get_pixel(self, char: int, row: int, column: int) -> bool:
        """Whether the pixel at ``row`` and ``column`` of ``char`` is lit."""
        row_pos = (char * 8 + row) % self.page_size
        bits = self.data[row_pos + self.page * self.page_size]
        bit = self.column_map(column)
        if not 0 <= bit < 8:
            return False
        return (bits >> bit) & 1 == 1


def setup_character_generator(board: str, data: bytes) -> CharacterGenerator:
    """Build the character generator used by ``board``."""
    page_size = PAGE_SIZE_2PLUS
    initial_page = 0
    if board == "2plus":
        column_map = columns_map_2plus
    elif board == "basis108":
        column_map = columns_map_2plus
        page_size = PAGE_SIZE_BASIS108
        initial_page = 2
    elif board == "2e":
        column_map = columns_map_2e
        page_size = PAGE_SIZE_2E
    else:
        raise ValueError(
            f"board {board} not supported it must be '2plus', '2e' or 'basis108'"
        )
    generator = CharacterGenerator(data, column_map, page_size)
    generator.set_page(initial_page)
    return generator