"""A queue based keyboard provider."""

from __future__ import annotations

import queue
from collections.abc import Callable
from typing import Optional

_MAC_OPTION_CHARS = "ı•£‰⁄‘’≈œæ€®†¥øπå∫∂ƒ™¶§∑©√ßµ„…≤≥çñŒÆ€‡∏ﬂ¯ˇ˘‹›◊˙˚˝"
_MAC_OPTION_SUBST = "!·$%/()=qwertyopasdfghjkxcvbm,.<>cnQWETPGJKLZXVNM\""

_MAC_SUBSTITUTIONS: dict[str, str] = {}
for _option_char, _plain_char in zip(_MAC_OPTION_CHARS, _MAC_OPTION_SUBST):
    _MAC_SUBSTITUTIONS.setdefault(_option_char, _plain_char)

QUEUE_SIZE = 100


class KeyboardChannel:
    """Keys typed by the host, waiting to be read by the emulated machine."""

    def __init__(self, force_caps: Optional[Callable[[], bool]] = None) -> None:
        self._keys: queue.Queue[int] = queue.Queue(maxsize=QUEUE_SIZE)
        self._force_caps = force_caps if force_caps is not None else (lambda: False)

    def put_text(self, text: str) -> None:
        """Queue every character of ``text``."""
        for ch in text:
            self.put_rune(ch)

    def put_rune(self, ch: str) -> None:
        """Queue a character if it is, or maps to, printable ASCII."""
        # Option-key characters produced by Mac keyboards
        ch = _MAC_SUBSTITUTIONS.get(ch, ch)
        if " " <= ch <= "~":
            if self._force_caps() and "a" <= ch <= "z":
                ch = ch.upper()
            self.put_char(ord(ch))

    def put_char(self, ch: int) -> None:
        """Queue a raw key code, waiting while the queue is full."""
        self._keys.put(ch & 0xFF)

    def get_key(self, strobe: bool) -> Optional[int]:
        """Return the next key, or None when no key is waiting."""
        try:
            return self._keys.get_nowait()
        except queue.Empty:
            return None