"""Stable terminal colors for prefixes and sessions.

Two caches with different retention rules live here and are kept apart
on purpose:

- ``PrefixColorMap`` - prefixes are module/component names, a small
  bounded set, so the map only grows and never evicts.
- ``SessionColorCache`` - session ids are numerous and short-lived, so
  entries expire 24 hours after they were last touched.

Colors are indexes into the 256-color ANSI palette.  Both caches step by
16 so that 16 distinct values cycle around the palette; sessions are
offset by 8 so they never share a slot with a prefix.
"""

from __future__ import annotations

import logging
import re
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

SESSION_COLOR_TTL_SECONDS: float = 24 * 60 * 60
COLOR_STEP = 16
SESSION_COLOR_OFFSET = 8
PALETTE_SIZE = 256
SESSION_TAG_LENGTH = 8

_ANSI_ESCAPE = re.compile(r"\x1b\[(\d+(;\d+)*)?m")


def colorize_text(text: str, color: int) -> str:
    """Wrap *text* in a 256-color foreground escape, resetting after."""
    return f"\x1b[38;5;{color}m{text}\x1b[0m"


def strip_colors(text: str) -> str:
    """Remove every SGR escape sequence from *text*."""
    return _ANSI_ESCAPE.sub("", text)


def normalize_prefix(prefix: str) -> str:
    """Reduce a prefix to the id its color is keyed on.

    Instance details after ``@`` or inside a trailing `` (...)`` do not
    change the color:

    >>> normalize_prefix("XCUITestDriver@3fa1 (5c2e)")
    'XCUITestDriver'
    >>> normalize_prefix("  driver (abc)")
    'driver'
    """
    prefix_id = prefix.split("@", 1)[0].strip()
    return prefix_id.split(" (", 1)[0].strip()


class PrefixColorMap:
    """Monotonic map from normalized prefix id to color number."""

    def __init__(self) -> None:
        self._colors: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._colors)

    def __contains__(self, prefix_id: object) -> bool:
        return prefix_id in self._colors

    def color_of(self, prefix_id: str) -> int:
        color = self._colors.get(prefix_id)
        if color is None:
            color = (len(self._colors) * COLOR_STEP) % PALETTE_SIZE
            self._colors[prefix_id] = color
            logger.debug("Assigned color %d to prefix %r", color, prefix_id)
        return color


class SessionColorCache:
    """Session id → color number with sliding expiration.

    Every ``get`` hit and every ``set`` restarts the entry's TTL.
    Entries are kept in last-touched order, so expired ones are always
    at the front and are swept on each access.

    Parameters
    ----------
    ttl:
        Seconds an entry survives without being touched.
    clock:
        Monotonic time source; tests pass a fake one.
    """

    def __init__(
        self,
        ttl: float = SESSION_COLOR_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, tuple[int, float]] = OrderedDict()

    def __len__(self) -> int:
        self._evict_expired(self._clock())
        return len(self._entries)

    def get(self, session_id: str) -> int | None:
        now = self._clock()
        self._evict_expired(now)
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        color = entry[0]
        self._touch(session_id, color, now)
        return color

    def set(self, session_id: str, color: int) -> None:
        now = self._clock()
        self._evict_expired(now)
        self._touch(session_id, color, now)

    def _touch(self, session_id: str, color: int, now: float) -> None:
        self._entries[session_id] = (color, now + self._ttl)
        self._entries.move_to_end(session_id)

    def _evict_expired(self, now: float) -> None:
        while self._entries:
            session_id, (_, expires_at) = next(iter(self._entries.items()))
            if expires_at >= now:
                break
            del self._entries[session_id]


class ColorAssigner:
    """Colors prefixes and session tags for terminal output.

    Parameters
    ----------
    reserved:
        Prefixes that always render in a fixed color, bypassing the
        cyclic assignment (e.g. the library's own logger name).
    session_cache:
        Cache to use for session colors; a default 24h cache otherwise.
    """

    def __init__(
        self,
        reserved: Mapping[str, int] | None = None,
        session_cache: SessionColorCache | None = None,
    ) -> None:
        self.prefix_colors = PrefixColorMap()
        if session_cache is None:
            session_cache = SessionColorCache()
        self.session_colors = session_cache
        self._reserved: dict[str, int] = dict(reserved or {})
        self._session_counter = 0

    @property
    def reserved(self) -> dict[str, int]:
        return dict(self._reserved)

    def set_reserved(self, reserved: Mapping[str, int]) -> None:
        """Replace the reserved prefix → color table."""
        self._reserved = dict(reserved)

    def prefix_color_of(self, prefix: str) -> int:
        """Return the stable color for *prefix* (normalized first)."""
        return self.prefix_colors.color_of(normalize_prefix(prefix))

    def colorize_prefix(self, text: str, prefix: str) -> str:
        """Colorize *text* (usually the bracketed prefix) for *prefix*.

        Reserved prefixes match on the exact, un-normalized value.
        """
        color = self._reserved.get(prefix)
        if color is None:
            color = self.prefix_color_of(prefix)
        return colorize_text(text, color)

    def session_tag(self, session_id: str, no_color: bool = False) -> str:
        """Return ``[xxxxxxxx]`` for *session_id*, colorized unless *no_color*."""
        tag = f"[{session_id[:SESSION_TAG_LENGTH]}]"
        if no_color:
            return tag

        color = self.session_colors.get(session_id)
        if color is None:
            color = (
                self._session_counter * COLOR_STEP + SESSION_COLOR_OFFSET
            ) % PALETTE_SIZE
            self._session_counter += 1
            self.session_colors.set(session_id, color)
        return colorize_text(tag, color)
