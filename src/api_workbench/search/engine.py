"""Find-in-response search with match highlighting.

The engine keeps two texts: the unannotated ``original_text`` captured when a
search starts, and the displayed ``text`` which may carry highlight markers.
Match offsets are always computed against ``original_text``; markers change
the text length, so offsets taken from the displayed text would drift.

Highlighting is a pure function of (original text, query, positions, current
index) and is recomputed in full on every navigation step.
"""

from enum import Enum

CURRENT_OPEN, CURRENT_CLOSE = "【", "】"
OTHER_OPEN, OTHER_CLOSE = "〔", "〕"


class SearchState(str, Enum):
    IDLE = "idle"
    QUERYING = "querying"
    NAVIGATING = "navigating"


def _fold(text: str) -> str:
    # lower-case char by char so offsets line up with the input
    return "".join(c.lower() if len(c.lower()) == 1 else c for c in text)


def find_matches(text: str, query: str) -> list[int]:
    """Offsets of case-insensitive, non-overlapping occurrences of ``query``."""
    if not query:
        return []
    haystack = _fold(text)
    needle = _fold(query)
    positions = []
    start = 0
    while True:
        idx = haystack.find(needle, start)
        if idx == -1:
            break
        positions.append(idx)
        start = idx + len(needle)
    return positions


def render_matches(text: str, query: str, positions: list[int], current: int) -> str:
    """Wrap each match in markers; the one at ``current`` gets its own pair."""
    result = text
    offset = 0
    for i, pos in enumerate(positions):
        start = pos + offset
        end = start + len(query)
        if end > len(result):
            continue
        if i == current:
            marked = CURRENT_OPEN + result[start:end] + CURRENT_CLOSE
        else:
            marked = OTHER_OPEN + result[start:end] + OTHER_CLOSE
        result = result[:start] + marked + result[end:]
        offset += len(marked) - len(query)
    return result


class ResponseSearch:
    """Search state for one response view.

    Owned by the session; every new response must go through ``show`` so
    stale matches never outlive the text they were computed for.
    """

    def __init__(self, text: str = ""):
        self._text = text
        self._original: str | None = None
        self._query = ""
        self._positions: list[int] = []
        self._current = -1

    @property
    def text(self) -> str:
        """The displayed text, possibly annotated."""
        return self._text

    @property
    def original_text(self) -> str | None:
        return self._original

    @property
    def query(self) -> str:
        return self._query

    @property
    def positions(self) -> list[int]:
        return list(self._positions)

    @property
    def current_index(self) -> int:
        return self._current

    @property
    def match_count(self) -> int:
        return len(self._positions)

    @property
    def state(self) -> SearchState:
        if not self._query:
            return SearchState.IDLE
        if self._positions:
            return SearchState.NAVIGATING
        return SearchState.QUERYING

    @property
    def copy_text(self) -> str:
        """What "copy response" should put on the clipboard: never annotated."""
        return self._text if self._original is None else self._original

    @property
    def current_line(self) -> int:
        """0-based line of the current match, or -1 when there is none."""
        if self._current < 0 or self._original is None:
            return -1
        return self._original.count("\n", 0, self._positions[self._current])

    def show(self, text: str) -> None:
        """Display a fresh response body and forget any search on the old one."""
        self._reset()
        self._text = text

    def search(self, query: str) -> str:
        query = query.strip()
        if not query:
            return self.clear()

        if query == self._query:
            # re-submitting the active query steps to the next match
            if self._positions:
                self.next()
            return self._text

        if self._original is None:
            self._original = self._text
        self._query = query
        self._positions = find_matches(self._original, query)
        if self._positions:
            self._goto(0)
        else:
            self._current = -1
            self._text = self._original
        return self._text

    def next(self) -> bool:
        if not self._positions:
            return False
        self._goto((self._current + 1) % len(self._positions))
        return True

    def previous(self) -> bool:
        if not self._positions:
            return False
        idx = self._current - 1
        if idx < 0:
            idx = len(self._positions) - 1
        self._goto(idx)
        return True

    def clear(self) -> str:
        if self._original is not None:
            self._text = self._original
        self._reset()
        return self._text

    def _goto(self, index: int) -> None:
        self._current = index
        self._text = render_matches(self._original, self._query, self._positions, index)

    def _reset(self) -> None:
        self._original = None
        self._query = ""
        self._positions = []
        self._current = -1
