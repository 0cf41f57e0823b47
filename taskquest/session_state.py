"""Per-browser-session UI state.

Streamlit's ``st.session_state`` lives as long as the browser tab, like the
sessionStorage it replaces. Helpers here take any mutable mapping so they
can be used with a plain dict in tests.
"""
from __future__ import annotations

from typing import Any, Hashable, MutableMapping

DEFAULT_STEP = 20


def session_value(state: MutableMapping[str, Any], key: str, default: Any) -> Any:
    if key not in state:
        state[key] = default
    return state[key]


class LoadMoreWindow:
    """Reveal a list ``step`` items at a time.

    The window resets whenever ``signature`` (the active filter and sort)
    changes, so switching filters always starts from the top.
    """

    def __init__(self, state: MutableMapping[str, Any], key: str, step: int = DEFAULT_STEP) -> None:
        self._state = state
        self._key = key
        self.step = max(1, int(step))
        session_value(state, key, {"count": self.step, "signature": None})

    @property
    def count(self) -> int:
        return int(self._state[self._key]["count"])

    def sync(self, signature: Hashable) -> None:
        slot = self._state[self._key]
        if slot.get("signature") != signature:
            self._state[self._key] = {"count": self.step, "signature": signature}

    def load_more(self) -> None:
        slot = dict(self._state[self._key])
        slot["count"] = int(slot["count"]) + self.step
        self._state[self._key] = slot

    def visible(self, items):
        return list(items)[: self.count]

    def has_more(self, total: int) -> bool:
        return self.count < total
