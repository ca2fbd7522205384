"""Materialized-path generation and inspection for the resource hierarchy.

A path is a dot-separated sequence of labels (``root.team.r1700000000123``).
Each label must match ``^[a-zA-Z][a-zA-Z0-9_]*$`` so the column stays
compatible with Postgres ltree, which rejects labels starting with a digit.

New labels are ``"r" + <integer>``. The integer starts from the wall-clock
millisecond but is strictly increasing within a process: when two labels are
requested in the same millisecond (or the clock steps backwards) the previous
value plus one is used instead.
"""

from __future__ import annotations

import re
import threading
import time

LABEL_PREFIX = "r"
PATH_SEPARATOR = "."
ROOT_SENTINELS = frozenset({"", "/"})

_LABEL_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*")


class LabelSequence:
    """Monotonic millisecond-based label source.

    Args:
        clock: Callable returning epoch milliseconds (injectable for tests).
    """

    def __init__(self, clock=None) -> None:
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._last = 0
        self._lock = threading.Lock()

    def next_value(self) -> int:
        with self._lock:
            value = max(int(self._clock()), self._last + 1)
            self._last = value
            return value

    def next_label(self) -> str:
        return f"{LABEL_PREFIX}{self.next_value()}"


_default_sequence = LabelSequence()


def is_root_sentinel(parent_path: str | None) -> bool:
    """True when parent_path means "no parent" (None, empty, or "/")."""
    return parent_path is None or parent_path in ROOT_SENTINELS


def generate_path(parent_path: str | None = None, sequence: LabelSequence | None = None) -> str:
    """Return a new path one level below parent_path.

    The parent is concatenated verbatim; ancestor existence and syntax are
    not checked here.
    """
    label = (sequence or _default_sequence).next_label()
    if is_root_sentinel(parent_path):
        return label
    return f"{parent_path}{PATH_SEPARATOR}{label}"


def is_valid_label(label: str) -> bool:
    return _LABEL_RE.fullmatch(label) is not None


def is_valid_path(path: str) -> bool:
    return bool(path) and all(is_valid_label(p) for p in path.split(PATH_SEPARATOR))


def path_depth(path: str) -> int:
    return len(path.split(PATH_SEPARATOR))


def parent_path_of(path: str) -> str | None:
    """Parent path, or None for a root-level node."""
    parts = path.split(PATH_SEPARATOR)
    if len(parts) <= 1:
        return None
    return PATH_SEPARATOR.join(parts[:-1])


def is_descendant_path(path: str, ancestor: str) -> bool:
    """True when path lies strictly below ancestor."""
    return path.startswith(ancestor + PATH_SEPARATOR)
