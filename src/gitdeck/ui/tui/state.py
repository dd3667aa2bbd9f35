"""Shell state: pure data, NO Textual imports.

File: src/gitdeck/ui/tui/state.py

Owns the view ring, per-view input modes, key values and the bounded message
log. Views and the shell controller mutate these; widgets only read snapshots.
"""

from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Final

from gitdeck.constants import DEFAULT_MESSAGE_CAPACITY

if TYPE_CHECKING:
    from collections.abc import Iterator

# ---------------------------------------------------------------------------
# View ring
# ---------------------------------------------------------------------------


class ViewName(enum.Enum):
    """Views in the order the view-switch key cycles through them."""

    STATUS = "Status"
    LOG = "Log"
    BRANCH = "Branch"
    COMMIT = "Commit"
    HELP = "Help"

    def next(self) -> ViewName:
        index = VIEW_ORDER.index(self)
        return VIEW_ORDER[(index + 1) % len(VIEW_ORDER)]


VIEW_ORDER: Final[tuple[ViewName, ...]] = tuple(ViewName)


class InputMode(enum.Enum):
    """Input state of the active view's state machine."""

    NORMAL = "normal"
    AWAITING_FILE_CONFIRM = "awaiting_file_confirm"
    CREATING_BRANCH = "creating_branch"
    DELETING_BRANCH = "deleting_branch"
    WRITING_COMMIT = "writing_commit"
    LISTING = "listing"
    SHOWING_DETAIL = "showing_detail"


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class KeyPress:
    """One key event: Textual key name plus the printable character, if any."""

    key: str
    character: str | None = None

    @classmethod
    def char(cls, character: str) -> KeyPress:
        return cls(key=character, character=character)

    @property
    def printable(self) -> str | None:
        if self.character and len(self.character) == 1 and self.character.isprintable():
            return self.character
        return None


# ---------------------------------------------------------------------------
# Message log
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Message:
    """A single line in the message pane."""

    text: str
    sequence: int
    timestamp: str = field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))

    @property
    def line(self) -> str:
        return f"[{self.timestamp}] {self.text}"


class MessageLog:
    """Capacity-bounded ring of messages; the oldest is evicted first."""

    def __init__(self, capacity: int = DEFAULT_MESSAGE_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("message capacity must be >= 1")
        self._items: deque[Message] = deque(maxlen=capacity)
        self._sequence = 0

    @property
    def capacity(self) -> int:
        return self._items.maxlen or 0

    @property
    def total_appended(self) -> int:
        return self._sequence

    def append(self, text: str) -> Message:
        self._sequence += 1
        message = Message(text=text, sequence=self._sequence)
        self._items.append(message)
        return message

    def texts(self) -> list[str]:
        return [message.text for message in self._items]

    def __iter__(self) -> Iterator[Message]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Render snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ViewSnapshot:
    """What a view wants drawn in the main region."""

    title: str
    lines: tuple[str, ...]
    selected: int | None = None
    prompt: str | None = None


__all__ = [
    "InputMode",
    "KeyPress",
    "Message",
    "MessageLog",
    "VIEW_ORDER",
    "ViewName",
    "ViewSnapshot",
]
