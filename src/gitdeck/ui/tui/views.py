"""Per-view interactive state machines, NO Textual imports.

File: src/gitdeck/ui/tui/views.py

Each view owns its ephemeral input state, interprets keys, calls the workflow
engine at most once per confirmed action and reports the outcome to the shared
message log. Rendering produces a :class:`ViewSnapshot` that the Textual layer
draws.
"""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, ClassVar, Final

from gitdeck.engine.errors import GitDeckError
from gitdeck.ui.tui.state import InputMode, KeyPress, MessageLog, ViewName, ViewSnapshot

if TYPE_CHECKING:
    from gitdeck.engine.models import CommitDetail, CommitRecord
    from gitdeck.engine.workflow import WorkflowEngine

logger = logging.getLogger(__name__)

STAGE_PROMPT: Final[str] = "Press 'Enter' to stage selected file or 'Esc' to cancel."
CLEAN_TREE_TEXT: Final[str] = "Nothing to commit, working tree clean."

HELP_LINES: Final[tuple[str, ...]] = (
    "Help Menu",
    "",
    "General:",
    "  - q: Quit application",
    "  - Tab: Switch between views",
    "  - Up/Down: Move the selection",
    "",
    "Status View:",
    "  - a: Stage the selected file (Enter to confirm, Esc to cancel)",
    "",
    "Log View:",
    "  - Enter: Show commit details (Esc to close)",
    "  - r: Refresh commit logs",
    "",
    "Branch View:",
    "  - c: Create a new branch",
    "  - d: Delete a branch by name",
    "  - Enter: Switch to the selected branch",
    "",
    "Commit View:",
    "  - c: Write a commit message (Enter to commit, Esc to cancel)",
    "",
    "Help View:",
    "  - h: Toggle this key reference",
)
HELP_HINT: Final[str] = "Press 'h' to show the key reference."


class InteractiveView(abc.ABC):
    """Common shape of every view: ``render``, ``handle_input`` and ``refresh``."""

    name: ClassVar[ViewName]
    title: ClassVar[str]
    subject: ClassVar[str] = "items"
    initial_mode: ClassVar[InputMode] = InputMode.NORMAL

    def __init__(self, engine: WorkflowEngine, messages: MessageLog) -> None:
        self.engine = engine
        self.messages = messages
        self.mode = self.initial_mode
        self.items: list[str] = []
        self.selected = 0
        self.error: str | None = None

    @abc.abstractmethod
    def handle_input(self, key: KeyPress) -> None:
        """Interpret one key in the current mode."""

    def refresh(self) -> None:
        """Re-derive ``items`` from the engine, replacing previous content."""
        try:
            items = self._load()
        except GitDeckError as exc:
            logger.warning("view refresh failed", extra={"error": str(exc)})
            self.items = []
            self.error = f"Error fetching {self.subject}: {exc}"
        else:
            self.items = items
            self.error = None
        self._clamp_selection()

    def render(self) -> ViewSnapshot:
        if self.error is not None:
            return ViewSnapshot(title=self.title, lines=(self.error,))
        if not self.items:
            return ViewSnapshot(title=self.title, lines=(self.empty_text(),))
        return ViewSnapshot(title=self.title, lines=tuple(self.items), selected=self.selected)

    def empty_text(self) -> str:
        return f"No {self.subject}."

    def _load(self) -> list[str]:
        return []

    def _say(self, text: str) -> None:
        self.messages.append(text)

    def _move_selection(self, key: KeyPress) -> bool:
        if key.key == "down":
            if self.selected < max(len(self.items) - 1, 0):
                self.selected += 1
            return True
        if key.key == "up":
            if self.selected > 0:
                self.selected -= 1
            return True
        return False

    def _clamp_selection(self) -> None:
        if len(self.items) <= self.selected:
            self.selected = max(len(self.items) - 1, 0)


class _TextEntryMixin:
    """Single-line text buffer edited by printable keys and Backspace."""

    buffer: str = ""

    def _edit_buffer(self, key: KeyPress) -> bool:
        if key.key == "backspace":
            self.buffer = self.buffer[:-1]
            return True
        character = key.printable
        if character is not None:
            self.buffer += character
            return True
        return False


class StatusView(InteractiveView):
    name = ViewName.STATUS
    title = "Status"
    subject = "status"

    def _load(self) -> list[str]:
        return [entry.line for entry in self.engine.status_entries()]

    def empty_text(self) -> str:
        return CLEAN_TREE_TEXT

    def render(self) -> ViewSnapshot:
        snapshot = super().render()
        if self.mode is InputMode.AWAITING_FILE_CONFIRM:
            return ViewSnapshot(
                title=snapshot.title,
                lines=snapshot.lines,
                selected=snapshot.selected,
                prompt=STAGE_PROMPT,
            )
        return snapshot

    def handle_input(self, key: KeyPress) -> None:
        if self.mode is InputMode.AWAITING_FILE_CONFIRM:
            if key.key == "enter":
                self._stage_selected()
                self.mode = InputMode.NORMAL
            elif key.key == "escape":
                self.mode = InputMode.NORMAL
                self._say("Cancelled staging files.")
            return

        if key.character == "a":
            self.mode = InputMode.AWAITING_FILE_CONFIRM
            self._say(STAGE_PROMPT)
            return
        self._move_selection(key)

    def _stage_selected(self) -> None:
        if not 0 <= self.selected < len(self.items):
            self._say("No file selected to stage.")
            return

        # Status lines are "<code> <path>"; the path may itself contain spaces.
        _, _, path = self.items[self.selected].partition(" ")
        try:
            self.engine.add_files([path])
        except GitDeckError as exc:
            self._say(f"Failed to stage '{path}': {exc}")
        else:
            self._say(f"Staged file '{path}'.")
        self.refresh()


class BranchView(_TextEntryMixin, InteractiveView):
    name = ViewName.BRANCH
    title = "Branches"
    subject = "branches"

    def _load(self) -> list[str]:
        return [branch.label for branch in self.engine.list_branches()]

    def render(self) -> ViewSnapshot:
        if self.mode is InputMode.CREATING_BRANCH:
            return ViewSnapshot(
                title="Create New Branch", lines=(self.buffer,), prompt="Enter new branch name:"
            )
        if self.mode is InputMode.DELETING_BRANCH:
            return ViewSnapshot(
                title="Delete Branch", lines=(self.buffer,), prompt="Enter branch name to delete:"
            )
        return super().render()

    def handle_input(self, key: KeyPress) -> None:
        if self.mode in (InputMode.CREATING_BRANCH, InputMode.DELETING_BRANCH):
            self._handle_text_mode(key)
            return

        if key.character == "c":
            self.mode = InputMode.CREATING_BRANCH
            self.buffer = ""
            self._say("Enter new branch name:")
        elif key.character == "d":
            if self.items:
                self.mode = InputMode.DELETING_BRANCH
                self.buffer = ""
                self._say("Enter branch name to delete:")
            else:
                self._say("No branches available to delete.")
        elif key.key == "enter":
            self._switch_to_selected()
        else:
            self._move_selection(key)

    def _handle_text_mode(self, key: KeyPress) -> None:
        creating = self.mode is InputMode.CREATING_BRANCH
        if key.key == "escape":
            self.mode = InputMode.NORMAL
            self.buffer = ""
            self._say("Branch creation cancelled." if creating else "Branch deletion cancelled.")
            return
        if key.key != "enter":
            self._edit_buffer(key)
            return

        name = self.buffer.strip()
        if not name:
            self._say("Branch name cannot be empty.")
        elif creating:
            try:
                self.engine.create_branch(name)
            except GitDeckError as exc:
                self._say(f"Failed to create branch: {exc}")
            else:
                self._say(f"Branch '{name}' created.")
            self.refresh()
        else:
            try:
                self.engine.delete_branch(name)
            except GitDeckError as exc:
                self._say(f"Failed to delete branch: {exc}")
            else:
                self._say(f"Branch '{name}' deleted.")
            self.refresh()
        self.mode = InputMode.NORMAL
        self.buffer = ""

    def _switch_to_selected(self) -> None:
        if not self.items:
            return
        name = self.items[self.selected].strip().removeprefix("* ").strip()
        try:
            self.engine.switch_branch(name)
        except GitDeckError as exc:
            self._say(f"Failed to switch branch: {exc}")
        else:
            self._say(f"Switched to branch '{name}'.")
        self.refresh()


class CommitView(_TextEntryMixin, InteractiveView):
    name = ViewName.COMMIT
    title = "Commit"

    def refresh(self) -> None:
        return None

    def render(self) -> ViewSnapshot:
        if self.mode is InputMode.WRITING_COMMIT:
            return ViewSnapshot(
                title="Commit Message",
                lines=(self.buffer,),
                prompt="Enter: commit | Esc: cancel",
            )
        return ViewSnapshot(title=self.title, lines=("Press 'c' to write a commit message.",))

    def handle_input(self, key: KeyPress) -> None:
        if self.mode is not InputMode.WRITING_COMMIT:
            if key.character == "c":
                self.mode = InputMode.WRITING_COMMIT
                self.buffer = ""
                self._say("Enter your commit message below.")
            return

        if key.key == "escape":
            self.mode = InputMode.NORMAL
            self.buffer = ""
            self._say("Commit cancelled.")
            return
        if key.key != "enter":
            self._edit_buffer(key)
            return

        message = self.buffer.strip()
        if not message:
            self._say("Commit message cannot be empty.")
            return
        try:
            self.engine.commit_changes(message)
        except GitDeckError as exc:
            self._say(f"Failed to commit: {exc}")
        else:
            self._say(f"Committed with message: '{message}'")
        self.buffer = ""
        self.mode = InputMode.NORMAL


class LogView(InteractiveView):
    name = ViewName.LOG
    title = "Commit Log"
    subject = "commit log"
    initial_mode = InputMode.LISTING

    def __init__(self, engine: WorkflowEngine, messages: MessageLog) -> None:
        super().__init__(engine, messages)
        self.commits: list[CommitRecord] = []
        self.detail: CommitDetail | None = None

    def _load(self) -> list[str]:
        self.commits = self.engine.list_commits()
        return [
            f"{commit.id} {commit.author} [{commit.date}] - {commit.summary}"
            for commit in self.commits
        ]

    def refresh(self) -> None:
        super().refresh()
        if self.error is not None:
            self.commits = []

    def empty_text(self) -> str:
        return "No commits yet."

    def render(self) -> ViewSnapshot:
        if self.detail is None:
            return super().render()
        detail = self.detail
        lines = (
            f"Commit ID: {detail.id}",
            f"Author: {detail.author}",
            f"Date: {detail.date}",
            "",
            "Message:",
            *detail.message.splitlines(),
            "",
            "Parents:",
            ", ".join(detail.parents),
        )
        return ViewSnapshot(title="Commit Details", lines=lines, prompt="Esc: back to log")

    def handle_input(self, key: KeyPress) -> None:
        if self.mode is InputMode.SHOWING_DETAIL:
            if key.key == "escape":
                self.detail = None
                self.mode = InputMode.LISTING
            return

        if key.key == "enter":
            if self.commits and self.selected < len(self.commits):
                # Failures propagate to the shell, which reports them.
                self.detail = self.engine.commit_detail(self.commits[self.selected].id)
                self.mode = InputMode.SHOWING_DETAIL
        elif key.character == "r":
            self.refresh()
            self._say("Commit logs refreshed.")
        else:
            self._move_selection(key)


class HelpView(InteractiveView):
    name = ViewName.HELP
    title = "Help"

    def __init__(self, engine: WorkflowEngine, messages: MessageLog) -> None:
        super().__init__(engine, messages)
        self.visible = False

    def refresh(self) -> None:
        return None

    def render(self) -> ViewSnapshot:
        if self.visible:
            return ViewSnapshot(title=self.title, lines=HELP_LINES)
        return ViewSnapshot(title=self.title, lines=(HELP_HINT,))

    def handle_input(self, key: KeyPress) -> None:
        if key.character == "h":
            self.visible = not self.visible


def build_views(engine: WorkflowEngine, messages: MessageLog) -> dict[ViewName, InteractiveView]:
    """Instantiate one view per ring position."""
    views: tuple[InteractiveView, ...] = (
        StatusView(engine, messages),
        LogView(engine, messages),
        BranchView(engine, messages),
        CommitView(engine, messages),
        HelpView(engine, messages),
    )
    return {view.name: view for view in views}


__all__ = [
    "BranchView",
    "CLEAN_TREE_TEXT",
    "CommitView",
    "HELP_HINT",
    "HELP_LINES",
    "HelpView",
    "InteractiveView",
    "LogView",
    "STAGE_PROMPT",
    "StatusView",
    "build_views",
]
