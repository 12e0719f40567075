from __future__ import annotations

from typing import Optional

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import ListItem, Static
from textual.reactive import reactive
from rich.text import Text

from .datamodels import Story
from .errors import MalformedUrlError

STAR_ON = "★"
STAR_OFF = "☆"


# --- UI Widgets ---
class StoryItem(ListItem):
    """One story row. ``starred`` is None when nobody is logged in (no star shown)."""

    def __init__(self, story: Story, starred: Optional[bool] = None, deletable: bool = False):
        super().__init__()
        self.story = story
        self.starred = starred
        self.deletable = deletable

    def compose(self) -> ComposeResult:
        try:
            hostname = self.story.hostname()
        except MalformedUrlError:
            hostname = ""
        with Horizontal(classes="story-container"):
            if self.deletable:
                yield Static("✗", classes="story-delete")
            if self.starred is not None:
                yield Static(STAR_ON if self.starred else STAR_OFF, classes="story-star")
            yield Static(Text(self.story.title), classes="story-title")
            yield Static(Text(f"({hostname})"), classes="story-hostname")
            yield Static(Text(f"by {self.story.author_name}"), classes="story-author")
            yield Static(Text(f"posted by {self.story.submitter_username}"), classes="story-user")


class EmptyListItem(ListItem):
    def __init__(self, message: str):
        super().__init__(disabled=True)
        self.message = message

    def compose(self) -> ComposeResult:
        yield Static(Text(self.message, style="italic"), classes="empty-message")


class StatusBar(Static):
    loading_status = reactive("")
    user_status = reactive("")
    keybinding_hint = reactive("")

    def on_mount(self) -> None:
        self.update_display()

    def set_keybindings(self, hint: str) -> None:
        """Set the keybinding hint text."""
        self.keybinding_hint = hint

    def update_display(self) -> None:
        """Update the status bar display."""
        status_items = []
        if self.user_status:
            status_items.append(self.user_status)

        if self.loading_status:
            status_items.append(self.loading_status)

        if self.keybinding_hint:
            status_items.append(self.keybinding_hint)

        self.update(" | ".join(status_items))

    def watch_loading_status(self, loading_status: str) -> None:
        self.update_display()

    def watch_user_status(self, user_status: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()
