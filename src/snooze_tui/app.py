from __future__ import annotations

import logging
import webbrowser
from typing import Any, Dict, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import (
    Header,
    ListView,
    TabbedContent,
    TabPane,
)
from textual.worker import Worker, WorkerState

from .config import UI_DEFAULTS
from .context import AppContext
from .datamodels import Story
from .errors import SessionStateError
from .screens import LoginScreen, SubmitStoryScreen
from .widgets import EmptyListItem, StatusBar, StoryItem

logger = logging.getLogger("snooze")

LIST_FOR_TAB = {
    "stories-tab": "#stories-list",
    "favorites-tab": "#favorites-list",
    "own-tab": "#own-list",
}


class SnoozeApp(App):
    TITLE = "Hack or Snooze"
    SUB_TITLE = "Stories worth a snooze"

    CSS_PATH = "app.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("f", "toggle_favorite", "Favorite"),
        Binding("d", "delete_story", "Delete"),
        Binding("n", "submit_story", "New story"),
        Binding("l", "log_in", "Log in"),
        Binding("u", "log_out", "Log out"),
        Binding("o", "open_in_browser", "Open"),
    ]

    def __init__(
        self,
        context: AppContext,
        theme: Optional[str] = None,
        config: Optional[dict[str, Any]] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.context = context
        self._theme_name = theme or "dracula"
        self.config = config or {}

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent(id="tabs"):
            with TabPane("Stories", id="stories-tab"):
                yield ListView(id="stories-list")
            with TabPane("Favorites", id="favorites-tab"):
                yield ListView(id="favorites-list")
            with TabPane("My Stories", id="own-tab"):
                yield ListView(id="own-list")
        yield StatusBar()

    def on_mount(self) -> None:
        self.main_screen = self.screen
        if self._theme_name in self.available_themes:
            self.theme = self._theme_name
        else:
            logger.warning("Theme %s not available, keeping default.", self._theme_name)

        keybindings_text = self.config.get("ui", {}).get(
            "statusbar_keybindings", UI_DEFAULTS["statusbar_keybindings"]
        )
        status = self.main_screen.query_one(StatusBar)
        status.set_keybindings(keybindings_text.format(color="$accent"))
        status.loading_status = "Loading stories..."
        self.run_worker(
            self._start_up, name="startup", thread=True, exit_on_error=False
        )

    def _start_up(self) -> None:
        self.context.resume()
        self.context.load_feed()

    # --- rendering ---
    def _render_lists(self) -> None:
        """Rebuild the three lists from the current snapshots."""
        session = self.context.session if self.context.is_authenticated else None
        feed = self.context.feed.stories

        self._fill_list("#stories-list", feed, "No stories yet.")
        if session is None:
            self._fill_list("#favorites-list", (), "Log in to see your favorites.")
            self._fill_list("#own-list", (), "Log in to see your stories.")
        else:
            self._fill_list("#favorites-list", session.favorite_stories, "No favorites here.")
            self._fill_list(
                "#own-list",
                session.authored_stories,
                "There aren't any stories here yet... Why not submit one?",
                deletable=True,
            )
        status = self.main_screen.query_one(StatusBar)
        status.user_status = f"@{session.username}" if session else "not logged in"

    def _fill_list(
        self, selector: str, stories, empty_message: str, deletable: bool = False
    ) -> None:
        session = self.context.session if self.context.is_authenticated else None
        view = self.main_screen.query_one(selector, ListView)
        view.clear()
        if not stories:
            view.append(EmptyListItem(empty_message))
            return
        for story in stories:
            starred = session.is_favorite(story) if session else None
            view.append(StoryItem(story, starred=starred, deletable=deletable))

    def _selected_story(self) -> Optional[Story]:
        active = self.main_screen.query_one(TabbedContent).active
        selector = LIST_FOR_TAB.get(active)
        if not selector:
            return None
        item = self.main_screen.query_one(selector, ListView).highlighted_child
        if not isinstance(item, StoryItem):
            return None
        if active != "stories-tab":
            return item.story
        # the feed may have been reloaded since this list was drawn
        story = self.context.feed.find(item.story.id)
        if story is None:
            self.notify("That story is no longer in the feed.", severity="warning")
            self._render_lists()
        return story

    # --- workers ---
    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        name = getattr(event.worker, "name", None)
        if event.state is WorkerState.SUCCESS:
            self._handle_success(name, getattr(event.worker, "result", None))
        elif event.state is WorkerState.ERROR:
            self._handle_error(name, getattr(event.worker, "error", None))

    def _handle_success(self, name: Optional[str], result: Any) -> None:
        status = self.main_screen.query_one(StatusBar)
        if name in ("startup", "feed_loader"):
            status.loading_status = ""
        elif name == "auth" and result is not None:
            self.notify(f"Welcome, {result.display_name}!")
        elif name == "create" and result is not None:
            self.notify(f"Submitted \"{result.title}\".")
        elif name == "delete":
            self.notify("Story deleted.")
        self._render_lists()

    def _handle_error(self, name: Optional[str], error: Optional[BaseException]) -> None:
        status = self.main_screen.query_one(StatusBar)
        if name in ("startup", "feed_loader"):
            status.loading_status = "Error loading stories."
        if error:
            logger.error("Worker %s failed: %s", name, error)
            self.notify(str(error), severity="error")
        else:
            logger.error("Worker %s failed with no specific error.", name)
            self.notify("Something went wrong.", severity="error")
        # favorites may have been rolled back
        self._render_lists()

    # --- actions ---
    def action_refresh(self) -> None:
        self.main_screen.query_one(StatusBar).loading_status = "Loading stories..."
        self.run_worker(
            self.context.load_feed, name="feed_loader", thread=True, exit_on_error=False
        )

    def action_toggle_favorite(self) -> None:
        story = self._selected_story()
        if story is None:
            return
        try:
            session = self.context.require_session()
        except SessionStateError as e:
            self.notify(str(e), severity="warning")
            return
        self.run_worker(
            lambda: session.toggle_favorite(story),
            name="favorite",
            thread=True,
            exit_on_error=False,
        )

    def action_delete_story(self) -> None:
        if self.main_screen.query_one(TabbedContent).active != "own-tab":
            return
        story = self._selected_story()
        if story is None:
            return
        try:
            session = self.context.require_session()
        except SessionStateError as e:
            self.notify(str(e), severity="warning")
            return
        feed = self.context.feed
        self.run_worker(
            lambda: feed.remove(session, story.id),
            name="delete",
            thread=True,
            exit_on_error=False,
        )

    def action_submit_story(self) -> None:
        if not self.context.is_authenticated:
            self.notify("You need to log in first.", severity="warning")
            return
        self.push_screen(SubmitStoryScreen(), self.on_story_form_closed)

    def on_story_form_closed(self, data: Optional[Dict[str, str]]) -> None:
        if not data:
            return
        session = self.context.require_session()
        feed = self.context.feed
        self.run_worker(
            lambda: feed.create(session, data["title"], data["author"], data["url"]),
            name="create",
            thread=True,
            exit_on_error=False,
        )

    def action_log_in(self) -> None:
        if self.context.is_authenticated:
            self.notify(f"Already logged in as {self.context.session.username}.")
            return
        self.push_screen(LoginScreen(), self.on_login_form_closed)

    def on_login_form_closed(self, data: Optional[Dict[str, str]]) -> None:
        if not data:
            return
        def attempt():
            if data["mode"] == "signup":
                return self.context.sign_up(data["username"], data["password"], data["name"])
            return self.context.log_in(data["username"], data["password"])

        self.run_worker(attempt, name="auth", thread=True, exit_on_error=False)

    def action_log_out(self) -> None:
        if not self.context.is_authenticated:
            return
        self.context.log_out()
        self.notify("Logged out.")
        self._render_lists()

    def action_open_in_browser(self) -> None:
        story = self._selected_story()
        if story is not None:
            webbrowser.open(story.url)
