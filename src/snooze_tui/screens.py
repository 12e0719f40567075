from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
)

from .datamodels import validate_story_input
from .errors import InvalidStoryDataError


class LoginScreen(Screen):
    """Log in or create an account. Dismisses with a dict, or None when cancelled."""

    BINDINGS = [
        Binding("escape", "cancel", "Back"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="login-form", classes="form"):
            yield Label("Username", classes="form-label")
            yield Input(placeholder="username", id="login-username")
            yield Label("Password", classes="form-label")
            yield Input(placeholder="password", password=True, id="login-password")
            yield Label("Name (sign up only)", classes="form-label")
            yield Input(placeholder="display name", id="login-name")
            with Horizontal(classes="form-buttons"):
                yield Button("Log in", id="login-button", variant="primary")
                yield Button("Sign up", id="signup-button")
                yield Button("Cancel", id="cancel-button")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "Log in"
        self.query_one("#login-username", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel-button":
            self.dismiss(None)
            return

        username = self.query_one("#login-username", Input).value.strip()
        password = self.query_one("#login-password", Input).value
        name = self.query_one("#login-name", Input).value.strip()
        if not username or not password:
            self.app.notify("Username and password are required.", severity="error")
            return

        if event.button.id == "signup-button":
            if not name:
                self.app.notify("Please enter a name to sign up.", severity="error")
                return
            self.dismiss(
                {"mode": "signup", "username": username, "password": password, "name": name}
            )
        elif event.button.id == "login-button":
            self.dismiss({"mode": "login", "username": username, "password": password})

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "login-password":
            self.query_one("#login-button", Button).press()

    def action_cancel(self) -> None:
        self.dismiss(None)


class SubmitStoryScreen(Screen):
    """Collect title, author and url for a new story."""

    BINDINGS = [
        Binding("escape", "cancel", "Back"),
    ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="submit-form", classes="form"):
            yield Label("Title", classes="form-label")
            yield Input(placeholder="title", id="create-title")
            yield Label("Author", classes="form-label")
            yield Input(placeholder="author", id="create-author")
            yield Label("URL", classes="form-label")
            yield Input(placeholder="https://", id="create-url")
            with Horizontal(classes="form-buttons"):
                yield Button("Submit", id="submit-button", variant="primary")
                yield Button("Cancel", id="cancel-button")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "Submit a story"
        self.query_one("#create-title", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel-button":
            self.dismiss(None)
        elif event.button.id == "submit-button":
            self.submit()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "create-url":
            self.submit()

    def submit(self) -> None:
        title = self.query_one("#create-title", Input).value.strip()
        author = self.query_one("#create-author", Input).value.strip()
        url = self.query_one("#create-url", Input).value.strip()
        if not title or not author or not url:
            self.app.notify("Please fill in all fields.", severity="error")
            return
        try:
            validate_story_input(title, author, url)
        except InvalidStoryDataError as e:
            self.app.notify(str(e), severity="error")
            return
        self.dismiss({"title": title, "author": author, "url": url})

    def action_cancel(self) -> None:
        self.dismiss(None)
