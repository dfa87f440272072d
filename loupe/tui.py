from __future__ import annotations

import os
from collections.abc import Coroutine, Iterable
from functools import partial
from pathlib import Path
from typing import Any

from loguru import logger
from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.timer import Timer
from textual.widgets import Input, OptionList, Static
from textual.widgets.option_list import Option

from loupe.discovery import (
    DEFAULT_MAX_DEPTH,
    find_repository_for_path,
    load_files_and_sub_repositories,
    scan_repositories,
)
from loupe.editor import launch_editor
from loupe.models import (
    EnterSubRepository,
    FlatItem,
    NavigateBack,
    OpenFile,
    RepoItem,
    SelectRepository,
    Signal,
)
from loupe.rendering import (
    empty_message,
    format_row,
    format_status,
    hidden_files_message,
    render_directory_preview,
    render_file_preview,
    render_repository_preview,
    search_placeholder,
)
from loupe.state import DEBOUNCE_SECONDS, ViewState, files_init, repositories_init


class SearchInput(Input):
    BINDINGS = [
        Binding("down", "app.cursor_down", show=False),
        Binding("up", "app.cursor_up", show=False),
    ]


class BrowserList(OptionList):
    BINDINGS = [
        Binding("down", "app.cursor_down", show=False),
        Binding("up", "app.cursor_up", show=False),
        Binding("right", "app.expand", show=False),
        Binding("left", "app.collapse", show=False),
        Binding("enter", "app.activate", show=False),
    ]


class LoupeTui(App[None]):
    CSS_PATH = "loupe.tcss"
    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [
        Binding("ctrl+f", "focus_search", "Search"),
        Binding("ctrl+r", "reload", "Reload"),
        Binding("escape", "escape", "Back", show=False),
        Binding("ctrl+c", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        roots: Iterable[str] = (".",),
        max_depth: int = DEFAULT_MAX_DEPTH,
        initial_file: str | None = None,
    ) -> None:
        super().__init__()
        self.theme = "rose-pine"
        self._roots = [os.path.abspath(root) for root in roots] or [os.getcwd()]
        self._max_depth = max_depth
        self._initial_file = initial_file
        self._state = ViewState(on_signal=self._handle_signal)
        self._repositories: list[RepoItem] = []
        self._repositories_scanned = False
        self._context_stack: list[RepoItem] = []
        self._query_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="body"):
            with Vertical(id="sidebar"):
                yield Static("Repositories", id="sidebar-title")
                yield SearchInput(placeholder="Scanning...", id="search")
                yield BrowserList(id="sidebar-list")
                yield Static("Scanning for repositories...", id="status")
            with Vertical(id="main-panel"):
                yield Static("Select a repository in the sidebar.", id="preview")

    async def on_mount(self) -> None:
        self.query_one("#search", SearchInput).focus()
        if self._initial_file is not None:
            self.run_worker(
                self._open_initial_file(self._initial_file),
                group="discovery",
                exclusive=True,
                exit_on_error=False,
            )
            return
        self.run_worker(
            self._show_repositories(rescan=True),
            group="discovery",
            exclusive=True,
            exit_on_error=False,
        )

    @property
    def _current_repository(self) -> RepoItem | None:
        if not self._context_stack:
            return None
        return self._context_stack[-1]

    async def _scan_repositories(self) -> None:
        self._set_status("Scanning for repositories...")
        self._repositories = await scan_repositories(self._roots, self._max_depth)
        self._repositories_scanned = True

    async def _show_repositories(self, *, rescan: bool = False) -> None:
        if rescan or not self._repositories_scanned:
            await self._scan_repositories()
        self._context_stack.clear()
        self._state.load(repositories_init(self._repositories))
        self.query_one("#sidebar-title", Static).update("Repositories")
        self._after_load()

    async def _open_repository(
        self, repo: RepoItem, *, preselect_path: str | None = None
    ) -> None:
        self._set_status(f"Loading {repo.label}...")
        files, sub_repositories = await load_files_and_sub_repositories(
            repo.path, self._max_depth
        )
        logger.info(
            "Opened repository",
            operation="open_repository",
            repo=repo.path,
            files=len(files),
            sub_repositories=len(sub_repositories),
        )
        self._state.load(
            files_init(
                repo.label, files, sub_repositories, preselect_path=preselect_path
            )
        )
        self.query_one("#sidebar-title", Static).update(f"Files: {repo.label}")
        self._after_load()

    async def _open_initial_file(self, file_path: str) -> None:
        await self._scan_repositories()
        repo = find_repository_for_path(self._repositories, file_path)
        if repo is None:
            self.notify(
                f"No repository contains {file_path}",
                title="Open",
                severity="warning",
            )
            await self._show_repositories()
            return
        absolute = os.path.abspath(file_path)
        relative = Path(os.path.relpath(absolute, repo.path)).as_posix()
        self._context_stack[:] = [repo]
        await self._open_repository(repo, preselect_path=relative)

    def _after_load(self) -> None:
        self._cancel_query_timer()
        search = self.query_one("#search", SearchInput)
        search.value = ""
        search.placeholder = search_placeholder(
            self._state.mode,
            self._state.candidate_count,
            self._state.repository_name,
        )
        self._sync_view()
        search.focus()

    def _set_status(self, message: str) -> None:
        self.query_one("#status", Static).update(message)

    def _cancel_query_timer(self) -> None:
        if self._query_timer is not None:
            self._query_timer.stop()
            self._query_timer = None

    def _sync_view(self) -> None:
        state = self._state
        option_list = self.query_one("#sidebar-list", BrowserList)
        option_list.clear_options()
        if state.items:
            option_list.add_options(
                [format_row(state.mode, item) for item in state.items]
            )
            if state.hidden_file_count:
                hidden = hidden_files_message(state.hidden_file_count)
                option_list.add_option(Option(hidden, disabled=True))
        else:
            message = empty_message(state.mode, state.candidate_count)
            option_list.add_option(Option(message, disabled=True))

        if state.focused_item is not None:
            option_list.highlighted = state.focused_index
            if state.scroll_requested:
                option_list.scroll_to_highlight()
        state.scroll_requested = False

        status = format_status(
            state.mode,
            match_count=state.match_count,
            candidate_count=state.candidate_count,
            query=state.active_query,
        )
        self._set_status(status)
        self._update_preview(state.focused_item)
        self._apply_input_focus()

    def _apply_input_focus(self) -> None:
        if self._state.input_focus == "search":
            search = self.query_one("#search", SearchInput)
            if self.focused is not search:
                search.focus()

    def _capture_input_focus(self) -> None:
        if isinstance(self.focused, BrowserList):
            self._state.focus_list()
        else:
            self._state.focus_search()

    def _update_preview(self, item: FlatItem | None) -> None:
        preview = self.query_one("#preview", Static)
        if item is None:
            preview.update(
                "Select a repository in the sidebar."
                if self._state.mode == "repos"
                else "Select a file in the sidebar."
            )
            return
        if self._state.mode == "repos":
            repo = RepoItem(
                path=item.path,
                label=item.label or item.name,
                description=item.description or "",
            )
            preview.update(
                render_repository_preview(
                    repo, content_width=self._main_panel_content_width()
                )
            )
            return

        if item.is_sub_repo:
            preview.update(
                f"# {escape(item.path)}\n\n"
                "Nested repository. Press Enter to browse its files."
            )
            return
        if item.is_dir:
            preview.update(
                render_directory_preview(item, self._state.repository_name)
            )
            return

        current = self._current_repository
        if current is None:
            return
        preview.update(render_file_preview(Path(current.path) / item.path))

    def _main_panel_content_width(self) -> int:
        main_panel = self.query_one("#main-panel", Vertical)
        return max(50, main_panel.size.width - 6)

    def _handle_signal(self, signal: Signal) -> None:
        if isinstance(signal, OpenFile):
            self._open_file(signal.path)
        elif isinstance(signal, SelectRepository):
            repo = self._find_repository(signal.path, signal.label)
            self._context_stack[:] = [repo]
            self._run_discovery(self._open_repository(repo))
        elif isinstance(signal, EnterSubRepository):
            parent = self._current_repository
            if parent is None:
                return
            repo = RepoItem(
                path=os.path.join(parent.path, signal.path),
                label=f"{parent.label}/{signal.path}",
                description=parent.description,
            )
            self._context_stack.append(repo)
            self._run_discovery(self._open_repository(repo))
        elif isinstance(signal, NavigateBack):
            self._navigate_back()

    def _find_repository(self, path: str, label: str) -> RepoItem:
        for repo in self._repositories:
            if repo.path == path:
                return repo
        return RepoItem(path=path, label=label)

    def _navigate_back(self) -> None:
        if self._context_stack:
            self._context_stack.pop()
        parent = self._current_repository
        if parent is not None:
            self._run_discovery(self._open_repository(parent))
            return
        self._run_discovery(self._show_repositories())

    def _run_discovery(self, work: Coroutine[Any, Any, None]) -> None:
        self.run_worker(
            work,
            group="discovery",
            exclusive=True,
            exit_on_error=False,
        )

    def _open_file(self, relative_path: str) -> None:
        current = self._current_repository
        if current is None:
            return
        target = Path(current.path) / relative_path
        logger.debug("Opening file", operation="open_file", path=str(target))
        error = launch_editor(target, self.suspend)
        if error is not None:
            self.notify(error, title="Open", severity="warning")

    def _apply_query(self, token: int) -> None:
        self._query_timer = None
        if self._state.apply_query(token):
            self._sync_view()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "search":
            return
        if event.value == self._state.query and self._query_timer is None:
            return
        token = self._state.request_query(event.value)
        self._cancel_query_timer()
        self._query_timer = self.set_timer(
            DEBOUNCE_SECONDS, partial(self._apply_query, token)
        )

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "search":
            return
        event.stop()
        self.action_activate()

    def on_option_list_option_highlighted(
        self, event: OptionList.OptionHighlighted
    ) -> None:
        if event.option_list.id != "sidebar-list":
            return
        if event.option_index < 0 or event.option_index >= len(self._state.items):
            return
        if event.option_index != self._state.focused_index:
            self._state.focused_index = event.option_index
            self._update_preview(self._state.focused_item)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_list.id != "sidebar-list":
            return
        if event.option_index < 0 or event.option_index >= len(self._state.items):
            return
        self._state.click(event.option_index)
        self._sync_view()

    def action_cursor_down(self) -> None:
        self._capture_input_focus()
        self._state.key_down()
        self._sync_view()

    def action_cursor_up(self) -> None:
        self._capture_input_focus()
        self._state.key_up()
        self._sync_view()

    def action_expand(self) -> None:
        if self._state.key_right():
            self._sync_view()

    def action_collapse(self) -> None:
        if self._state.key_left():
            self._sync_view()

    def action_activate(self) -> None:
        self._capture_input_focus()
        self._state.activate()
        self._sync_view()

    def action_escape(self) -> None:
        self._capture_input_focus()
        if self._state.escape():
            self._cancel_query_timer()
            search = self.query_one("#search", SearchInput)
            search.value = self._state.query
            search.cursor_position = len(search.value)
            self._sync_view()
            return
        self._apply_input_focus()

    def action_focus_search(self) -> None:
        self._state.focus_search()
        self._apply_input_focus()

    def action_reload(self) -> None:
        current = self._current_repository
        if current is not None:
            self._run_discovery(self._open_repository(current))
            return
        self._run_discovery(self._show_repositories(rescan=True))

    def on_key(self, event: Key) -> None:
        if not isinstance(self.focused, BrowserList):
            return
        character = event.character
        if character is None or event.key in {"enter", "escape", "tab"}:
            return
        self._state.focus_list()
        if not self._state.type_character(character):
            return
        search = self.query_one("#search", SearchInput)
        search.focus()
        search.value += character
        search.cursor_position = len(search.value)
        event.stop()
