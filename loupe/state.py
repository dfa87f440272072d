"""Headless view state for the repository list and the file tree.

Every user interaction is a method call on :class:`ViewState`. Each call
mutates the owned state and re-renders ``items`` from scratch, so a test can
drive the view without a terminal and assert on the display rows.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from loupe.models import (
    EnterSubRepository,
    FlatItem,
    InputFocus,
    NavigateBack,
    OpenFile,
    RepoItem,
    SelectRepository,
    Signal,
    ViewInit,
    ViewMode,
)
from loupe.navigation import first_index, last_file_index, next_index, prev_index
from loupe.search import filter_candidates, filter_repositories
from loupe.tree import (
    AUTO_EXPAND_LIMIT,
    MAX_VISIBLE_ROWS,
    build_tree,
    flatten_tree,
    insert_markers,
    is_single_dir_root,
)

DEBOUNCE_SECONDS = 0.1


def drop_last_token(query: str) -> str:
    parts = query.rstrip().rsplit(None, 1)
    if len(parts) == 2:
        return parts[0]
    return ""


def ancestor_paths(path: str) -> list[str]:
    parts = path.split("/")
    return ["/".join(parts[:index]) for index in range(1, len(parts))]


class ViewState:
    def __init__(
        self,
        *,
        mode: ViewMode = "repos",
        on_signal: Callable[[Signal], None] | None = None,
    ) -> None:
        self.mode: ViewMode = mode
        self.query = ""
        self.repositories: list[RepoItem] = []
        self.files: list[str] = []
        self.sub_repositories: list[str] = []
        self.repository_name = ""
        self.focused_index = -1
        self.expanded_dirs: set[str] = set()
        self.manually_collapsed: set[str] = set()
        self.items: list[FlatItem] = []
        self.match_count = 0
        self.hidden_file_count = 0
        self.input_focus: InputFocus = "search"
        self.scroll_requested = False
        self.signals: list[Signal] = []
        self._on_signal = on_signal
        self._query_token = 0
        self._pending_query = ""

    @property
    def candidate_count(self) -> int:
        if self.mode == "repos":
            return len(self.repositories)
        return len(self.files)

    @property
    def focused_item(self) -> FlatItem | None:
        if 0 <= self.focused_index < len(self.items):
            return self.items[self.focused_index]
        return None

    @property
    def active_query(self) -> str:
        return self.query.strip()

    def load(self, init: ViewInit) -> None:
        """Replace the browsed candidates and reset query and tree state."""
        self.mode = init.mode
        self.repositories = list(init.repositories)
        self.files = list(init.files)
        self.sub_repositories = list(init.sub_repositories)
        self.repository_name = init.repository_name
        self.query = ""
        self._pending_query = ""
        self._query_token += 1
        self.focused_index = -1
        self.expanded_dirs.clear()
        self.manually_collapsed.clear()
        self.input_focus = "search"
        self.render()
        if init.preselect_path:
            self.reveal(init.preselect_path)

    def render(self) -> list[FlatItem]:
        if self.mode == "repos":
            self._render_repositories()
        else:
            self._render_files()
        if self.focused_index >= len(self.items):
            if self.mode == "files":
                self.focused_index = last_file_index(self.items)
            else:
                self.focused_index = len(self.items) - 1
        return self.items

    def _render_repositories(self) -> None:
        filtered = filter_repositories(self.repositories, self.active_query)
        self.items = [
            FlatItem(
                path=repo.path,
                name=repo.label,
                is_dir=False,
                depth=0,
                label=repo.label,
                description=repo.description,
            )
            for repo in filtered
        ]
        self.match_count = len(filtered)
        self.hidden_file_count = 0

    def _render_files(self) -> None:
        query = self.active_query
        filtered = filter_candidates(self.files, query)
        markers = filter_candidates(self.sub_repositories, query)
        tree = insert_markers(build_tree(filtered), markers)
        single_dir = is_single_dir_root(tree)
        # Untracked nested repositories also show up as plain files.
        self.match_count = len(set(filtered) | set(markers))
        auto_expand = bool(query) and (
            self.match_count <= AUTO_EXPAND_LIMIT or single_dir
        )
        rows = flatten_tree(
            tree,
            0,
            auto_expand,
            self.expanded_dirs,
            self.manually_collapsed,
            set(markers),
        )
        if single_dir and len(rows) > MAX_VISIBLE_ROWS:
            rows = rows[:MAX_VISIBLE_ROWS]
            shown = sum(1 for row in rows if not row.is_dir)
            self.hidden_file_count = self.match_count - shown
        else:
            self.hidden_file_count = 0
        self.items = rows

    def request_query(self, text: str) -> int:
        """Record a pending query and return the token that may apply it."""
        self._query_token += 1
        self._pending_query = text
        return self._query_token

    def apply_query(self, token: int) -> bool:
        if token != self._query_token:
            return False
        had_query = bool(self.active_query)
        self.query = self._pending_query
        self.focused_index = -1
        self.manually_collapsed.clear()
        if had_query and not self.active_query:
            self.expanded_dirs.clear()
        self.render()
        if self.active_query:
            self.focused_index = first_index(self.mode, self.items)
            self.render()
        self.scroll_requested = True
        return True

    def set_query(self, text: str) -> None:
        self.apply_query(self.request_query(text))

    def toggle_directory(self, path: str, expand: bool | None = None) -> None:
        if path in self.sub_repositories:
            return
        if expand is None:
            expand = not self._is_expanded(path)
        if expand:
            self.manually_collapsed.discard(path)
            self.expanded_dirs.add(path)
        else:
            self.expanded_dirs.discard(path)
            self.manually_collapsed.add(path)
        self.render()

    def _is_expanded(self, path: str) -> bool:
        for item in self.items:
            if item.path == path:
                return item.is_expanded
        return path in self.expanded_dirs

    def reveal(self, path: str) -> bool:
        """Expand the ancestors of ``path`` and move the cursor onto it."""
        if self.mode != "files":
            return False
        for ancestor in ancestor_paths(path):
            self.manually_collapsed.discard(ancestor)
            self.expanded_dirs.add(ancestor)
        self.render()
        for index, item in enumerate(self.items):
            if item.path == path:
                self.focused_index = index
                return True
        return False

    def activate(self) -> None:
        item = self.focused_item
        if item is None:
            return
        if self.mode == "repos":
            label = item.label or item.name
            self._emit(SelectRepository(path=item.path, label=label))
        elif item.is_sub_repo:
            self._emit(EnterSubRepository(path=item.path))
        elif item.is_dir:
            self.toggle_directory(item.path, not item.is_expanded)
        else:
            self._emit(OpenFile(path=item.path))

    def click(self, index: int) -> None:
        if index < 0 or index >= len(self.items):
            return
        self.focused_index = index
        self.input_focus = "list"
        self.render()
        self.activate()

    def escape(self) -> bool:
        """Handle Escape; returns whether the query text changed."""
        if self.input_focus == "list":
            self.input_focus = "search"
            return False

        # Typed text still waiting on the debounce counts as the query.
        current = self._pending_query
        if current:
            self._replace_query(drop_last_token(current))
            return True
        changed = current != self.query
        if changed:
            self._replace_query("")

        if self.mode == "files":
            self._emit(NavigateBack())
        return changed

    def _replace_query(self, query: str) -> None:
        self.query = query
        self._pending_query = query
        self._query_token += 1
        self.focused_index = -1
        self.manually_collapsed.clear()
        if not self.active_query:
            self.expanded_dirs.clear()
        self.render()

    def key_down(self) -> None:
        self.focused_index = next_index(self.mode, self.items, self.focused_index)
        self.render()

    def key_up(self) -> None:
        first = first_index(self.mode, self.items)
        if self.input_focus == "list" and first != -1 and self.focused_index == first:
            self.focused_index = -1
            self.input_focus = "search"
            self.render()
            return
        self.focused_index = prev_index(self.mode, self.items, self.focused_index)
        self.render()

    def key_right(self) -> bool:
        item = self.focused_item
        if item is None or not item.is_dir or item.is_expanded:
            return False
        self.toggle_directory(item.path, True)
        return True

    def key_left(self) -> bool:
        item = self.focused_item
        if item is None or not item.is_dir or not item.is_expanded:
            return False
        self.toggle_directory(item.path, False)
        return True

    def type_character(self, char: str) -> bool:
        """Send printable input typed on the list back to the search box."""
        if self.input_focus != "list":
            return False
        if len(char) != 1 or not char.isprintable():
            return False
        self.input_focus = "search"
        return True

    def focus_search(self) -> None:
        self.input_focus = "search"

    def focus_list(self) -> None:
        self.input_focus = "list"

    def drain_signals(self) -> list[Signal]:
        signals, self.signals = self.signals, []
        return signals

    def _emit(self, signal: Signal) -> None:
        self.signals.append(signal)
        if self._on_signal is not None:
            self._on_signal(signal)


def repositories_init(repos: Iterable[RepoItem]) -> ViewInit:
    return ViewInit(mode="repos", repositories=tuple(repos))


def files_init(
    repository_name: str,
    files: Iterable[str],
    sub_repositories: Iterable[str] = (),
    *,
    preselect_path: str | None = None,
) -> ViewInit:
    return ViewInit(
        mode="files",
        files=tuple(files),
        sub_repositories=tuple(sub_repositories),
        repository_name=repository_name,
        preselect_path=preselect_path,
    )
