from __future__ import annotations

import textwrap
from pathlib import Path
from rich.markup import escape
from rich.syntax import Syntax
from rich.text import Text

from loupe.models import FlatItem, RepoItem, ViewMode

PREVIEW_MAX_BYTES = 256 * 1024
PREVIEW_MAX_LINES = 400
INDENT = "  "


def format_detail_row(label: str, value: str) -> str:
    return f"{label:<20}{value}"


def format_byte_size(value: int) -> str:
    units = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]
    size = float(value)
    unit = units[0]
    for candidate in units:
        unit = candidate
        if size < 1024.0 or candidate == units[-1]:
            break
        size /= 1024.0

    if unit == "B":
        return f"{value:,} B"
    return f"{size:.1f} {unit} ({value:,} bytes)"


def render_kv_box(rows: list[tuple[str, str]], width: int) -> list[str]:
    if not rows:
        return []
    label_width = max(len(label) for label, _ in rows)
    inner_width = max(30, width - 2)
    value_width = max(10, inner_width - label_width - 3)

    lines = ["╭" + ("─" * inner_width) + "╮"]
    for label, value in rows:
        wrapped = textwrap.wrap(value, width=value_width) or [""]
        lines.append(f"│ {label:<{label_width}} {wrapped[0]:<{value_width}} │")
        for continuation in wrapped[1:]:
            lines.append(f"│ {'':<{label_width}} {continuation:<{value_width}} │")
    lines.append("╰" + ("─" * inner_width) + "╯")
    return lines


def format_repository_row(item: FlatItem) -> Text:
    row = Text("▣ ", style="bold magenta")
    row.append(item.label or item.name)
    if item.description:
        row.append(f"  {item.description}", style="dim")
    return row


def format_tree_row(item: FlatItem) -> Text:
    row = Text(INDENT * item.depth)
    if item.is_sub_repo:
        row.append("  ")
        row.append("▣ ", style="bold magenta")
        row.append(item.name, style="magenta")
        return row

    if item.is_dir:
        row.append("▾ " if item.is_expanded else "▸ ", style="bold")
        row.append(f"{item.name}/", style="bold blue")
        if item.file_count:
            row.append(f" {item.file_count}", style="dim")
        return row

    row.append("  ")
    row.append(item.name)
    return row


def format_row(mode: ViewMode, item: FlatItem) -> Text:
    if mode == "repos":
        return format_repository_row(item)
    return format_tree_row(item)


def empty_message(mode: ViewMode, candidate_count: int) -> str:
    if mode == "repos":
        if candidate_count == 0:
            return "No repositories found"
        return "No matching repositories"
    if candidate_count == 0:
        return "No files loaded"
    return "No matching files"


def hidden_files_message(count: int) -> str:
    return f"… {count:,} more file{'s' if count != 1 else ''}"


def search_placeholder(
    mode: ViewMode, candidate_count: int, repository_name: str
) -> str:
    if mode == "repos":
        return f"Search repositories ({candidate_count:,})"
    return f"Search files in {repository_name} ({candidate_count:,} files)"


def format_status(
    mode: ViewMode, *, match_count: int, candidate_count: int, query: str
) -> str:
    noun = "repositories" if mode == "repos" else "files"
    if not query:
        return f"{candidate_count:,} {noun}. Esc goes back."
    return f"{match_count:,} of {candidate_count:,} {noun} match."


def render_repository_preview(repo: RepoItem, *, content_width: int) -> str:
    rows = [("Label", repo.label), ("Path", repo.path)]
    if repo.description:
        rows.append(("Workspace", repo.description))
    lines = [f"# {escape(repo.label)}", ""]
    lines.extend(render_kv_box([(k, escape(v)) for k, v in rows], content_width))
    lines.extend(["", "Press Enter to browse files."])
    return "\n".join(lines)


def render_directory_preview(item: FlatItem, repository_name: str) -> str:
    lines = [
        f"# {escape(item.path)}/",
        "",
        format_detail_row("Repository", escape(repository_name)),
        format_detail_row("Files", f"{item.file_count or 0:,}"),
        "",
        "Enter or ←/→ collapses and expands.",
    ]
    return "\n".join(lines)


def render_file_preview(path: Path) -> Syntax | str:
    try:
        size = path.stat().st_size
    except OSError as exc:
        return f"# {escape(path.name)}\n\nCannot read file: {escape(str(exc))}"

    try:
        with path.open("rb") as handle:
            data = handle.read(PREVIEW_MAX_BYTES)
    except OSError as exc:
        return f"# {escape(path.name)}\n\nCannot read file: {escape(str(exc))}"

    if b"\0" in data:
        return (
            f"# {escape(path.name)}\n\n"
            + format_detail_row("Size", format_byte_size(size))
            + "\n\nBinary file, no preview."
        )

    text = data.decode("utf-8", errors="replace")
    lines = text.splitlines()[:PREVIEW_MAX_LINES]
    return Syntax(
        "\n".join(lines),
        Syntax.guess_lexer(str(path), code=text),
        line_numbers=True,
        word_wrap=False,
    )
