"""Path hierarchy construction and flattening into display rows."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from loupe.models import FlatItem, TreeNode

AUTO_EXPAND_LIMIT = 100
MAX_VISIBLE_ROWS = 100


def _walk(root: TreeNode, parts: list[str], *, leaf_is_dir: bool) -> None:
    current = root
    last = len(parts) - 1
    for index, part in enumerate(parts):
        is_dir = leaf_is_dir or index < last
        child = current.children.get(part)
        if child is None:
            child = TreeNode(
                name=part,
                path="/".join(parts[: index + 1]),
                is_dir=is_dir,
            )
            current.children[part] = child
        elif is_dir:
            child.is_dir = True
        current = child


def build_tree(paths: Iterable[str]) -> TreeNode:
    """Build a node graph from slash-delimited paths.

    A final segment starts out as a leaf and is promoted to a directory once
    another path walks through it. Directories are never demoted.
    """
    root = TreeNode(name="", path="", is_dir=True)
    for path in paths:
        _walk(root, path.split("/"), leaf_is_dir=False)
    return root


def insert_markers(root: TreeNode, marker_paths: Iterable[str]) -> TreeNode:
    for marker in marker_paths:
        _walk(root, marker.split("/"), leaf_is_dir=True)
    return root


def sorted_children(node: TreeNode) -> list[TreeNode]:
    return sorted(
        node.children.values(), key=lambda child: (not child.is_dir, child.name)
    )


def count_files(node: TreeNode, sub_repo_markers: Collection[str] = ()) -> int:
    total = 0
    for child in node.children.values():
        if child.path in sub_repo_markers or not child.is_dir:
            total += 1
        else:
            total += count_files(child, sub_repo_markers)
    return total


def is_single_dir_root(root: TreeNode) -> bool:
    if len(root.children) != 1:
        return False
    (child,) = root.children.values()
    return child.is_dir


def flatten_tree(
    node: TreeNode,
    depth: int,
    auto_expand: bool,
    expanded_dirs: set[str],
    manually_collapsed: Collection[str],
    sub_repo_markers: Collection[str] = (),
) -> list[FlatItem]:
    rows: list[FlatItem] = []
    _flatten_into(
        rows,
        node,
        depth,
        auto_expand=auto_expand,
        expanded_dirs=expanded_dirs,
        manually_collapsed=manually_collapsed,
        sub_repo_markers=sub_repo_markers,
    )
    return rows


def _flatten_into(
    rows: list[FlatItem],
    node: TreeNode,
    depth: int,
    *,
    auto_expand: bool,
    expanded_dirs: set[str],
    manually_collapsed: Collection[str],
    sub_repo_markers: Collection[str],
) -> None:
    children = sorted_children(node)
    only_child_is_dir = len(children) == 1 and children[0].is_dir
    for child in children:
        if child.path in sub_repo_markers:
            rows.append(
                FlatItem(
                    path=child.path,
                    name=child.name,
                    is_dir=False,
                    depth=depth,
                    is_sub_repo=True,
                )
            )
            continue

        if not child.is_dir:
            rows.append(
                FlatItem(path=child.path, name=child.name, is_dir=False, depth=depth)
            )
            continue

        # A lone child directory always opens; this beats a manual collapse.
        if only_child_is_dir:
            expanded = True
        elif auto_expand:
            expanded = child.path not in manually_collapsed
        else:
            expanded = child.path in expanded_dirs

        rows.append(
            FlatItem(
                path=child.path,
                name=child.name,
                is_dir=True,
                depth=depth,
                is_expanded=expanded,
                file_count=count_files(child, sub_repo_markers),
            )
        )
        if not expanded:
            continue
        _flatten_into(
            rows,
            child,
            depth + 1,
            auto_expand=auto_expand,
            expanded_dirs=expanded_dirs,
            manually_collapsed=manually_collapsed,
            sub_repo_markers=sub_repo_markers,
        )
