from loupe.tree import (
    build_tree,
    count_files,
    flatten_tree,
    insert_markers,
    is_single_dir_root,
)


def _rows(rows):
    return [(row.path, row.depth, row.is_dir, row.is_expanded) for row in rows]


def test_build_tree_collapses_duplicate_paths() -> None:
    root = build_tree(["a/b.txt", "a/b.txt"])

    assert list(root.children) == ["a"]
    assert list(root.children["a"].children) == ["b.txt"]
    assert root.children["a"].children["b.txt"].path == "a/b.txt"


def test_leaf_is_promoted_when_reused_as_directory() -> None:
    root = build_tree(["a", "a/b"])

    assert root.children["a"].is_dir
    assert not root.children["a"].children["b"].is_dir


def test_directory_is_not_demoted_by_later_leaf() -> None:
    root = build_tree(["a/b", "a"])

    assert root.children["a"].is_dir


def test_empty_segments_become_nodes() -> None:
    root = build_tree(["a//b", ""])

    assert root.children["a"].children[""].path == "a/"
    assert root.children["a"].children[""].children["b"].path == "a//b"
    assert "" in root.children
    assert not root.children[""].is_dir


def test_insert_markers_creates_directories() -> None:
    root = insert_markers(build_tree(["x.txt", "vendor"]), ["libs/sub", "vendor"])

    assert root.children["libs"].is_dir
    assert root.children["libs"].children["sub"].is_dir
    assert root.children["libs"].children["sub"].path == "libs/sub"
    assert root.children["vendor"].is_dir


def test_flatten_sorts_directories_first_then_by_name() -> None:
    root = build_tree(["b.txt", "a/x", "C/y", "A.txt"])

    rows = flatten_tree(root, 0, False, set(), set())

    assert [row.path for row in rows] == ["C", "a", "A.txt", "b.txt"]


def test_flatten_collapsed_tree_shows_top_level_only() -> None:
    root = build_tree(["src/a.ts", "src/b.ts", "README.md"])

    rows = flatten_tree(root, 0, False, set(), set())

    assert _rows(rows) == [
        ("src", 0, True, False),
        ("README.md", 0, False, False),
    ]
    assert rows[0].file_count == 2
    assert rows[1].file_count is None


def test_flatten_expands_directories_from_expanded_set() -> None:
    root = build_tree(["src/a.ts", "src/b.ts", "README.md"])

    rows = flatten_tree(root, 0, False, {"src"}, set())

    assert _rows(rows) == [
        ("src", 0, True, True),
        ("src/a.ts", 1, False, False),
        ("src/b.ts", 1, False, False),
        ("README.md", 0, False, False),
    ]


def test_single_child_directory_chain_opens_itself() -> None:
    root = build_tree(["a/b/c/file.txt", "top.txt"])
    expanded = {"a"}

    rows = flatten_tree(root, 0, False, expanded, set())

    assert _rows(rows) == [
        ("a", 0, True, True),
        ("a/b", 1, True, True),
        ("a/b/c", 2, True, True),
        ("a/b/c/file.txt", 3, False, False),
        ("top.txt", 0, False, False),
    ]
    assert expanded == {"a"}


def test_single_child_rule_beats_manual_collapse() -> None:
    root = build_tree(["a/b/file.txt", "a/other.txt", "x/only/y.txt"])

    rows = flatten_tree(root, 0, True, set(), {"a", "x/only"})

    assert _rows(rows) == [
        ("a", 0, True, False),
        ("x", 0, True, True),
        ("x/only", 1, True, True),
        ("x/only/y.txt", 2, False, False),
    ]


def test_auto_expand_opens_everything_not_manually_collapsed() -> None:
    root = build_tree(["src/a.ts", "lib/b.ts"])

    rows = flatten_tree(root, 0, True, set(), {"lib"})

    assert _rows(rows) == [
        ("lib", 0, True, False),
        ("src", 0, True, True),
        ("src/a.ts", 1, False, False),
    ]


def test_auto_expand_does_not_touch_expanded_set() -> None:
    root = build_tree(["src/a.ts", "lib/b.ts"])
    expanded: set[str] = set()

    flatten_tree(root, 0, True, expanded, set())

    assert expanded == set()


def test_sub_repository_marker_is_a_leaf_and_never_recurses() -> None:
    root = build_tree(["libs/x.txt", "libs/sub/inner.txt"])
    insert_markers(root, ["libs/sub"])

    rows = flatten_tree(root, 0, False, {"libs", "libs/sub"}, set(), {"libs/sub"})

    assert [(row.path, row.is_dir, row.is_sub_repo) for row in rows] == [
        ("libs", True, False),
        ("libs/sub", False, True),
        ("libs/x.txt", False, False),
    ]
    assert rows[0].file_count == 2


def test_marker_wins_over_single_child_expansion() -> None:
    root = insert_markers(build_tree([]), ["vendor/lib"])

    rows = flatten_tree(root, 0, False, set(), set(), {"vendor/lib"})

    assert [(row.path, row.is_expanded, row.is_sub_repo) for row in rows] == [
        ("vendor", True, False),
        ("vendor/lib", False, True),
    ]
    assert rows[0].file_count == 1


def test_fully_expanded_tree_lists_every_distinct_path_once() -> None:
    paths = [
        "README.md",
        "src/app/main.py",
        "src/app/util.py",
        "src/app/main.py",
        "src/lib.py",
        "docs/index.md",
        "docs/api/ref.md",
    ]

    rows = flatten_tree(build_tree(paths), 0, True, set(), set())
    leaves = [row.path for row in rows if not row.is_dir]

    assert len(leaves) == len(set(paths))
    assert set(leaves) == set(paths)


def test_count_files_counts_markers_as_one() -> None:
    root = insert_markers(
        build_tree(["a/x", "a/b/y", "a/sub/z", "a/sub/w"]), ["a/sub"]
    )

    assert count_files(root.children["a"]) == 4
    assert count_files(root.children["a"], {"a/sub"}) == 3
    assert count_files(root, {"a"}) == 1


def test_is_single_dir_root() -> None:
    assert is_single_dir_root(build_tree(["pkg/a", "pkg/b"]))
    assert not is_single_dir_root(build_tree(["pkg/a", "b"]))
    assert not is_single_dir_root(build_tree(["a"]))
    assert not is_single_dir_root(build_tree([]))
