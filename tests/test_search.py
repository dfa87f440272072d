from loupe.models import RepoItem
from loupe.search import (
    filter_candidates,
    filter_repositories,
    matches,
    parse_tokens,
)

PATHS = [
    "src/a.ts",
    "src/b.ts",
    "README.md",
    "docs/guide/intro.md",
    "tests/test_api.py",
]


def test_parse_tokens_lowercases_and_drops_empty_tokens() -> None:
    assert parse_tokens("  Foo\tBAR  baz ") == ["foo", "bar", "baz"]
    assert parse_tokens("   ") == []


def test_tokens_consume_matched_characters() -> None:
    assert matches("aa", "a a")
    assert not matches("a", "a a")
    assert matches("src/a.ts", "a ts")
    assert not matches("src/b.ts", "a ts")


def test_matching_ignores_case() -> None:
    assert matches("README.md", "readme MD")
    assert matches("readme.md", "README")


def test_token_order_does_not_matter_without_overlap() -> None:
    assert matches("docs/guide/intro.md", "intro docs")
    assert matches("docs/guide/intro.md", "docs intro")


def test_empty_query_keeps_every_candidate() -> None:
    assert filter_candidates(PATHS, "") == PATHS
    assert filter_candidates(PATHS, "   ") == PATHS


def test_filter_preserves_candidate_order() -> None:
    candidates = ["z/ts.md", "a.ts", "m/ts", "nothing"]

    assert filter_candidates(candidates, "ts") == ["z/ts.md", "a.ts", "m/ts"]


def test_adding_tokens_only_narrows_results() -> None:
    broad = filter_candidates(PATHS, "s")
    narrow = filter_candidates(PATHS, "s ts")

    assert set(narrow) <= set(broad)
    assert narrow == ["src/a.ts", "src/b.ts", "tests/test_api.py"]


def test_scenario_query_matches_single_file() -> None:
    assert filter_candidates(["src/a.ts", "src/b.ts", "README.md"], "a ts") == [
        "src/a.ts"
    ]


def test_repository_filter_searches_label_and_description() -> None:
    repos = [
        RepoItem(path="/w/api", label="api", description="work"),
        RepoItem(path="/h/api", label="api", description="home"),
        RepoItem(path="/w/web", label="web", description="work"),
    ]

    assert filter_repositories(repos, "api work") == [repos[0]]
    assert filter_repositories(repos, "work") == [repos[0], repos[2]]
    assert filter_repositories(repos, "apiwork") == []
    assert filter_repositories(repos, " ") == repos
