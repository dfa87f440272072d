from __future__ import annotations

from collections.abc import Iterable

from loupe.models import RepoItem


def parse_tokens(query: str) -> list[str]:
    return query.lower().split()


def matches_tokens(haystack: str, tokens: Iterable[str]) -> bool:
    """AND-match tokens in order; each hit is cut out before the next token."""
    remaining = haystack.lower()
    for token in tokens:
        index = remaining.find(token)
        if index == -1:
            return False
        remaining = remaining[:index] + remaining[index + len(token) :]
    return True


def matches(haystack: str, query: str) -> bool:
    return matches_tokens(haystack, parse_tokens(query))


def filter_candidates(candidates: Iterable[str], query: str) -> list[str]:
    tokens = parse_tokens(query)
    if not tokens:
        return list(candidates)
    return [
        candidate for candidate in candidates if matches_tokens(candidate, tokens)
    ]


def repository_haystack(repo: RepoItem) -> str:
    return f"{repo.label} {repo.description}"


def filter_repositories(repos: Iterable[RepoItem], query: str) -> list[RepoItem]:
    tokens = parse_tokens(query)
    if not tokens:
        return list(repos)
    return [
        repo for repo in repos if matches_tokens(repository_haystack(repo), tokens)
    ]
