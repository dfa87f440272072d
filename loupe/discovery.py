from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from loguru import logger

from loupe.models import RepoItem

DEFAULT_MAX_DEPTH = 5


async def _run_command(
    args: Sequence[str], *, cwd: str | None = None
) -> tuple[int, str] | None:
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as exc:
        logger.warning(
            "Command failed to start",
            operation="run_command",
            command=args[0],
            error=str(exc),
        )
        return None

    stdout, _ = await process.communicate()
    returncode = process.returncode if process.returncode is not None else -1
    return returncode, stdout.decode("utf-8", errors="replace")


def _output_lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


async def find_git_repositories(
    root: str, max_depth: int = DEFAULT_MAX_DEPTH
) -> list[str]:
    """Return directories below ``root`` holding a ``.git`` file or directory."""
    root = os.path.abspath(root)
    result = await _run_command(
        [
            "find",
            root,
            "-maxdepth",
            str(max_depth + 1),
            "-name",
            ".git",
            "(",
            "-type",
            "d",
            "-o",
            "-type",
            "f",
            ")",
            "-not",
            "-path",
            "*/node_modules/*",
        ]
    )
    if result is None:
        return []

    returncode, output = result
    if returncode != 0:
        # find exits non-zero on unreadable directories but still reports hits.
        logger.debug(
            "find exited with an error",
            operation="find_git_repositories",
            root=root,
            returncode=returncode,
        )
    return sorted(
        {os.path.dirname(os.path.normpath(line)) for line in _output_lines(output)}
    )


async def _git_lines(repo: str, *args: str) -> list[str]:
    result = await _run_command(["git", *args], cwd=repo)
    if result is None:
        return []
    returncode, output = result
    if returncode != 0:
        logger.warning(
            "git query failed",
            operation="list_repository_files",
            repo=repo,
            args=list(args),
            returncode=returncode,
        )
        return []
    return _output_lines(output)


async def list_repository_files(repo: str) -> list[str]:
    tracked, untracked = await asyncio.gather(
        _git_lines(repo, "ls-files"),
        _git_lines(repo, "ls-files", "--others", "--exclude-standard"),
    )
    # Nested repositories show up as untracked "name/" entries.
    files = {line.rstrip("/") for line in (*tracked, *untracked)}
    files.discard("")
    logger.debug(
        "Listed repository files",
        operation="list_repository_files",
        repo=repo,
        count=len(files),
    )
    return sorted(files)


def repository_label(root: str, repo: str) -> str:
    relative = os.path.relpath(repo, root)
    if relative == ".":
        return os.path.basename(repo)
    return Path(relative).as_posix()


async def scan_repositories(
    roots: Sequence[str],
    max_depth: int = DEFAULT_MAX_DEPTH,
    *,
    max_parallel: int = 8,
) -> list[RepoItem]:
    semaphore = asyncio.Semaphore(max_parallel)
    multiple_roots = len(roots) > 1

    async def scan(root: str) -> list[RepoItem]:
        async with semaphore:
            found = await find_git_repositories(root, max_depth)
        root_name = os.path.basename(os.path.normpath(root))
        return [
            RepoItem(
                path=repo,
                label=repository_label(root, repo),
                description=root_name if multiple_roots else "",
            )
            for repo in found
        ]

    scanned = await asyncio.gather(*(scan(os.path.abspath(root)) for root in roots))
    repos = [repo for per_root in scanned for repo in per_root]
    logger.info(
        "Scanned repositories",
        operation="scan_repositories",
        roots=list(roots),
        count=len(repos),
    )
    return sorted(repos, key=lambda repo: (repo.label, repo.description))


async def load_files_and_sub_repositories(
    repo: str, max_depth: int = DEFAULT_MAX_DEPTH
) -> tuple[list[str], list[str]]:
    repo = os.path.abspath(repo)
    files, nested = await asyncio.gather(
        list_repository_files(repo),
        find_git_repositories(repo, max_depth),
    )
    sub_repositories = [
        Path(os.path.relpath(candidate, repo)).as_posix()
        for candidate in nested
        if candidate != repo
    ]
    return files, sub_repositories


def find_repository_for_path(repos: Iterable[RepoItem], path: str) -> RepoItem | None:
    """Pick the most specific repository containing ``path``."""
    target = os.path.normpath(os.path.abspath(path))
    best: RepoItem | None = None
    for repo in repos:
        prefix = os.path.normpath(repo.path) + os.sep
        if not target.startswith(prefix):
            continue
        if best is None or len(repo.path) > len(best.path):
            best = repo
    return best
