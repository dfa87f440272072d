from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

ViewMode = Literal["repos", "files"]
InputFocus = Literal["search", "list"]


@dataclass(frozen=True)
class RepoItem:
    path: str
    label: str
    description: str = ""


@dataclass
class TreeNode:
    name: str
    path: str
    is_dir: bool
    children: dict[str, TreeNode] = field(default_factory=dict)


@dataclass(frozen=True)
class FlatItem:
    path: str
    name: str
    is_dir: bool
    depth: int
    is_expanded: bool = False
    file_count: int | None = None
    label: str | None = None
    description: str | None = None
    is_sub_repo: bool = False


@dataclass(frozen=True)
class OpenFile:
    path: str


@dataclass(frozen=True)
class SelectRepository:
    path: str
    label: str


@dataclass(frozen=True)
class EnterSubRepository:
    path: str


@dataclass(frozen=True)
class NavigateBack:
    pass


Signal = Union[OpenFile, SelectRepository, EnterSubRepository, NavigateBack]


@dataclass(frozen=True)
class ViewInit:
    mode: ViewMode
    repositories: tuple[RepoItem, ...] = ()
    files: tuple[str, ...] = ()
    sub_repositories: tuple[str, ...] = ()
    repository_name: str = ""
    preselect_path: str | None = None
