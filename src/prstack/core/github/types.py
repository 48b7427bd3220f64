"""Type definitions for GitHub operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from prstack.core.types import Node

PRState = Literal["OPEN", "MERGED", "CLOSED"]


@dataclass(frozen=True)
class PullRequest:
    """A pull request as reported by `gh pr list/view --json`."""

    number: int
    title: str
    head_branch: str
    base_branch: str
    head_sha: str
    state: PRState
    is_draft: bool
    url: str
    updated_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.state == "OPEN"

    def to_node(self) -> Node:
        return Node(
            id=self.number,
            branch=self.head_branch,
            base=self.base_branch,
            head_commit=self.head_sha,
            title=self.title,
            is_draft=self.is_draft,
            updated_at=self.updated_at,
            url=self.url,
        )
