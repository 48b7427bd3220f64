"""GitHub gateway: abstract interface plus real, fake, dry-run and printing variants."""

from prstack.core.github.abc import GitHub
from prstack.core.github.types import PullRequest

__all__ = ["GitHub", "PullRequest"]
