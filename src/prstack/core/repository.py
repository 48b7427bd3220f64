"""Resolve which GitHub repository a command targets."""

import logging
from pathlib import Path

from prstack.core.git.abc import Git
from prstack.core.github.parsing import parse_repository_from_remote_url

logger = logging.getLogger(__name__)

REPOSITORY_ENV_VAR = "PRSTACK_TARGET_REPOSITORY"


class RepositoryNotFoundError(Exception):
    def __init__(self, remote: str) -> None:
        self.remote = remote
        super().__init__(
            "Could not determine the target repository.\n"
            "  - Pass -r/--repository owner/name\n"
            f"  - Or set {REPOSITORY_ENV_VAR}\n"
            "  - Or set `repository` in ~/.prstack/config.toml\n"
            f"  - Or run inside a git checkout whose '{remote}' remote points at GitHub"
        )


def resolve_repository(
    *,
    flag: str | None,
    env_value: str | None,
    configured: str | None,
    git: Git,
    repo_root: Path | None,
    remote: str,
) -> str:
    """Pick the repository in priority order: flag, environment, config, remote URL.

    Raises:
        RepositoryNotFoundError: None of the sources yields owner/name
    """
    for source, value in (("flag", flag), ("environment", env_value), ("config", configured)):
        if value:
            logger.debug("Repository %s from %s", value, source)
            return value

    if repo_root is not None:
        url = git.get_remote_url(repo_root, remote)
        if url is not None:
            detected = parse_repository_from_remote_url(url)
            if detected is not None:
                logger.debug("Repository %s detected from remote %s", detected, remote)
                return detected

    raise RepositoryNotFoundError(remote)
