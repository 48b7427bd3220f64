"""Git gateway: abstract interface plus real, fake, dry-run and printing variants."""

from prstack.core.git.abc import CherryPickConflict, Git

__all__ = ["CherryPickConflict", "Git"]
