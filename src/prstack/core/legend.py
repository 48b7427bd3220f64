"""One-time display of the status legend.

The legend explaining the status bits is shown the first time `status` runs
and then only on request. A marker file in ~/.prstack records that it was seen.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from prstack.core.global_config import CONFIG_DIR_NAME

LEGEND_MARKER_NAME = "legend-seen"


class LegendTracker(ABC):
    @abstractmethod
    def should_show(self) -> bool:
        """True the first time it is asked; records that the legend was shown."""
        ...


class FilesystemLegendTracker(LegendTracker):
    def __init__(self, home: Path | None = None) -> None:
        self._home = home

    def marker_path(self) -> Path:
        home = self._home if self._home is not None else Path.home()
        return home / CONFIG_DIR_NAME / LEGEND_MARKER_NAME

    def should_show(self) -> bool:
        marker = self.marker_path()
        if marker.exists():
            return False
        try:
            marker.parent.mkdir(parents=True, exist_ok=True)
            marker.write_text("1", encoding="utf-8")
        except OSError:
            # Unwritable home: keep showing the legend
            pass
        return True


class InMemoryLegendTracker(LegendTracker):
    def __init__(self, seen: bool = False) -> None:
        self._seen = seen

    @property
    def seen(self) -> bool:
        return self._seen

    def should_show(self) -> bool:
        if self._seen:
            return False
        self._seen = True
        return True


def format_legend(use_unicode: bool) -> str:
    if use_unicode:
        symbols = "  ✓ pass  ✗ fail  ⏳ pending  ─ n/a"
    else:
        symbols = "  Y=pass  N=fail  ?=pending  -=n/a"
    return f"Status: [CI | Approved | Mergeable | Stack]\n{symbols}"
