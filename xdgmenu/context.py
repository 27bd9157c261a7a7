"""Shared state of a menu being built."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["MenuContext", "REBUILD_DELAY_MS"]

REBUILD_DELAY_MS = 3000


@dataclass
class MenuContext:
    """State shared by the readers and processors that build one menu."""

    menu_file_name: str = ""
    environments: list[str] = field(default_factory=list)
    log_dir: str = ""
    error_string: str = ""
    outdated: bool = False
    watch_paths: list[str] = field(default_factory=list)

    def add_watch_path(self, path: str) -> bool:
        """Record *path* as watched for changes; return True if it is new."""
        if path in self.watch_paths:
            return False
        self.watch_paths.append(path)
        return True