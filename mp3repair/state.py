#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Persistent state: the "dirty" marker.

The marker is a sentinel file in the application directory. Its presence
means at least one track file has been edited since the media database was
last reset.
"""

from pathlib import Path
from typing import Optional

from .apppath import application_path
from .output import OutputBus, ERROR, INFO

DIRTY_FILE_NAME = "metadata.dirty"


class DirtyMarker:
    """Sentinel file recording that track metadata has been edited."""

    def __init__(self, state_path: Optional[Path] = None):
        self.state_path = Path(state_path) if state_path else application_path()

    @property
    def path(self) -> Path:
        return self.state_path / DIRTY_FILE_NAME

    def is_dirty(self) -> bool:
        return self.path.is_file()

    def mark_dirty(self, bus: OutputBus) -> bool:
        """Create the marker if absent. Returns False if it could not be written."""
        if self.path.exists():
            return True
        try:
            self.state_path.mkdir(parents=True, exist_ok=True)
            self.path.write_text("dirty", encoding='utf-8')
        except OSError as e:
            bus.write_error(f'The file "{self.path}" cannot be created: {e}')
            bus.log(ERROR, "cannot create file", {"fileName": str(self.path), "error": str(e)})
            return False
        bus.log(INFO, "metadata dirty file written", {"fileName": str(self.path)})
        return True

    def clear_dirty(self, bus: OutputBus) -> bool:
        """Delete the marker if present. A failed deletion is reported, not raised."""
        if not self.path.is_file():
            return True
        try:
            self.path.unlink()
        except OSError as e:
            bus.write_error(f'The file "{self.path}" cannot be deleted: {e}')
            bus.log(ERROR, "cannot delete file", {"fileName": str(self.path), "error": str(e)})
            return False
        bus.log(INFO, "metadata dirty file deleted", {"fileName": str(self.path)})
        return True

    def __repr__(self) -> str:
        return f"DirtyMarker(path={self.path})"
