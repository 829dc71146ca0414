"""
postRepair command - deletes the backup directories left by repair.
"""

import argparse
import shutil

from ..output import quote, ERROR, INFO
from .base import BaseCommand


class PostRepairCommand(BaseCommand):
    """Removes every album's pre-repair backup directory in the filtered library"""

    USES_SEARCH_FLAGS = True

    @property
    def name(self) -> str:
        return "postRepair"

    def execute(self, options: argparse.Namespace) -> bool:
        settings = self.search_settings(options)
        self.log_start(options)
        library = self.load_library(settings)
        if library is None:
            return False
        albums = sorted(
            (album for album in library.albums() if album.backup_directory.is_dir()),
            key=lambda a: str(a.backup_directory)
        )
        if not albums:
            self.bus.write_console("There are no backup directories to delete")
            return True
        ok = True
        for album in albums:
            directory = album.backup_directory
            try:
                shutil.rmtree(directory)
            except OSError as e:
                ok = False
                self.bus.write_error(f"The directory {quote(str(directory))} cannot be deleted: {e}.")
                self.bus.log(ERROR, "cannot delete directory", {"directory": str(directory), "error": str(e)})
                continue
            self.bus.log(INFO, "backup directory deleted", {"directory": str(directory)})
            artist_name = album.artist.name if album.artist else ""
            self.bus.write_console(
                f"The backup directory for artist {quote(artist_name)} album {quote(album.name)} has been deleted"
            )
        return ok
